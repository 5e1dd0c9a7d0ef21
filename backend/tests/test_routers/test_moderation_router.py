"""Integration tests for moderation, feature flag and creator admin endpoints."""

import pytest

from repositories.db_models import Ban, Report, ReportContentKind, ReportStatus
from services.feature_flag_service import ENABLE_CREATOR_POSTS


@pytest.fixture
def pending_report(db_session, test_comment, other_user) -> Report:
    report = Report(
        content_kind=ReportContentKind.COMMENT,
        content_id=test_comment.id,
        reporter_id=other_user.id,
        reason="Spoilers",
        status=ReportStatus.PENDING,
    )
    db_session.add(report)
    db_session.commit()
    db_session.refresh(report)
    return report


class TestModerationRouter:
    """Test cases for /api/admin/moderation endpoints."""

    def test_requires_moderator(self, client, auth_headers):
        response = client.get("/api/admin/moderation/reports", headers=auth_headers)

        assert response.status_code == 403

    def test_queue(self, client, pending_report, moderator_auth_headers):
        response = client.get(
            "/api/admin/moderation/reports", headers=moderator_auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["content_text"] == "That ending was wild."

    def test_hide_then_conflict(
        self, client, pending_report, test_title, moderator_auth_headers
    ):
        url = f"/api/admin/moderation/reports/{pending_report.id}/hide"

        first = client.post(url, headers=moderator_auth_headers)
        second = client.post(url, headers=moderator_auth_headers)

        assert first.status_code == 200
        assert first.json()["status"] == "actioned"
        assert second.status_code == 409

        listed = client.get("/api/comments", params={"title_id": test_title.id})
        assert listed.json() == []

    def test_ban_from_report(
        self, client, pending_report, test_user, test_title, moderator_auth_headers, auth_headers
    ):
        response = client.post(
            f"/api/admin/moderation/reports/{pending_report.id}/ban",
            json={"duration_hours": 48},
            headers=moderator_auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["report"]["status"] == "actioned"
        assert data["ban"]["actor_id"] == test_user.id

        blocked = client.post(
            "/api/comments",
            json={"title_id": test_title.id, "content": "Let me back"},
            headers=auth_headers,
        )
        assert blocked.status_code == 403

    def test_ban_without_duration_is_permanent(
        self, client, pending_report, test_user, moderator_auth_headers
    ):
        response = client.post(
            f"/api/admin/moderation/reports/{pending_report.id}/ban",
            json={},
            headers=moderator_auth_headers,
        )

        assert response.status_code == 200
        ban = response.json()["ban"]
        assert ban["actor_id"] == test_user.id
        assert ban["expires_at"] is None

    def test_dismiss(self, client, pending_report, moderator_auth_headers):
        response = client.post(
            f"/api/admin/moderation/reports/{pending_report.id}/dismiss",
            json={"notes": "Fine"},
            headers=moderator_auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["status"] == "dismissed"
        assert response.json()["resolution_notes"] == "Fine"

    def test_unknown_report(self, client, moderator_auth_headers):
        response = client.post(
            "/api/admin/moderation/reports/9999/dismiss", headers=moderator_auth_headers
        )

        assert response.status_code == 404

    def test_ban_list_and_lift(self, client, test_user, moderator_auth_headers):
        created = client.post(
            "/api/admin/moderation/bans",
            json={"user_id": test_user.id, "reason": "Spam"},
            headers=moderator_auth_headers,
        )
        assert created.status_code == 201
        ban_id = created.json()["id"]

        listed = client.get("/api/admin/moderation/bans", headers=moderator_auth_headers)
        assert listed.json()["total"] == 1

        lifted = client.put(
            f"/api/admin/moderation/bans/{ban_id}/lift", headers=moderator_auth_headers
        )
        assert lifted.status_code == 200
        assert lifted.json()["is_active"] is False

        again = client.put(
            f"/api/admin/moderation/bans/{ban_id}/lift", headers=moderator_auth_headers
        )
        assert again.status_code == 409


class TestFeatureFlagsRouter:
    """Test cases for feature flag endpoints."""

    def test_unknown_flag_reads_off(self, client):
        response = client.get("/api/feature-flags/ads_enabled")

        assert response.status_code == 200
        assert response.json() == {"name": "ads_enabled", "enabled": False}

    def test_toggle_flag_gates_creator_posts(
        self, client, approved_creator, auth_headers, moderator_auth_headers
    ):
        blocked = client.post(
            "/api/creator-posts", json={"content": "Hello"}, headers=auth_headers
        )
        assert blocked.status_code == 403

        updated = client.put(
            f"/api/admin/feature-flags/{ENABLE_CREATOR_POSTS}",
            json={"enabled": True},
            headers=moderator_auth_headers,
        )
        assert updated.status_code == 200

        created = client.post(
            "/api/creator-posts", json={"content": "Hello"}, headers=auth_headers
        )
        assert created.status_code == 201

    def test_disabled_creator_posts_checked_before_body(
        self, client, approved_creator, auth_headers
    ):
        response = client.post("/api/creator-posts", json={}, headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Creator posts are currently disabled"

    def test_banned_creator_with_empty_body_gets_403(
        self,
        client,
        db_session,
        approved_creator,
        test_user,
        moderator_user,
        set_flag,
        auth_headers,
    ):
        set_flag(ENABLE_CREATOR_POSTS)
        db_session.add(
            Ban(actor_id=test_user.id, issued_by=moderator_user.id, reason="Spam")
        )
        db_session.commit()

        response = client.post("/api/creator-posts", json={}, headers=auth_headers)

        assert response.status_code == 403
        assert "creating posts" in response.json()["detail"]

    def test_flag_update_requires_moderator(self, client, auth_headers):
        response = client.put(
            "/api/admin/feature-flags/ads_enabled",
            json={"enabled": True},
            headers=auth_headers,
        )

        assert response.status_code == 403


class TestCreatorAdminRouter:
    """Test cases for creator applications."""

    def test_apply_and_approve(
        self, client, other_user, other_auth_headers, moderator_auth_headers
    ):
        applied = client.post(
            "/api/creators/apply",
            json={"name": "Indie Films"},
            headers=other_auth_headers,
        )
        assert applied.status_code == 201

        queue = client.get(
            "/api/admin/creators",
            params={"creator_status": "pending"},
            headers=moderator_auth_headers,
        )
        assert queue.json()["total"] == 1

        reviewed = client.put(
            f"/api/admin/creators/{applied.json()['id']}/review",
            json={"status": "approved"},
            headers=moderator_auth_headers,
        )
        assert reviewed.status_code == 200

        me = client.get("/api/creators/me", headers=other_auth_headers)
        assert me.json()["status"] == "approved"
