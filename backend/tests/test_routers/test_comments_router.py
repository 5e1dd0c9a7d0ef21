"""Integration tests for comment and report API endpoints."""

from datetime import datetime, timedelta, timezone

import pytest

from repositories.db_models import Ban


@pytest.fixture
def active_ban(db_session, test_user, moderator_user) -> Ban:
    ban = Ban(
        actor_id=test_user.id,
        issued_by=moderator_user.id,
        reason="Spam",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=3),
    )
    db_session.add(ban)
    db_session.commit()
    return ban


class TestCommentsRouter:
    """Test cases for /api/comments endpoints."""

    def test_post_and_list(self, client, test_title, auth_headers):
        response = client.post(
            "/api/comments",
            json={"title_id": test_title.id, "content": "Loved it"},
            headers=auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["success"] is True

        listed = client.get("/api/comments", params={"title_id": test_title.id})
        assert listed.status_code == 200
        assert [c["content"] for c in listed.json()] == ["Loved it"]

    def test_post_requires_auth(self, client, test_title):
        response = client.post(
            "/api/comments", json={"title_id": test_title.id, "content": "Hi"}
        )

        assert response.status_code == 401

    def test_sixth_comment_gets_429(self, client, test_title, auth_headers):
        for i in range(5):
            response = client.post(
                "/api/comments",
                json={"title_id": test_title.id, "content": f"Comment {i}"},
                headers=auth_headers,
            )
            assert response.status_code == 201

        response = client.post(
            "/api/comments",
            json={"title_id": test_title.id, "content": "One too many"},
            headers=auth_headers,
        )

        assert response.status_code == 429
        assert response.json()["detail"] == (
            "You are posting too quickly. Please wait a moment."
        )
        assert 1 <= int(response.headers["Retry-After"]) <= 60

    def test_banned_user_gets_403_with_expiry(
        self, client, active_ban, test_title, auth_headers
    ):
        response = client.post(
            "/api/comments",
            json={"title_id": test_title.id, "content": "Hi"},
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert "posting comments" in response.json()["detail"]
        assert response.json()["expires_at"] is not None

    def test_banned_user_with_incomplete_body_gets_403(
        self, client, active_ban, test_title, auth_headers
    ):
        response = client.post(
            "/api/comments", json={"title_id": test_title.id}, headers=auth_headers
        )

        assert response.status_code == 403
        assert "posting comments" in response.json()["detail"]
        assert response.json()["expires_at"] is not None

    def test_banned_user_react_with_bad_comment_id_gets_403(
        self, client, active_ban, auth_headers
    ):
        response = client.post(
            "/api/comments/react",
            json={"comment_id": "x", "reaction_type": "like"},
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert "reacting to comments" in response.json()["detail"]

    def test_missing_content_gets_400_with_correlation_id(
        self, client, test_title, auth_headers
    ):
        response = client.post(
            "/api/comments", json={"title_id": test_title.id}, headers=auth_headers
        )

        assert response.status_code == 400
        data = response.json()
        assert data["detail"].startswith("Invalid request: content:")
        assert data["correlation_id"]

    def test_empty_content_gets_400(self, client, test_title, auth_headers):
        response = client.post(
            "/api/comments",
            json={"title_id": test_title.id, "content": "  "},
            headers=auth_headers,
        )

        assert response.status_code == 400

    def test_unknown_title_gets_404(self, client, auth_headers):
        response = client.post(
            "/api/comments",
            json={"title_id": 9999, "content": "Hello"},
            headers=auth_headers,
        )

        assert response.status_code == 404

    def test_delete_others_comment_gets_403(
        self, client, test_comment, other_auth_headers
    ):
        response = client.delete(
            f"/api/comments/{test_comment.id}", headers=other_auth_headers
        )

        assert response.status_code == 403

    def test_react(self, client, test_comment, other_auth_headers):
        response = client.post(
            "/api/comments/react",
            json={"comment_id": test_comment.id, "reaction_type": "love"},
            headers=other_auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["action"] == "added"


class TestReportsRouter:
    """Test cases for /api/reports endpoints."""

    def test_report_comment(self, client, test_comment, other_auth_headers):
        response = client.post(
            "/api/reports",
            json={
                "content_type": "comment",
                "content_id": test_comment.id,
                "reason": "Spoilers",
            },
            headers=other_auth_headers,
        )

        assert response.status_code == 201
        assert response.json()["status"] == "pending"

        mine = client.get("/api/reports/mine", headers=other_auth_headers)
        assert len(mine.json()) == 1

    def test_duplicate_report_gets_409(self, client, test_comment, other_auth_headers):
        body = {"content_type": "comment", "content_id": test_comment.id, "reason": "x"}
        client.post("/api/reports", json=body, headers=other_auth_headers)

        response = client.post("/api/reports", json=body, headers=other_auth_headers)

        assert response.status_code == 409

    def test_invalid_content_type_gets_400(self, client, test_comment, other_auth_headers):
        response = client.post(
            "/api/reports",
            json={"content_type": "episode", "content_id": 1, "reason": "x"},
            headers=other_auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid content type"

    def test_non_numeric_content_id_gets_400(self, client, other_auth_headers):
        response = client.post(
            "/api/reports",
            json={"content_type": "comment", "content_id": "abc", "reason": "x"},
            headers=other_auth_headers,
        )

        assert response.status_code == 400
        assert "content_id" in response.json()["detail"]
        assert response.json()["correlation_id"]
