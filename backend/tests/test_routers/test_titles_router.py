"""Integration tests for catalog, ad, playback and admin catalog endpoints."""

import pytest

from repositories.db_models import PlaybackEvent, TitleAdConfig
from services.feature_flag_service import ADS_ENABLED, TRACKING_ENABLED


@pytest.fixture
def title_ad(db_session, test_title) -> TitleAdConfig:
    config = TitleAdConfig(
        title_id=test_title.id,
        ads_enabled=True,
        ad_duration_seconds=12,
        ad_url="https://ads.test/spot.mp4",
    )
    db_session.add(config)
    db_session.commit()
    return config


class TestTitlesRouter:
    """Test cases for /api/titles endpoints."""

    def test_list_and_get(self, client, test_title):
        listed = client.get("/api/titles")
        single = client.get(f"/api/titles/{test_title.id}")

        assert listed.status_code == 200
        assert listed.json()["total"] == 1
        assert single.json()["title"] == "Night Train"

    def test_unknown_title(self, client):
        response = client.get("/api/titles/9999")

        assert response.status_code == 404

    def test_ad_follows_ads_flag(
        self, client, test_title, title_ad, moderator_auth_headers
    ):
        url = f"/api/titles/{test_title.id}/ad"

        off = client.get(url)
        assert off.status_code == 200
        assert off.json() == {"title_id": test_title.id, "ad": None}

        client.put(
            f"/api/admin/feature-flags/{ADS_ENABLED}",
            json={"enabled": True},
            headers=moderator_auth_headers,
        )

        on = client.get(url)
        assert on.json()["ad"] == {
            "ad_url": "https://ads.test/spot.mp4",
            "ad_duration_seconds": 12,
        }


class TestPlaybackRouter:
    """Test cases for /api/playback endpoints."""

    def test_events_follow_tracking_flag(
        self, client, db_session, test_title, moderator_auth_headers
    ):
        body = {"event_type": "play", "title_id": test_title.id, "session_id": "s-1"}

        off = client.post("/api/playback/events", json=body)
        assert off.status_code == 202
        assert off.json() == {"recorded": False}

        client.put(
            f"/api/admin/feature-flags/{TRACKING_ENABLED}",
            json={"enabled": True},
            headers=moderator_auth_headers,
        )

        on = client.post("/api/playback/events", json=body)
        assert on.json() == {"recorded": True}
        assert db_session.query(PlaybackEvent).count() == 1

    def test_signed_in_event_keeps_user(
        self, client, db_session, test_user, set_flag, auth_headers
    ):
        set_flag(TRACKING_ENABLED)

        client.post(
            "/api/playback/events",
            json={"event_type": "ad_impression", "ad_duration_seconds": 15},
            headers=auth_headers,
        )

        assert db_session.query(PlaybackEvent).one().user_id == test_user.id

    def test_unknown_event_type_gets_400(self, client):
        response = client.post("/api/playback/events", json={"event_type": "pause"})

        assert response.status_code == 400
        assert "event_type" in response.json()["detail"]

    def test_progress_round_trip(self, client, test_title, auth_headers):
        saved = client.put(
            "/api/playback/progress",
            json={"title_id": test_title.id, "position_seconds": 120},
            headers=auth_headers,
        )
        skipped = client.put(
            "/api/playback/progress",
            json={
                "title_id": test_title.id,
                "episode_id": 1,
                "position_seconds": 98,
                "duration_seconds": 100,
            },
            headers=auth_headers,
        )

        assert saved.json() == {"saved": True}
        assert skipped.json() == {"saved": False}

        resume = client.get(
            f"/api/playback/progress/{test_title.id}", headers=auth_headers
        )
        assert resume.json()["position_seconds"] == 120

        watching = client.get("/api/playback/progress", headers=auth_headers)
        assert [item["title"]["title"] for item in watching.json()] == ["Night Train"]

    def test_progress_requires_auth(self, client, test_title):
        response = client.put(
            "/api/playback/progress",
            json={"title_id": test_title.id, "position_seconds": 120},
        )

        assert response.status_code == 401


class TestAdminCatalogRouter:
    """Test cases for /api/admin titles, ads and analytics endpoints."""

    def test_requires_moderator(self, client, auth_headers):
        response = client.post(
            "/api/admin/titles", json={"title": "Nope"}, headers=auth_headers
        )

        assert response.status_code == 403

    def test_title_crud(self, client, moderator_auth_headers):
        created = client.post(
            "/api/admin/titles",
            json={"title": "Deep Water", "category": "originals", "runtime_seconds": 60},
            headers=moderator_auth_headers,
        )
        assert created.status_code == 201
        title_id = created.json()["id"]

        updated = client.put(
            f"/api/admin/titles/{title_id}",
            json={"category": "trending"},
            headers=moderator_auth_headers,
        )
        assert updated.json()["category"] == "trending"
        assert updated.json()["title"] == "Deep Water"

        deleted = client.delete(
            f"/api/admin/titles/{title_id}", headers=moderator_auth_headers
        )
        assert deleted.status_code == 204
        assert client.get(f"/api/titles/{title_id}").status_code == 404

    def test_delete_discussed_title_gets_409(
        self, client, test_comment, test_title, moderator_auth_headers
    ):
        response = client.delete(
            f"/api/admin/titles/{test_title.id}", headers=moderator_auth_headers
        )

        assert response.status_code == 409

    def test_ad_config(self, client, test_title, moderator_auth_headers):
        updated = client.put(
            f"/api/admin/ads/{test_title.id}",
            json={"ads_enabled": True, "ad_url": "https://ads.test/a.mp4"},
            headers=moderator_auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["ad_duration_seconds"] == 15

        listed = client.get("/api/admin/ads", headers=moderator_auth_headers)
        assert listed.json()[0]["ads_enabled"] is True

        too_long = client.put(
            f"/api/admin/ads/{test_title.id}",
            json={"ad_duration_seconds": 45},
            headers=moderator_auth_headers,
        )
        assert too_long.status_code == 400

    def test_analytics(self, client, set_flag, moderator_auth_headers):
        set_flag(TRACKING_ENABLED)
        client.post("/api/playback/events", json={"event_type": "play"})

        response = client.get("/api/admin/analytics", headers=moderator_auth_headers)

        assert response.status_code == 200
        assert response.json()["play_events"] == 1
        assert response.json()["tracking_enabled"] is True
