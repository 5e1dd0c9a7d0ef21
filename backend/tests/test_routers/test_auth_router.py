"""Integration tests for auth API endpoints."""

from repositories.db_models import Ban, BanScope


def _login(client, email: str, password: str):
    return client.post("/api/auth/login", data={"username": email, "password": password})


class TestAuthRouter:
    """Test cases for /api/auth endpoints."""

    def test_login_success(self, client, test_user):
        response = _login(client, "test@example.com", "testpassword123")

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]

    def test_login_wrong_password(self, client, test_user):
        response = _login(client, "test@example.com", "wrong")

        assert response.status_code == 401
        assert response.json()["detail"] == "Incorrect email or password"
        assert "correlation_id" in response.json()

    def test_lockout_after_five_failures(self, client, test_user):
        for _ in range(5):
            assert _login(client, "test@example.com", "wrong").status_code == 401

        response = _login(client, "test@example.com", "testpassword123")

        assert response.status_code == 429
        assert "minutes" in response.json()["detail"]
        assert int(response.headers["Retry-After"]) > 0

    def test_lockout_is_per_email(self, client, test_user, other_user):
        for _ in range(5):
            _login(client, "TEST@example.com", "wrong")

        response = _login(client, "other@example.com", "otherpassword123")

        assert response.status_code == 200

    def test_rate_limit_check(self, client, test_user):
        response = client.post(
            "/api/auth/rate-limit", json={"identifier": "test@example.com"}
        )

        assert response.status_code == 200
        assert response.json()["within_limit"] is True

        for _ in range(5):
            _login(client, "test@example.com", "wrong")

        response = client.post(
            "/api/auth/rate-limit", json={"identifier": "Test@Example.com"}
        )

        data = response.json()
        assert data["within_limit"] is False
        assert data["retry_after"] > 0
        assert data["message"].startswith("Too many attempts")

    def test_me(self, client, test_user, auth_headers):
        response = client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["email"] == "test@example.com"

    def test_me_without_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_full_ban_blocks_authenticated_requests(
        self, client, db_session, test_user, moderator_user, auth_headers
    ):
        db_session.add(
            Ban(
                actor_id=test_user.id,
                issued_by=moderator_user.id,
                reason="Fraud",
                scope=BanScope.FULL,
            )
        )
        db_session.commit()

        response = client.get("/api/auth/me", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["expires_at"] is None

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}
        assert "X-Correlation-ID" in response.headers
