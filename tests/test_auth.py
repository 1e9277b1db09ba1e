"""Tests for session tokens and the auth endpoints."""

from datetime import timedelta

import jwt
import pytest
from unittest.mock import patch

from dashboard.config.settings import settings
from dashboard.services.auth import (
    claims_user_id,
    decode_token,
    hash_password,
    issue_token,
    revoke_session,
    verify_password,
)
from dashboard.services.exceptions import AuthenticationError
from dashboard.utils.timing import utc_now


class TestPasswordsAndTokens:
    """Test cases for the auth service."""

    def test_password_hashing(self):
        hashed = hash_password("hunter22")

        assert hashed != hash_password("hunter22")
        assert verify_password("hunter22", hashed)
        assert not verify_password("hunter23", hashed)
        assert not verify_password("hunter22", "not-a-hash")

    def test_token_round_trip(self):
        token, claims = issue_token(7)

        decoded = decode_token(token)

        assert claims_user_id(decoded) == 7
        assert decoded["sid"] == claims["sid"]

    def test_expired_token(self):
        now = utc_now()
        token = jwt.encode(
            {"sub": "1", "sid": "s", "iat": now - timedelta(days=2), "exp": now - timedelta(days=1)},
            settings.session_secret,
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationError, match="expired"):
            decode_token(token)

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "1", "sid": "s"}, "another-secret", algorithm="HS256")

        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_revoked_token(self, mock_redis):
        token, claims = issue_token(1)

        assert revoke_session(claims) is True
        key, ttl, _ = mock_redis.setex.call_args.args
        assert key == f"moddash:session:revoked:{claims['sid']}"
        assert 0 < ttl <= settings.session_ttl_seconds

        mock_redis.exists.return_value = 1
        with pytest.raises(AuthenticationError, match="logged out"):
            decode_token(token)

    def test_revoke_without_redis(self):
        _, claims = issue_token(1)

        with patch("dashboard.utils.redis_client.get_redis_client", return_value=None):
            assert revoke_session(claims) is False


class TestAuthEndpoints:
    """Test cases for /api/login, /api/logout and /api/users/me."""

    def test_login(self, client):
        response = client.post("/api/login", json={"username": "agent1", "password": "password"})

        assert response.status_code == 200
        data = response.json()
        assert data["user"]["username"] == "agent1"
        assert data["user"]["status"] == "online"
        assert "password_hash" not in data["user"]
        assert data["permissions"] == ["review_content"]
        assert settings.session_cookie_name in response.cookies

    def test_login_bad_password(self, client):
        response = client.post("/api/login", json={"username": "agent1", "password": "wrong-password"})

        assert response.status_code == 401
        assert response.json()["detail"]["error"]["type"] == "authentication_error"

    def test_login_validation(self, client):
        response = client.post("/api/login", json={"username": "agent1", "password": "123"})

        assert response.status_code == 422

    def test_me_requires_session(self, client):
        response = client.get("/api/users/me")

        assert response.status_code == 401

    def test_me_with_bearer_token(self, client, agent_headers):
        response = client.get("/api/users/me", headers=agent_headers)

        assert response.status_code == 200
        assert response.json()["name"] == "John Agent"

    def test_me_with_cookie(self, client):
        client.post("/api/login", json={"username": "admin", "password": "password"})

        response = client.get("/api/users/me")

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    def test_status_update(self, client, agent_headers):
        response = client.post("/api/users/status", json={"status": "busy"}, headers=agent_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "busy"

    def test_logout_revokes_session(self, client, agent_headers, mock_redis):
        response = client.post("/api/logout", headers=agent_headers)

        assert response.status_code == 200
        mock_redis.setex.assert_called()
        assert mock_redis.setex.call_args.args[0].startswith("moddash:session:revoked:")
