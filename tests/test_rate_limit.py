"""Tests for rate limiting middleware."""

from unittest.mock import patch


class TestRateLimiting:
    """Test cases for rate limiting."""

    def test_rate_limit_not_exceeded(self, client, agent_headers, mock_redis):
        """Test request when rate limit is not exceeded."""
        mock_redis.zcard.return_value = 50

        response = client.get("/api/users/me", headers=agent_headers)

        assert response.status_code == 200
        mock_redis.zadd.assert_called()
        assert mock_redis.zadd.call_args.args[0] == "moddash:rate_limit:testclient"

    def test_rate_limit_exceeded(self, client, agent_headers, mock_redis):
        """Test request when rate limit is exceeded."""
        mock_redis.zcard.return_value = 500
        mock_redis.zrange.return_value = [("1234567890_abcd", 1234567890)]

        response = client.get("/api/users/me", headers=agent_headers)

        assert response.status_code == 429
        assert "Retry-After" in response.headers
        assert response.json()["detail"]["error"]["type"] == "rate_limit_exceeded"

    def test_health_is_exempt(self, client, mock_redis):
        mock_redis.zcard.return_value = 500

        response = client.get("/api/health")

        assert response.status_code != 429

    def test_rate_limit_disabled(self, client, agent_headers, mock_redis):
        """Test that rate limiting can be disabled."""
        mock_redis.zcard.return_value = 500

        with patch("dashboard.config.settings.settings.rate_limit_enabled", False):
            response = client.get("/api/users/me", headers=agent_headers)

        assert response.status_code == 200

    def test_redis_unavailable(self, client, agent_headers):
        """Requests go through unlimited when Redis is down."""
        with patch("dashboard.middleware.rate_limit.get_redis_client", return_value=None):
            response = client.get("/api/users/me", headers=agent_headers)

        assert response.status_code == 200

    def test_request_id_header(self, client):
        response = client.get("/")

        assert response.headers["X-Request-ID"].startswith("req_")
