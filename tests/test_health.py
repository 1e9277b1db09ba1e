"""Tests for health endpoint."""

from unittest.mock import patch, AsyncMock


class TestHealthEndpoint:
    """Test cases for GET /api/health endpoint."""

    def test_health_success(self, client):
        """Test successful health check."""
        with patch("dashboard.services.health.check_redis_health", new_callable=AsyncMock) as mock_redis_health, \
                patch("dashboard.services.health.tool_available", return_value=True):
            mock_redis_health.return_value = (True, 2)

            response = client.get("/api/health")

            assert response.status_code == 200
            data = response.json()

            assert data["status"] == "healthy"
            assert data["components"]["redis"] == {"status": "operational", "latency_ms": 2}
            assert data["components"]["ffprobe"]["status"] == "available"
            assert {"api", "ffmpeg", "thehive", "openai"} <= set(data["components"])
            assert "version" in data

    def test_health_redis_unavailable(self, client):
        """Test health check when Redis is unavailable."""
        with patch("dashboard.services.health.check_redis_health", new_callable=AsyncMock) as mock_redis_health, \
                patch("dashboard.services.health.tool_available", return_value=True):
            mock_redis_health.return_value = (False, None)

            response = client.get("/api/health")

            assert response.status_code == 503
            data = response.json()

            assert data["status"] == "degraded"
            assert data["components"]["redis"]["status"] == "unavailable"

    def test_health_ffprobe_missing(self, client):
        """Video timelines need ffprobe, so its absence degrades the service."""
        with patch("dashboard.services.health.check_redis_health", new_callable=AsyncMock) as mock_redis_health, \
                patch("dashboard.services.health.tool_available", return_value=False):
            mock_redis_health.return_value = (True, 1)

            response = client.get("/api/health")

            assert response.status_code == 503
            assert response.json()["components"]["ffprobe"]["status"] == "missing"

    def test_providers_configured(self, client):
        with patch("dashboard.services.health.check_redis_health", new_callable=AsyncMock) as mock_redis_health, \
                patch("dashboard.services.health.tool_available", return_value=True), \
                patch("dashboard.config.settings.settings.thehive_api_key", "hive-key"), \
                patch("dashboard.config.settings.settings.openai_api_key", None):
            mock_redis_health.return_value = (True, 1)

            components = client.get("/api/health").json()["components"]

            assert components["thehive"]["status"] == "configured"
            assert components["openai"]["status"] == "not_configured"

    def test_health_error(self, client):
        with patch("dashboard.services.health.check_redis_health", new_callable=AsyncMock) as mock_redis_health:
            mock_redis_health.side_effect = RuntimeError("boom")

            response = client.get("/api/health")

            assert response.status_code == 503
            assert response.json()["status"] == "unhealthy"

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["health"] == "/api/health"
