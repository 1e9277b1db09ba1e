"""Shared fixtures for pytest."""

import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from unittest.mock import Mock, patch

from dashboard.main import app
from dashboard.config.settings import settings
from dashboard.services import openai_moderation
from dashboard.services.store import store


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


@pytest.fixture
def mock_redis():
    """Mock Redis client."""
    mock = Mock()
    mock.ping.return_value = True
    mock.get.return_value = None
    mock.setex.return_value = True
    mock.exists.return_value = 0
    mock.zadd.return_value = 1
    mock.zcard.return_value = 0
    mock.zrange.return_value = []
    mock.zremrangebyscore.return_value = 0
    mock.expire.return_value = True
    return mock


@pytest.fixture(autouse=True)
def mock_redis_for_tests(mock_redis):
    """Automatically mock Redis for all tests."""
    with patch("dashboard.utils.redis_client.get_redis_client", return_value=mock_redis), \
            patch("dashboard.middleware.rate_limit.get_redis_client", return_value=mock_redis):
        yield mock_redis


@pytest.fixture(autouse=True)
def reset_state():
    """Fresh seeded store and no cached OpenAI client for every test."""
    store.reset()
    openai_moderation.reset_openai_client()
    yield
    openai_moderation.reset_openai_client()


@pytest.fixture
def upload_dir(tmp_path):
    """Point uploads (and thumbnails) at a temporary directory."""
    with patch.object(settings, "upload_dir", str(tmp_path)):
        yield tmp_path


@pytest.fixture
def login(client):
    """Log in as a seeded user and return Bearer auth headers."""

    def _login(username: str = "agent1", password: str = "password") -> dict:
        response = client.post("/api/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _login


@pytest.fixture
def agent_headers(login):
    return login("agent1")


@pytest.fixture
def admin_headers(login):
    return login("admin")


@pytest.fixture
def png_bytes():
    """A small valid PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (16, 16), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def hive_video_timeline():
    """TheHive video response with an explicit per-frame timeline."""
    return {
        "status": [
            {
                "response": {
                    "output": [
                        {"classes": [
                            {"class": "yes_violence", "score": 0.3},
                            {"class": "no_violence", "score": 0.7},
                        ]},
                    ],
                    "timeline": [
                        {"time": 0, "classes": [{"class": "yes_violence", "score": 0.2}]},
                        {"time": 4.004, "classes": [{"class": "yes_violence", "score": 0.9}]},
                        {"time": 4.001, "classes": [{"class": "yes_sexual_activity", "score": 0.5}]},
                        {"time": 30, "classes": [{"class": "yes_violence", "score": 0.99}]},
                    ],
                }
            }
        ]
    }
