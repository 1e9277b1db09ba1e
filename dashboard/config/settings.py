"""Application settings and configuration management."""

from pathlib import Path
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    env: str = Field(default="development", alias="ENV")
    api_version: str = Field(default="1.0.0", alias="API_VERSION")
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=5000, alias="API_PORT")
    log_level: str = Field(default="DEBUG", alias="LOG_LEVEL")

    # Sessions
    session_secret: str = Field(default="change-me-in-production", alias="SESSION_SECRET")
    session_ttl_seconds: int = Field(default=86400, alias="SESSION_TTL_SECONDS")
    session_cookie_name: str = Field(default="session", alias="SESSION_COOKIE_NAME")

    # Moderation providers
    moderation_service: str = Field(default="openai", alias="MODERATION_SERVICE")
    thehive_url: str = Field(
        default="https://api.thehive.ai/api/v2/task/sync",
        alias="THEHIVE_URL",
    )
    thehive_text_api_key: Optional[str] = Field(default=None, alias="THEHIVE_TEXT_API_KEY")
    thehive_api_key: Optional[str] = Field(default=None, alias="THEHIVE_API_KEY")
    thehive_timeout_seconds: int = Field(default=120, alias="THEHIVE_TIMEOUT_SECONDS")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_analysis_model: str = Field(default="gpt-4o", alias="OPENAI_ANALYSIS_MODEL")

    # Uploads and media tools
    upload_dir: str = Field(default="./uploads", alias="UPLOAD_DIR")
    max_upload_size_mb: int = Field(default=50, alias="MAX_UPLOAD_SIZE_MB")
    image_max_dimension: int = Field(default=8192, alias="IMAGE_MAX_DIMENSION")
    thumbnail_width: int = Field(default=320, alias="THUMBNAIL_WIDTH")
    thumbnail_height: int = Field(default=240, alias="THUMBNAIL_HEIGHT")
    ffmpeg_path: str = Field(default="ffmpeg", alias="FFMPEG_PATH")
    ffprobe_path: str = Field(default="ffprobe", alias="FFPROBE_PATH")
    media_tool_timeout_seconds: int = Field(default=60, alias="MEDIA_TOOL_TIMEOUT_SECONDS")

    # Redis Configuration
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_db: int = Field(default=0, alias="REDIS_DB")
    redis_password: Optional[str] = Field(default=None, alias="REDIS_PASSWORD")
    redis_max_connections: int = Field(default=50, alias="REDIS_MAX_CONNECTIONS")
    redis_socket_timeout: int = Field(default=5, alias="REDIS_SOCKET_TIMEOUT")
    redis_socket_connect_timeout: int = Field(default=5, alias="REDIS_SOCKET_CONNECT_TIMEOUT")
    redis_retry_on_timeout: bool = Field(default=True, alias="REDIS_RETRY_ON_TIMEOUT")

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    rate_limit_requests: int = Field(default=300, alias="RATE_LIMIT_REQUESTS")
    rate_limit_window_seconds: int = Field(default=60, alias="RATE_LIMIT_WINDOW_SECONDS")

    # Classifier response caching
    cache_enabled: bool = Field(default=True, alias="CACHE_ENABLED")
    cache_ttl_seconds: int = Field(default=3600, alias="CACHE_TTL_SECONDS")

    # Score thresholds
    threshold_reject: float = Field(default=0.8, alias="THRESHOLD_REJECT")
    threshold_flag: float = Field(default=0.4, alias="THRESHOLD_FLAG")
    threshold_region: float = Field(default=0.2, alias="THRESHOLD_REGION")
    threshold_warning: float = Field(default=0.01, alias="THRESHOLD_WARNING")
    openai_score_floor: float = Field(default=0.01, alias="OPENAI_SCORE_FLOOR")
    media_score_floor: float = Field(default=0.001, alias="MEDIA_SCORE_FLOOR")

    # Timeline sampling when the classifier returns no per-frame data
    timeline_max_interval_seconds: float = Field(default=5.0, alias="TIMELINE_MAX_INTERVAL_SECONDS")
    timeline_sample_count: int = Field(default=10, alias="TIMELINE_SAMPLE_COUNT")

    # CORS
    cors_origins: str = Field(default='["http://localhost:5173"]', alias="CORS_ORIGINS")

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from JSON string."""
        try:
            return json.loads(self.cors_origins)
        except json.JSONDecodeError:
            return ["http://localhost:5173"]

    @property
    def upload_path(self) -> Path:
        return Path(self.upload_dir).resolve()

    @property
    def thumbnail_path(self) -> Path:
        return self.upload_path / "thumbnails"

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
