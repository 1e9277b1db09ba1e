"""Redis connection management and small key/value helpers."""

import json
import logging
import time
from typing import Any, Optional
import redis
from redis.connection import ConnectionPool

from dashboard.config.settings import settings

logger = logging.getLogger(__name__)

# Global connection pool
_redis_pool: Optional[ConnectionPool] = None
_redis_client: Optional[redis.Redis] = None
_redis_available: bool = False

KEY_PREFIX = "moddash"


def init_redis_pool() -> None:
    """
    Initialize Redis connection pool.

    This should be called on application startup.
    """
    global _redis_pool, _redis_client, _redis_available

    try:
        _redis_pool = ConnectionPool(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password,
            max_connections=settings.redis_max_connections,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_connect_timeout,
            retry_on_timeout=settings.redis_retry_on_timeout,
            decode_responses=True,
        )

        _redis_client = redis.Redis(connection_pool=_redis_pool)

        # Test connection
        _redis_client.ping()
        _redis_available = True
        logger.info("[REDIS] Connection pool initialized successfully")

    except redis.RedisError as e:
        logger.warning(f"Failed to initialize Redis: {e}. Running in degraded mode.")
        _redis_available = False


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get Redis client instance.

    Returns:
        Optional[redis.Redis]: Redis client or None if unavailable
    """
    if not _redis_available or _redis_client is None:
        return None
    return _redis_client


def close_redis_pool() -> None:
    """
    Close Redis connection pool.

    This should be called on application shutdown.
    """
    global _redis_pool, _redis_client, _redis_available

    if _redis_pool is not None:
        _redis_pool.disconnect()
        logger.info("[REDIS] Connection pool closed")

    _redis_pool = None
    _redis_client = None
    _redis_available = False


def make_key(*parts: Any) -> str:
    """Namespace a Redis key, e.g. make_key("cache", "hive", "ab12") -> 'moddash:cache:hive:ab12'."""
    return ":".join([KEY_PREFIX, *(str(p) for p in parts)])


def get_json(key: str) -> Optional[Any]:
    """
    Read a JSON value.

    Returns None when the key is missing, Redis is unavailable or the stored
    value cannot be decoded.
    """
    client = get_redis_client()
    if client is None:
        return None

    try:
        raw = client.get(key)
    except redis.RedisError as e:
        logger.error(f"[REDIS] GET {key} failed: {e}")
        return None

    if not raw:
        return None

    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        logger.warning(f"[REDIS] Discarding undecodable value at {key}")
        return None


def set_json(key: str, value: Any, ttl_seconds: int) -> bool:
    """Store a JSON value with a TTL. Returns False if it could not be stored."""
    client = get_redis_client()
    if client is None:
        return False

    try:
        client.setex(key, ttl_seconds, json.dumps(value))
        return True
    except (redis.RedisError, TypeError) as e:
        logger.error(f"[REDIS] SETEX {key} failed: {e}")
        return False


def set_flag(key: str, ttl_seconds: int) -> bool:
    client = get_redis_client()
    if client is None:
        return False

    try:
        client.setex(key, max(1, ttl_seconds), "1")
        return True
    except redis.RedisError as e:
        logger.error(f"[REDIS] SETEX {key} failed: {e}")
        return False


def has_flag(key: str) -> bool:
    client = get_redis_client()
    if client is None:
        return False

    try:
        return bool(client.exists(key))
    except redis.RedisError as e:
        logger.error(f"[REDIS] EXISTS {key} failed: {e}")
        return False


async def check_redis_health() -> tuple[bool, Optional[int]]:
    """
    Check Redis health and measure latency.

    Returns:
        tuple[bool, Optional[int]]: (is_healthy, latency_ms)
    """
    client = get_redis_client()
    if client is None:
        return False, None

    try:
        start = time.perf_counter()
        client.ping()
        end = time.perf_counter()
        latency_ms = int((end - start) * 1000)
        return True, latency_ms
    except redis.RedisError as e:
        logger.error(f"[REDIS] Health check failed: {e}")
        return False, None
