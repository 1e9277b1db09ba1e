"""Redis-based sliding-window rate limiting for the API."""

import logging
import time
import uuid
from typing import Callable
import redis
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from dashboard.api.errors import error_body
from dashboard.config.settings import settings
from dashboard.utils.redis_client import get_redis_client, make_key

logger = logging.getLogger(__name__)

# Paths that are never counted
EXEMPT_PREFIXES = ("/uploads", "/api/health")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Limits each client to ``rate_limit_requests`` API calls per window."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if (
            not settings.rate_limit_enabled
            or not path.startswith("/api")
            or path.startswith(EXEMPT_PREFIXES)
        ):
            return await call_next(request)

        redis_client = get_redis_client()

        # Without Redis requests go through unlimited
        if redis_client is None:
            logger.warning("[RATE LIMIT] Redis unavailable, skipping rate limit check")
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        rate_limit_key = make_key("rate_limit", client_ip)

        try:
            current_time = int(time.time())
            window_start = current_time - settings.rate_limit_window_seconds

            redis_client.zremrangebyscore(rate_limit_key, 0, window_start)
            request_count = redis_client.zcard(rate_limit_key)

            logger.debug(f"[RATE LIMIT] {client_ip}: {request_count}/{settings.rate_limit_requests}")

            if request_count >= settings.rate_limit_requests:
                oldest_request = redis_client.zrange(rate_limit_key, 0, 0, withscores=True)
                if oldest_request:
                    oldest_time = int(oldest_request[0][1])
                    retry_after = oldest_time + settings.rate_limit_window_seconds - current_time
                else:
                    retry_after = settings.rate_limit_window_seconds

                logger.warning(
                    f"[RATE LIMIT] Exceeded for {client_ip} on {path}. "
                    f"Count: {request_count}/{settings.rate_limit_requests}"
                )
                return JSONResponse(
                    status_code=429,
                    content={"detail": error_body("rate_limit_exceeded", "Too many requests, please try again later")},
                    headers={"Retry-After": str(max(1, retry_after))},
                )

            unique_id = f"{current_time}_{uuid.uuid4().hex[:8]}"
            redis_client.zadd(rate_limit_key, {unique_id: current_time})
            redis_client.expire(rate_limit_key, settings.rate_limit_window_seconds + 10)

        except redis.RedisError as e:
            logger.error(f"[RATE LIMIT] Redis error, request allowed: {e}")

        return await call_next(request)
