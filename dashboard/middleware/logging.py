"""Structured request/response logging middleware."""

import logging
import json
import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from dashboard.utils.ids import generate_request_id

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """One JSON log line per request; static upload hits are logged at debug."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    def _log_data(self, request: Request, request_id: str, status_code: int, started: float) -> dict:
        return {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S.000Z", time.gmtime()),
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "processing_time_ms": int((time.perf_counter() - started) * 1000),
            "user_ip": request.client.host if request.client else "unknown",
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = generate_request_id()
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            log_data = self._log_data(request, request_id, 500, started)
            log_data["error"] = str(e)
            logger.error(json.dumps(log_data))
            raise

        log_data = json.dumps(self._log_data(request, request_id, response.status_code, started))
        if response.status_code >= 500:
            logger.error(log_data)
        elif response.status_code >= 400:
            logger.warning(log_data)
        elif request.url.path.startswith("/uploads"):
            logger.debug(log_data)
        else:
            logger.info(log_data)

        response.headers["X-Request-ID"] = request_id
        return response
