"""Translation of service-layer errors into HTTP responses."""

import logging
from typing import Dict, Type

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from dashboard.models.errors import ErrorResponse, ErrorResponseWrapper
from dashboard.services.exceptions import (
    AuthenticationError,
    ConflictError,
    DashboardError,
    InvalidRequestError,
    NotFoundError,
    PermissionDenied,
)
from dashboard.utils.ids import generate_error_request_id
from dashboard.utils.timing import get_current_timestamp_iso

logger = logging.getLogger(__name__)

STATUS_CODES: Dict[Type[DashboardError], int] = {
    InvalidRequestError: 400,
    ConflictError: 400,
    AuthenticationError: 401,
    PermissionDenied: 403,
    NotFoundError: 404,
}


def error_body(error_type: str, message: str) -> dict:
    """{"error": {...}} payload shared by every error response."""
    return ErrorResponseWrapper(
        error=ErrorResponse(
            type=error_type,
            message=message,
            request_id=generate_error_request_id(),
            timestamp=get_current_timestamp_iso(),
        )
    ).model_dump(exclude_none=True)


def http_error(status_code: int, error_type: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail=error_body(error_type, message))


def status_code_for(exc: DashboardError) -> int:
    for error_class in type(exc).__mro__:
        if error_class in STATUS_CODES:
            return STATUS_CODES[error_class]
    return 500


async def dashboard_error_handler(request: Request, exc: DashboardError) -> JSONResponse:
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}")
        message = "An unexpected error occurred"
    else:
        message = str(exc)

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": error_body(exc.error_type, message)},
        headers=headers,
    )
