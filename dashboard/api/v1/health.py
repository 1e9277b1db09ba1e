"""GET /api/health endpoint implementation."""

import logging
from fastapi import APIRouter, Response as FastAPIResponse

from dashboard.models.responses import ComponentStatus, HealthResponse
from dashboard.services.health import check_health, get_uptime_seconds
from dashboard.config.settings import settings
from dashboard.utils.timing import get_current_timestamp_iso

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    response_model_exclude_none=True,
    responses={
        200: {"description": "All systems operational"},
        503: {"description": "Redis or the media tools are unavailable"},
    },
    summary="Health check",
    description="Report the dashboard's dependencies: Redis, ffmpeg/ffprobe and classifier providers",
    tags=["Health"],
)
async def health(response: FastAPIResponse) -> HealthResponse:
    """
    Health check endpoint.

    Sets:
        response.status_code: 200 for healthy, 503 for degraded
    """
    try:
        overall_status, components = await check_health()
    except Exception as e:
        logger.error(f"Error in health endpoint: {e}")
        response.status_code = 503
        return HealthResponse(
            status="unhealthy",
            timestamp=get_current_timestamp_iso(),
            uptime_seconds=round(get_uptime_seconds(), 2),
            components={"api": ComponentStatus(status="error")},
            version=settings.api_version,
        )

    if overall_status == "degraded":
        response.status_code = 503

    return HealthResponse(
        status=overall_status,
        timestamp=get_current_timestamp_iso(),
        uptime_seconds=round(get_uptime_seconds(), 2),
        components=components,
        version=settings.api_version,
    )
