"""Health check service."""

import logging
import time
from typing import Dict

from dashboard.config.settings import settings
from dashboard.utils.redis_client import check_redis_health
from dashboard.services.media import tool_available
from dashboard.models.responses import ComponentStatus

logger = logging.getLogger(__name__)

# Track application start time
_start_time = time.time()


def get_uptime_seconds() -> float:
    """
    Get application uptime in seconds.

    Returns:
        float: Uptime in seconds
    """
    return time.time() - _start_time


async def check_health() -> tuple[str, Dict[str, ComponentStatus]]:
    """
    Check health of all components.

    Returns:
        tuple: (overall_status, component_statuses)
            - overall_status: "healthy" or "degraded"
            - component_statuses: Dict of component statuses
    """
    components = {}

    # Check API (always operational if we get here)
    components["api"] = ComponentStatus(status="operational")

    # Check Redis
    redis_healthy, redis_latency = await check_redis_health()
    if redis_healthy:
        components["redis"] = ComponentStatus(
            status="operational", latency_ms=redis_latency
        )
    else:
        components["redis"] = ComponentStatus(status="unavailable")

    # Media tools used for video timelines
    ffprobe_ok = tool_available(settings.ffprobe_path)
    for name, binary, available in (
        ("ffprobe", settings.ffprobe_path, ffprobe_ok),
        ("ffmpeg", settings.ffmpeg_path, tool_available(settings.ffmpeg_path)),
    ):
        components[name] = ComponentStatus(
            status="available" if available else "missing", name=binary
        )

    # Classifier providers
    components["thehive"] = ComponentStatus(
        status="configured" if settings.thehive_api_key else "not_configured"
    )
    components["openai"] = ComponentStatus(
        status="configured" if settings.openai_api_key else "not_configured"
    )

    # Determine overall status
    overall_status = "healthy"
    if not redis_healthy:
        overall_status = "degraded"
        logger.warning("Health check: Redis unavailable, running in degraded mode")
    if not ffprobe_ok:
        overall_status = "degraded"
        logger.warning("Health check: ffprobe missing, video timelines unavailable")

    return overall_status, components
