"""GET /api/stats endpoint implementation."""

from fastapi import APIRouter, Depends

from dashboard.api.dependencies import get_store, require_permission
from dashboard.config.roles import Permission
from dashboard.models.domain import UserRecord
from dashboard.models.responses import QueueStats
from dashboard.services.stats import compute_queue_stats
from dashboard.services.store import MemoryStore

router = APIRouter(tags=["Reports"])


@router.get("/stats", response_model=QueueStats, summary="Queue statistics")
async def stats(
    user: UserRecord = Depends(require_permission(Permission.VIEW_REPORTS)),
    db: MemoryStore = Depends(get_store),
) -> QueueStats:
    return compute_queue_stats(db.list_content())
