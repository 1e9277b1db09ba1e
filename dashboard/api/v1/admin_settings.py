"""Dashboard settings endpoints."""

import logging
from fastapi import APIRouter, Depends

from dashboard.api.dependencies import get_current_user, get_store, require_permission
from dashboard.config.roles import Permission
from dashboard.models.domain import UserRecord
from dashboard.models.requests import ModerationSettings
from dashboard.services.moderation import moderation_service
from dashboard.services.store import MemoryStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/moderation", response_model=ModerationSettings, summary="Active moderation provider")
async def get_moderation_settings(user: UserRecord = Depends(get_current_user)) -> ModerationSettings:
    return ModerationSettings(moderation_service=moderation_service.get_active_service())


@router.put("/moderation", response_model=ModerationSettings, summary="Switch moderation provider")
async def update_moderation_settings(
    request: ModerationSettings,
    user: UserRecord = Depends(require_permission(Permission.MANAGE_SETTINGS)),
    db: MemoryStore = Depends(get_store),
) -> ModerationSettings:
    db.set_setting("moderation_service", request.moderation_service)
    logger.info(f"Moderation provider set to {request.moderation_service} by {user.username}")
    return request
