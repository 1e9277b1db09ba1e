"""User and team administration endpoints."""

import logging
from typing import List
from fastapi import APIRouter, Depends, status

from dashboard.api.dependencies import get_current_user, get_store, parse_id, require_permission
from dashboard.config.roles import Permission
from dashboard.models.domain import Team, UserPublic, UserRecord
from dashboard.models.requests import TeamCreate, UserCreate, UserUpdate
from dashboard.models.responses import MessageResponse
from dashboard.services.exceptions import (
    InvalidRequestError,
    NotFoundError,
    PermissionDenied,
)
from dashboard.services.permissions import can_manage_role
from dashboard.services.store import MemoryStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])

user_manager = require_permission(Permission.MANAGE_USERS)


def _check_role(manager: UserRecord, role) -> None:
    if not can_manage_role(manager.role, role):
        raise PermissionDenied(f"Cannot manage users with role {role.value}")


def _require_user(db: MemoryStore, user_id: int) -> UserRecord:
    user = db.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@router.get("/users", response_model=List[UserPublic], summary="List users")
async def list_users(
    manager: UserRecord = Depends(user_manager),
    db: MemoryStore = Depends(get_store),
) -> List[UserPublic]:
    return [user.public() for user in db.list_users()]


@router.post(
    "/users",
    response_model=UserPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(
    request: UserCreate,
    manager: UserRecord = Depends(user_manager),
    db: MemoryStore = Depends(get_store),
) -> UserPublic:
    _check_role(manager, request.role)
    if db.get_user_by_username(request.username) is not None:
        raise InvalidRequestError(f"Username {request.username} is already taken")
    if request.team_id is not None and db.get_team(request.team_id) is None:
        raise NotFoundError("Team not found")

    user = db.create_user(**request.model_dump())
    logger.info(f"User {user.username} ({user.role.value}) created by {manager.username}")
    return user.public()


@router.patch("/users/{user_id}", response_model=UserPublic, summary="Update a user")
async def update_user(
    user_id: str,
    update: UserUpdate,
    manager: UserRecord = Depends(user_manager),
    db: MemoryStore = Depends(get_store),
) -> UserPublic:
    target = _require_user(db, parse_id(user_id, "user"))
    if target.id != manager.id:
        _check_role(manager, target.role)
    changes = update.model_dump(exclude_unset=True)
    if changes.get("role") is not None:
        _check_role(manager, changes["role"])
    if changes.get("team_id") is not None and db.get_team(changes["team_id"]) is None:
        raise NotFoundError("Team not found")
    return db.update_user(target.id, **changes).public()


@router.delete("/users/{user_id}", response_model=MessageResponse, summary="Delete a user")
async def delete_user(
    user_id: str,
    manager: UserRecord = Depends(user_manager),
    db: MemoryStore = Depends(get_store),
) -> MessageResponse:
    target = _require_user(db, parse_id(user_id, "user"))
    if target.id == manager.id:
        raise InvalidRequestError("You cannot delete your own account")
    _check_role(manager, target.role)
    db.delete_user(target.id)
    logger.info(f"User {target.username} deleted by {manager.username}")
    return MessageResponse(message="User deleted successfully")


@router.get("/teams", response_model=List[Team], summary="List teams", tags=["Teams"])
async def list_teams(
    user: UserRecord = Depends(get_current_user),
    db: MemoryStore = Depends(get_store),
) -> List[Team]:
    return db.list_teams()


@router.post(
    "/teams",
    response_model=Team,
    status_code=status.HTTP_201_CREATED,
    summary="Create a team",
    tags=["Teams"],
)
async def create_team(
    request: TeamCreate,
    manager: UserRecord = Depends(user_manager),
    db: MemoryStore = Depends(get_store),
) -> Team:
    if request.manager_id is not None and db.get_user(request.manager_id) is None:
        raise NotFoundError("Manager not found")
    return db.create_team(request.name, request.description, request.manager_id)
