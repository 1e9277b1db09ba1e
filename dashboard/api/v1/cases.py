"""Moderation case endpoints."""

import logging
from typing import List
from fastapi import APIRouter, Depends, status

from dashboard.api.dependencies import get_store, require_permission
from dashboard.config.roles import Permission
from dashboard.models.domain import Case, ContentItem, UserRecord
from dashboard.models.errors import ErrorResponseWrapper
from dashboard.models.requests import CaseCreate, DecisionRequest
from dashboard.services.exceptions import NotFoundError
from dashboard.services.permissions import check_permission
from dashboard.services.review import record_decision
from dashboard.services.store import MemoryStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cases", tags=["Cases"])

reviewer = require_permission(Permission.REVIEW_CONTENT)


def _require_content(db: MemoryStore, content_id: int) -> ContentItem:
    item = db.get_content(content_id)
    if item is None:
        raise NotFoundError("Content not found")
    return item


def _check_override(item: ContentItem, user: UserRecord) -> None:
    """Changing an item that already has a decision needs override rights."""
    if item.status != "pending":
        check_permission(user.role, Permission.OVERRIDE_DECISIONS)


@router.post(
    "",
    response_model=Case,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponseWrapper, "description": "Content not found"}},
    summary="Open or decide a case",
)
async def create_case(
    request: CaseCreate,
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> Case:
    """
    Open a case on an item for the caller, reusing their open case if any.

    With a decision the case is closed and the item released; without one the
    item is assigned to the caller.
    """
    item = _require_content(db, request.content_id)

    if request.decision:
        _check_override(item, user)
        return record_decision(db, item.id, user, request.decision, request.notes)

    case = db.find_open_case(item.id, user.id)
    if case is None:
        case = db.create_case(item.id, user.id, notes=request.notes)
    elif request.notes:
        case = db.update_case(case.id, notes=request.notes)
    db.update_content(item.id, assigned_to=user.id)
    return case


@router.patch(
    "/decision",
    response_model=Case,
    responses={404: {"model": ErrorResponseWrapper, "description": "Content not found"}},
    summary="Record a decision",
)
async def decide(
    request: DecisionRequest,
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> Case:
    item = _require_content(db, request.content_id)
    _check_override(item, user)
    return record_decision(db, item.id, user, request.decision, request.notes)


@router.get("", response_model=List[Case], summary="Caller's cases")
async def list_cases(
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> List[Case]:
    cases = [case for case in db.list_cases() if case.agent_id == user.id]
    return sorted(cases, key=lambda case: (case.created_at, case.id), reverse=True)
