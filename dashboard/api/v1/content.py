"""Content queue endpoints."""

import logging
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import ValidationError

from dashboard.api.dependencies import get_store, parse_id, require_permission
from dashboard.api.errors import http_error
from dashboard.config.roles import Permission
from dashboard.config.settings import settings
from dashboard.models.domain import UserRecord
from dashboard.models.errors import ErrorResponseWrapper
from dashboard.models.requests import (
    BulkDeleteRequest,
    ContentCreate,
    ContentQuery,
    ContentUpdate,
    FeedbackRequest,
)
from dashboard.models.responses import (
    BulkDeleteResponse,
    ContentItemDetail,
    ContentPage,
    MessageResponse,
)
from dashboard.services.content_query import query_content
from dashboard.services.exceptions import ConflictError, InvalidRequestError, NotFoundError
from dashboard.services.media import validate_image
from dashboard.services.moderation import moderation_service
from dashboard.services.permissions import check_permission
from dashboard.services.review import (
    attach_analysis,
    claim_item,
    delete_item,
    save_upload,
)
from dashboard.services.store import MemoryStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/content", tags=["Content"])

reviewer = require_permission(Permission.REVIEW_CONTENT)

UPLOAD_CHUNK_SIZE = 1024 * 1024

ERROR_RESPONSES = {
    400: {"model": ErrorResponseWrapper, "description": "Invalid request"},
    401: {"model": ErrorResponseWrapper, "description": "Not logged in"},
    404: {"model": ErrorResponseWrapper, "description": "Content not found"},
}


def content_query(
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    warning_types: Optional[List[str]] = Query(None),
    search: Optional[str] = Query(None),
    assigned_to: Optional[int] = Query(None),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc"),
    page: int = Query(1),
    page_size: int = Query(10),
) -> ContentQuery:
    try:
        return ContentQuery(
            type=type,
            status=status,
            date_from=date_from,
            date_to=date_to,
            warning_types=warning_types,
            search=search,
            assigned_to=assigned_to,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            page_size=page_size,
        )
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid content query: {e.errors()[0]['msg']}") from e


def upload_type(mimetype: str) -> Optional[str]:
    """Content type for an upload's mimetype; None if it is not accepted."""
    if mimetype.startswith("image/"):
        return "image"
    if mimetype.startswith("video/"):
        return "video"
    if mimetype == "text/plain":
        return "text"
    return None


async def read_limited(file: UploadFile, limit: int) -> bytes:
    """Read an upload, refusing anything over ``limit`` bytes."""
    chunks = []
    size = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > limit:
            raise http_error(
                status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                "validation_error",
                f"File exceeds the {settings.max_upload_size_mb}MB upload limit",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.get("", response_model=ContentPage, summary="List content")
async def list_content(
    query: ContentQuery = Depends(content_query),
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> ContentPage:
    items, total, pages = query_content(db.list_content(), query)
    return ContentPage(
        items=[db.with_assigned_user(item) for item in items],
        total=total,
        page=query.page,
        page_size=query.page_size,
        pages=pages,
    )


@router.get("/next", response_model=ContentItemDetail, responses=ERROR_RESPONSES, summary="Next item in the queue")
async def next_content(
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> ContentItemDetail:
    """Highest-priority pending item; analysed on the way out if it never was."""
    item = db.get_next_content_item()
    if item is None:
        raise NotFoundError("No content available for moderation")
    if item.metadata.ai_analysis is None and item.type == "text":
        item = await attach_analysis(db, item)
    return db.with_assigned_user(item)


@router.post("/bulk-delete", response_model=BulkDeleteResponse, summary="Delete several items")
async def bulk_delete(
    request: BulkDeleteRequest,
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> BulkDeleteResponse:
    result = BulkDeleteResponse()
    for content_id in dict.fromkeys(request.ids):
        try:
            delete_item(db, content_id, user)
        except (NotFoundError, ConflictError) as e:
            result.skipped[str(content_id)] = str(e)
        else:
            result.deleted.append(content_id)
    return result


@router.post(
    "/upload",
    response_model=ContentItemDetail,
    status_code=status.HTTP_201_CREATED,
    responses={**ERROR_RESPONSES, 413: {"model": ErrorResponseWrapper, "description": "File too large"}},
    summary="Upload a file for moderation",
)
async def upload_content(
    file: UploadFile = File(...),
    type: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    priority: int = Form(1, ge=1, le=5),
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> ContentItemDetail:
    """
    Store an uploaded image, video or text file and run it through moderation.

    Videos come back with their moderation timeline.
    """
    mimetype = file.content_type or ""
    detected = upload_type(mimetype)
    if detected is None:
        raise http_error(400, "validation_error", f"Unsupported file type: {mimetype or 'unknown'}")
    if type is not None and type != detected:
        raise http_error(400, "validation_error", f"File type {mimetype} does not match content type {type}")

    data = await read_limited(file, settings.max_upload_size_bytes)
    if not data:
        raise http_error(400, "validation_error", "Uploaded file is empty")

    original_name = file.filename or "upload"
    display_name = name or original_name

    if detected == "text":
        try:
            body = data.decode("utf-8")
        except UnicodeDecodeError:
            raise http_error(400, "validation_error", "Text files must be UTF-8")
        item = db.create_content(body, "text", priority=priority, name=display_name)
    else:
        if detected == "image":
            try:
                validate_image(data)
            except ValueError as e:
                raise http_error(400, "validation_error", str(e))
        url = await save_upload(data, original_name)
        item = db.create_content(
            url,
            detected,
            priority=priority,
            name=display_name,
            original_metadata={"filename": original_name, "mimetype": mimetype, "size": len(data)},
        )

    logger.info(f"Upload {original_name} ({detected}, {len(data)} bytes) stored as content {item.id}")
    item = await moderation_service.moderate_and_store(item)
    if item.type == "text":
        item = await attach_analysis(db, item)
    return db.with_assigned_user(item)


@router.post(
    "",
    response_model=ContentItemDetail,
    status_code=status.HTTP_201_CREATED,
    summary="Submit content for moderation",
)
async def create_content(
    request: ContentCreate,
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> ContentItemDetail:
    item = db.create_content(
        request.content,
        request.type,
        priority=request.priority,
        name=request.name,
        original_metadata=request.metadata,
    )
    item = await moderation_service.moderate_and_store(item)
    if item.type == "text":
        item = await attach_analysis(db, item)
    return db.with_assigned_user(item)


@router.get("/{content_id}", response_model=ContentItemDetail, responses=ERROR_RESPONSES, summary="Get content")
async def get_content(
    content_id: str,
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> ContentItemDetail:
    """Open an item for review; a pending unassigned item is claimed by the caller."""
    item = db.get_content(parse_id(content_id))
    if item is None:
        raise NotFoundError("Content not found")
    return db.with_assigned_user(claim_item(db, item, user))


@router.patch("/{content_id}", response_model=ContentItemDetail, responses=ERROR_RESPONSES, summary="Update content")
async def update_content(
    content_id: str,
    update: ContentUpdate,
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> ContentItemDetail:
    item_id = parse_id(content_id)
    item = db.get_content(item_id)
    if item is None:
        raise NotFoundError("Content not found")

    changes = update.model_dump(exclude_unset=True)
    if "assigned_to" in changes:
        check_permission(user.role, Permission.ASSIGN_CONTENT)
        if changes["assigned_to"] is not None and db.get_user(changes["assigned_to"]) is None:
            raise NotFoundError("User not found")
    if "status" in changes and item.status != "pending":
        check_permission(user.role, Permission.OVERRIDE_DECISIONS)

    return db.with_assigned_user(db.update_content(item_id, **changes))


@router.post(
    "/{content_id}/moderate",
    response_model=ContentItemDetail,
    responses=ERROR_RESPONSES,
    summary="Re-run AI moderation",
)
async def moderate_content(
    content_id: str,
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> ContentItemDetail:
    item = db.get_content(parse_id(content_id))
    if item is None:
        raise NotFoundError("Content not found")
    item = await moderation_service.moderate_and_store(item)
    return db.with_assigned_user(item)


@router.post(
    "/{content_id}/feedback",
    response_model=ContentItemDetail,
    responses=ERROR_RESPONSES,
    summary="Rate the AI decision",
)
async def submit_feedback(
    content_id: str,
    feedback: FeedbackRequest,
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> ContentItemDetail:
    item = db.submit_ai_feedback(parse_id(content_id), feedback.is_correct, feedback.notes)
    return db.with_assigned_user(item)


@router.delete("/{content_id}", response_model=MessageResponse, responses=ERROR_RESPONSES, summary="Delete content")
async def delete_content(
    content_id: str,
    user: UserRecord = Depends(reviewer),
    db: MemoryStore = Depends(get_store),
) -> MessageResponse:
    delete_item(db, parse_id(content_id), user)
    return MessageResponse(message="Content deleted successfully")
