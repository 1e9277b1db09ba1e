"""Review workflow: claiming items, recording decisions and removing content."""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from dashboard.config.settings import settings
from dashboard.models.domain import DECISION_STATUS, Case, ContentItem, UserRecord
from dashboard.services.analysis import analyze_content
from dashboard.services.exceptions import AnalysisError, ConflictError, NotFoundError
from dashboard.services.media import remove_uploads, resolve_upload
from dashboard.services.store import MemoryStore
from dashboard.utils.ids import generate_upload_filename

logger = logging.getLogger(__name__)


def claim_item(db: MemoryStore, item: ContentItem, user: UserRecord) -> ContentItem:
    """
    Assign a pending, unassigned item to ``user`` and open a case for them.

    Items that are decided or already held by someone are returned unchanged.
    """
    if item.status != "pending" or item.assigned_to is not None:
        return item
    if db.find_open_case(item.id, user.id) is None:
        db.create_case(item.id, user.id)
    logger.info(f"Content {item.id} assigned to {user.username}")
    return db.update_content(item.id, assigned_to=user.id)


def record_decision(
    db: MemoryStore,
    content_id: int,
    user: UserRecord,
    decision: str,
    notes: Optional[str] = None,
) -> Case:
    """
    Close the caller's case on an item with a decision and release the item.

    Reuses the caller's open case if there is one.
    """
    if db.get_content(content_id) is None:
        raise NotFoundError("Content not found")

    case = db.find_open_case(content_id, user.id)
    if case is None:
        case = db.create_case(content_id, user.id, notes=notes, decision=decision, status="closed")
    else:
        case = db.update_case(
            case.id, decision=decision, status="closed", notes=notes or case.notes
        )

    db.update_content(content_id, status=DECISION_STATUS[decision], assigned_to=None)
    logger.info(f"Content {content_id}: {user.username} decided {decision}")
    return case


def check_deletable(db: MemoryStore, item: ContentItem, user: UserRecord) -> None:
    """
    Raises:
        ConflictError: If another moderator holds the item or has an open case on it
    """
    if item.status == "pending" and item.assigned_to not in (None, user.id):
        holder = db.get_user(item.assigned_to)
        name = holder.name if holder else f"user {item.assigned_to}"
        raise ConflictError(f"Content is currently being moderated by {name}")

    for case in db.list_cases():
        if case.content_id == item.id and case.decision is None and case.agent_id != user.id:
            raise ConflictError("Content has pending moderation cases and cannot be deleted")


def media_urls(item: ContentItem) -> List[str]:
    """Upload and timeline thumbnail URLs belonging to an item."""
    if not item.is_media:
        return []
    return [item.content] + [entry.thumbnail for entry in item.timeline if entry.thumbnail]


def media_files(item: ContentItem) -> List[Path]:
    return [path for path in (resolve_upload(url) for url in media_urls(item)) if path is not None]


def remove_media_files(item: ContentItem) -> int:
    """Delete an item's files from disk; missing files are skipped."""
    return remove_uploads(media_urls(item))


def delete_item(db: MemoryStore, content_id: int, user: UserRecord) -> ContentItem:
    item = db.get_content(content_id)
    if item is None:
        raise NotFoundError("Content not found")
    check_deletable(db, item, user)
    db.delete_content(content_id)
    removed = remove_media_files(item)
    logger.info(f"Content {content_id} deleted by {user.username} ({removed} files removed)")
    return item


async def save_upload(data: bytes, original_name: str) -> str:
    """Write uploaded bytes into the upload directory and return the public URL."""
    filename = generate_upload_filename(original_name)
    target = settings.upload_path / filename
    await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
    await asyncio.to_thread(target.write_bytes, data)
    return f"/uploads/{filename}"


async def attach_analysis(db: MemoryStore, item: ContentItem) -> ContentItem:
    """Add the LLM review summary; a failed analysis leaves the item as it was."""
    try:
        analysis = await analyze_content(item.content, item.type)
    except AnalysisError as e:
        logger.warning(f"[OPENAI] Analysis for content {item.id} skipped: {e}")
        return item
    return db.set_ai_analysis(item.id, analysis)
