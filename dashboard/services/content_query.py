"""Filtering, ordering and paging for the content table."""

import math
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from dashboard.config.settings import settings
from dashboard.models.domain import ContentItem
from dashboard.models.requests import ContentQuery

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _aware(value: datetime) -> datetime:
    """Naive datetimes from query strings are taken as UTC."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def has_warning(item: ContentItem, warning_types: List[str]) -> bool:
    wanted = {w.replace("_", " ").lower() for w in warning_types}
    return any(
        category.lower() in wanted and score > settings.threshold_warning
        for category, score in item.ai_confidence.items()
    )


def matches(item: ContentItem, query: ContentQuery) -> bool:
    if query.type and item.type != query.type:
        return False
    if query.status and item.status != query.status:
        return False
    if query.assigned_to is not None and item.assigned_to != query.assigned_to:
        return False
    if query.date_from and item.created_at < _aware(query.date_from):
        return False
    if query.date_to and item.created_at > _aware(query.date_to):
        return False
    if query.warning_types and not has_warning(item, query.warning_types):
        return False
    if query.search:
        needle = query.search.lower()
        haystack = f"{item.name or ''} {item.content}".lower()
        if needle not in haystack:
            return False
    return True


SORT_KEYS: Dict[str, Callable[[ContentItem], object]] = {
    "created_at": lambda item: item.created_at,
    "moderated_at": lambda item: item.moderated_at or EPOCH,
    "status": lambda item: item.status,
    "type": lambda item: item.type,
    "name": lambda item: (item.name or "").lower(),
    "priority": lambda item: item.priority,
    "warnings": lambda item: item.max_confidence,
}


def query_content(items: List[ContentItem], query: Optional[ContentQuery] = None):
    """
    Apply a table query.

    Returns:
        (page_items, total, pages) where total counts every match
    """
    query = query or ContentQuery()
    filtered = [item for item in items if matches(item, query)]

    # id as a tiebreaker keeps paging stable
    key = SORT_KEYS[query.sort_by]
    ordered = sorted(
        filtered,
        key=lambda item: (key(item), item.id),
        reverse=query.sort_order == "desc",
    )

    total = len(ordered)
    pages = max(1, math.ceil(total / query.page_size))
    start = (query.page - 1) * query.page_size
    return ordered[start:start + query.page_size], total, pages
