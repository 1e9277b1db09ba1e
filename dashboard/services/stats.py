"""Queue statistics for the reports page."""

from datetime import datetime, timedelta
from typing import List, Optional

from dashboard.config.roles import CONTENT_TYPES, MODERATION_STATUSES
from dashboard.models.domain import ContentItem
from dashboard.models.responses import FeedbackStats, QueueStats, TrendPoint, TypeDistribution
from dashboard.utils.timing import elapsed_ms, utc_now

# Reported as AI accuracy until moderators have given any feedback
DEFAULT_AI_ACCURACY = 0.92
TREND_DAYS = 7


def _processing_ms(item: ContentItem) -> Optional[float]:
    if item.moderated_at is None:
        return None
    return elapsed_ms(item.created_at, item.moderated_at)


def average_processing_time_ms(items: List[ContentItem]) -> float:
    times = [t for t in (_processing_ms(item) for item in items) if t is not None]
    return sum(times) / len(times) if times else 0.0


def feedback_stats(items: List[ContentItem]) -> FeedbackStats:
    """
    Agreement between the AI decision and the moderator's decision, over
    items where feedback was given.
    """
    with_feedback = [item for item in items if item.feedback_provided]
    total = len(with_feedback)
    if not total:
        return FeedbackStats(total_feedback=0, agreement_rate=0.0, disagreement_rate=0.0)

    agreed = sum(1 for item in with_feedback if item.ai_decision == item.human_decision)
    return FeedbackStats(
        total_feedback=total,
        agreement_rate=agreed / total,
        disagreement_rate=(total - agreed) / total,
    )


def moderation_trends(items: List[ContentItem], now: datetime) -> List[TrendPoint]:
    """Decisions per day over the last week, oldest day first."""
    points = []
    for days_ago in range(TREND_DAYS - 1, -1, -1):
        day = (now - timedelta(days=days_ago)).date()
        point = TrendPoint(date=day.isoformat())
        for item in items:
            if item.moderated_at is None or item.moderated_at.date() != day:
                continue
            if item.status in ("approved", "rejected", "flagged"):
                setattr(point, item.status, getattr(point, item.status) + 1)
        points.append(point)
    return points


def compute_queue_stats(items: List[ContentItem], now: Optional[datetime] = None) -> QueueStats:
    now = now or utc_now()
    total = len(items)
    feedback = feedback_stats(items)

    return QueueStats(
        by_status={status: sum(1 for i in items if i.status == status) for status in MODERATION_STATUSES},
        by_type={content_type: sum(1 for i in items if i.type == content_type) for content_type in CONTENT_TYPES},
        total=total,
        avg_processing_time_ms=average_processing_time_ms(items),
        ai_accuracy=feedback.agreement_rate if feedback.total_feedback else DEFAULT_AI_ACCURACY,
        flagged_content_ratio=(sum(1 for i in items if i.status == "flagged") / total) if total else 0.0,
        moderation_trends=moderation_trends(items, now),
        content_type_distribution=[
            TypeDistribution(
                type=content_type,
                count=sum(1 for i in items if i.type == content_type),
                avg_processing_time_ms=average_processing_time_ms(
                    [i for i in items if i.type == content_type]
                ),
            )
            for content_type in CONTENT_TYPES
        ],
        ai_feedback_stats=feedback,
    )
