"""Normalisation of classifier class lists into confidence maps and decisions."""

import math
from typing import Any, Dict, Iterable, List, Optional

from dashboard.config.settings import settings
from dashboard.models.domain import ContentRegion


def normalize_class_name(name: str) -> str:
    """
    Turn a classifier class name into a display category.

    'yes_sexual_activity' -> 'sexual activity'
    """
    if name.startswith("yes_"):
        name = name[len("yes_"):]
    return name.replace("_", " ")


def scores_from_classes(
    classes: Optional[Iterable[Dict[str, Any]]],
    floor: float = 0.0,
) -> Dict[str, float]:
    """
    Build a confidence map from a TheHive-style class list.

    Negated classes ('no_*') are dropped, as is anything scoring at or below
    ``floor`` (and never anything at or below zero).

    Args:
        classes: Items shaped like {"class": str, "score": float}
        floor: Minimum score to keep

    Returns:
        Dict[str, float]: Category -> score
    """
    scores: Dict[str, float] = {}
    if not classes:
        return scores

    for item in classes:
        if not isinstance(item, dict):
            continue
        name = item.get("class")
        if not isinstance(name, str) or name.startswith("no_"):
            continue
        try:
            score = float(item.get("score", 0))
        except (TypeError, ValueError):
            continue
        if math.isnan(score) or score <= 0 or score <= floor:
            continue
        scores[normalize_class_name(name)] = score

    return scores


def merge_max(*maps: Dict[str, float]) -> Dict[str, float]:
    """Per-category maximum across confidence maps."""
    merged: Dict[str, float] = {}
    for scores in maps:
        for category, score in scores.items():
            merged[category] = max(merged.get(category, 0.0), score)
    return merged


def status_from_scores(scores: Dict[str, float]) -> str:
    """Map the highest score onto a moderation status."""
    max_score = max(scores.values(), default=0.0)
    if max_score > settings.threshold_reject:
        return "rejected"
    if max_score > settings.threshold_flag:
        return "flagged"
    return "approved"


def severity(scores: Dict[str, float]) -> str:
    """Timeline frame severity, on the same cut points as the status."""
    max_score = max(scores.values(), default=0.0)
    if max_score > settings.threshold_reject:
        return "high"
    if max_score > settings.threshold_flag:
        return "medium"
    return "low"


def warnings_from_scores(scores: Dict[str, float]) -> List[str]:
    """Categories above the warning threshold, highest first."""
    ranked = sorted(scores.items(), key=lambda kv: (-kv[1], kv[0]))
    return [category for category, score in ranked if score > settings.threshold_warning]


def regions_from_scores(scores: Dict[str, float]) -> List[ContentRegion]:
    """Full-frame regions for every category above the region threshold."""
    return [
        ContentRegion(type=category, confidence=score)
        for category, score in scores.items()
        if score > settings.threshold_region
    ]


def error_scores(kind: str = "api_error") -> Dict[str, float]:
    return {kind: 1.0}
