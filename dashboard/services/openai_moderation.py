"""OpenAI moderation endpoint provider (text only)."""

import logging
from typing import Dict, Optional

import openai

from dashboard.config.settings import settings
from dashboard.models.domain import ModerationResult
from dashboard.services.exceptions import ClassifierError

logger = logging.getLogger(__name__)

_client: Optional[openai.AsyncOpenAI] = None


def get_openai_client() -> openai.AsyncOpenAI:
    """Shared async client; raises ClassifierError when no key is configured."""
    global _client
    if _client is None:
        if not settings.openai_api_key:
            raise ClassifierError("OPENAI_API_KEY is not configured")
        _client = openai.AsyncOpenAI(api_key=settings.openai_api_key)
    return _client


def reset_openai_client() -> None:
    global _client
    _client = None


def scores_from_category_scores(category_scores: Dict[str, float]) -> Dict[str, float]:
    """Keep meaningful category scores, with underscores turned into spaces."""
    scores: Dict[str, float] = {}
    for category, score in category_scores.items():
        if score is None:
            continue
        if score > settings.openai_score_floor:
            scores[category.replace("_", " ")] = float(score)
    return scores


async def moderate_text(text: str) -> ModerationResult:
    """
    Moderate text with the OpenAI moderation endpoint.

    Raises:
        ClassifierError: On any API failure
    """
    client = get_openai_client()

    try:
        response = await client.moderations.create(input=text)
    except openai.OpenAIError as e:
        raise ClassifierError(f"OpenAI moderation failed: {e}") from e

    if not response.results:
        raise ClassifierError("OpenAI moderation returned no results")

    result = response.results[0]
    category_scores = result.category_scores.model_dump(by_alias=True)
    scores = scores_from_category_scores(category_scores)

    logger.info(f"[OPENAI] flagged={result.flagged} categories={len(scores)}")
    return ModerationResult(
        status="rejected" if result.flagged else "approved",
        ai_confidence=scores,
        provider="openai",
    )
