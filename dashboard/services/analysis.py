"""LLM review summary for content items (category, suggested action, flags)."""

import json
import logging

import openai
from pydantic import ValidationError

from dashboard.config.settings import settings
from dashboard.models.domain import AIAnalysis
from dashboard.services.exceptions import AnalysisError, ClassifierError
from dashboard.services.openai_moderation import get_openai_client

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a content moderation API. Analyze content and return a JSON object with "
    "the keys: category (string), confidence (0-1), suggestedAction "
    "(approve|reject|review), flags (array of {type, severity 0-1, details}) and "
    "risk_score (0-1)."
)


def parse_analysis(raw: str) -> AIAnalysis:
    """
    Validate the model's JSON answer.

    Raises:
        AnalysisError: If required fields are missing or malformed
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise AnalysisError(f"Analysis is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise AnalysisError("Analysis is not a JSON object")
    if not data.get("category") or not data.get("suggestedAction") or not isinstance(data.get("flags"), list):
        raise AnalysisError("Invalid analysis format")

    try:
        return AIAnalysis(
            classification={
                "category": data["category"],
                "confidence": data.get("confidence", 0.0),
                "suggested_action": data["suggestedAction"],
            },
            content_flags=data["flags"],
            risk_score=data.get("risk_score", 0.0),
        )
    except ValidationError as e:
        raise AnalysisError(f"Invalid analysis format: {e.error_count()} errors") from e


async def analyze_content(content: str, content_type: str) -> AIAnalysis:
    """
    Ask the chat model for a moderation summary of a content item.

    Raises:
        AnalysisError: On API failure or an unusable answer
    """
    try:
        client = get_openai_client()
        completion = await client.chat.completions.create(
            model=settings.openai_analysis_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Analyze this {content_type} content for moderation: {content}"},
            ],
            response_format={"type": "json_object"},
            temperature=0.1,
        )
    except (ClassifierError, openai.OpenAIError) as e:
        raise AnalysisError(f"Failed to analyze content: {e}") from e

    raw = completion.choices[0].message.content if completion.choices else None
    if not raw:
        raise AnalysisError("No response from OpenAI")

    analysis = parse_analysis(raw)
    logger.info(
        f"[OPENAI] Analysis: {analysis.classification.category} -> "
        f"{analysis.classification.suggested_action} (risk {analysis.risk_score:.2f})"
    )
    return analysis
