"""Moderation service: provider selection, classifier calls and result normalisation."""

import logging
from pathlib import Path
from typing import Optional

from dashboard.config.roles import MODERATION_PROVIDERS
from dashboard.config.settings import settings
from dashboard.models.domain import ContentItem, ModerationResult
from dashboard.services import openai_moderation
from dashboard.services.exceptions import ClassifierError, MediaProbeError
from dashboard.services.media import probe_duration, remove_uploads, resolve_upload
from dashboard.services.scoring import (
    error_scores,
    regions_from_scores,
    scores_from_classes,
    status_from_scores,
)
from dashboard.services.store import MemoryStore, store as default_store
from dashboard.services.thehive import TheHiveClient, base_classes, extract_response, text_result
from dashboard.services.timeline import aggregate_confidence, build_timeline, compute_frames
from dashboard.utils.timing import timer

logger = logging.getLogger(__name__)


def flagged_result(kind: str, provider: Optional[str] = None) -> ModerationResult:
    """Result used whenever moderation could not produce scores."""
    return ModerationResult(status="flagged", ai_confidence=error_scores(kind), provider=provider)


class ModerationService:
    """Runs content items through the configured third-party classifier."""

    def __init__(self, store: Optional[MemoryStore] = None, hive: Optional[TheHiveClient] = None):
        self.store = store or default_store
        self.hive = hive or TheHiveClient()

    def get_active_service(self) -> str:
        """Provider chosen in the dashboard settings; OpenAI if unreadable."""
        try:
            value = self.store.get_setting("moderation_service", settings.moderation_service)
        except Exception as e:
            logger.error(f"Error reading moderation service setting: {e}")
            return "openai"
        return value if value in MODERATION_PROVIDERS else "openai"

    async def moderate_content(self, item: ContentItem) -> ModerationResult:
        """
        Moderate a content item. Never raises: failures come back as a
        ``flagged`` result with an error category.
        """
        service = self.get_active_service()
        logger.info(f"Moderating content {item.id} ({item.type}) with {service}")

        if item.type == "text":
            return await self.moderate_text(item.content, service)

        if item.type in ("image", "video"):
            file_path = resolve_upload(item.content)
            if file_path is None or not file_path.is_file():
                logger.error(f"Content {item.id}: file does not exist for {item.content}")
                return flagged_result("error", provider=service)
            if file_path.stat().st_size == 0:
                logger.error(f"Content {item.id}: file is empty")
                return flagged_result("error", provider=service)
            if not self.hive.media_configured:
                logger.warning("No TheHive media key; media cannot be classified")
                return flagged_result("unsupported_media_type", provider=service)
            if item.type == "image":
                return await self.moderate_image(file_path)
            return await self.moderate_video(file_path)

        logger.error(f"Unsupported content type: {item.type}")
        return flagged_result("error", provider=service)

    async def moderate_text(self, text: str, service: str) -> ModerationResult:
        try:
            if service == "thehive":
                payload = await self.hive.classify_text(text)
                return text_result(extract_response(payload))
            return await openai_moderation.moderate_text(text)
        except ClassifierError as e:
            logger.error(f"Text moderation via {service} failed: {e}")
            return flagged_result("api_error", provider=service)

    async def moderate_image(self, file_path: Path) -> ModerationResult:
        try:
            response = extract_response(await self.hive.classify_media(file_path))
        except ClassifierError as e:
            logger.error(f"[HIVE] Image moderation failed: {e}")
            return flagged_result("api_error", provider="thehive")

        scores = scores_from_classes(base_classes(response), floor=settings.media_score_floor)
        return ModerationResult(
            status=status_from_scores(scores),
            regions=regions_from_scores(scores),
            ai_confidence=scores,
            provider="thehive",
        )

    async def moderate_video(self, file_path: Path) -> ModerationResult:
        """
        Classify a video and reconcile its per-frame scores into a timeline.

        If the duration cannot be probed the timeline is left out and only the
        whole-video scores are kept.
        """
        try:
            response = extract_response(await self.hive.classify_media(file_path))
        except ClassifierError as e:
            logger.error(f"[HIVE] Video moderation failed: {e}")
            return flagged_result("api_error", provider="thehive")

        base = scores_from_classes(base_classes(response), floor=settings.media_score_floor)

        duration: Optional[float] = None
        timeline = []
        try:
            duration = await probe_duration(file_path)
        except MediaProbeError as e:
            logger.error(f"[FFMPEG] {e}; timeline omitted")
            frames = compute_frames(response, None)
        else:
            timeline = await build_timeline(file_path, response, duration)
            frames = [(entry.time, entry.confidence) for entry in timeline]

        scores = aggregate_confidence(frames, base)

        return ModerationResult(
            status=status_from_scores(scores),
            regions=regions_from_scores(scores),
            ai_confidence=scores,
            timeline=timeline or None,
            provider="thehive",
            duration=duration,
        )

    async def moderate_and_store(self, item: ContentItem) -> ContentItem:
        with timer() as elapsed:
            result = await self.moderate_content(item)
        logger.info(
            f"Content {item.id}: AI decision {result.status}, "
            f"{len(result.ai_confidence)} categories, "
            f"{len(result.timeline or [])} timeline frames in {elapsed['elapsed_ms']}ms"
        )
        previous = {entry.thumbnail for entry in item.timeline if entry.thumbnail}
        updated = self.store.apply_moderation_result(item.id, result)
        stale = previous - {entry.thumbnail for entry in updated.timeline if entry.thumbnail}
        if stale:
            removed = remove_uploads(sorted(stale))
            logger.debug(f"Content {item.id}: removed {removed} stale thumbnails")
        return updated


# Global service instance
moderation_service = ModerationService()
