"""TheHive.ai sync-task client and response parsing."""

import asyncio
import hashlib
import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp

from dashboard.config.settings import settings
from dashboard.models.domain import ModerationResult
from dashboard.services.exceptions import ClassifierError
from dashboard.services.scoring import scores_from_classes
from dashboard.utils.redis_client import get_json, make_key, set_json

logger = logging.getLogger(__name__)

_http_session: Optional[aiohttp.ClientSession] = None


async def get_http_session() -> aiohttp.ClientSession:
    """Get or create the shared HTTP session for classifier calls."""
    global _http_session
    if _http_session is None or _http_session.closed:
        timeout = aiohttp.ClientTimeout(total=settings.thehive_timeout_seconds)
        _http_session = aiohttp.ClientSession(timeout=timeout)
    return _http_session


async def close_http_session():
    """Close HTTP session (call on shutdown)."""
    global _http_session
    if _http_session and not _http_session.closed:
        await _http_session.close()
    _http_session = None


def authorization_header(api_key: str) -> str:
    """TheHive expects 'token <key>'; accept keys with or without the prefix."""
    api_key = api_key.strip()
    if api_key.lower().startswith("token "):
        return api_key
    return f"token {api_key}"


def compute_payload_hash(kind: str, data: bytes) -> str:
    """SHA256 of the submitted payload, used as the cache key."""
    return hashlib.sha256(kind.encode() + b"\0" + data).hexdigest()[:16]


def extract_response(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Pull the task response out of a sync-task body.

    Raises:
        ClassifierError: If the body does not have the expected shape
    """
    try:
        response = payload["status"][0]["response"]
    except (KeyError, IndexError, TypeError) as e:
        raise ClassifierError(f"Unexpected TheHive response shape: {e!r}") from e
    if not isinstance(response, dict):
        raise ClassifierError("TheHive task response is not an object")
    return response


def base_classes(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Class list of the first output entry (whole-item scores)."""
    outputs = response.get("output") or []
    if not outputs or not isinstance(outputs[0], dict):
        return []
    return outputs[0].get("classes") or []


def text_result(response: Dict[str, Any]) -> ModerationResult:
    """
    Score a text task response.

    Each text filter type that fired counts as a full-confidence hit for that
    type, alongside the class scores.
    """
    scores = scores_from_classes(base_classes(response))

    for text_filter in response.get("text_filters") or []:
        filter_type = text_filter.get("type") if isinstance(text_filter, dict) else None
        if filter_type:
            scores[str(filter_type).replace("_", " ")] = 1.0

    high_risk = any(score > settings.threshold_reject for score in scores.values())
    return ModerationResult(
        status="rejected" if high_risk else "approved",
        ai_confidence=scores,
        provider="thehive",
    )


class TheHiveClient:
    """Thin async client for the TheHive sync task endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        text_api_key: Optional[str] = None,
        media_api_key: Optional[str] = None,
    ):
        self.url = url or settings.thehive_url
        self.text_api_key = text_api_key if text_api_key is not None else settings.thehive_text_api_key
        self.media_api_key = media_api_key if media_api_key is not None else settings.thehive_api_key

    @property
    def media_configured(self) -> bool:
        return bool(self.media_api_key)

    @property
    def text_configured(self) -> bool:
        return bool(self.text_api_key or self.media_api_key)

    async def classify_text(self, text: str) -> Dict[str, Any]:
        """Submit text and return the raw response body."""
        api_key = self.text_api_key or self.media_api_key
        if not api_key:
            raise ClassifierError("TheHive text API key is not configured")

        data = text.encode("utf-8")
        cache_key = make_key("cache", "hive", compute_payload_hash("text", data))
        cached = self._cached(cache_key)
        if cached is not None:
            return cached

        form = aiohttp.FormData()
        form.add_field("text_data", text)

        logger.info("[HIVE] Submitting text for moderation")
        payload = await self._post(form, api_key)
        self._store(cache_key, payload)
        return payload

    async def classify_media(self, file_path: Path) -> Dict[str, Any]:
        """Submit an image or video file and return the raw response body."""
        if not self.media_api_key:
            raise ClassifierError("TheHive media API key is not configured")

        data = await asyncio.to_thread(Path(file_path).read_bytes)
        cache_key = make_key("cache", "hive", compute_payload_hash("media", data))
        cached = self._cached(cache_key)
        if cached is not None:
            return cached

        content_type = mimetypes.guess_type(str(file_path))[0] or "application/octet-stream"
        form = aiohttp.FormData()
        form.add_field(
            "image",
            data,
            filename=Path(file_path).name,
            content_type=content_type,
        )

        logger.info(f"[HIVE] Submitting {Path(file_path).name} ({len(data)} bytes, {content_type})")
        payload = await self._post(form, self.media_api_key)
        self._store(cache_key, payload)
        return payload

    async def _post(self, form: aiohttp.FormData, api_key: str) -> Dict[str, Any]:
        session = await get_http_session()
        headers = {
            "Accept": "application/json",
            "Authorization": authorization_header(api_key),
        }

        try:
            async with session.post(self.url, data=form, headers=headers) as response:
                if response.status != 200:
                    body = await response.text()
                    raise ClassifierError(
                        f"TheHive returned HTTP {response.status}: {body[:200]}"
                    )
                payload = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise ClassifierError("Timeout calling TheHive") from e
        except aiohttp.ClientError as e:
            raise ClassifierError(f"TheHive request failed: {e}") from e
        except ValueError as e:
            raise ClassifierError(f"TheHive returned invalid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise ClassifierError("TheHive returned a non-object body")
        return payload

    @staticmethod
    def _cached(cache_key: str) -> Optional[Dict[str, Any]]:
        if not settings.cache_enabled:
            return None
        cached = get_json(cache_key)
        if isinstance(cached, dict):
            logger.info(f"[CACHE HIT] key: {cache_key}")
            return cached
        logger.info(f"[CACHE MISS] key: {cache_key}")
        return None

    @staticmethod
    def _store(cache_key: str, payload: Dict[str, Any]) -> None:
        if settings.cache_enabled and set_json(cache_key, payload, settings.cache_ttl_seconds):
            logger.info(f"[CACHE STORED] key: {cache_key}, TTL: {settings.cache_ttl_seconds}s")
