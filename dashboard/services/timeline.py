"""
Video timeline reconciliation.

A classifier response for a video comes in one of three shapes:

1. a ``timeline`` list of frames, each with a ``time`` and ``classes``;
2. an ``output`` list whose entries carry their own ``time``;
3. a single whole-video ``output[0].classes`` with no per-frame data.

All three are reduced to the same thing: a list of ``(time, confidence)``
frames that lie inside the probed duration, rounded to centiseconds,
merged per timestamp and sorted. Shape 3 is spread over the video at a
regular interval so the UI still has points to scrub to.

Thumbnails are then grabbed for every frame and the result is returned as
``TimelineEntry`` models.
"""

import asyncio
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from dashboard.config.settings import settings
from dashboard.models.domain import TimelineEntry
from dashboard.services.exceptions import ThumbnailError
from dashboard.services.media import generate_thumbnail, thumbnail_filename
from dashboard.services.scoring import merge_max, scores_from_classes, severity, warnings_from_scores

logger = logging.getLogger(__name__)

Frame = Tuple[float, Dict[str, float]]

THUMBNAIL_CONCURRENCY = 4


def parse_time(value: Any) -> Optional[float]:
    """Numeric or numeric-string timestamps; anything else is None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def frames_from_timeline(timeline: List[Any]) -> List[Frame]:
    """Frames from an explicit timeline. A frame without a usable time sits at 0."""
    frames: List[Frame] = []
    for frame in timeline:
        if not isinstance(frame, dict):
            continue
        time = parse_time(frame.get("time"))
        frames.append((0.0 if time is None else time, scores_from_classes(frame.get("classes"))))
    return frames


def frames_from_outputs(outputs: List[Any]) -> List[Frame]:
    """Frames from output entries that carry their own time."""
    frames: List[Frame] = []
    for output in outputs:
        if not isinstance(output, dict):
            continue
        time = parse_time(output.get("time"))
        if time is None or not output.get("classes"):
            continue
        frames.append((time, scores_from_classes(output["classes"])))
    return frames


def sample_interval(duration: float) -> float:
    return min(settings.timeline_max_interval_seconds, duration / settings.timeline_sample_count)


def sample_frames(base: Dict[str, float], duration: Optional[float]) -> List[Frame]:
    """
    Spread whole-video scores over the duration.

    Samples start at 0 and step by ``sample_interval`` while below the
    duration; a closing frame at the duration itself is added when the last
    sample is more than a second short of it.
    """
    if not duration or duration <= 0:
        return [(0.0, dict(base))]

    interval = sample_interval(duration)
    frames: List[Frame] = []
    index = 0
    while index * interval < duration:
        frames.append((index * interval, dict(base)))
        index += 1

    last_time = frames[-1][0]
    if last_time + 1 < duration:
        frames.append((duration, dict(frames[-1][1])))
    return frames


def reconcile(frames: List[Frame], duration: Optional[float]) -> List[Frame]:
    """
    Clip, round, merge and sort raw frames.

    * times that are NaN, infinite or negative are dropped
    * with a known duration, times past it are dropped
    * times are rounded to 2 decimals; frames landing on the same rounded
      time are merged by per-category maximum
    * the result is sorted by time
    """
    merged: Dict[float, Dict[str, float]] = {}
    for time, confidence in frames:
        if math.isnan(time) or math.isinf(time) or time < 0:
            continue
        if duration and duration > 0 and time > duration:
            continue
        key = round(time, 2)
        merged[key] = merge_max(merged[key], confidence) if key in merged else dict(confidence)

    return sorted(merged.items(), key=lambda frame: frame[0])


def compute_frames(response: Dict[str, Any], duration: Optional[float]) -> List[Frame]:
    """Reduce a TheHive task response to reconciled frames."""
    timeline = response.get("timeline")
    outputs = response.get("output") or []

    if isinstance(timeline, list):
        logger.debug(f"[TIMELINE] Using {len(timeline)} timeline frames")
        raw = frames_from_timeline(timeline)
    else:
        raw = frames_from_outputs(outputs)
        if raw:
            logger.debug(f"[TIMELINE] Using {len(raw)} timed output entries")
        else:
            first = outputs[0] if outputs and isinstance(outputs[0], dict) else {}
            base = scores_from_classes(first.get("classes"))
            raw = sample_frames(base, duration)
            logger.debug(f"[TIMELINE] No per-frame data; sampled {len(raw)} frames")

    return reconcile(raw, duration)


def aggregate_confidence(frames: List[Frame], base: Dict[str, float]) -> Dict[str, float]:
    """Whole-video confidence: per-category max over every frame and the base scores."""
    return merge_max(base, *(confidence for _, confidence in frames))


async def _thumbnail_for(video_path: Path, time: float, semaphore: asyncio.Semaphore) -> Optional[str]:
    output_path = settings.thumbnail_path / thumbnail_filename(video_path, time)
    async with semaphore:
        try:
            return await generate_thumbnail(video_path, time, output_path)
        except ThumbnailError as e:
            logger.warning(f"[TIMELINE] No thumbnail at {time:.2f}s: {e}")
            return None


async def build_timeline(
    video_path: Path,
    response: Dict[str, Any],
    duration: Optional[float],
) -> List[TimelineEntry]:
    """
    Reconcile a video's classifier response and attach frame thumbnails.

    Frames whose thumbnail cannot be generated are kept with
    ``thumbnail=None`` so their warnings still show on the timeline.
    """
    frames = compute_frames(response, duration)
    semaphore = asyncio.Semaphore(THUMBNAIL_CONCURRENCY)
    thumbnails = await asyncio.gather(
        *(_thumbnail_for(video_path, time, semaphore) for time, _ in frames)
    )

    entries = [
        TimelineEntry(
            time=time,
            confidence=confidence,
            thumbnail=thumbnail,
            severity=severity(confidence),
            warnings=warnings_from_scores(confidence),
        )
        for (time, confidence), thumbnail in zip(frames, thumbnails)
    ]

    if entries:
        logger.info(
            f"[TIMELINE] {Path(video_path).name}: {len(entries)} frames, "
            f"{entries[0].time:.2f}s-{entries[-1].time:.2f}s of {duration or 0:.2f}s, "
            f"{sum(1 for e in entries if e.thumbnail is None)} without thumbnail"
        )
    return entries
