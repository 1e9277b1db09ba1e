"""Media helpers: ffprobe duration, ffmpeg thumbnails and image validation."""

import asyncio
import io
import logging
import math
import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from dashboard.config.settings import settings
from dashboard.services.exceptions import MediaProbeError, ThumbnailError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_FORMATS = {"JPEG", "PNG", "WEBP", "GIF"}
THUMBNAIL_URL_PREFIX = "/uploads/thumbnails"


async def _run(cmd: List[str]) -> Tuple[int, bytes, bytes]:
    """Run a media tool and return (returncode, stdout, stderr)."""
    process = await asyncio.create_subprocess_exec(
        *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
    )

    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(), timeout=settings.media_tool_timeout_seconds
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise
    return process.returncode, stdout, stderr


async def probe_duration(file_path: Path) -> float:
    """
    Read a media file's duration in seconds with ffprobe.

    Raises:
        MediaProbeError: If ffprobe is missing, fails or prints no usable number
    """
    cmd = [
        settings.ffprobe_path,
        "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(file_path),
    ]

    try:
        returncode, stdout, stderr = await _run(cmd)
    except (OSError, asyncio.TimeoutError) as e:
        raise MediaProbeError(f"ffprobe could not run: {e!r}") from e

    if returncode != 0:
        raise MediaProbeError(
            f"ffprobe failed with code {returncode}: {stderr.decode(errors='replace').strip()}"
        )

    output = stdout.decode(errors="replace").strip()
    try:
        duration = float(output.splitlines()[0]) if output else float("nan")
    except ValueError as e:
        raise MediaProbeError(f"ffprobe printed an unparsable duration: {output!r}") from e

    if math.isnan(duration) or math.isinf(duration) or duration < 0:
        raise MediaProbeError(f"ffprobe printed an unusable duration: {output!r}")

    logger.info(f"[FFMPEG] Duration of {Path(file_path).name}: {duration:.2f}s")
    return duration


def thumbnail_filename(video_path: Path, time_seconds: float) -> str:
    """'<video stem>_<time to 2dp>.jpg'"""
    return f"{Path(video_path).stem}_{time_seconds:.2f}.jpg"


async def generate_thumbnail(video_path: Path, time_seconds: float, output_path: Path) -> str:
    """
    Grab the frame at ``time_seconds`` into ``output_path``.

    Returns:
        str: Public URL of the thumbnail

    Raises:
        ThumbnailError: If ffmpeg is missing or fails
    """
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ThumbnailError(f"Cannot write thumbnails to {output_path.parent}: {e}") from e

    cmd = [
        settings.ffmpeg_path,
        "-y",
        "-ss", f"{time_seconds:.3f}",
        "-i", str(video_path),
        "-frames:v", "1",
        "-vf", f"scale={settings.thumbnail_width}:{settings.thumbnail_height}",
        "-q:v", "2",
        str(output_path),
    ]

    try:
        returncode, _, stderr = await _run(cmd)
    except (OSError, asyncio.TimeoutError) as e:
        raise ThumbnailError(f"ffmpeg could not run: {e!r}") from e

    if returncode != 0 or not output_path.exists():
        raise ThumbnailError(
            f"ffmpeg failed at {time_seconds:.2f}s with code {returncode}: "
            f"{stderr.decode(errors='replace').strip()[-300:]}"
        )

    logger.debug(f"[FFMPEG] Thumbnail at {time_seconds:.2f}s -> {output_path.name}")
    return f"{THUMBNAIL_URL_PREFIX}/{output_path.name}"


def tool_available(binary: str) -> bool:
    return shutil.which(binary) is not None


def validate_image(image_bytes: bytes) -> Tuple[str, int, int]:
    """
    Check uploaded bytes decode as a supported image of sane size.

    Returns:
        (format, width, height)

    Raises:
        ValueError: If the image is invalid
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            image_format = image.format
            width, height = image.size
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ValueError(f"Invalid image: {e}") from e

    if image_format not in ALLOWED_IMAGE_FORMATS:
        raise ValueError(f"Unsupported format: {image_format}")

    max_dim = settings.image_max_dimension
    if width > max_dim or height > max_dim:
        raise ValueError(
            f"Image dimensions too large: {width}x{height} (max {max_dim}x{max_dim})"
        )

    return image_format, width, height


def resolve_upload(url: str) -> Optional[Path]:
    """
    Map an '/uploads/...' URL onto a file inside the upload directory.

    Returns None for anything that is not an upload URL or that escapes the
    upload directory.
    """
    if not url.startswith("/uploads/"):
        return None
    root = settings.upload_path
    candidate = (root / url[len("/uploads/"):]).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    return candidate


def remove_uploads(urls: Iterable[str]) -> int:
    """Delete the files behind upload URLs; missing files are skipped."""
    removed = 0
    for path in (resolve_upload(url) for url in urls):
        if path is None:
            continue
        try:
            path.unlink()
            removed += 1
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning(f"Could not remove {path}: {e}")
    return removed
