"""Identifier and filename generation utilities."""

import re
import secrets
import time
import uuid
from pathlib import Path


def generate_request_id() -> str:
    """
    Generate a unique request ID.

    Returns:
        str: Request ID in format 'req_<uuid>'
    """
    return f"req_{uuid.uuid4().hex[:12]}"


def generate_error_request_id() -> str:
    """
    Generate a unique error request ID.

    Returns:
        str: Error request ID in format 'req_error_<uuid>'
    """
    return f"req_error_{uuid.uuid4().hex[:8]}"


def generate_session_id() -> str:
    """Generate an opaque session identifier."""
    return secrets.token_urlsafe(24)


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def generate_upload_filename(original_name: str) -> str:
    """
    Build a collision-free filename for an uploaded file.

    The original name is kept (sanitised) after a millisecond timestamp and a
    random suffix so uploads stay recognisable on disk.

    Args:
        original_name: Client-supplied filename

    Returns:
        str: e.g. '1717171717171-483920112-clip.mp4'
    """
    safe_name = _UNSAFE_CHARS.sub("_", Path(original_name or "upload").name).strip("._")
    suffix = secrets.randbelow(10**9)
    return f"{int(time.time() * 1000)}-{suffix}-{safe_name or 'upload'}"
