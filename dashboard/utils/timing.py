"""Clock helpers: UTC timestamps and elapsed-time measurement."""

import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator


def utc_now() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def get_current_timestamp_iso() -> str:
    """UTC now with millisecond precision, e.g. '2025-09-29T22:10:05.123Z'."""
    return utc_now().strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def elapsed_ms(start: datetime, end: datetime) -> float:
    """Milliseconds from ``start`` to ``end`` (negative if end is earlier)."""
    return (end - start).total_seconds() * 1000


@contextmanager
def timer() -> Generator[dict, None, None]:
    """
    Measure a block in whole milliseconds.

    The yielded dict gets its ``elapsed_ms`` filled in when the block exits,
    including when it raises:

        with timer() as elapsed:
            result = await classify(...)
        logger.info(f"classified in {elapsed['elapsed_ms']}ms")
    """
    measured = {"elapsed_ms": 0}
    started = time.perf_counter()
    try:
        yield measured
    finally:
        measured["elapsed_ms"] = int((time.perf_counter() - started) * 1000)
