"""Shared utilities for beads-board - timestamps and file locking."""

import fcntl
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Optional, Union

from beads_core.constants import LOCK_POLL_INTERVAL, LOCK_TIMEOUT
from beads_core.exceptions import LockError

__all__ = [
    "get_timestamp_ms",
    "parse_timestamp",
    "format_timestamp",
    "file_lock",
]


def get_timestamp_ms() -> int:
    """Get the current UTC time as integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000


def parse_timestamp(value: Optional[Union[int, float, str]]) -> Optional[int]:
    """Normalize a timestamp to epoch milliseconds.

    Accepts epoch milliseconds (int/float, or a numeric string) and ISO 8601
    strings, with or without a trailing "Z". Naive ISO strings are read as UTC.

    Args:
        value: Timestamp in any supported form, or None

    Returns:
        Epoch milliseconds, or None if value is None or empty

    Raises:
        ValueError: If value is a string that is neither numeric nor ISO 8601

    Examples:
        >>> parse_timestamp(1700000000000)
        1700000000000
        >>> parse_timestamp("1970-01-01T00:00:01Z")
        1000
    """
    if value is None or value == "":
        return None

    if isinstance(value, (int, float)):
        return int(value)

    text = value.strip()
    if text.lstrip("-").isdigit():
        return int(text)

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return int(parsed.timestamp() * 1000)


def format_timestamp(ms: Optional[int]) -> str:
    """Format epoch milliseconds for display (e.g. "2024-01-15 10:30:00")."""
    if ms is None:
        return "-"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


@contextmanager
def file_lock(lock_path: Path, timeout: float = LOCK_TIMEOUT) -> Generator[object, None, None]:
    """Hold an exclusive flock on lock_path for the duration of the block.

    The lock file is created if needed. Closing it releases the lock.

    Args:
        lock_path: Path to lock file
        timeout: Seconds to keep retrying before giving up

    Yields:
        The open lock file

    Raises:
        LockError: If the lock is still held elsewhere after timeout seconds
    """
    lock_path = Path(lock_path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout

    with open(lock_path, "a") as handle:
        while True:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    raise LockError(f"Timed out after {timeout}s waiting for {lock_path}") from None
                time.sleep(LOCK_POLL_INTERVAL)
            else:
                break

        yield handle
