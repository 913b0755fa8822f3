"""Tests for timestamp helpers and file locking."""

import threading
import time

import pytest


def test_get_timestamp_ms_is_current():
    """Timestamp should be epoch milliseconds."""
    from beads_core import get_timestamp_ms

    before = int(time.time() * 1000)
    now = get_timestamp_ms()
    after = int(time.time() * 1000)

    assert before - 1 <= now <= after + 1


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, None),
        ("", None),
        (1_700_000_000_000, 1_700_000_000_000),
        (12.9, 12),
        ("42", 42),
        ("1970-01-01T00:00:01Z", 1_000),
        ("1970-01-01T00:00:01.250000+00:00", 1_250),
        ("1970-01-01T01:00:00+01:00", 0),
        ("1970-01-01T00:00:02", 2_000),
    ],
)
def test_parse_timestamp(value, expected):
    """Numbers pass through; ISO strings convert to milliseconds."""
    from beads_core import parse_timestamp

    assert parse_timestamp(value) == expected


def test_parse_timestamp_rejects_garbage():
    """Non-timestamp strings raise ValueError."""
    from beads_core import parse_timestamp

    with pytest.raises(ValueError):
        parse_timestamp("yesterday")


def test_format_timestamp():
    """Display format is UTC without fractional seconds."""
    from beads_core.utils import format_timestamp

    assert format_timestamp(1_000) == "1970-01-01 00:00:01"
    assert format_timestamp(None) == "-"


def test_file_lock_creates_lock_file(tmp_path):
    """Lock file and parent directories are created."""
    from beads_core import file_lock

    lock_path = tmp_path / "nested" / ".lock"

    with file_lock(lock_path):
        assert lock_path.exists()


def test_file_lock_times_out_when_held(tmp_path):
    """A second holder should fail with LockError after the timeout."""
    from beads_core import LockError, file_lock

    lock_path = tmp_path / ".lock"
    holding = threading.Event()
    release = threading.Event()

    def hold():
        with file_lock(lock_path):
            holding.set()
            release.wait(5)

    holder = threading.Thread(target=hold)
    holder.start()
    try:
        assert holding.wait(5)
        with pytest.raises(LockError):
            with file_lock(lock_path, timeout=0.1):
                pass
    finally:
        release.set()
        holder.join()


def test_file_lock_is_reusable(tmp_path):
    """Lock can be acquired again after release."""
    from beads_core import file_lock

    lock_path = tmp_path / ".lock"

    with file_lock(lock_path):
        pass
    with file_lock(lock_path, timeout=0.1):
        pass
