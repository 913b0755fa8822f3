"""Constants for beads-board - valid values, ranges, and defaults."""

__all__ = [
    "LINKABLE_DEPENDENCY_TYPES",
    "PRIORITY_RANGE",
    "DEFAULT_PRIORITY",
    "ID_PREFIX",
    "HASH_LENGTH",
    "BASE36_CHARS",
    "MAX_ID_RETRIES",
    "LOCK_TIMEOUT",
    "LOCK_POLL_INTERVAL",
    "STATUS_MARKERS",
]

# Edge types the bd CLI can create with `bd link`
LINKABLE_DEPENDENCY_TYPES = {"blocks", "parent", "related"}

# Priority range (inclusive), 0 is most urgent
PRIORITY_RANGE = (0, 4)
DEFAULT_PRIORITY = 2

# ID generation
ID_PREFIX = "bd"
HASH_LENGTH = 4
BASE36_CHARS = "0123456789abcdefghijklmnopqrstuvwxyz"
MAX_ID_RETRIES = 10

# File locking
LOCK_TIMEOUT = 5.0
LOCK_POLL_INTERVAL = 0.01

# CLI display
STATUS_MARKERS = {
    "open": "○",
    "in_progress": "◐",
    "closed": "●",
    "blocked": "⊘",
}
