"""ID generation for beads-board - short hash-based IDs like bd-a1b2."""

import hashlib
import os
import time
from typing import Optional, Set

from beads_core.constants import BASE36_CHARS, HASH_LENGTH, ID_PREFIX, MAX_ID_RETRIES
from beads_core.exceptions import IDCollisionError

__all__ = [
    "generate_issue_id",
]


def generate_issue_id(
    existing_ids: Optional[Set[str]] = None,
    max_retries: int = MAX_ID_RETRIES,
    prefix: str = ID_PREFIX,
) -> str:
    """Generate a short hash-based issue ID.

    Format: {prefix}-{4-char-base36-hash}, e.g. "bd-a1b2"

    Args:
        existing_ids: IDs already in use. When given, a generated ID found in
            this set is discarded and regenerated.
        max_retries: Maximum attempts when checking against existing_ids
        prefix: ID prefix

    Returns:
        ID string

    Raises:
        IDCollisionError: If every attempt collided with existing_ids

    Notes:
        - The hash input mixes the nanosecond clock, the attempt number and
          16 random bytes
        - 4 base36 characters give 36**4 (about 1.68 million) tokens, so
          collisions are likely after roughly 1,300 IDs (birthday bound)
        - Without existing_ids nothing is checked and a collision goes unnoticed
    """
    for attempt in range(max_retries):
        entropy = f"{time.time_ns()}|{attempt}|{os.urandom(16).hex()}".encode("utf-8")

        digest = hashlib.sha256(entropy).digest()
        # Uniform over the 36**HASH_LENGTH tokens
        value = int.from_bytes(digest[:8], "big") % 36**HASH_LENGTH
        token = _to_base36(value).zfill(HASH_LENGTH)
        issue_id = f"{prefix}-{token}"

        if existing_ids is None or issue_id not in existing_ids:
            return issue_id

    raise IDCollisionError(
        f"Unable to generate unique ID with prefix '{prefix}' after {max_retries} attempts"
    )


def _to_base36(num: int) -> str:
    digits = ""
    while True:
        num, remainder = divmod(num, 36)
        digits = BASE36_CHARS[remainder] + digits
        if num == 0:
            return digits
