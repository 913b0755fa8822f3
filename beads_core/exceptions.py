"""Custom exceptions for beads-board."""

from typing import Optional

__all__ = [
    "BeadsError",
    "IssueNotFoundError",
    "BridgeError",
    "IDCollisionError",
    "LockError",
]


class BeadsError(Exception):
    """Base class for errors raised by an issue store."""

    pass


class IssueNotFoundError(BeadsError):
    """Raised when an operation targets an issue that does not exist."""

    def __init__(self, issue_id: str):
        super().__init__(f"Issue {issue_id} not found")
        self.issue_id = issue_id


class BridgeError(BeadsError):
    """Raised when a bd command fails or returns unreadable output.

    returncode is bd's exit status when bd ran and exited non-zero, else None.
    """

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class IDCollisionError(BeadsError):
    """Raised when unable to generate unique ID after max retries."""

    pass


class LockError(BeadsError):
    """Raised when unable to acquire file lock."""

    pass
