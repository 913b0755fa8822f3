"""Issue stores for beads-board - the persistence contract and a local store.

Two collaborators satisfy IssueStore: LocalIssueStore (below), which keeps
the whole snapshot in a SnapshotStorage, and BdCliStore (bridge.py), which
shells out to the bd CLI.
"""

import dataclasses
import json
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import ContextManager, Iterable, Iterator, List, Optional, Protocol, Sequence

from beads_core.constants import DEFAULT_PRIORITY, PRIORITY_RANGE
from beads_core.exceptions import IssueNotFoundError
from beads_core.ids import generate_issue_id
from beads_core.models import Dependency, DependencyType, Issue, IssueStatus, IssueType
from beads_core.queries import filter_issues, get_ready_issues_local, sort_issues
from beads_core.utils import file_lock, get_timestamp_ms

__all__ = [
    "IssueStore",
    "SnapshotStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "LocalIssueStore",
    "validate_priority",
]

logger = logging.getLogger(__name__)


class IssueStore(Protocol):
    """Contract for anything that supplies and persists the issue snapshot."""

    def list_issues(
        self,
        status: Optional[IssueStatus] = None,
        priority: Optional[int] = None,
        assignee: Optional[str] = None,
    ) -> List[Issue]:
        """Return the current snapshot, optionally filtered."""
        ...

    def get_issue(self, issue_id: str) -> Issue:
        """Return one issue. Raises IssueNotFoundError if absent."""
        ...

    def create_issue(
        self,
        title: str,
        description: Optional[str] = None,
        type: IssueType = IssueType.TASK,
        priority: int = DEFAULT_PRIORITY,
        assignee: Optional[str] = None,
        labels: Sequence[str] = (),
    ) -> Issue:
        ...

    def update_issue(
        self,
        issue_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[IssueStatus] = None,
        type: Optional[IssueType] = None,
        priority: Optional[int] = None,
        assignee: Optional[str] = None,
        labels: Optional[Sequence[str]] = None,
    ) -> Issue:
        """Apply the given fields and bump updated_at."""
        ...

    def close_issue(self, issue_id: str) -> Issue:
        ...

    def delete_issue(self, issue_id: str) -> None:
        ...

    def add_dependency(self, issue_id: str, dependency: Dependency) -> None:
        """Add an edge; adding an existing (type, target) edge is a no-op."""
        ...

    def remove_dependency(self, issue_id: str, target_id: str) -> None:
        ...

    def get_ready_issues(self) -> List[Issue]:
        """Server-side ready list. May raise BeadsError when unsupported."""
        ...


class SnapshotStorage(Protocol):
    """Where a LocalIssueStore keeps its snapshot."""

    def read(self) -> List[Issue]:
        ...

    def write(self, issues: Sequence[Issue]) -> None:
        ...

    def clear(self) -> None:
        ...

    def transaction(self) -> ContextManager[None]:
        """Hold the storage exclusively across a read-modify-write.

        Must be reentrant: read() and write() may be called inside it.
        """
        ...


class MemoryStorage:
    """In-process snapshot storage, mainly for tests and embedding."""

    def __init__(self, issues: Iterable[Issue] = ()):
        self._issues: List[Issue] = list(issues)
        self._lock = threading.RLock()

    def read(self) -> List[Issue]:
        return list(self._issues)

    def write(self, issues: Sequence[Issue]) -> None:
        self._issues = list(issues)

    def clear(self) -> None:
        self._issues = []

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield


class JsonFileStorage:
    """Snapshot storage in a single JSON file.

    The file holds a JSON array of issues in their camelCase shape. Access
    takes an exclusive lock on lock_path (default: "<path>.lock"), so several
    processes can share one file. transaction() keeps that lock across a
    whole read-modify-write.
    """

    def __init__(self, path: Path, lock_path: Optional[Path] = None):
        self.path = Path(path)
        self.lock_path = Path(lock_path) if lock_path else self.path.with_name(self.path.name + ".lock")
        # flock is not reentrant across file handles, so nesting is tracked per thread
        self._local = threading.local()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if getattr(self._local, "held", False):
            yield
            return

        with file_lock(self.lock_path):
            self._local.held = True
            try:
                yield
            finally:
                self._local.held = False

    def read(self) -> List[Issue]:
        """Load the snapshot.

        A missing file is an empty snapshot. A corrupt one is moved aside to
        "<path>.corrupt" and logged as an error, so a later write cannot
        destroy it; the snapshot then reads as empty.
        """
        with self.transaction():
            if not self.path.exists():
                return []
            try:
                text = self.path.read_text(encoding="utf-8")
            except OSError as e:
                logger.error("Failed to read issues from %s: %s", self.path, e)
                return []

            try:
                records = json.loads(text or "[]")
                return [Issue.from_dict(record) for record in records]
            except (ValueError, TypeError, AttributeError) as e:
                backup = self.path.with_name(self.path.name + ".corrupt")
                self.path.replace(backup)
                logger.error("Failed to read issues from %s: %s (moved to %s)", self.path, e, backup)
                return []

    def write(self, issues: Sequence[Issue]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps([issue.to_dict() for issue in issues], indent=2)

        with self.transaction():
            # Write-then-rename so readers never see a half-written file
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            tmp_path.write_text(payload + "\n", encoding="utf-8")
            tmp_path.replace(self.path)

        logger.debug("Wrote %d issues to %s", len(issues), self.path)

    def clear(self) -> None:
        with self.transaction():
            self.path.unlink(missing_ok=True)


def validate_priority(priority: int) -> None:
    """Raise ValueError unless priority is within PRIORITY_RANGE."""
    min_priority, max_priority = PRIORITY_RANGE
    if not (min_priority <= priority <= max_priority):
        raise ValueError(f"Priority must be between {min_priority} and {max_priority}, got {priority}")


class LocalIssueStore:
    """IssueStore that owns the whole snapshot in a SnapshotStorage.

    Every mutation reads the snapshot, builds a changed copy, and writes it
    back, all inside storage.transaction() so concurrent writers cannot
    interleave. Issues are immutable, so updates go through dataclasses.replace().
    """

    def __init__(self, storage: SnapshotStorage):
        self.storage = storage

    def list_issues(
        self,
        status: Optional[IssueStatus] = None,
        priority: Optional[int] = None,
        assignee: Optional[str] = None,
    ) -> List[Issue]:
        return filter_issues(self.storage.read(), status=status, priority=priority, assignee=assignee)

    def get_issue(self, issue_id: str) -> Issue:
        for issue in self.storage.read():
            if issue.id == issue_id:
                return issue
        raise IssueNotFoundError(issue_id)

    def create_issue(
        self,
        title: str,
        description: Optional[str] = None,
        type: IssueType = IssueType.TASK,
        priority: int = DEFAULT_PRIORITY,
        assignee: Optional[str] = None,
        labels: Sequence[str] = (),
    ) -> Issue:
        """Create a new open issue.

        Raises:
            ValueError: If title is blank, or type or priority is invalid
        """
        if not title or not title.strip():
            raise ValueError("Title must not be empty")
        validate_priority(priority)
        issue_type = IssueType.parse(type)

        with self.storage.transaction():
            issues = self.storage.read()
            now = get_timestamp_ms()

            issue = Issue(
                id=generate_issue_id(existing_ids={i.id for i in issues}),
                title=title,
                description=description,
                status=IssueStatus.OPEN,
                type=issue_type,
                priority=priority,
                assignee=assignee,
                created_at=now,
                updated_at=now,
                labels=tuple(labels),
            )

            self.storage.write(issues + [issue])

        logger.info("Created %s: %s", issue.id, title)
        return issue

    def update_issue(
        self,
        issue_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status: Optional[IssueStatus] = None,
        type: Optional[IssueType] = None,
        priority: Optional[int] = None,
        assignee: Optional[str] = None,
        labels: Optional[Sequence[str]] = None,
    ) -> Issue:
        """Update issue fields. Fields left as None keep their value.

        Raises:
            IssueNotFoundError: If issue_id does not exist
            ValueError: If title is blank, or status, type or priority is invalid
        """
        changes = {}

        if title is not None:
            if not title.strip():
                raise ValueError("Title must not be empty")
            changes["title"] = title

        if description is not None:
            changes["description"] = description

        if type is not None:
            changes["type"] = IssueType.parse(type)

        if priority is not None:
            validate_priority(priority)
            changes["priority"] = priority

        if assignee is not None:
            changes["assignee"] = assignee

        if labels is not None:
            changes["labels"] = tuple(labels)

        new_status = IssueStatus.parse(status) if status is not None else None

        def apply(issue: Issue, now: int) -> Issue:
            fields = dict(changes)
            if new_status is not None:
                fields["status"] = new_status
                if new_status.is_terminal and not issue.is_closed:
                    fields["closed_at"] = now
                elif not new_status.is_terminal:
                    # Reopening clears closed_at
                    fields["closed_at"] = None
            return dataclasses.replace(issue, **fields)

        return self._modify(issue_id, apply)

    def close_issue(self, issue_id: str) -> Issue:
        return self.update_issue(issue_id, status=IssueStatus.CLOSED)

    def delete_issue(self, issue_id: str) -> None:
        """Delete an issue.

        Edges on other issues that point at it are left in place and become
        dangling.
        """
        with self.storage.transaction():
            issues = self.storage.read()
            remaining = [issue for issue in issues if issue.id != issue_id]
            if len(remaining) == len(issues):
                raise IssueNotFoundError(issue_id)

            self.storage.write(remaining)
        logger.info("Deleted %s", issue_id)

    def add_dependency(self, issue_id: str, dependency: Dependency) -> None:
        """Add a dependency edge to an issue.

        The target does not have to exist. Adding an edge that is already
        present leaves the issue untouched, updated_at included.

        Raises:
            IssueNotFoundError: If issue_id does not exist
            ValueError: If the dependency type is invalid
        """
        dependency = Dependency(DependencyType.parse(dependency.type), dependency.target_id)

        with self.storage.transaction():
            if dependency in self.get_issue(issue_id).dependencies:
                logger.debug("Dependency %s -> %s already present", issue_id, dependency.target_id)
                return

            self._modify(
                issue_id,
                lambda issue, now: dataclasses.replace(
                    issue, dependencies=issue.dependencies + (dependency,)
                ),
            )

    def remove_dependency(self, issue_id: str, target_id: str) -> None:
        """Remove every edge from issue_id to target_id.

        Raises:
            IssueNotFoundError: If issue_id does not exist
        """
        self._modify(
            issue_id,
            lambda issue, now: dataclasses.replace(
                issue,
                dependencies=tuple(d for d in issue.dependencies if d.target_id != target_id),
            ),
        )

    def get_ready_issues(self) -> List[Issue]:
        return sort_issues(get_ready_issues_local(self.storage.read()))

    def _modify(self, issue_id, change) -> Issue:
        with self.storage.transaction():
            issues = self.storage.read()
            now = get_timestamp_ms()

            for position, issue in enumerate(issues):
                if issue.id == issue_id:
                    updated = dataclasses.replace(change(issue, now), updated_at=max(now, issue.created_at))
                    issues[position] = updated
                    self.storage.write(issues)
                    break
            else:
                raise IssueNotFoundError(issue_id)

        logger.debug("Updated %s", issue_id)
        return updated
