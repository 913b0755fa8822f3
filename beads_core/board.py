"""Issue board for beads-board - a snapshot kept in step with an IssueStore.

The board holds the last snapshot it fetched successfully. Mutations go to
the store, then the whole snapshot is fetched again; a failed mutation
leaves the snapshot as it was.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from beads_core.constants import DEFAULT_PRIORITY
from beads_core.exceptions import BeadsError
from beads_core.models import Dependency, Issue, IssueStatus, IssueType
from beads_core.queries import get_issues_by_status, get_ready_issues_local, sort_issues
from beads_core.store import IssueStore

__all__ = ["IssueBoard"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class IssueBoard:
    def __init__(self, store: IssueStore):
        self.store = store
        self._issues: Tuple[Issue, ...] = ()

    @property
    def issues(self) -> Tuple[Issue, ...]:
        """The last snapshot fetched successfully."""
        return self._issues

    def load(self) -> Tuple[Issue, ...]:
        """Fetch the snapshot. Errors propagate to the caller."""
        self._issues = tuple(self.store.list_issues())
        return self._issues

    def refresh(self) -> None:
        """Fetch the snapshot again, keeping the old one if that fails."""
        try:
            self.load()
        except BeadsError as e:
            logger.error("Failed to refresh issues: %s", e)

    def _execute(self, operation: Callable[[], T], success: str, failure: str) -> T:
        try:
            result = operation()
        except (BeadsError, ValueError) as e:
            logger.error("%s: %s", failure, e)
            raise
        self.refresh()
        logger.info(success)
        return result

    def create_issue(
        self,
        title: str,
        description: Optional[str] = None,
        type: IssueType = IssueType.TASK,
        priority: int = DEFAULT_PRIORITY,
        assignee: Optional[str] = None,
        labels: Sequence[str] = (),
    ) -> Issue:
        return self._execute(
            lambda: self.store.create_issue(
                title,
                description=description,
                type=type,
                priority=priority,
                assignee=assignee,
                labels=labels,
            ),
            "Created issue",
            "Failed to create issue",
        )

    def update_issue(self, issue_id: str, **fields) -> Issue:
        return self._execute(
            lambda: self.store.update_issue(issue_id, **fields),
            f"Updated {issue_id}",
            "Failed to update issue",
        )

    def close_issue(self, issue_id: str) -> Issue:
        return self._execute(
            lambda: self.store.close_issue(issue_id),
            f"Closed {issue_id}",
            "Failed to close issue",
        )

    def delete_issue(self, issue_id: str) -> None:
        self._execute(
            lambda: self.store.delete_issue(issue_id),
            f"Deleted {issue_id}",
            "Failed to delete issue",
        )

    def add_dependency(self, issue_id: str, dependency: Dependency) -> None:
        self._execute(
            lambda: self.store.add_dependency(issue_id, dependency),
            "Dependency added",
            "Failed to add dependency",
        )

    def remove_dependency(self, issue_id: str, target_id: str) -> None:
        self._execute(
            lambda: self.store.remove_dependency(issue_id, target_id),
            "Dependency removed",
            "Failed to remove dependency",
        )

    def ready_issues(self) -> List[Issue]:
        """Ready issues from the store, or computed from the snapshot.

        The store's own ready list is preferred; if the store cannot provide
        one, readiness is derived locally from the current snapshot.
        """
        try:
            return self.store.get_ready_issues()
        except BeadsError as e:
            logger.warning("Store ready list unavailable, computing locally: %s", e)
            return sort_issues(get_ready_issues_local(self._issues))

    def issues_by_status(self, status: IssueStatus) -> List[Issue]:
        return get_issues_by_status(status, self._issues)
