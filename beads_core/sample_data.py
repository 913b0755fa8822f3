"""Demo issues for a first run of the local store."""

from typing import List, Optional

from beads_core.models import Dependency, DependencyType, Issue, IssueStatus, IssueType
from beads_core.store import SnapshotStorage
from beads_core.utils import get_timestamp_ms

__all__ = ["sample_issues", "initialize_sample_data"]

HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS


def sample_issues(now: Optional[int] = None) -> List[Issue]:
    """A small snapshot with an epic, a blocker chain, and a closed issue."""
    if now is None:
        now = get_timestamp_ms()

    def ago(ms: int) -> int:
        return now - ms

    return [
        Issue(
            id="bd-a1b2",
            title="Set up authentication system",
            description="Implement user authentication with JWT tokens and secure password hashing.",
            status=IssueStatus.IN_PROGRESS,
            type=IssueType.FEATURE,
            priority=0,
            assignee="agent",
            dependencies=(Dependency(DependencyType.PARENT, "bd-k1l2"),),
            created_at=ago(3 * DAY_MS),
            updated_at=ago(HOUR_MS),
            labels=("backend", "security"),
        ),
        Issue(
            id="bd-c3d4",
            title="Fix memory leak in data processing",
            description="Memory use grows steadily during long runs of the data processing module.",
            status=IssueStatus.OPEN,
            type=IssueType.BUG,
            priority=1,
            created_at=ago(2 * DAY_MS),
            updated_at=ago(2 * DAY_MS),
            labels=("performance",),
        ),
        Issue(
            id="bd-e5f6",
            title="Add session sharing",
            description="Let several users join one editing session.",
            status=IssueStatus.OPEN,
            type=IssueType.FEATURE,
            priority=2,
            dependencies=(
                Dependency(DependencyType.PARENT, "bd-k1l2"),
                Dependency(DependencyType.BLOCKS, "bd-a1b2"),
            ),
            created_at=ago(DAY_MS),
            updated_at=ago(DAY_MS),
            labels=("realtime",),
        ),
        Issue(
            id="bd-g7h8",
            title="Update dependencies to latest versions",
            description="Review and update third-party packages. Check for breaking changes.",
            status=IssueStatus.OPEN,
            type=IssueType.TASK,
            priority=3,
            dependencies=(Dependency(DependencyType.RELATED, "bd-c3d4"),),
            created_at=ago(12 * HOUR_MS),
            updated_at=ago(12 * HOUR_MS),
            labels=("maintenance",),
        ),
        Issue(
            id="bd-i9j0",
            title="Design new landing page",
            description="Mockups for the updated landing page.",
            status=IssueStatus.CLOSED,
            type=IssueType.TASK,
            priority=2,
            assignee="designer",
            created_at=ago(7 * DAY_MS),
            updated_at=ago(5 * DAY_MS),
            closed_at=ago(5 * DAY_MS),
            labels=("design",),
        ),
        Issue(
            id="bd-k1l2",
            title="Implement real-time collaboration",
            description="WebSocket support for multi-user collaboration on documents.",
            status=IssueStatus.OPEN,
            type=IssueType.EPIC,
            priority=1,
            created_at=ago(4 * DAY_MS),
            updated_at=ago(4 * DAY_MS),
            labels=("backend", "realtime"),
        ),
    ]


def initialize_sample_data(storage: SnapshotStorage) -> bool:
    """Seed storage with sample_issues() if it holds no issues.

    Returns:
        True if the sample issues were written
    """
    with storage.transaction():
        if storage.read():
            return False
        storage.write(sample_issues())
    return True
