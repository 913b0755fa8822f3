"""Dependency queries for beads-board - readiness, hierarchy, grouping, sorting.

Every function here reads a snapshot (a sequence of issues) and returns a new
list. Nothing is mutated and nothing raises for an edge whose target is
missing from the snapshot: such dangling edges are dropped from results.
"""

from collections import OrderedDict
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from beads_core.models import DependencyType, Issue, IssueStatus, IssueType

__all__ = [
    "EpicProgress",
    "EpicGroup",
    "get_blockers",
    "get_blocked",
    "get_children",
    "get_parent",
    "get_related",
    "is_issue_ready",
    "get_blocked_issues",
    "get_ready_issues_local",
    "get_epics",
    "get_issues_without_parent",
    "sort_issues",
    "get_issues_by_status",
    "get_epic_progress",
    "group_by_epic",
    "get_board_columns",
    "search_issues",
    "filter_issues",
    "get_hierarchy",
]


class EpicProgress(NamedTuple):
    done: int
    total: int
    percentage: float


class EpicGroup(NamedTuple):
    epic: Issue
    children: List[Issue]
    progress: EpicProgress


def _index(all_issues: Sequence[Issue]) -> Dict[str, Issue]:
    # First occurrence wins if a snapshot ever repeats an id
    index: Dict[str, Issue] = {}
    for issue in all_issues:
        index.setdefault(issue.id, issue)
    return index


def _resolve(issue: Issue, dep_type: DependencyType, all_issues: Sequence[Issue]) -> List[Issue]:
    index = _index(all_issues)
    return [index[dep.target_id] for dep in issue.edges_of(dep_type) if dep.target_id in index]


def _declares(issue: Issue, dep_type: DependencyType, target_id: str) -> bool:
    return any(dep.type == dep_type and dep.target_id == target_id for dep in issue.dependencies)


def get_blockers(issue: Issue, all_issues: Sequence[Issue]) -> List[Issue]:
    """Get the issues that block this issue.

    Args:
        issue: Issue whose blocks edges are resolved
        all_issues: Snapshot

    Returns:
        Blocker issues in edge order; edges to missing issues are skipped
    """
    return _resolve(issue, DependencyType.BLOCKS, all_issues)


def get_blocked(issue_id: str, all_issues: Sequence[Issue]) -> List[Issue]:
    """Get the issues blocked by issue_id, in snapshot order."""
    return [issue for issue in all_issues if _declares(issue, DependencyType.BLOCKS, issue_id)]


def get_children(issue_id: str, all_issues: Sequence[Issue]) -> List[Issue]:
    """Get the issues declaring issue_id as parent, in snapshot order."""
    return [issue for issue in all_issues if _declares(issue, DependencyType.PARENT, issue_id)]


def get_parent(issue: Issue, all_issues: Sequence[Issue]) -> Optional[Issue]:
    """Get the parent of an issue.

    Only the first declared parent edge is considered, even if the issue
    declares several.

    Args:
        issue: Child issue
        all_issues: Snapshot

    Returns:
        Parent issue, or None if there is no parent edge or its target is missing
    """
    parent_edges = issue.edges_of(DependencyType.PARENT)
    if not parent_edges:
        return None
    return _index(all_issues).get(parent_edges[0].target_id)


def get_related(issue: Issue, all_issues: Sequence[Issue]) -> List[Issue]:
    """Get the issues linked by related edges; missing targets are skipped."""
    return _resolve(issue, DependencyType.RELATED, all_issues)


def is_issue_ready(issue: Issue, all_issues: Sequence[Issue]) -> bool:
    """Check whether an issue is ready to be worked on.

    An issue is ready when it is open and every blocker that still exists in
    the snapshot is closed. A blocks edge to a missing issue does not block.

    Args:
        issue: Issue to check
        all_issues: Snapshot

    Returns:
        True if open with no unfinished blockers
    """
    if issue.status is not IssueStatus.OPEN:
        return False

    open_blockers = [b for b in get_blockers(issue, all_issues) if not b.is_closed]
    return len(open_blockers) == 0


def get_blocked_issues(all_issues: Sequence[Issue]) -> List[Issue]:
    """Get open issues that have at least one unfinished blocker."""
    return [
        issue
        for issue in all_issues
        if issue.status is IssueStatus.OPEN and not is_issue_ready(issue, all_issues)
    ]


def get_ready_issues_local(all_issues: Sequence[Issue]) -> List[Issue]:
    """Get ready issues, in snapshot order."""
    return [issue for issue in all_issues if is_issue_ready(issue, all_issues)]


def get_epics(all_issues: Sequence[Issue]) -> List[Issue]:
    return [issue for issue in all_issues if issue.type is IssueType.EPIC]


def get_issues_without_parent(all_issues: Sequence[Issue]) -> List[Issue]:
    """Get non-epic issues that declare no parent edge.

    Only the presence of a parent edge matters: an issue whose parent edge
    points at a deleted issue still counts as having a parent.
    """
    return [
        issue
        for issue in all_issues
        if issue.type is not IssueType.EPIC and not issue.edges_of(DependencyType.PARENT)
    ]


def sort_issues(issues: Sequence[Issue]) -> List[Issue]:
    """Sort by priority (0 first), then most recently updated first.

    Returns:
        New list; the input is left untouched
    """
    return sorted(issues, key=lambda issue: (issue.priority, -issue.updated_at))


def get_issues_by_status(status: IssueStatus, all_issues: Sequence[Issue]) -> List[Issue]:
    return sort_issues([issue for issue in all_issues if issue.status is status])


def get_epic_progress(epic_id: str, all_issues: Sequence[Issue]) -> EpicProgress:
    """Count closed children of an epic.

    Returns:
        EpicProgress(done, total, percentage); (0, 0, 0.0) with no children
    """
    children = get_children(epic_id, all_issues)
    if not children:
        return EpicProgress(0, 0, 0.0)

    done = sum(1 for child in children if child.is_closed)
    total = len(children)
    return EpicProgress(done, total, done / total * 100)


def group_by_epic(all_issues: Sequence[Issue]) -> Tuple[List[EpicGroup], List[Issue]]:
    """Group issues under their epics.

    Returns:
        Tuple of (epic groups in snapshot order, unassigned issues)
    """
    groups = [
        EpicGroup(
            epic=epic,
            children=get_children(epic.id, all_issues),
            progress=get_epic_progress(epic.id, all_issues),
        )
        for epic in get_epics(all_issues)
    ]
    return groups, get_issues_without_parent(all_issues)


def get_board_columns(all_issues: Sequence[Issue]) -> "OrderedDict[str, List[Issue]]":
    """Split issues into kanban columns: Blocked, Ready, In Progress, Done."""
    columns: "OrderedDict[str, List[Issue]]" = OrderedDict()
    columns["Blocked"] = get_blocked_issues(all_issues)
    columns["Ready"] = get_ready_issues_local(all_issues)
    columns["In Progress"] = [i for i in all_issues if i.status is IssueStatus.IN_PROGRESS]
    columns["Done"] = [i for i in all_issues if i.status is IssueStatus.CLOSED]
    return columns


def search_issues(all_issues: Sequence[Issue], query: Optional[str]) -> List[Issue]:
    """Case-insensitive substring search over id, title, and description.

    A blank query matches everything.
    """
    if query is None or not query.strip():
        return list(all_issues)

    needle = query.lower()
    return [
        issue
        for issue in all_issues
        if needle in issue.id.lower()
        or needle in issue.title.lower()
        or needle in (issue.description or "").lower()
    ]


def filter_issues(
    all_issues: Sequence[Issue],
    status: Optional[IssueStatus] = None,
    priority: Optional[int] = None,
    assignee: Optional[str] = None,
) -> List[Issue]:
    """Filter issues by exact status, priority, and assignee (None = any)."""
    return [
        issue
        for issue in all_issues
        if (status is None or issue.status is status)
        and (priority is None or issue.priority == priority)
        and (assignee is None or issue.assignee == assignee)
    ]


def get_hierarchy(
    issue_id: str,
    all_issues: Sequence[Issue],
    max_depth: int = 10,
) -> List[Tuple[int, Issue]]:
    """Walk the parent/child tree rooted at issue_id.

    Args:
        issue_id: Root issue ID
        all_issues: Snapshot
        max_depth: Deepest level to include (root is depth 0)

    Returns:
        Depth-first list of (depth, issue); empty if the root is missing.
        Each issue appears at most once, so parent cycles terminate.
    """
    root = _index(all_issues).get(issue_id)
    if root is None:
        return []

    result: List[Tuple[int, Issue]] = []
    visited = set()
    stack = [(0, root)]

    while stack:
        depth, issue = stack.pop()
        if issue.id in visited or depth > max_depth:
            continue
        visited.add(issue.id)
        result.append((depth, issue))

        # Reversed so children come off the stack in snapshot order
        for child in reversed(get_children(issue.id, all_issues)):
            if child.id not in visited:
                stack.append((depth + 1, child))

    return result
