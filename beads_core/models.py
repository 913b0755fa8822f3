"""Issue data model for beads-board - statuses, types, edges, issues."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from beads_core.constants import DEFAULT_PRIORITY
from beads_core.utils import parse_timestamp

__all__ = [
    "IssueStatus",
    "IssueType",
    "DependencyType",
    "Dependency",
    "Issue",
]


class IssueStatus(str, Enum):
    """Lifecycle state of an issue. CLOSED is the only terminal state."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    CLOSED = "closed"

    @classmethod
    def parse(cls, value: Any) -> "IssueStatus":
        """Parse a status, accepting the legacy "done" spelling of closed.

        Raises:
            ValueError: If value is not a known status
        """
        if isinstance(value, cls):
            return value
        if value == "done":
            return cls.CLOSED
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Invalid status: {value}. Must be one of {[s.value for s in cls]}"
            ) from None

    @property
    def is_terminal(self) -> bool:
        return self is IssueStatus.CLOSED


class IssueType(str, Enum):
    """Kind of issue. EPIC is a grouping container for other issues."""

    BUG = "bug"
    FEATURE = "feature"
    TASK = "task"
    EPIC = "epic"

    @classmethod
    def parse(cls, value: Any) -> "IssueType":
        """Parse an issue type; bd's "chore" is read as a task.

        Raises:
            ValueError: If value is not a known type
        """
        if isinstance(value, cls):
            return value
        if value == "chore":
            return cls.TASK
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Invalid issue type: {value}. Must be one of {[t.value for t in cls]}"
            ) from None


class DependencyType(str, Enum):
    """Kind of dependency edge. Only BLOCKS and PARENT affect queries."""

    BLOCKS = "blocks"
    RELATED = "related"
    PARENT = "parent"
    CHILD = "child"
    DISCOVERED_FROM = "discovered-from"

    @classmethod
    def parse(cls, value: Any) -> "DependencyType":
        """Parse an edge type; bd's "parent-child" is read as parent.

        Raises:
            ValueError: If value is not a known edge type
        """
        if isinstance(value, cls):
            return value
        if value == "parent-child":
            return cls.PARENT
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Invalid dependency type: {value}. Must be one of {[t.value for t in cls]}"
            ) from None


@dataclass(frozen=True)
class Dependency:
    """A typed edge owned by the issue that declares it."""

    type: DependencyType
    target_id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dependency":
        """Build an edge from either the web shape or a bd record.

        bd may describe a dependency as {"depends_on_id", "type"} or as a
        full issue record carrying "dependency_type".
        """
        dep_type = data.get("dependency_type") or data.get("type") or DependencyType.BLOCKS
        target_id = (
            data.get("targetId")
            or data.get("target_id")
            or data.get("depends_on_id")
            or data.get("id")
        )
        if not target_id:
            raise ValueError(f"Dependency has no target: {data!r}")
        return cls(type=DependencyType.parse(dep_type), target_id=str(target_id))

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type.value, "targetId": self.target_id}


@dataclass(frozen=True)
class Issue:
    """One unit of work.

    Timestamps are epoch milliseconds. Instances are immutable; stores build
    changed copies with dataclasses.replace().
    """

    id: str
    title: str
    status: IssueStatus = IssueStatus.OPEN
    type: IssueType = IssueType.TASK
    priority: int = DEFAULT_PRIORITY
    description: Optional[str] = None
    assignee: Optional[str] = None
    dependencies: Tuple[Dependency, ...] = ()
    created_at: int = 0
    updated_at: int = 0
    closed_at: Optional[int] = None
    labels: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_closed(self) -> bool:
        return self.status.is_terminal

    def edges_of(self, dep_type: DependencyType) -> Tuple[Dependency, ...]:
        """Edges of one type, in declaration order."""
        return tuple(dep for dep in self.dependencies if dep.type == dep_type)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        """Build an issue from a JSON record.

        Accepts the camelCase web shape (createdAt, targetId, tags) and the
        snake_case shape bd emits (issue_type, created_at as ISO strings).

        Raises:
            ValueError: If id or title is missing, or an enum value is unknown
        """
        if not data.get("id"):
            raise ValueError(f"Issue record has no id: {data!r}")
        if not data.get("title"):
            raise ValueError(f"Issue {data['id']} has no title")

        created_at = parse_timestamp(_first(data, "createdAt", "created_at")) or 0
        updated_at = parse_timestamp(_first(data, "updatedAt", "updated_at"))

        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            status=IssueStatus.parse(data.get("status", IssueStatus.OPEN.value)),
            type=IssueType.parse(_first(data, "type", "issue_type") or IssueType.TASK.value),
            priority=int(data.get("priority", DEFAULT_PRIORITY)),
            description=data.get("description") or None,
            assignee=data.get("assignee") or None,
            dependencies=tuple(
                Dependency.from_dict(dep) for dep in data.get("dependencies") or []
            ),
            created_at=created_at,
            updated_at=updated_at if updated_at is not None else created_at,
            closed_at=parse_timestamp(_first(data, "closedAt", "closed_at")),
            labels=tuple(data.get("labels") or data.get("tags") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON shape, omitting unset optionals."""
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "type": self.type.value,
            "priority": self.priority,
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "labels": list(self.labels),
        }
        if self.description is not None:
            data["description"] = self.description
        if self.assignee is not None:
            data["assignee"] = self.assignee
        if self.closed_at is not None:
            data["closedAt"] = self.closed_at
        return data


def _first(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None
