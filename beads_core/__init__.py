"""beads-board - dependency-aware views over a beads issue snapshot.

This package provides the query engine, the issue stores, and the CLI.
Import from here for the public API.
"""

from beads_core.exceptions import (
    BeadsError,
    IssueNotFoundError,
    BridgeError,
    IDCollisionError,
    LockError,
)
from beads_core.constants import (
    PRIORITY_RANGE,
    DEFAULT_PRIORITY,
    ID_PREFIX,
    HASH_LENGTH,
)
from beads_core.models import (
    IssueStatus,
    IssueType,
    DependencyType,
    Dependency,
    Issue,
)
from beads_core.utils import (
    get_timestamp_ms,
    parse_timestamp,
    format_timestamp,
    file_lock,
)
from beads_core.ids import generate_issue_id
from beads_core.queries import (
    EpicProgress,
    EpicGroup,
    get_blockers,
    get_blocked,
    get_children,
    get_parent,
    get_related,
    is_issue_ready,
    get_blocked_issues,
    get_ready_issues_local,
    get_epics,
    get_issues_without_parent,
    sort_issues,
    get_issues_by_status,
    get_epic_progress,
    group_by_epic,
    get_board_columns,
    search_issues,
    filter_issues,
    get_hierarchy,
)
from beads_core.store import (
    IssueStore,
    SnapshotStorage,
    MemoryStorage,
    JsonFileStorage,
    LocalIssueStore,
)
from beads_core.bridge import BdCliStore
from beads_core.board import IssueBoard
from beads_core.config import (
    BeadsConfig,
    get_beads_home,
    load_config,
    create_store,
    configure_logging,
)
from beads_core.sample_data import sample_issues, initialize_sample_data
from beads_core.cli import app, main

__all__ = [
    # Exceptions
    "BeadsError",
    "IssueNotFoundError",
    "BridgeError",
    "IDCollisionError",
    "LockError",
    # Constants
    "PRIORITY_RANGE",
    "DEFAULT_PRIORITY",
    "ID_PREFIX",
    "HASH_LENGTH",
    # Models
    "IssueStatus",
    "IssueType",
    "DependencyType",
    "Dependency",
    "Issue",
    # Utils
    "get_timestamp_ms",
    "parse_timestamp",
    "format_timestamp",
    "file_lock",
    # IDs
    "generate_issue_id",
    # Queries
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
    # Stores
    "IssueStore",
    "SnapshotStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "LocalIssueStore",
    "BdCliStore",
    # Board
    "IssueBoard",
    # Config
    "BeadsConfig",
    "get_beads_home",
    "load_config",
    "create_store",
    "configure_logging",
    # Sample data
    "sample_issues",
    "initialize_sample_data",
    # CLI
    "app",
    "main",
]
