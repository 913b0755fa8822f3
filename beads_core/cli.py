"""CLI module for beads-board - typer app and all commands."""

from typing import List, NoReturn, Optional

import typer
from typing_extensions import Annotated

from beads_core.board import IssueBoard
from beads_core.config import BeadsConfig, configure_logging, create_store, load_config
from beads_core.constants import STATUS_MARKERS
from beads_core.exceptions import BeadsError
from beads_core.models import Dependency, DependencyType, Issue, IssueStatus, IssueType
from beads_core.queries import (
    get_blocked,
    get_blocked_issues,
    get_blockers,
    get_board_columns,
    get_children,
    get_hierarchy,
    get_parent,
    get_related,
    group_by_epic,
    search_issues,
    sort_issues,
)
from beads_core.sample_data import initialize_sample_data
from beads_core.store import JsonFileStorage
from beads_core.utils import format_timestamp

__all__ = ["app", "main"]

app = typer.Typer(help="beads-board - dependency-aware views over beads issues")


@app.callback()
def configure(
    ctx: typer.Context,
    backend: Annotated[Optional[str], typer.Option(help="Issue backend: local or bd")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
):
    """Resolve configuration and logging before any command runs."""
    try:
        config = load_config(backend)
    except ValueError as e:
        _fail(str(e))

    configure_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config


def _fail(message: str) -> NoReturn:
    print(f"Error: {message}")
    raise typer.Exit(code=1)


def _open_board(ctx: typer.Context) -> IssueBoard:
    board = IssueBoard(create_store(ctx.obj))
    try:
        board.load()
    except BeadsError as e:
        _fail(f"Cannot load issues: {e}")
    return board


def _find(board: IssueBoard, issue_id: str) -> Issue:
    for issue in board.issues:
        if issue.id == issue_id:
            return issue
    _fail(f"Issue {issue_id} not found")


def _line(issue: Issue) -> str:
    marker = STATUS_MARKERS.get(issue.status.value, "?")
    return f"{marker} {issue.id} [P{issue.priority}] {issue.title}"


def _parse_status(value: Optional[str]) -> Optional[IssueStatus]:
    if value is None:
        return None
    try:
        return IssueStatus.parse(value)
    except ValueError as e:
        _fail(str(e))


def _parse_type(value: Optional[str]) -> Optional[IssueType]:
    if value is None:
        return None
    try:
        return IssueType.parse(value)
    except ValueError as e:
        _fail(str(e))


@app.command()
def init(
    ctx: typer.Context,
    sample: Annotated[bool, typer.Option("--sample", help="Seed demo issues")] = False,
):
    """Initialize the local issue store."""
    config: BeadsConfig = ctx.obj
    if config.backend != "local":
        _fail("init only applies to the local backend")

    storage = JsonFileStorage(config.data_path, lock_path=config.lock_path)
    with storage.transaction():
        if not config.data_path.exists():
            storage.write([])

    print(f"Initialized local store: {config.data_path}")

    if sample:
        if initialize_sample_data(storage):
            print("Loaded sample issues")
        else:
            print("Store already has issues, sample data not loaded")


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    status: Annotated[Optional[str], typer.Option(help="Filter by status")] = None,
    priority: Annotated[Optional[int], typer.Option(help="Filter by priority (0-4)")] = None,
    assignee: Annotated[Optional[str], typer.Option(help="Filter by assignee")] = None,
    search: Annotated[Optional[str], typer.Option(help="Search id, title, and description")] = None,
):
    """List issues by priority, most recently updated first."""
    status_filter = _parse_status(status)
    store = create_store(ctx.obj)

    try:
        issues = store.list_issues(status=status_filter, priority=priority, assignee=assignee)
    except BeadsError as e:
        _fail(f"Cannot load issues: {e}")

    issues = sort_issues(search_issues(issues, search))

    if not issues:
        print("No issues found")
        return

    for issue in issues:
        print(_line(issue))


@app.command()
def ready(ctx: typer.Context):
    """Show ready work (open and not blocked)."""
    board = _open_board(ctx)
    ready_issues = board.ready_issues()

    if not ready_issues:
        print("No ready work")
        return

    print("Ready work (not blocked):\n")
    for issue in ready_issues:
        print(_line(issue))

        parent = get_parent(issue, board.issues)
        if parent:
            print(f"   └─ child of: {parent.id} - {parent.title}")


@app.command()
def blocked(ctx: typer.Context):
    """Show open issues waiting on unfinished blockers."""
    board = _open_board(ctx)
    blocked_issues = sort_issues(get_blocked_issues(board.issues))

    if not blocked_issues:
        print("No blocked issues")
        return

    for issue in blocked_issues:
        print(_line(issue))
        for blocker in get_blockers(issue, board.issues):
            if not blocker.is_closed:
                print(f"   └─ blocked by: {blocker.id} - {blocker.title} [{blocker.status.value}]")


@app.command()
def show(
    ctx: typer.Context,
    issue_id: Annotated[str, typer.Argument(help="Issue ID")],
):
    """Show issue details."""
    board = _open_board(ctx)
    issue = _find(board, issue_id)
    snapshot = board.issues

    print(f"ID:          {issue.id}")
    print(f"Title:       {issue.title}")
    print(f"Type:        {issue.type.value}")
    print(f"Status:      {issue.status.value}")
    print(f"Priority:    {issue.priority}")
    if issue.assignee:
        print(f"Assignee:    {issue.assignee}")
    if issue.labels:
        print(f"Labels:      {', '.join(issue.labels)}")
    print(f"Created:     {format_timestamp(issue.created_at)}")
    print(f"Updated:     {format_timestamp(issue.updated_at)}")
    if issue.closed_at is not None:
        print(f"Closed:      {format_timestamp(issue.closed_at)}")

    if issue.description:
        print(f"\nDescription:\n{issue.description}")

    parent = get_parent(issue, snapshot)
    if parent:
        print(f"\nParent:\n  {_line(parent)}")

    sections = [
        ("Blocked by", get_blockers(issue, snapshot)),
        ("Blocks", get_blocked(issue.id, snapshot)),
        ("Children", get_children(issue.id, snapshot)),
        ("Related", get_related(issue, snapshot)),
    ]
    for title, issues in sections:
        if issues:
            print(f"\n{title}:")
            for other in issues:
                print(f"  {_line(other)}")


@app.command()
def create(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Issue title")],
    description: Annotated[Optional[str], typer.Option(help="Detailed description")] = None,
    issue_type: Annotated[str, typer.Option("--type", help="bug, feature, task, or epic")] = "task",
    priority: Annotated[int, typer.Option(help="Priority level (0-4)")] = 2,
    assignee: Annotated[Optional[str], typer.Option(help="Assignee")] = None,
    label: Annotated[Optional[List[str]], typer.Option(help="Label (repeatable)")] = None,
    parent: Annotated[Optional[str], typer.Option(help="Parent issue ID")] = None,
    blocked_by: Annotated[Optional[str], typer.Option(help="ID of an issue that blocks this one")] = None,
):
    """Create a new issue."""
    board = IssueBoard(create_store(ctx.obj))

    try:
        issue = board.create_issue(
            title,
            description=description,
            type=_parse_type(issue_type),
            priority=priority,
            assignee=assignee,
            labels=label or (),
        )
        if parent:
            board.add_dependency(issue.id, Dependency(DependencyType.PARENT, parent))
        if blocked_by:
            board.add_dependency(issue.id, Dependency(DependencyType.BLOCKS, blocked_by))
    except (BeadsError, ValueError) as e:
        _fail(str(e))

    print(f"Created {issue.id}: {title}")
    if parent:
        print(f"  Parent: {parent}")
    if blocked_by:
        print(f"  Blocked by: {blocked_by}")


@app.command()
def update(
    ctx: typer.Context,
    issue_id: Annotated[str, typer.Argument(help="Issue ID")],
    title: Annotated[Optional[str], typer.Option(help="Set title")] = None,
    description: Annotated[Optional[str], typer.Option(help="Set description")] = None,
    status: Annotated[Optional[str], typer.Option(help="Set status")] = None,
    issue_type: Annotated[Optional[str], typer.Option("--type", help="Set type")] = None,
    priority: Annotated[Optional[int], typer.Option(help="Set priority (0-4)")] = None,
    assignee: Annotated[Optional[str], typer.Option(help="Set assignee")] = None,
):
    """Update an issue."""
    board = IssueBoard(create_store(ctx.obj))

    try:
        updated = board.update_issue(
            issue_id,
            title=title,
            description=description,
            status=_parse_status(status),
            type=_parse_type(issue_type),
            priority=priority,
            assignee=assignee,
        )
    except (BeadsError, ValueError) as e:
        _fail(str(e))

    print(f"Updated {issue_id}:")
    if title:
        print(f"  Title: {updated.title}")
    if description is not None:
        print(f"  Description: {updated.description}")
    if status:
        print(f"  Status: {updated.status.value}")
    if issue_type:
        print(f"  Type: {updated.type.value}")
    if priority is not None:
        print(f"  Priority: {updated.priority}")
    if assignee:
        print(f"  Assignee: {updated.assignee}")


@app.command()
def close(
    ctx: typer.Context,
    issue_ids: Annotated[List[str], typer.Argument(help="Issue ID(s) to close")],
):
    """Close one or more issues."""
    board = IssueBoard(create_store(ctx.obj))

    closed_issues = []
    errors = []

    for issue_id in issue_ids:
        try:
            issue = board.close_issue(issue_id)
        except (BeadsError, ValueError) as e:
            errors.append(f"Warning: Cannot close {issue_id}: {e}")
            continue
        closed_issues.append((issue.id, issue.title))

    for error in errors:
        print(error)

    for issue_id, title in closed_issues:
        print(f"Closed {issue_id}: {title}")

    # Exit with error if nothing was closed
    if not closed_issues and errors:
        raise typer.Exit(code=1)


@app.command()
def delete(
    ctx: typer.Context,
    issue_id: Annotated[str, typer.Argument(help="Issue ID")],
):
    """Delete an issue. Links pointing at it are left dangling."""
    board = IssueBoard(create_store(ctx.obj))

    try:
        board.delete_issue(issue_id)
    except (BeadsError, ValueError) as e:
        _fail(str(e))

    print(f"Deleted {issue_id}")


@app.command()
def link(
    ctx: typer.Context,
    issue_id: Annotated[str, typer.Argument(help="Issue that declares the dependency")],
    target_id: Annotated[str, typer.Argument(help="Issue that is depended upon")],
    dep_type: Annotated[str, typer.Option("--type", help="blocks, parent, related, ...")] = "blocks",
):
    """Add a dependency between two issues."""
    board = IssueBoard(create_store(ctx.obj))

    try:
        dependency = Dependency(DependencyType.parse(dep_type), target_id)
        board.add_dependency(issue_id, dependency)
    except (BeadsError, ValueError) as e:
        _fail(str(e))

    if dependency.type is DependencyType.BLOCKS:
        print(f"{issue_id} is blocked by {target_id}")
    elif dependency.type is DependencyType.PARENT:
        print(f"Set {target_id} as parent of {issue_id}")
    elif dependency.type is DependencyType.RELATED:
        print(f"Linked {issue_id} <-> {target_id} (related)")
    else:
        print(f"Added {dependency.type.value} dependency: {issue_id} -> {target_id}")


@app.command()
def unlink(
    ctx: typer.Context,
    issue_id: Annotated[str, typer.Argument(help="Issue that declares the dependency")],
    target_id: Annotated[str, typer.Argument(help="Issue that is depended upon")],
):
    """Remove every dependency from one issue to another."""
    board = IssueBoard(create_store(ctx.obj))

    try:
        board.remove_dependency(issue_id, target_id)
    except (BeadsError, ValueError) as e:
        _fail(str(e))

    print(f"Removed dependency {issue_id} -> {target_id}")


@app.command()
def epics(ctx: typer.Context):
    """Show issues grouped by epic, with progress."""
    board = _open_board(ctx)
    groups, unassigned = group_by_epic(board.issues)

    if not groups and not unassigned:
        print("No issues found")
        return

    for group in groups:
        done, total, percentage = group.progress
        print(f"▸ {group.epic.id} {group.epic.title} [{done}/{total} done, {percentage:.0f}%]")
        for child in sort_issues(group.children):
            print(f"   {_line(child)}")

    if unassigned:
        print("\nUnassigned:")
        for issue in sort_issues(unassigned):
            print(f"   {_line(issue)}")


@app.command()
def board(ctx: typer.Context):
    """Show the kanban board: Blocked, Ready, In Progress, Done."""
    issue_board = _open_board(ctx)

    for column, issues in get_board_columns(issue_board.issues).items():
        print(f"{column} ({len(issues)})")
        for issue in sort_issues(issues):
            print(f"   {_line(issue)}")
        print()


@app.command()
def tree(
    ctx: typer.Context,
    issue_id: Annotated[str, typer.Argument(help="Issue ID")],
    max_depth: Annotated[int, typer.Option(help="Maximum depth to display")] = 10,
):
    """Show issue tree (parent-child hierarchy)."""
    issue_board = _open_board(ctx)
    _find(issue_board, issue_id)

    for depth, issue in get_hierarchy(issue_id, issue_board.issues, max_depth=max_depth):
        connector = "" if depth == 0 else "   " * (depth - 1) + "└─ "
        print(f"{connector}{_line(issue)} [{issue.status.value}]")


def main():
    """Main CLI entry point."""
    app()
