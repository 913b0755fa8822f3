"""bd CLI bridge for beads-board - an IssueStore that shells out to `bd`."""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, List, Optional, Sequence

from beads_core.constants import DEFAULT_PRIORITY, LINKABLE_DEPENDENCY_TYPES
from beads_core.exceptions import BridgeError, IssueNotFoundError
from beads_core.models import Dependency, DependencyType, Issue, IssueStatus, IssueType
from beads_core.store import validate_priority

__all__ = [
    "BdCliStore",
]

logger = logging.getLogger(__name__)


class BdCliStore:
    """IssueStore backed by the bd command-line tool.

    Every call runs `bd <args> --json` in cwd and parses stdout as JSON.
    """

    def __init__(self, bd_bin: str = "bd", cwd: Optional[Path] = None):
        self.bd_bin = bd_bin
        self.cwd = Path(cwd) if cwd else None

    def run(self, args: Sequence[str]) -> Any:
        """Run a bd command and return its parsed JSON output.

        Args:
            args: Arguments after the executable name

        Returns:
            Parsed JSON; empty output yields {}

        Raises:
            BridgeError: If bd is missing, exits non-zero, or prints invalid JSON
        """
        command = [self.bd_bin, *args, "--json"]
        logger.debug("Running %s", " ".join(command))

        try:
            result = subprocess.run(
                command,
                cwd=str(self.cwd) if self.cwd else None,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            raise BridgeError(f"bd executable not found: {self.bd_bin}") from None

        if result.returncode != 0:
            message = result.stderr.strip() or f"bd command failed with code {result.returncode}"
            logger.debug("bd %s failed: %s", args[0] if args else "", message)
            raise BridgeError(message, returncode=result.returncode)

        stdout = result.stdout.strip()
        if not stdout:
            return {}

        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise BridgeError(f"Failed to parse bd output: {e}") from e

    def _issue_list(self, args: Sequence[str]) -> List[Issue]:
        payload = self.run(args)
        # bd prints either a bare array or {"issues": [...]}
        records = payload.get("issues", []) if isinstance(payload, dict) else payload
        try:
            return [Issue.from_dict(record) for record in records or []]
        except (ValueError, TypeError, AttributeError) as e:
            raise BridgeError(f"Unexpected bd output: {e}") from e

    def _single_issue(self, payload: Any) -> Issue:
        # `bd show` wraps a single issue in a one-element array
        if isinstance(payload, list):
            if not payload:
                raise BridgeError("bd returned no issue")
            payload = payload[0]
        try:
            return Issue.from_dict(payload)
        except (ValueError, TypeError, AttributeError) as e:
            raise BridgeError(f"Unexpected bd output: {e}") from e

    def list_issues(
        self,
        status: Optional[IssueStatus] = None,
        priority: Optional[int] = None,
        assignee: Optional[str] = None,
    ) -> List[Issue]:
        args = ["list"]
        if status is not None:
            args += ["--status", IssueStatus.parse(status).value]
        if priority is not None:
            args += ["--priority", str(priority)]
        if assignee:
            args += ["--assignee", assignee]
        return self._issue_list(args)

    def get_issue(self, issue_id: str) -> Issue:
        try:
            payload = self.run(["show", issue_id])
        except BridgeError as e:
            # bd ran and refused: the issue does not exist
            if e.returncode is not None:
                raise IssueNotFoundError(issue_id) from e
            raise
        return self._single_issue(payload)

    def create_issue(
        self,
        title: str,
        description: Optional[str] = None,
        type: IssueType = IssueType.TASK,
        priority: int = DEFAULT_PRIORITY,
        assignee: Optional[str] = None,
        labels: Sequence[str] = (),
    ) -> Issue:
        if not title or not title.strip():
            raise ValueError("Title must not be empty")
        validate_priority(priority)

        args = ["create", title]
        if description:
            args += ["-d", description]
        args += ["-t", IssueType.parse(type).value]
        args += ["-p", str(priority)]
        if assignee:
            args += ["-a", assignee]
        if labels:
            args += ["-l", ",".join(labels)]

        issue = self._single_issue(self.run(args))
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
        """Update an issue with one `bd update`, then re-read it.

        type and labels are not supported by `bd update` and are rejected.

        Raises:
            ValueError: If type or labels is given, or priority is invalid
            BridgeError: If bd fails
        """
        if type is not None or labels is not None:
            raise ValueError("bd update cannot change type or labels")

        args = ["update", issue_id]
        if status is not None:
            args += ["-s", IssueStatus.parse(status).value]
        if priority is not None:
            validate_priority(priority)
            args += ["-p", str(priority)]
        if assignee:
            args += ["-a", assignee]
        if title:
            args += ["--title", title]
        if description:
            args += ["-d", description]

        if len(args) > 2:
            self.run(args)

        return self._single_issue(self.run(["show", issue_id]))

    def close_issue(self, issue_id: str) -> Issue:
        return self.update_issue(issue_id, status=IssueStatus.CLOSED)

    def delete_issue(self, issue_id: str) -> None:
        self.run(["delete", issue_id, "-f"])
        logger.info("Deleted %s", issue_id)

    def add_dependency(self, issue_id: str, dependency: Dependency) -> None:
        """Link two issues with `bd link`.

        Raises:
            ValueError: If the edge type cannot be created through bd link
        """
        dep_type = DependencyType.parse(dependency.type)
        if dep_type.value not in LINKABLE_DEPENDENCY_TYPES:
            raise ValueError(f"Unknown dependency type: {dep_type.value}")

        self.run(["link", issue_id, f"--{dep_type.value}", dependency.target_id])

    def remove_dependency(self, issue_id: str, target_id: str) -> None:
        self.run(["dep", "remove", issue_id, target_id])

    def get_ready_issues(self) -> List[Issue]:
        return self._issue_list(["ready"])
