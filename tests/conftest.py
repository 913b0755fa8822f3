"""Shared pytest fixtures for beads-board tests."""

import json
import subprocess

import pytest


@pytest.fixture
def make_issue():
    """Factory for Issue records.

    Dependencies are given as (type, target_id) pairs:
        make_issue("bd-0002", blocks=["bd-0001"], parent="bd-epic")
    """
    from beads_core import Dependency, DependencyType, Issue, IssueStatus, IssueType

    def _make(
        issue_id,
        title=None,
        status="open",
        issue_type="task",
        priority=2,
        updated_at=1_000,
        created_at=None,
        blocks=(),
        parent=None,
        related=(),
        dependencies=(),
        **kwargs,
    ):
        deps = [Dependency(DependencyType.BLOCKS, target) for target in blocks]
        if parent is not None:
            deps.append(Dependency(DependencyType.PARENT, parent))
        deps += [Dependency(DependencyType.RELATED, target) for target in related]
        deps += [Dependency(DependencyType(t), target) for t, target in dependencies]

        return Issue(
            id=issue_id,
            title=title or f"Issue {issue_id}",
            status=IssueStatus.parse(status),
            type=IssueType(issue_type),
            priority=priority,
            dependencies=tuple(deps),
            created_at=created_at if created_at is not None else min(updated_at, 1_000),
            updated_at=updated_at,
            **kwargs,
        )

    return _make


@pytest.fixture
def memory_store():
    """LocalIssueStore over an empty in-memory snapshot."""
    from beads_core import LocalIssueStore, MemoryStorage

    return LocalIssueStore(MemoryStorage())


@pytest.fixture
def beads_home(tmp_path, monkeypatch):
    """Point BEADS_HOME at a temporary directory and select the local backend."""
    home = tmp_path / ".beads-board"
    monkeypatch.setenv("BEADS_HOME", str(home))
    monkeypatch.setenv("BEADS_BACKEND", "local")
    monkeypatch.delenv("BEADS_LOG_LEVEL", raising=False)
    return home


class FakeBd:
    """Stands in for subprocess.run, answering bd commands from a queue.

    Each response is (returncode, stdout, stderr); a non-string stdout is
    dumped as JSON. Once the queue is empty every command succeeds silently.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def __call__(self, command, cwd=None, capture_output=False, text=False, check=False):
        self.calls.append({"command": command, "cwd": cwd})
        returncode, stdout, stderr = self.responses.pop(0) if self.responses else (0, "", "")
        if not isinstance(stdout, str):
            stdout = json.dumps(stdout)
        return subprocess.CompletedProcess(command, returncode, stdout=stdout, stderr=stderr)

    @property
    def commands(self):
        return [call["command"] for call in self.calls]


@pytest.fixture
def fake_bd(monkeypatch):
    """Install a FakeBd answering with the given responses."""

    def install(*responses):
        fake = FakeBd(*responses)
        monkeypatch.setattr(subprocess, "run", fake)
        return fake

    return install
