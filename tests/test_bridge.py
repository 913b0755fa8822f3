"""Tests for the bd CLI bridge store."""

import subprocess

import pytest


def ok(payload):
    return (0, payload, "")


BD_ISSUE = {
    "id": "bd-1",
    "title": "From bd",
    "status": "open",
    "issue_type": "bug",
    "priority": 1,
    "created_at": "2024-01-15T10:30:00Z",
    "updated_at": "2024-01-15T11:30:00Z",
}


def test_run_appends_json_flag_and_uses_cwd(fake_bd, tmp_path):
    """Commands run as `bd <args> --json` in the configured directory."""
    from beads_core import BdCliStore

    fake = fake_bd(ok([]))

    BdCliStore(bd_bin="/opt/bd", cwd=tmp_path).list_issues()

    assert fake.commands == [["/opt/bd", "list", "--json"]]
    assert fake.calls[0]["cwd"] == str(tmp_path)


def test_run_empty_output_is_empty_dict(fake_bd):
    """No stdout parses as {}."""
    from beads_core import BdCliStore

    fake_bd(ok("  \n"))

    assert BdCliStore().run(["delete", "bd-1", "-f"]) == {}


def test_run_nonzero_exit_raises_with_stderr(fake_bd):
    """stderr becomes the error message."""
    from beads_core import BdCliStore, BridgeError

    fake_bd((1, "", "no such issue\n"))

    with pytest.raises(BridgeError, match="no such issue"):
        BdCliStore().run(["show", "bd-9"])


def test_run_nonzero_exit_without_stderr(fake_bd):
    """Exit code is reported when stderr is empty."""
    from beads_core import BdCliStore, BridgeError

    fake_bd((3, "", ""))

    with pytest.raises(BridgeError, match="bd command failed with code 3"):
        BdCliStore().run(["list"])


def test_run_invalid_json_raises(fake_bd):
    """Unparsable stdout raises BridgeError."""
    from beads_core import BdCliStore, BridgeError

    fake_bd(ok("not json"))

    with pytest.raises(BridgeError, match="Failed to parse bd output"):
        BdCliStore().run(["list"])


def test_run_missing_executable(monkeypatch):
    """A missing bd binary is a BridgeError."""
    from beads_core import BdCliStore, BridgeError

    def missing(*args, **kwargs):
        raise FileNotFoundError("bd")

    monkeypatch.setattr(subprocess, "run", missing)

    with pytest.raises(BridgeError, match="not found"):
        BdCliStore().list_issues()


def test_list_issues_passes_filters(fake_bd):
    """Filters map onto bd list flags."""
    from beads_core import BdCliStore, IssueStatus

    fake = fake_bd(ok([BD_ISSUE]))

    issues = BdCliStore().list_issues(status=IssueStatus.IN_PROGRESS, priority=0, assignee="ana")

    assert fake.commands[0] == [
        "bd", "list", "--status", "in_progress", "--priority", "0", "--assignee", "ana", "--json",
    ]
    assert [i.id for i in issues] == ["bd-1"]


@pytest.mark.parametrize("payload", [[BD_ISSUE], {"issues": [BD_ISSUE]}])
def test_list_issues_accepts_array_or_object(fake_bd, payload):
    """Both response shapes yield issues."""
    from beads_core import BdCliStore, IssueType

    fake_bd(ok(payload))

    issues = BdCliStore().list_issues()

    assert len(issues) == 1
    assert issues[0].type is IssueType.BUG
    assert issues[0].updated_at > issues[0].created_at


def test_list_issues_object_without_issues_key(fake_bd):
    """An object without issues is an empty snapshot."""
    from beads_core import BdCliStore

    fake_bd(ok({}))

    assert BdCliStore().list_issues() == []


def test_get_issue_unwraps_single_element_list(fake_bd):
    """bd show may wrap its issue in a list."""
    from beads_core import BdCliStore

    fake_bd(ok([BD_ISSUE]))

    assert BdCliStore().get_issue("bd-1").title == "From bd"


def test_get_issue_failure_is_not_found(fake_bd):
    """A failing bd show means the issue does not exist."""
    from beads_core import BdCliStore, IssueNotFoundError

    fake_bd((1, "", "not found"))

    with pytest.raises(IssueNotFoundError):
        BdCliStore().get_issue("bd-9")


def test_create_issue_builds_arguments(fake_bd):
    """create maps fields onto bd create flags."""
    from beads_core import BdCliStore

    fake = fake_bd(ok(BD_ISSUE))

    issue = BdCliStore().create_issue(
        "From bd",
        description="Body",
        type="bug",
        priority=1,
        assignee="ana",
        labels=["a", "b"],
    )

    assert fake.commands[0] == [
        "bd", "create", "From bd", "-d", "Body", "-t", "bug", "-p", "1", "-a", "ana", "-l", "a,b", "--json",
    ]
    assert issue.id == "bd-1"


def test_create_issue_validates_before_running(fake_bd):
    """Invalid input never reaches bd."""
    from beads_core import BdCliStore

    fake = fake_bd()

    with pytest.raises(ValueError):
        BdCliStore().create_issue("")
    with pytest.raises(ValueError):
        BdCliStore().create_issue("T", priority=9)

    assert fake.calls == []


def test_update_issue_runs_update_then_show(fake_bd):
    """One bd update with all changes, then bd show."""
    from beads_core import BdCliStore, IssueStatus

    fake = fake_bd(ok({}), ok({**BD_ISSUE, "status": "closed"}))

    issue = BdCliStore().update_issue("bd-1", status=IssueStatus.CLOSED, priority=0, title="New")

    assert fake.commands == [
        ["bd", "update", "bd-1", "-s", "closed", "-p", "0", "--title", "New", "--json"],
        ["bd", "show", "bd-1", "--json"],
    ]
    assert issue.is_closed


def test_update_issue_without_changes_only_shows(fake_bd):
    """Nothing to change: just re-read the issue."""
    from beads_core import BdCliStore

    fake = fake_bd(ok(BD_ISSUE))

    BdCliStore().update_issue("bd-1")

    assert fake.commands == [["bd", "show", "bd-1", "--json"]]


def test_update_issue_rejects_type_and_labels(fake_bd):
    """bd update cannot change type or labels."""
    from beads_core import BdCliStore

    fake_bd()

    with pytest.raises(ValueError):
        BdCliStore().update_issue("bd-1", type="epic")
    with pytest.raises(ValueError):
        BdCliStore().update_issue("bd-1", labels=["x"])


def test_delete_issue_forces(fake_bd):
    """delete passes -f."""
    from beads_core import BdCliStore

    fake = fake_bd(ok(""))

    BdCliStore().delete_issue("bd-1")

    assert fake.commands == [["bd", "delete", "bd-1", "-f", "--json"]]


@pytest.mark.parametrize("dep_type", ["blocks", "parent", "related"])
def test_add_dependency_uses_link(fake_bd, dep_type):
    """Linkable edge types map onto bd link flags."""
    from beads_core import BdCliStore, Dependency, DependencyType

    fake = fake_bd(ok(""))

    BdCliStore().add_dependency("bd-2", Dependency(DependencyType(dep_type), "bd-1"))

    assert fake.commands == [["bd", "link", "bd-2", f"--{dep_type}", "bd-1", "--json"]]


def test_add_dependency_rejects_unlinkable_type(fake_bd):
    """Edge types bd link does not know are rejected."""
    from beads_core import BdCliStore, Dependency, DependencyType

    fake = fake_bd()

    with pytest.raises(ValueError, match="Unknown dependency type"):
        BdCliStore().add_dependency("bd-2", Dependency(DependencyType.DISCOVERED_FROM, "bd-1"))

    assert fake.calls == []


def test_remove_dependency(fake_bd):
    """remove_dependency runs bd dep remove."""
    from beads_core import BdCliStore

    fake = fake_bd(ok(""))

    BdCliStore().remove_dependency("bd-2", "bd-1")

    assert fake.commands == [["bd", "dep", "remove", "bd-2", "bd-1", "--json"]]


def test_get_ready_issues(fake_bd):
    """Ready list comes from bd ready."""
    from beads_core import BdCliStore

    fake = fake_bd(ok({"issues": [BD_ISSUE]}))

    assert [i.id for i in BdCliStore().get_ready_issues()] == ["bd-1"]
    assert fake.commands == [["bd", "ready", "--json"]]


def test_list_issues_unknown_record_values_raise_bridge_error(fake_bd):
    """Records bd emits with values outside the enums are a BridgeError."""
    from beads_core import BdCliStore, BridgeError

    fake_bd(ok([{**BD_ISSUE, "issue_type": "message"}]))

    with pytest.raises(BridgeError, match="Unexpected bd output"):
        BdCliStore().list_issues()


def test_get_ready_issues_malformed_record_raises_bridge_error(fake_bd):
    """A record without a title cannot be read."""
    from beads_core import BdCliStore, BridgeError

    fake_bd(ok({"issues": [{"id": "bd-1"}]}))

    with pytest.raises(BridgeError, match="Unexpected bd output"):
        BdCliStore().get_ready_issues()


def test_nonzero_exit_keeps_return_code(fake_bd):
    """BridgeError carries bd's exit status."""
    from beads_core import BdCliStore, BridgeError

    fake_bd((2, "", "boom"))

    with pytest.raises(BridgeError) as excinfo:
        BdCliStore().run(["list"])

    assert excinfo.value.returncode == 2


def test_get_issue_missing_executable_is_not_not_found(monkeypatch):
    """Only a bd refusal means the issue is missing."""
    from beads_core import BdCliStore, BridgeError, IssueNotFoundError

    def missing(*args, **kwargs):
        raise FileNotFoundError("bd")

    monkeypatch.setattr(subprocess, "run", missing)

    with pytest.raises(BridgeError) as excinfo:
        BdCliStore().get_issue("bd-1")

    assert not isinstance(excinfo.value, IssueNotFoundError)
    assert excinfo.value.returncode is None


def test_get_issue_unreadable_output_is_not_not_found(fake_bd):
    """Garbage from bd show is reported as such."""
    from beads_core import BdCliStore, BridgeError, IssueNotFoundError

    fake_bd(ok("not json"))

    with pytest.raises(BridgeError, match="Failed to parse bd output") as excinfo:
        BdCliStore().get_issue("bd-1")

    assert not isinstance(excinfo.value, IssueNotFoundError)
