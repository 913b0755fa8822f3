"""Tests for the demo issue set."""


def test_sample_issues_shape():
    """Sample set covers an epic, a blocker chain, and a closed issue."""
    from beads_core import (
        IssueType,
        get_blocked_issues,
        get_children,
        get_epic_progress,
        sample_issues,
    )

    issues = sample_issues(now=10_000_000_000)

    assert len({i.id for i in issues}) == len(issues) == 6
    epics = [i for i in issues if i.type is IssueType.EPIC]
    assert [e.id for e in epics] == ["bd-k1l2"]
    assert [c.id for c in get_children("bd-k1l2", issues)] == ["bd-a1b2", "bd-e5f6"]
    assert [i.id for i in get_blocked_issues(issues)] == ["bd-e5f6"]
    assert get_epic_progress("bd-k1l2", issues).total == 2


def test_sample_timestamps_are_consistent():
    """No issue is updated before it was created."""
    from beads_core import sample_issues

    for issue in sample_issues(now=10_000_000_000):
        assert issue.updated_at >= issue.created_at
        if issue.closed_at is not None:
            assert issue.is_closed


def test_initialize_sample_data_only_when_empty():
    """Existing issues are never overwritten."""
    from beads_core import Issue, MemoryStorage, initialize_sample_data

    empty = MemoryStorage()
    assert initialize_sample_data(empty) is True
    assert len(empty.read()) == 6

    occupied = MemoryStorage([Issue(id="bd-1", title="Mine")])
    assert initialize_sample_data(occupied) is False
    assert [i.id for i in occupied.read()] == ["bd-1"]
