from __future__ import annotations

from catalogsync.models.summary import RunSummary


def test_resolved_is_before_minus_after() -> None:
    summary = RunSummary(uncategorized_before=10, uncategorized_after=7)

    assert summary.resolved == 3


def test_resolved_can_be_negative() -> None:
    summary = RunSummary(uncategorized_before=10, uncategorized_after=12)

    assert summary.resolved == -2


def test_resolved_unknown_without_after_snapshot() -> None:
    assert RunSummary(uncategorized_before=10).resolved is None


def test_to_dict_uses_camel_case_keys() -> None:
    summary = RunSummary(
        uncategorized_before=10,
        uncategorized_after=8,
        attempted=2,
        accepted=2,
        elapsed_seconds=1.23456,
        completed=True,
    )

    data = summary.to_dict()

    assert data["uncategorizedBefore"] == 10
    assert data["uncategorizedAfter"] == 8
    assert data["attempted"] == 2
    assert data["resolved"] == 2
    assert data["elapsedSeconds"] == 1.235
    assert data["dryRun"] is False
    assert data["completed"] is True
