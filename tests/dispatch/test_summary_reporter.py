from __future__ import annotations

import pytest

from catalogsync.dispatch.dispatcher import DispatchOutcome
from catalogsync.dispatch.summary import SummaryReporter
from catalogsync.errors import SourceUnavailable
from tests.fixtures.management import FakeManagementService


def create_outcome(**counters: int) -> DispatchOutcome:
    return DispatchOutcome(effective_max=10, **counters)


def test_before_then_after_computes_resolved() -> None:
    service = FakeManagementService(counts=[10, 7])
    reporter = SummaryReporter(service)

    before = reporter.before()
    summary = reporter.after(create_outcome(attempted=3, accepted=3))

    assert before is summary
    assert summary.uncategorized_before == 10
    assert summary.uncategorized_after == 7
    assert summary.resolved == 3
    assert summary.attempted == 3
    assert summary.completed is True


def test_resolved_may_be_negative() -> None:
    service = FakeManagementService(counts=[5, 9])
    reporter = SummaryReporter(service)

    reporter.before()
    summary = reporter.after(create_outcome(attempted=2))

    assert summary.resolved == -4


def test_summary_emitted_for_empty_run() -> None:
    service = FakeManagementService(counts=[4, 4])
    reporter = SummaryReporter(service)

    reporter.before()
    summary = reporter.after(create_outcome())

    assert summary.attempted == 0
    assert summary.resolved == 0


def test_after_without_before_raises() -> None:
    reporter = SummaryReporter(FakeManagementService())

    with pytest.raises(RuntimeError, match="before"):
        reporter.after(create_outcome())


def test_before_twice_raises() -> None:
    reporter = SummaryReporter(FakeManagementService())
    reporter.before()

    with pytest.raises(RuntimeError, match="already"):
        reporter.before()


def test_after_twice_raises() -> None:
    reporter = SummaryReporter(FakeManagementService())
    reporter.before()
    reporter.after(create_outcome())

    with pytest.raises(RuntimeError, match="already"):
        reporter.after(create_outcome())


def test_elapsed_is_measured_between_before_and_after() -> None:
    ticks = iter([50.0, 62.5])
    reporter = SummaryReporter(FakeManagementService(), clock=lambda: next(ticks))

    reporter.before()
    summary = reporter.after(create_outcome())

    assert summary.elapsed_seconds == pytest.approx(12.5)


def test_before_failure_propagates() -> None:
    service = FakeManagementService(fail_summary_after=0)
    reporter = SummaryReporter(service)

    with pytest.raises(SourceUnavailable):
        reporter.before()


def test_partial_summary_keeps_counters() -> None:
    service = FakeManagementService(counts=[10, 9])
    reporter = SummaryReporter(service)
    reporter.before()

    summary = reporter.partial(create_outcome(attempted=1, accepted=1))

    assert summary.attempted == 1
    assert summary.uncategorized_after == 9
    assert summary.completed is False


def test_partial_summary_tolerates_unavailable_count() -> None:
    service = FakeManagementService(counts=[10], fail_summary_after=1)
    reporter = SummaryReporter(service)
    reporter.before()

    summary = reporter.partial(create_outcome(attempted=1))

    assert summary.uncategorized_after is None
    assert summary.resolved is None
    assert summary.attempted == 1
