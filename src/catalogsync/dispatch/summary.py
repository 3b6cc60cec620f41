from __future__ import annotations

from collections.abc import Callable
import time
from typing import TYPE_CHECKING

import loguru
from loguru import logger

from catalogsync.errors import SourceUnavailable
from catalogsync.models.summary import RunSummary

if TYPE_CHECKING:
    from catalogsync.dispatch.dispatcher import DispatchOutcome
    from catalogsync.infra.clients.management import ManagementService


class SummaryReporterLogger:
    """Handles all logging for SummaryReporter."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def before(self, uncategorized: int) -> None:
        self._logger.bind(uncategorized_before=uncategorized).info(
            "Uncategorized before run: {}", uncategorized
        )

    def after(self, summary: RunSummary) -> None:
        self._logger.bind(**summary.to_dict()).info(
            "Uncategorized after run: {} (resolved {}, attempted {}, {:.1f}s)",
            summary.uncategorized_after,
            summary.resolved,
            summary.attempted,
            summary.elapsed_seconds,
        )

    def partial_after_unavailable(self, error: SourceUnavailable) -> None:
        self._logger.bind(error=str(error)).warning(
            "Could not capture after-run count for partial summary: {}", error
        )


class SummaryReporter:
    """
    Captures the uncategorized count strictly before and strictly after the
    dispatch loop and reconciles the two into a RunSummary.

    ``before`` and ``after`` are each called exactly once per run, in that
    order.
    """

    def __init__(
        self,
        service: ManagementService,
        *,
        dry_run: bool = False,
        clock: Callable[[], float] = time.monotonic,
        logger_instance: loguru.Logger = logger,
    ) -> None:
        self._service = service
        self._dry_run = dry_run
        self._clock = clock
        self._logger = SummaryReporterLogger(logger_instance)
        self._summary: RunSummary | None = None
        self._started_at: float | None = None

    @property
    def summary(self) -> RunSummary | None:
        return self._summary

    def before(self) -> RunSummary:
        """Capture the before snapshot.

        Raises:
            RuntimeError: If called more than once.
            SourceUnavailable: If the count cannot be fetched.
        """
        if self._summary is not None:
            raise RuntimeError("before() has already been captured for this run")

        self._started_at = self._clock()
        count = self._service.get_classification_summary()["uncategorized_count"]
        self._summary = RunSummary(uncategorized_before=count, dry_run=self._dry_run)
        self._logger.before(count)
        return self._summary

    def after(self, outcome: DispatchOutcome) -> RunSummary:
        """Capture the after snapshot and complete the summary.

        Raises:
            RuntimeError: If ``before`` was not called, or ``after`` already was.
            SourceUnavailable: If the count cannot be fetched.
        """
        summary = self._require_open()
        count = self._service.get_classification_summary()["uncategorized_count"]
        self._fill(summary, outcome, count)
        summary.completed = True
        self._logger.after(summary)
        return summary

    def partial(self, outcome: DispatchOutcome | None) -> RunSummary:
        """Best-effort summary after a fatal error halted the run.

        Tries once more to fetch the count; leaves ``uncategorized_after`` as
        None when that also fails.
        """
        summary = self._require_open()
        count: int | None
        try:
            count = self._service.get_classification_summary()["uncategorized_count"]
        except SourceUnavailable as e:
            self._logger.partial_after_unavailable(e)
            count = None
        self._fill(summary, outcome, count)
        return summary

    def _require_open(self) -> RunSummary:
        if self._summary is None:
            raise RuntimeError("before() must be captured before after()")
        if self._summary.completed:
            raise RuntimeError("after() has already been captured for this run")
        return self._summary

    def _fill(
        self,
        summary: RunSummary,
        outcome: DispatchOutcome | None,
        uncategorized_after: int | None,
    ) -> None:
        summary.uncategorized_after = uncategorized_after
        if outcome is not None:
            summary.attempted = outcome.attempted
            summary.accepted = outcome.accepted
            summary.rejected = outcome.rejected
            summary.simulated = outcome.simulated
            summary.excluded = outcome.excluded
            summary.skipped = outcome.skipped
            summary.declined = outcome.declined
        if self._started_at is not None:
            summary.elapsed_seconds = self._clock() - self._started_at
