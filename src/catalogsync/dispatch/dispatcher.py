from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
import threading
import time
from typing import TYPE_CHECKING

import loguru
from loguru import logger

from catalogsync.dispatch.confirmation import AcceptAll, Confirmation
from catalogsync.dispatch.exclusion import ExclusionMatch, find_exclusion
from catalogsync.dispatch.progress import (
    ProgressEstimator,
    ProgressEvent,
    ProgressObserver,
)
from catalogsync.dispatch.quota import effective_max
from catalogsync.errors import ItemRejected, SubmissionChannelError

if TYPE_CHECKING:
    from catalogsync.core.config import RunConfiguration
    from catalogsync.infra.clients.management import ManagementService
    from catalogsync.models.candidate import CandidateRecord

SUBMIT_ACTION = "submit for classification"


@dataclass
class DispatchOutcome:
    """Counters accumulated by one pass of the dispatch loop."""

    effective_max: int
    attempted: int = 0
    accepted: int = 0
    rejected: int = 0
    simulated: int = 0
    excluded: int = 0
    skipped: int = 0
    declined: int = 0
    quota_reached: bool = False
    cancelled: bool = False
    rejected_keys: list[str] = field(default_factory=list)


class DispatcherLogger:
    """Handles all logging for CategorizationDispatcher."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def dispatch_start(
        self, candidate_count: int, max_items: int, dry_run: bool
    ) -> None:
        self._logger.bind(
            candidates=candidate_count, effective_max=max_items, dry_run=dry_run
        ).info(
            "Dispatching up to {} of {} candidates{}",
            max_items,
            candidate_count,
            " (dry run)" if dry_run else "",
        )

    def progress(self, event: ProgressEvent) -> None:
        eta = "n/a" if event.eta_seconds is None else f"{event.eta_seconds:.0f}s"
        self._logger.bind(
            index=event.index, total=event.total, eta_seconds=event.eta_seconds
        ).debug("[{}/{}] {} (eta {})", event.index, event.total, event.identity, eta)

    def skipped_malformed(self, record: CandidateRecord) -> None:
        self._logger.bind(display_name=record.display_name).warning(
            "Skipping {!r}: record has no key", record.display_name
        )

    def skipped_ineligible(self, record: CandidateRecord) -> None:
        self._logger.bind(key=record.key, state=record.state.value).info(
            "Skipping {}: state {} is not awaiting classification",
            record.identity,
            record.state.value,
        )

    def excluded(self, record: CandidateRecord, match: ExclusionMatch) -> None:
        self._logger.bind(
            key=record.key, rule=match.rule.pattern, field=match.field.value
        ).info(
            "Excluding {}: {} {!r} matches rule {!r}",
            record.identity,
            match.field.value,
            match.value,
            match.rule.pattern,
        )

    def declined(self, record: CandidateRecord) -> None:
        self._logger.bind(key=record.key).info(
            "Submission of {} declined", record.identity
        )

    def simulated(self, record: CandidateRecord) -> None:
        self._logger.bind(key=record.key).info(
            "DRY RUN: would submit {} for classification", record.identity
        )

    def accepted(self, record: CandidateRecord) -> None:
        self._logger.bind(key=record.key).info(
            "Submitted {} for classification", record.identity
        )

    def rejected(self, error: ItemRejected) -> None:
        self._logger.bind(key=error.key, result_code=error.result_code).warning(
            "{}", error
        )

    def channel_failure(self, record: CandidateRecord, attempted: int) -> None:
        self._logger.bind(key=record.key, attempted=attempted).error(
            "Submission channel failed on {} after {} attempted submissions",
            record.identity,
            attempted,
        )

    def quota_reached(self, attempted: int, remaining: int) -> None:
        self._logger.bind(attempted=attempted, remaining=remaining).info(
            "Quota of {} submissions reached; {} candidates left untouched",
            attempted,
            remaining,
        )

    def cancelled(self, remaining: int) -> None:
        self._logger.bind(remaining=remaining).warning(
            "Run cancelled; {} candidates left untouched", remaining
        )

    def dispatch_complete(self, outcome: DispatchOutcome) -> None:
        self._logger.bind(
            attempted=outcome.attempted,
            accepted=outcome.accepted,
            rejected=outcome.rejected,
            excluded=outcome.excluded,
            skipped=outcome.skipped,
        ).info(
            "Dispatch complete: {} attempted ({} accepted, {} rejected), "
            "{} excluded, {} skipped",
            outcome.attempted,
            outcome.accepted + outcome.simulated,
            outcome.rejected,
            outcome.excluded,
            outcome.skipped,
        )


def _check_result(record: CandidateRecord, result_code: int) -> None:
    if result_code != 0:
        raise ItemRejected(record.key, record.display_name, result_code)


class CategorizationDispatcher:
    """
    Turns a candidate list into a filtered, quota-limited sequence of
    classification submissions.

    One linear pass in source order, one candidate fully processed before the
    next, and at most one submission attempt per record. Non-zero result codes
    are per-item outcomes; a transport failure halts the run.
    """

    def __init__(
        self,
        service: ManagementService,
        *,
        confirmation: Confirmation | None = None,
        observer: ProgressObserver | None = None,
        clock: Callable[[], float] = time.monotonic,
        logger_instance: loguru.Logger = logger,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            service: Management service used for submissions
            confirmation: Gate consulted before each live submission
                (defaults to accepting everything)
            observer: Optional callback receiving one ProgressEvent per
                processed candidate
            clock: Monotonic clock used for ETA computation
            logger_instance: Logger to write diagnostics to
        """
        self._service = service
        self._confirmation = confirmation or AcceptAll()
        self._observer = observer
        self._clock = clock
        self._logger = DispatcherLogger(logger_instance)

    def run(
        self,
        candidates: Sequence[CandidateRecord],
        config: RunConfiguration,
        *,
        cancel_event: threading.Event | None = None,
    ) -> DispatchOutcome:
        """
        Dispatch candidates for classification.

        Args:
            candidates: Records in source order
            config: Run configuration (quota, exclusions, dry run)
            cancel_event: Optional event; when set, the loop stops at the next
                candidate boundary

        Returns:
            DispatchOutcome with per-run counters

        Raises:
            SubmissionChannelError: If a submission could not be issued. The
                outcome accumulated so far is attached as ``partial_outcome``.
        """
        total = len(candidates)
        outcome = DispatchOutcome(effective_max=effective_max(total, config.max_items))
        # When the quota binds, progress is measured in attempted submissions.
        quota_binds = outcome.effective_max < total
        estimator = ProgressEstimator(outcome.effective_max, clock=self._clock)
        self._logger.dispatch_start(total, outcome.effective_max, config.dry_run)

        for index, record in enumerate(candidates, start=1):
            remaining = total - index + 1
            if outcome.attempted >= outcome.effective_max:
                outcome.quota_reached = True
                self._logger.quota_reached(outcome.attempted, remaining)
                break
            if cancel_event is not None and cancel_event.is_set():
                outcome.cancelled = True
                self._logger.cancelled(remaining)
                break

            done = outcome.attempted if quota_binds else index - 1
            event = estimator.event(index, record.identity, done)
            self._logger.progress(event)
            if self._observer is not None:
                self._observer(event)

            self._process(record, config, outcome)

        self._logger.dispatch_complete(outcome)
        return outcome

    def _process(
        self,
        record: CandidateRecord,
        config: RunConfiguration,
        outcome: DispatchOutcome,
    ) -> None:
        if record.is_malformed:
            outcome.skipped += 1
            self._logger.skipped_malformed(record)
            return
        if not record.is_eligible:
            outcome.skipped += 1
            self._logger.skipped_ineligible(record)
            return

        match = find_exclusion(record, config)
        if match is not None:
            outcome.excluded += 1
            self._logger.excluded(record, match)
            return

        if config.dry_run:
            outcome.attempted += 1
            outcome.simulated += 1
            self._logger.simulated(record)
            return

        if not self._confirmation.confirm(SUBMIT_ACTION, record.identity):
            outcome.declined += 1
            self._logger.declined(record)
            return

        try:
            result_code = self._service.submit_classification_request(record.key)
        except SubmissionChannelError as e:
            self._logger.channel_failure(record, outcome.attempted)
            e.partial_outcome = outcome
            raise

        outcome.attempted += 1
        try:
            _check_result(record, result_code)
        except ItemRejected as e:
            outcome.rejected += 1
            outcome.rejected_keys.append(record.key)
            self._logger.rejected(e)
        else:
            outcome.accepted += 1
            self._logger.accepted(record)
