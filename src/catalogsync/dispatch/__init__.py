"""Batch dispatch engine for classification submissions."""

from catalogsync.dispatch.confirmation import (
    AcceptAll,
    Confirmation,
    LogOnly,
    PromptConfirmation,
)
from catalogsync.dispatch.dispatcher import CategorizationDispatcher, DispatchOutcome
from catalogsync.dispatch.exclusion import (
    ExclusionMatch,
    find_exclusion,
    should_exclude,
)
from catalogsync.dispatch.progress import (
    ProgressEstimator,
    ProgressEvent,
    ProgressObserver,
    estimate_remaining,
)
from catalogsync.dispatch.quota import effective_max
from catalogsync.dispatch.summary import SummaryReporter
from catalogsync.dispatch.sync_trigger import SyncTrigger, SyncTriggerResult

__all__ = [
    # Dispatcher
    "CategorizationDispatcher",
    "DispatchOutcome",
    # Filtering, quota and progress
    "ExclusionMatch",
    "find_exclusion",
    "should_exclude",
    "effective_max",
    "ProgressEstimator",
    "ProgressEvent",
    "ProgressObserver",
    "estimate_remaining",
    # Reporting and follow-up
    "SummaryReporter",
    "SyncTrigger",
    "SyncTriggerResult",
    # Confirmation gates
    "AcceptAll",
    "Confirmation",
    "LogOnly",
    "PromptConfirmation",
]
