"""Error taxonomy for catalog classification runs.

Three situations are kept apart so operators know where to look:

- the target system could not be determined (``EndpointResolutionError``)
- the target system was reached but a call failed (``ServiceCallError`` and
  its subclasses)
- the target system rejected one item (``ItemRejected``)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogsync.dispatch.dispatcher import DispatchOutcome
    from catalogsync.models.summary import RunSummary


class CatalogSyncError(Exception):
    """Base error for catalogsync failures."""


class ConfigurationError(CatalogSyncError):
    """Run configuration is invalid. Raised before any remote call."""


class EndpointResolutionError(CatalogSyncError):
    """Could not determine which management endpoint to operate against."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Could not determine target management endpoint: {reason}")
        self.reason = reason


class ServiceCallError(CatalogSyncError):
    """Target system resolved, but a call to it failed."""


class SourceUnavailable(ServiceCallError):
    """Listing candidates or fetching the classification summary failed."""


class SubmissionChannelError(ServiceCallError):
    """Transport failure while submitting a record. Fatal to the run.

    Submissions issued before the failure remain valid; the dispatcher attaches
    what it had accumulated so callers can still report a partial summary.
    """

    def __init__(self, key: str, message: str) -> None:
        super().__init__(
            f"Target system reachable but submission of {key!r} failed: {message}"
        )
        self.key = key
        self.partial_outcome: DispatchOutcome | None = None
        self.partial_summary: RunSummary | None = None


class SyncRequestError(ServiceCallError):
    """Catalog sync request could not be issued. Never fatal to a run."""


class ItemRejected(CatalogSyncError):
    """Target system answered with a non-zero result code for one record."""

    def __init__(self, key: str, display_name: str, result_code: int) -> None:
        super().__init__(
            f"Target system rejected {display_name!r} ({key}) "
            f"with result code {result_code}"
        )
        self.key = key
        self.display_name = display_name
        self.result_code = result_code
