"""Result types for catalog classification runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from catalogsync.dispatch.dispatcher import DispatchOutcome
    from catalogsync.dispatch.sync_trigger import SyncTriggerResult
    from catalogsync.infra.clients.endpoint import ManagementEndpoint
    from catalogsync.models.summary import RunSummary


@dataclass(frozen=True, slots=True)
class CatalogRunResult:
    """Outcome of a completed run.

    Returned by ``CatalogRunService.execute``.
    """

    endpoint: ManagementEndpoint
    summary: RunSummary
    outcome: DispatchOutcome
    sync: SyncTriggerResult | None = None

    def to_dict(self) -> dict[str, Any]:
        data = self.summary.to_dict()
        data["endpoint"] = self.endpoint.base_url
        data["quotaReached"] = self.outcome.quota_reached
        data["cancelled"] = self.outcome.cancelled
        data["rejectedKeys"] = list(self.outcome.rejected_keys)
        if self.sync is None:
            data["catalogSync"] = None
        else:
            data["catalogSync"] = {
                "requested": self.sync.requested,
                "simulated": self.sync.simulated,
                "resultCode": self.sync.result_code,
                "error": self.sync.error,
            }
        return data
