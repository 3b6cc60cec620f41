from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import loguru
from loguru import logger

from catalogsync.dispatch.confirmation import AcceptAll, Confirmation
from catalogsync.errors import SyncRequestError

if TYPE_CHECKING:
    from catalogsync.core.config import RunConfiguration
    from catalogsync.infra.clients.management import ManagementService

SYNC_ACTION = "request catalog synchronization from"


@dataclass(frozen=True, slots=True)
class SyncTriggerResult:
    """What happened to a catalog sync request."""

    requested: bool
    result_code: int | None = None
    simulated: bool = False
    error: str | None = None

    @property
    def accepted(self) -> bool:
        return self.simulated or self.result_code == 0


class SyncTriggerLogger:
    """Handles all logging for SyncTrigger."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def simulated(self) -> None:
        self._logger.info("DRY RUN: would request catalog synchronization")

    def declined(self) -> None:
        self._logger.info("Catalog synchronization request declined")

    def accepted(self) -> None:
        self._logger.info("Catalog synchronization requested")

    def rejected(self, result_code: int) -> None:
        # The service throttles manual syncs (about one per twelve hours).
        self._logger.bind(result_code=result_code).warning(
            "Catalog synchronization request rejected with result code {} "
            "(the service limits how often a manual sync may run)",
            result_code,
        )

    def failed(self, error: SyncRequestError) -> None:
        self._logger.bind(error=str(error)).warning("{}", error)


class SyncTrigger:
    """
    Asks the management service to start a catalog synchronization pass.

    Run only after the after-run summary has been captured. Rejections and
    call failures are reported as warnings and never fail the run; the
    service's own rate limit is not enforced here.
    """

    def __init__(
        self,
        service: ManagementService,
        *,
        confirmation: Confirmation | None = None,
        service_label: str = "the management service",
        logger_instance: loguru.Logger = logger,
    ) -> None:
        self._service = service
        self._confirmation = confirmation or AcceptAll()
        self._service_label = service_label
        self._logger = SyncTriggerLogger(logger_instance)

    def trigger(self, config: RunConfiguration) -> SyncTriggerResult | None:
        """Request a sync when the configuration asks for one.

        Returns:
            None when no sync was asked for, otherwise the request result.
        """
        if not config.trigger_downstream_sync:
            return None

        if config.dry_run:
            self._logger.simulated()
            return SyncTriggerResult(requested=False, simulated=True)

        if not self._confirmation.confirm(SYNC_ACTION, self._service_label):
            self._logger.declined()
            return SyncTriggerResult(requested=False)

        try:
            result_code = self._service.request_catalog_sync()
        except SyncRequestError as e:
            self._logger.failed(e)
            return SyncTriggerResult(requested=True, error=str(e))

        if result_code != 0:
            self._logger.rejected(result_code)
        else:
            self._logger.accepted()
        return SyncTriggerResult(requested=True, result_code=result_code)
