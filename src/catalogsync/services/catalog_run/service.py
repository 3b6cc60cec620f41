"""Orchestration of one catalog classification run."""

from __future__ import annotations

from collections.abc import Callable
import threading
import time

import loguru
from loguru import logger

from catalogsync.core.config import ClientSettings, RunConfiguration
from catalogsync.dispatch.confirmation import AcceptAll, Confirmation
from catalogsync.dispatch.dispatcher import CategorizationDispatcher
from catalogsync.dispatch.progress import ProgressObserver
from catalogsync.dispatch.summary import SummaryReporter
from catalogsync.dispatch.sync_trigger import SyncTrigger
from catalogsync.errors import SubmissionChannelError
from catalogsync.infra.clients.endpoint import EndpointResolver, ManagementEndpoint
from catalogsync.infra.clients.management import ManagementClient, ManagementService
from catalogsync.services.catalog_run.types import CatalogRunResult

ServiceFactory = Callable[[ManagementEndpoint], ManagementService]


def client_factory_from_settings(settings: ClientSettings) -> ServiceFactory:
    """Build a factory producing HTTP clients configured from settings."""

    def factory(endpoint: ManagementEndpoint) -> ManagementService:
        return ManagementClient(
            endpoint,
            api_token=settings.api_token,
            timeout_seconds=settings.timeout_seconds,
            verify_tls=settings.verify_tls,
        )

    return factory


class RunLogger:
    """Handles run-level logging for CatalogRunService."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def run_start(self, endpoint: ManagementEndpoint, config: RunConfiguration) -> None:
        self._logger.bind(
            endpoint=endpoint.base_url,
            max_items=config.max_items,
            dry_run=config.dry_run,
            sync_catalog=config.trigger_downstream_sync,
        ).info("Starting classification run against {}", endpoint.label)

    def candidates_fetched(self, count: int) -> None:
        self._logger.bind(count=count).info("Fetched {} candidates", count)

    def run_halted(self, error: SubmissionChannelError) -> None:
        summary = error.partial_summary
        attempted = summary.attempted if summary is not None else 0
        self._logger.bind(key=error.key, attempted=attempted).error(
            "Run halted after {} attempted submissions: {}", attempted, error
        )


class CatalogRunService:
    """Executes classification runs against a resolved management endpoint.

    The endpoint resolver and client factory are injected so the run itself
    holds no process-wide state. Order within a run: resolve endpoint, capture
    the before count, list candidates, dispatch, capture the after count, then
    optionally request a catalog sync.
    """

    def __init__(
        self,
        resolver: EndpointResolver,
        service_factory: ServiceFactory,
        *,
        confirmation: Confirmation | None = None,
        observer: ProgressObserver | None = None,
        clock: Callable[[], float] = time.monotonic,
        logger_instance: loguru.Logger = logger,
    ) -> None:
        self._resolver = resolver
        self._service_factory = service_factory
        self._confirmation = confirmation or AcceptAll()
        self._observer = observer
        self._clock = clock
        self._logger_instance = logger_instance
        self._logger = RunLogger(logger_instance)

    def execute(
        self,
        config: RunConfiguration,
        *,
        cancel_event: threading.Event | None = None,
    ) -> CatalogRunResult:
        """Execute a single run.

        Args:
            config: Validated run configuration.
            cancel_event: Optional event checked between candidates.

        Returns:
            CatalogRunResult with the completed summary.

        Raises:
            EndpointResolutionError: No endpoint could be determined; nothing
                was called.
            SourceUnavailable: The before count or the candidate list could not
                be fetched; nothing was submitted.
            SubmissionChannelError: A submission could not be issued; the run
                halted and ``partial_summary`` holds what was captured.
        """
        endpoint = self._resolver.resolve()
        service = self._service_factory(endpoint)
        self._logger.run_start(endpoint, config)

        reporter = SummaryReporter(
            service,
            dry_run=config.dry_run,
            clock=self._clock,
            logger_instance=self._logger_instance,
        )
        reporter.before()

        candidates = service.list_candidates()
        self._logger.candidates_fetched(len(candidates))

        dispatcher = CategorizationDispatcher(
            service,
            confirmation=self._confirmation,
            observer=self._observer,
            clock=self._clock,
            logger_instance=self._logger_instance,
        )
        try:
            outcome = dispatcher.run(candidates, config, cancel_event=cancel_event)
        except SubmissionChannelError as e:
            e.partial_summary = reporter.partial(e.partial_outcome)
            self._logger.run_halted(e)
            raise

        summary = reporter.after(outcome)

        sync_result = SyncTrigger(
            service,
            confirmation=self._confirmation,
            service_label=endpoint.label,
            logger_instance=self._logger_instance,
        ).trigger(config)

        return CatalogRunResult(
            endpoint=endpoint, summary=summary, outcome=outcome, sync=sync_result
        )
