from __future__ import annotations

from catalogsync.core.config import RunConfiguration
from catalogsync.dispatch.confirmation import LogOnly
from catalogsync.dispatch.sync_trigger import SyncTrigger
from tests.fixtures.management import FakeManagementService


def test_no_sync_when_not_requested() -> None:
    service = FakeManagementService()

    result = SyncTrigger(service).trigger(RunConfiguration.build())

    assert result is None
    assert service.sync_calls == 0


def test_sync_requested_and_accepted() -> None:
    service = FakeManagementService()

    result = SyncTrigger(service).trigger(RunConfiguration.build(sync_catalog=True))

    assert result is not None
    assert result.requested is True
    assert result.accepted is True
    assert service.sync_calls == 1


def test_rejected_sync_is_a_warning_not_an_error(log_records) -> None:
    service = FakeManagementService(sync_result_code=3)

    result = SyncTrigger(service).trigger(RunConfiguration.build(sync_catalog=True))

    assert result is not None
    assert result.accepted is False
    assert result.result_code == 3
    assert any(r["level"].name == "WARNING" for r in log_records)


def test_sync_call_failure_is_reported_not_raised() -> None:
    service = FakeManagementService(fail_sync=True)

    result = SyncTrigger(service).trigger(RunConfiguration.build(sync_catalog=True))

    assert result is not None
    assert result.requested is True
    assert result.error is not None
    assert "timed out" in result.error


def test_dry_run_sync_is_simulated() -> None:
    service = FakeManagementService()
    config = RunConfiguration.build(sync_catalog=True, dry_run=True)

    result = SyncTrigger(service).trigger(config)

    assert result is not None
    assert result.simulated is True
    assert service.sync_calls == 0


def test_declined_sync_is_not_requested() -> None:
    service = FakeManagementService()

    result = SyncTrigger(service, confirmation=LogOnly()).trigger(
        RunConfiguration.build(sync_catalog=True)
    )

    assert result is not None
    assert result.requested is False
    assert service.sync_calls == 0
