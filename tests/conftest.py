"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from loguru import logger
import pytest

from tests.fixtures.management import FakeManagementService


@pytest.fixture
def log_records() -> Iterator[list[dict[str, Any]]]:
    """Capture loguru records emitted during the test."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level=0)
    yield records
    logger.remove(handler_id)


@pytest.fixture
def fake_service() -> FakeManagementService:
    return FakeManagementService()


@pytest.fixture(autouse=True)
def _clear_catalogsync_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer .env values from leaking into tests."""
    for name in (
        "CATALOGSYNC_ENDPOINT",
        "CATALOGSYNC_SITE_SERVER",
        "CATALOGSYNC_SITE_CODE",
        "CATALOGSYNC_API_TOKEN",
        "CATALOGSYNC_TIMEOUT_SECONDS",
        "CATALOGSYNC_VERIFY_TLS",
        "CATALOGSYNC_LIMIT",
        "CATALOGSYNC_EXCLUSIONS_FILE",
        "CATALOGSYNC_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
