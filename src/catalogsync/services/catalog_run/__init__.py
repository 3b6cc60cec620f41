"""Catalog run service: end-to-end orchestration of a classification run."""

from __future__ import annotations

from catalogsync.services.catalog_run.service import (
    CatalogRunService,
    ServiceFactory,
    client_factory_from_settings,
)
from catalogsync.services.catalog_run.types import CatalogRunResult

__all__ = [
    "CatalogRunResult",
    "CatalogRunService",
    "ServiceFactory",
    "client_factory_from_settings",
]
