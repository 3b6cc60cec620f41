"""Clients for the management system that owns inventory and classification."""

from catalogsync.infra.clients.endpoint import (
    EndpointResolver,
    ManagementEndpoint,
    SettingsEndpointResolver,
    StaticEndpointResolver,
)
from catalogsync.infra.clients.management import (
    ClassificationSummary,
    ManagementClient,
    ManagementService,
)

__all__ = [
    "ClassificationSummary",
    "EndpointResolver",
    "ManagementClient",
    "ManagementEndpoint",
    "ManagementService",
    "SettingsEndpointResolver",
    "StaticEndpointResolver",
]
