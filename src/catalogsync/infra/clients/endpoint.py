"""Resolution of the management endpoint a run operates against.

Resolution happens once, before any remote call, and is injected into the
client. Nothing here is stored in process-wide state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol
import urllib.parse

from catalogsync.errors import EndpointResolutionError

if TYPE_CHECKING:
    from catalogsync.core.config import ClientSettings

ADMIN_SERVICE_PATH = "/AdminService/v1.0"


@dataclass(frozen=True, slots=True)
class ManagementEndpoint:
    base_url: str
    site_code: str | None = None

    @property
    def label(self) -> str:
        if self.site_code:
            return f"{self.base_url} (site {self.site_code})"
        return self.base_url


class EndpointResolver(Protocol):
    def resolve(self) -> ManagementEndpoint:
        """Return the endpoint to use.

        Raises:
            EndpointResolutionError: If no endpoint can be determined.
        """
        ...


def _validate_url(url: str) -> str:
    parsed = urllib.parse.urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise EndpointResolutionError(f"{url!r} is not an absolute http(s) URL")
    return url.rstrip("/")


class StaticEndpointResolver:
    """Resolves to an endpoint given explicitly, e.g. on the command line."""

    def __init__(self, base_url: str, site_code: str | None = None) -> None:
        self._base_url = base_url
        self._site_code = site_code

    def resolve(self) -> ManagementEndpoint:
        return ManagementEndpoint(_validate_url(self._base_url), self._site_code)


class SettingsEndpointResolver:
    """
    Resolves the endpoint from client settings.

    An explicit ``CATALOGSYNC_ENDPOINT`` wins. Otherwise the administration
    service is assumed to live on the site server that hosts the provider
    role, scoped to the site code when one is configured.
    """

    def __init__(self, settings: ClientSettings) -> None:
        self._settings = settings

    def resolve(self) -> ManagementEndpoint:
        settings = self._settings
        if settings.endpoint:
            return ManagementEndpoint(
                _validate_url(settings.endpoint), settings.site_code
            )

        if not settings.site_server:
            raise EndpointResolutionError(
                "set CATALOGSYNC_ENDPOINT or CATALOGSYNC_SITE_SERVER"
            )

        server = settings.site_server.strip().strip("/")
        if "://" not in server:
            server = f"https://{server}"
        base_url = server + ADMIN_SERVICE_PATH
        if settings.site_code:
            site_code = urllib.parse.quote(settings.site_code.upper(), safe="")
            base_url += f"/sites/{site_code}"
        return ManagementEndpoint(_validate_url(base_url), settings.site_code)
