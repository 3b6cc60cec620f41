from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import os

from loguru import logger

from catalogsync.errors import ConfigurationError
from catalogsync.models.exclusion import ExclusionField, ExclusionRule

# The management service refuses bulk requests above this size. Historical
# guard: larger limits are clamped, never passed through.
MAX_ITEMS_CEILING = 9999

DEFAULT_TIMEOUT_SECONDS = 30.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def clamp_limit(limit: int) -> int:
    """Validate a caller-supplied submission limit and clamp it to the ceiling.

    Raises:
        ConfigurationError: If the limit is below 1.
    """
    if limit < 1:
        raise ConfigurationError(
            f"limit must be between 1 and {MAX_ITEMS_CEILING}, got {limit}"
        )
    if limit > MAX_ITEMS_CEILING:
        logger.bind(requested=limit, ceiling=MAX_ITEMS_CEILING).warning(
            "Requested limit {} exceeds service ceiling; clamping to {}",
            limit,
            MAX_ITEMS_CEILING,
        )
        return MAX_ITEMS_CEILING
    return limit


@dataclass(frozen=True, slots=True)
class RunConfiguration:
    """Options for a single classification run.

    Use ``RunConfiguration.build`` from callers; it clamps the limit and turns
    raw strings into exclusion rules.
    """

    max_items: int = MAX_ITEMS_CEILING
    name_exclusions: tuple[ExclusionRule, ...] = ()
    publisher_exclusions: tuple[ExclusionRule, ...] = ()
    trigger_downstream_sync: bool = False
    dry_run: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.max_items <= MAX_ITEMS_CEILING:
            msg = f"max_items must be between 1 and {MAX_ITEMS_CEILING}"
            raise ConfigurationError(msg)
        for rule in self.name_exclusions:
            if rule.field is not ExclusionField.DISPLAY_NAME:
                msg = f"Name exclusion {rule.pattern!r} must target display name"
                raise ConfigurationError(msg)
        for rule in self.publisher_exclusions:
            if rule.field is not ExclusionField.PUBLISHER_NAME:
                msg = f"Publisher exclusion {rule.pattern!r} must target publisher"
                raise ConfigurationError(msg)

    @classmethod
    def build(
        cls,
        *,
        limit: int = MAX_ITEMS_CEILING,
        ignore_products: Iterable[str] = (),
        ignore_publishers: Iterable[str] = (),
        sync_catalog: bool = False,
        dry_run: bool = False,
    ) -> RunConfiguration:
        return cls(
            max_items=clamp_limit(limit),
            name_exclusions=tuple(
                ExclusionRule(pattern, ExclusionField.DISPLAY_NAME)
                for pattern in ignore_products
            ),
            publisher_exclusions=tuple(
                ExclusionRule(pattern, ExclusionField.PUBLISHER_NAME)
                for pattern in ignore_publishers
            ),
            trigger_downstream_sync=sync_catalog,
            dry_run=dry_run,
        )


@dataclass(frozen=True, slots=True)
class ClientSettings:
    """Connection settings for the management service, loaded at startup."""

    endpoint: str | None = None
    site_server: str | None = None
    site_code: str | None = None
    api_token: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    verify_tls: bool = True


def _optional_env(name: str) -> str | None:
    value = os.environ.get(name, "").strip()
    return value or None


def _parse_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean (true/false), got {raw!r}")


def load_client_settings_from_env() -> ClientSettings:
    """Load management service settings from env and validate them."""
    timeout_raw = os.environ.get("CATALOGSYNC_TIMEOUT_SECONDS", "").strip()
    timeout_seconds = DEFAULT_TIMEOUT_SECONDS
    if timeout_raw:
        try:
            timeout_seconds = float(timeout_raw)
        except ValueError as e:
            raise ConfigurationError(
                f"CATALOGSYNC_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}"
            ) from e
        if timeout_seconds <= 0:
            raise ConfigurationError("CATALOGSYNC_TIMEOUT_SECONDS must be positive")

    return ClientSettings(
        endpoint=_optional_env("CATALOGSYNC_ENDPOINT"),
        site_server=_optional_env("CATALOGSYNC_SITE_SERVER"),
        site_code=_optional_env("CATALOGSYNC_SITE_CODE"),
        api_token=_optional_env("CATALOGSYNC_API_TOKEN"),
        timeout_seconds=timeout_seconds,
        verify_tls=_parse_bool("CATALOGSYNC_VERIFY_TLS", True),
    )
