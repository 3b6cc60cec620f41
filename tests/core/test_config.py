from __future__ import annotations

import pytest

from catalogsync.core.config import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_ITEMS_CEILING,
    RunConfiguration,
    clamp_limit,
    load_client_settings_from_env,
)
from catalogsync.errors import ConfigurationError
from catalogsync.models.exclusion import ExclusionField, ExclusionRule

# --- Limit clamping ---


@pytest.mark.parametrize("limit", [1, 500, MAX_ITEMS_CEILING])
def test_clamp_limit_passes_valid_limits_through(limit: int) -> None:
    assert clamp_limit(limit) == limit


def test_clamp_limit_clamps_above_ceiling(log_records) -> None:
    assert clamp_limit(10000) == MAX_ITEMS_CEILING
    assert any(r["level"].name == "WARNING" for r in log_records)


@pytest.mark.parametrize("limit", [0, -1])
def test_clamp_limit_rejects_non_positive(limit: int) -> None:
    with pytest.raises(ConfigurationError, match="between 1 and 9999"):
        clamp_limit(limit)


# --- RunConfiguration ---


def test_build_defaults() -> None:
    config = RunConfiguration.build()

    assert config.max_items == MAX_ITEMS_CEILING
    assert config.name_exclusions == ()
    assert config.publisher_exclusions == ()
    assert config.trigger_downstream_sync is False
    assert config.dry_run is False


def test_build_binds_patterns_to_fields_in_order() -> None:
    config = RunConfiguration.build(
        limit=25,
        ignore_products=["Secret*", "internal"],
        ignore_publishers=["Acme"],
        sync_catalog=True,
    )

    assert config.max_items == 25
    assert [rule.pattern for rule in config.name_exclusions] == [
        "Secret*",
        "internal",
    ]
    assert all(
        rule.field is ExclusionField.DISPLAY_NAME for rule in config.name_exclusions
    )
    assert config.publisher_exclusions == (
        ExclusionRule("Acme", ExclusionField.PUBLISHER_NAME),
    )
    assert config.trigger_downstream_sync is True


def test_build_clamps_limit() -> None:
    assert RunConfiguration.build(limit=50000).max_items == MAX_ITEMS_CEILING


def test_direct_construction_rejects_out_of_range_max_items() -> None:
    with pytest.raises(ConfigurationError):
        RunConfiguration(max_items=MAX_ITEMS_CEILING + 1)


def test_direct_construction_rejects_rule_on_wrong_field() -> None:
    with pytest.raises(ConfigurationError, match="display name"):
        RunConfiguration(
            name_exclusions=(ExclusionRule("Acme", ExclusionField.PUBLISHER_NAME),)
        )


# --- Client settings ---


def test_settings_defaults_when_env_empty() -> None:
    settings = load_client_settings_from_env()

    assert settings.endpoint is None
    assert settings.site_server is None
    assert settings.timeout_seconds == DEFAULT_TIMEOUT_SECONDS
    assert settings.verify_tls is True


def test_settings_read_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOGSYNC_ENDPOINT", "https://cm.example.com/AdminService")
    monkeypatch.setenv("CATALOGSYNC_SITE_CODE", "ps1")
    monkeypatch.setenv("CATALOGSYNC_API_TOKEN", "secret")
    monkeypatch.setenv("CATALOGSYNC_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("CATALOGSYNC_VERIFY_TLS", "false")

    settings = load_client_settings_from_env()

    assert settings.endpoint == "https://cm.example.com/AdminService"
    assert settings.site_code == "ps1"
    assert settings.api_token == "secret"
    assert settings.timeout_seconds == 12.5
    assert settings.verify_tls is False


def test_blank_env_values_are_treated_as_unset(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("CATALOGSYNC_ENDPOINT", "   ")

    assert load_client_settings_from_env().endpoint is None


@pytest.mark.parametrize("raw", ["soon", "0", "-3"])
def test_invalid_timeout_is_configuration_error(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("CATALOGSYNC_TIMEOUT_SECONDS", raw)

    with pytest.raises(ConfigurationError, match="CATALOGSYNC_TIMEOUT_SECONDS"):
        load_client_settings_from_env()


def test_invalid_boolean_is_configuration_error(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("CATALOGSYNC_VERIFY_TLS", "maybe")

    with pytest.raises(ConfigurationError, match="CATALOGSYNC_VERIFY_TLS"):
        load_client_settings_from_env()
