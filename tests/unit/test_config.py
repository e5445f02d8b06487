"""Unit tests for settings."""

import pytest

from contentgov.config import Settings, get_settings
from contentgov.domain.value_objects import CopyMode


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CONTENTGOV_DEFAULT_COPY_MODE", raising=False)
    settings = Settings(_env_file=None)
    assert settings.platform_api_version == "3.21"
    assert settings.default_copy_mode == CopyMode.REPLACE
    assert settings.bulk_medium_impact_threshold == 20
    assert settings.bulk_high_impact_threshold == 50
    assert settings.bulk_max_items == 1000
    assert settings.platform_timeout_seconds == 30.0


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTENTGOV_DEFAULT_COPY_MODE", "merge")
    monkeypatch.setenv("CONTENTGOV_BULK_MAX_ITEMS", "5")
    monkeypatch.setenv("contentgov_platform_url", "https://bi.example.com")
    settings = Settings(_env_file=None)
    assert settings.default_copy_mode == CopyMode.MERGE
    assert settings.bulk_max_items == 5
    assert settings.platform_url == "https://bi.example.com"


def test_invalid_copy_mode_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CONTENTGOV_DEFAULT_COPY_MODE", "overwrite")
    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_get_settings_is_cached() -> None:
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
