"""Tests for environment-backed settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from coastal_conditions.config import Settings, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "COPERNICUS_USERNAME",
        "COPERNICUS_PASSWORD",
        "COPERNICUSMARINE_SERVICE_USERNAME",
        "COPERNICUSMARINE_SERVICE_PASSWORD",
        "BATCH_SIZE",
        "DATA_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)
        assert settings.batch_size == 5
        assert settings.batch_delay_ms == 500
        assert settings.freshness_hours == 6.0
        assert settings.paddings == (0.25,)
        assert settings.max_cells is None
        assert settings.data_dir == Path("data")
        assert not settings.has_copernicus_credentials

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BATCH_SIZE", "12")
        monkeypatch.setenv("DATA_DIR", "/tmp/conditions")
        settings = Settings(_env_file=None)
        assert settings.batch_size == 12
        assert settings.data_dir == Path("/tmp/conditions")

    def test_toolbox_credential_names(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COPERNICUSMARINE_SERVICE_USERNAME", "diver")
        monkeypatch.setenv("COPERNICUSMARINE_SERVICE_PASSWORD", "secret")
        settings = Settings(_env_file=None)
        assert settings.copernicus_username == "diver"
        assert settings.has_copernicus_credentials

    def test_partial_credentials(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COPERNICUS_USERNAME", "diver")
        assert not Settings(_env_file=None).has_copernicus_credentials

    def test_batch_size_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, batch_size=0)

    def test_get_settings_cached(self) -> None:
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()
