"""
Application settings.

Loaded from environment variables (and an optional ``.env`` file) via
pydantic-settings. Every field has a default so the pipeline runs without any
configuration; real providers only need their credentials set.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    app_name: str = "coastal-conditions"
    app_env: str = "development"
    debug: bool = False
    data_dir: Path = Path("data")

    # Default point for the `weather` / `tides` commands (Gijón, Bay of Biscay)
    lat: float = 43.55
    lon: float = -5.66

    # === Batch ingestion ===
    batch_size: int = Field(default=5, ge=1)
    batch_delay_ms: int = Field(default=500, ge=0)
    freshness_hours: float = Field(default=6.0, ge=0)
    force_refresh: bool = False
    max_cells: int | None = Field(default=None, ge=1)
    max_runtime_seconds: float | None = Field(default=None, gt=0)

    # === Marine retry search ===
    paddings: tuple[float, ...] = (0.25,)
    probe_timeout_s: float = 90.0
    attempt_timeout_s: float = 120.0
    use_mock_marine: bool = False

    # === Credentials ===
    copernicus_username: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "copernicus_username", "copernicusmarine_service_username"
        ),
    )
    copernicus_password: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "copernicus_password", "copernicusmarine_service_password"
        ),
    )
    openweather_api_key: str | None = None
    worldtides_api_key: str | None = None

    user_agent: str = "coastal-conditions/0.1 (https://github.com/coastal-conditions)"

    @property
    def has_copernicus_credentials(self) -> bool:
        """True when both Copernicus Marine credentials are configured."""
        return bool(self.copernicus_username and self.copernicus_password)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
