"""
Canonical models for coastal conditions.

Pydantic models for data from external APIs and internal processing.
These define the canonical schema - services normalize API responses to these.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

# =============================================================================
# Core
# =============================================================================


class Status(StrEnum):
    """Outcome of processing one cell or query."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Location(BaseModel):
    """Geographic point with optional place name."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    place_name: str | None = None


# =============================================================================
# Grid cells and persisted rows
# =============================================================================


class GridCell(BaseModel):
    """A unit of batch ingestion, e.g. an ICES statistical rectangle."""

    key: str = Field(..., description="Stable cell identifier, e.g. '25E0'")
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    region_hint: str | None = Field(default=None, description="Free-text area name")
    distance_km: float | None = Field(
        default=None, description="Distance to shore or to a point of interest"
    )


class ConditionsRow(BaseModel):
    """Latest known marine conditions for one cell.

    Data fields are optional: upstream responses are patchy. ``last_attempt_at``
    and ``sources`` are bookkeeping and always reflect the latest attempt.
    """

    cell_key: str
    region_code: str | None = None
    captured_at: datetime | None = Field(default=None, description="When the data was ingested")
    valid_time: datetime | None = Field(default=None, description="Model time of the snapshot")

    # Bookkeeping
    last_attempt_at: datetime | None = None
    sources: list[str] = Field(default_factory=list)

    # Physics
    sea_temp_c: float | None = None
    salinity_psu: float | None = None
    current_east_ms: float | None = None
    current_north_ms: float | None = None
    current_speed_ms: float | None = None
    current_direction_deg: float | None = None
    mixed_layer_depth_m: float | None = None
    sea_surface_height_m: float | None = None

    # Biogeochemistry
    dissolved_oxygen_mg_l: float | None = None
    chlorophyll_mg_m3: float | None = None
    kd490: float | None = None
    nitrate_umol_l: float | None = None
    phosphate_umol_l: float | None = None
    zooplankton_mmol_m3: float | None = None
    phytoplankton_mmol_m3: float | None = None
    primary_production_mg_c_m3_day: float | None = None

    # Waves
    wave_height_m: float | None = None
    wave_direction_deg: float | None = None
    wave_period_s: float | None = None
    wind_sea_height_m: float | None = None
    swell_height_m: float | None = None


# =============================================================================
# Weather
# =============================================================================


class CurrentWeather(BaseModel):
    """Conditions right now (or the nearest forecast step)."""

    time: datetime | None = None
    temperature_c: float | None = None
    feels_like_c: float | None = None
    humidity_pct: float | None = None
    pressure_hpa: float | None = None
    wind_speed_ms: float | None = None
    wind_direction_deg: float | None = None
    wind_gust_ms: float | None = None
    cloud_cover_pct: float | None = None
    precipitation_mm: float | None = None
    description: str | None = None


class HourlyWeather(BaseModel):
    """One forecast hour."""

    time: datetime
    temperature_c: float | None = None
    wind_speed_ms: float | None = None
    wind_direction_deg: float | None = None
    precipitation_mm: float | None = None
    precipitation_probability_pct: float | None = None
    cloud_cover_pct: float | None = None
    description: str | None = None


class DailyWeather(BaseModel):
    """One forecast day."""

    date: str
    temp_high_c: float | None = None
    temp_low_c: float | None = None
    precipitation_mm: float | None = None
    wind_speed_max_ms: float | None = None
    description: str | None = None


class AirQuality(BaseModel):
    """Air-quality index and main pollutant concentrations (ug/m3)."""

    aqi: int | None = None
    pm2_5: float | None = None
    pm10: float | None = None
    o3: float | None = None
    no2: float | None = None
    so2: float | None = None
    co: float | None = None


class WeatherReport(BaseModel):
    """Weather for one point, normalized across providers."""

    source: str
    tier: str
    location: Location
    fetched_at: datetime
    current: CurrentWeather | None = None
    hourly: list[HourlyWeather] = Field(default_factory=list)
    daily: list[DailyWeather] = Field(default_factory=list)
    air_quality: AirQuality | None = None

    @property
    def is_empty(self) -> bool:
        """True when the provider returned nothing usable."""
        return self.current is None and not self.hourly and not self.daily


# =============================================================================
# Tides
# =============================================================================


class TideExtreme(BaseModel):
    """A high or low water."""

    time: datetime
    height_m: float
    kind: str = Field(..., description="'High' or 'Low'")


class TideReport(BaseModel):
    """Tide extremes for a point over a number of days."""

    source: str
    location: Location
    fetched_at: datetime
    datum: str = "CD"
    station: str | None = None
    extremes: list[TideExtreme] = Field(default_factory=list)
