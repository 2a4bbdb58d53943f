"""Open-Meteo forecast (free, global coverage, no API key)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from coastal_conditions.datasources.weather.client import (
    DAILY_LIMIT,
    HOURLY_LIMIT,
    OPEN_METEO_API,
    ProviderTier,
    parse_time,
    wmo_code_to_conditions,
)
from coastal_conditions.schemas import (
    CurrentWeather,
    DailyWeather,
    HourlyWeather,
    Location,
    WeatherReport,
)
from coastal_conditions.services.http import no_retry_session

SOURCE = "open-meteo"

CURRENT_VARS = [
    "temperature_2m",
    "apparent_temperature",
    "relative_humidity_2m",
    "pressure_msl",
    "cloud_cover",
    "precipitation",
    "wind_speed_10m",
    "wind_direction_10m",
    "wind_gusts_10m",
    "weather_code",
]
HOURLY_VARS = [
    "temperature_2m",
    "precipitation",
    "precipitation_probability",
    "cloud_cover",
    "wind_speed_10m",
    "wind_direction_10m",
    "weather_code",
]
DAILY_VARS = [
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "wind_speed_10m_max",
    "weather_code",
]


def _column(block: dict[str, Any], name: str, i: int) -> Any:
    values = block.get(name) or []
    return values[i] if i < len(values) else None


def parse_current(block: dict[str, Any] | None) -> CurrentWeather | None:
    if not block:
        return None
    return CurrentWeather(
        time=parse_time(block["time"]) if block.get("time") else None,
        temperature_c=block.get("temperature_2m"),
        feels_like_c=block.get("apparent_temperature"),
        humidity_pct=block.get("relative_humidity_2m"),
        pressure_hpa=block.get("pressure_msl"),
        cloud_cover_pct=block.get("cloud_cover"),
        precipitation_mm=block.get("precipitation"),
        wind_speed_ms=block.get("wind_speed_10m"),
        wind_direction_deg=block.get("wind_direction_10m"),
        wind_gust_ms=block.get("wind_gusts_10m"),
        description=wmo_code_to_conditions(block.get("weather_code")),
    )


def parse_hourly(block: dict[str, Any] | None) -> list[HourlyWeather]:
    if not block:
        return []
    times = block.get("time") or []
    return [
        HourlyWeather(
            time=parse_time(t),
            temperature_c=_column(block, "temperature_2m", i),
            precipitation_mm=_column(block, "precipitation", i),
            precipitation_probability_pct=_column(block, "precipitation_probability", i),
            cloud_cover_pct=_column(block, "cloud_cover", i),
            wind_speed_ms=_column(block, "wind_speed_10m", i),
            wind_direction_deg=_column(block, "wind_direction_10m", i),
            description=wmo_code_to_conditions(_column(block, "weather_code", i)),
        )
        for i, t in enumerate(times[:HOURLY_LIMIT])
    ]


def parse_daily(block: dict[str, Any] | None) -> list[DailyWeather]:
    if not block:
        return []
    dates = block.get("time") or []
    return [
        DailyWeather(
            date=d,
            temp_high_c=_column(block, "temperature_2m_max", i),
            temp_low_c=_column(block, "temperature_2m_min", i),
            precipitation_mm=_column(block, "precipitation_sum", i),
            wind_speed_max_ms=_column(block, "wind_speed_10m_max", i),
            description=wmo_code_to_conditions(_column(block, "weather_code", i)),
        )
        for i, d in enumerate(dates[:DAILY_LIMIT])
    ]


def fetch_openmeteo(lat: float, lon: float) -> WeatherReport | None:
    """
    Fetch current, hourly and daily weather from Open-Meteo.

    Times are requested in UTC and wind speeds in m/s (Open-Meteo defaults
    to km/h).
    """
    params: dict[str, str | int | float | list[str]] = {
        "latitude": lat,
        "longitude": lon,
        "current": CURRENT_VARS,
        "hourly": HOURLY_VARS,
        "daily": DAILY_VARS,
        "wind_speed_unit": "ms",
        "timezone": "UTC",
        "forecast_days": DAILY_LIMIT,
    }
    resp = no_retry_session.get(OPEN_METEO_API, params=params)
    resp.raise_for_status()
    data: dict[str, Any] = resp.json()

    return WeatherReport(
        source=SOURCE,
        tier=ProviderTier.FREE_GLOBAL,
        location=Location(lat=lat, lon=lon),
        fetched_at=datetime.now(UTC),
        current=parse_current(data.get("current")),
        hourly=parse_hourly(data.get("hourly")),
        daily=parse_daily(data.get("daily")),
    )
