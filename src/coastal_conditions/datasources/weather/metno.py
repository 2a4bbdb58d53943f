"""MET Norway locationforecast 2.0 (free, best over Europe).

The compact product is a list of timesteps, each with instant values and
symbol codes for the next 1/6/12 hours. Met.no requires an identifying
User-Agent, which the shared session sets.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from coastal_conditions.datasources.weather.client import (
    DAILY_LIMIT,
    HOURLY_LIMIT,
    METNO_API,
    ProviderTier,
    parse_time,
)
from coastal_conditions.schemas import (
    CurrentWeather,
    DailyWeather,
    HourlyWeather,
    Location,
    WeatherReport,
)
from coastal_conditions.services.http import no_retry_session

SOURCE = "met.no"


def _symbol(data: dict[str, Any]) -> str | None:
    for window in ("next_1_hours", "next_6_hours", "next_12_hours"):
        code = ((data.get(window) or {}).get("summary") or {}).get("symbol_code")
        if code:
            return str(code)
    return None


def _precipitation(data: dict[str, Any]) -> float | None:
    for window in ("next_1_hours", "next_6_hours"):
        value = ((data.get(window) or {}).get("details") or {}).get("precipitation_amount")
        if value is not None:
            return float(value)
    return None


def parse_timeseries(timeseries: list[dict[str, Any]]) -> list[HourlyWeather]:
    hourly = []
    for step in timeseries[:HOURLY_LIMIT]:
        data = step.get("data") or {}
        details = (data.get("instant") or {}).get("details") or {}
        hourly.append(
            HourlyWeather(
                time=parse_time(step["time"]),
                temperature_c=details.get("air_temperature"),
                wind_speed_ms=details.get("wind_speed"),
                wind_direction_deg=details.get("wind_from_direction"),
                cloud_cover_pct=details.get("cloud_area_fraction"),
                precipitation_mm=_precipitation(data),
                description=_symbol(data),
            )
        )
    return hourly


def daily_from_hourly(hourly: list[HourlyWeather]) -> list[DailyWeather]:
    """Aggregate hourly steps into per-date highs, lows and max wind."""
    by_date: dict[str, list[HourlyWeather]] = {}
    for hour in hourly:
        by_date.setdefault(hour.time.date().isoformat(), []).append(hour)

    daily = []
    for date, hours in list(by_date.items())[:DAILY_LIMIT]:
        temps = [h.temperature_c for h in hours if h.temperature_c is not None]
        winds = [h.wind_speed_ms for h in hours if h.wind_speed_ms is not None]
        rain = [h.precipitation_mm for h in hours if h.precipitation_mm is not None]
        daily.append(
            DailyWeather(
                date=date,
                temp_high_c=max(temps) if temps else None,
                temp_low_c=min(temps) if temps else None,
                wind_speed_max_ms=max(winds) if winds else None,
                precipitation_mm=round(sum(rain), 1) if rain else None,
                description=hours[len(hours) // 2].description,
            )
        )
    return daily


def fetch_metno(lat: float, lon: float) -> WeatherReport | None:
    """
    Fetch the Met.no compact forecast for a point.

    Returns None when the response has no timesteps.
    """
    resp = no_retry_session.get(METNO_API, params={"lat": f"{lat:.4f}", "lon": f"{lon:.4f}"})
    resp.raise_for_status()
    timeseries = (resp.json().get("properties") or {}).get("timeseries") or []
    if not timeseries:
        return None

    hourly = parse_timeseries(timeseries)
    first_data = timeseries[0].get("data") or {}
    first = (first_data.get("instant") or {}).get("details") or {}
    current = CurrentWeather(
        time=hourly[0].time,
        temperature_c=first.get("air_temperature"),
        humidity_pct=first.get("relative_humidity"),
        pressure_hpa=first.get("air_pressure_at_sea_level"),
        wind_speed_ms=first.get("wind_speed"),
        wind_direction_deg=first.get("wind_from_direction"),
        cloud_cover_pct=first.get("cloud_area_fraction"),
        precipitation_mm=_precipitation(first_data),
        description=_symbol(first_data),
    )

    return WeatherReport(
        source=SOURCE,
        tier=ProviderTier.FREE_REGIONAL,
        location=Location(lat=lat, lon=lon),
        fetched_at=datetime.now(UTC),
        current=current,
        hourly=hourly,
        daily=daily_from_hourly(hourly),
    )
