"""US National Weather Service forecasts (free, US territory only).

Two-step API: ``/points/{lat},{lon}`` resolves the forecast office grid and
returns the URLs of the 12-hourly and hourly forecasts for that grid.
Temperatures come in Fahrenheit and wind as strings like "10 to 15 mph".
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import requests

from coastal_conditions.datasources.weather.client import (
    DAILY_LIMIT,
    HOURLY_LIMIT,
    NWS_API,
    ProviderTier,
    compass_to_degrees,
    fahrenheit_to_celsius,
    parse_time,
    parse_wind_speed,
)
from coastal_conditions.schemas import (
    CurrentWeather,
    DailyWeather,
    HourlyWeather,
    Location,
    WeatherReport,
)
from coastal_conditions.services.http import no_retry_session

logger = logging.getLogger(__name__)

SOURCE = "nws"
GEOJSON = {"Accept": "application/geo+json"}


def _get_json(url: str) -> dict[str, Any]:
    resp = no_retry_session.get(url, headers=GEOJSON)
    resp.raise_for_status()
    result: dict[str, Any] = resp.json()
    return result


def _temperature(period: dict[str, Any]) -> float | None:
    value = period.get("temperature")
    if value is None:
        return None
    if period.get("temperatureUnit", "F") == "C":
        return float(value)
    return fahrenheit_to_celsius(float(value))


def _precip_probability(period: dict[str, Any]) -> float | None:
    value = (period.get("probabilityOfPrecipitation") or {}).get("value")
    return float(value) if value is not None else None


def parse_hourly(periods: list[dict[str, Any]]) -> list[HourlyWeather]:
    return [
        HourlyWeather(
            time=parse_time(p["startTime"]),
            temperature_c=_temperature(p),
            wind_speed_ms=parse_wind_speed(p.get("windSpeed")),
            wind_direction_deg=compass_to_degrees(p.get("windDirection")),
            precipitation_probability_pct=_precip_probability(p),
            description=p.get("shortForecast"),
        )
        for p in periods[:HOURLY_LIMIT]
    ]


def parse_daily(periods: list[dict[str, Any]]) -> list[DailyWeather]:
    """Fold day/night periods into one entry per calendar date."""
    days: dict[str, DailyWeather] = {}
    for p in periods:
        date = p["startTime"][:10]
        day = days.get(date)
        if day is None:
            if len(days) >= DAILY_LIMIT:
                break
            day = days[date] = DailyWeather(date=date)
        temp = _temperature(p)
        if p.get("isDaytime", True):
            day.temp_high_c = temp
            day.wind_speed_max_ms = parse_wind_speed(p.get("windSpeed"))
            day.description = p.get("shortForecast")
        else:
            day.temp_low_c = temp
            day.description = day.description or p.get("shortForecast")
    return list(days.values())


def fetch_nws(lat: float, lon: float) -> WeatherReport | None:
    """
    Fetch the NWS forecast for a US point.

    Returns None when NWS has no forecast grid for the point. Transport and
    HTTP errors propagate (the waterfall moves on to the next tier).
    """
    points = _get_json(f"{NWS_API}/points/{lat:.4f},{lon:.4f}")
    props = points.get("properties") or {}
    forecast_url = props.get("forecast")
    if not forecast_url:
        logger.info("NWS has no forecast grid for (%.4f, %.4f)", lat, lon)
        return None

    periods = (_get_json(forecast_url).get("properties") or {}).get("periods") or []

    hourly_periods: list[dict[str, Any]] = []
    hourly_url = props.get("forecastHourly")
    if hourly_url:
        try:
            hourly_periods = (_get_json(hourly_url).get("properties") or {}).get("periods") or []
        except requests.RequestException as exc:
            logger.warning("NWS hourly forecast failed: %s", exc)

    if not periods and not hourly_periods:
        return None

    hourly = parse_hourly(hourly_periods)
    first = hourly_periods[0] if hourly_periods else periods[0]
    current = CurrentWeather(
        time=parse_time(first["startTime"]),
        temperature_c=_temperature(first),
        wind_speed_ms=parse_wind_speed(first.get("windSpeed")),
        wind_direction_deg=compass_to_degrees(first.get("windDirection")),
        description=first.get("shortForecast"),
    )

    return WeatherReport(
        source=SOURCE,
        tier=ProviderTier.FREE_NATIONAL,
        location=Location(lat=lat, lon=lon),
        fetched_at=datetime.now(UTC),
        current=current,
        hourly=hourly,
        daily=parse_daily(periods),
    )
