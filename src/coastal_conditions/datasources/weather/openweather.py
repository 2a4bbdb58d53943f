"""OpenWeather One Call 3.0 (paid, global). Last tier of the waterfall."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from coastal_conditions.config import get_settings
from coastal_conditions.datasources.weather.client import (
    DAILY_LIMIT,
    HOURLY_LIMIT,
    OPENWEATHER_ONECALL_API,
    ProviderTier,
    from_epoch,
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

SOURCE = "openweather"


def _description(item: dict[str, Any]) -> str | None:
    weather = item.get("weather") or []
    return weather[0].get("description") if weather else None


def _rain(item: dict[str, Any]) -> float | None:
    rain = item.get("rain")
    if isinstance(rain, dict):
        return rain.get("1h")
    return rain


def parse_onecall(
    data: dict[str, Any],
) -> tuple[CurrentWeather | None, list[HourlyWeather], list[DailyWeather]]:
    """Split a One Call response into current, hourly and daily parts."""
    cur = data.get("current")
    current = None
    if cur:
        current = CurrentWeather(
            time=from_epoch(cur["dt"]),
            temperature_c=cur.get("temp"),
            feels_like_c=cur.get("feels_like"),
            humidity_pct=cur.get("humidity"),
            pressure_hpa=cur.get("pressure"),
            wind_speed_ms=cur.get("wind_speed"),
            wind_direction_deg=cur.get("wind_deg"),
            wind_gust_ms=cur.get("wind_gust"),
            cloud_cover_pct=cur.get("clouds"),
            precipitation_mm=_rain(cur),
            description=_description(cur),
        )

    hourly = [
        HourlyWeather(
            time=from_epoch(h["dt"]),
            temperature_c=h.get("temp"),
            wind_speed_ms=h.get("wind_speed"),
            wind_direction_deg=h.get("wind_deg"),
            precipitation_mm=_rain(h),
            precipitation_probability_pct=(h["pop"] * 100 if h.get("pop") is not None else None),
            cloud_cover_pct=h.get("clouds"),
            description=_description(h),
        )
        for h in (data.get("hourly") or [])[:HOURLY_LIMIT]
    ]

    daily = [
        DailyWeather(
            date=from_epoch(d["dt"]).date().isoformat(),
            temp_high_c=(d.get("temp") or {}).get("max"),
            temp_low_c=(d.get("temp") or {}).get("min"),
            precipitation_mm=_rain(d),
            wind_speed_max_ms=d.get("wind_speed"),
            description=d.get("summary") or _description(d),
        )
        for d in (data.get("daily") or [])[:DAILY_LIMIT]
    ]
    return current, hourly, daily


def fetch_openweather(lat: float, lon: float, api_key: str | None = None) -> WeatherReport | None:
    """
    Fetch weather from OpenWeather One Call 3.0.

    Args:
        lat: Latitude.
        lon: Longitude.
        api_key: OpenWeather key (default: ``OPENWEATHER_API_KEY`` setting).

    Returns:
        The report, or None when no API key is configured.
    """
    api_key = api_key or get_settings().openweather_api_key
    if not api_key:
        logger.info("OpenWeather API key not configured, skipping paid tier")
        return None

    params: dict[str, str | float] = {
        "lat": lat,
        "lon": lon,
        "appid": api_key,
        "units": "metric",
        "exclude": "minutely,alerts",
    }
    resp = no_retry_session.get(OPENWEATHER_ONECALL_API, params=params)
    resp.raise_for_status()
    current, hourly, daily = parse_onecall(resp.json())

    return WeatherReport(
        source=SOURCE,
        tier=ProviderTier.PAID,
        location=Location(lat=lat, lon=lon),
        fetched_at=datetime.now(UTC),
        current=current,
        hourly=hourly,
        daily=daily,
    )
