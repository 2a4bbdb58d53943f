"""Air quality from the OpenWeather Air Pollution API.

Air quality changes slowly and over large areas, so callers round the point
to whole degrees and cache for a day (see ``cache.CACHE_POLICIES``).
"""

from __future__ import annotations

import logging
from typing import Any

from coastal_conditions.config import get_settings
from coastal_conditions.datasources.weather.client import OPENWEATHER_AIR_API
from coastal_conditions.schemas import AirQuality
from coastal_conditions.services.http import session

logger = logging.getLogger(__name__)


def parse_air_quality(data: dict[str, Any]) -> AirQuality | None:
    entries = data.get("list") or []
    if not entries:
        return None
    entry = entries[0]
    components = entry.get("components") or {}
    return AirQuality(
        aqi=(entry.get("main") or {}).get("aqi"),
        pm2_5=components.get("pm2_5"),
        pm10=components.get("pm10"),
        o3=components.get("o3"),
        no2=components.get("no2"),
        so2=components.get("so2"),
        co=components.get("co"),
    )


def fetch_air_quality(lat: float, lon: float, api_key: str | None = None) -> AirQuality | None:
    """
    Fetch current air pollution for a point.

    Returns None when no OpenWeather key is configured or the response is
    empty. HTTP errors propagate.
    """
    api_key = api_key or get_settings().openweather_api_key
    if not api_key:
        logger.debug("OpenWeather API key not configured, no air quality")
        return None

    resp = session.get(OPENWEATHER_AIR_API, params={"lat": lat, "lon": lon, "appid": api_key})
    resp.raise_for_status()
    return parse_air_quality(resp.json())
