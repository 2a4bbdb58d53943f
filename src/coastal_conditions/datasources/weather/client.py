"""Weather provider endpoints, tiers and unit conversions.

API docs:
  - NWS: https://www.weather.gov/documentation/services-web-api
  - Met.no: https://api.met.no/weatherapi/locationforecast/2.0/documentation
  - Open-Meteo: https://open-meteo.com/en/docs
  - OpenWeather One Call 3.0: https://openweathermap.org/api/one-call-3
  - OpenWeather Air Pollution: https://openweathermap.org/api/air-pollution
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import StrEnum

NWS_API = "https://api.weather.gov"
METNO_API = "https://api.met.no/weatherapi/locationforecast/2.0/compact"
OPEN_METEO_API = "https://api.open-meteo.com/v1/forecast"
OPENWEATHER_ONECALL_API = "https://api.openweathermap.org/data/3.0/onecall"
OPENWEATHER_AIR_API = "https://api.openweathermap.org/data/2.5/air_pollution"

HOURLY_LIMIT = 48
DAILY_LIMIT = 7


class ProviderTier(StrEnum):
    """Cost/coverage class of a weather provider, cheapest first."""

    FREE_NATIONAL = "free_national"
    FREE_REGIONAL = "free_regional"
    FREE_GLOBAL = "free_global"
    PAID = "paid"

    @property
    def rank(self) -> int:
        return list(ProviderTier).index(self)


# 16-point compass rose, clockwise from north
COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)  # fmt: skip

MPH_TO_MS = 0.44704


def fahrenheit_to_celsius(value: float | None) -> float | None:
    if value is None:
        return None
    return round((value - 32) * 5 / 9, 1)


def mph_to_ms(value: float | None) -> float | None:
    if value is None:
        return None
    return round(value * MPH_TO_MS, 1)


def parse_wind_speed(text: str | None) -> float | None:
    """First number in an NWS wind string ("10 to 15 mph"), in m/s."""
    if not text:
        return None
    match = re.search(r"\d+(\.\d+)?", text)
    if match is None:
        return None
    return mph_to_ms(float(match.group()))


def compass_to_degrees(point: str | None) -> float | None:
    """Convert a compass abbreviation ("NNW") to degrees clockwise from north."""
    if not point:
        return None
    try:
        return COMPASS_POINTS.index(point.strip().upper()) * 22.5
    except ValueError:
        return None


def from_epoch(seconds: int | float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=UTC)


def parse_time(value: str) -> datetime:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


# WMO Weather Interpretation Codes (https://open-meteo.com/en/docs)
WMO_CONDITIONS: dict[int, str] = {
    0: "Clear",
    1: "Mostly Clear",
    2: "Partly Cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Freezing Fog",
    51: "Light Drizzle",
    53: "Drizzle",
    55: "Heavy Drizzle",
    56: "Light Freezing Drizzle",
    57: "Freezing Drizzle",
    61: "Light Rain",
    63: "Rain",
    65: "Heavy Rain",
    66: "Light Freezing Rain",
    67: "Freezing Rain",
    71: "Light Snow",
    73: "Snow",
    75: "Heavy Snow",
    77: "Snow Grains",
    80: "Light Showers",
    81: "Showers",
    82: "Heavy Showers",
    85: "Light Snow Showers",
    86: "Snow Showers",
    95: "Thunderstorm",
    96: "Thunderstorm w/ Hail",
    99: "Heavy Thunderstorm",
}


def wmo_code_to_conditions(code: int | None) -> str | None:
    """Convert a WMO weather code to a human-readable condition string."""
    if code is None:
        return None
    return WMO_CONDITIONS.get(int(code), f"Unknown ({code})")
