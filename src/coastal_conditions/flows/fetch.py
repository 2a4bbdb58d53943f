"""
Prefect flow for fetching point conditions (weather, air quality, tides).

Run locally:
    python -m coastal_conditions.flows.fetch

Run with Prefect dashboard:
    prefect server start &
    python -m coastal_conditions.flows.fetch
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import requests
from prefect import flow, task

from coastal_conditions.cache import DiskCacheStore
from coastal_conditions.config import get_settings
from coastal_conditions.datasources.tides import get_tides
from coastal_conditions.datasources.weather import ProviderWaterfall
from coastal_conditions.errors import NoWeatherDataError, ProviderError
from coastal_conditions.schemas import TideReport, WeatherReport
from coastal_conditions.store import LIVE, DataStore

# Data store with tiered directories
store = DataStore(Path("data"))

# Relative paths within the store
WEATHER_PATH = LIVE / "weather.json"
TIDES_PATH = LIVE / "tides.json"


@task(name="fetch-weather")
def fetch_weather(lat: float, lon: float) -> WeatherReport:
    """Weather from the cheapest tier that has it. No task retries: tiers are the fallback."""
    return ProviderWaterfall(cache=DiskCacheStore(store)).fetch(lat, lon)


@task(name="fetch-tides", retries=2, retry_delay_seconds=5)
def fetch_tides(lat: float, lon: float, days: int = 7) -> TideReport | None:
    """Tide extremes for the next ``days`` days."""
    return get_tides(lat, lon, days, cache=DiskCacheStore(store))


@task(name="save-weather")
def save_weather(report: WeatherReport) -> Path:
    """Save weather data via store."""
    return store.write(
        WEATHER_PATH,
        report.model_dump(mode="json"),
        source=report.source,
        valid_until=datetime.now(UTC) + timedelta(hours=1),
        lat=report.location.lat,
        lon=report.location.lon,
    )


@task(name="save-tides")
def save_tides(report: TideReport) -> Path:
    """Save tide data via store."""
    return store.write(
        TIDES_PATH,
        report.model_dump(mode="json"),
        source=report.source,
        valid_until=datetime.now(UTC) + timedelta(hours=24),
        lat=report.location.lat,
        lon=report.location.lon,
    )


@flow(name="fetch-conditions", log_prints=True)
def fetch_point(
    lat: float | None = None,
    lon: float | None = None,
    days: int = 7,
) -> dict[str, Any]:
    """
    Fetch point conditions and save them to the live tier.

    Checks freshness before fetching and skips sources that are still valid.
    A weather or tide failure is reported and does not stop the other.
    """
    settings = get_settings()
    lat = settings.lat if lat is None else lat
    lon = settings.lon if lon is None else lon
    results: dict[str, Any] = {}

    # --- Weather ---
    if store.is_fresh(WEATHER_PATH):
        print("Weather data is fresh, skipping fetch.")
        weather = store.read(WEATHER_PATH) or {}
    else:
        print(f"Fetching weather for ({lat}, {lon})...")
        try:
            report = fetch_weather(lat, lon)
        except NoWeatherDataError as exc:
            print(f"Weather unavailable: {exc}")
            weather = {}
        else:
            output_path = save_weather(report)
            print(f"Saved weather from {report.source} to {output_path}")
            weather = report.model_dump(mode="json")

    results["weather_source"] = weather.get("source")
    results["weather_hours"] = len(weather.get("hourly", []))
    results["air_quality"] = weather.get("air_quality") is not None

    # --- Tides ---
    if store.is_fresh(TIDES_PATH):
        print("Tide data is fresh, skipping fetch.")
        tides = store.read(TIDES_PATH) or {}
    else:
        print(f"Fetching {days} days of tides for ({lat}, {lon})...")
        tides = {}
        try:
            tide_report = fetch_tides(lat, lon, days)
        except (ProviderError, requests.RequestException) as exc:
            print(f"Tides unavailable: {exc}")
        else:
            if tide_report is None:
                print("Tides unavailable (WorldTides API key not configured)")
            else:
                tides_path = save_tides(tide_report)
                print(f"Saved {len(tide_report.extremes)} tide extremes to {tides_path}")
                tides = tide_report.model_dump(mode="json")

    results["tide_extremes"] = len(tides.get("extremes", []))

    return results


if __name__ == "__main__":
    result = fetch_point()
    print(f"Flow complete: {result}")
