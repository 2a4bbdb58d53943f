"""Tide extremes (high/low water) from the WorldTides v3 API.

Tides are astronomical and shift by under an hour a day, so predictions for
nearby points (same 1dp cell) are shared and cached for 24 hours.

API docs: https://www.worldtides.info/apidocs
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from coastal_conditions.cache import CACHE_POLICIES, CacheStore, DataClass, key_for
from coastal_conditions.config import get_settings
from coastal_conditions.errors import ProviderError
from coastal_conditions.schemas import Location, TideExtreme, TideReport
from coastal_conditions.services.http import session

logger = logging.getLogger(__name__)

WORLDTIDES_API = "https://www.worldtides.info/api/v3"
SOURCE = "worldtides"
DATUM = "CD"  # Chart Datum


def parse_extremes(data: dict[str, Any]) -> list[TideExtreme]:
    return [
        TideExtreme(
            time=datetime.fromtimestamp(e["dt"], tz=UTC),
            height_m=e["height"],
            kind=e["type"],
        )
        for e in data.get("extremes") or []
    ]


def fetch_tide_extremes(
    lat: float,
    lon: float,
    days: int = 7,
    *,
    start: datetime | None = None,
    api_key: str | None = None,
) -> TideReport | None:
    """
    Fetch high/low water times and heights for a point.

    Args:
        lat: Latitude.
        lon: Longitude.
        days: Length of the prediction window.
        start: Window start (default: now).
        api_key: WorldTides key (default: ``WORLDTIDES_API_KEY`` setting).

    Returns:
        The report, or None when no API key is configured.

    Raises:
        ProviderError: The API answered with an error status in its body.
    """
    api_key = api_key or get_settings().worldtides_api_key
    if not api_key:
        logger.warning("WorldTides API key not configured")
        return None

    start = start or datetime.now(UTC)
    params: dict[str, str | int | float] = {
        "extremes": "",
        "lat": lat,
        "lon": lon,
        "start": int(start.timestamp()),
        "length": days * 86400,
        "datum": DATUM,
        "key": api_key,
    }
    resp = session.get(WORLDTIDES_API, params=params)
    resp.raise_for_status()
    data: dict[str, Any] = resp.json()

    status = data.get("status", 200)
    if status != 200:
        msg = f"WorldTides error {status}: {data.get('error', 'unknown')}"
        raise ProviderError(msg)

    return TideReport(
        source=SOURCE,
        location=Location(lat=lat, lon=lon),
        fetched_at=datetime.now(UTC),
        datum=data.get("responseDatum") or data.get("datum") or DATUM,
        station=data.get("station"),
        extremes=parse_extremes(data),
    )


def get_tides(
    lat: float,
    lon: float,
    days: int = 7,
    cache: CacheStore | None = None,
) -> TideReport | None:
    """Tide extremes through the read-through cache (1dp cell, per day)."""
    if cache is None:
        return fetch_tide_extremes(lat, lon, days)

    policy = CACHE_POLICIES[DataClass.TIDES]

    def load() -> dict[str, Any] | None:
        report = fetch_tide_extremes(lat, lon, days)
        return report.model_dump(mode="json") if report is not None else None

    key = key_for(DataClass.TIDES, lat, lon, extra=(f"{days}d",))
    payload = cache.get_or_fetch(key, load, policy.ttl)
    return TideReport.model_validate(payload) if payload is not None else None
