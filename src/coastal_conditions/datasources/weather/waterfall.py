"""
Tiered weather acquisition with cheapest-first fallback.

Sources are tried in tier order (national, regional, global, paid), skipping
any whose coverage does not include the point. The first non-empty report
wins and later tiers are never called. Air quality is fetched separately and
attached to the report; its failure never fails the weather request.

Reports are cached per 3dp cell and hour, air quality per whole degree for a
day (see ``cache.CACHE_POLICIES``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import requests

from coastal_conditions.cache import CACHE_POLICIES, CacheStore, DataClass, key_for
from coastal_conditions.datasources.weather.air_quality import fetch_air_quality
from coastal_conditions.datasources.weather.client import ProviderTier
from coastal_conditions.datasources.weather.metno import fetch_metno
from coastal_conditions.datasources.weather.nws import fetch_nws
from coastal_conditions.datasources.weather.openmeteo import fetch_openmeteo
from coastal_conditions.datasources.weather.openweather import fetch_openweather
from coastal_conditions.errors import NoWeatherDataError, ProviderError
from coastal_conditions.geo import GeoCell, Precision
from coastal_conditions.reference.geography import EUROPE_BOXES, US_BOXES, BoundingBox, in_any
from coastal_conditions.schemas import AirQuality, WeatherReport

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

logger = logging.getLogger(__name__)

#: Errors that mean "this tier failed, try the next one"
TIER_ERRORS: tuple[type[Exception], ...] = (
    requests.RequestException,
    ProviderError,
    ValueError,
    KeyError,
    TypeError,
)


@dataclass(frozen=True)
class WeatherSource:
    """One weather provider in the waterfall."""

    name: str
    tier: ProviderTier
    fetch: Callable[[float, float], WeatherReport | None]
    coverage: tuple[BoundingBox, ...] | None = None  # None = global

    def covers(self, lat: float, lon: float) -> bool:
        return self.coverage is None or in_any(self.coverage, lat, lon)


DEFAULT_SOURCES: tuple[WeatherSource, ...] = (
    WeatherSource("nws", ProviderTier.FREE_NATIONAL, fetch_nws, US_BOXES),
    WeatherSource("met.no", ProviderTier.FREE_REGIONAL, fetch_metno, EUROPE_BOXES),
    WeatherSource("open-meteo", ProviderTier.FREE_GLOBAL, fetch_openmeteo),
    WeatherSource("openweather", ProviderTier.PAID, fetch_openweather),
)


class ProviderWaterfall:
    """Weather for a point from the cheapest source that has it."""

    def __init__(
        self,
        sources: Sequence[WeatherSource] = DEFAULT_SOURCES,
        cache: CacheStore | None = None,
        air_quality: Callable[[float, float], AirQuality | None] | None = fetch_air_quality,
    ) -> None:
        self.sources = sorted(sources, key=lambda s: s.tier.rank)
        self.cache = cache if cache is not None else CacheStore()
        self._air_quality = air_quality

    def applicable(self, lat: float, lon: float) -> list[WeatherSource]:
        """Sources whose coverage includes the point, in tier order."""
        return [s for s in self.sources if s.covers(lat, lon)]

    def acquire(self, lat: float, lon: float) -> WeatherReport:
        """
        Walk the tiers without touching the cache.

        Raises:
            NoWeatherDataError: Every applicable tier failed or came back empty.
        """
        tried = []
        for source in self.applicable(lat, lon):
            tried.append(source.name)
            try:
                report = source.fetch(lat, lon)
            except TIER_ERRORS as exc:
                logger.warning("Weather source %s failed: %s", source.name, exc)
                continue
            if report is None or report.is_empty:
                logger.info("Weather source %s returned no data", source.name)
                continue
            logger.info("Weather for (%.3f, %.3f) from %s", lat, lon, source.name)
            return report

        msg = f"No weather data available from any source (tried: {', '.join(tried) or 'none'})"
        raise NoWeatherDataError(msg)

    def fetch(self, lat: float, lon: float) -> WeatherReport:
        """
        Cached weather for a point, with air quality attached when available.

        Raises:
            NoWeatherDataError: No tier produced data and nothing is cached.
        """
        policy = CACHE_POLICIES[DataClass.WEATHER]
        payload = self.cache.get_or_fetch(
            key_for(DataClass.WEATHER, lat, lon),
            lambda: self.acquire(lat, lon).model_dump(mode="json"),
            policy.ttl,
        )
        report = WeatherReport.model_validate(payload)
        return report.model_copy(update={"air_quality": self.air_quality(lat, lon)})

    def air_quality(self, lat: float, lon: float) -> AirQuality | None:
        """Cached air quality for the whole-degree cell around a point, or None."""
        if self._air_quality is None:
            return None
        fetch = self._air_quality
        cell = GeoCell.from_point(lat, lon, Precision.COARSE)
        policy = CACHE_POLICIES[DataClass.AIR_QUALITY]

        def load() -> dict[str, Any] | None:
            result = fetch(cell.lat, cell.lon)
            return result.model_dump(mode="json") if result is not None else None

        try:
            key = key_for(DataClass.AIR_QUALITY, lat, lon)
            payload = self.cache.get_or_fetch(key, load, policy.ttl)
        except TIER_ERRORS as exc:
            logger.warning("Air quality lookup failed: %s", exc)
            return None
        return AirQuality.model_validate(payload) if payload is not None else None
