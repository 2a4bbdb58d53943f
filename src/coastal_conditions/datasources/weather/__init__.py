"""Weather data sources.

Point forecasts from a waterfall of providers, cheapest tier first.

Public API:
  - waterfall: ProviderWaterfall, WeatherSource, DEFAULT_SOURCES
  - nws / metno / openmeteo / openweather: fetch_* (one provider each)
  - air_quality: fetch_air_quality (OpenWeather Air Pollution)
  - client: API URLs, ProviderTier, unit conversions
"""

from coastal_conditions.datasources.weather.air_quality import fetch_air_quality
from coastal_conditions.datasources.weather.client import ProviderTier
from coastal_conditions.datasources.weather.metno import fetch_metno
from coastal_conditions.datasources.weather.nws import fetch_nws
from coastal_conditions.datasources.weather.openmeteo import fetch_openmeteo
from coastal_conditions.datasources.weather.openweather import fetch_openweather
from coastal_conditions.datasources.weather.waterfall import (
    DEFAULT_SOURCES,
    ProviderWaterfall,
    WeatherSource,
)

__all__ = [
    "DEFAULT_SOURCES",
    "ProviderTier",
    "ProviderWaterfall",
    "WeatherSource",
    "fetch_air_quality",
    "fetch_metno",
    "fetch_nws",
    "fetch_openmeteo",
    "fetch_openweather",
]
