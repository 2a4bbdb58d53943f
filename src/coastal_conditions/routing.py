"""
Geographic routing: which provider family serves a coordinate.

``classify`` picks the Copernicus Marine basin for ocean data; ``weather_zone``
picks the weather coverage zone. Both are pure lookups over the tables in
``reference/`` and always return a value.
"""

from __future__ import annotations

import math
from enum import StrEnum

from coastal_conditions.reference.basins import (
    BASIN_BOXES,
    DATASETS,
    POLAR_LATITUDE,
    REGION_KEYWORDS,
    DatasetConfig,
    RegionCode,
)
from coastal_conditions.reference.geography import EUROPE_BOXES, US_BOXES, in_any


class WeatherZone(StrEnum):
    """Weather coverage zone, used to pick the free tiers that apply."""

    US = "US"
    EU = "EU"
    GLOBAL = "GLOBAL"


def match_keyword(region_hint: str | None) -> RegionCode | None:
    """Match a free-text region name against the basin keyword table."""
    if not region_hint:
        return None
    hint = region_hint.lower()
    for code, fragments in REGION_KEYWORDS:
        if any(fragment in hint for fragment in fragments):
            return code
    return None


def classify(lat: float, lon: float, region_hint: str | None = None) -> RegionCode:
    """
    Resolve a coordinate to a marine basin code.

    Order: polar band, then region-name keywords, then basin bounding boxes,
    then the global model. Points north of ``POLAR_LATITUDE`` always go to the
    Arctic model whatever the hint says.

    Args:
        lat: Latitude in degrees.
        lon: Longitude in degrees.
        region_hint: Optional place/region name (e.g. an ICES area label).

    Returns:
        The basin code. Never raises; unusable input falls back to ``GLO``.
    """
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return RegionCode.GLO

    if lat > POLAR_LATITUDE:
        return RegionCode.ARC

    keyword_match = match_keyword(region_hint)
    if keyword_match is not None:
        return keyword_match

    for code, box in BASIN_BOXES:
        if box.contains(lat, lon):
            return code

    return RegionCode.GLO


def dataset_config(code: RegionCode) -> DatasetConfig:
    """Dataset ids for a basin."""
    return DATASETS[code]


def describe_coverage(code: RegionCode) -> str:
    """Human-readable coverage label, e.g. for provenance notes."""
    return DATASETS[code].coverage


def weather_zone(lat: float, lon: float) -> WeatherZone:
    """Resolve a coordinate to its weather coverage zone."""
    if in_any(US_BOXES, lat, lon):
        return WeatherZone.US
    if in_any(EUROPE_BOXES, lat, lon):
        return WeatherZone.EU
    return WeatherZone.GLOBAL
