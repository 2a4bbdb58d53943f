"""Tide data source.

Public API:
  - worldtides: fetch_tide_extremes (WorldTides v3), get_tides (cached)
"""

from coastal_conditions.datasources.tides.worldtides import fetch_tide_extremes, get_tides

__all__ = ["fetch_tide_extremes", "get_tides"]
