"""Coordinate bucketing.

Points are rounded to a precision tier before they are used as cache or
storage keys, so nearby requests share an entry. The tier is chosen per data
class: air quality barely changes across a degree, a paid tide lookup is fine
at ~11 km, general weather wants ~110 m.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Precision(IntEnum):
    """Decimal places kept when rounding a coordinate."""

    COARSE = 0  # ~111 km
    REGIONAL = 1  # ~11 km
    ENVIRONMENTAL = 2  # ~1.1 km
    STANDARD = 3  # ~110 m
    HIGH = 4  # ~11 m


def round_coord(value: float, precision: int) -> float:
    """Round a coordinate, normalizing ``-0.0`` to ``0.0``."""
    rounded = round(value, precision)
    return 0.0 if rounded == 0 else rounded


@dataclass(frozen=True)
class GeoCell:
    """A coordinate snapped to a precision tier."""

    lat: float
    lon: float
    precision: int

    @classmethod
    def from_point(cls, lat: float, lon: float, precision: int) -> GeoCell:
        return cls(round_coord(lat, precision), round_coord(lon, precision), precision)

    @property
    def key(self) -> str:
        """Stable string key, e.g. ``"43.55,-5.66"`` at precision 2."""
        p = self.precision
        return f"{self.lat:.{p}f},{self.lon:.{p}f}"
