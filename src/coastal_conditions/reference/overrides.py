"""Query-point overrides for grid cells whose centroid falls on land.

Model grids are masked over land, so querying a mostly-land cell at its
centroid returns only fill values. These cells are sampled at a nearby sea
point instead.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CoordinateOverride:
    """Replacement query point for one grid cell."""

    lat: float
    lon: float
    reason: str


COORDINATE_OVERRIDES: dict[str, CoordinateOverride] = {
    "25E0": CoordinateOverride(
        lat=43.502371,
        lon=-5.261184,
        reason="Bay of Biscay - rectangle has very little sea area",
    ),
}
