"""Bounding boxes used for routing and spatial padding."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BoundingBox:
    """South/west/north/east lat-lon box (inclusive edges)."""

    south: float
    west: float
    north: float
    east: float

    def contains(self, lat: float, lon: float) -> bool:
        """True if the point lies inside the box, edges included."""
        return self.south <= lat <= self.north and self.west <= lon <= self.east

    @classmethod
    def around(cls, lat: float, lon: float, padding: float) -> BoundingBox:
        """Symmetric box of half-width ``padding`` degrees around a point.

        Latitude is clamped to the poles; longitude is left unwrapped since
        providers accept boxes straddling +-180.
        """
        return cls(
            south=max(lat - padding, -90.0),
            west=lon - padding,
            north=min(lat + padding, 90.0),
            east=lon + padding,
        )


# =============================================================================
# Weather coverage boxes
# =============================================================================

# National free tier (api.weather.gov) covers the US and its island states.
US_CONTINENTAL = BoundingBox(south=24.5, west=-125.0, north=49.0, east=-66.0)
US_ALASKA_WEST = BoundingBox(south=51.0, west=-180.0, north=71.0, east=-130.0)
US_ALASKA_ALEUTIANS = BoundingBox(south=51.0, west=172.0, north=71.0, east=180.0)
US_HAWAII = BoundingBox(south=18.0, west=-160.0, north=23.0, east=-154.0)

US_BOXES: tuple[BoundingBox, ...] = (
    US_CONTINENTAL,
    US_ALASKA_WEST,
    US_ALASKA_ALEUTIANS,
    US_HAWAII,
)

# Regional free tier (Met.no) is tuned for Europe.
EUROPE = BoundingBox(south=35.0, west=-10.0, north=71.0, east=40.0)

EUROPE_BOXES: tuple[BoundingBox, ...] = (EUROPE,)


def in_any(boxes: tuple[BoundingBox, ...], lat: float, lon: float) -> bool:
    """True if any box contains the point."""
    return any(box.contains(lat, lon) for box in boxes)
