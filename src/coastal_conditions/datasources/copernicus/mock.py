"""Deterministic marine provider for tests and credential-less runs.

Values are derived from the query point only, so the same point always
yields the same bundle. Readings are plausible for a temperate shelf sea.
"""

from __future__ import annotations

from datetime import UTC, datetime, time

from coastal_conditions.datasources.copernicus.client import SOURCE_MOCK
from coastal_conditions.datasources.copernicus.models import (
    FetchWindow,
    MarineBundle,
    Timeseries,
    TimeSeriesRecord,
    Variable,
)
from coastal_conditions.reference.basins import RegionCode

# Model levels of the regional physics products (m)
MOCK_DEPTHS = (0.494, 5.078, 9.573)


def _series(
    name: str,
    day: datetime,
    lat: float,
    lon: float,
    rows: list[dict[Variable, float | None]],
) -> Timeseries:
    records = [
        TimeSeriesRecord(time=day, depth=depth, lat=lat, lon=lon, values=values)
        for depth, values in zip(MOCK_DEPTHS, rows, strict=False)
    ]
    variables = list(dict.fromkeys(v for row in rows for v in row))
    return Timeseries(
        dataset_id=f"mock-{name}", variables=variables, records=records, source=SOURCE_MOCK
    )


class MockMarineProvider:
    """Marine provider that never touches the network."""

    def __init__(self, region: RegionCode | None = None) -> None:
        self.region = region

    def fetch_bundle(self, lat: float, lon: float, window: FetchWindow) -> MarineBundle:
        day = datetime.combine(window.day, time.min, tzinfo=UTC)
        surface_temp = round(max(min(28.0 - 0.35 * abs(lat), 30.0), -1.5), 2)
        salinity = 7.2 if self.region is RegionCode.BAL else 35.1

        physics = _series(
            "physics",
            day,
            lat,
            lon,
            [
                {
                    Variable.THETAO: round(surface_temp - 0.1 * depth, 2),
                    Variable.SO: salinity,
                    Variable.UO: 0.12,
                    Variable.VO: -0.05,
                    Variable.MLOTST: 18.5 if depth < 1 else None,
                    Variable.ZOS: 0.21 if depth < 1 else None,
                }
                for depth in MOCK_DEPTHS
            ],
        )
        biogeochemical = _series(
            "biogeochemistry",
            day,
            lat,
            lon,
            [
                {
                    Variable.O2: 250.0 - depth,
                    Variable.CHL: 0.8,
                    Variable.KD490: 0.06 if depth < 1 else None,
                    Variable.NO3: 2.5,
                    Variable.PO4: 0.3,
                    Variable.ZOOC: 1.9,
                    Variable.PHYC: 2.4,
                    Variable.NPPV: 12.0,
                }
                for depth in MOCK_DEPTHS
            ],
        )
        waves = _series(
            "waves",
            day,
            lat,
            lon,
            [{Variable.VHM0: 1.4, Variable.VMDR: 285.0, Variable.VTM10: 6.8}],
        )

        return MarineBundle(
            physics=physics,
            biogeochemical=biogeochemical,
            waves=waves,
            region=self.region,
            winning_offset=0,
            winning_padding=0.0,
        )
