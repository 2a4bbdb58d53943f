"""Merge per-category time series into snapshots and persisted rows."""

from __future__ import annotations

import math
from collections import defaultdict
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from coastal_conditions.datasources.copernicus.client import (
    DEPTH_TOLERANCE_M,
    O2_MMOL_M3_TO_MG_L,
    SURFACE_DEPTH_M,
)
from coastal_conditions.datasources.copernicus.models import (
    DepthProfilePoint,
    MarineData,
    Snapshot,
    Timeseries,
    TimeSeriesRecord,
    Variable,
)

if TYPE_CHECKING:
    from coastal_conditions.datasources.copernicus.models import MarineBundle

# Profile field <- variable, for the physics and biogeochemical halves
PHYSICS_PROFILE_FIELDS: dict[str, Variable] = {
    "temperature": Variable.THETAO,
    "salinity": Variable.SO,
    "current_east": Variable.UO,
    "current_north": Variable.VO,
}
BIO_PROFILE_FIELDS: dict[str, Variable] = {
    "dissolved_oxygen": Variable.O2,
    "chlorophyll": Variable.CHL,
    "kd490": Variable.KD490,
    "nitrate": Variable.NO3,
    "phosphate": Variable.PO4,
    "zooplankton": Variable.ZOOC,
    "phytoplankton": Variable.PHYC,
}


def current_vector(east: float | None, north: float | None) -> tuple[float | None, float | None]:
    """Speed and direction (degrees in [0, 360), counter-clockwise from east)."""
    if east is None or north is None:
        return None, None
    speed = math.hypot(east, north)
    direction = (math.degrees(math.atan2(north, east)) + 360.0) % 360.0
    return speed, direction


# =============================================================================
# Merging time series
# =============================================================================


def group_by_time(records: list[TimeSeriesRecord]) -> dict[datetime, list[TimeSeriesRecord]]:
    """Bucket records by timestamp, preserving record order within a bucket."""
    grouped: dict[datetime, list[TimeSeriesRecord]] = defaultdict(list)
    for record in records:
        grouped[record.time].append(record)
    return dict(grouped)


def _nearest_at_depth(
    records: list[TimeSeriesRecord], depth: float
) -> TimeSeriesRecord | None:
    best: TimeSeriesRecord | None = None
    for record in records:
        gap = abs(record.depth - depth)
        if gap <= DEPTH_TOLERANCE_M and (best is None or gap < abs(best.depth - depth)):
            best = record
    return best


def merge_series(base: Timeseries, extra: Timeseries) -> Timeseries:
    """
    Fold ``extra``'s variables into ``base``.

    The two series may come from different days (a dependent category can be
    clamped to a fresher offset), so time steps are aligned by order and
    records within a step by nearest depth. Non-null values from ``extra``
    win; extra records with no depth match are added under the base time.
    """
    base_groups = group_by_time(base.records)
    extra_groups = group_by_time(extra.records)
    base_times = sorted(base_groups)
    extra_times = sorted(extra_groups)

    merged: list[TimeSeriesRecord] = []
    for index, time in enumerate(base_times):
        base_records = [
            TimeSeriesRecord(r.time, r.depth, r.lat, r.lon, dict(r.values))
            for r in base_groups[time]
        ]
        if index < len(extra_times):
            for extra_record in extra_groups[extra_times[index]]:
                target = _nearest_at_depth(base_records, extra_record.depth)
                if target is None:
                    target = TimeSeriesRecord(
                        time, extra_record.depth, extra_record.lat, extra_record.lon, {}
                    )
                    base_records.append(target)
                for variable, value in extra_record.values.items():
                    if value is not None:
                        target.values[variable] = value
        merged.extend(base_records)

    variables = list(base.variables)
    variables.extend(v for v in extra.variables if v not in variables)
    dataset_id = (
        base.dataset_id
        if extra.dataset_id in base.dataset_id.split("+")
        else f"{base.dataset_id}+{extra.dataset_id}"
    )
    return Timeseries(
        dataset_id=dataset_id, variables=variables, records=merged, source=base.source
    )


# =============================================================================
# Snapshots
# =============================================================================


def surface_value(records: list[TimeSeriesRecord], variable: Variable) -> float | None:
    """Value from the shallowest surface record (depth <= 1 m) holding it."""
    for record in sorted(records, key=lambda r: r.depth):
        if record.depth > SURFACE_DEPTH_M:
            break
        value = record.values.get(variable)
        if value is not None:
            return value
    return None


def depth_profile(
    physics: list[TimeSeriesRecord], bio: list[TimeSeriesRecord]
) -> list[DepthProfilePoint]:
    """Merge physics and biogeochemistry by depth, shallowest first."""
    profile: dict[float, DepthProfilePoint] = {}

    def _point(depth: float) -> DepthProfilePoint:
        if depth not in profile:
            profile[depth] = DepthProfilePoint(depth=depth)
        return profile[depth]

    for records, fields in ((physics, PHYSICS_PROFILE_FIELDS), (bio, BIO_PROFILE_FIELDS)):
        for record in records:
            point = _point(record.depth)
            for name, variable in fields.items():
                value = record.values.get(variable)
                if value is not None:
                    setattr(point, name, value)

    return [profile[depth] for depth in sorted(profile)]


def to_snapshots(bundle: MarineBundle) -> list[Snapshot]:
    """One snapshot per timestamp found in any category, oldest first."""
    physics_by_time = group_by_time(bundle.physics.records)
    bio_by_time = group_by_time(bundle.biogeochemical.records) if bundle.biogeochemical else {}
    waves_by_time = group_by_time(bundle.waves.records) if bundle.waves else {}

    timestamps = sorted(set(physics_by_time) | set(bio_by_time) | set(waves_by_time))

    snapshots: list[Snapshot] = []
    for timestamp in timestamps:
        physics = physics_by_time.get(timestamp, [])
        bio = bio_by_time.get(timestamp, [])
        waves = waves_by_time.get(timestamp, [])

        east = surface_value(physics, Variable.UO)
        north = surface_value(physics, Variable.VO)
        speed, direction = current_vector(east, north)

        wave_height = surface_value(waves, Variable.VHM0)
        if wave_height is None:
            wave_height = surface_value(waves, Variable.SWH)

        snapshots.append(
            Snapshot(
                timestamp=timestamp,
                temperature_surface=surface_value(physics, Variable.THETAO),
                salinity_surface=surface_value(physics, Variable.SO),
                dissolved_oxygen_surface=surface_value(bio, Variable.O2),
                chlorophyll_surface=surface_value(bio, Variable.CHL),
                kd490_surface=surface_value(bio, Variable.KD490),
                nitrate_surface=surface_value(bio, Variable.NO3),
                phosphate_surface=surface_value(bio, Variable.PO4),
                current_east_surface=east,
                current_north_surface=north,
                current_speed_surface=speed,
                current_direction_surface=direction,
                mixed_layer_depth=surface_value(physics, Variable.MLOTST),
                sea_surface_height=surface_value(physics, Variable.ZOS),
                zooplankton_surface=surface_value(bio, Variable.ZOOC),
                phytoplankton_surface=surface_value(bio, Variable.PHYC),
                primary_production_surface=surface_value(bio, Variable.NPPV),
                significant_wave_height=wave_height,
                wave_direction=surface_value(waves, Variable.VMDR),
                wave_period=surface_value(waves, Variable.VTM10),
                wind_sea_height=surface_value(waves, Variable.VHM0_WW),
                swell_height=surface_value(waves, Variable.VHM0_SW1),
                depth_profile=depth_profile(physics, bio),
            )
        )
    return snapshots


def to_marine_data(lat: float, lon: float, bundle: MarineBundle) -> MarineData:
    """Snapshots plus provenance for downstream consumers."""
    notes: list[str] = []
    if bundle.region is not None:
        notes.append(f"Region: {bundle.region}")
    if bundle.winning_offset:
        notes.append(f"Physics is {bundle.winning_offset} day(s) older than requested")
    if bundle.biogeochemical is None:
        notes.append("No biogeochemical data")
    if bundle.waves is None:
        notes.append("No wave data")

    return MarineData(
        lat=lat,
        lon=lon,
        snapshots=to_snapshots(bundle),
        datasets=bundle.dataset_ids,
        source=bundle.physics.source,
        generated_at=bundle.generated_at,
        notes=notes,
    )


# =============================================================================
# Persisted rows
# =============================================================================


def has_usable_snapshot(snapshot: Snapshot) -> bool:
    """True if the snapshot carries any of the headline readings."""
    headline = (
        snapshot.temperature_surface,
        snapshot.current_speed_surface,
        snapshot.kd490_surface,
        snapshot.zooplankton_surface,
    )
    return any(value is not None for value in headline)


def latest_usable(snapshots: list[Snapshot]) -> Snapshot | None:
    """Most recent snapshot with headline readings."""
    for snapshot in reversed(snapshots):
        if has_usable_snapshot(snapshot):
            return snapshot
    return None


def snapshot_to_row(
    cell_key: str,
    snapshot: Snapshot,
    *,
    region: str | None,
    sources: list[str],
    now: datetime | None = None,
) -> dict[str, Any]:
    """Column mapping for the latest-conditions row."""
    now = now or datetime.now(UTC)
    oxygen = snapshot.dissolved_oxygen_surface
    return {
        "cell_key": cell_key,
        "region_code": region,
        "captured_at": now,
        "valid_time": snapshot.timestamp,
        "last_attempt_at": now,
        "sources": list(sources),
        "sea_temp_c": snapshot.temperature_surface,
        "salinity_psu": snapshot.salinity_surface,
        "current_east_ms": snapshot.current_east_surface,
        "current_north_ms": snapshot.current_north_surface,
        "current_speed_ms": snapshot.current_speed_surface,
        "current_direction_deg": snapshot.current_direction_surface,
        "mixed_layer_depth_m": snapshot.mixed_layer_depth,
        "sea_surface_height_m": snapshot.sea_surface_height,
        "dissolved_oxygen_mg_l": oxygen * O2_MMOL_M3_TO_MG_L if oxygen is not None else None,
        "chlorophyll_mg_m3": snapshot.chlorophyll_surface,
        "kd490": snapshot.kd490_surface,
        "nitrate_umol_l": snapshot.nitrate_surface,
        "phosphate_umol_l": snapshot.phosphate_surface,
        "zooplankton_mmol_m3": snapshot.zooplankton_surface,
        "phytoplankton_mmol_m3": snapshot.phytoplankton_surface,
        "primary_production_mg_c_m3_day": snapshot.primary_production_surface,
        "wave_height_m": snapshot.significant_wave_height,
        "wave_direction_deg": snapshot.wave_direction,
        "wave_period_s": snapshot.wave_period,
        "wind_sea_height_m": snapshot.wind_sea_height,
        "swell_height_m": snapshot.swell_height,
    }
