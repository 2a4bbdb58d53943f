"""
Prefect flow for batch ingestion of marine conditions over grid cells.

For each cell: classify its basin, fetch a bundle (regional provider first,
global on exhaustion), pick the latest usable snapshot and merge it into the
cell's latest-conditions row. Cells with fresh rows are skipped.

Run locally:
    python -m coastal_conditions.flows.ingest cells.json

Run with Prefect dashboard:
    prefect server start &
    python -m coastal_conditions.flows.ingest cells.json
"""

from __future__ import annotations

import json
import math
import time
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from coastal_conditions.config import Settings, get_settings
from coastal_conditions.datasources.copernicus.mock import MockMarineProvider
from coastal_conditions.datasources.copernicus.models import (
    FetchWindow,
    MarineBundle,
    MarineProvider,
)
from coastal_conditions.datasources.copernicus.transform import (
    latest_usable,
    snapshot_to_row,
    to_snapshots,
)
from coastal_conditions.errors import NoUsableDataError
from coastal_conditions.reference.basins import RegionCode
from coastal_conditions.reference.overrides import COORDINATE_OVERRIDES
from coastal_conditions.registry import ProviderRegistry
from coastal_conditions.routing import classify
from coastal_conditions.schemas import GridCell, Status
from coastal_conditions.store import (
    REFERENCE,
    DataStore,
    JsonRowStore,
    RowStore,
    captured_at,
)

# Data store with tiered directories
store = DataStore(Path("data"))

CELLS_PATH = REFERENCE / "cells.json"

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class PlannedCell:
    """A grid cell with its query point and basin resolved."""

    cell: GridCell
    lat: float
    lon: float
    region: RegionCode
    overridden: bool = False


# =============================================================================
# Planning
# =============================================================================


def load_cells(path: Path | None = None) -> list[GridCell]:
    """
    Load grid cells from a JSON file, or from ``reference/cells.json``.

    Accepts a bare list of cells, ``{"cells": [...]}``, or a store envelope.
    """
    if path is None:
        data: Any = store.read(CELLS_PATH) or []
    else:
        with path.open() as f:
            data = json.load(f)
    if isinstance(data, dict):
        data = data.get("cells", data.get("data", []))
    return [GridCell.model_validate(item) for item in data]


def plan_cell(cell: GridCell) -> PlannedCell:
    """Apply coordinate overrides and classify the query point."""
    override = COORDINATE_OVERRIDES.get(cell.key)
    lat, lon = (override.lat, override.lon) if override else (cell.lat, cell.lon)
    return PlannedCell(
        cell=cell,
        lat=lat,
        lon=lon,
        region=classify(lat, lon, cell.region_hint),
        overridden=override is not None,
    )


def is_fresh(rows: RowStore, key: str, now: datetime, freshness_hours: float) -> bool:
    """True if the stored row for ``key`` was captured within the window."""
    stamp = captured_at(rows, key)
    return stamp is not None and now - stamp < timedelta(hours=freshness_hours)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = phi2 - phi1
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def prioritize(
    planned: list[PlannedCell],
    poi: tuple[float, float] | None = None,
) -> list[PlannedCell]:
    """
    Order cells for this run, most important first.

    With a point of interest, nearest to it first; otherwise by
    ``distance_km`` ascending (cells without one go last). Ties by key.
    """

    def rank(p: PlannedCell) -> tuple[float, str]:
        if poi is not None:
            return haversine_km(p.lat, p.lon, *poi), p.cell.key
        distance = p.cell.distance_km
        return (distance if distance is not None else math.inf), p.cell.key

    return sorted(planned, key=rank)


def group_by_region(planned: list[PlannedCell]) -> dict[RegionCode, list[PlannedCell]]:
    """Group cells by basin, keeping priority order within and across groups."""
    groups: dict[RegionCode, list[PlannedCell]] = {}
    for p in planned:
        groups.setdefault(p.region, []).append(p)
    return groups


def batched(items: list[PlannedCell], size: int) -> list[list[PlannedCell]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


def reference_window(now: datetime | None = None) -> FetchWindow:
    """Yesterday (UTC): analysis products lag about a day."""
    today = (now or datetime.now(UTC)).astimezone(UTC).date()
    return FetchWindow(today - timedelta(days=1))


def build_provider(
    region: RegionCode,
    *,
    mock: bool,
    settings: Settings,
) -> MarineProvider:
    """Create the marine provider for one basin."""
    if mock:
        return MockMarineProvider(region)
    # Imported lazily: the toolbox is heavy and only needed for real runs
    from coastal_conditions.datasources.copernicus.real import CopernicusMarineProvider

    return CopernicusMarineProvider(region, settings=settings)


# =============================================================================
# Tasks
# =============================================================================


def fetch_with_fallback(
    registry: ProviderRegistry,
    planned: PlannedCell,
    window: FetchWindow,
) -> tuple[MarineBundle, bool]:
    """
    Fetch from the cell's basin provider, then once from the global one.

    Returns the bundle and whether the global fallback was used.
    """
    try:
        return registry.get(planned.region).fetch_bundle(planned.lat, planned.lon, window), False
    except NoUsableDataError as exc:
        if planned.region is RegionCode.GLO:
            raise
        print(f"   {planned.cell.key}: {planned.region} exhausted ({exc}), trying GLO")
    return registry.get(RegionCode.GLO).fetch_bundle(planned.lat, planned.lon, window), True


@task(name="ingest-cell", retries=0, cache_policy=NO_CACHE)
def ingest_cell(
    planned: PlannedCell,
    registry: ProviderRegistry,
    rows: RowStore,
    window: FetchWindow,
) -> dict[str, Any]:
    """
    Ingest one cell. Never raises for provider or persistence failures.

    Returns:
        Outcome dict with ``key``, ``region``, ``status``, ``fallback`` and
        ``error`` (None on success).
    """
    key = planned.cell.key
    outcome: dict[str, Any] = {
        "key": key,
        "region": str(planned.region),
        "status": Status.FAILED,
        "fallback": False,
        "error": None,
    }
    now = datetime.now(UTC)

    try:
        bundle, outcome["fallback"] = fetch_with_fallback(registry, planned, window)
        outcome["region"] = str(bundle.region)
        snapshot = latest_usable(to_snapshots(bundle))
        if snapshot is None:
            msg = f"No usable snapshot for {key}"
            raise NoUsableDataError(msg, attempts=len(bundle.attempts))
        row = snapshot_to_row(
            key, snapshot, region=str(bundle.region), sources=bundle.dataset_ids, now=now
        )
        rows.upsert(key, row)
    except Exception as exc:  # noqa: BLE001
        outcome["error"] = str(exc)
        print(f"   {key}: failed: {exc}")
        _record_attempt(rows, key, now)
        return outcome

    outcome["status"] = Status.SUCCEEDED
    temp = row["sea_temp_c"]
    temp_text = f"{temp:.1f}C" if temp is not None else "n/a"
    print(f"   {key}: ok ({outcome['region']}, temp {temp_text})")
    return outcome


def _record_attempt(rows: RowStore, key: str, now: datetime) -> None:
    """Stamp the attempt on an existing row; data fields are left untouched."""
    try:
        if rows.get(key) is not None:
            rows.upsert(key, {"last_attempt_at": now})
    except Exception as exc:  # noqa: BLE001
        print(f"   {key}: could not record attempt: {exc}")


# =============================================================================
# Flow
# =============================================================================


def _summarize(
    outcomes: list[dict[str, Any]],
    *,
    total: int,
    skipped_fresh: int,
    unscheduled: list[str],
    elapsed: float,
) -> dict[str, Any]:
    regions: dict[str, dict[str, int]] = {}
    for o in outcomes:
        counts = regions.setdefault(o["region"], {"succeeded": 0, "failed": 0})
        counts["succeeded" if o["status"] == Status.SUCCEEDED else "failed"] += 1
    return {
        "total": total,
        "processed": len(outcomes),
        "succeeded": sum(o["status"] == Status.SUCCEEDED for o in outcomes),
        "failed": sum(o["status"] == Status.FAILED for o in outcomes),
        "fallbacks": sum(bool(o["fallback"]) for o in outcomes),
        "skipped_fresh": skipped_fresh,
        "unscheduled": len(unscheduled),
        "unscheduled_keys": unscheduled,
        "failed_keys": [o["key"] for o in outcomes if o["status"] == Status.FAILED],
        "regions": regions,
        "elapsed_seconds": round(elapsed, 1),
    }


@flow(name="ingest-conditions", log_prints=True)
def ingest_all(  # noqa: PLR0913
    cells_path: str | None = None,
    force: bool | None = None,
    limit: int | None = None,
    mock: bool | None = None,
    poi_lat: float | None = None,
    poi_lon: float | None = None,
) -> dict[str, Any]:
    """
    Ingest latest marine conditions for every stale grid cell.

    Args:
        cells_path: JSON file of grid cells (default: ``reference/cells.json``
            in the data store).
        force: Ignore freshness (default: ``FORCE_REFRESH`` setting).
        limit: Per-run cell cap (default: ``MAX_CELLS`` setting).
        mock: Use the offline mock provider (default: when Copernicus
            credentials are missing or ``USE_MOCK_MARINE`` is set).
        poi_lat: Optional point of interest; nearest cells go first.
        poi_lon: Longitude of the point of interest.

    Returns:
        Run summary (counts per status and per region).
    """
    settings = get_settings()
    force = settings.force_refresh if force is None else force
    limit = settings.max_cells if limit is None else limit
    if mock is None:
        mock = settings.use_mock_marine or not settings.has_copernicus_credentials
    poi = (poi_lat, poi_lon) if poi_lat is not None and poi_lon is not None else None

    started = time.monotonic()
    rows = JsonRowStore(store)
    window = reference_window()
    now = datetime.now(UTC)

    cells = load_cells(Path(cells_path) if cells_path else None)
    print(f"Loaded {len(cells)} grid cells")
    print("Using MOCK marine data" if mock else "Using Copernicus Marine")

    planned = [plan_cell(c) for c in cells]
    for p in planned:
        if p.overridden:
            print(f"   {p.cell.key}: query point overridden to ({p.lat:.2f}, {p.lon:.2f})")

    if force:
        print("Force refresh: ignoring freshness")
        stale = planned
    else:
        hours = settings.freshness_hours
        stale = [p for p in planned if not is_fresh(rows, p.cell.key, now, hours)]
        print(f"{len(planned) - len(stale)} cells fresh (<{hours:g}h), skipping")
    skipped_fresh = len(planned) - len(stale)

    queue = prioritize(stale, poi)
    if limit is not None:
        queue = queue[:limit]

    registry = ProviderRegistry(lambda region: build_provider(region, mock=mock, settings=settings))
    batches = [
        batch
        for group in group_by_region(queue).values()
        for batch in batched(group, settings.batch_size)
    ]
    print(f"Ingesting {len(queue)} cells for {window.day} in {len(batches)} batches")

    outcomes: list[dict[str, Any]] = []
    unscheduled: list[str] = []
    for i, batch in enumerate(batches):
        elapsed = time.monotonic() - started
        if settings.max_runtime_seconds is not None and elapsed >= settings.max_runtime_seconds:
            unscheduled = [p.cell.key for b in batches[i:] for p in b]
            print(f"Runtime limit reached after {elapsed:.0f}s; {len(unscheduled)} cells left")
            break

        print(f"Batch {i + 1}/{len(batches)} ({batch[0].region}): {len(batch)} cells")
        futures = [ingest_cell.submit(p, registry, rows, window) for p in batch]
        outcomes.extend(f.result() for f in futures)

        if i + 1 < len(batches) and settings.batch_delay_ms:
            time.sleep(settings.batch_delay_ms / 1000)

    summary = _summarize(
        outcomes,
        total=len(cells),
        skipped_fresh=skipped_fresh,
        unscheduled=unscheduled,
        elapsed=time.monotonic() - started,
    )
    print(
        f"Done: {summary['succeeded']} succeeded, {summary['failed']} failed, "
        f"{summary['skipped_fresh']} fresh, {summary['unscheduled']} unscheduled"
    )
    return summary


if __name__ == "__main__":
    import sys

    result = ingest_all(sys.argv[1] if len(sys.argv) > 1 else None)
    print(f"Flow complete: {result}")
