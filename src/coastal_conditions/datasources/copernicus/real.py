"""Copernicus Marine provider backed by the ``copernicusmarine`` toolbox.

Each query opens a lazily-loaded subset with ``copernicusmarine.open_dataset``,
keeps the depth levels nearest 0/5/10 m, and averages every variable over the
query box with ``numpy.nanmean``. The retry engine decides which queries run.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, time
from typing import TYPE_CHECKING, Any

import copernicusmarine
import numpy as np
import xarray as xr

from coastal_conditions.config import Settings, get_settings
from coastal_conditions.datasources.copernicus.client import (
    DEPTH_TOLERANCE_M,
    SOURCE_COPERNICUS,
    TARGET_DEPTHS_M,
)
from coastal_conditions.datasources.copernicus.models import (
    FetchWindow,
    MarineBundle,
    Timeseries,
    TimeSeriesRecord,
    Variable,
    parse_variable,
)
from coastal_conditions.datasources.copernicus.plausibility import FILL_MAGNITUDE
from coastal_conditions.datasources.copernicus.retry import RetryFetchEngine
from coastal_conditions.errors import ProviderError
from coastal_conditions.routing import dataset_config

if TYPE_CHECKING:
    from coastal_conditions.reference.basins import RegionCode
    from coastal_conditions.reference.geography import BoundingBox

logger = logging.getLogger(__name__)


def select_depths(depths: list[float]) -> list[tuple[int, float]]:
    """Indices of the levels nearest each target depth, within tolerance.

    Falls back to the first (shallowest) level when nothing is close.
    """
    if not depths:
        return []
    selected: list[tuple[int, float]] = []
    for target in TARGET_DEPTHS_M:
        index = min(range(len(depths)), key=lambda i: abs(depths[i] - target))
        if abs(depths[index] - target) <= DEPTH_TOLERANCE_M and all(
            index != chosen for chosen, _ in selected
        ):
            selected.append((index, depths[index]))
    return selected or [(0, depths[0])]


def spatial_mean(values: Any) -> float | None:
    """Mean over a (lat, lon) grid ignoring NaN and fill values."""
    arr = np.asarray(values, dtype=float)
    arr = np.where(np.abs(arr) > FILL_MAGNITUDE, np.nan, arr)
    if arr.size == 0 or np.all(np.isnan(arr)):
        return None
    return float(np.nanmean(arr))


def _to_datetime(value: Any) -> datetime:
    seconds = np.datetime64(value, "s").astype("int64")
    return datetime.fromtimestamp(int(seconds), tz=UTC)


def parse_dataset(ds: xr.Dataset, dataset_id: str, window: FetchWindow) -> Timeseries:
    """Flatten a gridded subset into per-(time, depth) records.

    Unknown variables are dropped; values are spatial means over the box.
    """
    lat_name = "latitude" if "latitude" in ds.coords else "lat"
    lon_name = "longitude" if "longitude" in ds.coords else "lon"
    lat = float(np.nanmean(np.asarray(ds[lat_name].values, dtype=float)))
    lon = float(np.nanmean(np.asarray(ds[lon_name].values, dtype=float)))

    if "time" in ds.dims:
        times = [_to_datetime(t) for t in ds["time"].values]
    else:
        times = [datetime.combine(window.day, time.min, tzinfo=UTC)]

    has_depth = "depth" in ds.dims
    levels = (
        select_depths([float(d) for d in ds["depth"].values]) if has_depth else [(0, 0.0)]
    )

    variables: dict[str, Variable] = {}
    for name in ds.data_vars:
        variable = parse_variable(str(name))
        if variable is None:
            logger.debug("Ignoring unknown variable %s in %s", name, dataset_id)
            continue
        variables[str(name)] = variable

    records: list[TimeSeriesRecord] = []
    for time_index, timestamp in enumerate(times):
        for depth_index, depth in levels:
            values: dict[Variable, float | None] = {}
            for name, variable in variables.items():
                data = ds[name]
                selector: dict[str, int] = {}
                if "time" in data.dims:
                    selector["time"] = time_index
                if "depth" in data.dims:
                    selector["depth"] = depth_index
                values[variable] = spatial_mean(data.isel(selector).values)
            if any(v is not None for v in values.values()):
                records.append(
                    TimeSeriesRecord(time=timestamp, depth=depth, lat=lat, lon=lon, values=values)
                )

    return Timeseries(
        dataset_id=dataset_id,
        variables=list(dict.fromkeys(variables.values())),
        records=records,
        source=SOURCE_COPERNICUS,
    )


class CopernicusSubsetFetcher:
    """Runs subset queries against the Copernicus Marine service."""

    def __init__(self, username: str | None, password: str | None) -> None:
        self.username = username
        self.password = password

    def fetch(
        self,
        dataset_id: str,
        variables: tuple[str, ...] | None,
        bbox: BoundingBox,
        window: FetchWindow,
    ) -> Timeseries:
        """
        Query one dataset for one day over a bounding box.

        Raises:
            ProviderError: If the toolbox call or parsing fails.
        """
        start = datetime.combine(window.day, time.min)
        end = datetime.combine(window.day, time(23, 59, 59))
        params: dict[str, Any] = {
            "dataset_id": dataset_id,
            "minimum_longitude": bbox.west,
            "maximum_longitude": bbox.east,
            "minimum_latitude": bbox.south,
            "maximum_latitude": bbox.north,
            "start_datetime": start.strftime("%Y-%m-%dT%H:%M:%S"),
            "end_datetime": end.strftime("%Y-%m-%dT%H:%M:%S"),
            "username": self.username,
            "password": self.password,
        }
        if variables:
            params["variables"] = list(variables)

        logger.debug("open_dataset %s %s on %s", dataset_id, bbox, window.day)
        try:
            ds = copernicusmarine.open_dataset(**params)
        except Exception as exc:
            msg = f"{dataset_id}: {exc}"
            raise ProviderError(msg) from exc

        if not isinstance(ds, xr.Dataset):
            msg = f"{dataset_id}: expected an xarray Dataset, got {type(ds).__name__}"
            raise ProviderError(msg)

        try:
            return parse_dataset(ds, dataset_id, window)
        except (KeyError, ValueError, IndexError) as exc:
            msg = f"{dataset_id}: malformed subset: {exc}"
            raise ProviderError(msg) from exc
        finally:
            ds.close()


class CopernicusMarineProvider:
    """Real marine provider for one basin."""

    def __init__(
        self,
        region: RegionCode,
        *,
        settings: Settings | None = None,
        fetcher: CopernicusSubsetFetcher | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.region = region
        self.fetcher = fetcher or CopernicusSubsetFetcher(
            settings.copernicus_username, settings.copernicus_password
        )
        self.engine = RetryFetchEngine(
            dataset_config(region),
            self.fetcher,
            region=region,
            paddings=settings.paddings,
            probe_timeout=settings.probe_timeout_s,
            attempt_timeout=settings.attempt_timeout_s,
        )

    def fetch_bundle(self, lat: float, lon: float, window: FetchWindow) -> MarineBundle:
        return self.engine.fetch_bundle(lat, lon, window)
