"""Copernicus Marine ocean data source.

Physics, biogeochemistry and waves from regional and global ocean models.

Public API:
  - retry: RetryFetchEngine, build_attempt_plan (fallback search)
  - real: CopernicusMarineProvider (copernicusmarine toolbox)
  - mock: MockMarineProvider (deterministic, offline)
  - transform: to_snapshots, to_marine_data, snapshot_to_row
  - plausibility: is_plausible, filter_values, DEFAULT_BOUNDS
  - models: Variable, Category, FetchAttempt, Timeseries, MarineBundle, Snapshot
"""

from coastal_conditions.datasources.copernicus.mock import MockMarineProvider
from coastal_conditions.datasources.copernicus.models import (
    Category,
    FetchAttempt,
    FetchWindow,
    MarineBundle,
    MarineData,
    MarineProvider,
    Snapshot,
    Timeseries,
    TimeSeriesRecord,
    Variable,
)
from coastal_conditions.datasources.copernicus.plausibility import (
    DEFAULT_BOUNDS,
    filter_values,
    is_plausible,
)
from coastal_conditions.datasources.copernicus.retry import RetryFetchEngine, build_attempt_plan
from coastal_conditions.datasources.copernicus.transform import (
    snapshot_to_row,
    to_marine_data,
    to_snapshots,
)

__all__ = [
    "DEFAULT_BOUNDS",
    "Category",
    "FetchAttempt",
    "FetchWindow",
    "MarineBundle",
    "MarineData",
    "MarineProvider",
    "MockMarineProvider",
    "RetryFetchEngine",
    "Snapshot",
    "TimeSeriesRecord",
    "Timeseries",
    "Variable",
    "build_attempt_plan",
    "filter_values",
    "is_plausible",
    "snapshot_to_row",
    "to_marine_data",
    "to_snapshots",
]
