"""Coastal Conditions - acquisition and caching of coastal environmental data.

Architecture::

    routing.py     GeoRouter: point (+ hint) -> ocean basin and dataset set
    datasources/   External APIs (Copernicus Marine, weather waterfall, WorldTides)
    cache.py       Read-through cache with spatial/temporal bucketing and TTL
    reconcile.py   Non-null merge of partial updates into the latest row
    store.py       Tiered JSON store (reference, live, cache, latest) and row stores
    registry.py    Per-basin provider handles, shared across cells
    flows/         Prefect orchestration (batch ingestion, point fetch)
    services/      Shared utilities (HTTP sessions with and without retry)

Data flow: cells -> routing -> provider (retry search) -> snapshots -> reconcile -> store

Extension points (see each package's docstring):
  - New data source:   datasources/__init__.py
"""

__version__ = "0.1.0"
__author__ = "Coastal Conditions contributors"

from coastal_conditions.config import Settings

__all__ = ["Settings", "__version__"]
