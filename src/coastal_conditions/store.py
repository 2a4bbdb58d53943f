"""Tiered data store and latest-conditions row stores.

``DataStore`` manages JSON files organized into tiers by update frequency:
  - reference/: Static inputs (grid cell lists)
  - live/: Point conditions fetched on demand (weather, tides)
  - cache/: Read-through cache entries (see ``cache.DiskCacheStore``)
  - latest/: One latest-known conditions row per grid cell

Every JSON file is wrapped in a metadata envelope with ``valid_until`` so
callers can skip sources that are still fresh.

Row stores implement the persistence contract used by ingestion: ``get(key)``
and ``upsert(key, fields)``, where upsert applies the non-null merge from
``reconcile``. ``MemoryRowStore`` keeps rows in a dict; ``JsonRowStore`` writes
one envelope per cell under ``latest/``.
"""

from __future__ import annotations

import json
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

from coastal_conditions.reconcile import reconcile
from coastal_conditions.schemas import ConditionsRow


# Tier directories, relative to the store base
REFERENCE = Path("reference")
LIVE = Path("live")
CACHE = Path("cache")
LATEST = Path("latest")


class DataStore:
    """Manages read/write of cached data files with TTL."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir

    def read(self, path: Path) -> Any | None:
        """Read data payload from a metadata-enveloped JSON file.

        Returns the ``data`` field, or None if the file doesn't exist.
        """
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Read the full envelope (meta + data) from a JSON file."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            result: dict[str, Any] = json.load(f)
        return result

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``live/weather.json``).
            data: JSON-serializable payload stored under the ``data`` key.
            source: Data source identifier (e.g. ``"open-meteo.com"``).
            valid_until: Expiry timestamp. None means never fresh.
            **params: Extra metadata fields (location, query params, etc.).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        meta: dict[str, Any] = {
            "source": source,
            "fetched_at": datetime.now(UTC).isoformat(),
        }
        if valid_until is not None:
            meta["valid_until"] = valid_until.isoformat()
        if params:
            meta.update(params)

        envelope = {"meta": meta, "data": data}
        # Write-then-rename so concurrent readers never see a partial file
        tmp = full.with_name(f".{full.name}.{threading.get_ident()}.tmp")
        with tmp.open("w") as f:
            json.dump(envelope, f, indent=2)
        tmp.replace(full)

        return full

    def delete(self, path: Path) -> bool:
        """Remove a stored file. Returns False if it didn't exist."""
        full = self._resolve(path)
        try:
            full.unlink()
        except FileNotFoundError:
            return False
        return True

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full

    def is_fresh(self, path: Path, now: datetime | None = None) -> bool:
        """Check if a file exists and hasn't expired.

        Returns False if the file is missing, has no ``valid_until``, or
        the expiry time has passed.
        """
        envelope = self.read_raw(path)
        if envelope is None:
            return False

        valid_until = envelope.get("meta", {}).get("valid_until")
        if valid_until is None:
            return False

        expiry = datetime.fromisoformat(valid_until)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return (now or datetime.now(UTC)) < expiry


# =============================================================================
# Row stores
# =============================================================================


class RowStore(Protocol):
    """Persistence contract for latest-known rows."""

    def get(self, key: str) -> dict[str, Any] | None: ...

    def upsert(self, key: str, fields: dict[str, Any]) -> dict[str, Any]: ...


def captured_at(store: RowStore, key: str) -> datetime | None:
    """When the stored data for ``key`` was captured, if known."""
    row = store.get(key)
    if row is None:
        return None
    value = row.get("captured_at")
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value if isinstance(value, datetime) else None


class MemoryRowStore:
    """Rows held in a dict. Useful for tests and one-off runs."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[str, dict[str, Any]] = {}

    def get(self, key: str) -> dict[str, Any] | None:
        with self._lock:
            row = self._rows.get(key)
            return dict(row) if row is not None else None

    def upsert(self, key: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge ``fields`` into the row for ``key`` and return the result."""
        with self._lock:
            merged = reconcile(self._rows.get(key), fields)
            self._rows[key] = merged
            return dict(merged)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._rows)


class JsonRowStore:
    """Latest-conditions rows as JSON envelopes under ``latest/``."""

    def __init__(self, store: DataStore, source: str = "copernicus-marine") -> None:
        self.store = store
        self.source = source
        self._lock = threading.Lock()

    @staticmethod
    def path_for(key: str) -> Path:
        safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return LATEST / f"{safe}.json"

    def get(self, key: str) -> dict[str, Any] | None:
        data = self.store.read(self.path_for(key))
        if data is None:
            return None
        return ConditionsRow.model_validate(data).model_dump()

    def upsert(self, key: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Merge ``fields`` into the stored row and write it back."""
        with self._lock:
            merged = reconcile(self.get(key), {"cell_key": key, **fields})
            row = ConditionsRow.model_validate(merged)
            self.store.write(
                self.path_for(key),
                row.model_dump(mode="json"),
                source=self.source,
                cell_key=key,
            )
            return row.model_dump()
