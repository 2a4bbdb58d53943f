"""
Read-through cache with spatial/temporal bucketing and per-class TTL.

Keys combine a data class, the coordinate rounded to that class's precision,
and (for fast-changing data) the current hour or day::

    weather:43.555,-5.663:2026-10-17T09
    tides:43.6,-5.7:2026-10-17
    air_quality:44,-6

Expiry is lazy: an expired entry is removed when it is next read. Callers
should go through ``get_or_fetch``, which never lets a cache failure affect the
returned value.
"""

from __future__ import annotations

import contextlib
import logging
import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from coastal_conditions.geo import GeoCell, Precision
from coastal_conditions.store import CACHE

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from coastal_conditions.store import DataStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TimeBucket(StrEnum):
    """Temporal component of a cache key."""

    NONE = "none"
    HOUR = "hour"
    DAY = "day"


class DataClass(StrEnum):
    """Kinds of cached data, each with its own bucketing and TTL."""

    WEATHER = "weather"
    AIR_QUALITY = "air_quality"
    TIDES = "tides"
    MARINE = "marine"
    ADVICE = "advice"
    BIOLOGY = "biology"


@dataclass(frozen=True)
class CachePolicy:
    """How a data class is keyed and how long it lives."""

    precision: Precision
    bucket: TimeBucket
    ttl: timedelta


CACHE_POLICIES: dict[DataClass, CachePolicy] = {
    DataClass.WEATHER: CachePolicy(Precision.STANDARD, TimeBucket.HOUR, timedelta(hours=1)),
    DataClass.AIR_QUALITY: CachePolicy(Precision.COARSE, TimeBucket.NONE, timedelta(hours=24)),
    DataClass.TIDES: CachePolicy(Precision.REGIONAL, TimeBucket.DAY, timedelta(hours=24)),
    DataClass.MARINE: CachePolicy(Precision.ENVIRONMENTAL, TimeBucket.DAY, timedelta(hours=6)),
    DataClass.ADVICE: CachePolicy(Precision.ENVIRONMENTAL, TimeBucket.NONE, timedelta(hours=6)),
    DataClass.BIOLOGY: CachePolicy(Precision.COARSE, TimeBucket.NONE, timedelta(hours=168)),
}


def key_for(
    data_class: DataClass,
    lat: float,
    lon: float,
    at: datetime | None = None,
    extra: tuple[str, ...] = (),
) -> str:
    """
    Build the bucketed cache key for a point.

    Args:
        data_class: Which policy to apply.
        lat: Latitude in degrees.
        lon: Longitude in degrees.
        at: Moment used for the temporal bucket (default: now, UTC).
        extra: Additional key parts (e.g. a query parameter).
    """
    policy = CACHE_POLICIES[data_class]
    parts = [str(data_class), GeoCell.from_point(lat, lon, policy.precision).key]
    if policy.bucket is not TimeBucket.NONE:
        moment = (at or _utcnow()).astimezone(UTC)
        fmt = "%Y-%m-%dT%H" if policy.bucket is TimeBucket.HOUR else "%Y-%m-%d"
        parts.append(moment.strftime(fmt))
    parts.extend(extra)
    return ":".join(parts)


@dataclass
class CacheEntry:
    """A cached payload and its lifetime."""

    key: str
    value: Any
    cached_at: datetime
    ttl: timedelta

    @property
    def expires_at(self) -> datetime:
        return self.cached_at + self.ttl

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class CacheStore:
    """Thread-safe in-memory cache. Last writer wins."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on miss. Expired entries are purged."""
        now = self._clock()
        with self._lock:
            entry = self._load(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                self._drop(key)
                return None
            return entry.value

    def put(self, key: str, value: Any, ttl: timedelta) -> None:
        """Store a value. ``None`` is never cached (it reads as a miss)."""
        if value is None:
            return
        entry = CacheEntry(key=key, value=value, cached_at=self._clock(), ttl=ttl)
        with self._lock:
            self._save(entry)

    def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Any],
        ttl: timedelta,
    ) -> Any:
        """
        Return the cached value, or call ``fetch`` and cache its result.

        Exceptions from ``fetch`` propagate. Failures while writing the fresh
        value are logged and ignored.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        value = fetch()
        try:
            self.put(key, value, ttl)
        except Exception:  # noqa: BLE001
            logger.warning("Cache write failed for %s", key, exc_info=True)
        return value

    def purge_expired(self) -> int:
        """Remove every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                self._drop(key)
        return len(expired)

    # Storage hooks, called with the lock held

    def _load(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def _save(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry

    def _drop(self, key: str) -> None:
        self._entries.pop(key, None)


class DiskCacheStore(CacheStore):
    """Cache persisted as JSON envelopes under ``cache/`` in a DataStore.

    Values must be JSON-serializable. Entries survive process restarts; the
    in-memory dict acts as a first-level cache.
    """

    def __init__(self, store: DataStore, clock: Callable[[], datetime] = _utcnow) -> None:
        super().__init__(clock)
        self.store = store

    @staticmethod
    def _path(key: str) -> Path:
        safe = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return CACHE / f"{safe}.json"

    def _load(self, key: str) -> CacheEntry | None:
        entry = super()._load(key)
        if entry is not None:
            return entry
        path = self._path(key)
        try:
            envelope = self.store.read_raw(path)
            if envelope is None:
                return None
            meta = envelope["meta"]
            cached_at = datetime.fromisoformat(meta["fetched_at"])
            expires_at = datetime.fromisoformat(meta["valid_until"])
            entry = CacheEntry(
                key=key,
                value=envelope.get("data"),
                cached_at=cached_at,
                ttl=expires_at - cached_at,
            )
        except (OSError, ValueError, KeyError, TypeError):
            # Unreadable entries count as a miss
            logger.warning("Discarding unreadable cache entry %s", path, exc_info=True)
            with contextlib.suppress(OSError):
                self.store.delete(path)
            return None
        super()._save(entry)
        return entry

    def _save(self, entry: CacheEntry) -> None:
        super()._save(entry)
        self.store.write(
            self._path(entry.key),
            entry.value,
            source="cache",
            valid_until=entry.expires_at,
            fetched_at=entry.cached_at.isoformat(),
            key=entry.key,
        )

    def _drop(self, key: str) -> None:
        super()._drop(key)
        self.store.delete(self._path(key))
