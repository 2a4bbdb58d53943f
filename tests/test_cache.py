"""Tests for the bucketed read-through cache."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from coastal_conditions.cache import (
    CACHE_POLICIES,
    CacheStore,
    DataClass,
    DiskCacheStore,
    TimeBucket,
    key_for,
)
from coastal_conditions.store import DataStore

NOW = datetime(2026, 10, 17, 9, 30, tzinfo=UTC)


class Clock:
    """Manually advanced clock."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class TestKeyFor:
    """Cache keys combine class, rounded point and time bucket."""

    def test_weather_hourly(self) -> None:
        assert key_for(DataClass.WEATHER, 43.5551, -5.6629, at=NOW) == (
            "weather:43.555,-5.663:2026-10-17T09"
        )

    def test_tides_daily(self) -> None:
        assert key_for(DataClass.TIDES, 43.5551, -5.6629, at=NOW) == "tides:43.6,-5.7:2026-10-17"

    def test_air_quality_no_bucket(self) -> None:
        assert key_for(DataClass.AIR_QUALITY, 43.5551, -5.6629, at=NOW) == "air_quality:44,-6"

    def test_extra_parts(self) -> None:
        key = key_for(DataClass.TIDES, 43.5, -5.6, at=NOW, extra=("7d",))
        assert key.endswith(":7d")

    def test_nearby_points_share_key(self) -> None:
        a = key_for(DataClass.WEATHER, 43.55512, -5.66291, at=NOW)
        b = key_for(DataClass.WEATHER, 43.55498, -5.66304, at=NOW)
        assert a == b

    def test_bucket_rolls_over(self) -> None:
        a = key_for(DataClass.WEATHER, 43.5, -5.6, at=NOW)
        b = key_for(DataClass.WEATHER, 43.5, -5.6, at=NOW + timedelta(hours=1))
        assert a != b

    def test_every_class_has_policy(self) -> None:
        assert set(CACHE_POLICIES) == set(DataClass)
        assert CACHE_POLICIES[DataClass.AIR_QUALITY].bucket is TimeBucket.NONE


class TestCacheStore:
    """TTL expiry, purge and get_or_fetch."""

    def test_hit_within_ttl(self) -> None:
        clock = Clock()
        cache = CacheStore(clock)
        cache.put("k", {"a": 1}, timedelta(hours=1))
        clock.advance(minutes=59)
        assert cache.get("k") == {"a": 1}

    def test_expired_entry_removed_on_read(self) -> None:
        clock = Clock()
        cache = CacheStore(clock)
        cache.put("k", 1, timedelta(hours=1))
        clock.advance(hours=1)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_none_not_cached(self) -> None:
        cache = CacheStore(Clock())
        cache.put("k", None, timedelta(hours=1))
        assert len(cache) == 0

    def test_purge_expired(self) -> None:
        clock = Clock()
        cache = CacheStore(clock)
        cache.put("short", 1, timedelta(minutes=5))
        cache.put("long", 2, timedelta(hours=5))
        clock.advance(minutes=10)
        assert cache.purge_expired() == 1
        assert cache.get("long") == 2

    def test_get_or_fetch_calls_once(self) -> None:
        cache = CacheStore(Clock())
        calls: list[int] = []

        def fetch() -> int:
            calls.append(1)
            return 42

        assert cache.get_or_fetch("k", fetch, timedelta(hours=1)) == 42
        assert cache.get_or_fetch("k", fetch, timedelta(hours=1)) == 42
        assert len(calls) == 1

    def test_get_or_fetch_propagates_fetch_error(self) -> None:
        cache = CacheStore(Clock())

        def fetch() -> int:
            raise RuntimeError("upstream down")

        with pytest.raises(RuntimeError, match="upstream down"):
            cache.get_or_fetch("k", fetch, timedelta(hours=1))

    def test_get_or_fetch_survives_write_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        cache = CacheStore(Clock())

        def broken_put(*args: object) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(cache, "put", broken_put)
        assert cache.get_or_fetch("k", lambda: "value", timedelta(hours=1)) == "value"

    def test_none_result_refetched(self) -> None:
        cache = CacheStore(Clock())
        calls: list[int] = []

        def fetch() -> None:
            calls.append(1)

        cache.get_or_fetch("k", fetch, timedelta(hours=1))
        cache.get_or_fetch("k", fetch, timedelta(hours=1))
        assert len(calls) == 2


class TestDiskCacheStore:
    """Entries persist as envelopes under cache/."""

    def test_survives_new_instance(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        clock = Clock()
        DiskCacheStore(store, clock).put("weather:1,2", {"t": 14}, timedelta(hours=1))

        fresh = DiskCacheStore(store, clock)
        assert fresh.get("weather:1,2") == {"t": 14}
        assert (tmp_path / "cache" / "weather_1_2.json").exists()

    def test_expired_file_deleted(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        clock = Clock()
        DiskCacheStore(store, clock).put("k", [1, 2], timedelta(minutes=30))

        clock.advance(hours=1)
        fresh = DiskCacheStore(store, clock)
        assert fresh.get("k") is None
        assert not (tmp_path / "cache" / "k.json").exists()

    @pytest.mark.parametrize(
        "content",
        ["{ truncated", "[]", '{"meta": {}, "data": 1}', '{"data": 1}'],
        ids=["truncated", "not-an-object", "no-timestamps", "no-meta"],
    )
    def test_corrupt_file_is_a_miss(self, tmp_path: Path, content: str) -> None:
        store = DataStore(tmp_path)
        path = tmp_path / DiskCacheStore._path("weather:1,2")
        path.parent.mkdir(parents=True)
        path.write_text(content)

        cache = DiskCacheStore(store, Clock())
        assert cache.get("weather:1,2") is None
        assert not path.exists()

    def test_get_or_fetch_replaces_corrupt_file(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        path = tmp_path / DiskCacheStore._path("k")
        path.parent.mkdir(parents=True)
        path.write_text("{ truncated")

        cache = DiskCacheStore(store, Clock())
        assert cache.get_or_fetch("k", lambda: {"t": 15}, timedelta(hours=1)) == {"t": 15}
        assert DiskCacheStore(store, Clock()).get("k") == {"t": 15}
