"""Tests for the DataStore and row stores."""

from __future__ import annotations

import json
import threading
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from coastal_conditions.store import (
    CACHE,
    LATEST,
    LIVE,
    REFERENCE,
    DataStore,
    JsonRowStore,
    MemoryRowStore,
    captured_at,
)


class TestDataStoreInit:
    """Test DataStore initialization."""

    def test_base(self, tmp_path: Path) -> None:
        assert DataStore(tmp_path).base == tmp_path

    def test_tiers_resolve_under_base(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        for tier in (REFERENCE, LIVE, CACHE, LATEST):
            assert store.write(tier / "x.json", {}, source="test") == tmp_path / tier / "x.json"


class TestDataStoreWrite:
    """Test writing data with metadata envelopes."""

    def test_write_creates_file(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        path = store.write(Path("live/weather.json"), {"temp": 20}, source="test")
        assert path.exists()

    def test_write_envelope_format(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        valid = datetime(2026, 3, 1, tzinfo=UTC)
        store.write(Path("live/weather.json"), {"temp": 20}, source="open-meteo", valid_until=valid)

        data = json.loads((tmp_path / "live" / "weather.json").read_text())
        assert "meta" in data
        assert "data" in data
        assert data["meta"]["source"] == "open-meteo"
        assert "fetched_at" in data["meta"]
        assert data["meta"]["valid_until"] == valid.isoformat()
        assert data["data"] == {"temp": 20}

    def test_write_extra_params(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(
            Path("live/test.json"),
            {},
            source="test",
            location={"lat": 43.55, "lon": -5.66},
        )
        data = json.loads((tmp_path / "live" / "test.json").read_text())
        assert data["meta"]["location"] == {"lat": 43.55, "lon": -5.66}

    def test_write_creates_parent_dirs(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("cache/deep/nested.json"), {}, source="test")
        assert (tmp_path / "cache" / "deep" / "nested.json").exists()

    def test_write_no_valid_until(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("latest/output.json"), {}, source="test")
        data = json.loads((tmp_path / "latest" / "output.json").read_text())
        assert "valid_until" not in data["meta"]

    def test_write_leaves_no_temp_files(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("live/test.json"), {"a": 1}, source="test")
        assert [p.name for p in (tmp_path / "live").iterdir()] == ["test.json"]

    def test_write_outside_base_rejected(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path / "data")
        with pytest.raises(ValueError, match="escapes"):
            store.write(Path("../outside.json"), {}, source="test")


class TestDataStoreRead:
    """Test reading data from the store."""

    def test_read_returns_data_payload(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("live/test.json"), {"key": "value"}, source="test")
        result = store.read(Path("live/test.json"))
        assert result == {"key": "value"}

    def test_read_missing_file(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        assert store.read(Path("nonexistent.json")) is None

    def test_read_raw_returns_full_envelope(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("live/test.json"), {"key": "value"}, source="test")
        result = store.read_raw(Path("live/test.json"))
        assert result is not None
        assert "meta" in result
        assert "data" in result
        assert result["data"] == {"key": "value"}

    def test_read_raw_missing_file(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        assert store.read_raw(Path("nonexistent.json")) is None


class TestDataStoreDelete:
    """Test removing stored files."""

    def test_delete_existing(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("cache/x.json"), {}, source="test")
        assert store.delete(Path("cache/x.json")) is True
        assert store.read(Path("cache/x.json")) is None

    def test_delete_missing(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        assert store.delete(Path("cache/missing.json")) is False


class TestDataStoreIsFresh:
    """Test freshness checking."""

    def test_missing_file_not_fresh(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        assert store.is_fresh(Path("nonexistent.json")) is False

    def test_expired_file_not_fresh(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        past = datetime.now(UTC) - timedelta(hours=1)
        store.write(Path("live/test.json"), {}, source="test", valid_until=past)
        assert store.is_fresh(Path("live/test.json")) is False

    def test_future_valid_until_is_fresh(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        future = datetime.now(UTC) + timedelta(hours=6)
        store.write(Path("live/test.json"), {}, source="test", valid_until=future)
        assert store.is_fresh(Path("live/test.json")) is True

    def test_no_valid_until_not_fresh(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        store.write(Path("latest/test.json"), {}, source="test")
        assert store.is_fresh(Path("latest/test.json")) is False

    def test_explicit_now(self, tmp_path: Path) -> None:
        store = DataStore(tmp_path)
        valid = datetime(2026, 3, 1, 12, tzinfo=UTC)
        store.write(Path("live/test.json"), {}, source="test", valid_until=valid)
        assert store.is_fresh(Path("live/test.json"), now=valid - timedelta(minutes=1))
        assert not store.is_fresh(Path("live/test.json"), now=valid)


class TestMemoryRowStore:
    """Upserts merge instead of overwrite."""

    def test_get_missing(self) -> None:
        rows = MemoryRowStore()
        assert rows.get("25E0") is None

    def test_first_upsert_stores_verbatim(self) -> None:
        rows = MemoryRowStore()
        rows.upsert("25E0", {"sea_temp_c": 14.2, "chlorophyll_mg_m3": None})
        assert rows.get("25E0") == {"sea_temp_c": 14.2, "chlorophyll_mg_m3": None}

    def test_partial_update_keeps_known_values(self) -> None:
        rows = MemoryRowStore()
        rows.upsert("25E0", {"chlorophyll_mg_m3": 2.1, "sea_temp_c": None})
        merged = rows.upsert("25E0", {"chlorophyll_mg_m3": None, "sea_temp_c": 14.2})
        assert merged == {"chlorophyll_mg_m3": 2.1, "sea_temp_c": 14.2}

    def test_get_returns_copy(self) -> None:
        rows = MemoryRowStore()
        rows.upsert("a", {"x": 1})
        row = rows.get("a")
        assert row is not None
        row["x"] = 99
        assert rows.get("a") == {"x": 1}

    def test_concurrent_upserts(self) -> None:
        rows = MemoryRowStore()

        def worker(i: int) -> None:
            rows.upsert("shared", {f"field_{i}": i})

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        row = rows.get("shared")
        assert row is not None
        assert len(row) == 20
        assert rows.keys() == ["shared"]


class TestJsonRowStore:
    """Rows persisted as envelopes under latest/."""

    def test_upsert_writes_file(self, tmp_path: Path) -> None:
        rows = JsonRowStore(DataStore(tmp_path))
        rows.upsert("25E0", {"sea_temp_c": 14.2})
        data = json.loads((tmp_path / "latest" / "25E0.json").read_text())
        assert data["data"]["cell_key"] == "25E0"
        assert data["data"]["sea_temp_c"] == 14.2
        assert data["meta"]["source"] == "copernicus-marine"

    def test_round_trip_and_merge(self, tmp_path: Path) -> None:
        rows = JsonRowStore(DataStore(tmp_path))
        rows.upsert("25E0", {"chlorophyll_mg_m3": 2.1, "sources": ["a"]})
        rows.upsert("25E0", {"chlorophyll_mg_m3": None, "sea_temp_c": 14.2, "sources": ["b"]})

        row = rows.get("25E0")
        assert row is not None
        assert row["chlorophyll_mg_m3"] == 2.1
        assert row["sea_temp_c"] == 14.2
        assert row["sources"] == ["b"]

    def test_unsafe_key_is_sanitized(self) -> None:
        assert JsonRowStore.path_for("a/b c") == Path("latest/a_b_c.json")

    def test_captured_at(self, tmp_path: Path) -> None:
        rows = JsonRowStore(DataStore(tmp_path))
        stamp = datetime(2026, 10, 17, 6, tzinfo=UTC)
        assert captured_at(rows, "25E0") is None
        rows.upsert("25E0", {"captured_at": stamp})
        assert captured_at(rows, "25E0") == stamp

    def test_captured_at_naive_string(self) -> None:
        rows = MemoryRowStore()
        rows.upsert("k", {"captured_at": "2026-10-17T06:00:00"})
        assert captured_at(rows, "k") == datetime(2026, 10, 17, 6, tzinfo=UTC)
