"""
Tests for the WorldTides source.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import Mock, patch

import pytest

from coastal_conditions.cache import CacheStore
from coastal_conditions.datasources.tides import worldtides
from coastal_conditions.errors import ProviderError

START = datetime(2026, 10, 17, tzinfo=UTC)
PAYLOAD = {
    "status": 200,
    "responseDatum": "LAT",
    "station": "Gijon",
    "extremes": [
        {"dt": 1792209600, "height": 1.82, "type": "High"},
        {"dt": 1792232100, "height": -1.64, "type": "Low"},
    ],
}


def json_response(payload: dict) -> Mock:
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status = Mock()
    return response


class TestFetchTideExtremes:
    @patch("coastal_conditions.datasources.tides.worldtides.session.get")
    def test_fetch(self, mock_get: Mock) -> None:
        mock_get.return_value = json_response(PAYLOAD)

        report = worldtides.fetch_tide_extremes(43.55, -5.66, days=2, start=START, api_key="k")

        assert report is not None
        assert report.datum == "LAT"
        assert report.station == "Gijon"
        assert [e.kind for e in report.extremes] == ["High", "Low"]
        assert report.extremes[1].height_m == -1.64
        params = mock_get.call_args.kwargs["params"]
        assert params["start"] == int(START.timestamp())
        assert params["length"] == 2 * 86400
        assert params["datum"] == "CD"
        assert "extremes" in params

    @patch("coastal_conditions.datasources.tides.worldtides.session.get")
    def test_error_status(self, mock_get: Mock) -> None:
        mock_get.return_value = json_response({"status": 400, "error": "Invalid key"})
        with pytest.raises(ProviderError, match="Invalid key"):
            worldtides.fetch_tide_extremes(43.55, -5.66, api_key="bad")

    @patch("coastal_conditions.datasources.tides.worldtides.session.get")
    def test_default_datum(self, mock_get: Mock) -> None:
        mock_get.return_value = json_response({"status": 200, "extremes": []})
        report = worldtides.fetch_tide_extremes(43.55, -5.66, api_key="k")
        assert report is not None
        assert report.datum == "CD"
        assert report.extremes == []

    def test_no_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(worldtides, "get_settings", lambda: Mock(worldtides_api_key=None))
        assert worldtides.fetch_tide_extremes(43.55, -5.66) is None


class TestGetTides:
    @patch("coastal_conditions.datasources.tides.worldtides.fetch_tide_extremes")
    def test_nearby_points_share_cache(self, mock_fetch: Mock) -> None:
        mock_fetch.return_value = worldtides.TideReport(
            source="worldtides",
            location=worldtides.Location(lat=43.55, lon=-5.66),
            fetched_at=START,
        )
        cache = CacheStore()

        first = worldtides.get_tides(43.61, -5.66, cache=cache)
        second = worldtides.get_tides(43.58, -5.69, cache=cache)

        assert first == second
        mock_fetch.assert_called_once_with(43.61, -5.66, 7)

    @patch("coastal_conditions.datasources.tides.worldtides.fetch_tide_extremes")
    def test_missing_key_not_cached(self, mock_fetch: Mock) -> None:
        mock_fetch.return_value = None
        cache = CacheStore()
        assert worldtides.get_tides(43.55, -5.66, cache=cache) is None
        assert worldtides.get_tides(43.55, -5.66, cache=cache) is None
        assert mock_fetch.call_count == 2
