"""Tests for the toolbox-backed Copernicus fetcher (no network)."""

from __future__ import annotations

from datetime import UTC, date, datetime
from unittest.mock import Mock, patch

import numpy as np
import pytest
import xarray as xr

from coastal_conditions.config import Settings
from coastal_conditions.datasources.copernicus.models import FetchWindow, Variable
from coastal_conditions.datasources.copernicus.real import (
    CopernicusMarineProvider,
    CopernicusSubsetFetcher,
    parse_dataset,
    select_depths,
    spatial_mean,
)
from coastal_conditions.errors import ProviderError
from coastal_conditions.reference.basins import RegionCode
from coastal_conditions.reference.geography import BoundingBox

WINDOW = FetchWindow(date(2026, 10, 16))
BBOX = BoundingBox(south=43.3, west=-5.9, north=43.8, east=-5.4)


def make_dataset() -> xr.Dataset:
    thetao = np.array(
        [
            [[[14.0, 14.4], [np.nan, 1e20]], [[13.0, 13.0], [13.0, 13.0]]],
        ]
    )
    return xr.Dataset(
        {
            "thetao": (("time", "depth", "latitude", "longitude"), thetao),
            "mlotst": (("time", "latitude", "longitude"), np.full((1, 2, 2), 18.0)),
            "unknown_var": (("time", "latitude", "longitude"), np.zeros((1, 2, 2))),
        },
        coords={
            "time": [np.datetime64("2026-10-16T00:00:00")],
            "depth": [0.494, 5.078],
            "latitude": [43.5, 43.6],
            "longitude": [-5.7, -5.6],
        },
    )


class TestHelpers:
    def test_select_depths(self) -> None:
        depths = [0.494, 1.54, 5.078, 9.573, 13.4]
        assert select_depths(depths) == [(0, 0.494), (2, 5.078), (3, 9.573)]

    def test_select_depths_falls_back_to_shallowest(self) -> None:
        assert select_depths([50.0, 100.0]) == [(0, 50.0)]
        assert select_depths([]) == []

    def test_spatial_mean_ignores_fill(self) -> None:
        assert spatial_mean([[1.0, 2.0], [np.nan, 1e20]]) == pytest.approx(1.5)

    def test_spatial_mean_all_missing(self) -> None:
        assert spatial_mean([[np.nan, 1e20]]) is None


class TestParseDataset:
    def test_records_per_depth(self) -> None:
        series = parse_dataset(make_dataset(), "cmems_test", WINDOW)

        assert series.dataset_id == "cmems_test"
        assert series.source == "copernicus"
        assert set(series.variables) == {Variable.THETAO, Variable.MLOTST}
        assert [r.depth for r in series.records] == [0.494, 5.078]
        surface = series.records[0]
        assert surface.time == datetime(2026, 10, 16, tzinfo=UTC)
        assert surface.values[Variable.THETAO] == pytest.approx(14.2)
        assert surface.values[Variable.MLOTST] == 18.0
        assert surface.lat == pytest.approx(43.55)


class TestSubsetFetcher:
    @patch("coastal_conditions.datasources.copernicus.real.copernicusmarine.open_dataset")
    def test_fetch(self, mock_open: Mock) -> None:
        mock_open.return_value = make_dataset()
        fetcher = CopernicusSubsetFetcher("diver", "secret")

        series = fetcher.fetch("cmems_test", ("thetao",), BBOX, WINDOW)

        assert len(series.records) == 2
        kwargs = mock_open.call_args.kwargs
        assert kwargs["dataset_id"] == "cmems_test"
        assert kwargs["variables"] == ["thetao"]
        assert kwargs["start_datetime"] == "2026-10-16T00:00:00"
        assert kwargs["end_datetime"] == "2026-10-16T23:59:59"
        assert kwargs["minimum_longitude"] == -5.9
        assert kwargs["username"] == "diver"

    @patch("coastal_conditions.datasources.copernicus.real.copernicusmarine.open_dataset")
    def test_all_variables_when_unspecified(self, mock_open: Mock) -> None:
        mock_open.return_value = make_dataset()
        CopernicusSubsetFetcher(None, None).fetch("cmems_test", None, BBOX, WINDOW)
        assert "variables" not in mock_open.call_args.kwargs

    @patch("coastal_conditions.datasources.copernicus.real.copernicusmarine.open_dataset")
    def test_toolbox_error_wrapped(self, mock_open: Mock) -> None:
        mock_open.side_effect = RuntimeError("dataset not found")
        with pytest.raises(ProviderError, match="cmems_test: dataset not found"):
            CopernicusSubsetFetcher(None, None).fetch("cmems_test", None, BBOX, WINDOW)


    @patch("coastal_conditions.datasources.copernicus.real.copernicusmarine.open_dataset")
    def test_non_dataset_rejected(self, mock_open: Mock) -> None:
        mock_open.return_value = {"thetao": [14.0]}
        with pytest.raises(ProviderError, match="expected an xarray Dataset, got dict"):
            CopernicusSubsetFetcher(None, None).fetch("cmems_test", None, BBOX, WINDOW)

class TestProvider:
    def test_engine_wired_from_settings(self) -> None:
        settings = Settings(_env_file=None, paddings=(0.1, 0.25), probe_timeout_s=5)
        fetcher = Mock()
        provider = CopernicusMarineProvider(RegionCode.IBI, settings=settings, fetcher=fetcher)
        assert provider.region is RegionCode.IBI
        assert provider.fetcher is fetcher
        assert provider.engine.paddings == (0.1, 0.25)
        assert provider.engine.probe_timeout == 5
        assert provider.engine.region is RegionCode.IBI
