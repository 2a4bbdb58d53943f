"""
Tests for CLI functionality.

These tests verify the command-line interface logic.
"""

from __future__ import annotations

import argparse
import json
from datetime import UTC, datetime
from io import StringIO
from unittest.mock import patch

import pytest

from coastal_conditions.cli import (
    cmd_classify,
    cmd_info,
    cmd_ingest,
    cmd_tides,
    cmd_weather,
    create_parser,
    main,
)
from coastal_conditions.errors import NoWeatherDataError, ProviderError
from coastal_conditions.schemas import Location, TideReport


class TestCreateParser:
    """Tests for create_parser function."""

    def test_creates_parser(self) -> None:
        """Parser is created successfully."""
        parser = create_parser()
        assert isinstance(parser, argparse.ArgumentParser)
        assert parser.prog == "coastal-conditions"

    def test_parser_has_version(self) -> None:
        """Parser has version argument."""
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["--version"])

    def test_parser_has_debug_flag(self) -> None:
        """Parser accepts --debug flag."""
        args = create_parser().parse_args(["--debug", "info"])
        assert args.debug is True

    def test_parser_classify_command(self) -> None:
        """Classify takes a point and an optional hint."""
        args = create_parser().parse_args(["classify", "43.5", "-5.6", "--hint", "Biscay"])
        assert args.command == "classify"
        assert (args.lat, args.lon) == (43.5, -5.6)
        assert args.hint == "Biscay"

    def test_parser_tides_default_days(self) -> None:
        """Tides command defaults to a week."""
        args = create_parser().parse_args(["tides", "43.5", "-5.6"])
        assert args.days == 7

    def test_parser_ingest_command(self) -> None:
        """Ingest accepts a cells file and flags."""
        args = create_parser().parse_args(["ingest", "cells.json", "--force", "--limit", "10"])
        assert args.cells == "cells.json"
        assert args.force is True
        assert args.limit == 10
        assert args.mock is False


class TestCmdInfo:
    """Tests for cmd_info function."""

    def test_prints_app_info(self) -> None:
        """Info command prints application information."""
        with patch("sys.stdout", new=StringIO()) as mock_stdout:
            exit_code = cmd_info(argparse.Namespace())
            output = mock_stdout.getvalue()
        assert exit_code == 0
        assert "Version" in output
        assert "Copernicus credentials" in output


class TestCmdClassify:
    def test_prints_region(self) -> None:
        """Classify prints the basin and weather zone."""
        args = argparse.Namespace(lat=58.0, lon=20.0, hint=None)
        with patch("sys.stdout", new=StringIO()) as mock_stdout:
            exit_code = cmd_classify(args)
            output = mock_stdout.getvalue()
        assert exit_code == 0
        assert "Region: BAL" in output
        assert "Weather zone: EU" in output

    def test_hint_wins(self) -> None:
        """A keyword hint overrides the bounding boxes."""
        args = argparse.Namespace(lat=43.5, lon=-5.6, hint="Bay of Biscay")
        with patch("sys.stdout", new=StringIO()) as mock_stdout:
            cmd_classify(args)
            assert "Region: IBI" in mock_stdout.getvalue()


class TestCmdWeather:
    def test_no_data_returns_one(self) -> None:
        """Exhausted waterfall is an error exit."""
        args = argparse.Namespace(lat=43.5, lon=-5.6)
        with patch("coastal_conditions.cli.ProviderWaterfall") as mock_waterfall:
            mock_waterfall.return_value.fetch.side_effect = NoWeatherDataError("none")
            assert cmd_weather(args) == 1


class TestCmdTides:
    def test_prints_report(self) -> None:
        """Tide report is printed as JSON."""
        args = argparse.Namespace(lat=43.5, lon=-5.6, days=2)
        report = TideReport(
            source="worldtides",
            location=Location(lat=43.5, lon=-5.6),
            fetched_at=datetime(2026, 10, 17, tzinfo=UTC),
        )
        with (
            patch("coastal_conditions.cli.fetch_tide_extremes", return_value=report) as mock_fetch,
            patch("sys.stdout", new=StringIO()) as mock_stdout,
        ):
            exit_code = cmd_tides(args)
            output = json.loads(mock_stdout.getvalue())
        assert exit_code == 0
        assert output["source"] == "worldtides"
        mock_fetch.assert_called_once_with(43.5, -5.6, 2)

    def test_missing_key_returns_one(self) -> None:
        """No API key configured is an error exit."""
        args = argparse.Namespace(lat=43.5, lon=-5.6, days=7)
        with patch("coastal_conditions.cli.fetch_tide_extremes", return_value=None):
            assert cmd_tides(args) == 1

    def test_provider_error_returns_one(self) -> None:
        """Provider errors are reported, not raised."""
        args = argparse.Namespace(lat=43.5, lon=-5.6, days=7)
        with patch(
            "coastal_conditions.cli.fetch_tide_extremes", side_effect=ProviderError("bad key")
        ):
            assert cmd_tides(args) == 1


class TestCmdIngest:
    @pytest.fixture(autouse=True)
    def restore_store(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from coastal_conditions.flows import ingest

        monkeypatch.setattr(ingest, "store", ingest.store)

    def test_passes_flags(self) -> None:
        """Ingest forwards its flags and exits 0 when nothing failed."""
        args = argparse.Namespace(cells="cells.json", force=True, limit=3, mock=False)
        with patch("coastal_conditions.flows.ingest.ingest_all") as mock_ingest:
            mock_ingest.return_value = {"failed": 0}
            assert cmd_ingest(args) == 0
            mock_ingest.assert_called_once_with("cells.json", force=True, limit=3, mock=None)

    def test_failures_exit_one(self) -> None:
        """Any failed cell gives a non-zero exit."""
        args = argparse.Namespace(cells="cells.json", force=False, limit=None, mock=True)
        with patch("coastal_conditions.flows.ingest.ingest_all") as mock_ingest:
            mock_ingest.return_value = {"failed": 2}
            assert cmd_ingest(args) == 1
            assert mock_ingest.call_args.kwargs["mock"] is True
            assert mock_ingest.call_args.kwargs["force"] is None


class TestMain:
    """Tests for main function."""

    def test_no_command_shows_help(self) -> None:
        """No command shows help and exits 0."""
        with patch("sys.argv", ["coastal-conditions"]):
            assert main() == 0

    def test_info_command_executes(self) -> None:
        """Info command executes successfully."""
        with (
            patch("sys.argv", ["coastal-conditions", "info"]),
            patch("coastal_conditions.cli.cmd_info") as mock_cmd,
        ):
            mock_cmd.return_value = 0
            assert main() == 0
            mock_cmd.assert_called_once()

    def test_classify_command_executes(self) -> None:
        """Classify command is dispatched."""
        with (
            patch("sys.argv", ["coastal-conditions", "classify", "40", "5"]),
            patch("coastal_conditions.cli.cmd_classify") as mock_cmd,
        ):
            mock_cmd.return_value = 0
            assert main() == 0
            mock_cmd.assert_called_once()

    def test_unknown_command_shows_help(self) -> None:
        """Unknown command shows help and returns 1."""
        with (
            patch("sys.argv", ["coastal-conditions", "info"]),
            patch("coastal_conditions.cli.create_parser") as mock_parser,
        ):
            mock_parser.return_value.parse_args.return_value = argparse.Namespace(
                command="unknown", debug=False
            )
            assert main() == 1
