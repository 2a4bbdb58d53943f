"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

import requests

from coastal_conditions import __version__
from coastal_conditions.config import get_settings
from coastal_conditions.datasources.tides import fetch_tide_extremes
from coastal_conditions.datasources.weather import ProviderWaterfall
from coastal_conditions.errors import NoWeatherDataError, ProviderError
from coastal_conditions.routing import classify, describe_coverage, weather_zone


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="coastal-conditions",
        description="Acquire and cache coastal weather, ocean, tide and air-quality conditions",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    classify_parser = subparsers.add_parser("classify", help="Show the ocean basin for a point")
    classify_parser.add_argument("lat", type=float)
    classify_parser.add_argument("lon", type=float)
    classify_parser.add_argument(
        "--hint",
        type=str,
        default=None,
        help="Free-text region name (e.g. 'Baltic Sea')",
    )

    weather_parser = subparsers.add_parser("weather", help="Fetch weather for a point")
    weather_parser.add_argument("lat", type=float)
    weather_parser.add_argument("lon", type=float)

    tides_parser = subparsers.add_parser("tides", help="Fetch tide extremes for a point")
    tides_parser.add_argument("lat", type=float)
    tides_parser.add_argument("lon", type=float)
    tides_parser.add_argument(
        "--days",
        type=int,
        default=7,
        help="Number of days to fetch (default: 7)",
    )

    ingest_parser = subparsers.add_parser("ingest", help="Ingest marine data for grid cells")
    ingest_parser.add_argument("cells", type=str, help="JSON file of grid cells")
    ingest_parser.add_argument(
        "--force",
        action="store_true",
        help="Ignore freshness and refresh every cell",
    )
    ingest_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Process at most N cells (default: MAX_CELLS setting)",
    )
    ingest_parser.add_argument(
        "--mock",
        action="store_true",
        help="Use the offline mock provider",
    )

    return parser


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Data dir: {settings.data_dir}")
    print(f"Copernicus credentials: {'yes' if settings.has_copernicus_credentials else 'no'}")
    print(f"OpenWeather key: {'yes' if settings.openweather_api_key else 'no'}")
    print(f"WorldTides key: {'yes' if settings.worldtides_api_key else 'no'}")
    return 0


def cmd_classify(args: argparse.Namespace) -> int:
    """Handle the 'classify' command."""
    code = classify(args.lat, args.lon, args.hint)
    print(f"Region: {code}")
    print(f"Coverage: {describe_coverage(code)}")
    print(f"Weather zone: {weather_zone(args.lat, args.lon)}")
    return 0


def cmd_weather(args: argparse.Namespace) -> int:
    """Handle the 'weather' command."""
    try:
        report = ProviderWaterfall().fetch(args.lat, args.lon)
    except NoWeatherDataError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(json.dumps(report.model_dump(mode="json"), indent=2))
    return 0


def cmd_tides(args: argparse.Namespace) -> int:
    """Handle the 'tides' command."""
    try:
        report = fetch_tide_extremes(args.lat, args.lon, args.days)
    except (ProviderError, requests.RequestException) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if report is None:
        print("Error: WORLDTIDES_API_KEY is not configured", file=sys.stderr)
        return 1
    print(json.dumps(report.model_dump(mode="json"), indent=2))
    return 0


def cmd_ingest(args: argparse.Namespace) -> int:
    """Handle the 'ingest' command."""
    # Imported here: loading Prefect is slow and only this command needs it
    from coastal_conditions.flows import ingest

    ingest.store = ingest.DataStore(get_settings().data_dir)
    summary = ingest.ingest_all(
        args.cells,
        force=args.force or None,
        limit=args.limit,
        mock=args.mock or None,
    )
    return 0 if summary["failed"] == 0 else 1


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug or get_settings().debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "classify": cmd_classify,
        "weather": cmd_weather,
        "tides": cmd_tides,
        "ingest": cmd_ingest,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
