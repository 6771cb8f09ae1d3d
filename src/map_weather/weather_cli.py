"""CLI: fetch current weather for points and summarize an area boundary."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from .api import MapWeatherClient
from .config import Settings, load_settings
from .exceptions import ConfigError
from .log_setup import setup_logger
from .weather.models import Coordinate, WeatherLookup


def parse_point(value: str) -> Coordinate:
    """Parse ``LAT,LON[,ID]`` into a Coordinate."""
    parts = [part.strip() for part in value.split(",")]
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"Expected LAT,LON[,ID], got {value!r}.")
    try:
        lat = float(parts[0])
        lon = float(parts[1])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid coordinate in {value!r}.") from exc
    if not (-90 <= lat <= 90):
        raise argparse.ArgumentTypeError(f"Invalid latitude {lat}; expected between -90 and 90.")
    if not (-180 <= lon <= 180):
        raise argparse.ArgumentTypeError(
            f"Invalid longitude {lon}; expected between -180 and 180."
        )
    external_id = parts[2] if len(parts) == 3 and parts[2] else None
    return Coordinate(latitude=lat, longitude=lon, external_id=external_id)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fetch current weather (Open-Meteo) and area boundaries (DataV)."
    )
    parser.add_argument(
        "--point",
        dest="points",
        action="append",
        type=parse_point,
        default=[],
        metavar="LAT,LON[,ID]",
        help="Query point; repeat for a batch.",
    )
    parser.add_argument("--area", type=str, default=None, help="Adcode to fetch GeoJSON for.")
    parser.add_argument(
        "--status",
        action="store_true",
        help="Show per-point lookup status (ok / no_data / failed).",
    )
    return parser


def _fmt(value: float | None) -> str:
    return f"{value:g}" if value is not None else "-"


def _print_weather(console: Console, lookups: list[WeatherLookup], show_status: bool) -> None:
    table = Table(title="Current Weather")
    table.add_column("ID")
    table.add_column("Lat/Lon")
    table.add_column("Temp (C)")
    table.add_column("Wind (km/h)")
    table.add_column("Dir")
    table.add_column("Weather", overflow="fold")
    table.add_column("Observed")
    if show_status:
        table.add_column("Status")

    for lookup in lookups:
        coord = lookup.coordinate
        record = lookup.record
        row = [
            coord.external_id or "-",
            f"{coord.latitude:.4f}, {coord.longitude:.4f}",
            _fmt(record.temperature_celsius if record else None),
            _fmt(record.wind_speed_kmh if record else None),
            _fmt(record.wind_direction_degrees if record else None),
            record.weather_label if record else "-",
            (record.observed_at or "-") if record else "-",
        ]
        if show_status:
            row.append(lookup.status + (" (cache)" if lookup.from_cache else ""))
        table.add_row(*row)
    console.print(table)


def _print_area(console: Console, adcode: str, geojson: dict[str, Any] | None) -> None:
    if geojson is None:
        console.print(f"Area {adcode}: boundary unavailable.")
        return
    features = geojson.get("features") or []
    console.print(f"Area {adcode}: {len(features)} feature(s)")
    names: list[str] = []
    for feature in features:
        if not isinstance(feature, dict):
            continue
        properties = feature.get("properties")
        if isinstance(properties, dict) and properties.get("name"):
            names.append(str(properties["name"]))
    if names:
        console.print(", ".join(names))


async def run(args: argparse.Namespace, settings: Settings, logger: logging.Logger) -> int:
    console = Console()
    async with MapWeatherClient(settings=settings, logger=logger) as client:
        if args.points:
            lookups = await client.lookup_batch_weather(args.points)
            _print_weather(console, lookups, show_status=args.status)
        if args.area:
            geojson = await client.get_area_geojson(args.area)
            _print_area(console, args.area, geojson)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the weather CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logger = setup_logger()

    if not args.points and not args.area:
        logger.error("Nothing to do: pass --point and/or --area.")
        return 4

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    setup_logger(settings=settings)
    logger.debug("Loaded settings: %s", settings.safe_summary())

    return asyncio.run(run(args, settings, logger))


if __name__ == "__main__":
    sys.exit(main())
