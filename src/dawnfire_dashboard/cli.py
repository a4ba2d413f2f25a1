"""Command-line access to the dashboard pipelines."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from .calendars.date_range import RANGE_KEYWORDS
from .config import Settings, load_settings
from .error_payload import error_payload
from .exceptions import ConfigurationError, DashboardError
from .log_setup import setup_logger
from .service import DashboardService


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse dashboard CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="dawnfire-dashboard",
        description="Query the dashboard weather, calendar and metrics pipelines.",
    )
    parser.add_argument("--json", action="store_true", help="Print raw JSON output.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    weather = subparsers.add_parser("weather", help="Normalized forecast.")
    weather.add_argument("--location", default=None, help="Location, e.g. 'Seattle,US'.")

    calendar = subparsers.add_parser("calendar", help="Merged calendar events.")
    calendar.add_argument("--range", dest="date_range", choices=RANGE_KEYWORDS, default="today")

    metrics = subparsers.add_parser("metrics", help="Prometheus instant query.")
    metrics.add_argument("query", help="PromQL expression, passed through verbatim.")

    subparsers.add_parser("health", help="Configuration readiness summary.")
    return parser.parse_args(argv)


def _print_weather(console: Console, payload: dict[str, Any]) -> None:
    current = payload["current"]
    console.print(
        f"Now: {current['temp']}° {current.get('condition') or '-'} "
        f"humidity={current.get('humidity')} wind={current.get('windSpeed')} "
        f"pressure={current.get('pressure')}"
    )

    hourly = Table(title="Later Today")
    hourly.add_column("Time (UTC)")
    hourly.add_column("Temp")
    hourly.add_column("Precip %")
    hourly.add_column("Condition", overflow="fold")
    for entry in payload["hourly"]:
        hourly.add_row(
            entry["time"], str(entry["temp"]), str(entry["precipProbability"]),
            entry.get("condition") or "-",
        )
    if payload["hourly"]:
        console.print(hourly)
    else:
        console.print("No remaining forecast samples for today.")

    daily = Table(title="Next Days")
    daily.add_column("Date")
    daily.add_column("High")
    daily.add_column("Low")
    daily.add_column("Precip %")
    daily.add_column("Pressure")
    daily.add_column("Condition", overflow="fold")
    for entry in payload["daily"]:
        daily.add_row(
            entry["date"], str(entry["high"]), str(entry["low"]),
            str(entry["precipMax"]), str(entry["pressureAvg"]), entry["condition"] or "-",
        )
    console.print(daily)


def _print_events(console: Console, events: list[dict[str, Any]], date_range: str) -> None:
    if not events:
        console.print(f"No events for {date_range}.")
        return
    table = Table(title=f"Events ({date_range})")
    table.add_column("Start (UTC)")
    table.add_column("End (UTC)")
    table.add_column("Summary", overflow="fold")
    table.add_column("Calendar")
    for event in events:
        table.add_row(
            event["start"], event.get("end") or "-", event["summary"], event.get("calendar") or "-"
        )
    console.print(table)


def _print_health(console: Console, health: dict[str, Any]) -> None:
    table = Table(title=f"Dashboard health ({health['environment']})")
    table.add_column("Integration")
    table.add_column("Configured")
    for name, ready in health["integrations"].items():
        table.add_row(name, "yes" if ready else "missing")
    console.print(table)


async def _run(args: argparse.Namespace, settings: Settings, console: Console) -> None:
    async with DashboardService(settings) as service:
        if args.command == "weather":
            payload: Any = await service.weather(args.location)
            if not args.json:
                _print_weather(console, payload)
                return
        elif args.command == "calendar":
            payload = await service.calendar_events(args.date_range)
            if not args.json:
                _print_events(console, payload, args.date_range)
                return
        elif args.command == "metrics":
            payload = await service.prometheus_query(args.query)
        else:
            payload = service.health()
            if not args.json:
                _print_health(console, payload)
                return
        console.print_json(json.dumps(payload))


def main(argv: list[str] | None = None) -> int:
    """Run one pipeline and print its result."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger = setup_logger(level=settings.log_level)
    logger.info("Loaded settings: %s", settings.safe_summary())

    try:
        asyncio.run(_run(args, settings, console))
    except ConfigurationError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    except DashboardError as exc:
        status, body = error_payload(exc)
        logger.error("%s failed (status %d): %s", args.command, status, body["error"])
        return 4
    return 0


if __name__ == "__main__":
    sys.exit(main())
