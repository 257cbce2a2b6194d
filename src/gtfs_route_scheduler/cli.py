"""CLI helpers for inspecting route schedules."""

import json
import sys
from datetime import date, datetime, time
from typing import Any

from gtfs_route_scheduler.adapters.config import AppConfig, RouteScheduleLoader
from gtfs_route_scheduler.application.services import calculate_departures, get_schedule_stats
from gtfs_route_scheduler.domain.models import RouteDefinition


def _select_routes(routes: list[RouteDefinition], route_id: str | None) -> list[RouteDefinition]:
    if route_id is None:
        return routes
    return [route for route in routes if route.route_id == route_id]


def departures_for_day(
    routes: list[RouteDefinition], day: date, config: AppConfig
) -> dict[str, list[datetime]]:
    """Departures of every route on ``day`` in the configured timezone."""
    reference = datetime.combine(day, time(12, 0), tzinfo=config.tzinfo)
    return {route.route_id: calculate_departures(route.schedule, reference) for route in routes}


def print_departures(departures: dict[str, list[datetime]], format_json: bool = False) -> None:
    """Print departures per route."""
    if format_json:
        print(
            json.dumps(
                {rid: [d.isoformat() for d in times] for rid, times in departures.items()},
                indent=2,
            )
        )
        return

    for route_id, times in departures.items():
        print(f"\n{route_id}: {len(times)} departure(s)")
        if not times:
            print("  (no service)")
            continue
        line: list[str] = []
        for departure in times:
            line.append(departure.strftime("%H:%M"))
            if len(line) == 12:
                print("  " + " ".join(line))
                line = []
        if line:
            print("  " + " ".join(line))


def print_stats(routes: list[RouteDefinition], format_json: bool = False) -> None:
    """Print schedule statistics per route."""
    stats: dict[str, Any] = {
        route.route_id: get_schedule_stats(route.schedule).model_dump(mode="json")
        for route in routes
    }
    if format_json:
        print(json.dumps(stats, indent=2))
        return

    for route_id, values in stats.items():
        print(f"\n{route_id}")
        for key, value in values.items():
            print(f"  {key}: {value}")


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="GTFS Route Scheduler Helper",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show today's departures of every configured route
  gtfs-schedule departures

  # Show departures of one route on a given day
  gtfs-schedule departures --route red-line --date 2026-10-19

  # Show schedule statistics as JSON
  gtfs-schedule stats --json
        """,
    )
    parser.add_argument("--config", help="Path to TOML configuration file")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    departures_parser = subparsers.add_parser("departures", help="List departures for a day")
    departures_parser.add_argument("--route", help="Only this route id")
    departures_parser.add_argument("--date", help="Service day (YYYY-MM-DD), default today")
    departures_parser.add_argument("--json", action="store_true", help="Output as JSON")

    stats_parser = subparsers.add_parser("stats", help="Show schedule statistics")
    stats_parser.add_argument("--route", help="Only this route id")
    stats_parser.add_argument("--json", action="store_true", help="Output as JSON")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config = AppConfig(config_file=args.config) if args.config else AppConfig()
        routes = _select_routes(RouteScheduleLoader.load(config), args.route)
        if not routes:
            print("No matching routes configured.", file=sys.stderr)
            sys.exit(1)

        if args.command == "departures":
            day = date.fromisoformat(args.date) if args.date else datetime.now(config.tzinfo).date()
            print_departures(departures_for_day(routes, day, config), format_json=args.json)

        elif args.command == "stats":
            print_stats(routes, format_json=args.json)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def cli_main() -> None:
    """Synchronous entry point for the CLI command."""
    main()


if __name__ == "__main__":
    cli_main()
