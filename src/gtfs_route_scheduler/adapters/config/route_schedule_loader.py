"""Route schedule loader."""

import json
import logging
from datetime import time
from pathlib import Path
from typing import Any

from gtfs_route_scheduler.adapters.config.app_config import AppConfig
from gtfs_route_scheduler.adapters.config.route_geometry import extract_coordinates
from gtfs_route_scheduler.domain.models.route_definition import RouteDefinition
from gtfs_route_scheduler.domain.models.route_schedule_config import RouteScheduleConfig
from gtfs_route_scheduler.domain.models.weekday import ALL_WEEKDAYS, Weekday

logger = logging.getLogger(__name__)

_DAY_GROUPS: dict[str, frozenset[Weekday]] = {
    "daily": ALL_WEEKDAYS,
    "weekdays": frozenset(
        {Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY, Weekday.FRIDAY}
    ),
    "weekends": frozenset({Weekday.SATURDAY, Weekday.SUNDAY}),
}


def parse_time_of_day(value: Any) -> time:
    """Parse "HH:MM", "HH:MM:SS" or a TOML local time into a time of day.

    Schedules are wall-clock times in the service timezone, so strings with a
    UTC offset are rejected.
    """
    if isinstance(value, time):
        return value.replace(tzinfo=None, microsecond=0)
    if isinstance(value, str):
        parsed = time.fromisoformat(value.strip())
        if parsed.tzinfo is not None:
            raise ValueError(f"Time of day must not carry a UTC offset: {value!r}")
        return parsed.replace(microsecond=0)
    raise ValueError(f"Invalid time of day: {value!r}")


def parse_operating_days(value: Any) -> frozenset[Weekday]:
    """Parse a list of weekdays or one of "daily", "weekdays", "weekends"."""
    if value is None:
        return ALL_WEEKDAYS
    if isinstance(value, str):
        group = _DAY_GROUPS.get(value.strip().lower())
        if group is not None:
            return group
        return frozenset({Weekday.parse(value)})
    if isinstance(value, list):
        return frozenset(Weekday.parse(item) for item in value)
    raise ValueError(f"Invalid operating_days: {value!r}")


class RouteScheduleLoader:
    """Loads route definitions and their schedules from app config."""

    @staticmethod
    def load_schedule_from_data(route_id: str, schedule_data: Any) -> RouteScheduleConfig:
        """Load the schedule of one route.

        A missing schedule table yields a disabled schedule. Times and days
        must parse; numeric fields fall back to defaults when unusable.
        """
        if not isinstance(schedule_data, dict):
            return RouteScheduleConfig(route_id=route_id, enabled=False)

        defaults = RouteScheduleConfig(route_id=route_id)
        try:
            start_time = parse_time_of_day(schedule_data.get("start_time", defaults.start_time))
            end_time = parse_time_of_day(schedule_data.get("end_time", defaults.end_time))
            operating_days = parse_operating_days(schedule_data.get("operating_days"))
        except ValueError as e:
            raise ValueError(f"Invalid schedule for route '{route_id}': {e}") from e

        headway_seconds = schedule_data.get("headway_seconds")
        if headway_seconds is None and "headway_minutes" in schedule_data:
            try:
                headway_seconds = float(schedule_data["headway_minutes"]) * 60
            except (ValueError, TypeError):
                headway_seconds = None
        try:
            headway_seconds = (
                int(headway_seconds) if headway_seconds is not None else defaults.headway_seconds
            )
        except (ValueError, TypeError):
            logger.warning(f"Route '{route_id}': invalid headway, using {defaults.headway_seconds}s")
            headway_seconds = defaults.headway_seconds

        max_instances = schedule_data.get("max_instances", defaults.max_instances)
        try:
            max_instances = max(1, int(max_instances))
        except (ValueError, TypeError):
            max_instances = defaults.max_instances

        enabled = schedule_data.get("enabled", True)
        if not isinstance(enabled, bool):
            logger.warning(
                f"Route '{route_id}': enabled must be true or false, got {enabled!r}; disabling"
            )
            enabled = False

        return RouteScheduleConfig(
            route_id=route_id,
            enabled=enabled,
            operating_days=operating_days,
            start_time=start_time,
            end_time=end_time,
            headway_seconds=headway_seconds,
            max_instances=max_instances,
        )

    @staticmethod
    def load_coordinates_from_data(
        route_data: dict[str, Any], base_dir: Path
    ) -> list[tuple[float, float]]:
        """Load the route path from inline GeoJSON, a GeoJSON file or a coordinate list."""
        geojson = route_data.get("geojson")
        geojson_file = route_data.get("geojson_file")
        if geojson is None and isinstance(geojson_file, str):
            path = Path(geojson_file)
            if not path.is_absolute():
                path = base_dir / path
            try:
                with open(path, encoding="utf-8") as f:
                    geojson = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Could not read GeoJSON file {path}: {e}")
                return []
        if geojson is not None:
            return extract_coordinates(geojson)

        coordinates = route_data.get("coordinates", [])
        if not isinstance(coordinates, list):
            return []
        # Plain coordinate lists are (lat, lng); reuse the GeoJSON validation by flipping
        return extract_coordinates(
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [
                        [p[1], p[0]] for p in coordinates if isinstance(p, list) and len(p) >= 2
                    ],
                },
            }
        )

    @staticmethod
    def load_route_from_data(route_data: dict[str, Any], base_dir: Path) -> RouteDefinition | None:
        """Load a single route definition from its TOML table."""
        route_id = route_data.get("id")
        if route_id is None or str(route_id).strip() == "":
            return None
        route_id = str(route_id)

        name = route_data.get("name", route_id)
        if not isinstance(name, str):
            name = route_id
        color = route_data.get("color", "#ff6b35")
        if not isinstance(color, str):
            color = "#ff6b35"
        try:
            speed = float(route_data.get("speed", 200.0))
        except (ValueError, TypeError):
            speed = 200.0

        schedule = RouteScheduleLoader.load_schedule_from_data(route_id, route_data.get("schedule"))
        coordinates = RouteScheduleLoader.load_coordinates_from_data(route_data, base_dir)
        if schedule.enabled and len(coordinates) < 2:
            logger.warning(f"Route '{route_id}' has fewer than two valid path points")

        return RouteDefinition(
            route_id=route_id,
            schedule=schedule,
            name=name,
            color=color,
            speed=speed,
            coordinates=coordinates,
        )

    @staticmethod
    def load(config: AppConfig) -> list[RouteDefinition]:
        """Load route definitions from app config."""
        routes_data = config.get_routes_config()
        base_dir = config.get_config_dir()
        routes: list[RouteDefinition] = []

        for route_data in routes_data:
            route = RouteScheduleLoader.load_route_from_data(route_data, base_dir)
            if route is not None:
                routes.append(route)

        return routes
