"""Application services."""

from gtfs_route_scheduler.application.services.concurrency_tracker import ConcurrencyTracker
from gtfs_route_scheduler.application.services.instance_registry import InstanceRegistry
from gtfs_route_scheduler.application.services.route_scheduler import (
    RouteScheduler,
    create_instance_id,
)
from gtfs_route_scheduler.application.services.schedule_calculator import (
    calculate_departures,
    get_next_departure,
    get_schedule_stats,
    get_time_until_departure,
    is_operating_day,
    is_within_operating_hours,
)

__all__ = [
    "ConcurrencyTracker",
    "InstanceRegistry",
    "RouteScheduler",
    "calculate_departures",
    "create_instance_id",
    "get_next_departure",
    "get_schedule_stats",
    "get_time_until_departure",
    "is_operating_day",
    "is_within_operating_hours",
]
