"""Domain layer - models and protocols."""

from gtfs_route_scheduler.domain.models import (
    InstanceTiming,
    RouteDefinition,
    RouteScheduleConfig,
    ScheduleState,
    Weekday,
)

__all__ = [
    "InstanceTiming",
    "RouteDefinition",
    "RouteScheduleConfig",
    "ScheduleState",
    "Weekday",
]
