"""Domain models for the route scheduler."""

from gtfs_route_scheduler.domain.models.error_details import ErrorDetails
from gtfs_route_scheduler.domain.models.instance_record import InstanceRecord, InstanceStatus
from gtfs_route_scheduler.domain.models.instance_timing import InstanceTiming
from gtfs_route_scheduler.domain.models.route_definition import RouteDefinition
from gtfs_route_scheduler.domain.models.route_schedule_config import RouteScheduleConfig
from gtfs_route_scheduler.domain.models.schedule_state import ScheduleState
from gtfs_route_scheduler.domain.models.schedule_stats import ScheduleStats
from gtfs_route_scheduler.domain.models.scheduler_settings import SchedulerSettings
from gtfs_route_scheduler.domain.models.weekday import ALL_WEEKDAYS, Weekday

__all__ = [
    "ALL_WEEKDAYS",
    "ErrorDetails",
    "InstanceRecord",
    "InstanceStatus",
    "InstanceTiming",
    "RouteDefinition",
    "RouteScheduleConfig",
    "ScheduleState",
    "ScheduleStats",
    "SchedulerSettings",
    "Weekday",
]
