"""Protocols shared between the application and adapter layers."""

from gtfs_route_scheduler.domain.contracts.clock import Clock
from gtfs_route_scheduler.domain.contracts.instance_callbacks import (
    InstanceCompleteCallback,
    InstanceCreateCallback,
)
from gtfs_route_scheduler.domain.contracts.instance_registry import InstanceRegistryProtocol
from gtfs_route_scheduler.domain.contracts.route_scheduler import RouteSchedulerProtocol
from gtfs_route_scheduler.domain.contracts.schedule_poller import SchedulePollerProtocol

__all__ = [
    "Clock",
    "InstanceCompleteCallback",
    "InstanceCreateCallback",
    "InstanceRegistryProtocol",
    "RouteSchedulerProtocol",
    "SchedulePollerProtocol",
]
