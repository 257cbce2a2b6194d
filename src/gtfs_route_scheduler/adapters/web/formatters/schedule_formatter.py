"""Convert scheduler models into JSON-ready dicts."""

from datetime import datetime
from typing import Any

from gtfs_route_scheduler.domain.models.instance_record import InstanceRecord
from gtfs_route_scheduler.domain.models.route_definition import RouteDefinition
from gtfs_route_scheduler.domain.models.route_schedule_config import RouteScheduleConfig
from gtfs_route_scheduler.domain.models.schedule_state import ScheduleState


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def format_schedule_config(config: RouteScheduleConfig) -> dict[str, Any]:
    return {
        "route_id": config.route_id,
        "enabled": config.enabled,
        "operating_days": [day.name.lower() for day in sorted(config.operating_days)],
        "start_time": config.start_time.strftime("%H:%M:%S"),
        "end_time": config.end_time.strftime("%H:%M:%S"),
        "headway_seconds": config.headway_seconds,
        "max_instances": config.max_instances,
    }


def format_schedule_state(
    state: ScheduleState, active_instances: int, include_departures: bool = False
) -> dict[str, Any]:
    """Format a schedule state; the departure list is only included on request."""
    data: dict[str, Any] = {
        "route_id": state.route_id,
        "enabled": state.enabled,
        "schedule": format_schedule_config(state.config),
        "service_date": state.service_date.isoformat(),
        "departures_today": len(state.departures),
        "next_departure_time": _iso(state.next_departure_time),
        "last_departure_time": _iso(state.last_departure_time),
        "total_departures_fired": state.total_departures_fired,
        "missed_departures": state.missed_departures,
        "active_instances": active_instances,
        "stats": state.stats.model_dump(mode="json"),
        "initialized_at": _iso(state.initialized_at),
    }
    if include_departures:
        data["departures"] = [_iso(d) for d in state.departures]
    return data


def format_instance_record(record: InstanceRecord) -> dict[str, Any]:
    return {
        "instance_id": record.instance_id,
        "route_id": record.route_id,
        "status": str(record.status),
        "progress": record.progress,
        "position": list(record.position) if record.position is not None else None,
        "scheduled_time": _iso(record.scheduled_time),
        "updated_at": _iso(record.updated_at),
    }


def format_route_definition(route: RouteDefinition) -> dict[str, Any]:
    return {
        "id": route.route_id,
        "name": route.name,
        "color": route.color,
        "speed": route.speed,
        "coordinates": [list(point) for point in route.coordinates],
        "schedule": format_schedule_config(route.schedule),
    }
