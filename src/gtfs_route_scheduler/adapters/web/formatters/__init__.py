"""JSON formatters for the web adapter."""

from gtfs_route_scheduler.adapters.web.formatters.schedule_formatter import (
    format_instance_record,
    format_route_definition,
    format_schedule_config,
    format_schedule_state,
)

__all__ = [
    "format_instance_record",
    "format_route_definition",
    "format_schedule_config",
    "format_schedule_state",
]
