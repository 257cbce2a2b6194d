"""Configuration adapters."""

from gtfs_route_scheduler.adapters.config.app_config import AppConfig
from gtfs_route_scheduler.adapters.config.route_schedule_loader import RouteScheduleLoader

__all__ = ["AppConfig", "RouteScheduleLoader"]
