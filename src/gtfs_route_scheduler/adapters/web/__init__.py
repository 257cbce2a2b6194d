"""Web adapter - JSON API and timer loop for the route scheduler."""

from gtfs_route_scheduler.adapters.web.api_app import create_api_app
from gtfs_route_scheduler.adapters.web.scheduler_web_adapter import SchedulerWebAdapter

__all__ = ["SchedulerWebAdapter", "create_api_app"]
