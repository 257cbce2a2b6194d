"""Pollers for web adapter."""

from gtfs_route_scheduler.adapters.web.pollers.schedule_poller import SchedulePoller

__all__ = ["SchedulePoller"]
