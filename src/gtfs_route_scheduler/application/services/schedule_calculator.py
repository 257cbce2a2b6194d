"""Pure functions expanding a recurring route schedule into departures.

All calculations use the wall clock of the reference instant, so callers pass
instants already converted to the service timezone.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from gtfs_route_scheduler.domain.models.schedule_stats import ScheduleStats

if TYPE_CHECKING:
    from gtfs_route_scheduler.domain.models.route_schedule_config import RouteScheduleConfig

logger = logging.getLogger(__name__)


def _departure_offsets(config: RouteScheduleConfig) -> list[timedelta]:
    """Offsets from midnight of every departure in one operating day."""
    if config.headway_seconds <= 0:
        logger.debug(
            f"Route {config.route_id} has non-positive headway ({config.headway_seconds}s)"
        )
        return []

    start = timedelta(
        hours=config.start_time.hour,
        minutes=config.start_time.minute,
        seconds=config.start_time.second,
    )
    end = timedelta(
        hours=config.end_time.hour,
        minutes=config.end_time.minute,
        seconds=config.end_time.second,
    )
    if end < start:
        logger.debug(f"Route {config.route_id} ends before it starts, no departures")
        return []

    headway = timedelta(seconds=config.headway_seconds)
    offsets = []
    current = start
    while current <= end:
        offsets.append(current)
        current += headway
    return offsets


def is_operating_day(config: RouteScheduleConfig, at: datetime) -> bool:
    """Check whether the route runs on the weekday of ``at``."""
    return at.weekday() in config.operating_days


def is_within_operating_hours(config: RouteScheduleConfig, at: datetime) -> bool:
    """Check whether the wall-clock time of ``at`` is inside start..end (inclusive)."""
    wall_clock = at.time().replace(microsecond=0)
    return config.start_time <= wall_clock <= config.end_time


def calculate_departures(config: RouteScheduleConfig, reference: datetime) -> list[datetime]:
    """Expand the schedule into the departures of the reference instant's day.

    Returns an empty list when the route is disabled, does not operate on that
    weekday, or is misconfigured. Never raises for bad schedule values.
    """
    if not config.enabled:
        return []
    if not is_operating_day(config, reference):
        return []

    midnight = datetime.combine(reference.date(), datetime.min.time(), tzinfo=reference.tzinfo)
    return [midnight + offset for offset in _departure_offsets(config)]


def get_next_departure(departures: list[datetime], reference: datetime) -> datetime | None:
    """Return the earliest departure strictly after ``reference``.

    ``departures`` must be sorted ascending. Returns None when the day is exhausted.
    """
    index = bisect_right(departures, reference)
    if index >= len(departures):
        return None
    return departures[index]


def get_time_until_departure(departure: datetime, now: datetime) -> float:
    """Seconds from ``now`` until ``departure`` (negative when already past)."""
    return (departure - now).total_seconds()


def get_schedule_stats(config: RouteScheduleConfig) -> ScheduleStats:
    """Summarize a schedule without reference to a particular day."""
    offsets = _departure_offsets(config)
    per_day = len(offsets)
    days = len(config.operating_days)

    operating_minutes = 0
    first_departure = None
    last_departure = None
    if offsets:
        operating_minutes = int((offsets[-1] - offsets[0]).total_seconds() // 60)
        first_departure = (datetime.min + offsets[0]).time()
        last_departure = (datetime.min + offsets[-1]).time()

    return ScheduleStats(
        departures_per_day=per_day,
        departures_per_week=per_day * days,
        operating_days_per_week=days,
        operating_minutes=operating_minutes,
        headway_minutes=round(max(config.headway_seconds, 0) / 60, 2),
        first_departure=first_departure,
        last_departure=last_departure,
    )
