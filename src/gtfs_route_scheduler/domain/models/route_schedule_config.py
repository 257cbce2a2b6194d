"""Route schedule configuration domain model."""

from dataclasses import dataclass, field
from datetime import time

from .weekday import ALL_WEEKDAYS, Weekday


@dataclass(frozen=True)
class RouteScheduleConfig:
    """Recurring service pattern for one route."""

    route_id: str
    enabled: bool = True
    operating_days: frozenset[Weekday] = field(default=ALL_WEEKDAYS)
    start_time: time = time(6, 0)
    end_time: time = time(22, 0)  # Inclusive: a departure exactly at end_time is kept
    headway_seconds: int = 600
    max_instances: int = 1  # Upper bound of simultaneously animated instances
