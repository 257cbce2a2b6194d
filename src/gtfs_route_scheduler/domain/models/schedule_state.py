"""Schedule state domain model."""

from dataclasses import dataclass, field
from datetime import date, datetime

from .route_schedule_config import RouteScheduleConfig
from .schedule_stats import ScheduleStats


@dataclass
class ScheduleState:
    """Derived, per-route scheduling state for one service day."""

    route_id: str
    enabled: bool
    config: RouteScheduleConfig
    service_date: date
    stats: ScheduleStats
    initialized_at: datetime
    departures: list[datetime] = field(default_factory=list)
    next_departure_time: datetime | None = None
    last_departure_time: datetime | None = None
    total_departures_fired: int = 0
    missed_departures: int = 0  # Slots skipped because a tick arrived after the grace period
