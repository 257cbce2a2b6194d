"""Instance timing domain model."""

from dataclasses import dataclass
from datetime import datetime

from .route_schedule_config import RouteScheduleConfig


@dataclass(frozen=True)
class InstanceTiming:
    """Timing details handed to the instance creation callback."""

    scheduled_time: datetime
    actual_time: datetime
    config: RouteScheduleConfig

    @property
    def delay_seconds(self) -> float:
        """Seconds between the scheduled slot and the actual firing."""
        return (self.actual_time - self.scheduled_time).total_seconds()
