"""Schedule statistics domain model."""

from datetime import time

from pydantic import BaseModel, ConfigDict


class ScheduleStats(BaseModel):
    """Summary figures of a route schedule, independent of any particular day."""

    model_config = ConfigDict(frozen=True)

    departures_per_day: int
    departures_per_week: int
    operating_days_per_week: int
    operating_minutes: int
    headway_minutes: float
    first_departure: time | None = None
    last_departure: time | None = None
