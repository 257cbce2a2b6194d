"""Instance record domain model."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class InstanceStatus(StrEnum):
    """Lifecycle of an animated route instance as reported by the map."""

    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_finished(self) -> bool:
        return self in (InstanceStatus.COMPLETED, InstanceStatus.ERROR)


@dataclass
class InstanceRecord:
    """Last known state of one instance."""

    instance_id: str
    route_id: str
    status: InstanceStatus
    updated_at: datetime
    scheduled_time: datetime | None = None
    progress: float = 0.0  # 0.0 at the first stop, 1.0 at the last
    position: tuple[float, float] | None = None  # (lat, lng) of the marker
