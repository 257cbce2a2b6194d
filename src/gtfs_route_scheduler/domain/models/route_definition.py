"""Route definition domain model."""

from dataclasses import dataclass, field

from .route_schedule_config import RouteScheduleConfig


@dataclass(frozen=True)
class RouteDefinition:
    """A route as shown on the map: path geometry, styling and schedule."""

    route_id: str
    schedule: RouteScheduleConfig
    name: str = ""
    color: str = "#ff6b35"
    speed: float = 200.0  # Animation speed passed through to the map
    coordinates: list[tuple[float, float]] = field(default_factory=list)  # (lat, lng) pairs
