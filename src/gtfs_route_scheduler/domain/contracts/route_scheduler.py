"""Protocol for the route scheduler."""

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from datetime import datetime

    from gtfs_route_scheduler.domain.models.route_schedule_config import RouteScheduleConfig
    from gtfs_route_scheduler.domain.models.schedule_state import ScheduleState


class RouteSchedulerProtocol(Protocol):
    """Protocol for deciding when route instances are spawned."""

    @property
    def routes(self) -> list["RouteScheduleConfig"]:
        """The configurations the scheduler currently knows about."""
        ...

    def check_schedules(self, now: "datetime") -> list[str]:
        """Run one scheduler tick.

        Args:
            now: The current instant.

        Returns:
            Identifiers of the instances fired during this tick.
        """
        ...

    def next_check_delay(self, now: "datetime") -> float:
        """Seconds to wait before the next tick."""
        ...

    def notify_instance_complete(self, instance_id: str, route_id: str) -> None:
        """Release the concurrency slot held by a finished instance."""
        ...

    def toggle_schedule(self, route_id: str, enabled: bool) -> bool:
        """Enable or disable a route from the next tick on."""
        ...

    def update_schedule(self, route_id: str, **changes: Any) -> "ScheduleState | None":
        """Merge changes into a route's schedule and recompute its state."""
        ...

    def get_schedule_info(self, route_id: str) -> "ScheduleState | None":
        """Return the schedule state of a route, if any."""
        ...

    def get_all_schedule_info(self) -> dict[str, dict[str, Any]]:
        """Return every schedule state with its active instance count."""
        ...

    def create_scheduled_instance(
        self,
        route_id: str,
        scheduled_time: "datetime | None" = None,
        now: "datetime | None" = None,
    ) -> str | None:
        """Fire one instance of a route outside the regular tick."""
        ...
