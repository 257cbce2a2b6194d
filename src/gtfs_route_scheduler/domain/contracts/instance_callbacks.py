"""Callback signatures used to report instance lifecycle events."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from gtfs_route_scheduler.domain.models.instance_timing import InstanceTiming


class InstanceCreateCallback(Protocol):
    """Called once for every instance the scheduler fires."""

    def __call__(self, instance_id: str, route_id: str, timing: "InstanceTiming") -> None: ...


class InstanceCompleteCallback(Protocol):
    """Called once when an instance has finished its traversal."""

    def __call__(self, instance_id: str, route_id: str) -> None: ...
