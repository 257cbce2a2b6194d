"""Protocol for the instance lifecycle registry."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import timedelta

    from gtfs_route_scheduler.domain.models.instance_record import (
        InstanceRecord,
        InstanceStatus,
    )


class InstanceRegistryProtocol(Protocol):
    """Protocol for tracking instances reported by the map."""

    def get(self, instance_id: str) -> "InstanceRecord | None": ...

    def list_instances(self, status: "InstanceStatus | None" = None) -> list["InstanceRecord"]: ...

    def update_progress(
        self,
        instance_id: str,
        progress: float,
        position: tuple[float, float] | None = None,
    ) -> "InstanceRecord | None": ...

    def complete(self, instance_id: str) -> "InstanceRecord | None": ...

    def fail(self, instance_id: str) -> "InstanceRecord | None": ...

    def purge_finished(self, older_than: "timedelta") -> int: ...
