"""Registry of the route instances currently animated on the map."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from gtfs_route_scheduler.domain.contracts.instance_registry import InstanceRegistryProtocol
from gtfs_route_scheduler.domain.models.instance_record import InstanceRecord, InstanceStatus

if TYPE_CHECKING:
    from gtfs_route_scheduler.domain.contracts.clock import Clock
    from gtfs_route_scheduler.domain.contracts.instance_callbacks import (
        InstanceCompleteCallback,
    )
    from gtfs_route_scheduler.domain.models.instance_timing import InstanceTiming

logger = logging.getLogger(__name__)


class InstanceRegistry(InstanceRegistryProtocol):
    """Tracks instance lifecycle reported by the map.

    Registered as the scheduler's creation callback. When an instance reaches
    ``completed`` or ``error`` the completion callback runs exactly once, which
    releases the route's concurrency slot.
    """

    def __init__(
        self,
        on_complete: InstanceCompleteCallback | None = None,
        clock: Clock | None = None,
        retention: timedelta = timedelta(minutes=5),
    ) -> None:
        """Initialize the registry.

        Args:
            on_complete: Called with (instance_id, route_id) when an instance finishes.
            clock: Source of the current time for record timestamps.
            retention: How long finished records are kept; older ones are dropped
                whenever a new instance registers.
        """
        self.on_complete = on_complete
        self.clock: Clock = clock or (lambda: datetime.now(UTC))
        self.retention = retention
        self._records: dict[str, InstanceRecord] = {}

    def __call__(self, instance_id: str, route_id: str, timing: InstanceTiming) -> None:
        self.register(instance_id, route_id, timing.scheduled_time)

    def __len__(self) -> int:
        return len(self._records)

    def register(
        self, instance_id: str, route_id: str, scheduled_time: datetime | None = None
    ) -> InstanceRecord:
        """Add a freshly created instance in the ``ready`` state."""
        self.purge_finished(self.retention)
        existing = self._records.get(instance_id)
        if existing is not None:
            logger.warning(f"Instance {instance_id} already exists")
            return existing

        record = InstanceRecord(
            instance_id=instance_id,
            route_id=route_id,
            status=InstanceStatus.READY,
            updated_at=self.clock(),
            scheduled_time=scheduled_time,
        )
        self._records[instance_id] = record
        logger.debug(f"Registered instance {instance_id} for {route_id}")
        return record

    def get(self, instance_id: str) -> InstanceRecord | None:
        return self._records.get(instance_id)

    def list_instances(self, status: InstanceStatus | None = None) -> list[InstanceRecord]:
        """Return records, optionally only those with the given status."""
        records = list(self._records.values())
        if status is not None:
            records = [r for r in records if r.status == status]
        return records

    def update_progress(
        self,
        instance_id: str,
        progress: float,
        position: tuple[float, float] | None = None,
    ) -> InstanceRecord | None:
        """Record animation progress; moves the instance to ``running``.

        Progress is clamped to 0..1. Updates for finished or unknown instances
        are ignored.
        """
        record = self._records.get(instance_id)
        if record is None:
            logger.warning(f"Progress for unknown instance {instance_id}")
            return None
        if record.status.is_finished:
            logger.debug(f"Ignoring progress for finished instance {instance_id}")
            return record

        record.status = InstanceStatus.RUNNING
        record.progress = max(0.0, min(1.0, progress))
        record.position = position
        record.updated_at = self.clock()
        return record

    def complete(self, instance_id: str) -> InstanceRecord | None:
        """Mark an instance as completed."""
        return self._finish(instance_id, InstanceStatus.COMPLETED)

    def fail(self, instance_id: str) -> InstanceRecord | None:
        """Mark an instance as failed; its slot is released like a completion."""
        return self._finish(instance_id, InstanceStatus.ERROR)

    def _finish(self, instance_id: str, status: InstanceStatus) -> InstanceRecord | None:
        record = self._records.get(instance_id)
        if record is None:
            logger.warning(f"Cannot mark unknown instance {instance_id} as {status}")
            return None
        if record.status.is_finished:
            logger.debug(f"Instance {instance_id} already {record.status}")
            return record

        record.status = status
        if status == InstanceStatus.COMPLETED:
            record.progress = 1.0
        record.updated_at = self.clock()
        logger.info(f"Instance {instance_id} {status}")

        if self.on_complete is not None:
            self.on_complete(instance_id, record.route_id)
        return record

    def purge_finished(self, older_than: timedelta) -> int:
        """Drop finished records not updated within ``older_than``.

        Returns:
            Number of records removed.
        """
        cutoff = self.clock() - older_than
        stale = [
            instance_id
            for instance_id, record in self._records.items()
            if record.status.is_finished and record.updated_at <= cutoff
        ]
        for instance_id in stale:
            del self._records[instance_id]
        if stale:
            logger.debug(f"Purged {len(stale)} finished instance(s)")
        return len(stale)

    def clear(self) -> None:
        self._records.clear()
