"""Timer loop driving the route scheduler."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from gtfs_route_scheduler.domain.contracts.schedule_poller import SchedulePollerProtocol

if TYPE_CHECKING:
    from gtfs_route_scheduler.domain.contracts.clock import Clock
    from gtfs_route_scheduler.domain.contracts.route_scheduler import RouteSchedulerProtocol

logger = logging.getLogger(__name__)


class SchedulePoller(SchedulePollerProtocol):
    """Runs scheduler ticks on a single re-arming asyncio task.

    Each tick is synchronous, so cancelling the task only ever cancels the
    pending sleep between two ticks.
    """

    def __init__(self, scheduler: RouteSchedulerProtocol, clock: Clock | None = None) -> None:
        """Initialize the schedule poller.

        Args:
            scheduler: The scheduler to tick.
            clock: Source of the current time, in the schedules' timezone.
        """
        self.scheduler = scheduler
        self.clock: Clock = clock or (lambda: datetime.now(UTC))
        self.next_check_time: datetime | None = None
        self.tick_count = 0
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the schedule poller."""
        if self.is_running:
            logger.warning("Schedule poller already running")
            return

        self._task = asyncio.create_task(self._poll_loop())
        logger.info("Started schedule poller task")

    async def stop(self) -> None:
        """Stop the schedule poller."""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                logger.info("Schedule poller cancelled")
            logger.info("Stopped schedule poller")
        self._task = None

    def tick(self) -> float:
        """Run one scheduler check and return the delay until the next one."""
        now = self.clock()
        try:
            fired = self.scheduler.check_schedules(now)
            if fired:
                logger.debug(f"Tick at {now} fired {len(fired)} instance(s)")
        except Exception:
            logger.exception("Scheduler tick failed")
        self.tick_count += 1

        after = self.clock()
        delay = self.scheduler.next_check_delay(after)
        self.next_check_time = after + timedelta(seconds=delay)
        return delay

    async def _poll_loop(self) -> None:
        """Main polling loop."""
        try:
            while True:
                delay = self.tick()
                await asyncio.sleep(delay)
        except asyncio.CancelledError:
            logger.info("Schedule poller cancelled")
            raise
