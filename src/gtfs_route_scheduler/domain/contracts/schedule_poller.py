"""Protocol for the timer loop driving the scheduler."""

from typing import Protocol


class SchedulePollerProtocol(Protocol):
    """Protocol for a self re-arming scheduler loop."""

    async def start(self) -> None:
        """Start the loop."""
        ...

    async def stop(self) -> None:
        """Stop the loop and cancel the pending wake-up."""
        ...
