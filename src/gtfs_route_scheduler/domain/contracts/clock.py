"""Protocol for reading the current time."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from datetime import datetime


class Clock(Protocol):
    """Returns the current, timezone-aware instant."""

    def __call__(self) -> "datetime": ...
