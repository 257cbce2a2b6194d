"""Weekday domain model."""

from __future__ import annotations

from enum import IntEnum

_NAME_ALIASES = {
    "mon": "MONDAY",
    "tue": "TUESDAY",
    "tues": "TUESDAY",
    "wed": "WEDNESDAY",
    "thu": "THURSDAY",
    "thur": "THURSDAY",
    "thurs": "THURSDAY",
    "fri": "FRIDAY",
    "sat": "SATURDAY",
    "sun": "SUNDAY",
}


class Weekday(IntEnum):
    """Day of the week, numbered like ``datetime.weekday()``."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def parse(cls, value: object) -> Weekday:
        """Parse a weekday from an int (0-6), a full name or an abbreviation."""
        if isinstance(value, Weekday):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            name = value.strip().lower()
            upper = _NAME_ALIASES.get(name, name.upper())
            if upper in cls.__members__:
                return cls[upper]
        raise ValueError(f"Invalid weekday: {value!r}")


ALL_WEEKDAYS: frozenset[Weekday] = frozenset(Weekday)
