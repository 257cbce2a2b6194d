"""Scheduler settings domain model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SchedulerSettings:
    """Timing knobs of the scheduler loop."""

    grace_period_seconds: float = 0.5  # A slot older than this is skipped, not fired
    idle_check_interval_seconds: float = 1.0  # Wait when no departure is closer
    max_check_interval_seconds: float = 5.0  # Ceiling for any single wait
