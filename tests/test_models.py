"""Tests for domain models."""

from datetime import UTC, date, datetime, time, timedelta

import pytest
from pydantic import ValidationError

from gtfs_route_scheduler.domain.models import (
    ALL_WEEKDAYS,
    ErrorDetails,
    InstanceStatus,
    InstanceTiming,
    RouteDefinition,
    RouteScheduleConfig,
    ScheduleStats,
    Weekday,
)


class TestWeekday:
    """Tests for weekday parsing."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (0, Weekday.MONDAY),
            (6, Weekday.SUNDAY),
            ("monday", Weekday.MONDAY),
            ("Friday", Weekday.FRIDAY),
            (" SAT ", Weekday.SATURDAY),
            ("tues", Weekday.TUESDAY),
            ("thurs", Weekday.THURSDAY),
            (Weekday.WEDNESDAY, Weekday.WEDNESDAY),
        ],
    )
    def test_parse_accepts_numbers_names_and_abbreviations(
        self, value: object, expected: Weekday
    ) -> None:
        """Given a weekday value, when parsing, then the matching weekday is returned."""
        assert Weekday.parse(value) == expected

    @pytest.mark.parametrize("value", [7, -1, "someday", True, 1.5, None])
    def test_parse_rejects_invalid_values(self, value: object) -> None:
        """Given an invalid value, when parsing, then ValueError is raised."""
        with pytest.raises(ValueError):
            Weekday.parse(value)

    def test_numbering_matches_datetime_weekday(self) -> None:
        """Given a Monday date, when converting, then it maps to Weekday.MONDAY."""
        assert Weekday(date(2026, 10, 19).weekday()) == Weekday.MONDAY
        assert len(ALL_WEEKDAYS) == 7


class TestRouteScheduleConfig:
    """Tests for schedule configuration defaults."""

    def test_defaults(self) -> None:
        """Given only a route id, when creating a config, then daily 06:00-22:00 every 10 min applies."""
        config = RouteScheduleConfig(route_id="red-line")

        assert config.enabled is True
        assert config.operating_days == ALL_WEEKDAYS
        assert config.start_time == time(6, 0)
        assert config.end_time == time(22, 0)
        assert config.headway_seconds == 600
        assert config.max_instances == 1

    def test_is_immutable(self) -> None:
        """Given a config, when assigning a field, then it is rejected."""
        config = RouteScheduleConfig(route_id="red-line")

        with pytest.raises(AttributeError):
            config.headway_seconds = 60  # type: ignore[misc]


def test_instance_timing_delay() -> None:
    """Given a late firing, when reading the delay, then it is the difference in seconds."""
    scheduled = datetime(2026, 10, 19, 6, 0, tzinfo=UTC)
    timing = InstanceTiming(
        scheduled_time=scheduled,
        actual_time=scheduled + timedelta(milliseconds=250),
        config=RouteScheduleConfig(route_id="red-line"),
    )

    assert timing.delay_seconds == pytest.approx(0.25)


def test_instance_status_finished_states() -> None:
    """Given each status, when checking, then only completed and error are finished."""
    assert not InstanceStatus.READY.is_finished
    assert not InstanceStatus.RUNNING.is_finished
    assert InstanceStatus.COMPLETED.is_finished
    assert InstanceStatus.ERROR.is_finished
    assert InstanceStatus("running") is InstanceStatus.RUNNING


def test_route_definition_defaults() -> None:
    """Given a route with only a schedule, when creating, then map defaults are applied."""
    route = RouteDefinition(route_id="r1", schedule=RouteScheduleConfig(route_id="r1"))

    assert route.color == "#ff6b35"
    assert route.speed == 200.0
    assert route.coordinates == []


def test_schedule_stats_is_frozen() -> None:
    """Given stats, when mutating, then pydantic rejects the change."""
    stats = ScheduleStats(
        departures_per_day=1,
        departures_per_week=7,
        operating_days_per_week=7,
        operating_minutes=0,
        headway_minutes=10.0,
        first_departure=time(6, 0),
        last_departure=time(6, 0),
    )

    with pytest.raises(ValidationError):
        stats.departures_per_day = 2  # type: ignore[misc]


def test_error_details_default_status() -> None:
    """Given an error without status, when creating, then 400 is used."""
    assert ErrorDetails(code="VALIDATION_ERROR", message="bad").status_code == 400
