"""Tests for SchedulerWebAdapter wiring."""

import os
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from gtfs_route_scheduler.adapters.config import AppConfig
from gtfs_route_scheduler.adapters.web import SchedulerWebAdapter
from gtfs_route_scheduler.application.services import InstanceRegistry, RouteScheduler
from gtfs_route_scheduler.domain.models import RouteDefinition, RouteScheduleConfig


def clock() -> datetime:
    return datetime(2026, 10, 19, 6, 0, tzinfo=UTC)


@pytest.fixture
def config() -> AppConfig:
    with patch.dict(os.environ, {}, clear=True):
        return AppConfig(_env_file=None, config_file=None)  # type: ignore[call-arg]


@pytest.fixture
def routes() -> list[RouteDefinition]:
    return [RouteDefinition(route_id="r1", schedule=RouteScheduleConfig(route_id="r1"))]


def test_adapter_builds_poller_and_app(config: AppConfig, routes: list[RouteDefinition]) -> None:
    """Given valid components, when creating the adapter, then poller and app share the scheduler."""
    scheduler = RouteScheduler(routes=[r.schedule for r in routes], clock=clock)

    adapter = SchedulerWebAdapter(scheduler, InstanceRegistry(clock=clock), routes, config, clock)

    assert adapter.poller.scheduler is scheduler
    assert adapter.poller.clock is clock
    assert adapter.app is not None


def test_adapter_rejects_wrong_config(routes: list[RouteDefinition]) -> None:
    """Given a plain dict as config, when creating the adapter, then TypeError is raised."""
    scheduler = RouteScheduler(clock=clock)

    with pytest.raises(TypeError, match="AppConfig"):
        SchedulerWebAdapter(scheduler, InstanceRegistry(), routes, {}, clock)  # type: ignore[arg-type]


def test_adapter_rejects_wrong_routes(config: AppConfig) -> None:
    """Given route ids instead of definitions, when creating the adapter, then TypeError is raised."""
    scheduler = RouteScheduler(clock=clock)

    with pytest.raises(TypeError, match="RouteDefinition"):
        SchedulerWebAdapter(scheduler, InstanceRegistry(), ["r1"], config, clock)  # type: ignore[list-item]


@pytest.mark.asyncio
async def test_stop_before_start(config: AppConfig, routes: list[RouteDefinition]) -> None:
    """Given an adapter that never started, when stopping, then nothing fails."""
    scheduler = RouteScheduler(routes=[r.schedule for r in routes], clock=clock)
    adapter = SchedulerWebAdapter(scheduler, InstanceRegistry(clock=clock), routes, config, clock)

    await adapter.stop()

    assert not adapter.poller.is_running
