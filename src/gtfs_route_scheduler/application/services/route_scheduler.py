"""Route scheduler deciding when animated route instances are spawned."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from gtfs_route_scheduler.application.services.concurrency_tracker import ConcurrencyTracker
from gtfs_route_scheduler.application.services.schedule_calculator import (
    calculate_departures,
    get_next_departure,
    get_schedule_stats,
    get_time_until_departure,
    is_operating_day,
    is_within_operating_hours,
)
from gtfs_route_scheduler.domain.contracts.route_scheduler import RouteSchedulerProtocol
from gtfs_route_scheduler.domain.models.instance_timing import InstanceTiming
from gtfs_route_scheduler.domain.models.schedule_state import ScheduleState
from gtfs_route_scheduler.domain.models.scheduler_settings import SchedulerSettings

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gtfs_route_scheduler.domain.contracts.clock import Clock
    from gtfs_route_scheduler.domain.contracts.instance_callbacks import InstanceCreateCallback
    from gtfs_route_scheduler.domain.models.route_schedule_config import RouteScheduleConfig

logger = logging.getLogger(__name__)


def create_instance_id(route_id: str, at: datetime) -> str:
    """Create an identifier unique per route and firing."""
    return f"{route_id}-{int(at.timestamp() * 1000)}-{uuid.uuid4().hex[:8]}"


class RouteScheduler(RouteSchedulerProtocol):
    """Fires route instances at their scheduled departures.

    All methods are synchronous and expected to run on one event loop, so the
    schedule states and active counts need no locking. The timer that calls
    ``check_schedules`` lives in the schedule poller.
    """

    def __init__(
        self,
        routes: Iterable[RouteScheduleConfig] = (),
        on_instance_create: InstanceCreateCallback | None = None,
        settings: SchedulerSettings | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            routes: Schedule configurations, one per route.
            on_instance_create: Called with (instance_id, route_id, timing) for every firing.
            settings: Grace period and check interval settings.
            clock: Source of the current time, used when no explicit instant is given.
        """
        self.on_instance_create = on_instance_create
        self.settings = settings or SchedulerSettings()
        self.clock: Clock = clock or (lambda: datetime.now(UTC))
        self.tracker = ConcurrencyTracker()
        self._configs: dict[str, RouteScheduleConfig] = {}
        self._states: dict[str, ScheduleState] = {}
        self._outstanding: dict[str, str] = {}  # instance_id -> route_id
        self.set_routes(routes)

    def set_routes(self, routes: Iterable[RouteScheduleConfig], now: datetime | None = None) -> None:
        """Replace all route configurations and reinitialize every schedule.

        Active counts start again from zero; completions for instances fired
        before the reset are ignored.
        """
        now = now or self.clock()
        self._configs = {}
        self._states = {}
        self._outstanding = {}
        self.tracker.reset()

        for config in routes:
            if config.route_id in self._configs:
                logger.warning(f"Duplicate schedule for route {config.route_id}, keeping the last")
            self._configs[config.route_id] = config
            state = self._initialize_state(config, now)
            if state is None:
                continue
            self._states[config.route_id] = state
            logger.info(
                f"Initialized schedule for {config.route_id}: "
                f"{len(state.departures)} departures today, next at {state.next_departure_time}"
            )

    def _initialize_state(self, config: RouteScheduleConfig, now: datetime) -> ScheduleState | None:
        if not config.enabled:
            return None
        departures = calculate_departures(config, now)
        return ScheduleState(
            route_id=config.route_id,
            enabled=True,
            config=config,
            service_date=now.date(),
            stats=get_schedule_stats(config),
            initialized_at=now,
            departures=departures,
            next_departure_time=get_next_departure(departures, now),
        )

    def _roll_over(self, state: ScheduleState, now: datetime) -> None:
        """Recompute a state whose service day has ended.

        A slot still inside the grace period stays eligible, so a tick landing
        exactly on the first departure of the day fires it.
        """
        state.departures = calculate_departures(state.config, now)
        window_start = now - timedelta(seconds=self.settings.grace_period_seconds)
        state.next_departure_time = get_next_departure(state.departures, window_start)
        state.service_date = now.date()
        logger.info(
            f"New service day {state.service_date} for {state.route_id}: "
            f"{len(state.departures)} departures"
        )

    @property
    def routes(self) -> list[RouteScheduleConfig]:
        """The configurations the scheduler currently knows about."""
        return list(self._configs.values())

    @property
    def active_instances(self) -> dict[str, int]:
        """Active instance count per scheduled route."""
        return {route_id: self.tracker.count(route_id) for route_id in self._configs}

    def check_schedules(self, now: datetime) -> list[str]:
        """Run one tick and fire every route whose departure is due.

        A departure fires when ``now`` is at or past it by less than the grace
        period. Older slots are counted as missed and skipped, so a delayed
        tick never fires the same slot twice.
        """
        fired: list[str] = []
        for route_id, state in list(self._states.items()):
            try:
                instance_id = self._check_route(route_id, state, now)
            except Exception:
                logger.exception(f"Schedule check failed for {route_id}, skipping this tick")
                continue
            if instance_id is not None:
                fired.append(instance_id)
        return fired

    def _check_route(self, route_id: str, state: ScheduleState, now: datetime) -> str | None:
        if not state.enabled:
            return None
        if route_id not in self._configs:
            logger.debug(f"Skipping {route_id}: route no longer configured")
            return None

        if now.date() != state.service_date:
            self._roll_over(state, now)

        config = state.config
        if not is_operating_day(config, now) or not is_within_operating_hours(config, now):
            return None

        next_departure = state.next_departure_time
        if next_departure is None or now < next_departure:
            return None

        lateness = (now - next_departure).total_seconds()
        if lateness >= self.settings.grace_period_seconds:
            state.missed_departures += 1
            state.next_departure_time = get_next_departure(state.departures, now)
            logger.warning(
                f"Missed departure {next_departure} for {route_id} "
                f"({lateness:.2f}s late), next at {state.next_departure_time}"
            )
            return None

        if self.tracker.count(route_id) >= config.max_instances:
            logger.debug(f"Skipping {route_id}: {config.max_instances} instance(s) already active")
            return None

        return self.create_scheduled_instance(route_id, next_departure, now=now)

    def create_scheduled_instance(
        self,
        route_id: str,
        scheduled_time: datetime | None = None,
        now: datetime | None = None,
    ) -> str | None:
        """Fire one instance of a route.

        Returns:
            The new instance id, or None if the route is unknown or at capacity.
        """
        config = self._configs.get(route_id)
        if config is None:
            logger.warning(f"Route {route_id} not found")
            return None

        now = now or self.clock()
        scheduled_time = scheduled_time or now
        state = self._states.get(route_id)
        if state is not None:
            config = state.config

        if not self.tracker.try_acquire(route_id, config.max_instances):
            logger.info(f"Route {route_id} at capacity ({config.max_instances}), not firing")
            return None

        instance_id = create_instance_id(route_id, now)
        self._outstanding[instance_id] = route_id
        logger.info(f"Creating instance {instance_id} for {route_id}")

        if state is not None:
            state.last_departure_time = now
            state.total_departures_fired += 1
            state.next_departure_time = get_next_departure(state.departures, now)

        if self.on_instance_create is not None:
            timing = InstanceTiming(scheduled_time=scheduled_time, actual_time=now, config=config)
            try:
                self.on_instance_create(instance_id, route_id, timing)
            except Exception:
                logger.exception(f"Instance creation callback failed for {instance_id}")

        return instance_id

    def next_check_delay(self, now: datetime) -> float:
        """Seconds until the soonest upcoming departure, bounded by the check intervals."""
        wait = self.settings.idle_check_interval_seconds
        for state in self._states.values():
            if not state.enabled or state.next_departure_time is None:
                continue
            until = get_time_until_departure(state.next_departure_time, now)
            if 0 < until < wait:
                wait = until
        return min(wait, self.settings.max_check_interval_seconds)

    def notify_instance_complete(self, instance_id: str, route_id: str) -> None:
        """Release the slot held by a finished instance.

        Each fired instance releases its slot at most once; unknown or
        repeated ids are ignored.
        """
        owner = self._outstanding.pop(instance_id, None)
        if owner is None:
            logger.warning(f"Ignoring completion of unknown instance {instance_id}")
            return
        if owner != route_id:
            logger.warning(
                f"Instance {instance_id} reported for {route_id} but belongs to {owner}"
            )
        remaining = self.tracker.decrement(owner)
        logger.info(f"Instance {instance_id} completed, {remaining} active on {owner}")

    def toggle_schedule(self, route_id: str, enabled: bool) -> bool:
        """Enable or disable a route; the change applies from the next tick.

        Returns:
            True if the route is known, False otherwise.
        """
        config = self._configs.get(route_id)
        if config is None:
            logger.warning(f"Cannot toggle unknown route {route_id}")
            return False

        # Stored on the config too, so later schedule edits keep the flag
        config = replace(config, enabled=enabled)
        self._configs[route_id] = config

        state = self._states.get(route_id)
        if state is not None:
            state.enabled = enabled
            state.config = config
        elif enabled:
            new_state = self._initialize_state(config, self.clock())
            if new_state is not None:
                self._states[route_id] = new_state

        logger.info(f"{'Enabled' if enabled else 'Disabled'} schedule for {route_id}")
        return True

    def update_schedule(self, route_id: str, **changes: Any) -> ScheduleState | None:
        """Merge changes into a route's configuration and recompute its schedule.

        Active counts are kept so in-flight instances still release their slots.

        Returns:
            The new state, or None if the route is unknown or now disabled.
        """
        config = self._configs.get(route_id)
        if config is None:
            logger.warning(f"Cannot update unknown route {route_id}")
            return None

        changes.pop("route_id", None)
        config = replace(config, **changes)
        self._configs[route_id] = config

        state = self._initialize_state(config, self.clock())
        if state is None:
            self._states.pop(route_id, None)
            logger.info(f"Updated schedule for {route_id} (disabled)")
            return None

        self._states[route_id] = state
        logger.info(f"Updated schedule for {route_id}")
        return state

    def get_schedule_info(self, route_id: str) -> ScheduleState | None:
        """Return the schedule state of a route, if it is scheduled."""
        return self._states.get(route_id)

    def get_all_schedule_info(self) -> dict[str, dict[str, Any]]:
        """Return every schedule state together with its active instance count."""
        return {
            route_id: {"state": state, "active_instances": self.tracker.count(route_id)}
            for route_id, state in self._states.items()
        }
