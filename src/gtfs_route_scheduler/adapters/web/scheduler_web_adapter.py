"""Web adapter serving the scheduler API and running the schedule poller."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gtfs_route_scheduler.adapters.config import AppConfig
from gtfs_route_scheduler.domain.models import RouteDefinition

from .api_app import create_api_app
from .pollers import SchedulePoller

if TYPE_CHECKING:
    from starlette.applications import Starlette

    from gtfs_route_scheduler.domain.contracts import (
        Clock,
        InstanceRegistryProtocol,
        RouteSchedulerProtocol,
    )

logger = logging.getLogger(__name__)


class SchedulerWebAdapter:
    """Starts the schedule poller and serves the JSON API with uvicorn."""

    def __init__(
        self,
        scheduler: RouteSchedulerProtocol,
        registry: InstanceRegistryProtocol,
        routes: list[RouteDefinition],
        config: AppConfig,
        clock: Clock,
    ) -> None:
        """Initialize the web adapter.

        Args:
            scheduler: The route scheduler.
            registry: Registry of instances reported by the map.
            routes: Route definitions served to the map.
            config: Application configuration.
            clock: Source of the current time, in the schedules' timezone.
        """
        if not isinstance(config, AppConfig):
            raise TypeError("config must be an AppConfig instance")
        if not isinstance(routes, list) or not all(isinstance(r, RouteDefinition) for r in routes):
            raise TypeError("routes must be a list of RouteDefinition instances")
        # Protocols can't be checked with isinstance, verify required methods exist
        if not callable(getattr(scheduler, "check_schedules", None)):
            raise TypeError("scheduler must implement RouteSchedulerProtocol")

        self.scheduler = scheduler
        self.registry = registry
        self.routes = routes
        self.config = config
        self.clock = clock
        self.poller = SchedulePoller(scheduler, clock)
        self.app: Starlette = create_api_app(scheduler, registry, routes, config, clock)
        self._server: Any | None = None

    async def start(self) -> None:
        """Start the poller and the web server; returns when the server exits."""
        import uvicorn

        for route in self.routes:
            logger.info(
                f"Serving route '{route.route_id}' with {len(route.coordinates)} path points"
                + (" (scheduled)" if route.schedule.enabled else " (not scheduled)")
            )

        await self.poller.start()

        server_config = uvicorn.Config(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level="info",
        )
        self._server = uvicorn.Server(server_config)
        try:
            await self._server.serve()
        finally:
            await self.poller.stop()

    async def stop(self) -> None:
        """Stop the poller and ask the web server to exit."""
        await self.poller.stop()
        if self._server:
            self._server.should_exit = True
