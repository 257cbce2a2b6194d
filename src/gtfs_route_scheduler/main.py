"""Main entry point for the GTFS route scheduler service."""

import asyncio
import logging
import sys
from datetime import datetime, timedelta

from gtfs_route_scheduler.adapters.config import AppConfig, RouteScheduleLoader
from gtfs_route_scheduler.adapters.web import SchedulerWebAdapter
from gtfs_route_scheduler.application.services import InstanceRegistry, RouteScheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


async def main() -> None:
    """Main application entry point."""
    config = AppConfig()

    try:
        routes = RouteScheduleLoader.load(config)
    except (ValueError, FileNotFoundError) as e:
        logger.error(f"Invalid route configuration: {e}")
        sys.exit(1)

    if not routes:
        logger.error("No routes configured.")
        logger.error("Please configure [[routes]] in your config.toml file.")
        logger.error("Or copy config.example.toml to config.toml and customize it.")
        sys.exit(1)

    scheduled = [route for route in routes if route.schedule.enabled]
    logger.info(f"Loaded {len(routes)} route(s), {len(scheduled)} with an active schedule:")
    for route in scheduled:
        schedule = route.schedule
        logger.info(
            f"  - {route.route_id}: {schedule.start_time}-{schedule.end_time} "
            f"every {schedule.headway_seconds}s, max {schedule.max_instances} instance(s)"
        )

    tz = config.tzinfo

    def clock() -> datetime:
        return datetime.now(tz)

    scheduler = RouteScheduler(
        routes=[route.schedule for route in routes],
        settings=config.scheduler_settings(),
        clock=clock,
    )
    registry = InstanceRegistry(
        on_complete=scheduler.notify_instance_complete,
        clock=clock,
        retention=timedelta(seconds=config.instance_retention_seconds),
    )
    scheduler.on_instance_create = registry

    web_adapter = SchedulerWebAdapter(scheduler, registry, routes, config, clock)
    try:
        await web_adapter.start()
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        await web_adapter.stop()


def run() -> None:
    """Synchronous entry point for the service command."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
