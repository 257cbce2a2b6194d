"""JSON HTTP API exposing the route scheduler to the map frontend."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from gtfs_route_scheduler.adapters.config.route_schedule_loader import (
    parse_operating_days,
    parse_time_of_day,
)
from gtfs_route_scheduler.domain.models.error_details import ErrorDetails
from gtfs_route_scheduler.domain.models.instance_record import InstanceStatus

from .formatters import (
    format_instance_record,
    format_route_definition,
    format_schedule_config,
    format_schedule_state,
)
from .rate_limit_middleware import RateLimitMiddleware

if TYPE_CHECKING:
    from starlette.requests import Request

    from gtfs_route_scheduler.adapters.config.app_config import AppConfig
    from gtfs_route_scheduler.domain.contracts.clock import Clock
    from gtfs_route_scheduler.domain.contracts.instance_registry import InstanceRegistryProtocol
    from gtfs_route_scheduler.domain.contracts.route_scheduler import RouteSchedulerProtocol
    from gtfs_route_scheduler.domain.models.route_definition import RouteDefinition

logger = logging.getLogger(__name__)


class ToggleRequest(BaseModel):
    enabled: bool


class ScheduleUpdateRequest(BaseModel):
    """Partial schedule update; omitted fields keep their current value."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool | None = None
    operating_days: list[str | int] | str | None = None
    start_time: str | None = None
    end_time: str | None = None
    headway_seconds: int | None = Field(default=None, gt=0)
    max_instances: int | None = Field(default=None, ge=1)

    def to_changes(self) -> dict[str, Any]:
        """Convert the set fields into scheduler config changes.

        Raises:
            ValueError: If a time or weekday cannot be parsed.
        """
        changes: dict[str, Any] = self.model_dump(exclude_none=True)
        if "operating_days" in changes:
            changes["operating_days"] = parse_operating_days(changes["operating_days"])
        for key in ("start_time", "end_time"):
            if key in changes:
                changes[key] = parse_time_of_day(changes[key])
        return changes


class ProgressRequest(BaseModel):
    progress: float
    position: tuple[float, float] | None = None


def error_response(code: str, message: str, status_code: int) -> JSONResponse:
    """Build a JSON error body of the form {"error": CODE, "message": ...}."""
    details = ErrorDetails(code=code, message=message, status_code=status_code)
    return JSONResponse(
        {"error": details.code, "message": details.message},
        status_code=details.status_code,
    )


def _validation_error(error: ValidationError | ValueError) -> JSONResponse:
    if isinstance(error, ValidationError):
        message = "; ".join(
            f"{'.'.join(str(p) for p in e['loc']) or 'body'}: {e['msg']}" for e in error.errors()
        )
    else:
        message = str(error)
    return error_response("VALIDATION_ERROR", message, 400)


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        raise ValueError(f"Request body must be valid JSON: {e}") from e


def create_api_app(
    scheduler: RouteSchedulerProtocol,
    registry: InstanceRegistryProtocol,
    routes: list[RouteDefinition],
    config: AppConfig,
    clock: Clock,
) -> Starlette:
    """Create the Starlette application.

    Args:
        scheduler: The route scheduler.
        registry: Registry of instances reported by the map.
        routes: Route definitions (geometry and styling) served to the map.
        config: Application configuration.
        clock: Source of the current time, in the schedules' timezone.
    """
    route_definitions = {route.route_id: route for route in routes}
    retention = timedelta(seconds=config.instance_retention_seconds)

    def check_admin(request: Request) -> JSONResponse | None:
        expected_token = config.admin_command_token
        if not expected_token:
            return None
        if request.headers.get("X-Admin-Token", "") != expected_token:
            logger.warning(f"Unauthorized {request.method} {request.url.path}")
            return error_response("UNAUTHORIZED", "Missing or invalid X-Admin-Token", 403)
        return None

    def unknown_route(route_id: str) -> JSONResponse:
        return error_response("NOT_FOUND", f"Route {route_id} not found", 404)

    async def healthz(_request: Request) -> Response:
        """Health check endpoint for load balancers and monitoring."""
        return Response(content="Ok", media_type="text/plain")

    async def list_routes(_request: Request) -> JSONResponse:
        schedules = {schedule.route_id: schedule for schedule in scheduler.routes}
        payload = []
        for route_id, route in route_definitions.items():
            data = format_route_definition(route)
            # Reflect edits made through the schedule endpoints
            if route_id in schedules:
                data["schedule"] = format_schedule_config(schedules[route_id])
            payload.append(data)
        return JSONResponse({"routes": payload})

    async def list_schedules(_request: Request) -> JSONResponse:
        info = scheduler.get_all_schedule_info()
        return JSONResponse(
            {
                "now": clock().isoformat(),
                "schedules": {
                    route_id: format_schedule_state(item["state"], item["active_instances"])
                    for route_id, item in info.items()
                },
            }
        )

    async def get_schedule(request: Request) -> JSONResponse:
        route_id = request.path_params["route_id"]
        info = scheduler.get_all_schedule_info().get(route_id)
        if info is None:
            return unknown_route(route_id)
        return JSONResponse(
            format_schedule_state(info["state"], info["active_instances"], include_departures=True)
        )

    async def toggle_schedule(request: Request) -> JSONResponse:
        if (denied := check_admin(request)) is not None:
            return denied
        route_id = request.path_params["route_id"]
        try:
            body = ToggleRequest.model_validate(await _read_json(request))
        except (ValidationError, ValueError) as e:
            return _validation_error(e)

        if not scheduler.toggle_schedule(route_id, body.enabled):
            return unknown_route(route_id)
        return JSONResponse({"route_id": route_id, "enabled": body.enabled})

    async def update_schedule(request: Request) -> JSONResponse:
        if (denied := check_admin(request)) is not None:
            return denied
        route_id = request.path_params["route_id"]
        if route_id not in route_definitions:
            return unknown_route(route_id)
        try:
            body = ScheduleUpdateRequest.model_validate(await _read_json(request))
            changes = body.to_changes()
        except (ValidationError, ValueError) as e:
            return _validation_error(e)

        state = scheduler.update_schedule(route_id, **changes)
        if state is None:
            return JSONResponse({"route_id": route_id, "enabled": False})
        active = scheduler.get_all_schedule_info().get(route_id, {}).get("active_instances", 0)
        return JSONResponse(format_schedule_state(state, active))

    async def create_instance(request: Request) -> JSONResponse:
        if (denied := check_admin(request)) is not None:
            return denied
        route_id = request.path_params["route_id"]
        if route_id not in route_definitions:
            return unknown_route(route_id)

        instance_id = scheduler.create_scheduled_instance(route_id, now=clock())
        if instance_id is None:
            return error_response(
                "CAPACITY_REACHED", f"Route {route_id} has reached its instance limit", 409
            )
        return JSONResponse({"instance_id": instance_id, "route_id": route_id}, status_code=201)

    async def list_instances(request: Request) -> JSONResponse:
        status_param = request.query_params.get("status")
        status = None
        if status_param:
            try:
                status = InstanceStatus(status_param)
            except ValueError:
                return error_response("VALIDATION_ERROR", f"Unknown status: {status_param}", 400)

        registry.purge_finished(retention)
        records = registry.list_instances(status)
        return JSONResponse({"instances": [format_instance_record(r) for r in records]})

    async def report_progress(request: Request) -> JSONResponse:
        instance_id = request.path_params["instance_id"]
        try:
            body = ProgressRequest.model_validate(await _read_json(request))
        except (ValidationError, ValueError) as e:
            return _validation_error(e)

        record = registry.update_progress(instance_id, body.progress, body.position)
        if record is None:
            return error_response("NOT_FOUND", f"Instance {instance_id} not found", 404)
        return JSONResponse(format_instance_record(record))

    async def complete_instance(request: Request) -> JSONResponse:
        instance_id = request.path_params["instance_id"]
        record = registry.complete(instance_id)
        if record is None:
            return error_response("NOT_FOUND", f"Instance {instance_id} not found", 404)
        return JSONResponse(format_instance_record(record))

    async def fail_instance(request: Request) -> JSONResponse:
        instance_id = request.path_params["instance_id"]
        record = registry.fail(instance_id)
        if record is None:
            return error_response("NOT_FOUND", f"Instance {instance_id} not found", 404)
        return JSONResponse(format_instance_record(record))

    app_routes = [
        Route("/healthz", healthz, methods=["GET"]),
        Route("/api/routes", list_routes, methods=["GET"]),
        Route("/api/schedules", list_schedules, methods=["GET"]),
        Route("/api/schedules/{route_id}", get_schedule, methods=["GET"]),
        Route("/api/schedules/{route_id}", update_schedule, methods=["PATCH"]),
        Route("/api/schedules/{route_id}/toggle", toggle_schedule, methods=["POST"]),
        Route("/api/schedules/{route_id}/instances", create_instance, methods=["POST"]),
        Route("/api/instances", list_instances, methods=["GET"]),
        Route("/api/instances/{instance_id}/progress", report_progress, methods=["POST"]),
        Route("/api/instances/{instance_id}/complete", complete_instance, methods=["POST"]),
        Route("/api/instances/{instance_id}/error", fail_instance, methods=["POST"]),
    ]

    return Starlette(
        routes=app_routes,
        middleware=[
            Middleware(RateLimitMiddleware, requests_per_minute=config.rate_limit_per_minute)
        ],
    )

