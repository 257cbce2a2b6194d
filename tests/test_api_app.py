"""Tests for the scheduler JSON API."""

import os
from datetime import UTC, datetime, time
from unittest.mock import patch

import pytest
from starlette.testclient import TestClient

from gtfs_route_scheduler.adapters.config import AppConfig
from gtfs_route_scheduler.adapters.web import create_api_app
from gtfs_route_scheduler.application.services import InstanceRegistry, RouteScheduler
from gtfs_route_scheduler.domain.models import RouteDefinition, RouteScheduleConfig

NOW = datetime(2026, 10, 19, 5, 59, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_app_config(**kwargs: object) -> AppConfig:
    values: dict[str, object] = {"config_file": None, "rate_limit_per_minute": 0}
    values.update(kwargs)
    with patch.dict(os.environ, {}, clear=True):
        return AppConfig(_env_file=None, **values)  # type: ignore[call-arg, arg-type]


def make_client(config: AppConfig | None = None) -> tuple[TestClient, RouteScheduler]:
    clock = FakeClock(NOW)
    routes = [
        RouteDefinition(
            route_id="red-line",
            name="Red Line",
            color="#d62828",
            coordinates=[(48.1, 11.5), (48.2, 11.6)],
            schedule=RouteScheduleConfig(
                route_id="red-line", start_time=time(6, 0), end_time=time(9, 0)
            ),
        ),
        RouteDefinition(
            route_id="depot",
            schedule=RouteScheduleConfig(route_id="depot", enabled=False),
        ),
    ]
    scheduler = RouteScheduler(routes=[r.schedule for r in routes], clock=clock)
    registry = InstanceRegistry(on_complete=scheduler.notify_instance_complete, clock=clock)
    scheduler.on_instance_create = registry
    app = create_api_app(scheduler, registry, routes, config or make_app_config(), clock)
    return TestClient(app), scheduler


@pytest.fixture
def client() -> TestClient:
    return make_client()[0]


def test_healthz(client: TestClient) -> None:
    """Given a running app, when probing health, then Ok is returned."""
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.text == "Ok"


def test_list_routes_includes_geometry_and_schedule(client: TestClient) -> None:
    """Given configured routes, when listing, then path and schedule are included."""
    response = client.get("/api/routes")

    assert response.status_code == 200
    routes = {r["id"]: r for r in response.json()["routes"]}
    assert routes["red-line"]["coordinates"] == [[48.1, 11.5], [48.2, 11.6]]
    assert routes["red-line"]["schedule"]["start_time"] == "06:00:00"
    assert routes["depot"]["schedule"]["enabled"] is False


def test_list_schedules_reports_next_departure(client: TestClient) -> None:
    """Given a scheduled route, when listing schedules, then its next departure is shown."""
    response = client.get("/api/schedules")

    body = response.json()
    assert body["now"] == NOW.isoformat()
    assert list(body["schedules"]) == ["red-line"]
    red = body["schedules"]["red-line"]
    assert red["next_departure_time"] == "2026-10-19T06:00:00+00:00"
    assert red["active_instances"] == 0
    assert "departures" not in red


def test_get_schedule_includes_departures(client: TestClient) -> None:
    """Given a scheduled route, when fetching it, then the full departure list is included."""
    response = client.get("/api/schedules/red-line")

    assert response.status_code == 200
    assert len(response.json()["departures"]) == 19


def test_get_unknown_schedule(client: TestClient) -> None:
    """Given an unknown route, when fetching, then 404 NOT_FOUND is returned."""
    response = client.get("/api/schedules/nope")

    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


def test_toggle_schedule() -> None:
    """Given a scheduled route, when toggling off, then the schedule reports disabled."""
    client, scheduler = make_client()

    response = client.post("/api/schedules/red-line/toggle", json={"enabled": False})

    assert response.status_code == 200
    assert response.json() == {"route_id": "red-line", "enabled": False}
    state = scheduler.get_schedule_info("red-line")
    assert state is not None
    assert state.enabled is False


def test_toggle_requires_enabled_flag(client: TestClient) -> None:
    """Given a body without enabled, when toggling, then 400 VALIDATION_ERROR is returned."""
    response = client.post("/api/schedules/red-line/toggle", json={})

    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


def test_toggle_rejects_malformed_json(client: TestClient) -> None:
    """Given a body that is not JSON, when toggling, then 400 is returned."""
    response = client.post(
        "/api/schedules/red-line/toggle",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400


def test_toggle_unknown_route(client: TestClient) -> None:
    """Given an unknown route, when toggling, then 404 is returned."""
    response = client.post("/api/schedules/nope/toggle", json={"enabled": True})

    assert response.status_code == 404


def test_update_schedule(client: TestClient) -> None:
    """Given a new headway, when patching, then departures are recomputed."""
    response = client.patch("/api/schedules/red-line", json={"headway_seconds": 1800})

    assert response.status_code == 200
    body = response.json()
    assert body["departures_today"] == 7
    assert body["schedule"]["headway_seconds"] == 1800


@pytest.mark.parametrize(
    "body",
    [
        {"headway_seconds": 0},
        {"start_time": "late"},
        {"start_time": "06:00Z"},
        {"end_time": "09:00+02:00"},
        {"colour": "red"},
        {"operating_days": ["x"]},
    ],
)
def test_update_schedule_rejects_invalid_values(client: TestClient, body: dict) -> None:
    """Given an invalid update, when patching, then 400 VALIDATION_ERROR is returned."""
    response = client.patch("/api/schedules/red-line", json=body)

    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


def test_update_schedule_can_disable(client: TestClient) -> None:
    """Given enabled=false, when patching, then the route drops out of the schedule list."""
    response = client.patch("/api/schedules/red-line", json={"enabled": False})

    assert response.json() == {"route_id": "red-line", "enabled": False}
    assert client.get("/api/schedules").json()["schedules"] == {}


def test_manual_instance_and_capacity(client: TestClient) -> None:
    """Given max one instance, when creating twice, then the second gets 409."""
    first = client.post("/api/schedules/red-line/instances")
    second = client.post("/api/schedules/red-line/instances")

    assert first.status_code == 201
    assert first.json()["route_id"] == "red-line"
    assert second.status_code == 409
    assert second.json()["error"] == "CAPACITY_REACHED"


def test_manual_instance_unknown_route(client: TestClient) -> None:
    """Given an unknown route, when creating an instance, then 404 is returned."""
    assert client.post("/api/schedules/nope/instances").status_code == 404


def test_instance_lifecycle_releases_slot(client: TestClient) -> None:
    """Given a created instance, when it reports progress and completes, then its slot is freed."""
    instance_id = client.post("/api/schedules/red-line/instances").json()["instance_id"]

    progress = client.post(
        f"/api/instances/{instance_id}/progress", json={"progress": 0.5, "position": [48.15, 11.55]}
    )
    assert progress.status_code == 200
    assert progress.json()["status"] == "running"
    assert progress.json()["position"] == [48.15, 11.55]

    running = client.get("/api/instances", params={"status": "running"}).json()["instances"]
    assert [i["instance_id"] for i in running] == [instance_id]

    done = client.post(f"/api/instances/{instance_id}/complete")
    assert done.json()["status"] == "completed"
    schedules = client.get("/api/schedules").json()["schedules"]
    assert schedules["red-line"]["active_instances"] == 0

    assert client.post("/api/schedules/red-line/instances").status_code == 201


def test_instance_error_releases_slot(client: TestClient) -> None:
    """Given a created instance, when it errors, then a new instance can be created."""
    instance_id = client.post("/api/schedules/red-line/instances").json()["instance_id"]

    response = client.post(f"/api/instances/{instance_id}/error")

    assert response.json()["status"] == "error"
    assert client.post("/api/schedules/red-line/instances").status_code == 201


@pytest.mark.parametrize("action", ["complete", "error"])
def test_unknown_instance(client: TestClient, action: str) -> None:
    """Given an unknown instance, when finishing it, then 404 is returned."""
    response = client.post(f"/api/instances/missing/{action}")

    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


def test_unknown_instance_progress(client: TestClient) -> None:
    """Given an unknown instance, when reporting progress, then 404 is returned."""
    response = client.post("/api/instances/missing/progress", json={"progress": 0.1})

    assert response.status_code == 404


def test_list_instances_rejects_unknown_status(client: TestClient) -> None:
    """Given an unknown status filter, when listing, then 400 is returned."""
    response = client.get("/api/instances", params={"status": "flying"})

    assert response.status_code == 400


def test_admin_token_guards_mutations() -> None:
    """Given an admin token, when mutating without it, then 403 is returned."""
    client, _ = make_client(make_app_config(admin_command_token="s3cret"))

    denied = client.post("/api/schedules/red-line/toggle", json={"enabled": False})
    allowed = client.post(
        "/api/schedules/red-line/toggle",
        json={"enabled": False},
        headers={"X-Admin-Token": "s3cret"},
    )

    assert denied.status_code == 403
    assert denied.json()["error"] == "UNAUTHORIZED"
    assert allowed.status_code == 200
    assert client.get("/api/schedules").status_code == 200


def test_rate_limit_returns_json_429() -> None:
    """Given a limit of one request per minute, when calling twice, then the second gets 429."""
    client, _ = make_client(make_app_config(rate_limit_per_minute=1))

    assert client.get("/healthz").status_code == 200
    response = client.get("/healthz")

    assert response.status_code == 429
    assert response.json()["error"] == "RATE_LIMIT_EXCEEDED"
    assert "Retry-After" in response.headers


def test_rejected_offset_time_leaves_schedule_running() -> None:
    """Given a start time with an offset, when patching, then it is refused and ticks go on."""
    client, scheduler = make_client()

    response = client.patch("/api/schedules/red-line", json={"start_time": "06:00Z"})

    assert response.status_code == 400
    assert scheduler.routes[0].start_time == time(6, 0)
    assert len(scheduler.check_schedules(datetime(2026, 10, 19, 6, 0, tzinfo=UTC))) == 1


def test_toggled_off_route_stays_off_after_patch() -> None:
    """Given a route toggled off, when patching its headway, then no departure fires."""
    client, scheduler = make_client()
    client.post("/api/schedules/red-line/toggle", json={"enabled": False})

    response = client.patch("/api/schedules/red-line", json={"headway_seconds": 300})

    assert response.json() == {"route_id": "red-line", "enabled": False}
    assert scheduler.check_schedules(datetime(2026, 10, 19, 6, 0, tzinfo=UTC)) == []
