"""12-factor configuration adapter using environment variables and TOML config."""

import tomllib
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gtfs_route_scheduler.domain.models.scheduler_settings import SchedulerSettings


def _check_timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"timezone must be a valid IANA timezone name: {name}") from e
    return name


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server configuration
    host: str = Field(default="0.0.0.0", description="Host to bind the server to")
    port: int = Field(default=8000, description="Port to bind the server to")

    timezone: str = Field(
        default="Europe/Berlin",
        description="Timezone of the route schedules (IANA timezone name, e.g., 'Europe/Berlin')",
    )

    # TOML config file path
    config_file: str | None = Field(
        default="config.example.toml",
        description="Path to TOML configuration file with route schedules",
    )

    # Scheduler timing
    grace_period_ms: int = Field(
        default=500,
        description="A departure is fired only if the tick is less than this late",
    )
    idle_check_interval_ms: int = Field(
        default=1000,
        description="Wait between ticks when no departure is closer",
    )
    max_check_interval_ms: int = Field(
        default=5000,
        description="Upper bound for any wait between ticks",
    )
    instance_retention_seconds: int = Field(
        default=300,
        description="How long finished instances stay visible in the instance list",
    )

    # Rate limiting configuration
    rate_limit_per_minute: int = Field(
        default=100,
        description="Maximum number of requests allowed per IP address per minute (0 disables)",
    )

    admin_command_token: str | None = Field(
        default=None,
        description="Shared secret required in X-Admin-Token for mutating endpoints",
    )

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone is a known IANA name."""
        return _check_timezone(v)

    @field_validator("grace_period_ms", "idle_check_interval_ms", "max_check_interval_ms")
    @classmethod
    def validate_positive_interval(cls, v: int) -> int:
        """Validate scheduler intervals are positive."""
        if v <= 0:
            raise ValueError("scheduler intervals must be positive")
        return v

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def scheduler_settings(self) -> SchedulerSettings:
        """Build scheduler settings from the millisecond values."""
        return SchedulerSettings(
            grace_period_seconds=self.grace_period_ms / 1000,
            idle_check_interval_seconds=self.idle_check_interval_ms / 1000,
            max_check_interval_seconds=self.max_check_interval_ms / 1000,
        )

    def _load_toml_data(self) -> dict[str, Any]:
        """Load and parse TOML file, updating scheduler settings."""
        if not self.config_file:
            raise ValueError("config_file must be set to load route configuration")

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)

        scheduler = toml_data.get("scheduler", {})
        if isinstance(scheduler, dict):
            if "timezone" in scheduler:
                self.timezone = _check_timezone(str(scheduler["timezone"]))
            for key in (
                "grace_period_ms",
                "idle_check_interval_ms",
                "max_check_interval_ms",
                "instance_retention_seconds",
            ):
                if key in scheduler:
                    setattr(self, key, int(scheduler[key]))

        return toml_data

    def get_routes_config(self) -> list[dict[str, Any]]:
        """Parse and return the [[routes]] entries from the TOML file.

        Raises ValueError if routes is not a list, a route has no 'id', or
        route ids are not unique.
        """
        toml_data = self._load_toml_data()

        routes = toml_data.get("routes", [])
        if not isinstance(routes, list):
            raise ValueError("TOML config 'routes' must be a list")

        result_routes: list[dict[str, Any]] = []
        for route in routes:
            if not isinstance(route, dict):
                continue
            if "id" not in route:
                raise ValueError("All routes must have an 'id' field")
            result_routes.append(route)

        ids = [str(route["id"]) for route in result_routes]
        if len(ids) != len(set(ids)):
            duplicates = {i for i in ids if ids.count(i) > 1}
            raise ValueError(f"Route ids must be unique. Duplicate ids found: {duplicates}")

        return result_routes

    def get_config_dir(self) -> Path:
        """Directory relative paths inside the TOML file are resolved against."""
        if self.config_file:
            return Path(self.config_file).resolve().parent
        return Path.cwd()
