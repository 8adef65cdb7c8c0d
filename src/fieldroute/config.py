"""Application configuration and settings management."""

from typing import Annotated, Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Field Route Optimization API"
    api_prefix: str = "/api"

    distance_provider_url: Optional[str] = Field(
        default=None,
        description="Distance Matrix endpoint (e.g., https://maps.googleapis.com/maps/api/distancematrix/json).",
    )
    distance_provider_api_key: Optional[str] = Field(
        default=None,
        description="API key sent as the `key` query parameter to the distance provider.",
    )
    distance_provider_timeout_seconds: float = Field(default=10.0, gt=0.0)
    distance_provider_max_retries: int = Field(default=2, ge=0)
    distance_provider_backoff_seconds: float = Field(default=0.5, ge=0.0)

    average_speed_mph: float = Field(default=30.0, gt=0.0, description="Urban speed used for haversine estimates.")
    fallback_travel_minutes: int = Field(default=30, ge=0)
    fallback_travel_miles: float = Field(default=15.0, ge=0.0)
    default_leg_minutes: int = Field(default=15, ge=0, description="Leg time used when a matrix cell is missing.")
    buffer_minutes: int = Field(default=15, ge=0, description="Slack added after every job before the next leg.")
    default_start_minute: int = Field(default=480, ge=0, le=1439)

    two_opt_max_iterations: int = Field(default=100, ge=1)
    or_opt_tolerance: float = Field(default=0.1, ge=0.0)
    max_jobs_per_worker: int = Field(default=8, ge=1)
    workload_warning_threshold: int = Field(default=6, ge=1)
    slot_interval_minutes: int = Field(default=30, ge=1)
    departure_options: Annotated[tuple[int, ...], NoDecode] = Field(
        default=(420, 450, 480, 510, 540),
        description="Candidate departure times (minutes since midnight) for traffic-aware selection.",
    )
    timezone: str = Field(default="UTC", description="IANA zone used for same-day comparisons.")

    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("departure_options", mode="before")
    @classmethod
    def _parse_int_tuple_from_env(cls, value: Any) -> tuple[int, ...]:
        """Parse integer tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(int(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(int(item) for item in parsed)
            except (json.JSONDecodeError, TypeError, ValueError):
                pass
            if "," in value:
                return tuple(int(item.strip()) for item in value.split(",") if item.strip())
            if value.strip():
                try:
                    return (int(value.strip()),)
                except ValueError:
                    return tuple()
        return tuple()


settings = Settings()
