# backend/tutorbook/core/config.py
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz

from .constants import (
    DEFAULT_PLATFORM_TIMEZONE,
    DEFAULT_SLOT_STEP_MINUTES,
    MAX_SESSION_DURATION,
    MIN_SESSION_DURATION,
    MINUTES_PER_DAY,
)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment name",
    )
    database_url: str = Field(
        default="sqlite:///./tutorbook.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements")
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis URL for the cross-worker booking lock (omit to use process locks only)",
    )
    lock_namespace: str = Field(default="tutorbook", description="Prefix for Redis lock keys")

    # Canonical zone for day boundaries and "is in the past" checks
    platform_timezone: str = Field(
        default=DEFAULT_PLATFORM_TIMEZONE,
        description="IANA time zone in which dates and wall-clock times are interpreted",
    )

    # Slot generation bounds
    slot_step_default_minutes: int = Field(default=DEFAULT_SLOT_STEP_MINUTES, gt=0)
    slot_step_min_minutes: int = Field(default=1, gt=0)
    slot_step_max_minutes: int = Field(default=MINUTES_PER_DAY, gt=0)
    session_duration_min_minutes: int = Field(default=MIN_SESSION_DURATION, gt=0)
    session_duration_max_minutes: int = Field(default=MAX_SESSION_DURATION, gt=0)

    # Booking transaction
    booking_lock_ttl_seconds: int = Field(default=30, gt=0)
    booking_lock_wait_seconds: float = Field(default=5.0, ge=0)
    booking_commit_attempts: int = Field(
        default=2,
        ge=1,
        description="Attempts for the atomic insert step (first try plus automatic retries)",
    )
    require_tutor_verification: bool = Field(
        default=True,
        description="Only admin-verified tutors can be queried or booked",
    )
    notifications_enabled: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("platform_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown time zone: {value}") from exc
        return value

    @model_validator(mode="after")
    def _validate_bounds(self) -> "Settings":
        if self.session_duration_min_minutes > self.session_duration_max_minutes:
            raise ValueError("session_duration_min_minutes cannot exceed the maximum")
        if self.slot_step_min_minutes > self.slot_step_max_minutes:
            raise ValueError("slot_step_min_minutes cannot exceed the maximum")
        if not (
            self.slot_step_min_minutes
            <= self.slot_step_default_minutes
            <= self.slot_step_max_minutes
        ):
            raise ValueError("slot_step_default_minutes must lie within the step bounds")
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_database_url(self) -> str:
        """Get the database URL, normalizing the legacy postgres:// scheme."""
        url = self.database_url
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://") :]
        return url


settings = Settings()
