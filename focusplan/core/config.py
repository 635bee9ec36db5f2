"""
Application configuration using Pydantic Settings.

Infrastructure switching is controlled by the ENVIRONMENT and
CALENDAR_PROVIDER variables.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "production"] = "local"
    DEBUG: bool = True

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./focusplan.db"

    # ===========================================
    # Auth
    # ===========================================
    AUTH_PROVIDER: Literal["mock"] = "mock"
    AUTH_REQUIRED: bool = False

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:8080"]
    )

    # ===========================================
    # Planning
    # ===========================================
    DEFAULT_TIMEZONE: str = "UTC"
    WORKDAY_START: str = "09:00"
    WORKDAY_END: str = "17:00"
    # Padding applied on both sides of every busy interval
    BUFFER_MINUTES: int = Field(default=0, ge=0)
    # Gap left after each placed block inside the same free interval
    BREAK_AFTER_TASK_MINUTES: int = Field(default=0, ge=0)
    # Used for tasks that have no estimate
    DEFAULT_TASK_MINUTES: int = Field(default=30, ge=1)
    PROPOSAL_TTL_MINUTES: int = Field(default=60 * 24, ge=1)

    # ===========================================
    # Calendar
    # ===========================================
    # "local": events live in the SQLite calendar_events table
    # "google": Google Calendar v3 REST API
    CALENDAR_PROVIDER: Literal["local", "google"] = "local"
    CALENDAR_TIMEOUT_SECONDS: float = Field(default=10.0, gt=0)
    # A confirmed block still without an event after this long is retried
    CONFIRM_CLAIM_LEASE_SECONDS: float = Field(default=120.0, gt=0)
    GOOGLE_CALENDAR_BASE_URL: str = "https://www.googleapis.com/calendar/v3"
    GOOGLE_CALENDAR_ID: str = "primary"
    GOOGLE_ACCESS_TOKEN: str = ""

    @model_validator(mode="after")
    def _check_claim_lease(self):
        if self.CONFIRM_CLAIM_LEASE_SECONDS <= self.CALENDAR_TIMEOUT_SECONDS:
            raise ValueError("CONFIRM_CLAIM_LEASE_SECONDS must exceed CALENDAR_TIMEOUT_SECONDS")
        return self

    @property
    def is_local(self) -> bool:
        """Check if running in local environment."""
        return self.ENVIRONMENT == "local"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
