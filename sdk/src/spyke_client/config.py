"""Configuration for the Spyke client SDK."""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from the storefront environment variables."""

    api_url: str = Field(
        default="http://localhost:5000",
        validation_alias=AliasChoices("NEXT_PUBLIC_API_URL", "SPYKE_API_URL"),
    )
    analytics_enabled: bool = Field(
        default=True,
        validation_alias="NEXT_PUBLIC_ANALYTICS_ENABLED",
    )
    debug: bool = Field(
        default=False,
        validation_alias="NEXT_PUBLIC_ANALYTICS_DEBUG",
    )
    do_not_track: bool = Field(
        default=False,
        validation_alias=AliasChoices("DO_NOT_TRACK", "SPYKE_DO_NOT_TRACK"),
    )
    respect_do_not_track: bool = True

    batch_size: int = Field(default=10, ge=1)
    batch_interval: float = Field(default=5.0, gt=0, description="Seconds between timed flushes")
    max_stored_events: int = Field(default=100, ge=1)
    queue_key: str = "analytics_queue"
    session_key: str = "analytics_session"
    consent_key: str = "analytics_consent"

    storage_path: str | None = Field(
        default=None, description="SQLite file for persisted client state; in-memory when unset"
    )
    request_timeout: float = Field(default=30.0, gt=0)

    model_config = SettingsConfigDict(
        env_prefix="SPYKE_", env_file=".env", extra="ignore", populate_by_name=True
    )
