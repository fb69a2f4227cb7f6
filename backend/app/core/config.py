# backend/app/core/config.py
import logging
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


DEFAULT_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


class Settings(BaseSettings):
    """Runtime settings for the Spyke marketplace API."""

    app_name: str = "Spyke AI Marketplace"
    environment: str = Field(default="development", description="development, staging or production")
    log_level: str = "INFO"

    # Database
    database_url: str = Field(
        default="sqlite:///./spyke.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = False

    # Auth
    secret_key: SecretStr = Field(
        default=SecretStr("change-me-in-production"),
        description="Secret used to sign access tokens",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 720  # 12 hours

    cors_origins: str = Field(
        default=",".join(DEFAULT_DEV_ORIGINS), description="Comma separated list of allowed origins"
    )

    # Rate Limiting Configuration
    rate_limit_enabled: bool = Field(
        default=True, description="Enable rate limiting (disable for testing)"
    )
    rate_limit_general_per_minute: int = Field(
        default=100, description="General API rate limit per minute per IP"
    )
    rate_limit_auth_per_minute: int = Field(
        default=20, description="Login and registration attempts per minute per IP"
    )
    rate_limit_analytics_per_minute: int = Field(
        default=120, description="Analytics ingestion batches per minute per IP"
    )
    redis_url: Optional[str] = Field(
        default=None, description="Redis URL for shared rate limit windows (memory if unset)"
    )

    # Analytics ingestion
    analytics_max_batch_size: int = Field(
        default=100, description="Maximum events accepted in one ingestion request"
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,  # allows SECRET_KEY to match secret_key
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in {"prod", "production"}


settings = Settings()
