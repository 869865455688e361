"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    backend_url: str | None = None
    create_user_endpoint: str | None = None
    all_ingredients_endpoint: str | None = None
    measurements_endpoint: str | None = None
    lists_endpoint: str | None = None
    request_timeout_seconds: float = 15
    catalog_ttl_seconds: int = 3600
    move_compensation_attempts: int = 3
    session_ttl_seconds: int = 900
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def backend_configured(self) -> bool:
        """Return whether every remote backend setting is present."""
        required = (
            self.backend_url,
            self.create_user_endpoint,
            self.all_ingredients_endpoint,
            self.measurements_endpoint,
            self.lists_endpoint,
        )
        return all(value and value.strip() for value in required)
