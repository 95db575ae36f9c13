"""
Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="GATEKEEPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    log_level: str = "INFO"

    # ==========================================================================
    # Tokens
    # ==========================================================================

    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    secret_length: int = 32  # bytes
    token_id_length: int = 16  # bytes

    # ==========================================================================
    # Store
    # ==========================================================================

    # Upper bound for a single store round-trip, in seconds. 0 disables it.
    store_timeout_seconds: float = 10.0

    # ==========================================================================
    # Authorization
    # ==========================================================================

    roles_file: str = ""

    @field_validator("jwt_algorithm")
    @classmethod
    def _hmac_only(cls, value: str) -> str:
        if value not in HMAC_ALGORITHMS:
            raise ValueError(f"jwt_algorithm must be one of {HMAC_ALGORITHMS}")
        return value

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def store_timeout(self) -> float | None:
        """Store timeout suitable for asyncio.wait_for (None = unbounded)."""
        return self.store_timeout_seconds or None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# =============================================================================
# Logging
# =============================================================================


LOG_FORMAT = "time=%(asctime)s level=%(levelname)s component=%(component)s msg=%(message)s"


class _ComponentFilter(logging.Filter):
    """Tag each record with the gatekeeper component that emitted it."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            parts = record.name.split(".")
            record.component = parts[1] if len(parts) > 1 else parts[0]
        return True


def configure_logging(settings: Settings | None = None) -> None:
    """Install a single stream handler on the root logger."""
    settings = settings or get_settings()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(_ComponentFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(settings.log_level.upper())
