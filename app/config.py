"""
Compare AI — Application Configuration

Loads all configuration from environment variables (and an optional .env file)
using Pydantic Settings.  A cached ``get_settings()`` helper is provided so that
FastAPI dependency-injection (and any other call-site) always receives the same
validated instance without re-parsing the environment on every request.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the Compare AI service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------ #
    # Database
    # ------------------------------------------------------------------ #
    DATABASE_URL: str

    # ------------------------------------------------------------------ #
    # Sessions
    # ------------------------------------------------------------------ #
    SECRET_KEY: str
    SESSION_COOKIE_NAME: str = "compare_ai_session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 14  # 14 days

    # ------------------------------------------------------------------ #
    # Face++ scorer
    # ------------------------------------------------------------------ #
    FACEPP_API_KEY: str
    FACEPP_API_SECRET: str
    FACEPP_DETECT_URL: str = "https://api-us.faceplusplus.com/facepp/v3/detect"
    SCORER_TIMEOUT_SECONDS: float = 30.0
    SCORER_CALL_DELAY_SECONDS: float = 0.5  # between the two calls of a compare

    # ------------------------------------------------------------------ #
    # Uploads
    # ------------------------------------------------------------------ #
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    # ------------------------------------------------------------------ #
    # Leaderboard
    # ------------------------------------------------------------------ #
    LEADERBOARD_DEFAULT_LIMIT: int = 100
    LEADERBOARD_MAX_LIMIT: int = 1000

    # ------------------------------------------------------------------ #
    # Runtime environment
    # ------------------------------------------------------------------ #
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    REQUEST_TIMEOUT_SECONDS: float = 70.0

    # ------------------------------------------------------------------ #
    # CORS
    # ------------------------------------------------------------------ #
    ALLOWED_ORIGINS: str = "*"

    # ------------------------------------------------------------------ #
    # Derived helpers
    # ------------------------------------------------------------------ #
    @property
    def allowed_origins_list(self) -> list[str]:
        """Return ALLOWED_ORIGINS as a list split on commas."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",")]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def max_upload_mb(self) -> int:
        return self.MAX_UPLOAD_BYTES // (1024 * 1024)

    @field_validator(
        "SCORER_TIMEOUT_SECONDS",
        "REQUEST_TIMEOUT_SECONDS",
        "MAX_UPLOAD_BYTES",
        "LEADERBOARD_DEFAULT_LIMIT",
        "LEADERBOARD_MAX_LIMIT",
        "SESSION_MAX_AGE_SECONDS",
    )
    @classmethod
    def _must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}")
        return v

    @field_validator("SCORER_CALL_DELAY_SECONDS")
    @classmethod
    def _delay_not_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Delay must not be negative, got {v}")
        return v


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached, validated ``Settings`` instance.

    Using ``@lru_cache`` guarantees the .env file is read and validated
    exactly once per process lifetime.  Import this function anywhere you
    need access to configuration::

        from app.config import get_settings
        settings = get_settings()
    """
    return Settings()  # type: ignore[call-arg]
