# meetcoord/core/config.py
from datetime import time
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global application configuration.

    Values are loaded from environment variables at runtime.

    These settings are used for:
    - DB connection
    - Logging verbosity
    - Fallback values applied when stored time data is missing or malformed
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Meeting Request Coordinator"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")

    DB_URL: str = Field(
        "sqlite+aiosqlite:///./meetcoord.db",
        description="SQLAlchemy-compatible async database URL",
    )

    LOG_LEVEL: str = Field(
        "INFO",
        description="Root log level for the meetcoord loggers.",
    )

    # --- Resilience defaults for display and duration derivation ---
    DEFAULT_TIME_OF_DAY: time = Field(
        time(9, 0),
        description="Time substituted when a stored time-of-day cannot be parsed.",
    )
    DEFAULT_DURATION_MINUTES: int = Field(
        60,
        description="Duration used when end is missing or not after start.",
    )
    UPCOMING_WINDOW_DAYS: int = Field(
        7,
        description="Size of the 'within next week' window used by statistics.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Using LRU cache ensures settings are read and validated only once,
    while still being easily importable across the app.
    """
    return Settings()
