"""
Application configuration using Pydantic Settings.

Scheduling defaults live here so the engine itself stays free of I/O.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
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
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"]
    )

    # ===========================================
    # Scheduler
    # ===========================================
    # IANA zone used for every wall-clock computation (day bounds, preferred times)
    SCHEDULER_TIMEZONE: str = "America/Los_Angeles"

    # Daily window scanned for free slots
    SCHEDULE_DAY_START: str = "08:00"
    SCHEDULE_DAY_END: str = "21:00"

    MIN_BLOCK_MINUTES: int = Field(15, ge=1)

    # Cap for a single session when only estimated_hours is known
    MAX_SESSION_MINUTES: int = Field(120, ge=15)

    DEFAULT_RECURRING_TIME: str = "09:00"

    # Minimum horizon when placing a newly captured goal
    SEARCH_LOOKAHEAD_DAYS: int = Field(14, ge=1)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
