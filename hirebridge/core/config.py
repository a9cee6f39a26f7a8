"""
HireBridge - Configuration Management.

Uses pydantic-settings for environment variable loading with validation.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Oracle (Gemini)
    # -------------------------------------------------------------------------
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash-lite"
    ORACLE_ENABLED: bool = True
    ORACLE_TIMEOUT_SECONDS: float = 15.0
    ORACLE_TEMPERATURE: float = 0.4

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------
    DEFAULT_ANSWER_SCORE: int = 5  # Used whenever the oracle cannot score

    # -------------------------------------------------------------------------
    # Session Storage
    # -------------------------------------------------------------------------
    SESSION_BACKEND: Literal["memory", "json"] = "memory"
    SESSION_DATA_DIR: str = "data/sessions"
    SESSION_TTL_MINUTES: int = 120
    SESSION_MAX_ENTRIES: int = 1000
    SESSION_CLEANUP_INTERVAL_SECONDS: int = 30 * 60

    # -------------------------------------------------------------------------
    # Rate Limits (slowapi syntax)
    # -------------------------------------------------------------------------
    RATE_LIMIT_ADVANCE: str = "120/hour"
    RATE_LIMIT_FINISH: str = "30/hour"

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    DEBUG_MODE: bool = False

    @property
    def oracle_configured(self) -> bool:
        """True when the oracle is enabled and has credentials."""
        return self.ORACLE_ENABLED and bool(self.GEMINI_API_KEY)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging() -> None:
    """Configure application logging based on settings."""
    settings = get_settings()

    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG_MODE else getattr(logging, settings.LOG_LEVEL),
        format=log_format,
        datefmt=date_format,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
