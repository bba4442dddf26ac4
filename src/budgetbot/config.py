"""Configuration for budgetbot.

Settings come from BUDGETBOT_* environment variables and an optional .env
file; the CLI overrides individual values with its own options.
"""

from datetime import timedelta
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGETBOT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: str = Field(
        default="~/.budgetbot/budgetbot.db",
        description="SQLite database file",
    )
    default_currency: str = Field(
        default="TJS",
        min_length=3,
        max_length=8,
        description="Currency of lazily created accounts",
    )

    # Reminders
    reminder_hour: int = Field(
        default=9,
        ge=0,
        le=23,
        description="UTC hour at which reminders are sent",
    )
    scheduler_interval_seconds: float = Field(
        default=3600,
        gt=0,
        description="Delay between scheduler scans",
    )
    scheduler_backoff_seconds: float = Field(
        default=300,
        gt=0,
        description="Delay after a failed scan",
    )

    # Conversation
    session_idle_timeout_minutes: Optional[int] = Field(
        default=None,
        ge=1,
        description="Discard wizards idle for longer than this; None keeps them",
    )
    admin_chat_id: Optional[int] = Field(
        default=None,
        description="Chat that receives bug reports and ideas",
    )

    # Limits
    limit_block_hours: int = Field(
        default=24,
        ge=1,
        description="How long a category stays blocked after its limit is exceeded",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level name")
    log_json: bool = Field(default=False, description="Render logs as JSON lines")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level '{v}'")
        return level

    @field_validator("default_currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return v.upper()

    @property
    def session_idle_timeout(self) -> Optional[timedelta]:
        if self.session_idle_timeout_minutes is None:
            return None
        return timedelta(minutes=self.session_idle_timeout_minutes)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
