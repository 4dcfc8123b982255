"""
Playbook Planner Configuration Settings

Centralized configuration management using Pydantic Settings.
Supports environment variables and .env files.
"""

from enum import Enum

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(str, Enum):
    """Log renderer selection."""
    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    """
    Playbook Planner Configuration.

    All settings can be configured via environment variables with the PLAYBOOK_ prefix.
    Example: PLAYBOOK_LOG_LEVEL=debug, PLAYBOOK_DEFAULT_TIME_BUDGET_MINUTES=90
    """

    model_config = SettingsConfigDict(
        env_prefix="PLAYBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: LogFormat = Field(
        default=LogFormat.JSON,
        description="Log renderer: json or console"
    )

    # Default constraint context used by the execution planner
    default_time_budget_minutes: float = Field(
        default=120.0,
        gt=0,
        description="Time budget applied when gating a blueprint for planning"
    )
    default_active_workload: int = Field(
        default=9,
        ge=0,
        description="Active workload count applied when gating a blueprint for planning"
    )

    # Host ceiling on externally supplied blueprints
    max_blueprint_steps: int = Field(
        default=500,
        ge=1,
        description="Maximum number of steps accepted when parsing a blueprint"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper


# Global settings instance
settings = Settings()
