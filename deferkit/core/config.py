"""Library configuration using Pydantic Settings.

Configuration is environment-aware:
- DEFERKIT_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
DEFERKIT_ENV = os.getenv("DEFERKIT_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(DEFERKIT_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (hosts might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_timing_settings() -> "TimingSettings":
    """Build timing settings from environment."""

    return TimingSettings()


def _build_log_settings() -> "LogSettings":
    """Build log settings from environment."""

    return LogSettings()


class TimingSettings(BaseSettings):
    """Wake-up backend selection and rate limiter defaults."""

    backend: str = Field(
        "asyncio",
        description="Wake-up backend used by create_timing (asyncio or manual)",
    )
    manual_start: float = Field(
        0.0,
        description="Initial virtual time of the manual backend",
    )
    debounce_leading: bool = Field(
        False,
        description="Invoke debounced functions on the leading edge by default",
    )
    debounce_trailing: bool = Field(
        True,
        description="Invoke debounced functions on the trailing edge by default",
    )
    throttle_leading: bool = Field(
        True,
        description="Invoke throttled functions on the leading edge by default",
    )
    throttle_trailing: bool = Field(
        True,
        description="Invoke throttled functions on the trailing edge by default",
    )

    model_config = SettingsConfigDict(
        env_prefix="TIMING_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field(
        "INFO",
        description="Root log level",
    )
    format: str = Field(
        "json",
        description="Log format: json or plain",
    )
    output: str = Field(
        "stdout",
        description="Log destination: stdout or file",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output=file",
    )
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(
        5,
        description="Number of rotated log files to keep",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{DEFERKIT_ENV} file.
    Raises validation errors on first import if values are malformed.
    """

    deferkit_env: str = DEFERKIT_ENV
    timing: TimingSettings = Field(default_factory=_build_timing_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
