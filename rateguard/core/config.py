"""Configuration using Pydantic Settings.

Configuration is environment-aware:
- RATEGUARD_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
RATEGUARD_ENV = os.getenv("RATEGUARD_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(RATEGUARD_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (deployments may inject env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_guard_settings() -> "GuardSettings":
    """Build guard settings from environment."""

    return GuardSettings()


def _build_storage_settings() -> "StorageSettings":
    return StorageSettings()


def _build_http_settings() -> "HttpSettings":
    return HttpSettings()


def _build_log_settings() -> "LogSettings":
    return LogSettings()


class GuardSettings(BaseSettings):
    """Rate guard configuration.

    Range checks mirror GuardConfig validation so a bad environment fails at
    startup rather than on the first guarded call.
    """

    variant: Literal["memory", "persistent"] = Field(
        "memory",
        description="Guard variant: in-process counters or storage-backed counters",
    )
    quota: int = Field(
        10,
        description="Number of calls per key that triggers a delay",
        ge=1,
    )
    window_minutes: float | None = Field(
        None,
        description="Counting window length in minutes (None: windows never expire)",
        gt=0,
    )
    delay_minutes: float = Field(
        1.0,
        description="Delay inserted before forwarding once the quota is hit",
        ge=0,
    )
    threshold: Literal["reached", "exceeded"] | None = Field(
        None,
        description="Delay when count reaches (>=) or exceeds (>) the quota; None uses the variant default",
    )
    reset_on_delay: bool | None = Field(
        None,
        description="Reset the key's counter when a delay triggers; None uses the variant default",
    )

    model_config = SettingsConfigDict(
        env_prefix="GUARD_",
        case_sensitive=False,
    )


class StorageSettings(BaseSettings):
    """Persistence medium configuration for the persistent guard."""

    backend: Literal["memory", "file"] = Field(
        "memory",
        description="Key-value store backend",
    )
    file_path: str = Field(
        "data/rateguard.json",
        description="Path of the JSON file used by the file backend",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        case_sensitive=False,
    )


class HttpSettings(BaseSettings):
    """Settings for the bundled httpx request handler."""

    timeout_seconds: float = Field(
        30.0,
        description="Request timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="HTTP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field(
        "json",
        description="Log line format",
    )
    output: Literal["stdout", "file"] = Field(
        "stdout",
        description="Where log lines are written",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file'",
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

    Automatically loads from the appropriate .env.{RATEGUARD_ENV} file.
    Raises validation errors on startup if a setting is out of range.
    """

    rateguard_env: str = RATEGUARD_ENV
    guard: GuardSettings = Field(default_factory=_build_guard_settings)
    storage: StorageSettings = Field(default_factory=_build_storage_settings)
    http: HttpSettings = Field(default_factory=_build_http_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
