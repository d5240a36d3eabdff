"""Recurrence configuration management with environment variable overrides.

This module provides centralized configuration management with support for:
- Environment variable overrides (highest priority)
- YAML config file loading
- Pydantic validation

Priority order for configuration values:
1. Explicit overrides (CLI flags)
2. Environment variables (RECURRENCE_*) and .env
3. YAML config file
4. Pydantic defaults (lowest priority)
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

logger = logging.getLogger(__name__)


class NotificationPolicy(str, Enum):
    """Which exception outcomes produce a support notification."""

    DUPLICATES_ONLY = "duplicates_only"
    ALL = "all"


class StoreConfig(BaseModel):
    """Fingerprint store configuration.

    Attributes:
        redis_url: Redis connection URL for the redis backend
        key_prefix: Prefix for per-fingerprint keys
        index_key: Sorted set holding fingerprints in first-observed order
        socket_timeout: Seconds before a Redis round trip is abandoned
    """

    redis_url: str = Field(
        default_factory=lambda: os.getenv("RECURRENCE_REDIS_URL", "redis://localhost:6379/0")
    )
    key_prefix: str = "exception"
    index_key: str = "exceptions:all"
    socket_timeout: float = 5.0


class NotificationConfig(BaseModel):
    """Notification sink configuration.

    Attributes:
        directory: Directory that receives one JSON file per notification
        policy: Whether new exceptions notify as well as duplicates
    """

    directory: Path = Field(
        default_factory=lambda: Path(os.getenv("RECURRENCE_NOTIFICATIONS_DIR", "./notifications"))
    )
    policy: NotificationPolicy = NotificationPolicy.DUPLICATES_ONLY


class IngestionConfig(BaseModel):
    """Archive ingestion configuration.

    Attributes:
        message_keywords: Member-name substrings marking a support message file
        exception_keywords: Member-name substrings marking an exception file
        max_archive_bytes: Largest accepted upload
    """

    message_keywords: list[str] = Field(default_factory=lambda: ["message", "support"])
    exception_keywords: list[str] = Field(default_factory=lambda: ["exception", "error", "log"])
    max_archive_bytes: int = Field(default=50 * 1024 * 1024, gt=0)


class RecurrenceConfig(BaseSettings):
    """Main Recurrence configuration.

    This class loads configuration from multiple sources:
    1. Environment variables (RECURRENCE_*) and .env
    2. YAML config file values passed as keyword arguments
    3. Pydantic defaults

    Attributes:
        mode: Operational mode (lite, standard)
        store: Fingerprint store configuration
        notifications: Notification sink configuration
        ingestion: Archive ingestion configuration
        api_host: API bind address
        api_port: API server port
        metrics_enabled: Expose /metrics
        environment: Deployment environment name
        otlp_endpoint: Optional OTLP collector for traces
    """

    mode: str = Field(default_factory=lambda: os.getenv("RECURRENCE_MODE", "lite"))

    store: StoreConfig = Field(default_factory=StoreConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)

    # API
    api_host: str = "127.0.0.1"
    api_port: int = Field(default_factory=lambda: int(os.getenv("RECURRENCE_API_PORT", "8682")))

    # Monitoring
    metrics_enabled: bool = True
    otlp_endpoint: str | None = None

    # Environment
    environment: str = Field(
        default_factory=lambda: os.getenv("RECURRENCE_ENVIRONMENT", "development")
    )

    @field_validator("mode")
    @classmethod
    def validate_mode(cls, v: str) -> str:
        if v.lower() not in ("lite", "standard"):
            raise ValueError(f"Unknown mode: {v}. Valid modes: lite, standard")
        return v.lower()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        env_prefix="recurrence_",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs and must not shadow the environment
        return env_settings, dotenv_settings, init_settings, file_secret_settings


def load_config_from_file(config_path: str) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Configuration dictionary (empty if the file does not exist)

    Raises:
        ValueError: If the file is not valid YAML or not a mapping
    """
    path = Path(config_path).expanduser()
    if not path.exists():
        logger.warning(f"Config file not found: {config_path}")
        return {}

    with open(path) as f:
        try:
            config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")

    logger.info(f"Loaded configuration from {config_path}")
    return config


def get_config(config_path: str | None = None, **overrides: Any) -> RecurrenceConfig:
    """Get configuration instance.

    Args:
        config_path: Optional path to YAML config file
        **overrides: Explicit top-level values (e.g. CLI flags) that win over
            both the file and the environment

    Returns:
        RecurrenceConfig instance
    """
    file_values = load_config_from_file(config_path) if config_path else {}
    config = RecurrenceConfig(**file_values)
    if overrides:
        config = config.model_copy(update=overrides)
    return config
