"""
Configuration management for imagination-tools clients.
Loads and validates configuration from YAML files using Pydantic.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


logger = logging.getLogger(__name__)


class PubSubConfig(BaseModel):
    """Google Cloud Pub/Sub publisher configuration."""
    model_config = ConfigDict(extra='forbid', coerce_numbers_to_str=True)

    project_id: Optional[str] = Field(
        default=None,
        description="GCP project that owns the topics"
    )
    credentials_file: Optional[str] = Field(
        default=None,
        description="Path to a service account JSON key; default credentials if unset"
    )
    publish_timeout: Optional[float] = Field(
        default=60.0,
        gt=0,
        le=600,
        description="Seconds to wait for publish confirmation"
    )
    emulator_host: Optional[str] = Field(
        default=None,
        description="Pub/Sub emulator host:port, e.g. localhost:8085"
    )


class StorageConfig(BaseModel):
    """Google Cloud Storage configuration."""
    model_config = ConfigDict(extra='forbid', coerce_numbers_to_str=True)

    project_id: Optional[str] = Field(
        default=None,
        description="GCP project used for bucket operations"
    )
    credentials_file: Optional[str] = Field(
        default=None,
        description="Path to a service account JSON key; default credentials if unset"
    )
    emulator_host: Optional[str] = Field(
        default=None,
        description="Storage emulator endpoint, e.g. http://localhost:4443"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    model_config = ConfigDict(extra='forbid')

    level: str = Field(
        default="INFO",
        description="Logging level"
    )
    json_format: bool = Field(
        default=True,
        description="Enable JSON log formatting"
    )
    enable_correlation: bool = Field(
        default=True,
        description="Enable correlation IDs in logs"
    )

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v.upper()


class ToolsConfig(BaseModel):
    """Top-level configuration."""
    model_config = ConfigDict(extra='forbid')

    pubsub: PubSubConfig = Field(default_factory=PubSubConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Optional[str] = None) -> ToolsConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the YAML cannot be parsed
        pydantic.ValidationError: If values are out of range
    """
    if config_path is None:
        config_path = os.getenv('IMAGINATION_TOOLS_CONFIG', './config.yml')

    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_file}")

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            yaml_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML config: {e}")
        raise ValueError(f"Invalid YAML config: {e}") from e

    logger.info(f"Loaded config from: {config_file}")

    yaml_data = _apply_env_overrides(yaml_data)
    config = ToolsConfig(**yaml_data)

    logger.info(
        "Configuration loaded successfully",
        extra={
            "component": "config",
            "config_file": str(config_file),
            "pubsub_project": config.pubsub.project_id,
            "storage_project": config.storage.project_id,
            "pubsub_emulator": config.pubsub.emulator_host is not None,
            "storage_emulator": config.storage.emulator_host is not None
        }
    )

    return config


def _apply_env_overrides(config_data: dict) -> dict:
    """
    Apply environment variable overrides to config data.
    Later entries for the same path win.
    """
    env_mappings = [
        # Project
        ('GOOGLE_CLOUD_PROJECT', 'pubsub.project_id'),
        ('GOOGLE_CLOUD_PROJECT', 'storage.project_id'),
        ('PUBSUB_PROJECT_ID', 'pubsub.project_id'),
        ('STORAGE_PROJECT_ID', 'storage.project_id'),

        # Pub/Sub
        ('PUBSUB_EMULATOR_HOST', 'pubsub.emulator_host'),
        ('PUBSUB_PUBLISH_TIMEOUT', 'pubsub.publish_timeout'),

        # Storage
        ('STORAGE_EMULATOR_HOST', 'storage.emulator_host'),

        # Logging
        ('LOG_LEVEL', 'logging.level'),
        ('LOG_JSON', 'logging.json_format'),
    ]

    for env_var, config_path in env_mappings:
        env_value = os.getenv(env_var)
        if env_value is not None:
            _set_nested_value(config_data, config_path, env_value)
            logger.debug(f"Applied env override: {env_var} -> {config_path}")

    return config_data


def _set_nested_value(data: dict, path: str, value: str) -> None:
    """Set a nested dictionary value using dot notation."""
    keys = path.split('.')
    current = data

    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]

    current[keys[-1]] = _convert_env_value(value)


def _convert_env_value(value: str) -> Any:
    """Convert environment variable string to appropriate Python type."""
    if value.lower() in ('true', 'yes', 'on'):
        return True
    elif value.lower() in ('false', 'no', 'off'):
        return False

    # Project IDs and hosts stay strings; only plain numbers are converted
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except ValueError:
        return value
