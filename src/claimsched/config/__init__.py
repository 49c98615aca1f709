"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float
from .errors import ConfigurationError
from .logging import configure_logging
from .scheduling import SchedulingConfig, get_scheduling_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "SchedulingConfig",
    "StorageConfig",
    "configure_logging",
    "env_float",
    "get_database_config",
    "get_database_uri",
    "get_scheduling_config",
    "get_storage_config",
]
