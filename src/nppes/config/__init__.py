"""
Configuration management with typed Pydantic models.

Provides YAML and environment-aware configuration loading.
"""

from nppes.config.loader import config_from_env, load_config
from nppes.config.settings import (
    DataPathsConfig,
    IngestionConfig,
    LoggingConfig,
    NppesConfig,
    QueryConfig,
)

__all__ = [
    "DataPathsConfig",
    "IngestionConfig",
    "LoggingConfig",
    "NppesConfig",
    "QueryConfig",
    "config_from_env",
    "load_config",
]
