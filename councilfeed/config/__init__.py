"""Configuration management for councilfeed."""

from .loader import Config, default_config_path, load_config, save_config
from .models import ConfigModel, FetchConfig, LoggingConfig, PostgresConfig

__all__ = [
    "Config",
    "ConfigModel",
    "FetchConfig",
    "LoggingConfig",
    "PostgresConfig",
    "default_config_path",
    "load_config",
    "save_config",
]
