"""
Configuration package.

``Config`` holds static process settings read from the environment;
``ConfigManager`` holds game balance values read from YAML;
``ProgressionSettings`` is the validated snapshot the engine consumes.
"""

from stargazer.core.config.config import Config, Environment, StorageBackend
from stargazer.core.config.errors import (
    ConfigError,
    ConfigInitializationError,
    ConfigValidationError,
)
from stargazer.core.config.manager import ConfigManager, ProgressionSettings

__all__ = [
    "Config",
    "ConfigManager",
    "ConfigError",
    "ConfigInitializationError",
    "ConfigValidationError",
    "Environment",
    "ProgressionSettings",
    "StorageBackend",
]
