"""
Configuration error hierarchy for Stargazer.

Purpose
-------
Provides domain-specific exceptions for configuration management operations
with clear error classification and helpful error messages.

Exception Hierarchy
-------------------
ConfigError (base)
├── ConfigValidationError (schema/type validation failures)
└── ConfigInitializationError (YAML loading failures at startup)
"""


class ConfigError(Exception):
    """
    Base exception for all configuration-related errors.

    Example
    -------
    >>> try:
    ...     settings = ProgressionSettings.from_config(manager)
    ... except ConfigError as e:
    ...     logger.error(f"Config operation failed: {e}")
    """


class ConfigValidationError(ConfigError):
    """
    Raised when configuration validation fails.

    This exception is raised when:
    - A value has the wrong type
    - A value is out of bounds (e.g. non-positive refill interval)
    - A rarity weight table is incomplete
    """

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"{key}: {message}")


class ConfigInitializationError(ConfigError):
    """
    Raised when a YAML config file exists but cannot be parsed.

    Missing files are not an error; the built-in defaults apply.
    """


__all__ = [
    "ConfigError",
    "ConfigValidationError",
    "ConfigInitializationError",
]
