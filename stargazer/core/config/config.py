"""
Static configuration management for Stargazer.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults and type validation. This module handles settings
that are fixed at process start: environment, logging, config directory and
the save-slot storage backend.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to all static configuration values
- Fall back to documented defaults for missing or invalid values

Non-Responsibilities
--------------------
- Game balance values (handled by ConfigManager + YAML in ``config/``)
- Runtime configuration changes

Architecture Notes
------------------
- Class-level attributes, no instantiation
- ``Config.load()`` re-reads the environment; it runs once on import
- Directory paths are relative to the project root unless overridden

Environment Variables
---------------------
- STARGAZER_ENV: Environment type (default: development)
- STARGAZER_LOG_LEVEL: Logging level (default: INFO)
- STARGAZER_LOG_JSON: Force JSON console logs (default: production only)
- STARGAZER_LOGS_DIR: Directory for the rotating JSON log file (unset = no file)
- STARGAZER_CONFIG_DIR: Directory scanned for YAML balance files (default: config)
- STARGAZER_STORAGE: Slot backend: memory | file | redis | database (default: file)
- STARGAZER_SAVE_SLOT: Name of the save slot (default: gameState)
- STARGAZER_SAVE_DIR: Directory for the file backend (default: platform user data dir)
- STARGAZER_REDIS_URL: Redis connection string (default: redis://localhost:6379/0)
- STARGAZER_DATABASE_URL: SQLAlchemy async URL (default: sqlite+aiosqlite:///stargazer.db)
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

load_dotenv()


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Structured logger is not configured yet at this point.
            logging.warning(f"Unknown environment '{value}', defaulting to development")
            return cls.DEVELOPMENT


class StorageBackend(str, Enum):
    """Available save-slot storage backends."""

    MEMORY = "memory"
    FILE = "file"
    REDIS = "redis"
    DATABASE = "database"


class Config:
    """
    Centralized static configuration for Stargazer.

    Usage
    -----
    >>> Config.STORAGE_BACKEND
    <StorageBackend.FILE: 'file'>
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    """

    # =========================================================================
    # Environment
    # =========================================================================

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None
    LOG_COLORS: bool = True
    LOGS_DIR: Optional[Path] = None

    # =========================================================================
    # Directories
    # =========================================================================

    PROJECT_ROOT = Path(__file__).resolve().parents[3]
    CONFIG_DIR: Path = PROJECT_ROOT / "config"

    # =========================================================================
    # Save Slot Storage
    # =========================================================================

    STORAGE_BACKEND: StorageBackend = StorageBackend.FILE
    SAVE_SLOT: str = "gameState"
    SAVE_DIR: Optional[Path] = None
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_SOCKET_TIMEOUT: int = 5
    DATABASE_URL: str = "sqlite+aiosqlite:///stargazer.db"
    DATABASE_ECHO: bool = False

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> int:
        """
        Safely parse integer from environment with bounds validation.

        Example
        -------
        >>> Config._safe_int("STARGAZER_REDIS_SOCKET_TIMEOUT", 5, min_val=1)
        5
        """
        raw_value = os.getenv(key)
        if raw_value is None:
            return default

        try:
            value = int(raw_value)
        except ValueError:
            logging.warning(f"{key}='{raw_value}' is not a valid integer, using default {default}")
            return default

        if min_val is not None and value < min_val:
            logging.warning(f"{key}={value} is below minimum {min_val}, using default {default}")
            return default
        if max_val is not None and value > max_val:
            logging.warning(f"{key}={value} exceeds maximum {max_val}, using default {default}")
            return default
        return value

    @classmethod
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).
        """
        raw_value = os.getenv(key)
        if raw_value is None:
            return default

        normalized = raw_value.strip().lower()
        if normalized in ("true", "yes", "1", "on"):
            return True
        if normalized in ("false", "no", "0", "off"):
            return False

        logging.warning(f"{key}='{raw_value}' is not a valid boolean, using default {default}")
        return default

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        raw_value = os.getenv(key)
        if raw_value is None or not raw_value.strip():
            return default
        return raw_value.strip()

    @classmethod
    def _safe_path(cls, key: str, default: Optional[Path]) -> Optional[Path]:
        raw_value = os.getenv(key)
        if raw_value is None or not raw_value.strip():
            return default
        return Path(raw_value.strip()).expanduser()

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """
        Load all configuration from environment variables.

        Called on module import; call again to pick up changed variables
        (tests use this together with ``monkeypatch.setenv``).
        """
        cls.ENVIRONMENT = Environment.from_string(
            cls._safe_str("STARGAZER_ENV", "development")
        ).value

        log_level = cls._safe_str("STARGAZER_LOG_LEVEL", "INFO").upper()
        if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            logging.warning(f"Invalid STARGAZER_LOG_LEVEL '{log_level}', using INFO")
            log_level = "INFO"
        cls.LOG_LEVEL = log_level
        cls.LOG_JSON = cls._safe_bool("STARGAZER_LOG_JSON", None)
        cls.LOG_COLORS = bool(cls._safe_bool("STARGAZER_LOG_COLORS", True))
        cls.LOGS_DIR = cls._safe_path("STARGAZER_LOGS_DIR", None)

        cls.CONFIG_DIR = cls._safe_path("STARGAZER_CONFIG_DIR", cls.PROJECT_ROOT / "config")

        backend = cls._safe_str("STARGAZER_STORAGE", StorageBackend.FILE.value).lower()
        try:
            cls.STORAGE_BACKEND = StorageBackend(backend)
        except ValueError:
            logging.warning(f"Unknown STARGAZER_STORAGE '{backend}', using file")
            cls.STORAGE_BACKEND = StorageBackend.FILE

        cls.SAVE_SLOT = cls._safe_str("STARGAZER_SAVE_SLOT", "gameState")
        cls.SAVE_DIR = cls._safe_path("STARGAZER_SAVE_DIR", None)
        cls.REDIS_URL = cls._safe_str("STARGAZER_REDIS_URL", "redis://localhost:6379/0")
        cls.REDIS_SOCKET_TIMEOUT = cls._safe_int(
            "STARGAZER_REDIS_SOCKET_TIMEOUT", 5, min_val=1, max_val=60
        )
        cls.DATABASE_URL = cls._safe_str(
            "STARGAZER_DATABASE_URL", "sqlite+aiosqlite:///stargazer.db"
        )
        cls.DATABASE_ECHO = bool(cls._safe_bool("STARGAZER_DATABASE_ECHO", False))

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT == Environment.PRODUCTION.value

    @classmethod
    def is_testing(cls) -> bool:
        """Check if running in testing environment."""
        return cls.ENVIRONMENT == Environment.TESTING.value

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """Return a log-safe summary (no credentials in URLs)."""
        return {
            "environment": cls.ENVIRONMENT,
            "log_level": cls.LOG_LEVEL,
            "config_dir": str(cls.CONFIG_DIR),
            "storage_backend": cls.STORAGE_BACKEND.value,
            "save_slot": cls.SAVE_SLOT,
            "database_scheme": cls.DATABASE_URL.split(":", 1)[0],
        }


Config.load()
