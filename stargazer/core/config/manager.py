"""
Game balance configuration with YAML backing.

Features:
- Hierarchical config access with dot notation (e.g., 'energy.max')
- YAML files in the config directory merged over built-in defaults
- Explicit overrides (tests, CLI) applied last
- Validated ``ProgressionSettings`` snapshot for the engine

All game parameters live in YAML; the ``_DEFAULTS`` dict only holds the
fallback values that keep the engine playable without a config directory.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from stargazer.core.config.errors import ConfigInitializationError, ConfigValidationError
from stargazer.core.logging.logger import get_logger

logger = get_logger(__name__)


_DEFAULTS: Dict[str, Any] = {
    "energy": {
        "max": 10,
        "refill_seconds": 300,
        "refill_amount": 1,
        "poll_seconds": 60,
    },
    "leveling": {
        "xp_per_level": 100,
    },
    "exploration": {
        "delay_seconds": 2.0,
        "rarity_weights": {
            "Common": 60,
            "Rare": 25,
            "Epic": 12,
            "Legendary": 3,
        },
    },
}


def _deep_merge(base: Dict[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in incoming.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def _expand_dotted(overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Turn ``{"energy.max": 5}`` into ``{"energy": {"max": 5}}``."""
    expanded: Dict[str, Any] = {}
    for dotted, value in overrides.items():
        current = expanded
        parts = dotted.split(".")
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        current[parts[-1]] = value
    return expanded


class ConfigManager:
    """
    Game balance configuration manager.

    Unlike the static ``Config`` class this is an instance, so tests and the
    engine can hold independent configurations side by side.

    Example:
        >>> manager = ConfigManager(config_dir=Path("config"))
        >>> manager.initialize()
        >>> manager.get("energy.max")
        10
    """

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._config_dir = config_dir
        self._overrides = _expand_dotted(overrides or {})
        self._cache: Dict[str, Any] = copy.deepcopy(_DEFAULTS)
        self._loaded_files: List[str] = []
        self._initialized = False

    def initialize(self) -> None:
        """
        Load YAML files from the config directory and apply overrides.

        Raises:
            ConfigInitializationError: A YAML file exists but cannot be parsed.
        """
        self._cache = copy.deepcopy(_DEFAULTS)
        self._loaded_files = []

        if self._config_dir is not None:
            self._load_yaml_configs(self._config_dir)

        _deep_merge(self._cache, self._overrides)
        self._initialized = True

        logger.info(
            "ConfigManager initialized",
            extra={
                "yaml_count": len(self._loaded_files),
                "override_count": len(self._overrides),
                "config_dir": str(self._config_dir) if self._config_dir else None,
            },
        )

    def _load_yaml_configs(self, config_dir: Path) -> None:
        if not config_dir.exists():
            logger.warning(
                "Config directory not found, using defaults",
                extra={"config_dir": str(config_dir)},
            )
            return

        yaml_files = sorted(config_dir.rglob("*.yaml")) + sorted(config_dir.rglob("*.yml"))
        for yaml_file in yaml_files:
            try:
                with open(yaml_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                raise ConfigInitializationError(
                    f"Failed to load YAML config {yaml_file}: {e}"
                ) from e

            if not data:
                continue
            if not isinstance(data, dict):
                raise ConfigInitializationError(
                    f"YAML config {yaml_file} must contain a mapping at the top level"
                )

            _deep_merge(self._cache, data)
            self._loaded_files.append(str(yaml_file.relative_to(config_dir)))
            logger.debug(f"Loaded YAML config: {yaml_file.relative_to(config_dir)}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve config value by dot notation path.

        Args:
            key: Dot-notation config path (e.g., 'exploration.delay_seconds')
            default: Default value if key not found

        Returns:
            Config value or default
        """
        if not self._initialized:
            self.initialize()

        value: Any = self._cache
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value if value is not None else default

    @property
    def loaded_files(self) -> List[str]:
        return list(self._loaded_files)


@dataclass(frozen=True)
class ProgressionSettings:
    """
    Immutable, validated snapshot of the balance values the engine uses.

    Built once at startup so the engine never re-reads or re-validates
    configuration on the hot path.
    """

    max_energy: int = 10
    energy_refill_seconds: int = 300
    energy_refill_amount: int = 1
    refill_poll_seconds: float = 60.0
    xp_per_level: int = 100
    explore_delay_seconds: float = 2.0
    rarity_weights: Mapping[str, int] = field(
        default_factory=lambda: dict(_DEFAULTS["exploration"]["rarity_weights"])
    )

    @classmethod
    def from_config(cls, manager: ConfigManager) -> "ProgressionSettings":
        """
        Build settings from a ConfigManager.

        Raises:
            ConfigValidationError: Any value is missing, mistyped or out of bounds.
        """
        weights = manager.get("exploration.rarity_weights", {})
        if not isinstance(weights, Mapping):
            raise ConfigValidationError(
                "exploration.rarity_weights", "must be a mapping of rarity name to weight"
            )

        settings = cls(
            max_energy=_require_int(manager, "energy.max", minimum=1),
            energy_refill_seconds=_require_int(manager, "energy.refill_seconds", minimum=1),
            energy_refill_amount=_require_int(manager, "energy.refill_amount", minimum=1),
            refill_poll_seconds=_require_number(manager, "energy.poll_seconds", minimum=0.001),
            xp_per_level=_require_int(manager, "leveling.xp_per_level", minimum=1),
            explore_delay_seconds=_require_number(manager, "exploration.delay_seconds", minimum=0.0),
            rarity_weights={str(name): _check_weight(name, w) for name, w in weights.items()},
        )
        return settings


def _require_int(manager: ConfigManager, key: str, minimum: int) -> int:
    value = manager.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigValidationError(key, f"must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigValidationError(key, f"must be >= {minimum}, got {value}")
    return value


def _require_number(manager: ConfigManager, key: str, minimum: float) -> float:
    value = manager.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigValidationError(key, f"must be a number, got {value!r}")
    if value < minimum:
        raise ConfigValidationError(key, f"must be >= {minimum}, got {value}")
    return float(value)


def _check_weight(name: Any, weight: Any) -> int:
    key = f"exploration.rarity_weights.{name}"
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise ConfigValidationError(key, f"must be an integer, got {weight!r}")
    if weight <= 0:
        raise ConfigValidationError(key, f"must be positive, got {weight}")
    return weight
