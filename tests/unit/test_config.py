"""
Unit Tests for Configuration

Test Coverage
-------------
- ConfigManager defaults, YAML merging and dotted overrides
- ProgressionSettings validation
- Static Config environment parsing
"""

from pathlib import Path

import pytest

from stargazer.core.config.config import Config, StorageBackend
from stargazer.core.config.errors import ConfigInitializationError, ConfigValidationError
from stargazer.core.config.manager import ConfigManager, ProgressionSettings
from stargazer.core.storage import build_slot_store
from stargazer.core.storage.file_store import FileSlotStore
from stargazer.core.storage.memory import MemorySlotStore

PROJECT_CONFIG = Path(__file__).resolve().parents[2] / "config"


# ============================================================================
# CONFIG MANAGER
# ============================================================================


@pytest.mark.unit
class TestConfigManager:
    def test_defaults_without_directory(self):
        manager = ConfigManager()

        assert manager.get("energy.max") == 10
        assert manager.get("exploration.rarity_weights.Legendary") == 3
        assert manager.get("energy.nope", "fallback") == "fallback"

    def test_yaml_overrides_defaults(self, tmp_path):
        (tmp_path / "balance.yaml").write_text("energy:\n  max: 25\n", encoding="utf-8")
        manager = ConfigManager(config_dir=tmp_path)
        manager.initialize()

        assert manager.get("energy.max") == 25
        assert manager.get("energy.refill_seconds") == 300
        assert manager.loaded_files == ["balance.yaml"]

    def test_explicit_overrides_win(self, tmp_path):
        (tmp_path / "balance.yaml").write_text("energy:\n  max: 25\n", encoding="utf-8")
        manager = ConfigManager(config_dir=tmp_path, overrides={"energy.max": 3})

        assert manager.get("energy.max") == 3

    def test_missing_directory_uses_defaults(self, tmp_path):
        manager = ConfigManager(config_dir=tmp_path / "absent")
        manager.initialize()

        assert manager.get("leveling.xp_per_level") == 100

    def test_unparseable_yaml_fails_initialization(self, tmp_path):
        (tmp_path / "broken.yaml").write_text("energy: [1, 2\n", encoding="utf-8")

        with pytest.raises(ConfigInitializationError):
            ConfigManager(config_dir=tmp_path).initialize()

    def test_non_mapping_yaml_fails_initialization(self, tmp_path):
        (tmp_path / "list.yaml").write_text("- 1\n- 2\n", encoding="utf-8")

        with pytest.raises(ConfigInitializationError):
            ConfigManager(config_dir=tmp_path).initialize()

    def test_project_config_is_valid(self):
        manager = ConfigManager(config_dir=PROJECT_CONFIG)

        settings = ProgressionSettings.from_config(manager)

        assert settings.max_energy == 10
        assert settings.energy_refill_seconds == 300
        assert settings.xp_per_level == 100


# ============================================================================
# PROGRESSION SETTINGS
# ============================================================================


@pytest.mark.unit
class TestProgressionSettings:
    def test_from_config_reads_every_value(self):
        manager = ConfigManager(
            overrides={
                "energy.max": 5,
                "energy.refill_seconds": 60,
                "exploration.delay_seconds": 0,
                "exploration.rarity_weights": {"Common": 1, "Rare": 1, "Epic": 1, "Legendary": 1},
            }
        )

        settings = ProgressionSettings.from_config(manager)

        assert settings.max_energy == 5
        assert settings.energy_refill_seconds == 60
        assert settings.explore_delay_seconds == 0.0
        assert settings.rarity_weights["Legendary"] == 1

    @pytest.mark.parametrize(
        "key, value",
        [
            ("energy.max", 0),
            ("energy.max", "ten"),
            ("energy.refill_seconds", -1),
            ("leveling.xp_per_level", True),
            ("exploration.delay_seconds", -0.5),
            ("exploration.rarity_weights", ["Common"]),
        ],
    )
    def test_invalid_values_are_rejected(self, key, value):
        manager = ConfigManager(overrides={key: value})

        with pytest.raises(ConfigValidationError) as exc_info:
            ProgressionSettings.from_config(manager)

        assert exc_info.value.key.startswith(key)

    def test_non_positive_weight_is_rejected(self):
        manager = ConfigManager(overrides={"exploration.rarity_weights.Epic": 0})

        with pytest.raises(ConfigValidationError) as exc_info:
            ProgressionSettings.from_config(manager)

        assert exc_info.value.key == "exploration.rarity_weights.Epic"


# ============================================================================
# STATIC CONFIG
# ============================================================================


@pytest.mark.unit
class TestStaticConfig:
    @pytest.fixture(autouse=True)
    def reload_config(self):
        yield
        Config.load()

    def test_suite_runs_in_testing_environment(self):
        Config.load()

        assert Config.is_testing()
        assert Config.STORAGE_BACKEND is StorageBackend.MEMORY

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STARGAZER_ENV", "production")
        monkeypatch.setenv("STARGAZER_STORAGE", "file")
        monkeypatch.setenv("STARGAZER_SAVE_DIR", str(tmp_path))
        monkeypatch.setenv("STARGAZER_SAVE_SLOT", "slot-2")

        Config.load()

        assert Config.is_production()
        assert Config.STORAGE_BACKEND is StorageBackend.FILE
        assert Config.SAVE_DIR == tmp_path
        assert Config.SAVE_SLOT == "slot-2"

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("STARGAZER_ENV", "staging")
        monkeypatch.setenv("STARGAZER_STORAGE", "floppy")
        monkeypatch.setenv("STARGAZER_REDIS_SOCKET_TIMEOUT", "999")

        Config.load()

        assert Config.ENVIRONMENT == "development"
        assert not Config.is_testing()
        assert Config.STORAGE_BACKEND is StorageBackend.FILE
        assert Config.REDIS_SOCKET_TIMEOUT == 5

    def test_build_slot_store_follows_backend(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STARGAZER_STORAGE", "memory")
        Config.load()
        assert isinstance(build_slot_store(), MemorySlotStore)

        monkeypatch.setenv("STARGAZER_STORAGE", "file")
        monkeypatch.setenv("STARGAZER_SAVE_DIR", str(tmp_path))
        Config.load()
        store = build_slot_store()
        assert isinstance(store, FileSlotStore)
        assert store.directory == tmp_path

    def test_summary_hides_credentials(self, monkeypatch):
        monkeypatch.setenv("STARGAZER_DATABASE_URL", "postgresql+asyncpg://user:secret@db/stargazer")
        Config.load()

        summary = Config.get_config_summary()

        assert summary["database_scheme"] == "postgresql+asyncpg"
        assert "secret" not in str(summary)
