"""
Unit tests for configuration loading.
"""

import json
import os

import pytest

from novel_workspace.utils.config import (
    ConfigLoader,
    WorkspaceConfig,
    StorageConfig,
    load_config,
)
from novel_workspace.utils.errors import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the host's NOVEL_* variables and home config out of the tests."""
    for key in list(os.environ):
        if key.startswith("NOVEL_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


class TestDefaults:
    """Built-in defaults."""

    def test_storage_defaults(self):
        config = WorkspaceConfig()

        assert config.storage.meta_dir_name == ".novel"
        assert config.storage.db_file == "vcs.db"
        assert config.storage.compression_enabled is True
        assert config.logging.level == "WARNING"
        assert config.logging.enable_file is False

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "a\\b"])
    def test_meta_dir_must_be_single_component(self, name):
        with pytest.raises(ValueError):
            StorageConfig(meta_dir_name=name)

    def test_journal_mode_is_uppercased(self):
        assert StorageConfig(journal_mode="wal").journal_mode == "WAL"


class TestConfigLoader:
    """Merging of files, dicts and environment variables."""

    def test_env_var_overrides_nested_value(self, monkeypatch):
        monkeypatch.setenv("NOVEL_STORAGE__COMPRESSION_LEVEL", "9")
        monkeypatch.setenv("NOVEL_STORAGE__COMPRESSION_ENABLED", "false")

        config = ConfigLoader().load()

        assert config.storage.compression_level == 9
        assert config.storage.compression_enabled is False

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  level: debug\nstorage:\n  timeout: 5\n")

        loader = ConfigLoader()
        loader.add_source(path)
        config = loader.load()

        assert config.logging.level == "DEBUG"
        assert config.storage.timeout == 5.0

    def test_toml_file(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('[storage]\nsynchronous = "FULL"\n')

        loader = ConfigLoader()
        loader.add_source(path)

        assert loader.load().storage.synchronous == "FULL"

    def test_higher_priority_wins(self, tmp_path):
        low = tmp_path / "low.json"
        low.write_text(json.dumps({"storage": {"compression_level": 2, "timeout": 1}}))

        loader = ConfigLoader()
        loader.add_source({"storage": {"compression_level": 7}}, priority=50)
        loader.add_source(low, priority=1)
        config = loader.load()

        assert config.storage.compression_level == 7
        assert config.storage.timeout == 1.0

    def test_missing_file_is_ignored(self, tmp_path):
        loader = ConfigLoader()
        loader.add_source(tmp_path / "absent.yaml")

        assert loader.load() == WorkspaceConfig()

    def test_invalid_value_raises_configuration_error(self):
        loader = ConfigLoader()
        loader.add_source({"storage": {"compression_level": 99}})

        with pytest.raises(ConfigurationError) as exc_info:
            loader.load()

        assert "storage.compression_level" in exc_info.value.message

    def test_malformed_file_raises_configuration_error(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        loader = ConfigLoader()
        loader.add_source(path)

        with pytest.raises(ConfigurationError):
            loader.load()

    def test_unknown_extension_is_rejected(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigLoader().add_source(tmp_path / "config.ini")

    def test_get_config_before_load(self):
        with pytest.raises(ConfigurationError):
            ConfigLoader().get_config()


class TestLoadConfig:
    """Standard config locations."""

    def test_workspace_config_file(self, tmp_path):
        root = tmp_path / "project"
        (root / ".novel").mkdir(parents=True)
        (root / ".novel" / "config.yaml").write_text("storage:\n  compression_enabled: false\n")

        config = load_config(root=root)

        assert config.storage.compression_enabled is False

    def test_extra_config_beats_files(self, tmp_path):
        path = tmp_path / "extra.yaml"
        path.write_text("logging:\n  level: ERROR\n")

        config = load_config(config_paths=[path], extra_config={"logging": {"level": "debug"}})

        assert config.logging.level == "DEBUG"
