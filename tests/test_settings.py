"""Tests for library settings."""

import random

import pytest

from botconfig import BotConfiguration, FileService, IdSpaceExhaustedError
from botconfig.settings import Settings, get_settings, load_yaml_config, reload_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self, monkeypatch):
        for name in ("BOTCONFIG_FILE_EXTENSION", "BOTCONFIG_IDS__SPACE"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.file_extension == ".bot"
        assert settings.encoding == "utf-8"
        assert settings.indent == 2
        assert settings.ids.space == 256
        assert settings.ids.max_attempts == 64
        assert settings.logging.level == "INFO"


class TestEnvironment:
    """Tests for environment variable overrides."""

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("BOTCONFIG_FILE_EXTENSION", ".botfile")
        assert Settings().file_extension == ".botfile"

    def test_nested_delimiter(self, monkeypatch):
        monkeypatch.setenv("BOTCONFIG_IDS__SPACE", "512")
        assert Settings().ids.space == 512

    def test_env_overrides_init(self, monkeypatch):
        monkeypatch.setenv("BOTCONFIG_INDENT", "4")
        assert Settings(indent=8).indent == 4


class TestYamlConfig:
    """Tests for YAML loading."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "botconfig.yaml"
        path.write_text("file_extension: .cfg\nids:\n  space: 16\n", encoding="utf-8")
        data = load_yaml_config(path)
        assert data == {"file_extension": ".cfg", "ids": {"space": 16}}
        assert Settings(**data).ids.space == 16

    def test_missing_file(self, tmp_path):
        assert load_yaml_config(tmp_path / "none.yaml") == {}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "botconfig.yaml"
        path.write_text("", encoding="utf-8")
        assert load_yaml_config(path) == {}

    def test_discovered_in_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("BOTCONFIG_INDENT", raising=False)
        (tmp_path / "botconfig.yaml").write_text("indent: 3\n", encoding="utf-8")
        assert reload_settings().indent == 3


class TestSettingsApplied:
    """Settings reach the configuration they are given to."""

    def test_id_space_used_by_registry(self):
        settings = Settings.model_construct()
        settings.ids.space = 3
        config = BotConfiguration(rng=random.Random(0), settings=settings)
        for _ in range(3):
            config.connect_service(FileService())
        assert {s.id for s in config.services} == {"0", "1", "2"}
        with pytest.raises(IdSpaceExhaustedError):
            config.connect_service(FileService())

    def test_indent_used_by_to_json(self):
        settings = Settings.model_construct(indent=4)
        text = BotConfiguration(name="x", settings=settings).to_json()
        assert '\n    "name": "x"' in text
