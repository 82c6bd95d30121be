"""Tests for layered configuration and logging setup."""

from __future__ import annotations

import json
import logging

import pytest

from ratecard.settings import ConfigManager, EngineSettings, configure_logging

_KEYS = (
    "RATECARD_ENV",
    "RATECARD_LOG_LEVEL",
    "RATECARD_RULES_DB",
    "RATECARD_NORMAL_TOLERANCE",
    "RATECARD_SUBSTRING_FALLBACK",
    "RATECARD_HOLIDAY_COUNTRY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfigManager:
    def test_generate_env_template(self, tmp_path):
        path = ConfigManager().generate_env_template(tmp_path)
        text = path.read_text(encoding="utf-8")
        assert path.name == ".env.example"
        for key in _KEYS:
            assert f"{key}=" in text

    def test_defaults_use_development_profile(self, tmp_path):
        config = ConfigManager().load_config(tmp_path)
        assert config["RATECARD_ENV"] == "development"
        assert config["RATECARD_LOG_LEVEL"] == "DEBUG"
        assert config["RATECARD_NORMAL_TOLERANCE"] == "10"

    def test_profile_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RATECARD_ENV", "production")
        config = ConfigManager().load_config(tmp_path)
        assert config["RATECARD_LOG_LEVEL"] == "WARNING"
        assert config["RATECARD_RULES_DB"] == "rules.db"

    def test_json_overrides_profile(self, tmp_path):
        (tmp_path / ".ratecard").mkdir()
        (tmp_path / ".ratecard" / "config.json").write_text(
            json.dumps({"RATECARD_NORMAL_TOLERANCE": 15}), encoding="utf-8"
        )
        config = ConfigManager().load_config(tmp_path)
        assert config["RATECARD_NORMAL_TOLERANCE"] == "15"

    def test_bad_json_is_ignored(self, tmp_path):
        (tmp_path / ".ratecard").mkdir()
        (tmp_path / ".ratecard" / "config.json").write_text("{not json", encoding="utf-8")
        config = ConfigManager().load_config(tmp_path)
        assert config["RATECARD_ENV"] == "development"

    def test_dotenv_overrides_json(self, tmp_path):
        (tmp_path / ".ratecard").mkdir()
        (tmp_path / ".ratecard" / "config.json").write_text(
            json.dumps({"RATECARD_RULES_DB": "a.db"}), encoding="utf-8"
        )
        (tmp_path / ".env").write_text("# comment\nRATECARD_RULES_DB = b.db\n", encoding="utf-8")
        assert ConfigManager().load_config(tmp_path)["RATECARD_RULES_DB"] == "b.db"

    def test_environment_wins(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("RATECARD_LOG_LEVEL=ERROR\n", encoding="utf-8")
        monkeypatch.setenv("RATECARD_LOG_LEVEL", "INFO")
        assert ConfigManager().load_config(tmp_path)["RATECARD_LOG_LEVEL"] == "INFO"


class TestEngineSettings:
    def test_from_config(self):
        settings = EngineSettings.from_config({
            "RATECARD_LOG_LEVEL": "warning",
            "RATECARD_NORMAL_TOLERANCE": "12.5",
            "RATECARD_SUBSTRING_FALLBACK": "no",
            "RATECARD_HOLIDAY_COUNTRY": "",
        })
        assert settings.log_level == "WARNING"
        assert settings.normal_tolerance_minutes == 12.5
        assert settings.substring_fallback is False
        assert settings.holiday_country is None

    def test_load_testing_profile(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RATECARD_ENV", "testing")
        settings = EngineSettings.load(tmp_path)
        assert settings.env == "testing"
        assert settings.rules_db == ":memory:"
        assert settings.substring_fallback is False

    def test_negative_tolerance_rejected(self):
        with pytest.raises(ValueError):
            EngineSettings(normal_tolerance_minutes=-1)


class TestConfigureLogging:
    def test_sets_package_logger_level(self):
        logger = logging.getLogger("ratecard")
        previous = logger.level
        try:
            configure_logging(EngineSettings(log_level="ERROR"))
            assert logger.level == logging.ERROR
        finally:
            logger.setLevel(previous)

    def test_unknown_level_leaves_logger(self):
        logger = logging.getLogger("ratecard")
        previous = logger.level
        configure_logging(EngineSettings(log_level="LOUD"))
        assert logger.level == previous
