"""
Unit Tests for Static Configuration and Log Formatting
======================================================

Test Coverage
-------------
- Environment parsing with aliases and fallback
- Integer / boolean environment parsing with rejected values recorded
- Directory resolution relative to the project root
- JSON log lines carry context and `extra` fields
"""

import json
import logging

import pytest

from sparkwell.core.config.config import Config, Environment
from sparkwell.core.logging.logger import ContextFilter, JSONFormatter, LogContext


@pytest.fixture
def clean_warnings(monkeypatch):
    monkeypatch.setattr(Config, "_warnings", [])
    return Config


@pytest.mark.unit
class TestEnvironment:
    """Test ENVIRONMENT parsing."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("production", Environment.PRODUCTION),
            (" Staging ", Environment.STAGING),
            ("test", Environment.TESTING),
            ("moon-base", Environment.DEVELOPMENT),
        ],
    )
    def test_parse(self, raw, expected):
        assert Environment.parse(raw) is expected

    def test_suite_runs_as_testing(self):
        assert Config.is_testing()
        assert not Config.is_production()


@pytest.mark.unit
class TestEnvironmentParsing:
    """Test typed environment helpers."""

    def test_int_in_range(self, clean_warnings, monkeypatch):
        monkeypatch.setenv("DATABASE_POOL_SIZE", "12")

        assert Config._env_int("DATABASE_POOL_SIZE", 5, 1, 200) == 12
        assert Config.warnings() == []

    @pytest.mark.parametrize("raw", ["lots", "0", "500"])
    def test_int_rejected_falls_back(self, clean_warnings, monkeypatch, raw):
        monkeypatch.setenv("DATABASE_POOL_SIZE", raw)

        assert Config._env_int("DATABASE_POOL_SIZE", 5, 1, 200) == 5
        assert Config.warnings()[0].startswith(f"DATABASE_POOL_SIZE='{raw}'")

    def test_bool_values(self, clean_warnings, monkeypatch):
        monkeypatch.setenv("LOG_JSON", "Off")
        monkeypatch.delenv("DATABASE_ECHO", raising=False)

        assert Config._env_bool("LOG_JSON", None) is False
        assert Config._env_bool("DATABASE_ECHO", None) is None

    def test_bool_rejected(self, clean_warnings, monkeypatch):
        monkeypatch.setenv("LOG_COLORS", "sometimes")

        assert Config._env_bool("LOG_COLORS", True) is True
        assert len(Config.warnings()) == 1

    def test_relative_dir_resolved_from_project_root(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SPARKWELL_CONFIG_DIR", "custom/config")
        monkeypatch.setenv("SPARKWELL_LOGS_DIR", str(tmp_path))

        assert Config._env_dir("SPARKWELL_CONFIG_DIR", tmp_path) == (
            Config.PROJECT_ROOT / "custom" / "config"
        )
        assert Config._env_dir("SPARKWELL_LOGS_DIR", Config.PROJECT_ROOT) == tmp_path


@pytest.mark.unit
class TestJSONFormatter:
    """Test structured log lines."""

    def test_context_and_extra(self):
        record = logging.LogRecord(
            "sparkwell.rewards", logging.INFO, __file__, 10, "Redeemed %s", ("energy_boost",), None
        )
        record.cost = 100

        with LogContext(user_id=5, action="redeem", correlation_id="c0ffee"):
            ContextFilter().filter(record)
        line = json.loads(JSONFormatter().format(record))

        assert line["message"] == "Redeemed energy_boost"
        assert line["user_id"] == "5"
        assert line["correlation_id"] == "c0ffee"
        assert line["component"] == "sparkwell"
        assert line["extra"] == {"cost": 100}
