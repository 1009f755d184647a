"""
Tests for settings and logging utilities.

Requires Python 3.11+.
"""

import json

import pytest
import structlog
from pydantic import ValidationError

from pollmon.utils.config import LoggingSettings, Settings, get_settings
from pollmon.utils.logger import LoggerMixin, bind_watch_context, configure_logging, get_logger
from pollmon.watcher.file_watcher import PollingWatcher


@pytest.fixture
def reset_structlog():
    """Restore structlog defaults after a test configures it."""
    yield
    structlog.reset_defaults()


class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self):
        """Settings load without any environment."""
        settings = Settings()

        assert settings.app_name == "pollmon"
        assert settings.watcher.delay == 2.0
        assert settings.watcher.poll_interval == 0.5
        assert settings.logging.format == "console"
        assert settings.environment == "development"

    def test_cached(self):
        """get_settings returns one shared instance."""
        assert get_settings() is get_settings()

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch):
        """Sections read their prefixed variables."""
        monkeypatch.setenv("WATCHER_POLL_INTERVAL", "1.5")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings()

        assert settings.watcher.poll_interval == 1.5
        assert settings.logging.level == "DEBUG"

    def test_unknown_log_format_rejected(self):
        """Only json and console renderers exist."""
        with pytest.raises(ValidationError):
            LoggingSettings(format="xml")

    def test_log_format_case_insensitive(self):
        """Renderer names are normalized to lower case."""
        assert LoggingSettings(format="JSON").format == "json"


class TestLogging:
    """Test cases for structured logging."""

    def test_json_output(self, monkeypatch, capsys, reset_structlog):
        """JSON format renders one object per event with app context."""
        monkeypatch.setenv("LOG_FORMAT", "json")
        get_settings.cache_clear()
        configure_logging()

        get_logger("test").info("file_modified", path="a.txt")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "file_modified"
        assert record["path"] == "a.txt"
        assert record["app"] == "pollmon"
        assert record["level"] == "info"

    def test_level_filtering(self, monkeypatch, capsys, reset_structlog):
        """Events below the configured level are dropped."""
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        get_settings.cache_clear()
        configure_logging()

        logger = get_logger("test")
        logger.debug("change_debounced")
        logger.info("file_modified")

        assert capsys.readouterr().err == ""

    def test_logger_mixin(self):
        """LoggerMixin caches one logger per instance."""

        class Component(LoggerMixin):
            pass

        component = Component()

        assert component.log is component.log

    def test_watch_session_context(self, monkeypatch, capsys, reset_structlog, tmp_path):
        """Every event of a run carries the watch root and the environment."""
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ENVIRONMENT", "staging")
        get_settings.cache_clear()
        configure_logging()
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "a.txt").write_text("x")

        PollingWatcher(tmp_path, lambda path: None, {"poll_interval": 0}).run(max_passes=1)

        records = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines()]
        events = [record["event"] for record in records]
        assert events[0] == "watch_started"
        assert events[-1] == "watch_stopped"
        for record in records:
            assert record["watch_root"] == str(tmp_path)
            assert record["environment"] == "staging"

    def test_paths_relative_to_watch_root(self, monkeypatch, capsys, reset_structlog, tmp_path):
        """Absolute paths under the bound root are rendered root-relative."""
        monkeypatch.setenv("LOG_FORMAT", "json")
        get_settings.cache_clear()
        configure_logging()
        logger = get_logger("test")

        with bind_watch_context(tmp_path):
            logger.info("file_modified", path=str(tmp_path / "src" / "main.lua"))
        logger.info("file_modified", path="/elsewhere/main.lua")

        first, second = [json.loads(line) for line in capsys.readouterr().err.strip().splitlines()]
        assert first["path"] == "src/main.lua"
        assert first["watch_root"] == str(tmp_path)
        assert second["path"] == "/elsewhere/main.lua"
        assert "watch_root" not in second
