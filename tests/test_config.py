"""Tests for honeypot/config.py — settings groups and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from honeypot.config import ActivityLogSettings, DatabaseSettings, SecuritySettings, Settings


class TestSettings:
    """Tests for the root Settings object."""

    def test_log_level_normalised(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(log_level="chatty")

    def test_is_production(self):
        assert Settings(environment="production").is_production is True
        assert Settings(environment="development").is_production is False


class TestActivityLogSettings:
    """Tests for ActivityLogSettings."""

    def test_defaults(self, monkeypatch):
        for name in ("LOGS_DIR", "ACTIVITY_LOG_FILE", "STRUCTURED_LOG_FILE", "CONSOLE_ECHO"):
            monkeypatch.delenv(name, raising=False)
        config = ActivityLogSettings()
        assert config.logs_dir == "logs"
        assert config.activity_log_file == "honeypot_activity.log"
        assert config.structured_log_file == "splunk_input.log"
        assert config.console_echo is True

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("LOGS_DIR", "/var/log/honeypot")
        monkeypatch.setenv("CONSOLE_ECHO", "false")
        config = ActivityLogSettings()
        assert config.logs_dir == "/var/log/honeypot"
        assert config.console_echo is False


class TestDatabaseSettings:
    """Tests for DatabaseSettings."""

    def test_sqlite_detection(self):
        assert DatabaseSettings(database_url="sqlite+aiosqlite:///./db.sqlite").is_sqlite is True
        assert DatabaseSettings(database_url="postgresql+asyncpg://u:p@h/db").is_sqlite is False


class TestSecuritySettings:
    """Tests for SecuritySettings."""

    def test_iterations_from_environment(self, monkeypatch):
        monkeypatch.setenv("PASSWORD_ITERATIONS", "1234")
        assert SecuritySettings().password_iterations == 1234

    def test_token_lifetime_default(self, monkeypatch):
        monkeypatch.delenv("JWT_EXPIRE_DAYS", raising=False)
        assert SecuritySettings().jwt_expire_days == 30
