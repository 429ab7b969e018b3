"""
Unit tests for configuration management utilities.

This module tests how metagen reads credentials and file locations from the
environment. The autouse ``clean_environment`` fixture in conftest.py clears
every relevant variable before each test.

Test Categories:
    - Happy path: keys and paths read from the environment
    - Precedence: METAGEN_API_KEY over OPENAI_API_KEY
    - Error handling: missing or blank keys

Python Learning Notes:
    - monkeypatch.setenv temporarily sets environment variables
    - pytest.raises verifies expected exceptions and their messages
"""

from pathlib import Path

import pytest

from metagen.utils.config import (
    DEFAULT_AUDIT_LOG_FILE,
    DEFAULT_SETTINGS_FILE,
    get_api_key,
    get_audit_log_path,
    get_settings_path,
)


class TestGetApiKey:
    """Test suite for get_api_key()."""

    def test_reads_metagen_key(self, monkeypatch):
        # Arrange: Set up key in environment
        monkeypatch.setenv("METAGEN_API_KEY", "sk-metagen")

        # Act / Assert
        assert get_api_key() == "sk-metagen"

    def test_falls_back_to_openai_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")

        assert get_api_key() == "sk-openai"

    def test_metagen_key_wins(self, monkeypatch):
        monkeypatch.setenv("METAGEN_API_KEY", "sk-metagen")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")

        assert get_api_key() == "sk-metagen"

    def test_whitespace_is_trimmed(self, monkeypatch):
        monkeypatch.setenv("METAGEN_API_KEY", "  sk-padded  ")

        assert get_api_key() == "sk-padded"

    def test_missing_key_raises(self):
        with pytest.raises(ValueError) as exc_info:
            get_api_key()

        assert "METAGEN_API_KEY" in str(exc_info.value)

    def test_blank_key_raises(self, monkeypatch):
        monkeypatch.setenv("METAGEN_API_KEY", "   ")

        with pytest.raises(ValueError):
            get_api_key()


class TestFileLocations:
    """Tests for settings and audit log path resolution."""

    def test_default_settings_path(self):
        assert get_settings_path() == Path(DEFAULT_SETTINGS_FILE)

    def test_settings_path_from_environment(self, monkeypatch):
        monkeypatch.setenv("METAGEN_SETTINGS", "/etc/metagen/ai.yaml")

        assert get_settings_path() == Path("/etc/metagen/ai.yaml")

    def test_default_audit_log_path(self):
        assert get_audit_log_path() == Path(DEFAULT_AUDIT_LOG_FILE)

    def test_audit_log_path_from_environment(self, monkeypatch):
        monkeypatch.setenv("METAGEN_AUDIT_LOG", "/var/log/metagen.jsonl")

        assert get_audit_log_path() == Path("/var/log/metagen.jsonl")
