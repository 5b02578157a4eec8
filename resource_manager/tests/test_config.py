"""
Unit tests for configuration and logging setup.
"""

import json
import logging
from datetime import datetime

import pytest

from shared.config import DEFAULT_ENDPOINT, ResourceManagerSettings, get_settings
from shared.logging import clear_context, configure_logging, get_logger, request_id_var, set_request_id
from shared.retry import RetryConfig


class TestResourceManagerSettings:
    """Test cases for ResourceManagerSettings."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch, tmp_path):
        """Isolate settings from the host environment and any .env file."""
        monkeypatch.chdir(tmp_path)
        for name in ("ENDPOINT", "MAX_ATTEMPTS", "RETRYABLE_STATUS_CODES", "DEFAULT_PAGE_SIZE", "JITTER"):
            monkeypatch.delenv(f"RESOURCE_MANAGER_{name}", raising=False)

    def test_defaults(self):
        """Test default settings."""
        settings = get_settings()

        assert settings.endpoint == DEFAULT_ENDPOINT
        assert settings.max_attempts == 6
        assert settings.retryable_status_codes == [500, 502, 503, 504]
        assert settings.default_page_size == 0
        assert settings.jitter is True

    def test_environment_overrides(self, monkeypatch):
        """Test values read from prefixed environment variables."""
        monkeypatch.setenv("RESOURCE_MANAGER_ENDPOINT", "http://localhost:8080/")
        monkeypatch.setenv("RESOURCE_MANAGER_MAX_ATTEMPTS", "3")
        monkeypatch.setenv("RESOURCE_MANAGER_RETRYABLE_STATUS_CODES", "500,503")
        monkeypatch.setenv("RESOURCE_MANAGER_DEFAULT_PAGE_SIZE", "50")

        settings = ResourceManagerSettings()

        assert settings.endpoint == "http://localhost:8080"
        assert settings.max_attempts == 3
        assert settings.retryable_status_codes == [500, 503]
        assert settings.default_page_size == 50

    def test_explicit_overrides(self):
        """Test keyword overrides."""
        settings = get_settings(max_attempts=2, jitter=False)

        assert settings.max_attempts == 2
        assert settings.jitter is False

    def test_invalid_attempts_rejected(self):
        """Test validation of the attempt budget."""
        with pytest.raises(ValueError):
            get_settings(max_attempts=0)

    def test_retry_config_from_settings(self):
        """Test building the retry policy from settings."""
        config = RetryConfig.from_settings(get_settings(max_attempts=4, retryable_status_codes=[503]))

        assert config.max_attempts == 4
        assert config.retryable_codes == frozenset({503})


class TestLogging:
    """Test cases for logging helpers."""

    def test_configure_and_log(self, caplog):
        """Test that events render as JSON with an ISO timestamp and service context."""
        caplog.set_level(logging.DEBUG)
        configure_logging("resource-manager-tests", "debug", env="test")

        get_logger("resource_manager.tests").info("Logging configured", answer=42)

        event = json.loads(caplog.records[-1].getMessage())
        assert event["event"] == "Logging configured"
        assert event["answer"] == 42
        assert event["service"] == "resource-manager-tests"
        assert event["env"] == "test"
        assert isinstance(event["timestamp"], str)
        assert datetime.fromisoformat(event["timestamp"].replace("Z", "+00:00")).tzinfo is not None

    def test_configure_defaults_from_settings(self, monkeypatch, tmp_path, caplog):
        """Test that level and environment come from settings when omitted."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("RESOURCE_MANAGER_ENV", "staging")
        monkeypatch.setenv("RESOURCE_MANAGER_LOG_LEVEL", "warning")
        caplog.set_level(logging.DEBUG)
        configure_logging("resource-manager-tests")

        get_logger("resource_manager.tests.defaults").warning("Settings applied")

        event = json.loads(caplog.records[-1].getMessage())
        assert event["env"] == "staging"
        assert event["level"] == "warning"

    def test_request_id_context(self):
        """Test setting and clearing the request id."""
        request_id = set_request_id()

        assert request_id_var.get() == request_id

        clear_context()

        assert request_id_var.get() is None
