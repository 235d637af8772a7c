"""
Test cases for log record filtering and logging configuration.
"""

import pytest
import structlog

from integration_hub.core.enums import Environment, LogFormat, LogLevel
from integration_hub.core.errors import ConfigurationError
from integration_hub.core.logging import (
    LogConfig,
    MessageLengthFilter,
    SensitiveDataFilter,
    get_logger,
    log_context,
)


class TestSensitiveDataFilter:
    """Test credential masking."""

    @pytest.fixture
    def log_filter(self):
        return SensitiveDataFilter()

    @pytest.mark.parametrize(
        "key",
        ["password", "access_token", "refresh_token", "client_secret", "api_key", "credentials"],
    )
    def test_sensitive_fields_are_masked(self, log_filter, key):
        """Test secret-looking keys have their values replaced."""
        record = log_filter.filter({key: "s3cr3t"})

        assert record[key] == "***[MASKED]"

    @pytest.mark.parametrize("key", ["mapping_id", "tokenizer", "integration_id"])
    def test_lookalike_fields_are_kept(self, log_filter, key):
        """Test keys are matched on word boundaries."""
        assert log_filter.filter({key: "abc"}) == {key: "abc"}

    def test_nested_and_inline_secrets(self, log_filter):
        """Test nested dicts are filtered and bearer tokens in text are masked."""
        record = log_filter.filter(
            {
                "headers": {"Authorization": "Bearer abc.def", "Accept": "application/json"},
                "message": "Calling with Bearer abc.def now",
                "api_key": None,
            }
        )

        assert record["headers"] == {"Authorization": "***[MASKED]", "Accept": "application/json"}
        assert record["message"] == "Calling with ***[MASKED] now"
        assert record["api_key"] is None


class TestMessageLengthFilter:
    """Test message truncation."""

    def test_long_messages_are_truncated(self):
        """Test messages beyond the limit are cut and flagged."""
        log_filter = MessageLengthFilter(max_length=20, truncation_suffix="...")

        record = log_filter.filter({"event": "x" * 50})

        assert record["event"] == "x" * 17 + "..."
        assert record["message_truncated"] is True

    def test_short_messages_are_untouched(self):
        """Test short records pass through as-is."""
        record = {"event": "ok"}

        assert MessageLengthFilter().filter(record) is record


class TestLogConfig:
    """Test configuration defaults."""

    def test_testing_environment_defaults(self):
        """Test the testing environment quiets logs to plain warnings."""
        config = LogConfig(environment=Environment.TESTING)

        assert config.level == LogLevel.WARNING
        assert config.format == LogFormat.PLAIN

    def test_production_forces_json(self):
        """Test production always renders JSON without caller info."""
        config = LogConfig(
            format=LogFormat.CONSOLE, include_caller_info=True, environment=Environment.PRODUCTION
        )

        assert config.to_dict()["format"] == "json"
        assert config.include_caller_info is False

    def test_message_length_floor(self):
        """Test very small message limits are rejected."""
        with pytest.raises(ConfigurationError):
            LogConfig(max_message_length=10)

    def test_loggers_are_cached_by_name(self):
        """Test one logger is kept per name."""
        assert get_logger("integration_hub.tests") is get_logger("integration_hub.tests")


class TestLogContext:
    """Test scoped context variables."""

    def test_context_is_bound_only_inside_block(self):
        """Test bound values disappear when the block exits."""
        with log_context(command_id="c1"):
            assert structlog.contextvars.get_contextvars()["command_id"] == "c1"

        assert "command_id" not in structlog.contextvars.get_contextvars()
