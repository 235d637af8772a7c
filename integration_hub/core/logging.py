# ruff: noqa: A005
"""Structured logging configuration.

Structured logging built on structlog with context variables, sensitive data
masking and environment-specific defaults.

Architecture:
- LogConfig: configuration with validation and environment defaults
- SensitiveDataFilter, MessageLengthFilter: structlog processors that mask
  secrets and truncate long messages before rendering
- configure_logging / get_logger: one-time structlog setup and cached loggers
- log_context: scoped context variables merged into every record

Usage Example:
    logger = get_logger(__name__)
    logger.info("Integration executed", integration_id=str(integration.id))

Note: This module name intentionally shadows the standard library 'logging'
module inside the package namespace.
"""

import logging
import re
import sys
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from typing import Any

import structlog

from integration_hub.core.enums import Environment, LogFormat, LogLevel
from integration_hub.core.errors import ConfigurationError

MIN_MESSAGE_LENGTH = 1000

# =====================================================================================
# CONFIGURATION
# =====================================================================================


@dataclass
class LogConfig:
    """
    Logging configuration.

    The environment overrides some choices: development renders to the
    console with call sites, testing logs plain warnings only, production
    always renders JSON and always masks secrets.
    """

    level: LogLevel = field(default=LogLevel.INFO)
    format: LogFormat = field(default=LogFormat.JSON)
    environment: Environment = field(default=Environment.DEVELOPMENT)
    include_caller_info: bool = field(default=False)
    mask_sensitive_data: bool = field(default=True)
    max_message_length: int = field(default=10000)

    def __post_init__(self):
        if self.max_message_length < MIN_MESSAGE_LENGTH:
            raise ConfigurationError(
                f"Maximum message length must be at least {MIN_MESSAGE_LENGTH} characters"
            )

        if self.environment == Environment.DEVELOPMENT:
            self.format = LogFormat.CONSOLE
            self.include_caller_info = True
        elif self.environment == Environment.TESTING:
            self.level = LogLevel.WARNING
            self.format = LogFormat.PLAIN
        elif self.environment.is_production:
            self.format = LogFormat.JSON
            self.include_caller_info = False
            self.mask_sensitive_data = True

    @classmethod
    def from_settings(cls) -> "LogConfig":
        from integration_hub.core.config import get_settings

        settings = get_settings()
        return cls(
            level=settings.log_level,
            format=settings.log_format,
            environment=settings.environment,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level.level_name,
            "format": self.format.value,
            "environment": self.environment.value,
            "include_caller_info": self.include_caller_info,
            "mask_sensitive_data": self.mask_sensitive_data,
            "max_message_length": self.max_message_length,
        }


# =====================================================================================
# PROCESSORS
# =====================================================================================


class SensitiveDataFilter:
    """
    Masks credentials and secrets in log records.

    Field names are matched on word boundaries so that keys such as
    ``mapping_id`` or ``tokenizer`` are left alone. String values are
    scanned for ``Bearer``/``Basic`` authorization values.
    """

    MASK = "***[MASKED]"

    _FIELD_PATTERNS = tuple(
        re.compile(pattern, re.IGNORECASE)
        for pattern in (
            r"(^|_)password($|_)",
            r"(^|_)(access_|refresh_)?token($|_)",
            r"(^|_)secret($|_)",
            r"(^|_)api_?key($|_)",
            r"(^|_)credentials?($|_)",
            r"(^|_)authorization($|_)",
        )
    )
    _VALUE_PATTERNS = (
        re.compile(r"\bBearer\s+[A-Za-z0-9\-._~+/]+=*", re.IGNORECASE),
        re.compile(r"\bBasic\s+[A-Za-z0-9+/]+=*", re.IGNORECASE),
    )

    def __call__(self, _logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        return self.filter(event_dict)

    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        filtered = {}
        for key, value in record.items():
            if any(pattern.search(key) for pattern in self._FIELD_PATTERNS):
                filtered[key] = None if value is None else self.MASK
            elif isinstance(value, str):
                filtered[key] = self._mask_inline(value)
            elif isinstance(value, dict):
                filtered[key] = self.filter(value)
            else:
                filtered[key] = value
        return filtered

    def _mask_inline(self, value: str) -> str:
        for pattern in self._VALUE_PATTERNS:
            value = pattern.sub(self.MASK, value)
        return value


class MessageLengthFilter:
    """Truncates the rendered message of overly long records."""

    def __init__(
        self,
        max_length: int = 10000,
        truncation_suffix: str = "... [TRUNCATED]",
        message_key: str = "event",
    ):
        self.max_length = max_length
        self.truncation_suffix = truncation_suffix
        self.message_key = message_key

    def __call__(self, _logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        return self.filter(event_dict)

    def filter(self, record: dict[str, Any]) -> dict[str, Any]:
        message = record.get(self.message_key)
        if not isinstance(message, str) or len(message) <= self.max_length:
            return record

        keep = self.max_length - len(self.truncation_suffix)
        return {
            **record,
            self.message_key: message[:keep] + self.truncation_suffix,
            "message_truncated": True,
        }


def _build_processors(config: LogConfig) -> list[Any]:
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if config.include_caller_info:
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            )
        )
    if config.mask_sensitive_data:
        processors.append(SensitiveDataFilter())
    processors.extend(
        [
            MessageLengthFilter(config.max_message_length),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
        ]
    )

    renderers = {
        LogFormat.JSON: structlog.processors.JSONRenderer,
        LogFormat.CONSOLE: lambda: structlog.dev.ConsoleRenderer(colors=False),
        LogFormat.PLAIN: structlog.processors.KeyValueRenderer,
    }
    processors.append(renderers[config.format]())
    return processors


# =====================================================================================
# GLOBAL CONFIGURATION
# =====================================================================================

_configured_with: LogConfig | None = None
_loggers: dict[str, Any] = {}


def configure_logging(config: LogConfig | None = None) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        config: Logging configuration (built from settings if not provided)
    """
    global _configured_with  # noqa: PLW0603

    config = config or LogConfig.from_settings()

    structlog.configure(
        processors=_build_processors(config),
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=config.level.to_logging_level(),
    )
    if config.environment.is_production:
        for noisy in ("httpx", "httpcore"):
            logging.getLogger(noisy).setLevel(logging.WARNING)

    _configured_with = config
    _loggers.clear()


def get_logger(name: str) -> Any:
    """
    Get a structlog logger, configuring logging on first use.

    Args:
        name: Logger name (usually __name__)
    """
    if _configured_with is None:
        configure_logging()

    if name not in _loggers:
        _loggers[name] = structlog.stdlib.get_logger(name)
    return _loggers[name]


def log_context(**kwargs: Any) -> AbstractContextManager[None]:
    """
    Bind context variables to every log emitted inside the ``with`` block.

    Usage Example:
        with log_context(command_id=str(command.command_id)):
            ...
    """
    return structlog.contextvars.bound_contextvars(**kwargs)


__all__ = [
    "LogConfig",
    "MessageLengthFilter",
    "SensitiveDataFilter",
    "configure_logging",
    "get_logger",
    "log_context",
]
