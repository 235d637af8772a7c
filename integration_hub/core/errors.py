"""Error hierarchy shared by every integration hub layer.

Errors carry a machine-readable code, an HTTP-style status, a severity used
for log routing and a retry hint. Every error logs itself on creation
through the standard library logger, since ``core.logging`` depends on
this module.
"""

import logging
import uuid
from enum import Enum
from typing import Any


class ErrorSeverity(Enum):
    """How loudly an error is logged."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


_LOG_LEVELS = {
    ErrorSeverity.LOW: logging.INFO,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.HIGH: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}

_SENSITIVE_KEYS = frozenset(
    {"password", "token", "secret", "api_key", "credential", "authorization"}
)


def _redact(details: dict[str, Any]) -> dict[str, Any]:
    redacted = {}
    for key, value in details.items():
        if any(sensitive in key.lower() for sensitive in _SENSITIVE_KEYS):
            redacted[key] = "***REDACTED***"
        elif isinstance(value, dict):
            redacted[key] = _redact(value)
        else:
            redacted[key] = value
    return redacted


class IntegrationHubError(Exception):
    """
    Base exception for all integration hub errors.

    Subclasses set ``default_code``, ``status_code``, ``severity`` and
    ``retryable``. Command handlers turn these errors into failure results
    using ``code`` and ``message``.
    """

    default_code: str = "ERROR"
    status_code: int = 500
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
        recovery_hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = dict(details or {})
        self.user_message = user_message or message
        self.recovery_hint = recovery_hint
        self.error_id = str(uuid.uuid4())

        logging.getLogger(f"integration_hub.errors.{type(self).__name__}").log(
            _LOG_LEVELS[self.severity],
            "%s: %s",
            self.code,
            message,
            extra={
                "error_id": self.error_id,
                "error_code": self.code,
                "retryable": self.retryable,
                "details": _redact(self.details),
            },
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize for clients, with sensitive detail values redacted."""
        data: dict[str, Any] = {"errorCode": self.code, "errorMessage": self.user_message}
        if self.details:
            data["details"] = _redact(self.details)
        if self.recovery_hint:
            data["recoveryHint"] = self.recovery_hint
        if self.retryable:
            data["retryable"] = True
        return data

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class DomainError(IntegrationHubError):
    """Base class for domain errors."""

    default_code = "DOMAIN_ERROR"
    status_code = 400


class ApplicationError(IntegrationHubError):
    """Base class for application layer errors."""

    default_code = "APPLICATION_ERROR"
    status_code = 400


class InfrastructureError(IntegrationHubError):
    """Base class for failures outside the process."""

    default_code = "INFRASTRUCTURE_ERROR"
    severity = ErrorSeverity.HIGH
    retryable = True


class ValidationError(ApplicationError):
    """Invalid command, query or configuration input."""

    default_code = "VALIDATION_ERROR"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(self, message: str, field: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.field = field
        if field:
            self.details["field"] = field


class ConflictError(ApplicationError):
    """A write lost against a concurrent change."""

    default_code = "CONFLICT"
    status_code = 409

    def __init__(self, message: str, resource: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        if resource:
            self.details["resource"] = resource


class OperationTimeoutError(InfrastructureError):
    """An outbound operation did not finish in time."""

    default_code = "TIMEOUT"
    status_code = 504

    def __init__(self, operation: str, timeout_seconds: float, **kwargs: Any) -> None:
        kwargs.setdefault("user_message", "The operation took too long to complete")
        super().__init__(f"{operation} timed out after {timeout_seconds}s", **kwargs)
        self.details.update({"operation": operation, "timeout_seconds": timeout_seconds})


class ConfigurationError(InfrastructureError):
    """Missing or invalid settings, or miswired collaborators."""

    default_code = "CONFIGURATION_ERROR"
    severity = ErrorSeverity.CRITICAL
    retryable = False

    def __init__(self, message: str, config_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        if config_key:
            self.details["config_key"] = config_key


class BusinessRuleError(DomainError):
    """Business rule violation."""

    default_code = "BUSINESS_RULE_VIOLATION"
    status_code = 422

    def __init__(self, message: str, rule: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        if rule:
            self.details["rule"] = rule


__all__ = [
    "ApplicationError",
    "BusinessRuleError",
    "ConfigurationError",
    "ConflictError",
    "DomainError",
    "ErrorSeverity",
    "InfrastructureError",
    "IntegrationHubError",
    "OperationTimeoutError",
    "ValidationError",
]
