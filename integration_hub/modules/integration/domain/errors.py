"""Integration domain errors.

Messages are written so that execution failures can be classified from the
message text alone (timeouts, authentication, rate limits, connection,
transformation and validation problems).
"""

from typing import Any
from uuid import UUID

from integration_hub.core.errors import ConflictError, DomainError, ErrorSeverity


class IntegrationError(DomainError):
    """Base error for integration domain."""

    default_code = "INTEGRATION_ERROR"


class IntegrationNotFoundError(IntegrationError):
    """Raised when an integration cannot be found."""

    default_code = "INTEGRATION_NOT_FOUND"
    status_code = 404
    severity = ErrorSeverity.LOW

    def __init__(self, integration_id: UUID, **kwargs: Any):
        super().__init__(
            f"Integration with ID {integration_id} not found",
            user_message="The requested integration was not found",
            recovery_hint="Please check the integration ID and try again",
            **kwargs,
        )
        self.integration_id = integration_id
        self.details["integration_id"] = str(integration_id)


class DataMappingNotFoundError(IntegrationError):
    """Raised when a data mapping cannot be found."""

    default_code = "DATA_MAPPING_NOT_FOUND"
    status_code = 404
    severity = ErrorSeverity.LOW

    def __init__(self, mapping_id: UUID, **kwargs: Any):
        super().__init__(f"Data mapping with ID {mapping_id} not found", **kwargs)
        self.details["mapping_id"] = str(mapping_id)


class SyncJobNotFoundError(IntegrationError):
    """Raised when a sync job cannot be found."""

    default_code = "SYNC_JOB_NOT_FOUND"
    status_code = 404
    severity = ErrorSeverity.LOW

    def __init__(self, sync_job_id: UUID, **kwargs: Any):
        super().__init__(f"Sync job with ID {sync_job_id} not found", **kwargs)
        self.details["sync_job_id"] = str(sync_job_id)


class IntegrationAccessDeniedError(IntegrationError):
    """Raised when the caller does not own the integration."""

    default_code = "INTEGRATION_ACCESS_DENIED"
    status_code = 403

    def __init__(self, integration_id: UUID, user_id: UUID, **kwargs: Any):
        super().__init__(
            f"Access to integration {integration_id} is forbidden",
            user_message="You don't have access to this integration",
            **kwargs,
        )
        self.details.update(
            {"integration_id": str(integration_id), "user_id": str(user_id)}
        )


class IntegrationConfigurationError(IntegrationError):
    """Raised when an integration configuration is incomplete or invalid."""

    default_code = "INTEGRATION_CONFIGURATION_INVALID"
    status_code = 422

    def __init__(self, problems: list[str], **kwargs: Any):
        super().__init__(
            "Invalid integration configuration: " + "; ".join(problems),
            recovery_hint="Fix the listed configuration problems and try again",
            **kwargs,
        )
        self.problems = list(problems)
        self.details["problems"] = self.problems


class CredentialsExpiredError(IntegrationError):
    """Raised when an operation needs credentials that have expired."""

    default_code = "CREDENTIALS_EXPIRED"
    status_code = 401

    def __init__(self, subject: str, **kwargs: Any):
        super().__init__(
            f"Authentication credentials have expired for {subject}",
            user_message="The stored credentials have expired",
            recovery_hint="Refresh or replace the credentials",
            **kwargs,
        )


class CredentialsNotRefreshableError(IntegrationError):
    """Raised when refresh is requested for credentials without a refresh token."""

    default_code = "CREDENTIALS_NOT_REFRESHABLE"
    status_code = 422

    def __init__(self, subject: str, **kwargs: Any):
        super().__init__(
            f"Authentication credentials for {subject} cannot be refreshed",
            recovery_hint="Provide new credentials instead",
            **kwargs,
        )


class InvalidFieldMappingError(IntegrationError):
    """Raised when a single field mapping is structurally invalid."""

    default_code = "INVALID_FIELD_MAPPING"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(self, reason: str, mapping_id: str | None = None, **kwargs: Any):
        message = f"Invalid field mapping: {reason}"
        if mapping_id:
            message = f"Invalid field mapping '{mapping_id}': {reason}"
        super().__init__(message, **kwargs)
        self.reason = reason
        if mapping_id:
            self.details["mapping_id"] = mapping_id


class CircularDependencyError(IntegrationError):
    """Raised when calculate mappings depend on each other in a cycle."""

    default_code = "CIRCULAR_DEPENDENCY"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(self, fields: list[str], **kwargs: Any):
        super().__init__(
            f"Circular dependencies detected in mapping: {', '.join(fields)}",
            **kwargs,
        )
        self.fields = list(fields)
        self.details["fields"] = self.fields


class MappingValidationError(IntegrationError):
    """Raised when a data mapping fails validation before transformation."""

    default_code = "MAPPING_INVALID"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(self, errors: list[str], **kwargs: Any):
        super().__init__("Data mapping is invalid: " + "; ".join(errors), **kwargs)
        self.errors = list(errors)
        self.details["errors"] = self.errors


class SchemaValidationError(IntegrationError):
    """Raised when data does not conform to a schema."""

    default_code = "SCHEMA_VALIDATION_FAILED"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(self, schema_role: str, errors: list[str], **kwargs: Any):
        super().__init__(
            f"{schema_role.capitalize()} data does not match schema: "
            + "; ".join(errors),
            **kwargs,
        )
        self.schema_role = schema_role
        self.errors = list(errors)
        self.details.update({"schema_role": schema_role, "errors": self.errors})


class TransformationError(IntegrationError):
    """Raised when a field cannot be transformed."""

    default_code = "TRANSFORMATION_FAILED"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(self, field: str, reason: str, **kwargs: Any):
        super().__init__(f"Failed to transform field '{field}': {reason}", **kwargs)
        self.field = field
        self.reason = reason
        self.details.update({"field": field, "reason": reason})


class DataTransformationFailedError(IntegrationError):
    """Raised when an execution cannot transform the response it received."""

    default_code = "DATA_TRANSFORMATION_FAILED"
    status_code = 422

    def __init__(self, errors: list[str], **kwargs: Any):
        super().__init__("Data transformation failed: " + "; ".join(errors), **kwargs)
        self.errors = list(errors)
        self.details["errors"] = self.errors


class ExpressionError(IntegrationError):
    """Raised when a calculate expression cannot be parsed or evaluated."""

    default_code = "EXPRESSION_INVALID"
    status_code = 422
    severity = ErrorSeverity.LOW

    def __init__(self, expression: str, reason: str, **kwargs: Any):
        super().__init__(f"Invalid expression '{expression}': {reason}", **kwargs)
        self.expression = expression
        self.reason = reason


class InvalidStateTransitionError(IntegrationError):
    """Raised when a lifecycle method is called from a state that forbids it."""

    default_code = "INVALID_STATE_TRANSITION"
    status_code = 409

    def __init__(self, subject: str, current_state: str, action: str, **kwargs: Any):
        super().__init__(
            f"Cannot {action} {subject} while it is {current_state}", **kwargs
        )
        self.details.update(
            {"subject": subject, "current_state": current_state, "action": action}
        )


class ConnectionFailedError(IntegrationError):
    """Raised when a call to an external system fails."""

    default_code = "CONNECTION_FAILED"
    status_code = 502
    retryable = True

    def __init__(
        self,
        target: str,
        reason: str,
        http_status: int | None = None,
        **kwargs: Any,
    ):
        super().__init__(
            f"Failed to connect to {target}: {reason}",
            user_message=f"Unable to connect to {target}",
            recovery_hint="Please check your connection settings and try again",
            **kwargs,
        )
        self.target = target
        self.reason = reason
        self.http_status = http_status
        self.details.update(
            {"target": target, "reason": reason, "http_status": http_status}
        )


class ConcurrencyConflictError(ConflictError):
    """Raised when an aggregate was changed by another writer since it was loaded."""

    default_code = "CONCURRENCY_CONFLICT"
    retryable = True

    def __init__(self, resource: str, aggregate_id: UUID, expected: int, actual: int):
        super().__init__(
            f"{resource} {aggregate_id} was modified concurrently "
            f"(expected version {expected}, found {actual})",
            resource=resource,
        )
        self.details.update(
            {"aggregate_id": str(aggregate_id), "expected": expected, "actual": actual}
        )


__all__ = [
    "CircularDependencyError",
    "ConcurrencyConflictError",
    "ConnectionFailedError",
    "CredentialsExpiredError",
    "CredentialsNotRefreshableError",
    "DataTransformationFailedError",
    "DataMappingNotFoundError",
    "ExpressionError",
    "IntegrationAccessDeniedError",
    "IntegrationConfigurationError",
    "IntegrationError",
    "IntegrationNotFoundError",
    "InvalidFieldMappingError",
    "InvalidStateTransitionError",
    "MappingValidationError",
    "SchemaValidationError",
    "SyncJobNotFoundError",
    "TransformationError",
]
