"""Integration configuration and metrics value objects."""

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Any

from integration_hub.core.domain.base import ValueObject
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.enums import IntegrationType
from integration_hub.modules.integration.domain.value_objects.api_endpoint import (
    ApiEndpoint,
)
from integration_hub.modules.integration.domain.value_objects.auth_credentials import (
    AuthCredentials,
)
from integration_hub.modules.integration.domain.value_objects.data_schema import (
    DataSchema,
)


@dataclass(frozen=True)
class RateLimits:
    requests_per_minute: int
    requests_per_hour: int

    def problems(self) -> list[str]:
        problems = []
        if self.requests_per_minute <= 0:
            problems.append("Requests per minute must be positive")
        if self.requests_per_hour <= 0:
            problems.append("Requests per hour must be positive")
        return problems

    def to_dict(self) -> dict[str, int]:
        return {
            "requestsPerMinute": self.requests_per_minute,
            "requestsPerHour": self.requests_per_hour,
        }


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int
    backoff_multiplier: float
    max_delay_ms: int

    def problems(self) -> list[str]:
        problems = []
        if self.max_attempts <= 0:
            problems.append("Retry max attempts must be positive")
        if self.backoff_multiplier <= 0:
            problems.append("Retry backoff multiplier must be positive")
        if self.max_delay_ms <= 0:
            problems.append("Retry max delay must be positive")
        return problems

    def delay_for_attempt(self, attempt: int, base_delay_ms: int = 1000) -> int:
        """Delay in milliseconds before retry ``attempt`` (1-based)."""
        delay = base_delay_ms * (self.backoff_multiplier ** max(attempt - 1, 0))
        return int(min(delay, self.max_delay_ms))

    def to_dict(self) -> dict[str, Any]:
        return {
            "maxAttempts": self.max_attempts,
            "backoffMultiplier": self.backoff_multiplier,
            "maxDelay": self.max_delay_ms,
        }


class IntegrationConfig(ValueObject):
    """What an integration connects to and how.

    A draft configuration may be incomplete; ``problems()`` lists what
    prevents activation.
    """

    def __init__(
        self,
        integration_type: IntegrationType,
        endpoints: list[ApiEndpoint] | None = None,
        auth: AuthCredentials | None = None,
        schema: DataSchema | None = None,
        rate_limits: RateLimits | None = None,
        retry_policy: RetryPolicy | None = None,
        timeout_ms: int | None = None,
    ):
        super().__init__()
        if integration_type is not None and not isinstance(
            integration_type, IntegrationType
        ):
            integration_type = IntegrationType(integration_type)
        for endpoint in endpoints or []:
            if not isinstance(endpoint, ApiEndpoint):
                raise ValidationError("Endpoints must be ApiEndpoint instances")
        if auth is not None and not isinstance(auth, AuthCredentials):
            raise ValidationError("auth must be AuthCredentials")
        if timeout_ms is not None and timeout_ms <= 0:
            raise ValidationError("Timeout must be positive", field="timeout")

        self.integration_type = integration_type
        self.endpoints = tuple(endpoints or [])
        self.auth = auth
        self.schema = schema
        self.rate_limits = rate_limits
        self.retry_policy = retry_policy
        self.timeout_ms = timeout_ms
        self._freeze()

    def problems(self) -> list[str]:
        problems = []
        if self.integration_type is None:
            problems.append("Integration type is required")
        if not self.endpoints:
            problems.append("At least one endpoint is required")
        if self.auth is None:
            problems.append("Authentication credentials are required")
        if self.rate_limits is not None:
            problems.extend(self.rate_limits.problems())
        if self.retry_policy is not None:
            problems.extend(self.retry_policy.problems())
        return problems

    def with_changes(self, **changes: Any) -> "IntegrationConfig":
        values = {
            "integration_type": self.integration_type,
            "endpoints": list(self.endpoints),
            "auth": self.auth,
            "schema": self.schema,
            "rate_limits": self.rate_limits,
            "retry_policy": self.retry_policy,
            "timeout_ms": self.timeout_ms,
        }
        values.update(changes)
        return IntegrationConfig(**values)

    def to_dict(self, include_secrets: bool = False) -> dict[str, Any]:
        return {
            "type": self.integration_type.value if self.integration_type else None,
            "endpoints": [endpoint.to_dict() for endpoint in self.endpoints],
            "auth": self.auth.to_dict(include_secrets) if self.auth else None,
            "schema": self.schema.to_dict() if self.schema else None,
            "rateLimits": self.rate_limits.to_dict() if self.rate_limits else None,
            "retryPolicy": self.retry_policy.to_dict() if self.retry_policy else None,
            "timeout": self.timeout_ms,
        }

    def __str__(self) -> str:
        return f"{self.integration_type} config with {len(self.endpoints)} endpoint(s)"


@dataclass(frozen=True)
class IntegrationMetrics:
    """Cumulative execution metrics. Replaced wholesale on every execution."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    average_response_time: float = 0.0
    average_success_response_time: float = 0.0
    uptime: float = 100.0
    last_executed_at: datetime | None = None
    last_success_at: datetime | None = None
    last_failure_at: datetime | None = None
    last_error_message: str | None = None

    @property
    def failure_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.failed_requests / self.total_requests * 100

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 100.0
        return self.successful_requests / self.total_requests * 100

    def record(
        self,
        success: bool,
        response_time: float,
        error_message: str | None = None,
        at: datetime | None = None,
    ) -> "IntegrationMetrics":
        at = at or datetime.now(UTC)
        total = self.total_requests + 1
        successful = self.successful_requests + (1 if success else 0)
        failed = self.failed_requests + (0 if success else 1)
        average = (self.average_response_time * (total - 1) + response_time) / total
        success_average = self.average_success_response_time
        if success:
            success_average = (success_average * (successful - 1) + response_time) / successful

        return replace(
            self,
            total_requests=total,
            successful_requests=successful,
            failed_requests=failed,
            average_response_time=average,
            average_success_response_time=success_average,
            uptime=successful / total * 100,
            last_executed_at=at,
            last_success_at=at if success else self.last_success_at,
            last_failure_at=self.last_failure_at if success else at,
            last_error_message=self.last_error_message if success else error_message,
        )

    def to_dict(self) -> dict[str, Any]:
        def iso(value: datetime | None) -> str | None:
            return value.isoformat() if value else None

        return {
            "totalRequests": self.total_requests,
            "successfulRequests": self.successful_requests,
            "failedRequests": self.failed_requests,
            "averageResponseTime": self.average_response_time,
            "averageSuccessResponseTime": self.average_success_response_time,
            "uptime": self.uptime,
            "lastExecutedAt": iso(self.last_executed_at),
            "lastSuccessAt": iso(self.last_success_at),
            "lastFailureAt": iso(self.last_failure_at),
            "lastErrorMessage": self.last_error_message,
        }
