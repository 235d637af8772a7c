"""Integration execution service.

Runs one execution of an integration end to end: validation, outbound
calls, optional transformation of the response and recording of the
outcome on the integration's metrics. Failures are captured in the result
rather than raised, and are classified from their message text.
"""

import json
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from integration_hub.core.domain.base import DomainService
from integration_hub.core.errors import IntegrationHubError, ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.domain.enums import (
    ExecutionErrorType,
    ExecutionTrigger,
    HealthStatus,
    IntegrationStatus,
)
from integration_hub.modules.integration.domain.errors import (
    ConnectionFailedError,
    DataTransformationFailedError,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    IHttpTransport,
    TransportResponse,
)
from integration_hub.modules.integration.domain.services.data_transformation import (
    DataTransformationService,
)
from integration_hub.modules.integration.domain.value_objects import ApiEndpoint

if TYPE_CHECKING:
    from integration_hub.modules.integration.domain.aggregates import (
        DataMapping,
        Integration,
    )
    from integration_hub.modules.integration.domain.entities import ApiConnection

logger = get_logger(__name__)

SLOW_RESPONSE_MS = 2000
STALE_AFTER = timedelta(days=7)

# Checked in order; the first matching group wins.
_ERROR_KEYWORDS: list[tuple[ExecutionErrorType, tuple[str, ...]]] = [
    (ExecutionErrorType.TIMEOUT, ("timeout", "timed out")),
    (ExecutionErrorType.AUTHENTICATION, ("auth", "unauthorized", "forbidden")),
    (ExecutionErrorType.RATE_LIMIT, ("rate limit", "too many requests")),
    (ExecutionErrorType.CONNECTION, ("connection", "connect", "network", "unreachable")),
    (ExecutionErrorType.TRANSFORMATION, ("transform", "mapping", "schema")),
    (ExecutionErrorType.VALIDATION, ("validation", "invalid")),
]

_UNRECOVERABLE = ("unauthorized", "forbidden", "not found", "invalid schema")


def generate_execution_id() -> str:
    return f"exec_{int(time.time() * 1000)}_{uuid4().hex[:9]}"


def classify_error(message: str) -> ExecutionErrorType:
    lowered = (message or "").lower()
    for error_type, keywords in _ERROR_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return error_type
    return ExecutionErrorType.CONNECTION


def is_recoverable(message: str) -> bool:
    lowered = (message or "").lower()
    return not any(keyword in lowered for keyword in _UNRECOVERABLE)


# =====================================================================================
# RESULT TYPES
# =====================================================================================


@dataclass(frozen=True)
class ExecutionContext:
    """Who triggered an execution and with what payload."""

    integration_id: UUID
    user_id: UUID
    trigger: ExecutionTrigger = ExecutionTrigger.MANUAL
    request_data: Any = None
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ExecutionErrorDetail:
    step: str
    type: ExecutionErrorType
    message: str
    recoverable: bool
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, step: str, error: Exception) -> "ExecutionErrorDetail":
        message = error.message if isinstance(error, IntegrationHubError) else str(error)
        details = dict(error.details) if isinstance(error, IntegrationHubError) else {}
        return cls(step, classify_error(message), message, is_recoverable(message), details)

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "type": self.type.value,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": dict(self.details),
        }


@dataclass
class ExecutionMetrics:
    network_time: float = 0.0
    transformation_time: float = 0.0
    validation_time: float = 0.0
    total_response_time: float = 0.0
    bytes_transferred: int = 0
    records_processed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "networkTime": self.network_time,
            "transformationTime": self.transformation_time,
            "validationTime": self.validation_time,
            "totalResponseTime": self.total_response_time,
            "bytesTransferred": self.bytes_transferred,
            "recordsProcessed": self.records_processed,
        }


@dataclass
class ExecutionResult:
    success: bool
    execution_id: str
    start_time: datetime
    end_time: datetime
    requests_count: int = 0
    response_data: Any = None
    transformed_data: Any = None
    errors: list[ExecutionErrorDetail] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    metrics: ExecutionMetrics = field(default_factory=ExecutionMetrics)
    # Response time folded into the integration's metrics for this run.
    recorded_response_time: float = 0.0

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time).total_seconds() * 1000

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "executionId": self.execution_id,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "duration": self.duration_ms,
            "requestsCount": self.requests_count,
            "responseData": self.response_data,
            "transformedData": self.transformed_data,
            "errors": [error.to_dict() for error in self.errors],
            "warnings": list(self.warnings),
            "metrics": self.metrics.to_dict(),
        }


@dataclass(frozen=True)
class IntegrationValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    can_execute: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "canExecute": self.can_execute,
        }


@dataclass(frozen=True)
class ConnectionTestResult:
    success: bool
    response_time: float
    status_code: int | None = None
    error: str | None = None
    execution_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "responseTime": self.response_time,
            "statusCode": self.status_code,
            "error": self.error,
            "executionId": self.execution_id,
        }


@dataclass(frozen=True)
class IntegrationHealth:
    status: HealthStatus
    score: int
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "score": self.score,
            "issues": list(self.issues),
            "recommendations": list(self.recommendations),
        }


@dataclass
class _CallOutcome:
    data: Any = None
    requests_count: int = 0
    bytes_transferred: int = 0
    total_response_time: float = 0.0

    @property
    def average_response_time(self) -> float:
        if self.requests_count == 0:
            return 0.0
        return self.total_response_time / self.requests_count


# =====================================================================================
# SERVICE
# =====================================================================================


class IntegrationExecutionService(DomainService):
    """Orchestrates validation, outbound calls and transformation.

    Args:
        transport: Outbound HTTP transport. Without one every call is a dry
            run that echoes the request payload.
        transformation_service: Service used to apply data mappings
    """

    def __init__(
        self,
        transport: IHttpTransport | None = None,
        transformation_service: DataTransformationService | None = None,
    ):
        self._transport = transport
        self._transformation = transformation_service or DataTransformationService()

    # Validation

    def validate_integration(
        self, integration: "Integration", now: datetime | None = None
    ) -> IntegrationValidationResult:
        errors: list[str] = []
        warnings: list[str] = []
        config = integration.config

        if integration.status == IntegrationStatus.PAUSED:
            warnings.append("Integration is currently paused")
        if not integration.is_active():
            errors.append("Integration is not active")
        if not integration.is_enabled:
            errors.append("Integration is disabled")
        if not integration.can_execute(now):
            errors.append("Integration cannot be executed (check credentials and status)")

        errors.extend(config.problems())

        if config.auth is not None:
            if config.auth.is_expired(now):
                errors.append("Authentication credentials have expired")
            elif config.auth.needs_refresh(now):
                warnings.append("Authentication credentials need refresh soon")

        return IntegrationValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            can_execute=not errors and integration.can_execute(now),
        )

    # Execution

    async def execute_integration(
        self,
        integration: "Integration",
        context: ExecutionContext,
        connections: list["ApiConnection"] | None = None,
        mapping: "DataMapping | None" = None,
        now: datetime | None = None,
    ) -> ExecutionResult:
        """Execute an integration once and record the outcome on it.

        Never raises for execution failures; they are reported in the
        result's ``errors``.
        """
        execution_id = generate_execution_id()
        start_time = datetime.now(UTC)
        metrics = ExecutionMetrics()
        result = ExecutionResult(False, execution_id, start_time, start_time, metrics=metrics)
        step = "validation"

        logger.info(
            "Executing integration",
            integration_id=str(integration.id),
            execution_id=execution_id,
            trigger=context.trigger.value,
        )

        try:
            started = time.perf_counter()
            validation = self.validate_integration(integration, now)
            metrics.validation_time = (time.perf_counter() - started) * 1000
            result.warnings.extend(validation.warnings)
            if not validation.can_execute:
                raise ValidationError(
                    "Integration validation failed: " + ", ".join(validation.errors)
                )

            step = "network"
            started = time.perf_counter()
            outcome = await self._execute_calls(integration, context, connections or [], now)
            metrics.network_time = (time.perf_counter() - started) * 1000
            metrics.total_response_time = outcome.total_response_time
            metrics.bytes_transferred = outcome.bytes_transferred
            result.requests_count = outcome.requests_count
            result.response_data = outcome.data

            if mapping is not None and outcome.data is not None:
                step = "transformation"
                if not mapping.is_active:
                    raise DataTransformationFailedError(["Data mapping is not active"])
                started = time.perf_counter()
                transformation = self._transformation.transform(mapping, outcome.data)
                metrics.transformation_time = (time.perf_counter() - started) * 1000
                if not transformation.success:
                    raise DataTransformationFailedError(transformation.errors)
                result.transformed_data = transformation.data
                result.warnings.extend(transformation.warnings)
                metrics.records_processed = (
                    len(transformation.data) if isinstance(transformation.data, list) else 1
                )

            result.recorded_response_time = outcome.average_response_time
            integration.record_execution(True, result.recorded_response_time)
            result.success = True

        except IntegrationHubError as e:
            result.errors.append(ExecutionErrorDetail.from_exception(step, e))
        except Exception as e:
            logger.exception(
                "Unexpected error during integration execution",
                integration_id=str(integration.id),
                execution_id=execution_id,
            )
            result.errors.append(ExecutionErrorDetail.from_exception(step, e))

        if result.errors:
            result.recorded_response_time = 0.0
            integration.record_execution(
                False, result.recorded_response_time, result.errors[0].message
            )

        result.end_time = datetime.now(UTC)
        logger.info(
            "Integration execution finished",
            integration_id=str(integration.id),
            execution_id=execution_id,
            success=result.success,
            duration_ms=result.duration_ms,
            requests_count=result.requests_count,
        )
        return result

    async def _execute_calls(
        self,
        integration: "Integration",
        context: ExecutionContext,
        connections: list["ApiConnection"],
        now: datetime | None,
    ) -> _CallOutcome:
        outcome = _CallOutcome()
        results: list[Any] = []

        if not connections:
            for endpoint in integration.config.endpoints:
                headers = {**endpoint.headers, **integration.config.auth.to_auth_header()}
                response = await self._send(endpoint, headers, context)
                results.append(self._accept(endpoint, response, outcome))
        else:
            for connection in connections:
                if connection.is_rate_limited(now):
                    raise ConnectionFailedError(
                        connection.endpoint.host,
                        "rate limit exhausted until "
                        + connection.rate_limit_info.reset_time.isoformat(),
                    )
                if not connection.can_make_request(now):
                    raise ConnectionFailedError(
                        connection.endpoint.host,
                        f"connection is {connection.status.value}, not ready for requests",
                    )
                headers = {**connection.get_headers(), **context.headers}
                response = await self._send(connection.endpoint, headers, context)
                connection.record_rate_limit_from_response(response.headers, now)
                results.append(self._accept(connection.endpoint, response, outcome))

        outcome.data = results[0] if len(results) == 1 else results
        return outcome

    async def _send(
        self, endpoint: ApiEndpoint, headers: dict[str, str], context: ExecutionContext
    ) -> TransportResponse:
        body = context.request_data if endpoint.method.has_body else None
        if self._transport is None:
            return self._dry_run(endpoint, context)
        started = time.perf_counter()
        response = await self._transport.send(endpoint, {**headers, **context.headers}, body)
        if response.elapsed_ms is None:
            response = TransportResponse(
                response.status_code,
                response.body,
                response.headers,
                (time.perf_counter() - started) * 1000,
                response.bytes_received,
            )
        return response

    @staticmethod
    def _dry_run(endpoint: ApiEndpoint, context: ExecutionContext) -> TransportResponse:
        data = context.request_data
        if data is None:
            data = {
                "message": "Dry run",
                "endpoint": endpoint.url,
                "timestamp": datetime.now(UTC).isoformat(),
            }
        size = len(json.dumps(data, default=str).encode("utf-8"))
        return TransportResponse(200, data, {}, 0.0, size)

    @staticmethod
    def _accept(
        endpoint: ApiEndpoint, response: TransportResponse, outcome: _CallOutcome
    ) -> Any:
        outcome.requests_count += 1
        outcome.total_response_time += response.elapsed_ms or 0.0
        outcome.bytes_transferred += response.bytes_received

        status = response.status_code
        if status in (401, 403):
            reason = "unauthorized" if status == 401 else "forbidden"
            raise ConnectionFailedError(endpoint.host, f"{reason} (HTTP {status})", status)
        if status == 404:
            raise ConnectionFailedError(endpoint.host, "resource not found (HTTP 404)", status)
        if status == 429:
            raise ConnectionFailedError(endpoint.host, "rate limit exceeded (HTTP 429)", status)
        if not response.is_success:
            raise ConnectionFailedError(endpoint.host, f"HTTP {status}", status)
        return response.body

    # Connection test

    async def test_integration_connection(
        self,
        integration: "Integration",
        connections: list["ApiConnection"] | None = None,
        now: datetime | None = None,
    ) -> ConnectionTestResult:
        """Probe the integration's connectivity and record it as an execution."""
        execution_id = generate_execution_id()
        started = time.perf_counter()
        status_code: int | None = None

        try:
            if not integration.config.endpoints:
                raise ConnectionFailedError(
                    integration.name, "no endpoints configured for testing"
                )

            if connections:
                for connection in connections:
                    test = await connection.test_connection(self._transport, now)
                    status_code = test.status_code
                    if not test.success:
                        raise ConnectionFailedError(
                            connection.endpoint.host,
                            test.error_message or "connection test failed",
                            test.status_code,
                        )
            else:
                endpoint = integration.config.endpoints[0]
                headers = dict(endpoint.headers)
                if integration.config.auth is not None:
                    headers.update(integration.config.auth.to_auth_header())
                context = ExecutionContext(
                    integration.id, integration.user_id, ExecutionTrigger.TEST
                )
                response = await self._send(endpoint, headers, context)
                status_code = response.status_code
                self._accept(endpoint, response, _CallOutcome())

        except IntegrationHubError as e:
            response_time = (time.perf_counter() - started) * 1000
            integration.record_execution(False, response_time, e.message)
            return ConnectionTestResult(
                False, response_time, status_code, e.message, execution_id
            )

        response_time = (time.perf_counter() - started) * 1000
        integration.record_execution(True, response_time)
        return ConnectionTestResult(True, response_time, status_code or 200, None, execution_id)

    # Health

    def get_integration_health(
        self, integration: "Integration", now: datetime | None = None
    ) -> IntegrationHealth:
        now = now or datetime.now(UTC)
        report = integration.get_health_status(now)
        metrics = integration.metrics
        score = 100
        issues = list(report.issues)
        recommendations: list[str] = []

        if metrics.total_requests > 0:
            success_rate = metrics.success_rate
            if success_rate < 50:
                score -= 40
                issues.append(f"Low success rate: {success_rate:.1f}%")
                recommendations.append("Review integration configuration and error logs")
            elif success_rate < 90:
                score -= 15
                issues.append(f"Success rate below optimal: {success_rate:.1f}%")
                recommendations.append("Monitor integration performance closely")

            # Latency and staleness count successful executions only.
            if metrics.average_success_response_time > SLOW_RESPONSE_MS:
                score -= 10
                issues.append("Response time above threshold")
                recommendations.append("Optimize API calls or increase timeout values")

        auth = integration.config.auth
        if auth is not None and auth.is_expired(now):
            score -= 50
            recommendations.append("Refresh authentication credentials immediately")
        elif auth is not None and auth.needs_refresh(now):
            score -= 10
            recommendations.append("Schedule credential refresh soon")

        if metrics.last_success_at and now - metrics.last_success_at > STALE_AFTER:
            score -= 15
            recommendations.append(
                "Integration hasn't succeeded recently - verify it's still needed"
            )

        score = max(0, score)
        return IntegrationHealth(HealthStatus.from_score(score), score, issues, recommendations)

    def __str__(self) -> str:
        return "IntegrationExecutionService"
