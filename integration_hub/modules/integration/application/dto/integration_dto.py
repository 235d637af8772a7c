"""Integration DTOs for the application layer.

Read-side shapes for list views, statistics and period metrics. Single
integrations are returned through ``Integration.to_dict``.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from integration_hub.modules.integration.domain.aggregates import Integration
from integration_hub.modules.integration.domain.enums import (
    HealthStatus,
    IntegrationStatus,
    IntegrationType,
)
from integration_hub.modules.integration.domain.value_objects import ExecutionRecord


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class IntegrationListItemDTO:
    """DTO for integration list items."""

    integration_id: UUID
    name: str
    description: str
    integration_type: IntegrationType | None
    status: IntegrationStatus
    tags: list[str]
    is_enabled: bool
    health_status: HealthStatus
    success_rate: float
    last_executed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(
        cls, integration: Integration, now: datetime | None = None
    ) -> "IntegrationListItemDTO":
        return cls(
            integration_id=integration.id,
            name=integration.name,
            description=integration.description,
            integration_type=integration.config.integration_type,
            status=integration.status,
            tags=list(integration.tags),
            is_enabled=integration.is_enabled,
            health_status=integration.get_health_status(now).status,
            success_rate=integration.metrics.success_rate,
            last_executed_at=integration.metrics.last_executed_at,
            created_at=integration.created_at,
            updated_at=integration.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.integration_id),
            "name": self.name,
            "description": self.description,
            "type": self.integration_type.value if self.integration_type else None,
            "status": self.status.value,
            "tags": list(self.tags),
            "isEnabled": self.is_enabled,
            "healthStatus": self.health_status.value,
            "successRate": self.success_rate,
            "lastExecutedAt": _iso(self.last_executed_at),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class IntegrationStatsDTO:
    """Aggregate counters over every integration of a user."""

    total: int
    enabled: int
    by_status: dict[str, int] = field(default_factory=dict)
    by_type: dict[str, int] = field(default_factory=dict)
    by_health: dict[str, int] = field(default_factory=dict)
    total_requests: int = 0
    successful_requests: int = 0

    @classmethod
    def from_integrations(
        cls, integrations: list[Integration], now: datetime | None = None
    ) -> "IntegrationStatsDTO":
        by_status = Counter(i.status.value for i in integrations)
        by_type = Counter(
            i.config.integration_type.value
            for i in integrations
            if i.config.integration_type is not None
        )
        by_health = Counter(i.get_health_status(now).status.value for i in integrations)
        return cls(
            total=len(integrations),
            enabled=sum(1 for i in integrations if i.is_enabled),
            by_status=dict(by_status),
            by_type=dict(by_type),
            by_health=dict(by_health),
            total_requests=sum(i.metrics.total_requests for i in integrations),
            successful_requests=sum(i.metrics.successful_requests for i in integrations),
        )

    @property
    def overall_success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "enabled": self.enabled,
            "byStatus": dict(self.by_status),
            "byType": dict(self.by_type),
            "byHealth": dict(self.by_health),
            "totalRequests": self.total_requests,
            "successfulRequests": self.successful_requests,
            "overallSuccessRate": self.overall_success_rate,
        }


@dataclass(frozen=True)
class IntegrationMetricsDTO:
    """Execution metrics of one integration over a period."""

    integration_id: UUID
    period: str
    since: datetime
    total_executions: int
    successful_executions: int
    failed_executions: int
    average_duration: float
    total_requests: int
    records_processed: int
    lifetime: dict[str, Any]

    @classmethod
    def from_history(
        cls,
        integration: Integration,
        period: str,
        since: datetime,
        records: list[ExecutionRecord],
    ) -> "IntegrationMetricsDTO":
        successful = sum(1 for record in records if record.success)
        durations = [record.duration_ms for record in records]
        return cls(
            integration_id=integration.id,
            period=period,
            since=since,
            total_executions=len(records),
            successful_executions=successful,
            failed_executions=len(records) - successful,
            average_duration=sum(durations) / len(durations) if durations else 0.0,
            total_requests=sum(record.requests_count for record in records),
            records_processed=sum(record.records_processed for record in records),
            lifetime=integration.metrics.to_dict(),
        )

    @property
    def success_rate(self) -> float:
        if self.total_executions == 0:
            return 0.0
        return self.successful_executions / self.total_executions * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "integrationId": str(self.integration_id),
            "period": self.period,
            "since": self.since.isoformat(),
            "until": datetime.now(UTC).isoformat(),
            "totalExecutions": self.total_executions,
            "successfulExecutions": self.successful_executions,
            "failedExecutions": self.failed_executions,
            "successRate": self.success_rate,
            "averageDuration": self.average_duration,
            "totalRequests": self.total_requests,
            "recordsProcessed": self.records_processed,
            "lifetime": dict(self.lifetime),
        }


@dataclass(frozen=True)
class IntegrationTypeDTO:
    integration_type: IntegrationType

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.integration_type.value,
            "displayName": self.integration_type.display_name,
            "description": self.integration_type.description,
            "supportsSync": self.integration_type.supports_sync,
        }
