"""Stored outcome of one integration execution or connection test."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from integration_hub.modules.integration.domain.enums import ExecutionTrigger


@dataclass(frozen=True)
class ExecutionRecord:
    execution_id: str
    integration_id: UUID
    trigger: ExecutionTrigger
    success: bool
    start_time: datetime
    end_time: datetime
    requests_count: int = 0
    records_processed: int = 0
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def duration_ms(self) -> float:
        return (self.end_time - self.start_time).total_seconds() * 1000

    def to_dict(self) -> dict[str, Any]:
        return {
            "executionId": self.execution_id,
            "integrationId": str(self.integration_id),
            "trigger": self.trigger.value,
            "success": self.success,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "duration": self.duration_ms,
            "requestsCount": self.requests_count,
            "recordsProcessed": self.records_processed,
            "errors": list(self.errors),
        }
