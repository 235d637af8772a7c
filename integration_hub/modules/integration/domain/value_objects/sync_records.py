"""Records produced while a sync job runs."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from integration_hub.modules.integration.domain.enums import SyncPhase


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class SyncError:
    message: str
    record_id: str | None = None
    error_type: str = "sync"
    occurred_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "recordId": self.record_id,
            "errorType": self.error_type,
            "occurredAt": _iso(self.occurred_at),
        }


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one run of a sync job."""

    success: bool
    start_time: datetime
    end_time: datetime
    records_processed: int = 0
    records_succeeded: int = 0
    records_failed: int = 0
    records_skipped: int = 0
    conflicts: int = 0
    errors: tuple[SyncError, ...] = field(default_factory=tuple)
    execution_id: str | None = None

    @property
    def duration_ms(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "startTime": _iso(self.start_time),
            "endTime": _iso(self.end_time),
            "duration": self.duration_ms,
            "recordsProcessed": self.records_processed,
            "recordsSucceeded": self.records_succeeded,
            "recordsFailed": self.records_failed,
            "recordsSkipped": self.records_skipped,
            "conflicts": self.conflicts,
            "errors": [error.to_dict() for error in self.errors],
            "executionId": self.execution_id,
        }


@dataclass(frozen=True)
class SyncProgress:
    phase: SyncPhase
    total_records: int = 0
    processed_records: int = 0
    current_batch: int = 0
    total_batches: int = 0
    estimated_completion: datetime | None = None

    @property
    def percent_complete(self) -> float:
        if self.total_records == 0:
            return 0.0
        return min(self.processed_records / self.total_records * 100, 100.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "totalRecords": self.total_records,
            "processedRecords": self.processed_records,
            "currentBatch": self.current_batch,
            "totalBatches": self.total_batches,
            "percentComplete": self.percent_complete,
            "estimatedCompletion": _iso(self.estimated_completion),
        }
