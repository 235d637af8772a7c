"""Sync job DTOs."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from integration_hub.modules.integration.domain.aggregates import SyncJob
from integration_hub.modules.integration.domain.enums import SyncDirection, SyncJobStatus


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class SyncJobSummaryDTO:
    """DTO for sync job list items and the upcoming-runs view."""

    sync_job_id: UUID
    integration_id: UUID
    name: str
    status: SyncJobStatus
    direction: SyncDirection
    schedule: dict[str, Any]
    is_enabled: bool
    retry_count: int
    last_run_at: datetime | None
    next_run_at: datetime | None
    needs_attention: bool

    @classmethod
    def from_domain(cls, sync_job: SyncJob, now: datetime | None = None) -> "SyncJobSummaryDTO":
        return cls(
            sync_job_id=sync_job.id,
            integration_id=sync_job.integration_id,
            name=sync_job.name,
            status=sync_job.status,
            direction=sync_job.direction,
            schedule=sync_job.schedule.to_dict(),
            is_enabled=sync_job.is_enabled,
            retry_count=sync_job.retry_count,
            last_run_at=sync_job.last_run_at,
            next_run_at=sync_job.next_run_at,
            needs_attention=sync_job.needs_attention(now),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.sync_job_id),
            "integrationId": str(self.integration_id),
            "name": self.name,
            "status": self.status.value,
            "direction": self.direction.value,
            "schedule": dict(self.schedule),
            "isEnabled": self.is_enabled,
            "retryCount": self.retry_count,
            "lastRunAt": _iso(self.last_run_at),
            "nextRunAt": _iso(self.next_run_at),
            "needsAttention": self.needs_attention,
        }
