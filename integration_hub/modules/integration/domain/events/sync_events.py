"""Sync job execution events."""

from datetime import datetime
from uuid import UUID

from integration_hub.core.domain.base import DomainEvent


class SyncJobStarted(DomainEvent):
    def __init__(self, sync_job_id: UUID, integration_id: UUID, is_retry: bool):
        super().__init__(sync_job_id)
        self.integration_id = integration_id
        self.is_retry = is_retry

    def __str__(self) -> str:
        return f"Sync job {self.aggregate_id} started"


class SyncJobCompleted(DomainEvent):
    def __init__(self, sync_job_id: UUID, integration_id: UUID, records_processed: int):
        super().__init__(sync_job_id)
        self.integration_id = integration_id
        self.records_processed = records_processed

    def __str__(self) -> str:
        return f"Sync job {self.aggregate_id} completed"


class SyncJobFailed(DomainEvent):
    """Raised on every failed run; ``will_retry`` tells whether a retry was scheduled."""

    def __init__(
        self,
        sync_job_id: UUID,
        integration_id: UUID,
        retry_count: int,
        will_retry: bool,
        next_run_at: datetime | None,
    ):
        super().__init__(sync_job_id)
        self.integration_id = integration_id
        self.retry_count = retry_count
        self.will_retry = will_retry
        self.next_run_at = next_run_at

    def __str__(self) -> str:
        return f"Sync job {self.aggregate_id} failed (retry {self.retry_count})"
