"""Sync job aggregate.

Lifecycle::

    pending -> running -> completed
                       -> failed -> (retry) pending
                       -> cancelled
    running <-> paused

Failed runs are retried with exponential backoff until ``max_retries`` is
exhausted, after which the job stays ``failed`` until started again.
"""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from integration_hub.core.domain.base import AggregateRoot
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.enums import (
    ConflictResolution,
    SyncDirection,
    SyncJobStatus,
    SyncPhase,
)
from integration_hub.modules.integration.domain.errors import (
    InvalidStateTransitionError,
)
from integration_hub.modules.integration.domain.events import (
    SyncJobCompleted,
    SyncJobFailed,
    SyncJobStarted,
)
from integration_hub.modules.integration.domain.value_objects import (
    DataSchema,
    SyncError,
    SyncProgress,
    SyncResult,
    SyncSchedule,
)

MAX_RESULTS = 50
MIN_BATCH_SIZE, MAX_BATCH_SIZE, DEFAULT_BATCH_SIZE = 1, 10_000, 100
MIN_TIMEOUT_MS, MAX_TIMEOUT_MS, DEFAULT_TIMEOUT_MS = 1, 3_600_000, 300_000
MAX_RETRIES_LIMIT, DEFAULT_MAX_RETRIES = 10, 3
RETRY_BASE_DELAY_MS = 60_000


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(UTC)


def retry_delay(retry_count: int) -> timedelta:
    """Backoff before retry number ``retry_count`` (1-based)."""
    return timedelta(milliseconds=RETRY_BASE_DELAY_MS * 2 ** max(retry_count - 1, 0))


class SyncJob(AggregateRoot):
    """Schedulable synchronisation between an integration and a target."""

    def __init__(
        self,
        integration_id: UUID,
        name: str,
        direction: SyncDirection,
        source_schema: DataSchema,
        target_schema: DataSchema,
        schedule: SyncSchedule | None = None,
        description: str | None = None,
        mapping_id: UUID | None = None,
        conflict_resolution: ConflictResolution = ConflictResolution.SOURCE_WINS,
        batch_size: int = DEFAULT_BATCH_SIZE,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        filters: dict[str, Any] | None = None,
        entity_id: UUID | None = None,
    ):
        super().__init__(entity_id)
        self._integration_id = integration_id
        self._name = self._validate_name(name)
        self._description = (description or "").strip()
        self._direction = SyncDirection(direction)
        self._source_schema = source_schema
        self._target_schema = target_schema
        self._mapping_id = mapping_id
        self._schedule = schedule or SyncSchedule.manual()
        self._status = SyncJobStatus.PENDING
        self._conflict_resolution = ConflictResolution(conflict_resolution)
        self._batch_size = self._validate_batch_size(batch_size)
        self._timeout_ms = self._validate_timeout(timeout_ms)
        self._max_retries = self._validate_max_retries(max_retries)
        self._retry_count = 0
        self._results: list[SyncResult] = []
        self._current_progress: SyncProgress | None = None
        self._filters = dict(filters or {})
        self._is_enabled = True
        self._last_run_at: datetime | None = None
        self._next_run_at: datetime | None = None

    @classmethod
    def create(
        cls,
        integration_id: UUID,
        name: str,
        direction: SyncDirection,
        source_schema: DataSchema,
        target_schema: DataSchema,
        schedule: SyncSchedule | None = None,
        now: datetime | None = None,
        **options: Any,
    ) -> "SyncJob":
        job = cls(
            integration_id, name, direction, source_schema, target_schema, schedule, **options
        )
        job._calculate_next_run(now)
        return job

    # Validation helpers

    @staticmethod
    def _validate_name(name: str) -> str:
        if not name or not name.strip():
            raise ValidationError("Sync job name cannot be empty", field="name")
        return name.strip()

    @staticmethod
    def _validate_batch_size(batch_size: int) -> int:
        if not MIN_BATCH_SIZE <= batch_size <= MAX_BATCH_SIZE:
            raise ValidationError(
                f"Batch size must be between {MIN_BATCH_SIZE} and {MAX_BATCH_SIZE}",
                field="batch_size",
            )
        return batch_size

    @staticmethod
    def _validate_timeout(timeout_ms: int) -> int:
        if not MIN_TIMEOUT_MS <= timeout_ms <= MAX_TIMEOUT_MS:
            raise ValidationError(
                f"Timeout must be between {MIN_TIMEOUT_MS} and {MAX_TIMEOUT_MS} ms",
                field="timeout",
            )
        return timeout_ms

    @staticmethod
    def _validate_max_retries(max_retries: int) -> int:
        if not 0 <= max_retries <= MAX_RETRIES_LIMIT:
            raise ValidationError(
                f"Max retries must be between 0 and {MAX_RETRIES_LIMIT}",
                field="max_retries",
            )
        return max_retries

    # Read-only state

    @property
    def integration_id(self) -> UUID:
        return self._integration_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def direction(self) -> SyncDirection:
        return self._direction

    @property
    def source_schema(self) -> DataSchema:
        return self._source_schema

    @property
    def target_schema(self) -> DataSchema:
        return self._target_schema

    @property
    def mapping_id(self) -> UUID | None:
        return self._mapping_id

    @property
    def schedule(self) -> SyncSchedule:
        return self._schedule

    @property
    def status(self) -> SyncJobStatus:
        return self._status

    @property
    def conflict_resolution(self) -> ConflictResolution:
        return self._conflict_resolution

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def results(self) -> list[SyncResult]:
        return list(self._results)

    @property
    def current_progress(self) -> SyncProgress | None:
        return self._current_progress

    @property
    def filters(self) -> dict[str, Any]:
        return dict(self._filters)

    @property
    def is_enabled(self) -> bool:
        return self._is_enabled

    @property
    def last_run_at(self) -> datetime | None:
        return self._last_run_at

    @property
    def next_run_at(self) -> datetime | None:
        return self._next_run_at

    # Scheduling

    def can_run(self) -> bool:
        return (
            self._is_enabled
            and self._schedule.enabled
            and self._status not in {SyncJobStatus.RUNNING, SyncJobStatus.CANCELLED}
        )

    def should_run_now(self, now: datetime | None = None) -> bool:
        if not self.can_run() or self._status == SyncJobStatus.PAUSED:
            return False
        if self._next_run_at is None:
            return False
        return _now(now) >= self._next_run_at

    def _calculate_next_run(self, now: datetime | None = None) -> None:
        if not self._is_enabled:
            self._next_run_at = None
            return
        self._next_run_at = self._schedule.next_run_after(_now(now))

    # Lifecycle

    def start(self, now: datetime | None = None) -> None:
        """Begin a run.

        A start from ``pending`` is a scheduled retry and keeps the retry
        count; any other start resets it.

        Raises:
            InvalidStateTransitionError: If the job cannot run
        """
        if not self.can_run() or self._status == SyncJobStatus.PAUSED:
            state = self._status.value if self._is_enabled else "disabled"
            raise InvalidStateTransitionError("sync job", state, "start")

        is_retry = self._status == SyncJobStatus.PENDING and self._retry_count > 0
        if self._status != SyncJobStatus.PENDING:
            self._retry_count = 0

        self._status = SyncJobStatus.RUNNING
        self._last_run_at = _now(now)
        self._current_progress = SyncProgress(SyncPhase.INITIALIZING)
        self.add_event(SyncJobStarted(self.id, self._integration_id, is_retry))

    def run_manually(self, now: datetime | None = None) -> None:
        if not self.can_run():
            raise InvalidStateTransitionError("sync job", self._status.value, "run")
        self._retry_count = 0
        self.start(now)

    def _require_running(self, action: str) -> None:
        if self._status not in {SyncJobStatus.RUNNING, SyncJobStatus.PAUSED}:
            raise InvalidStateTransitionError("sync job", self._status.value, action)

    def update_progress(self, progress: SyncProgress) -> None:
        if self._status != SyncJobStatus.RUNNING:
            raise InvalidStateTransitionError("sync job", self._status.value, "report progress for")
        self._current_progress = progress
        self.mark_modified()

    def pause(self) -> None:
        if self._status != SyncJobStatus.RUNNING:
            raise InvalidStateTransitionError("sync job", self._status.value, "pause")
        self._status = SyncJobStatus.PAUSED
        self.mark_modified()

    def resume(self) -> None:
        if self._status != SyncJobStatus.PAUSED:
            raise InvalidStateTransitionError("sync job", self._status.value, "resume")
        self._status = SyncJobStatus.RUNNING
        self.mark_modified()

    def _append_result(self, result: SyncResult) -> None:
        self._results.append(result)
        if len(self._results) > MAX_RESULTS:
            self._results = self._results[-MAX_RESULTS:]

    def complete(self, result: SyncResult, now: datetime | None = None) -> None:
        self._require_running("complete")
        self._append_result(result)
        self._status = SyncJobStatus.COMPLETED
        self._retry_count = 0
        self._current_progress = None
        self._calculate_next_run(now or result.end_time)
        self.add_event(
            SyncJobCompleted(self.id, self._integration_id, result.records_processed)
        )

    def fail(
        self,
        errors: list[SyncError] | list[str],
        now: datetime | None = None,
        records_processed: int = 0,
        execution_id: str | None = None,
    ) -> bool:
        """Record a failed run and schedule a retry when one is left.

        Returns:
            True if a retry was scheduled
        """
        self._require_running("fail")
        now = _now(now)
        sync_errors = tuple(
            error if isinstance(error, SyncError) else SyncError(str(error), occurred_at=now)
            for error in errors
        )
        self._append_result(
            SyncResult(
                success=False,
                start_time=self._last_run_at or now,
                end_time=now,
                records_processed=records_processed,
                records_failed=max(len(sync_errors), 1),
                errors=sync_errors,
                execution_id=execution_id,
            )
        )
        self._current_progress = None

        will_retry = self._retry_count < self._max_retries
        if will_retry:
            self._retry_count += 1
            self._status = SyncJobStatus.PENDING
            self._next_run_at = now + retry_delay(self._retry_count)
        else:
            self._status = SyncJobStatus.FAILED
            self._next_run_at = None

        self.add_event(
            SyncJobFailed(
                self.id, self._integration_id, self._retry_count, will_retry, self._next_run_at
            )
        )
        return will_retry

    def cancel(self) -> None:
        if self._status not in {SyncJobStatus.RUNNING, SyncJobStatus.PENDING}:
            raise InvalidStateTransitionError("sync job", self._status.value, "cancel")
        self._status = SyncJobStatus.CANCELLED
        self._current_progress = None
        self._next_run_at = None
        self.mark_modified()

    # Editing

    def update_details(self, name: str | None = None, description: str | None = None) -> None:
        if name is not None:
            self._name = self._validate_name(name)
        if description is not None:
            self._description = description.strip()
        self.mark_modified()

    def update_schedule(self, schedule: SyncSchedule, now: datetime | None = None) -> None:
        if not isinstance(schedule, SyncSchedule):
            raise ValidationError("schedule must be a SyncSchedule")
        self._schedule = schedule
        self._calculate_next_run(now)
        self.mark_modified()

    def update_configuration(
        self,
        direction: SyncDirection | None = None,
        conflict_resolution: ConflictResolution | None = None,
        batch_size: int | None = None,
        timeout_ms: int | None = None,
        max_retries: int | None = None,
        filters: dict[str, Any] | None = None,
        mapping_id: UUID | None = None,
    ) -> None:
        # Validate everything before assigning anything.
        new_batch = self._validate_batch_size(batch_size) if batch_size is not None else None
        new_timeout = self._validate_timeout(timeout_ms) if timeout_ms is not None else None
        new_retries = (
            self._validate_max_retries(max_retries) if max_retries is not None else None
        )

        if direction is not None:
            self._direction = SyncDirection(direction)
        if conflict_resolution is not None:
            self._conflict_resolution = ConflictResolution(conflict_resolution)
        if new_batch is not None:
            self._batch_size = new_batch
        if new_timeout is not None:
            self._timeout_ms = new_timeout
        if new_retries is not None:
            self._max_retries = new_retries
        if filters is not None:
            self._filters = dict(filters)
        if mapping_id is not None:
            self._mapping_id = mapping_id
        self.mark_modified()

    def enable(self, now: datetime | None = None) -> None:
        self._is_enabled = True
        self._calculate_next_run(now)
        self.mark_modified()

    def disable(self) -> None:
        self._is_enabled = False
        self._next_run_at = None
        self.mark_modified()

    # Monitoring

    def needs_attention(self, now: datetime | None = None) -> bool:
        if not self._is_enabled:
            return False
        now = _now(now)

        recent = self._results[-5:]
        failures = sum(1 for r in recent if not r.success or r.records_failed > 0)
        if failures >= 3:
            return True

        if self._schedule.is_recurring and self._schedule.enabled and self._last_run_at:
            expected = self._schedule.expected_interval(now)
            if expected and now - self._last_run_at > expected * 2:
                return True

        if self._status == SyncJobStatus.RUNNING and self._last_run_at:
            if now - self._last_run_at > timedelta(milliseconds=self._timeout_ms * 2):
                return True

        return False

    def get_execution_statistics(self) -> dict[str, Any]:
        results = self._results
        if not results:
            return {
                "totalRuns": 0,
                "successfulRuns": 0,
                "failedRuns": 0,
                "successRate": 0.0,
                "averageDuration": 0.0,
                "averageRecordsProcessed": 0.0,
                "lastSuccessAt": None,
                "lastFailureAt": None,
            }

        successful = [r for r in results if r.success and r.records_failed == 0]
        failed = [r for r in results if not r.success or r.records_failed > 0]
        return {
            "totalRuns": len(results),
            "successfulRuns": len(successful),
            "failedRuns": len(failed),
            "successRate": len(successful) / len(results) * 100,
            "averageDuration": sum(r.duration_ms for r in results) / len(results),
            "averageRecordsProcessed": sum(r.records_processed for r in results) / len(results),
            "lastSuccessAt": successful[-1].end_time.isoformat() if successful else None,
            "lastFailureAt": failed[-1].end_time.isoformat() if failed else None,
        }

    def clone(self, new_name: str) -> "SyncJob":
        return SyncJob(
            integration_id=self._integration_id,
            name=new_name,
            direction=self._direction,
            source_schema=self._source_schema,
            target_schema=self._target_schema,
            schedule=self._schedule.with_enabled(False),
            description=f"Copy of {self._description or self._name}",
            mapping_id=self._mapping_id,
            conflict_resolution=self._conflict_resolution,
            batch_size=self._batch_size,
            timeout_ms=self._timeout_ms,
            max_retries=self._max_retries,
            filters=self._filters,
        )

    def to_dict(self) -> dict[str, Any]:
        def iso(value: datetime | None) -> str | None:
            return value.isoformat() if value else None

        return {
            "id": str(self.id),
            "integrationId": str(self._integration_id),
            "name": self._name,
            "description": self._description,
            "direction": self._direction.value,
            "sourceSchema": self._source_schema.to_dict(),
            "targetSchema": self._target_schema.to_dict(),
            "mappingId": str(self._mapping_id) if self._mapping_id else None,
            "schedule": self._schedule.to_dict(),
            "status": self._status.value,
            "conflictResolution": self._conflict_resolution.value,
            "batchSize": self._batch_size,
            "timeout": self._timeout_ms,
            "retryCount": self._retry_count,
            "maxRetries": self._max_retries,
            "results": [result.to_dict() for result in self._results],
            "currentProgress": (
                self._current_progress.to_dict() if self._current_progress else None
            ),
            "filters": dict(self._filters),
            "isEnabled": self._is_enabled,
            "lastRunAt": iso(self._last_run_at),
            "nextRunAt": iso(self._next_run_at),
            "version": self.version,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    def __str__(self) -> str:
        return f"SyncJob({self._name}, {self._status.value})"
