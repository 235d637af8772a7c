"""
Test cases for the SyncJob aggregate.

Covers scheduling, the run lifecycle, bounded retries with exponential
backoff and execution statistics.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.aggregates import SyncJob
from integration_hub.modules.integration.domain.enums import (
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
    SyncProgress,
    SyncResult,
    SyncSchedule,
)
from integration_hub.tests.builders import order_schemas


def make_job(now, schedule=None, **options) -> SyncJob:
    source, target = order_schemas()
    return SyncJob.create(
        uuid4(),
        "Nightly orders",
        SyncDirection.PUSH,
        source,
        target,
        schedule=schedule,
        now=now,
        **options,
    )


def ok_result(now, records=10) -> SyncResult:
    return SyncResult(
        success=True,
        start_time=now,
        end_time=now + timedelta(seconds=2),
        records_processed=records,
        records_succeeded=records,
    )


class TestSyncJobCreation:
    """Test creating sync jobs."""

    def test_manual_job_has_no_next_run(self, now):
        """Test a manual schedule never fires on its own."""
        job = make_job(now)

        assert job.status == SyncJobStatus.PENDING
        assert job.next_run_at is None
        assert not job.should_run_now(now)

    def test_interval_job_is_scheduled(self, now):
        """Test an interval schedule sets the first run."""
        job = make_job(now, SyncSchedule.every(3_600_000))

        assert job.next_run_at == now + timedelta(hours=1)
        assert job.should_run_now(now + timedelta(hours=1))

    @pytest.mark.parametrize(
        "options",
        [{"batch_size": 0}, {"timeout_ms": 0}, {"max_retries": 11}, {"max_retries": -1}],
    )
    def test_invalid_options(self, now, options):
        """Test batch size, timeout and retry bounds."""
        with pytest.raises(ValidationError):
            make_job(now, **options)


class TestSyncJobLifecycle:
    """Test running, completing, pausing and cancelling."""

    def test_start_and_complete(self, now):
        """Test a successful run."""
        # Arrange
        job = make_job(now, SyncSchedule.every(600_000))

        # Act
        job.start(now)
        job.complete(ok_result(now), now + timedelta(seconds=2))

        # Assert
        assert job.status == SyncJobStatus.COMPLETED
        assert job.last_run_at == now
        assert job.next_run_at == now + timedelta(seconds=2, minutes=10)
        assert job.current_progress is None
        events = job.clear_events()
        assert [type(e) for e in events] == [SyncJobStarted, SyncJobCompleted]
        assert events[1].records_processed == 10

    def test_running_job_cannot_start_again(self, now):
        """Test a running job is not restarted."""
        job = make_job(now)
        job.start(now)

        with pytest.raises(InvalidStateTransitionError):
            job.start(now)

    def test_progress_only_while_running(self, now):
        """Test progress reports require a running job."""
        job = make_job(now)
        with pytest.raises(InvalidStateTransitionError):
            job.update_progress(SyncProgress(SyncPhase.FETCHING))

        job.start(now)
        job.update_progress(SyncProgress(SyncPhase.FETCHING, total_records=4, processed_records=1))

        assert job.current_progress.percent_complete == 25.0

    def test_pause_and_resume(self, now):
        """Test pause only from running and resume only from paused."""
        job = make_job(now)
        with pytest.raises(InvalidStateTransitionError):
            job.pause()

        job.start(now)
        job.pause()
        assert job.status == SyncJobStatus.PAUSED
        with pytest.raises(InvalidStateTransitionError):
            job.start(now)

        job.resume()
        assert job.status == SyncJobStatus.RUNNING

    def test_cancel(self, now):
        """Test cancelling clears the schedule and is terminal."""
        job = make_job(now, SyncSchedule.every(600_000))

        job.cancel()

        assert job.status == SyncJobStatus.CANCELLED
        assert job.next_run_at is None
        assert not job.can_run()
        with pytest.raises(InvalidStateTransitionError):
            job.cancel()

    def test_completed_job_cannot_be_cancelled(self, now):
        """Test cancel is only allowed while pending or running."""
        job = make_job(now)
        job.start(now)
        job.complete(ok_result(now))

        with pytest.raises(InvalidStateTransitionError):
            job.cancel()

    def test_disable(self, now):
        """Test a disabled job has no next run and cannot start."""
        job = make_job(now, SyncSchedule.every(600_000))

        job.disable()

        assert job.next_run_at is None
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            job.start(now)
        assert "disabled" in exc_info.value.message

        job.enable(now)
        assert job.next_run_at == now + timedelta(minutes=10)


class TestSyncJobRetries:
    """Test bounded retries with exponential backoff."""

    def test_failures_are_retried_with_backoff(self, now):
        """Test each failure schedules the next attempt further out."""
        job = make_job(now, max_retries=3)
        delays = []

        for _ in range(3):
            job.start(now)
            assert job.fail(["timeout"], now) is True
            delays.append(job.next_run_at - now)

        assert delays == [timedelta(minutes=1), timedelta(minutes=2), timedelta(minutes=4)]
        assert job.status == SyncJobStatus.PENDING
        assert job.retry_count == 3

    def test_retries_are_bounded(self, now):
        """Test max_retries + 1 failures leave the job failed."""
        job = make_job(now, max_retries=2)

        outcomes = []
        for _ in range(3):
            job.start(now)
            outcomes.append(job.fail(["boom"], now))

        assert outcomes == [True, True, False]
        assert job.status == SyncJobStatus.FAILED
        assert job.next_run_at is None
        assert job.retry_count == 2
        failed = [e for e in job.clear_events() if isinstance(e, SyncJobFailed)]
        assert [e.will_retry for e in failed] == [True, True, False]

    def test_retry_start_is_flagged(self, now):
        """Test a start from a scheduled retry keeps the retry count."""
        job = make_job(now)
        job.start(now)
        job.fail(["boom"], now)
        job.clear_events()

        job.start(now)

        assert job.retry_count == 1
        assert job.clear_events()[0].is_retry is True

    def test_manual_run_resets_retries(self, now):
        """Test a manual run resets the retry count."""
        job = make_job(now)
        job.start(now)
        job.fail(["boom"], now)

        job.run_manually(now)

        assert job.retry_count == 0

    def test_restart_after_terminal_failure(self, now):
        """Test a failed job can be started again with a reset retry count."""
        job = make_job(now, max_retries=0)
        job.start(now)
        assert job.fail(["boom"], now) is False

        job.start(now)

        assert job.status == SyncJobStatus.RUNNING
        assert job.retry_count == 0

    def test_complete_resets_retries(self, now):
        """Test success after a retry clears the count."""
        job = make_job(now)
        job.start(now)
        job.fail(["boom"], now)
        job.start(now)

        job.complete(ok_result(now))

        assert job.retry_count == 0


class TestSyncJobMonitoring:
    """Test statistics and attention rules."""

    def test_statistics(self, now):
        """Test run counts, rates and averages."""
        job = make_job(now, max_retries=5)
        job.start(now)
        job.complete(ok_result(now, records=10))
        job.start(now)
        job.fail(["boom"], now, records_processed=0)

        stats = job.get_execution_statistics()

        assert stats["totalRuns"] == 2
        assert stats["successfulRuns"] == 1
        assert stats["failedRuns"] == 1
        assert stats["successRate"] == 50.0
        assert stats["averageRecordsProcessed"] == 5.0
        assert stats["lastSuccessAt"] == (now + timedelta(seconds=2)).isoformat()

    def test_empty_statistics(self, now):
        """Test a job without runs reports zeros."""
        stats = make_job(now).get_execution_statistics()

        assert stats["totalRuns"] == 0
        assert stats["lastFailureAt"] is None

    def test_repeated_failures_need_attention(self, now):
        """Test three recent failures flag the job."""
        job = make_job(now, max_retries=5)
        for _ in range(3):
            job.start(now)
            job.fail(["boom"], now)

        assert job.needs_attention(now)

    def test_overdue_recurring_job_needs_attention(self, now):
        """Test a job not run for twice its interval is flagged."""
        job = make_job(now, SyncSchedule.every(600_000))
        job.start(now)
        job.complete(ok_result(now))

        assert not job.needs_attention(now + timedelta(minutes=5))
        assert job.needs_attention(now + timedelta(minutes=25))

    def test_clone_is_disabled_copy(self, now):
        """Test cloned jobs keep settings but do not fire."""
        job = make_job(now, SyncSchedule.every(600_000), batch_size=50)

        clone = job.clone("Copy")

        assert clone.id != job.id
        assert clone.batch_size == 50
        assert clone.schedule.enabled is False
        assert clone.next_run_at is None
