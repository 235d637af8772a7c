"""
Test cases for the in-memory repositories.
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from integration_hub.core.config import ExecutionConfig
from integration_hub.modules.integration.domain.aggregates import SyncJob
from integration_hub.modules.integration.domain.entities import ApiConnection
from integration_hub.modules.integration.domain.enums import (
    ExecutionTrigger,
    SyncDirection,
    SyncJobStatus,
)
from integration_hub.modules.integration.domain.errors import ConcurrencyConflictError
from integration_hub.modules.integration.domain.value_objects import (
    ExecutionRecord,
    SyncSchedule,
)
from integration_hub.modules.integration.infrastructure.repositories import (
    InMemoryApiConnectionRepository,
    InMemoryExecutionHistoryRepository,
    InMemoryIntegrationRepository,
    InMemorySyncJobRepository,
)
from integration_hub.tests.builders import IntegrationBuilder, order_schemas


class TestVersionedStore:
    """Test optimistic versioning shared by the aggregate repositories."""

    @pytest.fixture
    def repository(self):
        return InMemoryIntegrationRepository()

    @pytest.mark.asyncio
    async def test_first_save_keeps_version(self, repository, draft_integration):
        """Test a new aggregate is stored at its current version."""
        version = draft_integration.version

        await repository.save(draft_integration)

        assert (await repository.get_by_id(draft_integration.id)).version == version

    @pytest.mark.asyncio
    async def test_saves_bump_version(self, repository, draft_integration):
        """Test every later save increments the version."""
        await repository.save(draft_integration)
        loaded = await repository.get_by_id(draft_integration.id)

        loaded.add_tag("updated")
        await repository.save(loaded)

        stored = await repository.get_by_id(draft_integration.id)
        assert stored.version == draft_integration.version + 1
        assert "updated" in stored.tags

    @pytest.mark.asyncio
    async def test_stale_save_is_rejected(self, repository, draft_integration):
        """Test the second of two writers from the same version loses."""
        # Arrange
        await repository.save(draft_integration)
        first = await repository.get_by_id(draft_integration.id)
        second = await repository.get_by_id(draft_integration.id)
        first.update_details(name="First")
        second.update_details(name="Second")
        await repository.save(first)

        # Act
        with pytest.raises(ConcurrencyConflictError) as exc_info:
            await repository.save(second)

        # Assert
        assert exc_info.value.code == "CONCURRENCY_CONFLICT"
        assert (await repository.get_by_id(draft_integration.id)).name == "First"

    @pytest.mark.asyncio
    async def test_loaded_copies_are_isolated(self, repository, draft_integration):
        """Test changing a loaded aggregate does not touch the store."""
        await repository.save(draft_integration)
        loaded = await repository.get_by_id(draft_integration.id)

        loaded.add_tag("unsaved")

        assert "unsaved" not in (await repository.get_by_id(draft_integration.id)).tags

    @pytest.mark.asyncio
    async def test_stored_copies_have_no_events(self, repository):
        """Test pending events stay with the caller's instance."""
        integration = IntegrationBuilder().keep_events().build()

        await repository.save(integration)

        assert integration.get_events()
        assert (await repository.get_by_id(integration.id)).get_events() == []

    @pytest.mark.asyncio
    async def test_delete(self, repository, draft_integration):
        """Test delete reports whether something was removed."""
        await repository.save(draft_integration)

        assert await repository.delete(draft_integration.id) is True
        assert await repository.delete(draft_integration.id) is False
        assert await repository.get_by_id(draft_integration.id) is None


class TestSyncJobRepository:
    """Test sync job lookups."""

    @pytest.mark.asyncio
    async def test_due_between_skips_disabled_and_manual_jobs(self, now):
        """Test the due window only includes enabled scheduled jobs, soonest first."""
        repository = InMemorySyncJobRepository()
        integration_id = uuid4()
        source, target = order_schemas()

        def job(name, schedule=None):
            return SyncJob.create(
                integration_id, name, SyncDirection.PULL, source, target, schedule, now=now
            )

        hourly = job("hourly", SyncSchedule.every(3_600_000))
        frequent = job("frequent", SyncSchedule.every(600_000))
        disabled = job("disabled", SyncSchedule.every(600_000))
        disabled.disable()
        for item in (hourly, frequent, disabled, job("manual")):
            await repository.save(item)

        due = await repository.get_due_between(now, now + timedelta(hours=2))

        assert [j.name for j in due] == ["frequent", "hourly"]
        assert await repository.get_due_between(now, now + timedelta(minutes=5)) == []

    @pytest.mark.asyncio
    async def test_status_filter(self, now):
        """Test jobs can be filtered by status."""
        repository = InMemorySyncJobRepository()
        integration_id = uuid4()
        source, target = order_schemas()
        running = SyncJob.create(integration_id, "a", SyncDirection.PUSH, source, target)
        running.start(now)
        await repository.save(running)
        idle = SyncJob.create(integration_id, "b", SyncDirection.PUSH, source, target)
        await repository.save(idle)

        result = await repository.get_by_integration(integration_id, SyncJobStatus.RUNNING)

        assert [j.name for j in result] == ["a"]
        assert len(await repository.get_by_integration(integration_id)) == 2


class TestExecutionHistoryRepository:
    """Test the capped execution history."""

    def record(self, integration_id, start):
        return ExecutionRecord(
            execution_id=f"exec_{start.minute}",
            integration_id=integration_id,
            trigger=ExecutionTrigger.MANUAL,
            success=True,
            start_time=start,
            end_time=start,
        )

    @pytest.mark.asyncio
    async def test_history_is_capped_per_integration(self):
        """Test the oldest records are dropped beyond the limit."""
        repository = InMemoryExecutionHistoryRepository(ExecutionConfig(history_limit=2))
        integration_id, other_id = uuid4(), uuid4()
        base = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        for minute in (1, 2, 3):
            await repository.add(self.record(integration_id, base + timedelta(minutes=minute)))
        await repository.add(self.record(other_id, base))

        records = await repository.get_by_integration(integration_id)

        assert [r.execution_id for r in records] == ["exec_3", "exec_2"]
        assert await repository.count_by_integration(other_id) == 1

    @pytest.mark.asyncio
    async def test_since_and_paging(self):
        """Test the since filter and offset paging."""
        repository = InMemoryExecutionHistoryRepository()
        integration_id = uuid4()
        base = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        for minute in range(5):
            await repository.add(self.record(integration_id, base + timedelta(minutes=minute)))

        recent = await repository.get_by_integration(
            integration_id, since=base + timedelta(minutes=2)
        )
        page = await repository.get_by_integration(integration_id, limit=2, offset=1)

        assert [r.execution_id for r in recent] == ["exec_4", "exec_3", "exec_2"]
        assert [r.execution_id for r in page] == ["exec_3", "exec_2"]
        assert await repository.delete_by_integration(integration_id) == 5
        assert await repository.count_by_integration(integration_id) == 0


class TestApiConnectionRepository:
    """Test connection storage."""

    @pytest.mark.asyncio
    async def test_saves_are_last_writer_wins(self, api_endpoint, api_key_auth, now):
        """Test connections are stored without version checks."""
        repository = InMemoryApiConnectionRepository()
        integration_id = uuid4()
        connection = ApiConnection(integration_id, api_endpoint, api_key_auth)
        await repository.save(connection)
        [first] = await repository.get_by_integration(integration_id)
        [second] = await repository.get_by_integration(integration_id)

        first.connect(now)
        await repository.save(first)
        second.set_custom_header("X-Tenant", "t1")
        await repository.save(second)

        [stored] = await repository.get_by_integration(integration_id)
        assert stored.custom_headers == {"X-Tenant": "t1"}
        assert await repository.delete_by_integration(integration_id) == 1
