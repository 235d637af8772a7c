"""In-memory sync job repository."""

from datetime import datetime
from uuid import UUID

from integration_hub.modules.integration.domain.aggregates import SyncJob
from integration_hub.modules.integration.domain.enums import SyncJobStatus
from integration_hub.modules.integration.domain.interfaces.repositories import (
    ISyncJobRepository,
)
from integration_hub.modules.integration.infrastructure.repositories.base import (
    InMemoryAggregateRepository,
)


class InMemorySyncJobRepository(InMemoryAggregateRepository[SyncJob], ISyncJobRepository):
    resource_name = "SyncJob"

    async def get_by_integration(
        self, integration_id: UUID, status: SyncJobStatus | None = None
    ) -> list[SyncJob]:
        jobs = await self._find(
            lambda j: j.integration_id == integration_id
            and (status is None or j.status == status)
        )
        jobs.sort(key=lambda j: j.created_at)
        return jobs

    async def get_due_between(self, start: datetime, end: datetime) -> list[SyncJob]:
        jobs = await self._find(
            lambda j: j.is_enabled
            and j.next_run_at is not None
            and start <= j.next_run_at <= end
        )
        jobs.sort(key=lambda j: j.next_run_at)
        return jobs
