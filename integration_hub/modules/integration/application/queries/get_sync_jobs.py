"""Sync job queries."""

from datetime import UTC, datetime, timedelta
from uuid import UUID

from integration_hub.core.cqrs.base import Query, QueryHandler, QueryResult
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.application.dto import SyncJobSummaryDTO
from integration_hub.modules.integration.application.services import (
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.enums import SyncJobStatus
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
    ISyncJobRepository,
)

MAX_HOURS_AHEAD = 168


class GetSyncJobQuery(Query):
    def __init__(self, sync_job_id: UUID, user_id: UUID):
        super().__init__()
        self.sync_job_id = sync_job_id
        self.user_id = user_id
        self._freeze()

    def _validate_query(self) -> None:
        if not self.sync_job_id:
            raise ValidationError("sync_job_id is required", field="sync_job_id")


class GetSyncJobQueryHandler(QueryHandler[GetSyncJobQuery, QueryResult]):
    def __init__(self, access: IntegrationAccessService):
        self._access = access

    async def handle(self, query: GetSyncJobQuery) -> QueryResult:
        sync_job, _ = await self._access.get_sync_job(query.sync_job_id, query.user_id)
        data = sync_job.to_dict()
        data["statistics"] = sync_job.get_execution_statistics()
        data["needsAttention"] = sync_job.needs_attention()
        return QueryResult.single_result(data)

    @property
    def query_type(self) -> type[GetSyncJobQuery]:
        return GetSyncJobQuery


class GetSyncJobsByIntegrationQuery(Query):
    def __init__(
        self,
        integration_id: UUID,
        user_id: UUID,
        status: SyncJobStatus | None = None,
    ):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self.status = status
        self._freeze()

    def _validate_query(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")


class GetSyncJobsByIntegrationQueryHandler(
    QueryHandler[GetSyncJobsByIntegrationQuery, QueryResult]
):
    def __init__(
        self,
        access: IntegrationAccessService,
        sync_job_repository: ISyncJobRepository,
    ):
        self._access = access
        self._sync_job_repository = sync_job_repository

    async def handle(self, query: GetSyncJobsByIntegrationQuery) -> QueryResult:
        integration = await self._access.get_integration(query.integration_id, query.user_id)
        jobs = await self._sync_job_repository.get_by_integration(
            integration.id, status=query.status
        )
        now = datetime.now(UTC)
        return QueryResult.single_result(
            [SyncJobSummaryDTO.from_domain(job, now).to_dict() for job in jobs]
        )

    @property
    def query_type(self) -> type[GetSyncJobsByIntegrationQuery]:
        return GetSyncJobsByIntegrationQuery


class GetUpcomingSyncJobsQuery(Query):
    """Sync jobs of a user due to run within the next ``hours_ahead`` hours."""

    def __init__(self, user_id: UUID, hours_ahead: int = 24):
        super().__init__()
        self.user_id = user_id
        self.hours_ahead = hours_ahead
        self._freeze()

    def _validate_query(self) -> None:
        if not self.user_id:
            raise ValidationError("user_id is required", field="user_id")
        if not 1 <= self.hours_ahead <= MAX_HOURS_AHEAD:
            raise ValidationError(
                f"hours_ahead must be between 1 and {MAX_HOURS_AHEAD}",
                field="hours_ahead",
            )


class GetUpcomingSyncJobsQueryHandler(QueryHandler[GetUpcomingSyncJobsQuery, QueryResult]):
    def __init__(
        self,
        access: IntegrationAccessService,
        integration_repository: IIntegrationRepository,
        sync_job_repository: ISyncJobRepository,
    ):
        self._access = access
        self._integration_repository = integration_repository
        self._sync_job_repository = sync_job_repository

    async def handle(self, query: GetUpcomingSyncJobsQuery) -> QueryResult:
        now = datetime.now(UTC)
        due = await self._sync_job_repository.get_due_between(
            now, now + timedelta(hours=query.hours_ahead)
        )

        visible: dict[UUID, bool] = {}
        jobs = []
        for job in due:
            if job.integration_id not in visible:
                integration = await self._integration_repository.get_by_id(job.integration_id)
                visible[job.integration_id] = integration is not None and (
                    await self._access.can_access(integration, query.user_id)
                )
            if visible[job.integration_id]:
                jobs.append(job)

        return QueryResult.single_result(
            [SyncJobSummaryDTO.from_domain(job, now).to_dict() for job in jobs]
        )

    @property
    def query_type(self) -> type[GetUpcomingSyncJobsQuery]:
        return GetUpcomingSyncJobsQuery
