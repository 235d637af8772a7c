"""Get integration query and handler."""

from typing import Any
from uuid import UUID

from integration_hub.core.cqrs.base import Query, QueryHandler, QueryResult
from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.dto import (
    DataMappingSummaryDTO,
    SyncJobSummaryDTO,
)
from integration_hub.modules.integration.application.services import (
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IApiConnectionRepository,
    IDataMappingRepository,
    ISyncJobRepository,
)

logger = get_logger(__name__)


class GetIntegrationQuery(Query):
    """Query to get detailed integration information."""

    def __init__(
        self,
        integration_id: UUID,
        user_id: UUID,
        include_mappings: bool = False,
        include_sync_jobs: bool = False,
        include_connections: bool = False,
    ):
        """Initialize get integration query.

        Args:
            integration_id: ID of integration to retrieve
            user_id: Caller
            include_mappings: Include data mapping summaries
            include_sync_jobs: Include sync job summaries
            include_connections: Include API connections
        """
        super().__init__()

        self.integration_id = integration_id
        self.user_id = user_id
        self.include_mappings = include_mappings
        self.include_sync_jobs = include_sync_jobs
        self.include_connections = include_connections

        self._freeze()

    def _validate_query(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")


class GetIntegrationQueryHandler(QueryHandler[GetIntegrationQuery, QueryResult]):
    def __init__(
        self,
        access: IntegrationAccessService,
        mapping_repository: IDataMappingRepository,
        sync_job_repository: ISyncJobRepository,
        connection_repository: IApiConnectionRepository,
    ):
        self._access = access
        self._mapping_repository = mapping_repository
        self._sync_job_repository = sync_job_repository
        self._connection_repository = connection_repository

    async def handle(self, query: GetIntegrationQuery) -> QueryResult:
        """Handle get integration query.

        Raises:
            IntegrationNotFoundError: If the integration does not exist
            IntegrationAccessDeniedError: If the caller may not read it
        """
        integration = await self._access.get_integration(query.integration_id, query.user_id)
        data: dict[str, Any] = integration.to_dict()
        data["health"] = integration.get_health_status().to_dict()

        if query.include_mappings:
            mappings = await self._mapping_repository.get_by_integration(integration.id)
            data["mappings"] = [
                DataMappingSummaryDTO.from_domain(m).to_dict() for m in mappings
            ]
        if query.include_sync_jobs:
            sync_jobs = await self._sync_job_repository.get_by_integration(integration.id)
            data["syncJobs"] = [SyncJobSummaryDTO.from_domain(j).to_dict() for j in sync_jobs]
        if query.include_connections:
            connections = await self._connection_repository.get_by_integration(integration.id)
            data["connections"] = [connection.to_dict() for connection in connections]

        logger.debug("Integration retrieved", integration_id=str(integration.id))
        return QueryResult.single_result(data)

    @property
    def query_type(self) -> type[GetIntegrationQuery]:
        return GetIntegrationQuery
