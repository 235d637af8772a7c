"""Get integration health query and handler."""

from datetime import UTC, datetime
from uuid import UUID

from integration_hub.core.cqrs.base import Query, QueryHandler, QueryResult
from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.services import (
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IApiConnectionRepository,
)
from integration_hub.modules.integration.domain.services import (
    IntegrationExecutionService,
)

logger = get_logger(__name__)


class GetIntegrationHealthQuery(Query):
    def __init__(self, integration_id: UUID, user_id: UUID):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self._freeze()

    def _validate_query(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")


class GetIntegrationHealthQueryHandler(QueryHandler[GetIntegrationHealthQuery, QueryResult]):
    """Scored health plus per-connection health metrics."""

    def __init__(
        self,
        access: IntegrationAccessService,
        execution_service: IntegrationExecutionService,
        connection_repository: IApiConnectionRepository,
    ):
        self._access = access
        self._execution_service = execution_service
        self._connection_repository = connection_repository

    async def handle(self, query: GetIntegrationHealthQuery) -> QueryResult:
        integration = await self._access.get_integration(query.integration_id, query.user_id)
        now = datetime.now(UTC)
        health = self._execution_service.get_integration_health(integration, now)
        connections = await self._connection_repository.get_by_integration(integration.id)

        data = {
            "integrationId": str(integration.id),
            **health.to_dict(),
            "metrics": integration.metrics.to_dict(),
            "connections": [
                {
                    "id": str(connection.id),
                    "host": connection.endpoint.host,
                    "status": connection.status.value,
                    "needsAttention": connection.needs_attention(now),
                    **connection.get_health_metrics(),
                }
                for connection in connections
            ],
            "checkedAt": now.isoformat(),
        }
        logger.debug(
            "Integration health computed",
            integration_id=str(integration.id),
            score=health.score,
            status=health.status.value,
        )
        return QueryResult.single_result(data)

    @property
    def query_type(self) -> type[GetIntegrationHealthQuery]:
        return GetIntegrationHealthQuery
