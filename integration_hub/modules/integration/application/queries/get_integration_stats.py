"""Integration statistics and catalogue queries."""

from uuid import UUID

from integration_hub.core.cqrs.base import Query, QueryHandler, QueryResult
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.application.dto import (
    IntegrationStatsDTO,
    IntegrationTypeDTO,
)
from integration_hub.modules.integration.domain.enums import IntegrationType
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)


class GetIntegrationStatsQuery(Query):
    def __init__(self, user_id: UUID):
        super().__init__()
        self.user_id = user_id
        self._freeze()

    def _validate_query(self) -> None:
        if not self.user_id:
            raise ValidationError("user_id is required", field="user_id")


class GetIntegrationStatsQueryHandler(QueryHandler[GetIntegrationStatsQuery, QueryResult]):
    def __init__(self, integration_repository: IIntegrationRepository):
        self._integration_repository = integration_repository

    async def handle(self, query: GetIntegrationStatsQuery) -> QueryResult:
        integrations = await self._integration_repository.get_by_user(query.user_id)
        return QueryResult.single_result(
            IntegrationStatsDTO.from_integrations(integrations).to_dict()
        )

    @property
    def query_type(self) -> type[GetIntegrationStatsQuery]:
        return GetIntegrationStatsQuery


class GetAvailableIntegrationTypesQuery(Query):
    def __init__(self):
        super().__init__()
        self._freeze()


class GetAvailableIntegrationTypesQueryHandler(
    QueryHandler[GetAvailableIntegrationTypesQuery, QueryResult]
):
    async def handle(self, query: GetAvailableIntegrationTypesQuery) -> QueryResult:
        return QueryResult.single_result(
            [IntegrationTypeDTO(t).to_dict() for t in IntegrationType]
        )

    @property
    def query_type(self) -> type[GetAvailableIntegrationTypesQuery]:
        return GetAvailableIntegrationTypesQuery
