"""In-memory data mapping repository."""

from uuid import UUID

from integration_hub.modules.integration.domain.aggregates import DataMapping
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
)
from integration_hub.modules.integration.infrastructure.repositories.base import (
    InMemoryAggregateRepository,
)


class InMemoryDataMappingRepository(
    InMemoryAggregateRepository[DataMapping], IDataMappingRepository
):
    resource_name = "DataMapping"

    async def get_by_integration(self, integration_id: UUID) -> list[DataMapping]:
        return await self._find(lambda m: m.integration_id == integration_id)
