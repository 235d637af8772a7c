"""In-memory integration repository."""

from uuid import UUID

from integration_hub.modules.integration.domain.aggregates import Integration
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)
from integration_hub.modules.integration.infrastructure.repositories.base import (
    InMemoryAggregateRepository,
)


class InMemoryIntegrationRepository(
    InMemoryAggregateRepository[Integration], IIntegrationRepository
):
    resource_name = "Integration"

    async def get_by_user(self, user_id: UUID) -> list[Integration]:
        integrations = await self._find(lambda i: i.user_id == user_id)
        integrations.sort(key=lambda i: i.created_at, reverse=True)
        return integrations
