"""Default access policy: only the owner may act on an integration."""

from uuid import UUID

from integration_hub.modules.integration.domain.aggregates import Integration
from integration_hub.modules.integration.domain.interfaces.services import IOwnershipVerifier


class OwnerOnlyVerifier(IOwnershipVerifier):
    async def can_access(self, user_id: UUID, integration: Integration) -> bool:
        return integration.user_id == user_id
