"""API connection repository interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from integration_hub.modules.integration.domain.entities import ApiConnection


class IApiConnectionRepository(ABC):
    """Repository interface for ApiConnection entity operations."""

    @abstractmethod
    async def get_by_integration(self, integration_id: UUID) -> list["ApiConnection"]:
        """Get the connections bound to an integration."""

    @abstractmethod
    async def save(self, connection: "ApiConnection") -> "ApiConnection":
        """Save a connection (create or update)."""

    @abstractmethod
    async def delete_by_integration(self, integration_id: UUID) -> int:
        """Delete every connection of an integration.

        Returns:
            int: Number of connections deleted
        """
