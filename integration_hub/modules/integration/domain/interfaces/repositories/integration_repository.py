"""Integration repository interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from integration_hub.modules.integration.domain.aggregates import Integration


class IIntegrationRepository(ABC):
    """Repository interface for Integration aggregate operations."""

    @abstractmethod
    async def get_by_id(self, integration_id: UUID) -> "Integration | None":
        """Get an integration by its ID.

        Args:
            integration_id: The unique identifier of the integration

        Returns:
            Integration | None: The integration if found, None otherwise
        """

    @abstractmethod
    async def get_by_user(self, user_id: UUID) -> list["Integration"]:
        """Get every integration owned by a user, oldest first."""

    @abstractmethod
    async def save(self, integration: "Integration") -> "Integration":
        """Save an integration (create or update).

        Saving compares the stored version with the version the caller
        loaded and bumps it on success.

        Raises:
            ConcurrencyConflictError: If another writer saved first
        """

    @abstractmethod
    async def delete(self, integration_id: UUID) -> bool:
        """Delete an integration.

        Returns:
            bool: True if something was deleted
        """
