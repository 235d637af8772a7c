"""
Ownership Verifier Interface

Port deciding whether a user may act on an integration.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from integration_hub.modules.integration.domain.aggregates import Integration


class IOwnershipVerifier(ABC):
    """Port for access checks on integrations."""

    @abstractmethod
    async def can_access(self, user_id: UUID, integration: "Integration") -> bool:
        """
        Check whether ``user_id`` may read or change ``integration``.

        Returns:
            True if access is allowed
        """
        ...
