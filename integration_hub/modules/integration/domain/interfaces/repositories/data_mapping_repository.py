"""Data mapping repository interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from integration_hub.modules.integration.domain.aggregates import DataMapping


class IDataMappingRepository(ABC):
    """Repository interface for DataMapping aggregate operations."""

    @abstractmethod
    async def get_by_id(self, mapping_id: UUID) -> "DataMapping | None":
        """Get a data mapping by its ID."""

    @abstractmethod
    async def get_by_integration(self, integration_id: UUID) -> list["DataMapping"]:
        """Get the data mappings of an integration."""

    @abstractmethod
    async def save(self, data_mapping: "DataMapping") -> "DataMapping":
        """Save a data mapping with a version check.

        Raises:
            ConcurrencyConflictError: If another writer saved first
        """

    @abstractmethod
    async def delete(self, mapping_id: UUID) -> bool:
        """Delete a data mapping."""
