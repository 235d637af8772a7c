"""Execution history repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from integration_hub.modules.integration.domain.value_objects import ExecutionRecord


class IExecutionHistoryRepository(ABC):
    """Append-only store of execution records."""

    @abstractmethod
    async def add(self, record: ExecutionRecord) -> None:
        """Append an execution record."""

    @abstractmethod
    async def get_by_integration(
        self,
        integration_id: UUID,
        since: datetime | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ExecutionRecord]:
        """Get records of an integration, newest first.

        Args:
            integration_id: The integration identifier
            since: Only records started at or after this moment
            limit: Maximum number of records to return
            offset: Number of records to skip
        """

    @abstractmethod
    async def count_by_integration(
        self, integration_id: UUID, since: datetime | None = None
    ) -> int:
        """Count records of an integration."""

    @abstractmethod
    async def delete_by_integration(self, integration_id: UUID) -> int:
        """Drop the history of an integration."""
