"""Sync job repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from integration_hub.modules.integration.domain.enums import SyncJobStatus

if TYPE_CHECKING:
    from integration_hub.modules.integration.domain.aggregates import SyncJob


class ISyncJobRepository(ABC):
    """Repository interface for SyncJob aggregate operations."""

    @abstractmethod
    async def get_by_id(self, sync_job_id: UUID) -> "SyncJob | None":
        """Get a sync job by its ID.

        Args:
            sync_job_id: The unique identifier of the sync job

        Returns:
            SyncJob | None: The sync job if found, None otherwise
        """

    @abstractmethod
    async def get_by_integration(
        self, integration_id: UUID, status: SyncJobStatus | None = None
    ) -> list["SyncJob"]:
        """Get sync jobs for an integration.

        Args:
            integration_id: The integration identifier
            status: Optional status filter

        Returns:
            list[SyncJob]: List of sync jobs
        """

    @abstractmethod
    async def get_due_between(self, start: datetime, end: datetime) -> list["SyncJob"]:
        """Get jobs whose next run falls within ``[start, end]``, soonest first."""

    @abstractmethod
    async def save(self, sync_job: "SyncJob") -> "SyncJob":
        """Save a sync job with a version check.

        Raises:
            ConcurrencyConflictError: If another writer saved first
        """

    @abstractmethod
    async def delete(self, sync_job_id: UUID) -> bool:
        """Delete a sync job."""
