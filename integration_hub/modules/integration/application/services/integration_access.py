"""Loading of integration-owned aggregates with ownership checks.

Every command and query reaches its aggregates through here so that a
caller never sees or touches an integration it may not access.
"""

from uuid import UUID

from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.domain.aggregates import (
    DataMapping,
    Integration,
    SyncJob,
)
from integration_hub.modules.integration.domain.errors import (
    DataMappingNotFoundError,
    IntegrationAccessDeniedError,
    IntegrationNotFoundError,
    SyncJobNotFoundError,
)
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    IIntegrationRepository,
    ISyncJobRepository,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    IOwnershipVerifier,
)

logger = get_logger(__name__)


class IntegrationAccessService:
    """Resolves aggregates on behalf of a user."""

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        ownership_verifier: IOwnershipVerifier,
        mapping_repository: IDataMappingRepository | None = None,
        sync_job_repository: ISyncJobRepository | None = None,
    ):
        self._integrations = integration_repository
        self._verifier = ownership_verifier
        self._mappings = mapping_repository
        self._sync_jobs = sync_job_repository

    async def get_integration(self, integration_id: UUID, user_id: UUID) -> Integration:
        """Load an integration the user may access.

        Raises:
            IntegrationNotFoundError: If no such integration exists
            IntegrationAccessDeniedError: If the user may not access it
        """
        integration = await self._integrations.get_by_id(integration_id)
        if integration is None:
            raise IntegrationNotFoundError(integration_id)
        if not await self._verifier.can_access(user_id, integration):
            logger.warning(
                "Integration access denied",
                integration_id=str(integration_id),
                user_id=str(user_id),
            )
            raise IntegrationAccessDeniedError(integration_id, user_id)
        return integration

    async def can_access(self, integration: Integration, user_id: UUID) -> bool:
        return await self._verifier.can_access(user_id, integration)

    async def get_mapping(
        self, mapping_id: UUID, user_id: UUID
    ) -> tuple[DataMapping, Integration]:
        """Load a data mapping and its integration.

        Raises:
            DataMappingNotFoundError: If no such mapping exists
            IntegrationAccessDeniedError: If the user may not access its integration
        """
        data_mapping = await self._mappings.get_by_id(mapping_id)
        if data_mapping is None:
            raise DataMappingNotFoundError(mapping_id)
        integration = await self.get_integration(data_mapping.integration_id, user_id)
        return data_mapping, integration

    async def get_sync_job(
        self, sync_job_id: UUID, user_id: UUID
    ) -> tuple[SyncJob, Integration]:
        """Load a sync job and its integration.

        Raises:
            SyncJobNotFoundError: If no such sync job exists
            IntegrationAccessDeniedError: If the user may not access its integration
        """
        sync_job = await self._sync_jobs.get_by_id(sync_job_id)
        if sync_job is None:
            raise SyncJobNotFoundError(sync_job_id)
        integration = await self.get_integration(sync_job.integration_id, user_id)
        return sync_job, integration
