"""Delete integration command and handler.

Deleting an integration removes everything that belongs to it: data
mappings, sync jobs, API connections and execution history.
"""

from uuid import UUID

from integration_hub.core.cqrs.base import Command, CommandResult
from integration_hub.core.errors import BusinessRuleError, ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.commands.base import (
    IntegrationCommandHandler,
)
from integration_hub.modules.integration.application.services import (
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.enums import SyncJobStatus
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IApiConnectionRepository,
    IDataMappingRepository,
    IExecutionHistoryRepository,
    IIntegrationRepository,
    ISyncJobRepository,
)

logger = get_logger(__name__)


class DeleteIntegrationCommand(Command):
    def __init__(self, integration_id: UUID, user_id: UUID):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self._freeze()

    def _validate_command(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")


class DeleteIntegrationCommandHandler(IntegrationCommandHandler[DeleteIntegrationCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        integration_repository: IIntegrationRepository,
        mapping_repository: IDataMappingRepository,
        sync_job_repository: ISyncJobRepository,
        connection_repository: IApiConnectionRepository,
        history_repository: IExecutionHistoryRepository,
    ):
        self._access = access
        self._integration_repository = integration_repository
        self._mapping_repository = mapping_repository
        self._sync_job_repository = sync_job_repository
        self._connection_repository = connection_repository
        self._history_repository = history_repository

    async def _handle(self, command: DeleteIntegrationCommand) -> CommandResult:
        integration = await self._access.get_integration(
            command.integration_id, command.user_id
        )

        running = await self._sync_job_repository.get_by_integration(
            integration.id, SyncJobStatus.RUNNING
        )
        if running:
            raise BusinessRuleError(
                f"Cannot delete integration with {len(running)} running sync job(s)",
                rule="no_running_sync_jobs",
            )

        sync_jobs = await self._sync_job_repository.get_by_integration(integration.id)
        for sync_job in sync_jobs:
            await self._sync_job_repository.delete(sync_job.id)

        mappings = await self._mapping_repository.get_by_integration(integration.id)
        for data_mapping in mappings:
            await self._mapping_repository.delete(data_mapping.id)

        connections = await self._connection_repository.delete_by_integration(integration.id)
        history = await self._history_repository.delete_by_integration(integration.id)
        await self._integration_repository.delete(integration.id)

        logger.info(
            "Integration deleted",
            integration_id=str(integration.id),
            sync_jobs=len(sync_jobs),
            mappings=len(mappings),
            connections=connections,
            history_records=history,
        )
        return CommandResult.success_result(
            {
                "integrationId": str(integration.id),
                "deleted": True,
                "deletedSyncJobs": len(sync_jobs),
                "deletedMappings": len(mappings),
            }
        )

    @property
    def command_type(self) -> type[DeleteIntegrationCommand]:
        return DeleteIntegrationCommand
