"""Delete data mapping command and handler."""

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
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    ISyncJobRepository,
)

logger = get_logger(__name__)


class DeleteDataMappingCommand(Command):
    def __init__(self, mapping_id: UUID, user_id: UUID):
        super().__init__()
        self.mapping_id = mapping_id
        self.user_id = user_id
        self._freeze()

    def _validate_command(self) -> None:
        if not self.mapping_id:
            raise ValidationError("mapping_id is required", field="mapping_id")


class DeleteDataMappingCommandHandler(IntegrationCommandHandler[DeleteDataMappingCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        mapping_repository: IDataMappingRepository,
        sync_job_repository: ISyncJobRepository,
    ):
        self._access = access
        self._mapping_repository = mapping_repository
        self._sync_job_repository = sync_job_repository

    async def _handle(self, command: DeleteDataMappingCommand) -> CommandResult:
        data_mapping, integration = await self._access.get_mapping(
            command.mapping_id, command.user_id
        )

        sync_jobs = await self._sync_job_repository.get_by_integration(integration.id)
        users = [job.name for job in sync_jobs if job.mapping_id == data_mapping.id]
        if users:
            raise BusinessRuleError(
                "Data mapping is used by sync job(s): " + ", ".join(users),
                rule="mapping_in_use",
            )

        await self._mapping_repository.delete(data_mapping.id)
        logger.info(
            "Data mapping deleted",
            mapping_id=str(data_mapping.id),
            integration_id=str(integration.id),
        )
        return CommandResult.success_result(
            {"mappingId": str(data_mapping.id), "deleted": True}
        )

    @property
    def command_type(self) -> type[DeleteDataMappingCommand]:
        return DeleteDataMappingCommand
