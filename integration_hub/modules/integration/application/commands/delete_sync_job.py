"""Delete sync job command and handler."""

from uuid import UUID

from integration_hub.core.cqrs.base import Command, CommandResult
from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.commands.base import (
    IntegrationCommandHandler,
)
from integration_hub.modules.integration.application.services import (
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.enums import SyncJobStatus
from integration_hub.modules.integration.domain.errors import InvalidStateTransitionError
from integration_hub.modules.integration.domain.interfaces.repositories import (
    ISyncJobRepository,
)

logger = get_logger(__name__)


class DeleteSyncJobCommand(Command):
    def __init__(self, sync_job_id: UUID, user_id: UUID):
        super().__init__()
        self.sync_job_id = sync_job_id
        self.user_id = user_id
        self._freeze()

    def _validate_command(self) -> None:
        if not self.sync_job_id:
            raise ValidationError("sync_job_id is required", field="sync_job_id")


class DeleteSyncJobCommandHandler(IntegrationCommandHandler[DeleteSyncJobCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        sync_job_repository: ISyncJobRepository,
    ):
        self._access = access
        self._sync_job_repository = sync_job_repository

    async def _handle(self, command: DeleteSyncJobCommand) -> CommandResult:
        sync_job, _ = await self._access.get_sync_job(command.sync_job_id, command.user_id)
        if sync_job.status == SyncJobStatus.RUNNING:
            raise InvalidStateTransitionError("sync job", sync_job.status.value, "delete")

        await self._sync_job_repository.delete(sync_job.id)
        logger.info(
            "Sync job deleted",
            sync_job_id=str(sync_job.id),
            integration_id=str(sync_job.integration_id),
        )
        return CommandResult.success_result({"syncJobId": str(sync_job.id), "deleted": True})

    @property
    def command_type(self) -> type[DeleteSyncJobCommand]:
        return DeleteSyncJobCommand
