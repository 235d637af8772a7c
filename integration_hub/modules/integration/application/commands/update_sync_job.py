"""Update sync job command and handler."""

from typing import Any
from uuid import UUID

from integration_hub.core.cqrs.base import Command, CommandResult
from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.commands.base import (
    IntegrationCommandHandler,
    save_and_publish,
)
from integration_hub.modules.integration.application.services import (
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.enums import (
    ConflictResolution,
    SyncDirection,
    SyncJobStatus,
)
from integration_hub.modules.integration.domain.errors import (
    DataMappingNotFoundError,
    InvalidStateTransitionError,
)
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    ISyncJobRepository,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    IEventPublisher,
)
from integration_hub.modules.integration.domain.value_objects import SyncSchedule

logger = get_logger(__name__)

_CONFIGURATION_FIELDS = (
    "direction",
    "conflict_resolution",
    "batch_size",
    "timeout_ms",
    "max_retries",
    "filters",
    "mapping_id",
)


class UpdateSyncJobCommand(Command):
    """Command to edit a sync job. Only arguments that are not None are applied."""

    def __init__(
        self,
        sync_job_id: UUID,
        user_id: UUID,
        name: str | None = None,
        description: str | None = None,
        schedule: SyncSchedule | None = None,
        is_enabled: bool | None = None,
        direction: SyncDirection | str | None = None,
        conflict_resolution: ConflictResolution | str | None = None,
        batch_size: int | None = None,
        timeout_ms: int | None = None,
        max_retries: int | None = None,
        filters: dict[str, Any] | None = None,
        mapping_id: UUID | None = None,
    ):
        super().__init__()
        self.sync_job_id = sync_job_id
        self.user_id = user_id
        self.name = name
        self.description = description
        self.schedule = schedule
        self.is_enabled = is_enabled
        self.direction = SyncDirection(direction) if direction else None
        self.conflict_resolution = (
            ConflictResolution(conflict_resolution) if conflict_resolution else None
        )
        self.batch_size = batch_size
        self.timeout_ms = timeout_ms
        self.max_retries = max_retries
        self.filters = dict(filters) if filters is not None else None
        self.mapping_id = mapping_id
        self._freeze()

    @property
    def configuration_changes(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in _CONFIGURATION_FIELDS
            if getattr(self, name) is not None
        }

    def _validate_command(self) -> None:
        if not self.sync_job_id:
            raise ValidationError("sync_job_id is required", field="sync_job_id")
        simple = [self.name, self.description, self.schedule, self.is_enabled]
        if all(value is None for value in simple) and not self.configuration_changes:
            raise ValidationError("At least one field must be updated")


class UpdateSyncJobCommandHandler(IntegrationCommandHandler[UpdateSyncJobCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        sync_job_repository: ISyncJobRepository,
        mapping_repository: IDataMappingRepository,
        event_publisher: IEventPublisher | None = None,
    ):
        self._access = access
        self._sync_job_repository = sync_job_repository
        self._mapping_repository = mapping_repository
        self._event_publisher = event_publisher

    async def _handle(self, command: UpdateSyncJobCommand) -> CommandResult:
        sync_job, integration = await self._access.get_sync_job(
            command.sync_job_id, command.user_id
        )
        if sync_job.status == SyncJobStatus.RUNNING:
            raise InvalidStateTransitionError("sync job", sync_job.status.value, "update")

        if command.mapping_id is not None:
            data_mapping = await self._mapping_repository.get_by_id(command.mapping_id)
            if data_mapping is None or data_mapping.integration_id != integration.id:
                raise DataMappingNotFoundError(command.mapping_id)

        if command.name is not None or command.description is not None:
            sync_job.update_details(command.name, command.description)
        if command.configuration_changes:
            sync_job.update_configuration(**command.configuration_changes)
        if command.schedule is not None:
            sync_job.update_schedule(command.schedule)
        if command.is_enabled is True:
            sync_job.enable()
        elif command.is_enabled is False:
            sync_job.disable()

        await save_and_publish(self._sync_job_repository, sync_job, self._event_publisher)
        logger.info(
            "Sync job updated",
            sync_job_id=str(sync_job.id),
            configuration_fields=sorted(command.configuration_changes),
        )
        return CommandResult.success_result(sync_job.to_dict())

    @property
    def command_type(self) -> type[UpdateSyncJobCommand]:
        return UpdateSyncJobCommand
