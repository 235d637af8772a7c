"""Create sync job command and handler."""

from typing import Any
from uuid import UUID

from integration_hub.core.cqrs.base import Command, CommandResult
from integration_hub.core.errors import BusinessRuleError, ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.commands.base import (
    IntegrationCommandHandler,
    save_and_publish,
)
from integration_hub.modules.integration.application.services import (
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.aggregates import SyncJob
from integration_hub.modules.integration.domain.enums import (
    ConflictResolution,
    SyncDirection,
)
from integration_hub.modules.integration.domain.errors import DataMappingNotFoundError
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
    ISyncJobRepository,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    IEventPublisher,
)
from integration_hub.modules.integration.domain.value_objects import (
    DataSchema,
    SyncSchedule,
)

logger = get_logger(__name__)


class CreateSyncJobCommand(Command):
    def __init__(
        self,
        integration_id: UUID,
        user_id: UUID,
        name: str,
        direction: SyncDirection | str,
        source_schema: DataSchema,
        target_schema: DataSchema,
        schedule: SyncSchedule | None = None,
        description: str | None = None,
        mapping_id: UUID | None = None,
        conflict_resolution: ConflictResolution | str | None = None,
        batch_size: int | None = None,
        timeout_ms: int | None = None,
        max_retries: int | None = None,
        filters: dict[str, Any] | None = None,
    ):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self.name = name
        self.direction = SyncDirection(direction)
        self.source_schema = source_schema
        self.target_schema = target_schema
        self.schedule = schedule
        self.description = description
        self.mapping_id = mapping_id
        self.conflict_resolution = (
            ConflictResolution(conflict_resolution) if conflict_resolution else None
        )
        self.batch_size = batch_size
        self.timeout_ms = timeout_ms
        self.max_retries = max_retries
        self.filters = dict(filters) if filters is not None else None
        self._freeze()

    @property
    def options(self) -> dict[str, Any]:
        """Optional job settings that were given."""
        values = {
            "description": self.description,
            "mapping_id": self.mapping_id,
            "conflict_resolution": self.conflict_resolution,
            "batch_size": self.batch_size,
            "timeout_ms": self.timeout_ms,
            "max_retries": self.max_retries,
            "filters": self.filters,
        }
        return {key: value for key, value in values.items() if value is not None}

    def _validate_command(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")
        if not self.name or not self.name.strip():
            raise ValidationError("name is required", field="name")


class CreateSyncJobCommandHandler(IntegrationCommandHandler[CreateSyncJobCommand]):
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

    async def _handle(self, command: CreateSyncJobCommand) -> CommandResult:
        integration = await self._access.get_integration(
            command.integration_id, command.user_id
        )
        integration_type = integration.config.integration_type
        if integration_type is not None and not integration_type.supports_sync:
            raise BusinessRuleError(
                f"{integration_type.display_name} integrations do not support sync jobs",
                rule="integration_supports_sync",
            )

        if command.mapping_id is not None:
            data_mapping = await self._mapping_repository.get_by_id(command.mapping_id)
            if data_mapping is None or data_mapping.integration_id != integration.id:
                raise DataMappingNotFoundError(command.mapping_id)

        sync_job = SyncJob.create(
            integration.id,
            command.name,
            command.direction,
            command.source_schema,
            command.target_schema,
            command.schedule,
            **command.options,
        )
        await save_and_publish(self._sync_job_repository, sync_job, self._event_publisher)

        logger.info(
            "Sync job created",
            sync_job_id=str(sync_job.id),
            integration_id=str(integration.id),
            schedule=str(sync_job.schedule),
        )
        return CommandResult.success_result(sync_job.to_dict())

    @property
    def command_type(self) -> type[CreateSyncJobCommand]:
        return CreateSyncJobCommand
