"""Create data mapping command and handler."""

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
from integration_hub.modules.integration.domain.aggregates import DataMapping
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    IEventPublisher,
)
from integration_hub.modules.integration.domain.value_objects import (
    DataSchema,
    FieldMapping,
)

logger = get_logger(__name__)


class CreateDataMappingCommand(Command):
    def __init__(
        self,
        integration_id: UUID,
        user_id: UUID,
        name: str,
        source_schema: DataSchema,
        target_schema: DataSchema,
        mappings: list[FieldMapping] | None = None,
        description: str | None = None,
    ):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self.name = name
        self.source_schema = source_schema
        self.target_schema = target_schema
        self.mappings = list(mappings or [])
        self.description = description
        self._freeze()

    def _validate_command(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")
        if not self.name or not self.name.strip():
            raise ValidationError("name is required", field="name")
        if self.source_schema is None or self.target_schema is None:
            raise ValidationError("source_schema and target_schema are required")


class CreateDataMappingCommandHandler(IntegrationCommandHandler[CreateDataMappingCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        mapping_repository: IDataMappingRepository,
        event_publisher: IEventPublisher | None = None,
    ):
        self._access = access
        self._mapping_repository = mapping_repository
        self._event_publisher = event_publisher

    async def _handle(self, command: CreateDataMappingCommand) -> CommandResult:
        integration = await self._access.get_integration(
            command.integration_id, command.user_id
        )
        data_mapping = DataMapping.create(
            integration_id=integration.id,
            name=command.name,
            source_schema=command.source_schema,
            target_schema=command.target_schema,
            mappings=command.mappings,
            description=command.description,
        )
        validation = data_mapping.validate_mapping()
        await save_and_publish(self._mapping_repository, data_mapping, self._event_publisher)

        logger.info(
            "Data mapping created",
            mapping_id=str(data_mapping.id),
            integration_id=str(integration.id),
            field_mappings=len(data_mapping.mappings),
            is_valid=validation.is_valid,
        )
        return CommandResult.success_result(
            {**data_mapping.to_dict(), "validation": validation.to_dict()},
            warnings=[*validation.errors, *validation.warnings],
        )

    @property
    def command_type(self) -> type[CreateDataMappingCommand]:
        return CreateDataMappingCommand
