"""Update data mapping command and handler."""

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
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    IEventPublisher,
)
from integration_hub.modules.integration.domain.value_objects import FieldMapping

logger = get_logger(__name__)


class UpdateDataMappingCommand(Command):
    """Command to edit a data mapping.

    Field mapping edits apply in order: removals, updates, additions.
    """

    def __init__(
        self,
        mapping_id: UUID,
        user_id: UUID,
        name: str | None = None,
        description: str | None = None,
        is_active: bool | None = None,
        add_mappings: list[FieldMapping] | None = None,
        update_mappings: dict[str, dict[str, Any]] | None = None,
        remove_mapping_ids: list[str] | None = None,
    ):
        """Initialize update data mapping command.

        Args:
            mapping_id: Data mapping to edit
            user_id: Caller
            name: New name
            description: New description
            is_active: Activate or deactivate
            add_mappings: Field mappings to append
            update_mappings: Partial updates keyed by field mapping ID
            remove_mapping_ids: Field mapping IDs to remove
        """
        super().__init__()
        self.mapping_id = mapping_id
        self.user_id = user_id
        self.name = name
        self.description = description
        self.is_active = is_active
        self.add_mappings = list(add_mappings or [])
        self.update_mappings = dict(update_mappings or {})
        self.remove_mapping_ids = list(remove_mapping_ids or [])
        self._freeze()

    def _validate_command(self) -> None:
        if not self.mapping_id:
            raise ValidationError("mapping_id is required", field="mapping_id")
        if (
            self.name is None
            and self.description is None
            and self.is_active is None
            and not self.add_mappings
            and not self.update_mappings
            and not self.remove_mapping_ids
        ):
            raise ValidationError("At least one change is required")


class UpdateDataMappingCommandHandler(IntegrationCommandHandler[UpdateDataMappingCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        mapping_repository: IDataMappingRepository,
        event_publisher: IEventPublisher | None = None,
    ):
        self._access = access
        self._mapping_repository = mapping_repository
        self._event_publisher = event_publisher

    async def _handle(self, command: UpdateDataMappingCommand) -> CommandResult:
        data_mapping, _ = await self._access.get_mapping(command.mapping_id, command.user_id)

        if command.name is not None or command.description is not None:
            data_mapping.update_details(command.name, command.description)
        for mapping_id in command.remove_mapping_ids:
            data_mapping.remove_mapping(mapping_id)
        for mapping_id, changes in command.update_mappings.items():
            data_mapping.update_mapping(mapping_id, **changes)
        for field_mapping in command.add_mappings:
            data_mapping.add_mapping(field_mapping)
        if command.is_active is True and not data_mapping.is_active:
            data_mapping.activate()
        elif command.is_active is False and data_mapping.is_active:
            data_mapping.deactivate()

        validation = data_mapping.validate_mapping()
        await save_and_publish(self._mapping_repository, data_mapping, self._event_publisher)

        logger.info(
            "Data mapping updated",
            mapping_id=str(data_mapping.id),
            added=len(command.add_mappings),
            updated=len(command.update_mappings),
            removed=len(command.remove_mapping_ids),
            is_valid=validation.is_valid,
        )
        return CommandResult.success_result(
            {**data_mapping.to_dict(), "validation": validation.to_dict()},
            warnings=[*validation.errors, *validation.warnings],
        )

    @property
    def command_type(self) -> type[UpdateDataMappingCommand]:
        return UpdateDataMappingCommand
