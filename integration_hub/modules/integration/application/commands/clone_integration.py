"""Clone integration command and handler."""

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
    IIntegrationRepository,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    IEventPublisher,
)

logger = get_logger(__name__)


class CloneIntegrationCommand(Command):
    """Command to copy an integration into a new draft."""

    def __init__(
        self,
        integration_id: UUID,
        user_id: UUID,
        new_name: str,
        include_credentials: bool = False,
    ):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self.new_name = new_name
        self.include_credentials = include_credentials
        self._freeze()

    def _validate_command(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")
        if not self.new_name or not self.new_name.strip():
            raise ValidationError("new_name is required", field="new_name")


class CloneIntegrationCommandHandler(IntegrationCommandHandler[CloneIntegrationCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        integration_repository: IIntegrationRepository,
        event_publisher: IEventPublisher | None = None,
    ):
        self._access = access
        self._integration_repository = integration_repository
        self._event_publisher = event_publisher

    async def _handle(self, command: CloneIntegrationCommand) -> CommandResult:
        source = await self._access.get_integration(command.integration_id, command.user_id)
        copy = source.clone(command.new_name, command.include_credentials)
        await save_and_publish(self._integration_repository, copy, self._event_publisher)

        logger.info(
            "Integration cloned",
            source_id=str(source.id),
            integration_id=str(copy.id),
            include_credentials=command.include_credentials,
        )
        return CommandResult.success_result(
            copy.to_dict(), warnings=copy.configuration_problems()
        )

    @property
    def command_type(self) -> type[CloneIntegrationCommand]:
        return CloneIntegrationCommand
