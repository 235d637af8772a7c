"""Activate and deactivate integration commands."""

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


class ActivateIntegrationCommand(Command):
    """Command to move an integration to active."""

    def __init__(self, integration_id: UUID, user_id: UUID):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self._freeze()

    def _validate_command(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")


class DeactivateIntegrationCommand(Command):
    """Command to pause an active integration."""

    def __init__(self, integration_id: UUID, user_id: UUID, reason: str | None = None):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self.reason = reason
        self._freeze()

    def _validate_command(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")


class _StatusHandlerBase:
    def __init__(
        self,
        access: IntegrationAccessService,
        integration_repository: IIntegrationRepository,
        event_publisher: IEventPublisher | None = None,
    ):
        self._access = access
        self._integration_repository = integration_repository
        self._event_publisher = event_publisher


class ActivateIntegrationCommandHandler(
    _StatusHandlerBase, IntegrationCommandHandler[ActivateIntegrationCommand]
):
    async def _handle(self, command: ActivateIntegrationCommand) -> CommandResult:
        integration = await self._access.get_integration(
            command.integration_id, command.user_id
        )
        integration.activate()
        await save_and_publish(self._integration_repository, integration, self._event_publisher)

        logger.info("Integration activated", integration_id=str(integration.id))
        health = integration.get_health_status()
        return CommandResult.success_result(
            integration.to_dict(), warnings=list(health.issues)
        )

    @property
    def command_type(self) -> type[ActivateIntegrationCommand]:
        return ActivateIntegrationCommand


class DeactivateIntegrationCommandHandler(
    _StatusHandlerBase, IntegrationCommandHandler[DeactivateIntegrationCommand]
):
    async def _handle(self, command: DeactivateIntegrationCommand) -> CommandResult:
        integration = await self._access.get_integration(
            command.integration_id, command.user_id
        )
        integration.pause(command.reason)
        await save_and_publish(self._integration_repository, integration, self._event_publisher)

        logger.info(
            "Integration deactivated",
            integration_id=str(integration.id),
            reason=command.reason,
        )
        return CommandResult.success_result(integration.to_dict())

    @property
    def command_type(self) -> type[DeactivateIntegrationCommand]:
        return DeactivateIntegrationCommand
