"""Update integration command and handler."""

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
    IIntegrationRepository,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    IEventPublisher,
)
from integration_hub.modules.integration.domain.value_objects import (
    ApiEndpoint,
    AuthCredentials,
    DataSchema,
    RateLimits,
    RetryPolicy,
)

logger = get_logger(__name__)

_CONFIG_FIELDS = ("endpoints", "auth", "schema", "rate_limits", "retry_policy", "timeout_ms")


class UpdateIntegrationCommand(Command):
    """Command to change an integration's details, tags or configuration.

    Only arguments that are not None are applied.
    """

    def __init__(
        self,
        integration_id: UUID,
        user_id: UUID,
        name: str | None = None,
        description: str | None = None,
        tags: list[str] | None = None,
        is_enabled: bool | None = None,
        endpoints: list[ApiEndpoint] | None = None,
        auth: AuthCredentials | None = None,
        schema: DataSchema | None = None,
        rate_limits: RateLimits | None = None,
        retry_policy: RetryPolicy | None = None,
        timeout_ms: int | None = None,
    ):
        super().__init__()

        self.integration_id = integration_id
        self.user_id = user_id
        self.name = name
        self.description = description
        self.tags = list(tags) if tags is not None else None
        self.is_enabled = is_enabled
        self.endpoints = list(endpoints) if endpoints is not None else None
        self.auth = auth
        self.schema = schema
        self.rate_limits = rate_limits
        self.retry_policy = retry_policy
        self.timeout_ms = timeout_ms

        self._freeze()

    @property
    def config_changes(self) -> dict[str, Any]:
        return {
            name: getattr(self, name)
            for name in _CONFIG_FIELDS
            if getattr(self, name) is not None
        }

    def _validate_command(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")
        updates = [self.name, self.description, self.tags, self.is_enabled]
        if all(value is None for value in updates) and not self.config_changes:
            raise ValidationError("At least one field must be updated")


class UpdateIntegrationCommandHandler(IntegrationCommandHandler[UpdateIntegrationCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        integration_repository: IIntegrationRepository,
        event_publisher: IEventPublisher | None = None,
    ):
        self._access = access
        self._integration_repository = integration_repository
        self._event_publisher = event_publisher

    async def _handle(self, command: UpdateIntegrationCommand) -> CommandResult:
        integration = await self._access.get_integration(
            command.integration_id, command.user_id
        )

        if command.name is not None or command.description is not None:
            integration.update_details(command.name, command.description)
        if command.tags is not None:
            integration.set_tags(command.tags)
        if command.config_changes:
            integration.update_config(integration.config.with_changes(**command.config_changes))
        if command.is_enabled is True:
            integration.enable()
        elif command.is_enabled is False:
            integration.disable()

        await save_and_publish(self._integration_repository, integration, self._event_publisher)
        logger.info(
            "Integration updated",
            integration_id=str(integration.id),
            config_fields=sorted(command.config_changes),
        )
        return CommandResult.success_result(integration.to_dict())

    @property
    def command_type(self) -> type[UpdateIntegrationCommand]:
        return UpdateIntegrationCommand
