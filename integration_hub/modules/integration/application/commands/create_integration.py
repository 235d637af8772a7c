"""Create integration command and handler."""

from uuid import UUID

from integration_hub.core.cqrs.base import Command, CommandResult
from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.commands.base import (
    IntegrationCommandHandler,
    save_and_publish,
)
from integration_hub.modules.integration.domain.aggregates import Integration
from integration_hub.modules.integration.domain.enums import IntegrationType
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
    IntegrationConfig,
    RateLimits,
    RetryPolicy,
)

logger = get_logger(__name__)


class CreateIntegrationCommand(Command):
    """Command to create a draft integration."""

    def __init__(
        self,
        user_id: UUID,
        name: str,
        integration_type: IntegrationType | str,
        endpoints: list[ApiEndpoint] | None = None,
        auth: AuthCredentials | None = None,
        description: str | None = None,
        tags: list[str] | None = None,
        schema: DataSchema | None = None,
        rate_limits: RateLimits | None = None,
        retry_policy: RetryPolicy | None = None,
        timeout_ms: int | None = None,
    ):
        super().__init__()

        self.user_id = user_id
        self.name = name
        self.integration_type = integration_type
        self.endpoints = list(endpoints or [])
        self.auth = auth
        self.description = description
        self.tags = list(tags or [])
        self.schema = schema
        self.rate_limits = rate_limits
        self.retry_policy = retry_policy
        self.timeout_ms = timeout_ms

        self._freeze()

    def _validate_command(self) -> None:
        if not self.user_id:
            raise ValidationError("user_id is required", field="user_id")
        if not self.name or not self.name.strip():
            raise ValidationError("name is required", field="name")
        if not self.integration_type:
            raise ValidationError("integration_type is required", field="integration_type")


class CreateIntegrationCommandHandler(IntegrationCommandHandler[CreateIntegrationCommand]):
    """Handler for creating integrations."""

    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        event_publisher: IEventPublisher | None = None,
    ):
        self._integration_repository = integration_repository
        self._event_publisher = event_publisher

    async def _handle(self, command: CreateIntegrationCommand) -> CommandResult:
        config = IntegrationConfig(
            integration_type=IntegrationType(command.integration_type),
            endpoints=command.endpoints,
            auth=command.auth,
            schema=command.schema,
            rate_limits=command.rate_limits,
            retry_policy=command.retry_policy,
            timeout_ms=command.timeout_ms,
        )
        integration = Integration.create(
            user_id=command.user_id,
            name=command.name,
            config=config,
            description=command.description,
            tags=command.tags,
        )
        await save_and_publish(self._integration_repository, integration, self._event_publisher)

        logger.info(
            "Integration created",
            integration_id=str(integration.id),
            user_id=str(command.user_id),
            integration_type=config.integration_type.value,
        )
        return CommandResult.success_result(
            integration.to_dict(), warnings=integration.configuration_problems()
        )

    @property
    def command_type(self) -> type[CreateIntegrationCommand]:
        return CreateIntegrationCommand
