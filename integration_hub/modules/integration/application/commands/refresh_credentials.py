"""Refresh credentials command and handler.

Obtains new credentials through the configured refresher and swaps them
into the integration and every API connection that used the old ones.
"""

from uuid import UUID

from integration_hub.core.cqrs.base import Command, CommandResult
from integration_hub.core.errors import ConfigurationError, ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.commands.base import (
    IntegrationCommandHandler,
    save_and_publish,
)
from integration_hub.modules.integration.application.services import (
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.errors import (
    CredentialsNotRefreshableError,
)
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IApiConnectionRepository,
    IIntegrationRepository,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    ICredentialRefresher,
    IEventPublisher,
)

logger = get_logger(__name__)


class RefreshCredentialsCommand(Command):
    """Command to refresh an integration's authentication credentials."""

    def __init__(self, integration_id: UUID, user_id: UUID, force_refresh: bool = False):
        """Initialize refresh credentials command.

        Args:
            integration_id: Integration whose credentials are refreshed
            user_id: Caller
            force_refresh: Refresh even if the credentials are not close to expiry
        """
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self.force_refresh = force_refresh
        self._freeze()

    def _validate_command(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")


class RefreshCredentialsCommandHandler(IntegrationCommandHandler[RefreshCredentialsCommand]):
    def __init__(
        self,
        access: IntegrationAccessService,
        integration_repository: IIntegrationRepository,
        connection_repository: IApiConnectionRepository,
        credential_refresher: ICredentialRefresher | None,
        event_publisher: IEventPublisher | None = None,
    ):
        self._access = access
        self._integration_repository = integration_repository
        self._connection_repository = connection_repository
        self._refresher = credential_refresher
        self._event_publisher = event_publisher

    async def _handle(self, command: RefreshCredentialsCommand) -> CommandResult:
        integration = await self._access.get_integration(
            command.integration_id, command.user_id
        )
        current = integration.config.auth
        if current is None or not current.is_refreshable():
            raise CredentialsNotRefreshableError(f"integration '{integration.name}'")

        if not command.force_refresh and not (
            current.needs_refresh() or current.is_expired()
        ):
            logger.info(
                "Credentials do not need refresh",
                integration_id=str(integration.id),
                expires_at=current.expires_at.isoformat() if current.expires_at else None,
            )
            return CommandResult.success_result(
                integration.to_dict(), warnings=["Credentials did not need refresh"]
            )

        if self._refresher is None:
            raise ConfigurationError("No credential refresher is configured")

        new_auth = await self._refresher.refresh(current)
        integration.refresh_credentials(new_auth)

        connections = await self._connection_repository.get_by_integration(integration.id)
        refreshed_connections = 0
        for connection in connections:
            if connection.auth == current:
                connection.refresh_credentials(new_auth)
                await self._connection_repository.save(connection)
                refreshed_connections += 1

        await save_and_publish(self._integration_repository, integration, self._event_publisher)
        logger.info(
            "Credentials refreshed",
            integration_id=str(integration.id),
            connections=refreshed_connections,
            expires_at=new_auth.expires_at.isoformat() if new_auth.expires_at else None,
        )
        return CommandResult.success_result(integration.to_dict())

    @property
    def command_type(self) -> type[RefreshCredentialsCommand]:
        return RefreshCredentialsCommand
