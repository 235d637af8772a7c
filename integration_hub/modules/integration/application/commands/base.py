"""Shared plumbing for integration command handlers."""

from abc import abstractmethod
from typing import Any, TypeVar

from integration_hub.core.cqrs.base import Command, CommandHandler, CommandResult
from integration_hub.core.domain.base import AggregateRoot
from integration_hub.core.errors import IntegrationHubError
from integration_hub.core.logging import get_logger, log_context
from integration_hub.modules.integration.domain.interfaces.services import IEventPublisher

logger = get_logger(__name__)

TCommand = TypeVar("TCommand", bound=Command)
TAggregate = TypeVar("TAggregate", bound=AggregateRoot)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"
UNEXPECTED_ERROR_CODE = "INTERNAL_ERROR"


class IntegrationCommandHandler(CommandHandler[TCommand, CommandResult]):
    """Command handler that always answers with a result envelope.

    Typed errors become failure envelopes carrying their message and code.
    Anything else is logged with its traceback and reported generically.
    """

    async def handle(self, command: TCommand) -> CommandResult:
        with log_context(
            command_type=type(command).__name__, command_id=str(command.command_id)
        ):
            try:
                return await self._handle(command)
            except IntegrationHubError as e:
                logger.info("Command rejected", error_code=e.code)
                return CommandResult.failure_result(e.message, e.code)
            except Exception:
                logger.exception("Unexpected error handling command")
                return CommandResult.failure_result(
                    UNEXPECTED_ERROR_MESSAGE, UNEXPECTED_ERROR_CODE
                )

    @abstractmethod
    async def _handle(self, command: TCommand) -> CommandResult:
        """Process the command. May raise typed errors."""


async def save_and_publish(
    repository: Any,
    aggregate: TAggregate,
    event_publisher: IEventPublisher | None,
) -> TAggregate:
    """Persist an aggregate, then hand its pending events to the publisher."""
    saved = await repository.save(aggregate)
    events = aggregate.clear_events()
    if event_publisher is not None and events:
        await event_publisher.publish(events)
    return saved
