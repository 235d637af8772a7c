"""CQRS base classes.

Commands represent an intent to change state, queries a request for data.
Handlers process them and buses route them to the registered handler.

Architecture:
- Command / Query: immutable request objects validated on construction
- CommandHandler / QueryHandler: process one request type
- CommandBus / QueryBus: route requests to handlers
- CommandResult / QueryResult: standardised response wrappers
"""

import time
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar
from uuid import UUID, uuid4

from integration_hub.core.errors import ConfigurationError, ValidationError
from integration_hub.core.logging import get_logger

logger = get_logger(__name__)

TCommand = TypeVar("TCommand", bound="Command")
TQuery = TypeVar("TQuery", bound="Query")
TResult = TypeVar("TResult")
THandler = TypeVar("THandler")


# =====================================================================================
# RESULT TYPES
# =====================================================================================


class CommandResult(Generic[TResult]):
    """
    Command outcome envelope.

    Serializes to ``{success, data?, errorMessage?, errorCode?, warnings?}``;
    absent members are left out.
    """

    def __init__(
        self,
        success: bool,
        data: TResult | None = None,
        error_message: str | None = None,
        error_code: str | None = None,
        warnings: list[str] | None = None,
    ):
        self.success = success
        self.data = data
        self.error_message = error_message
        self.error_code = error_code
        self.warnings = list(warnings or [])

    @classmethod
    def success_result(
        cls, data: TResult | None = None, warnings: list[str] | None = None
    ) -> "CommandResult[TResult]":
        return cls(True, data=data, warnings=warnings)

    @classmethod
    def failure_result(
        cls,
        error_message: str,
        error_code: str | None = None,
        warnings: list[str] | None = None,
        data: TResult | None = None,
    ) -> "CommandResult[TResult]":
        return cls(False, data, error_message, error_code, warnings)

    def is_failure(self) -> bool:
        return not self.success

    def to_dict(self) -> dict[str, Any]:
        members = {
            "data": self.data,
            "errorMessage": self.error_message,
            "errorCode": self.error_code,
            "warnings": self.warnings or None,
        }
        return {"success": self.success} | {k: v for k, v in members.items() if v is not None}

    def __repr__(self) -> str:
        if self.success:
            return f"CommandResult(success=True, warnings={self.warnings!r})"
        return f"CommandResult(success=False, error_code={self.error_code!r})"


class QueryResult(Generic[TResult]):
    """Query answer, optionally one page of a larger offset-paginated set."""

    def __init__(
        self,
        data: TResult,
        total_count: int | None = None,
        limit: int | None = None,
        offset: int | None = None,
        metadata: dict[str, Any] | None = None,
    ):
        self.data = data
        self.total_count = total_count
        self.limit = limit
        self.offset = offset
        self.metadata = metadata or {}

    @classmethod
    def single_result(
        cls, data: TResult, metadata: dict[str, Any] | None = None
    ) -> "QueryResult[TResult]":
        return cls(data, metadata=metadata)

    @classmethod
    def paginated_result(
        cls,
        data: TResult,
        total_count: int,
        limit: int,
        offset: int,
        metadata: dict[str, Any] | None = None,
    ) -> "QueryResult[TResult]":
        return cls(data, total_count, limit, offset, metadata)

    @property
    def is_paginated(self) -> bool:
        return self.total_count is not None and self.limit is not None

    @property
    def has_more(self) -> bool:
        return self.is_paginated and (self.offset or 0) + self.limit < self.total_count

    def get_pagination_info(self) -> dict[str, Any]:
        return {
            "total": self.total_count,
            "limit": self.limit,
            "offset": self.offset,
            "hasMore": self.has_more,
        }

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"data": self.data}
        if self.is_paginated:
            result["pagination"] = self.get_pagination_info()
        if self.metadata:
            result["metadata"] = self.metadata
        return result


# =====================================================================================
# COMMAND AND QUERY
# =====================================================================================


class _Message(ABC):
    """Request object that is validated once and then frozen."""

    def __init__(self):
        self._frozen = False
        self.message_id = uuid4()
        self.created_at = datetime.now(UTC)

    def _validate(self) -> None:
        """Raise ValidationError for invalid state. Overridden per message kind."""

    def _freeze(self) -> None:
        """Validate, then refuse any further attribute changes."""
        self._validate()
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(f"Cannot modify immutable {type(self).__name__}")
        super().__setattr__(name, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.message_id})"


class Command(_Message):
    """
    Intent to change system state.

    Usage Example:
        class ActivateIntegrationCommand(Command):
            def __init__(self, integration_id: UUID, user_id: UUID):
                super().__init__()
                self.integration_id = integration_id
                self.user_id = user_id
                self._freeze()
    """

    @property
    def command_id(self) -> UUID:
        return self.message_id

    def _validate(self) -> None:
        self._validate_command()

    def _validate_command(self) -> None:
        """Override to reject invalid commands."""


class Query(_Message):
    """Request for information. Never changes state."""

    @property
    def query_id(self) -> UUID:
        return self.message_id

    def _validate(self) -> None:
        self._validate_query()

    def _validate_query(self) -> None:
        """Override to reject invalid queries."""

    @staticmethod
    def validate_paging(limit: int, offset: int, max_limit: int = 1000) -> None:
        """
        Validate offset pagination values.

        Raises:
            ValidationError: If limit or offset are out of range
        """
        if limit < 1 or limit > max_limit:
            raise ValidationError(f"Limit must be between 1 and {max_limit}", field="limit")
        if offset < 0:
            raise ValidationError("Offset cannot be negative", field="offset")


# =====================================================================================
# HANDLERS
# =====================================================================================


class CommandHandler(ABC, Generic[TCommand, TResult]):
    """Processes one command type."""

    @abstractmethod
    async def handle(self, command: TCommand) -> TResult:
        """Handle the command and return result."""

    @property
    @abstractmethod
    def command_type(self) -> type[TCommand]:
        """The command type this handler processes."""


class QueryHandler(ABC, Generic[TQuery, TResult]):
    """Processes one query type. Query handlers never modify state."""

    @abstractmethod
    async def handle(self, query: TQuery) -> TResult:
        """Handle the query and return result."""

    @property
    @abstractmethod
    def query_type(self) -> type[TQuery]:
        """The query type this handler processes."""


# =====================================================================================
# BUSES
# =====================================================================================


class _HandlerRegistry(Generic[THandler]):
    """One handler per message type."""

    kind = "message"

    def __init__(self):
        self._handlers: dict[type, THandler] = {}

    def _add(self, message_type: type, handler: THandler) -> None:
        if message_type in self._handlers:
            raise ConfigurationError(
                f"Handler already registered for {self.kind} type {message_type.__name__}"
            )
        self._handlers[message_type] = handler
        logger.debug(
            "Handler registered",
            kind=self.kind,
            message_type=message_type.__name__,
            handler=type(handler).__name__,
        )

    def _lookup(self, message: _Message) -> THandler:
        handler = self._handlers.get(type(message))
        if handler is None:
            raise ConfigurationError(
                f"No handler registered for {self.kind} type {type(message).__name__}"
            )
        return handler

    def has_handler(self, message_type: type) -> bool:
        return message_type in self._handlers


class CommandBus(_HandlerRegistry[CommandHandler]):
    """Routes commands to their registered handler."""

    kind = "command"

    def register(self, handler: CommandHandler) -> None:
        """
        Register a command handler.

        Raises:
            ConfigurationError: If a handler is already registered for the type
        """
        self._add(handler.command_type, handler)

    async def execute(self, command: Command) -> Any:
        """
        Execute a command and return its handler's result unchanged.

        Raises:
            ConfigurationError: If no handler registered for command type
        """
        handler = self._lookup(command)
        started = time.perf_counter()
        result = await handler.handle(command)
        logger.info(
            "Command executed",
            command_type=type(command).__name__,
            command_id=str(command.command_id),
            success=getattr(result, "success", None),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return result


class QueryBus(_HandlerRegistry[QueryHandler]):
    """Routes queries to their registered handler. Handler errors propagate."""

    kind = "query"

    def register(self, handler: QueryHandler) -> None:
        """
        Register a query handler.

        Raises:
            ConfigurationError: If a handler is already registered for the type
        """
        self._add(handler.query_type, handler)

    async def execute(self, query: Query) -> Any:
        """
        Execute a query by routing to its handler.

        Raises:
            ConfigurationError: If no handler registered for query type
        """
        handler = self._lookup(query)
        started = time.perf_counter()
        try:
            return await handler.handle(query)
        finally:
            logger.debug(
                "Query executed",
                query_type=type(query).__name__,
                query_id=str(query.query_id),
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
