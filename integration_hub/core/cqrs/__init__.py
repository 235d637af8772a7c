"""CQRS (Command Query Responsibility Segregation) implementation."""

from integration_hub.core.cqrs.base import (
    Command,
    CommandBus,
    CommandHandler,
    CommandResult,
    Query,
    QueryBus,
    QueryHandler,
    QueryResult,
)

__all__ = [
    "Command",
    "CommandBus",
    "CommandHandler",
    "CommandResult",
    "Query",
    "QueryBus",
    "QueryHandler",
    "QueryResult",
]
