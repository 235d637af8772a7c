"""Domain layer core classes."""

from integration_hub.core.domain.base import (
    AggregateRoot,
    DomainEvent,
    DomainService,
    Entity,
    ValueObject,
)

__all__ = ["AggregateRoot", "DomainEvent", "DomainService", "Entity", "ValueObject"]
