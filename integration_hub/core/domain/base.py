"""Domain primitives following pure Python, framework-agnostic principles.

Architecture:
- ValueObject: immutable objects representing domain concepts
- Entity: mutable objects with identity and lifecycle
- AggregateRoot: entities that collect domain events and carry a version
  used for optimistic locking
- DomainEvent: something that happened in the domain
- DomainService: stateless domain logic coordinators
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from integration_hub.core.errors import ValidationError

# =====================================================================================
# VALUE OBJECT BASE CLASS
# =====================================================================================


class ValueObject(ABC):
    """
    Base value object.

    Value objects are immutable and equal when all their public attributes
    are equal. Subclasses validate in ``__init__`` and call ``_freeze()``
    once every attribute is set.

    Usage Example:
        class Price(ValueObject):
            def __init__(self, amount: Decimal, currency: str):
                super().__init__()
                if amount < 0:
                    raise ValidationError("Price cannot be negative")
                self.amount = amount
                self.currency = currency.upper()
                self._freeze()

            def __str__(self) -> str:
                return f"{self.amount} {self.currency}"
    """

    def __init__(self):
        self._frozen = False
        self._hash_cache = None

    def _freeze(self) -> None:
        """Mark the object as frozen (immutable)."""
        self._frozen = True

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False) and name != "_hash_cache":
            raise AttributeError(f"Cannot modify immutable {self.__class__.__name__}")
        super().__setattr__(name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(
                f"Cannot delete attribute from immutable {self.__class__.__name__}"
            )
        super().__delattr__(name)

    def _public_attributes(self) -> dict[str, Any]:
        return {k: v for k, v in self.__dict__.items() if not k.startswith("_")}

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self._public_attributes() == other._public_attributes()

    def __hash__(self) -> int:
        if self._hash_cache is None:
            values = tuple(
                (key, _hashable(value))
                for key, value in sorted(self._public_attributes().items())
            )
            self._hash_cache = hash((self.__class__.__name__, values))
        return self._hash_cache

    def __repr__(self) -> str:
        attrs = ", ".join(f"{k}={v!r}" for k, v in self._public_attributes().items())
        return f"{self.__class__.__name__}({attrs})"

    @abstractmethod
    def __str__(self) -> str:
        """String representation. Must be implemented by subclasses."""

    @classmethod
    def validate_not_empty(cls, value: Any, field_name: str) -> None:
        """
        Validate that a value is not empty.

        Raises:
            ValidationError: If value is None or a blank string
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{field_name} cannot be empty", field=field_name)

    @classmethod
    def validate_in_range(
        cls, value: Any, min_val: Any, max_val: Any, field_name: str
    ) -> None:
        """
        Validate value is in an inclusive range.

        Raises:
            ValidationError: If value is out of range
        """
        if value < min_val or value > max_val:
            raise ValidationError(
                f"{field_name} must be between {min_val} and {max_val}",
                field=field_name,
            )


def _hashable(value: Any) -> Any:
    if isinstance(value, dict):
        return tuple(sorted((k, _hashable(v)) for k, v in value.items()))
    if isinstance(value, list | tuple):
        return tuple(_hashable(v) for v in value)
    if isinstance(value, set):
        return tuple(sorted(value))
    return value


# =====================================================================================
# ENTITY BASE CLASS
# =====================================================================================


class Entity(ABC):
    """Object defined by its ``id``; two entities are equal when their ids are."""

    def __init__(self, entity_id: UUID | None = None):
        self.id = entity_id or uuid4()
        self.created_at = datetime.now(UTC)
        self.updated_at = self.created_at
        self._validate_entity()

    def _validate_entity(self) -> None:
        """Raise ValidationError for invalid state. Extended by subclasses."""
        if not isinstance(self.id, UUID):
            raise ValidationError("Entity ID must be a UUID")

    def mark_modified(self) -> None:
        self.updated_at = datetime.now(UTC)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, type(self)) and self.id == other.id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"

    def __str__(self) -> str:
        return repr(self)


# =====================================================================================
# DOMAIN EVENT BASE CLASS
# =====================================================================================


class DomainEvent(ABC):
    """
    Something that happened to an aggregate.

    Aggregates collect events while they change; handlers publish them
    after the aggregate has been saved.
    """

    def __init__(self, aggregate_id: UUID):
        self.event_id = uuid4()
        self.aggregate_id = aggregate_id
        self.occurred_at = datetime.now(UTC)

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        """Event payload with ids and timestamps rendered as strings."""
        payload: dict[str, Any] = {"event_type": self.event_type}
        for key, value in vars(self).items():
            if isinstance(value, UUID):
                value = str(value)
            elif isinstance(value, datetime):
                value = value.isoformat()
            payload[key] = value
        return payload

    @abstractmethod
    def __str__(self) -> str:
        """One-line human description."""


# =====================================================================================
# AGGREGATE ROOT CLASS
# =====================================================================================


class AggregateRoot(Entity):
    """
    Aggregate root with domain event management and optimistic versioning.

    Aggregate roots are the consistency boundary for a cluster of related
    objects. Repositories compare ``version`` on save to detect concurrent
    writers.
    """

    def __init__(self, entity_id: UUID | None = None):
        self._events: list[DomainEvent] = []
        self._version = 1
        super().__init__(entity_id)

    def add_event(self, event: DomainEvent) -> None:
        """
        Add a domain event to the aggregate.

        Raises:
            ValidationError: If event is not a DomainEvent
        """
        if not isinstance(event, DomainEvent):
            raise ValidationError("Event must be a DomainEvent instance")

        self._events.append(event)
        self.mark_modified()

    def clear_events(self) -> list[DomainEvent]:
        """Clear and return all uncommitted events."""
        events = self._events.copy()
        self._events.clear()
        return events

    def get_events(self) -> list[DomainEvent]:
        """Get copy of uncommitted events without clearing them."""
        return self._events.copy()

    def increment_version(self) -> None:
        """Increment aggregate version for optimistic locking."""
        self._version += 1

    @property
    def version(self) -> int:
        """Get current aggregate version."""
        return self._version

    def _validate_entity(self) -> None:
        super()._validate_entity()

        if not isinstance(self._version, int) or self._version < 1:
            raise ValidationError("Aggregate version must be a positive integer")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"id={self.id}, "
            f"version={self._version}, "
            f"events={len(self._events)})"
        )


# =====================================================================================
# DOMAIN SERVICE BASE CLASS
# =====================================================================================


class DomainService(ABC):
    """
    Base class for domain services.

    Domain services hold domain logic that coordinates several aggregates
    and does not belong to any single one of them.
    """

    @abstractmethod
    def __str__(self) -> str:
        """String representation of the service."""



__all__ = [
    "AggregateRoot",
    "DomainEvent",
    "DomainService",
    "Entity",
    "ValueObject",
]
