"""
Event Publisher Interface

Port for handing committed domain events to the rest of the system.
"""

from abc import ABC, abstractmethod

from integration_hub.core.domain.base import DomainEvent


class IEventPublisher(ABC):
    """Port for domain event publication."""

    @abstractmethod
    async def publish(self, events: list[DomainEvent]) -> None:
        """Publish events in the order they were raised."""
        ...
