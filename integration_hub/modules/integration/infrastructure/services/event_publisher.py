"""In-process domain event publisher."""

from collections.abc import Awaitable, Callable

from integration_hub.core.domain.base import DomainEvent
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.domain.interfaces.services import IEventPublisher

logger = get_logger(__name__)

EventSubscriber = Callable[[DomainEvent], Awaitable[None]]


class InMemoryEventPublisher(IEventPublisher):
    """Keeps every published event and fans it out to subscribers.

    Subscribers run in registration order. A failing subscriber is logged
    and does not stop the others.
    """

    def __init__(self) -> None:
        self._published: list[DomainEvent] = []
        self._subscribers: dict[type[DomainEvent], list[EventSubscriber]] = {}

    @property
    def published(self) -> list[DomainEvent]:
        return list(self._published)

    def subscribe(self, event_type: type[DomainEvent], subscriber: EventSubscriber) -> None:
        self._subscribers.setdefault(event_type, []).append(subscriber)

    async def publish(self, events: list[DomainEvent]) -> None:
        for event in events:
            self._published.append(event)
            logger.debug(
                "Domain event published", event_type=event.event_type, payload=event.to_dict()
            )

            for event_type, subscribers in self._subscribers.items():
                if not isinstance(event, event_type):
                    continue
                for subscriber in subscribers:
                    try:
                        await subscriber(event)
                    except Exception:
                        logger.exception(
                            "Event subscriber failed",
                            event_type=event.event_type,
                            subscriber=getattr(subscriber, "__qualname__", repr(subscriber)),
                        )

    def clear(self) -> None:
        self._published.clear()
