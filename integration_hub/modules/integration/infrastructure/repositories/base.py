"""In-memory aggregate storage with optimistic versioning.

Aggregates are stored as deep copies so a caller holding a loaded
instance never shares state with the store or with another caller.
``save`` is a compare-and-set on ``version``: it succeeds only when the
stored copy still carries the version the caller loaded.
"""

import asyncio
import copy
from collections.abc import Callable
from typing import Generic, TypeVar
from uuid import UUID

from integration_hub.core.domain.base import AggregateRoot
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.domain.errors import ConcurrencyConflictError

logger = get_logger(__name__)

TAggregate = TypeVar("TAggregate", bound=AggregateRoot)


class InMemoryAggregateRepository(Generic[TAggregate]):
    """Versioned store shared by the aggregate repositories."""

    resource_name = "Aggregate"

    def __init__(self) -> None:
        self._items: dict[UUID, TAggregate] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def _snapshot(aggregate: TAggregate) -> TAggregate:
        stored = copy.deepcopy(aggregate)
        stored.clear_events()
        return stored

    async def get_by_id(self, aggregate_id: UUID) -> TAggregate | None:
        async with self._lock:
            stored = self._items.get(aggregate_id)
            return copy.deepcopy(stored) if stored is not None else None

    async def _find(self, predicate: Callable[[TAggregate], bool]) -> list[TAggregate]:
        async with self._lock:
            return [copy.deepcopy(item) for item in self._items.values() if predicate(item)]

    async def save(self, aggregate: TAggregate) -> TAggregate:
        """Store the aggregate and bump its version.

        Raises:
            ConcurrencyConflictError: If the stored version moved on since
                the aggregate was loaded
        """
        async with self._lock:
            stored = self._items.get(aggregate.id)
            if stored is not None and stored.version != aggregate.version:
                logger.info(
                    "Rejected stale save",
                    resource=self.resource_name,
                    aggregate_id=str(aggregate.id),
                    expected=aggregate.version,
                    actual=stored.version,
                )
                raise ConcurrencyConflictError(
                    self.resource_name, aggregate.id, aggregate.version, stored.version
                )

            if stored is not None:
                aggregate.increment_version()
            self._items[aggregate.id] = self._snapshot(aggregate)
            return aggregate

    async def delete(self, aggregate_id: UUID) -> bool:
        async with self._lock:
            return self._items.pop(aggregate_id, None) is not None
