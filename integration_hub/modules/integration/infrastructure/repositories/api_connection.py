"""In-memory API connection repository."""

import asyncio
import copy
from uuid import UUID

from integration_hub.modules.integration.domain.entities import ApiConnection
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IApiConnectionRepository,
)


class InMemoryApiConnectionRepository(IApiConnectionRepository):
    """Connections are entities, so saves are last-writer-wins."""

    def __init__(self) -> None:
        self._items: dict[UUID, ApiConnection] = {}
        self._lock = asyncio.Lock()

    async def get_by_integration(self, integration_id: UUID) -> list[ApiConnection]:
        async with self._lock:
            connections = [
                copy.deepcopy(c)
                for c in self._items.values()
                if c.integration_id == integration_id
            ]
        connections.sort(key=lambda c: c.created_at)
        return connections

    async def save(self, connection: ApiConnection) -> ApiConnection:
        async with self._lock:
            self._items[connection.id] = copy.deepcopy(connection)
        return connection

    async def delete_by_integration(self, integration_id: UUID) -> int:
        async with self._lock:
            doomed = [k for k, c in self._items.items() if c.integration_id == integration_id]
            for key in doomed:
                del self._items[key]
        return len(doomed)
