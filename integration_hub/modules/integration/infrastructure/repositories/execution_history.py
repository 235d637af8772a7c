"""In-memory execution history.

Each integration keeps at most ``history_limit`` records; the oldest are
dropped first.
"""

import asyncio
from collections import defaultdict, deque
from datetime import datetime
from uuid import UUID

from integration_hub.core.config import ExecutionConfig
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IExecutionHistoryRepository,
)
from integration_hub.modules.integration.domain.value_objects import ExecutionRecord


class InMemoryExecutionHistoryRepository(IExecutionHistoryRepository):
    def __init__(self, config: ExecutionConfig | None = None) -> None:
        limit = (config or ExecutionConfig()).history_limit
        self._records: defaultdict[UUID, deque[ExecutionRecord]] = defaultdict(
            lambda: deque(maxlen=limit)
        )
        self._lock = asyncio.Lock()

    async def add(self, record: ExecutionRecord) -> None:
        async with self._lock:
            self._records[record.integration_id].append(record)

    def _newest_first(
        self, integration_id: UUID, since: datetime | None
    ) -> list[ExecutionRecord]:
        records = sorted(
            self._records.get(integration_id, ()),
            key=lambda r: r.start_time,
            reverse=True,
        )
        if since is not None:
            records = [r for r in records if r.start_time >= since]
        return records

    async def get_by_integration(
        self,
        integration_id: UUID,
        since: datetime | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[ExecutionRecord]:
        async with self._lock:
            records = self._newest_first(integration_id, since)
        end = None if limit is None else offset + limit
        return records[offset:end]

    async def count_by_integration(
        self, integration_id: UUID, since: datetime | None = None
    ) -> int:
        async with self._lock:
            return len(self._newest_first(integration_id, since))

    async def delete_by_integration(self, integration_id: UUID) -> int:
        async with self._lock:
            return len(self._records.pop(integration_id, ()))
