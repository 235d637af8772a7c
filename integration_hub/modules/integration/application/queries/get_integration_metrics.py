"""Execution metrics and history queries."""

from datetime import UTC, datetime, timedelta
from uuid import UUID

from integration_hub.core.config import ExecutionConfig
from integration_hub.core.cqrs.base import Query, QueryHandler, QueryResult
from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.dto import IntegrationMetricsDTO
from integration_hub.modules.integration.application.services import (
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IExecutionHistoryRepository,
)

logger = get_logger(__name__)

PERIODS: dict[str, timedelta] = {
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
}


class GetIntegrationMetricsQuery(Query):
    """Execution totals of an integration over ``hour``, ``day``, ``week`` or ``month``."""

    def __init__(self, integration_id: UUID, user_id: UUID, period: str = "day"):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self.period = period
        self._freeze()

    def _validate_query(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")
        if self.period not in PERIODS:
            raise ValidationError(
                f"period must be one of: {', '.join(PERIODS)}", field="period"
            )


class GetIntegrationMetricsQueryHandler(QueryHandler[GetIntegrationMetricsQuery, QueryResult]):
    def __init__(
        self,
        access: IntegrationAccessService,
        history_repository: IExecutionHistoryRepository,
    ):
        self._access = access
        self._history_repository = history_repository

    async def handle(self, query: GetIntegrationMetricsQuery) -> QueryResult:
        integration = await self._access.get_integration(query.integration_id, query.user_id)
        since = datetime.now(UTC) - PERIODS[query.period]
        records = await self._history_repository.get_by_integration(integration.id, since=since)
        metrics = IntegrationMetricsDTO.from_history(integration, query.period, since, records)
        return QueryResult.single_result(metrics.to_dict())

    @property
    def query_type(self) -> type[GetIntegrationMetricsQuery]:
        return GetIntegrationMetricsQuery


class GetExecutionHistoryQuery(Query):
    """Paginated execution records of an integration, newest first."""

    def __init__(
        self,
        integration_id: UUID,
        user_id: UUID,
        limit: int | None = None,
        offset: int = 0,
        since: datetime | None = None,
    ):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self.limit = limit
        self.offset = offset
        self.since = since
        self._freeze()

    def _validate_query(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")
        if self.limit is not None:
            self.validate_paging(self.limit, self.offset)
        elif self.offset < 0:
            raise ValidationError("Offset cannot be negative", field="offset")


class GetExecutionHistoryQueryHandler(QueryHandler[GetExecutionHistoryQuery, QueryResult]):
    def __init__(
        self,
        access: IntegrationAccessService,
        history_repository: IExecutionHistoryRepository,
        config: ExecutionConfig | None = None,
    ):
        self._access = access
        self._history_repository = history_repository
        self._config = config or ExecutionConfig()

    async def handle(self, query: GetExecutionHistoryQuery) -> QueryResult:
        integration = await self._access.get_integration(query.integration_id, query.user_id)
        limit = min(query.limit or self._config.default_page_size, self._config.max_page_size)

        records = await self._history_repository.get_by_integration(
            integration.id, since=query.since, limit=limit, offset=query.offset
        )
        total = await self._history_repository.count_by_integration(
            integration.id, since=query.since
        )
        return QueryResult.paginated_result(
            [record.to_dict() for record in records],
            total_count=total,
            limit=limit,
            offset=query.offset,
        )

    @property
    def query_type(self) -> type[GetExecutionHistoryQuery]:
        return GetExecutionHistoryQuery
