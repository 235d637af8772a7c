"""Integration list and search queries.

Both queries filter the caller's integrations in memory, sort them and
return one page with pagination info.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from integration_hub.core.config import ExecutionConfig
from integration_hub.core.cqrs.base import Query, QueryHandler, QueryResult
from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.dto import IntegrationListItemDTO
from integration_hub.modules.integration.domain.aggregates import Integration
from integration_hub.modules.integration.domain.enums import (
    IntegrationStatus,
    IntegrationType,
)
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IIntegrationRepository,
)

logger = get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=UTC)

SORT_KEYS: dict[str, Any] = {
    "name": lambda i: i.name.lower(),
    "status": lambda i: i.status.value,
    "created_at": lambda i: i.created_at,
    "updated_at": lambda i: i.updated_at,
    "last_executed_at": lambda i: i.metrics.last_executed_at or _EPOCH,
    "success_rate": lambda i: i.metrics.success_rate,
}
SORT_ORDERS = ("asc", "desc")


def _validate_page(limit: int | None, offset: int) -> None:
    if limit is not None and limit < 1:
        raise ValidationError("Limit must be at least 1", field="limit")
    if offset < 0:
        raise ValidationError("Offset cannot be negative", field="offset")


def _paginate(
    items: list[Integration],
    limit: int | None,
    offset: int,
    config: ExecutionConfig,
    metadata: dict[str, Any],
) -> QueryResult:
    page_size = limit or config.default_page_size
    if page_size > config.max_page_size:
        raise ValidationError(
            f"Limit cannot exceed {config.max_page_size}", field="limit"
        )
    page = items[offset : offset + page_size]
    now = datetime.now(UTC)
    return QueryResult.paginated_result(
        [IntegrationListItemDTO.from_domain(i, now).to_dict() for i in page],
        total_count=len(items),
        limit=page_size,
        offset=offset,
        metadata=metadata,
    )


class GetIntegrationsByUserQuery(Query):
    """Query to list a user's integrations with filters, sorting and paging."""

    def __init__(
        self,
        user_id: UUID,
        status: IntegrationStatus | str | None = None,
        integration_type: IntegrationType | str | None = None,
        tags: list[str] | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        limit: int | None = None,
        offset: int = 0,
    ):
        """Initialize list query.

        Args:
            user_id: Owner whose integrations are listed
            status: Optional status filter
            integration_type: Optional type filter
            tags: Only integrations carrying every one of these tags
            sort_by: One of ``SORT_KEYS``
            sort_order: ``asc`` or ``desc``
            limit: Page size, defaults to the configured page size
            offset: Number of items to skip
        """
        super().__init__()

        self.user_id = user_id
        self.status = IntegrationStatus(status) if status else None
        self.integration_type = IntegrationType(integration_type) if integration_type else None
        self.tags = [tag.strip().lower() for tag in tags or [] if tag.strip()]
        self.sort_by = sort_by
        self.sort_order = sort_order
        self.limit = limit
        self.offset = offset

        self._freeze()

    def _validate_query(self) -> None:
        if not self.user_id:
            raise ValidationError("user_id is required", field="user_id")
        if self.sort_by not in SORT_KEYS:
            raise ValidationError(
                f"Invalid sort_by field. Must be one of: {sorted(SORT_KEYS)}",
                field="sort_by",
            )
        if self.sort_order not in SORT_ORDERS:
            raise ValidationError("sort_order must be 'asc' or 'desc'", field="sort_order")
        _validate_page(self.limit, self.offset)

    def matches(self, integration: Integration) -> bool:
        if self.status is not None and integration.status != self.status:
            return False
        if (
            self.integration_type is not None
            and integration.config.integration_type != self.integration_type
        ):
            return False
        return all(tag in integration.tags for tag in self.tags)


class GetIntegrationsByUserQueryHandler(
    QueryHandler[GetIntegrationsByUserQuery, QueryResult]
):
    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        config: ExecutionConfig | None = None,
    ):
        self._integration_repository = integration_repository
        self._config = config or ExecutionConfig()

    async def handle(self, query: GetIntegrationsByUserQuery) -> QueryResult:
        integrations = await self._integration_repository.get_by_user(query.user_id)
        matching = [i for i in integrations if query.matches(i)]
        matching.sort(key=SORT_KEYS[query.sort_by], reverse=query.sort_order == "desc")

        logger.debug(
            "Listing integrations",
            user_id=str(query.user_id),
            total=len(integrations),
            matching=len(matching),
        )
        return _paginate(
            matching,
            query.limit,
            query.offset,
            self._config,
            {"sortBy": query.sort_by, "sortOrder": query.sort_order},
        )

    @property
    def query_type(self) -> type[GetIntegrationsByUserQuery]:
        return GetIntegrationsByUserQuery


class SearchIntegrationsQuery(Query):
    """Case-insensitive search over name, description and tags."""

    def __init__(
        self,
        user_id: UUID,
        search_term: str,
        limit: int | None = None,
        offset: int = 0,
    ):
        super().__init__()
        self.user_id = user_id
        self.search_term = search_term.strip().lower() if search_term else ""
        self.limit = limit
        self.offset = offset
        self._freeze()

    def _validate_query(self) -> None:
        if not self.user_id:
            raise ValidationError("user_id is required", field="user_id")
        if len(self.search_term) < 2:
            raise ValidationError(
                "search_term must be at least 2 characters", field="search_term"
            )
        _validate_page(self.limit, self.offset)

    def matches(self, integration: Integration) -> bool:
        term = self.search_term
        return (
            term in integration.name.lower()
            or term in integration.description.lower()
            or any(term in tag for tag in integration.tags)
        )


class SearchIntegrationsQueryHandler(QueryHandler[SearchIntegrationsQuery, QueryResult]):
    def __init__(
        self,
        integration_repository: IIntegrationRepository,
        config: ExecutionConfig | None = None,
    ):
        self._integration_repository = integration_repository
        self._config = config or ExecutionConfig()

    async def handle(self, query: SearchIntegrationsQuery) -> QueryResult:
        integrations = await self._integration_repository.get_by_user(query.user_id)
        # Name matches rank before description and tag matches.
        matching = sorted(
            (i for i in integrations if query.matches(i)),
            key=lambda i: (query.search_term not in i.name.lower(), i.name.lower()),
        )
        return _paginate(
            matching,
            query.limit,
            query.offset,
            self._config,
            {"searchTerm": query.search_term},
        )

    @property
    def query_type(self) -> type[SearchIntegrationsQuery]:
        return SearchIntegrationsQuery
