"""
Test cases for the integration query handlers.

Queries raise typed errors instead of answering with failure envelopes.
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.application.queries import (
    GetAvailableIntegrationTypesQuery,
    GetDataMappingQuery,
    GetDataMappingsByIntegrationQuery,
    GetExecutionHistoryQuery,
    GetExecutionHistoryQueryHandler,
    GetIntegrationHealthQuery,
    GetIntegrationMetricsQuery,
    GetIntegrationQuery,
    GetIntegrationsByUserQuery,
    GetIntegrationsByUserQueryHandler,
    GetIntegrationStatsQuery,
    GetSyncJobQuery,
    GetSyncJobsByIntegrationQuery,
    GetUpcomingSyncJobsQuery,
    SearchIntegrationsQuery,
    SearchIntegrationsQueryHandler,
    ValidateDataMappingQuery,
)
from integration_hub.modules.integration.domain.aggregates import SyncJob
from integration_hub.modules.integration.domain.enums import (
    ExecutionTrigger,
    SyncDirection,
    SyncJobStatus,
)
from integration_hub.modules.integration.domain.errors import (
    IntegrationAccessDeniedError,
    IntegrationNotFoundError,
    SyncJobNotFoundError,
)
from integration_hub.modules.integration.domain.value_objects import (
    ExecutionRecord,
    SyncSchedule,
)
from integration_hub.modules.integration.infrastructure.repositories import (
    InMemoryExecutionHistoryRepository,
    InMemoryIntegrationRepository,
)
from integration_hub.tests.builders import (
    DataMappingBuilder,
    IntegrationBuilder,
    order_mapping,
    order_schemas,
)


def sync_job(integration_id, name="Job", schedule=None):
    source, target = order_schemas()
    return SyncJob.create(integration_id, name, SyncDirection.PUSH, source, target, schedule)


def history_record(integration_id, minutes_ago, success=True):
    start = datetime.now(UTC) - timedelta(minutes=minutes_ago)
    return ExecutionRecord(
        execution_id=f"exec_{minutes_ago}",
        integration_id=integration_id,
        trigger=ExecutionTrigger.MANUAL,
        success=success,
        start_time=start,
        end_time=start + timedelta(milliseconds=200),
        requests_count=1,
        records_processed=2,
        errors=() if success else ("boom",),
    )


class TestGetIntegration:
    """Test single integration lookups."""

    @pytest.mark.asyncio
    async def test_details_with_related_resources(self, module, active_integration, user_id):
        """Test optional sections are added on request."""
        await module.integration_repository.save(active_integration)
        await module.mapping_repository.save(order_mapping(active_integration.id))
        await module.sync_job_repository.save(sync_job(active_integration.id))

        result = await module.query_bus.execute(
            GetIntegrationQuery(
                active_integration.id, user_id, include_mappings=True, include_sync_jobs=True
            )
        )

        data = result.data
        assert data["id"] == str(active_integration.id)
        assert data["health"]["status"] == "healthy"
        assert len(data["mappings"]) == 1
        assert data["mappings"][0]["isValid"] is True
        assert [j["name"] for j in data["syncJobs"]] == ["Job"]
        assert "connections" not in data

    @pytest.mark.asyncio
    async def test_missing_integration_raises(self, module, user_id):
        """Test queries raise instead of returning failures."""
        with pytest.raises(IntegrationNotFoundError):
            await module.query_bus.execute(GetIntegrationQuery(uuid4(), user_id))

    @pytest.mark.asyncio
    async def test_foreign_integration_raises(self, module, active_integration):
        """Test another user's integration is not readable."""
        await module.integration_repository.save(active_integration)

        with pytest.raises(IntegrationAccessDeniedError):
            await module.query_bus.execute(GetIntegrationQuery(active_integration.id, uuid4()))

    @pytest.mark.asyncio
    async def test_health(self, module, active_integration, user_id):
        """Test the health query scores the integration."""
        await module.integration_repository.save(active_integration)

        result = await module.query_bus.execute(
            GetIntegrationHealthQuery(active_integration.id, user_id)
        )

        assert result.data["status"] == "healthy"
        assert result.data["score"] == 100
        assert result.data["connections"] == []


class TestListIntegrations:
    """Test listing, filtering and paging."""

    @pytest.fixture
    def repository(self):
        return InMemoryIntegrationRepository()

    @pytest.mark.asyncio
    async def test_filters_and_sorting(self, repository, execution_config, user_id):
        """Test status and tag filters with name ordering."""
        # Arrange
        for name, active, tags in [
            ("Charlie", True, ["crm"]),
            ("alpha", True, ["crm", "sales"]),
            ("Bravo", False, ["crm"]),
        ]:
            builder = IntegrationBuilder().owned_by(user_id).named(name).with_tags(*tags)
            await repository.save(builder.active().build() if active else builder.build())
        await repository.save(IntegrationBuilder().named("Other user").build())
        handler = GetIntegrationsByUserQueryHandler(repository, execution_config)

        # Act
        result = await handler.handle(
            GetIntegrationsByUserQuery(
                user_id, status="active", tags=["CRM"], sort_by="name", sort_order="asc"
            )
        )

        # Assert
        assert [item["name"] for item in result.data] == ["alpha", "Charlie"]
        assert result.total_count == 2
        assert result.metadata == {"sortBy": "name", "sortOrder": "asc"}

    @pytest.mark.asyncio
    async def test_pagination(self, repository, execution_config, user_id):
        """Test the configured page size and has-more flag."""
        for name in ["a1", "a2", "a3"]:
            await repository.save(IntegrationBuilder().owned_by(user_id).named(name).build())
        handler = GetIntegrationsByUserQueryHandler(repository, execution_config)

        first = await handler.handle(
            GetIntegrationsByUserQuery(user_id, sort_by="name", sort_order="asc")
        )
        last = await handler.handle(
            GetIntegrationsByUserQuery(user_id, sort_by="name", sort_order="asc", offset=2)
        )

        assert [item["name"] for item in first.data] == ["a1", "a2"]
        assert first.get_pagination_info() == {
            "total": 3,
            "limit": 2,
            "offset": 0,
            "hasMore": True,
        }
        assert [item["name"] for item in last.data] == ["a3"]
        assert not last.has_more

    @pytest.mark.asyncio
    async def test_page_size_is_capped(self, repository, execution_config, user_id):
        """Test limits above the configured maximum are rejected."""
        handler = GetIntegrationsByUserQueryHandler(repository, execution_config)

        with pytest.raises(ValidationError):
            await handler.handle(GetIntegrationsByUserQuery(user_id, limit=6))

    @pytest.mark.parametrize(
        "options",
        [{"sort_by": "colour"}, {"sort_order": "up"}, {"limit": 0}, {"offset": -1}],
    )
    def test_invalid_list_queries(self, user_id, options):
        """Test query arguments are validated on construction."""
        with pytest.raises(ValidationError):
            GetIntegrationsByUserQuery(user_id, **options)

    @pytest.mark.asyncio
    async def test_search_ranks_name_matches_first(self, repository, execution_config, user_id):
        """Test name matches come before description and tag matches."""
        await repository.save(
            IntegrationBuilder().owned_by(user_id).named("Billing").with_tags("stripe").build()
        )
        await repository.save(
            IntegrationBuilder().owned_by(user_id).named("Stripe payouts").build()
        )
        await repository.save(IntegrationBuilder().owned_by(user_id).named("Mailer").build())
        handler = SearchIntegrationsQueryHandler(repository, execution_config)

        result = await handler.handle(SearchIntegrationsQuery(user_id, "  STRIPE "))

        assert [item["name"] for item in result.data] == ["Stripe payouts", "Billing"]
        assert result.metadata == {"searchTerm": "stripe"}

    def test_search_term_needs_two_characters(self, user_id):
        """Test single character searches are rejected."""
        with pytest.raises(ValidationError):
            SearchIntegrationsQuery(user_id, "a")


class TestStatistics:
    """Test statistics, metrics and history."""

    @pytest.mark.asyncio
    async def test_stats(self, module, user_id):
        """Test counters over a user's integrations."""
        active = IntegrationBuilder().owned_by(user_id).active().build()
        active.record_execution(True, 10.0)
        active.record_execution(False, 10.0, "boom")
        await module.integration_repository.save(active)
        await module.integration_repository.save(IntegrationBuilder().owned_by(user_id).build())

        result = await module.query_bus.execute(GetIntegrationStatsQuery(user_id))

        assert result.data["total"] == 2
        assert result.data["byStatus"] == {"active": 1, "draft": 1}
        assert result.data["byType"] == {"api": 2}
        assert result.data["totalRequests"] == 2
        assert result.data["overallSuccessRate"] == 50.0

    @pytest.mark.asyncio
    async def test_available_types(self, module):
        """Test every integration type is described."""
        result = await module.query_bus.execute(GetAvailableIntegrationTypesQuery())

        by_value = {item["value"]: item for item in result.data}
        assert by_value["api"]["displayName"] == "REST API"
        assert by_value["api"]["supportsSync"] is True
        assert by_value["webhook"]["supportsSync"] is False

    @pytest.mark.asyncio
    async def test_metrics_cover_the_period(self, module, active_integration, user_id):
        """Test only executions inside the period are counted."""
        await module.integration_repository.save(active_integration)
        await module.history_repository.add(history_record(active_integration.id, 5))
        await module.history_repository.add(
            history_record(active_integration.id, 30, success=False)
        )
        await module.history_repository.add(history_record(active_integration.id, 120))

        result = await module.query_bus.execute(
            GetIntegrationMetricsQuery(active_integration.id, user_id, period="hour")
        )

        assert result.data["totalExecutions"] == 2
        assert result.data["failedExecutions"] == 1
        assert result.data["successRate"] == 50.0
        assert result.data["recordsProcessed"] == 4

    def test_unknown_period(self, user_id):
        """Test periods are validated."""
        with pytest.raises(ValidationError):
            GetIntegrationMetricsQuery(uuid4(), user_id, period="year")

    @pytest.mark.asyncio
    async def test_history_is_paged_newest_first(
        self, module, execution_config, active_integration, user_id
    ):
        """Test history pages are ordered newest first and capped."""
        history = InMemoryExecutionHistoryRepository(execution_config)
        for minutes_ago in (40, 30, 20, 10):
            await history.add(history_record(active_integration.id, minutes_ago))
        await module.integration_repository.save(active_integration)
        handler = GetExecutionHistoryQueryHandler(module.access, history, execution_config)

        result = await handler.handle(GetExecutionHistoryQuery(active_integration.id, user_id))

        # history_limit=3 dropped the oldest record
        assert [r["executionId"] for r in result.data] == ["exec_10", "exec_20"]
        assert result.total_count == 3


class TestMappingAndSyncQueries:
    """Test data mapping and sync job lookups."""

    @pytest.mark.asyncio
    async def test_mapping_with_statistics(self, module, active_integration, user_id):
        """Test a mapping is returned with validation and statistics."""
        await module.integration_repository.save(active_integration)
        data_mapping = order_mapping(active_integration.id)
        await module.mapping_repository.save(data_mapping)

        result = await module.query_bus.execute(GetDataMappingQuery(data_mapping.id, user_id))

        assert result.data["validation"]["isValid"] is True
        assert "statistics" in result.data

    @pytest.mark.asyncio
    async def test_mappings_by_integration(self, module, active_integration, user_id):
        """Test mappings are sorted by name and can be limited to active ones."""
        await module.integration_repository.save(active_integration)
        for builder in (
            DataMappingBuilder(active_integration.id).named("zeta"),
            DataMappingBuilder(active_integration.id).named("Alpha"),
            DataMappingBuilder(active_integration.id).named("beta").inactive(),
        ):
            await module.mapping_repository.save(builder.build())

        everything = await module.query_bus.execute(
            GetDataMappingsByIntegrationQuery(active_integration.id, user_id)
        )
        active = await module.query_bus.execute(
            GetDataMappingsByIntegrationQuery(active_integration.id, user_id, active_only=True)
        )

        assert [m["name"] for m in everything.data] == ["Alpha", "beta", "zeta"]
        assert [m["name"] for m in active.data] == ["Alpha", "zeta"]

    @pytest.mark.asyncio
    async def test_validate_with_preview(self, module, active_integration, user_id):
        """Test a valid mapping is previewed against sample data."""
        await module.integration_repository.save(active_integration)
        data_mapping = order_mapping(active_integration.id)
        await module.mapping_repository.save(data_mapping)

        result = await module.query_bus.execute(
            ValidateDataMappingQuery(
                data_mapping.id, user_id, sample_data={"orderId": "A1", "total": 2}
            )
        )

        assert result.data["validation"]["isValid"] is True
        assert result.data["preview"]["data"] == {"id": "A1", "amountCents": 200}

    @pytest.mark.asyncio
    async def test_invalid_mapping_is_not_previewed(self, module, active_integration, user_id):
        """Test validation errors suppress the preview."""
        await module.integration_repository.save(active_integration)
        data_mapping = (
            DataMappingBuilder(active_integration.id).map("m1", "orderId", "id").build()
        )
        await module.mapping_repository.save(data_mapping)

        result = await module.query_bus.execute(
            ValidateDataMappingQuery(data_mapping.id, user_id, sample_data={"orderId": "A1"})
        )

        assert result.data["validation"]["isValid"] is False
        assert "preview" not in result.data

    @pytest.mark.asyncio
    async def test_sync_job_details(self, module, active_integration, user_id):
        """Test a sync job comes with statistics and attention flag."""
        await module.integration_repository.save(active_integration)
        job = sync_job(active_integration.id)
        await module.sync_job_repository.save(job)

        result = await module.query_bus.execute(GetSyncJobQuery(job.id, user_id))

        assert result.data["statistics"]["totalRuns"] == 0
        assert result.data["needsAttention"] is False

    @pytest.mark.asyncio
    async def test_missing_sync_job(self, module, user_id):
        """Test an unknown sync job raises."""
        with pytest.raises(SyncJobNotFoundError):
            await module.query_bus.execute(GetSyncJobQuery(uuid4(), user_id))

    @pytest.mark.asyncio
    async def test_sync_jobs_by_status(self, module, active_integration, user_id):
        """Test the status filter."""
        await module.integration_repository.save(active_integration)
        running = sync_job(active_integration.id, "Running")
        running.start()
        await module.sync_job_repository.save(running)
        await module.sync_job_repository.save(sync_job(active_integration.id, "Idle"))

        result = await module.query_bus.execute(
            GetSyncJobsByIntegrationQuery(
                active_integration.id, user_id, status=SyncJobStatus.RUNNING
            )
        )

        assert [j["name"] for j in result.data] == ["Running"]

    @pytest.mark.asyncio
    async def test_upcoming_jobs_are_limited_to_the_user(self, module, user_id):
        """Test only scheduled jobs of accessible integrations are listed."""
        # Arrange
        mine = IntegrationBuilder().owned_by(user_id).active().build()
        theirs = IntegrationBuilder().active().build()
        await module.integration_repository.save(mine)
        await module.integration_repository.save(theirs)
        hourly = SyncSchedule.every(3_600_000)
        await module.sync_job_repository.save(sync_job(mine.id, "Hourly", hourly))
        await module.sync_job_repository.save(sync_job(mine.id, "Manual"))
        await module.sync_job_repository.save(sync_job(theirs.id, "Theirs", hourly))

        # Act
        result = await module.query_bus.execute(GetUpcomingSyncJobsQuery(user_id, hours_ahead=2))

        # Assert
        assert [j["name"] for j in result.data] == ["Hourly"]

    def test_upcoming_window_is_bounded(self, user_id):
        """Test the look-ahead window is validated."""
        with pytest.raises(ValidationError):
            GetUpcomingSyncJobsQuery(user_id, hours_ahead=0)
