"""Integration query handlers.

Read side of the module. Handlers return ``QueryResult`` envelopes and
raise typed errors for missing or forbidden resources.
"""

from .get_integration import GetIntegrationQuery, GetIntegrationQueryHandler
from .get_integration_health import (
    GetIntegrationHealthQuery,
    GetIntegrationHealthQueryHandler,
)
from .get_integration_metrics import (
    GetExecutionHistoryQuery,
    GetExecutionHistoryQueryHandler,
    GetIntegrationMetricsQuery,
    GetIntegrationMetricsQueryHandler,
)
from .get_integration_stats import (
    GetAvailableIntegrationTypesQuery,
    GetAvailableIntegrationTypesQueryHandler,
    GetIntegrationStatsQuery,
    GetIntegrationStatsQueryHandler,
)
from .get_mappings import (
    GetDataMappingQuery,
    GetDataMappingQueryHandler,
    GetDataMappingsByIntegrationQuery,
    GetDataMappingsByIntegrationQueryHandler,
    ValidateDataMappingQuery,
    ValidateDataMappingQueryHandler,
)
from .get_sync_jobs import (
    GetSyncJobQuery,
    GetSyncJobQueryHandler,
    GetSyncJobsByIntegrationQuery,
    GetSyncJobsByIntegrationQueryHandler,
    GetUpcomingSyncJobsQuery,
    GetUpcomingSyncJobsQueryHandler,
)
from .list_integrations import (
    GetIntegrationsByUserQuery,
    GetIntegrationsByUserQueryHandler,
    SearchIntegrationsQuery,
    SearchIntegrationsQueryHandler,
)

__all__ = [
    "GetAvailableIntegrationTypesQuery",
    "GetAvailableIntegrationTypesQueryHandler",
    "GetDataMappingQuery",
    "GetDataMappingQueryHandler",
    "GetDataMappingsByIntegrationQuery",
    "GetDataMappingsByIntegrationQueryHandler",
    "GetExecutionHistoryQuery",
    "GetExecutionHistoryQueryHandler",
    "GetIntegrationHealthQuery",
    "GetIntegrationHealthQueryHandler",
    "GetIntegrationMetricsQuery",
    "GetIntegrationMetricsQueryHandler",
    "GetIntegrationQuery",
    "GetIntegrationQueryHandler",
    "GetIntegrationStatsQuery",
    "GetIntegrationStatsQueryHandler",
    "GetIntegrationsByUserQuery",
    "GetIntegrationsByUserQueryHandler",
    "GetSyncJobQuery",
    "GetSyncJobQueryHandler",
    "GetSyncJobsByIntegrationQuery",
    "GetSyncJobsByIntegrationQueryHandler",
    "GetUpcomingSyncJobsQuery",
    "GetUpcomingSyncJobsQueryHandler",
    "SearchIntegrationsQuery",
    "SearchIntegrationsQueryHandler",
    "ValidateDataMappingQuery",
    "ValidateDataMappingQueryHandler",
]
