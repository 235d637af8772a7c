"""Repository interfaces for Integration module."""

from .api_connection_repository import IApiConnectionRepository
from .data_mapping_repository import IDataMappingRepository
from .execution_history_repository import IExecutionHistoryRepository
from .integration_repository import IIntegrationRepository
from .sync_job_repository import ISyncJobRepository

__all__ = [
    "IApiConnectionRepository",
    "IDataMappingRepository",
    "IExecutionHistoryRepository",
    "IIntegrationRepository",
    "ISyncJobRepository",
]
