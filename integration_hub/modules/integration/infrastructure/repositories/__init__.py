"""In-memory repositories for the integration module."""

from .api_connection import InMemoryApiConnectionRepository
from .execution_history import InMemoryExecutionHistoryRepository
from .integration import InMemoryIntegrationRepository
from .mapping import InMemoryDataMappingRepository
from .sync_job import InMemorySyncJobRepository

__all__ = [
    "InMemoryApiConnectionRepository",
    "InMemoryDataMappingRepository",
    "InMemoryExecutionHistoryRepository",
    "InMemoryIntegrationRepository",
    "InMemorySyncJobRepository",
]
