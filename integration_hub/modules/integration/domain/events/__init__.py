"""Integration domain events."""

from .integration_events import (
    CredentialsRefreshed,
    IntegrationActivated,
    IntegrationCreated,
    IntegrationExecuted,
    IntegrationStatusChanged,
)
from .mapping_events import DataMappingChanged
from .sync_events import SyncJobCompleted, SyncJobFailed, SyncJobStarted

__all__ = [
    "CredentialsRefreshed",
    "DataMappingChanged",
    "IntegrationActivated",
    "IntegrationCreated",
    "IntegrationExecuted",
    "IntegrationStatusChanged",
    "SyncJobCompleted",
    "SyncJobFailed",
    "SyncJobStarted",
]
