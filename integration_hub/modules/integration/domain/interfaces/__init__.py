"""Integration Domain Interfaces."""

from .repositories import (
    IApiConnectionRepository,
    IDataMappingRepository,
    IExecutionHistoryRepository,
    IIntegrationRepository,
    ISyncJobRepository,
)
from .services import (
    ICredentialRefresher,
    IEventPublisher,
    IHttpTransport,
    IOwnershipVerifier,
    TransportResponse,
)

__all__ = [
    "IApiConnectionRepository",
    "ICredentialRefresher",
    "IDataMappingRepository",
    "IEventPublisher",
    "IExecutionHistoryRepository",
    "IHttpTransport",
    "IIntegrationRepository",
    "IOwnershipVerifier",
    "ISyncJobRepository",
    "TransportResponse",
]
