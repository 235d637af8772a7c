"""Service interfaces (ports) for Integration module."""

from .credential_refresher import ICredentialRefresher
from .event_publisher import IEventPublisher
from .http_transport import IHttpTransport, TransportResponse
from .ownership_verifier import IOwnershipVerifier

__all__ = [
    "ICredentialRefresher",
    "IEventPublisher",
    "IHttpTransport",
    "IOwnershipVerifier",
    "TransportResponse",
]
