"""Infrastructure services for the integration module."""

from .event_publisher import InMemoryEventPublisher
from .ownership_verifier import OwnerOnlyVerifier

__all__ = ["InMemoryEventPublisher", "OwnerOnlyVerifier"]
