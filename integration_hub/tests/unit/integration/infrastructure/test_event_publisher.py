"""
Test cases for the in-process event publisher and the default access policy.
"""

from uuid import uuid4

import pytest

from integration_hub.core.domain.base import DomainEvent
from integration_hub.modules.integration.domain.events import (
    CredentialsRefreshed,
    IntegrationActivated,
)
from integration_hub.modules.integration.infrastructure.services import (
    InMemoryEventPublisher,
    OwnerOnlyVerifier,
)


class TestInMemoryEventPublisher:
    """Test event recording and fan-out."""

    @pytest.mark.asyncio
    async def test_publish_records_events_in_order(self):
        """Test published events are kept in publication order."""
        publisher = InMemoryEventPublisher()
        first = IntegrationActivated(uuid4(), "draft")
        second = CredentialsRefreshed(uuid4(), None)

        await publisher.publish([first, second])

        assert publisher.published == [first, second]

    @pytest.mark.asyncio
    async def test_subscribers_match_by_type(self):
        """Test subscribers only see events of their type or its subclasses."""
        publisher = InMemoryEventPublisher()
        activations, everything = [], []

        async def on_activated(event):
            activations.append(event)

        async def on_any(event):
            everything.append(event)

        publisher.subscribe(IntegrationActivated, on_activated)
        publisher.subscribe(DomainEvent, on_any)
        activated = IntegrationActivated(uuid4(), "draft")
        refreshed = CredentialsRefreshed(uuid4(), None)

        await publisher.publish([activated, refreshed])

        assert activations == [activated]
        assert everything == [activated, refreshed]

    @pytest.mark.asyncio
    async def test_failing_subscriber_does_not_stop_others(self):
        """Test a subscriber error is logged and the remaining ones still run."""
        publisher = InMemoryEventPublisher()
        received = []

        async def broken(event):
            raise RuntimeError("subscriber down")

        async def working(event):
            received.append(event)

        publisher.subscribe(IntegrationActivated, broken)
        publisher.subscribe(IntegrationActivated, working)
        event = IntegrationActivated(uuid4(), "draft")

        await publisher.publish([event])

        assert received == [event]
        assert publisher.published == [event]

    @pytest.mark.asyncio
    async def test_clear(self):
        """Test clear forgets recorded events."""
        publisher = InMemoryEventPublisher()
        await publisher.publish([IntegrationActivated(uuid4(), "draft")])

        publisher.clear()

        assert publisher.published == []


class TestOwnerOnlyVerifier:
    """Test the default ownership policy."""

    @pytest.mark.asyncio
    async def test_only_owner_has_access(self, draft_integration):
        """Test the owner is allowed and anyone else is refused."""
        verifier = OwnerOnlyVerifier()

        assert await verifier.can_access(draft_integration.user_id, draft_integration)
        assert not await verifier.can_access(uuid4(), draft_integration)
