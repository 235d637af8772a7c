"""
Integration Module Test Configuration

Provides fixtures shared by the domain, application and infrastructure
tests of the integration module.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

import pytest

from integration_hub.core.config import ExecutionConfig, Settings
from integration_hub.modules.integration.domain.aggregates import DataMapping, Integration
from integration_hub.modules.integration.domain.enums import HttpMethod
from integration_hub.modules.integration.domain.value_objects import (
    ApiEndpoint,
    AuthCredentials,
)
from integration_hub.modules.integration.infrastructure.dependencies import (
    IntegrationModule,
)
from integration_hub.tests.builders import (
    IntegrationBuilder,
    ScriptedTransport,
    order_mapping,
)


@pytest.fixture
def user_id() -> UUID:
    """Generate a user ID."""
    return uuid4()


@pytest.fixture
def now() -> datetime:
    """A fixed reference instant."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def api_endpoint() -> ApiEndpoint:
    """Create a POST endpoint that accepts a body."""
    return ApiEndpoint(
        "https://api.example.com/orders",
        HttpMethod.POST,
        headers={"Content-Type": "application/json"},
    )


@pytest.fixture
def api_key_auth() -> AuthCredentials:
    """Create API key credentials."""
    return AuthCredentials.create_api_key("key-123")


@pytest.fixture
def draft_integration(user_id, api_endpoint, api_key_auth) -> Integration:
    """Create a fully configured integration that is still a draft."""
    return (
        IntegrationBuilder()
        .owned_by(user_id)
        .with_endpoints(api_endpoint)
        .with_auth(api_key_auth)
        .build()
    )


@pytest.fixture
def active_integration(user_id, api_endpoint, api_key_auth) -> Integration:
    """Create an active integration with no pending events."""
    return (
        IntegrationBuilder()
        .owned_by(user_id)
        .with_endpoints(api_endpoint)
        .with_auth(api_key_auth)
        .active()
        .build()
    )


@pytest.fixture
def order_data_mapping(active_integration) -> DataMapping:
    """orderId -> id, total * 100 -> amountCents."""
    return order_mapping(active_integration.id)


@pytest.fixture
def transport() -> ScriptedTransport:
    """Create a scripted transport answering 200 by default."""
    return ScriptedTransport()


@pytest.fixture
def settings() -> Settings:
    """Settings read from an absent env file, so defaults apply."""
    return Settings(env_file=".env.test-missing")


@pytest.fixture
def execution_config() -> ExecutionConfig:
    """Small paging limits that make pagination easy to observe."""
    return ExecutionConfig(default_page_size=2, max_page_size=5, history_limit=3)


@pytest.fixture
def module(settings, transport) -> IntegrationModule:
    """Wire the integration module against the scripted transport."""
    return IntegrationModule(settings=settings, transport=transport)


@pytest.fixture
def dry_run_module(settings) -> IntegrationModule:
    """Wire the integration module without a transport."""
    return IntegrationModule(settings=settings)
