"""
Test cases for the ApiConnection entity.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from integration_hub.core.errors import OperationTimeoutError
from integration_hub.modules.integration.domain.entities import ApiConnection
from integration_hub.modules.integration.domain.enums import ConnectionStatus
from integration_hub.modules.integration.domain.errors import (
    CredentialsExpiredError,
    CredentialsNotRefreshableError,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    TransportResponse,
)
from integration_hub.modules.integration.domain.value_objects import AuthCredentials
from integration_hub.tests.builders import ScriptedTransport


class TestApiConnection:
    """Test connection state, probing and rate limits."""

    @pytest.fixture
    def connection(self, api_endpoint, api_key_auth):
        return ApiConnection(
            uuid4(), api_endpoint, api_key_auth, custom_headers={"X-Tenant": "acme"}
        )

    def test_starts_disconnected(self, connection, now):
        """Test a new connection cannot make requests until connected."""
        assert connection.status == ConnectionStatus.DISCONNECTED
        assert not connection.can_make_request(now)

        connection.connect(now)

        assert connection.can_make_request(now)

    def test_connect_with_expired_credentials(self, api_endpoint, now):
        """Test expired credentials block connecting."""
        auth = AuthCredentials.create_bearer("t", expires_at=now - timedelta(seconds=1))
        connection = ApiConnection(uuid4(), api_endpoint, auth)

        with pytest.raises(CredentialsExpiredError):
            connection.connect(now)

    def test_headers_are_layered(self, api_endpoint):
        """Test custom headers override auth headers, which override endpoint headers."""
        endpoint = api_endpoint.with_header("X-API-Key", "from-endpoint")
        connection = ApiConnection(
            uuid4(), endpoint, AuthCredentials.create_api_key("from-auth")
        )

        assert connection.get_headers()["X-API-Key"] == "from-auth"

        connection.set_custom_header("X-API-Key", "from-custom")
        assert connection.get_headers() == {
            "Content-Type": "application/json",
            "X-API-Key": "from-custom",
        }

    @pytest.mark.asyncio
    async def test_dry_run_probe_succeeds(self, connection, now):
        """Test probing without a transport only builds the request."""
        test = await connection.test_connection(now=now)

        assert test.success
        assert test.status_code == 200
        assert connection.status == ConnectionStatus.CONNECTED
        assert connection.last_success_at == now

    @pytest.mark.asyncio
    async def test_probe_sends_headers(self, connection, now):
        """Test the probe uses the layered headers."""
        transport = ScriptedTransport()

        await connection.test_connection(transport, now)

        assert transport.calls[0]["headers"]["X-Tenant"] == "acme"
        assert transport.calls[0]["headers"]["X-API-Key"] == "key-123"

    @pytest.mark.asyncio
    async def test_non_success_probe(self, connection, now):
        """Test a non-2xx answer marks the connection as errored."""
        transport = ScriptedTransport(TransportResponse(503, None, {}, 12.0))

        test = await connection.test_connection(transport, now)

        assert not test.success
        assert test.error_message == "HTTP 503 from api.example.com"
        assert connection.status == ConnectionStatus.ERROR
        assert connection.last_error_at == now

    @pytest.mark.asyncio
    async def test_transport_error_is_captured(self, connection, now):
        """Test a raising transport gives a failed probe, not an exception."""
        transport = ScriptedTransport(OperationTimeoutError("POST api.example.com", 30))

        test = await connection.test_connection(transport, now)

        assert not test.success
        assert "timed out" in test.error_message
        assert connection.status == ConnectionStatus.ERROR

    @pytest.mark.asyncio
    async def test_health_metrics_cover_recent_tests(self, connection, now):
        """Test only the last five probes count."""
        transport = ScriptedTransport(
            *[TransportResponse(500, None, {}, 10.0) for _ in range(3)],
            *[TransportResponse(200, None, {}, 20.0) for _ in range(5)],
        )
        for _ in range(8):
            await connection.test_connection(transport, now)

        metrics = connection.get_health_metrics()

        assert metrics["recentTestCount"] == 5
        assert metrics["successRate"] == 100.0
        assert metrics["averageResponseTime"] == 20.0
        assert metrics["lastFailureReason"] is None
        assert len(connection.connection_tests) == 8

    def test_rate_limit_headers(self, connection, now):
        """Test exhausted quota blocks requests until the reset time."""
        connection.connect(now)
        reset = int((now + timedelta(minutes=1)).timestamp())

        connection.record_rate_limit_from_response(
            {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": str(reset)}, now
        )

        assert connection.is_rate_limited(now)
        assert not connection.can_make_request(now)
        assert not connection.is_rate_limited(now + timedelta(minutes=2))

    def test_malformed_rate_limit_headers_are_ignored(self, connection, now):
        """Test unparseable headers leave the rate limit untouched."""
        connection.record_rate_limit_from_response(
            {"x-ratelimit-remaining": "lots", "x-ratelimit-reset": "soon"}, now
        )

        assert connection.rate_limit_info is None

    def test_refresh_credentials(self, api_endpoint, now):
        """Test refreshed credentials require a reconnect."""
        auth = AuthCredentials.create_oauth2("a1", "r1", now + timedelta(hours=1))
        connection = ApiConnection(uuid4(), api_endpoint, auth)
        connection.connect(now)

        connection.refresh_credentials(auth.refresh_with("a2"))

        assert connection.auth.credentials["access_token"] == "a2"
        assert connection.status == ConnectionStatus.DISCONNECTED

    def test_refresh_requires_refreshable_credentials(self, connection):
        """Test API keys cannot be refreshed."""
        with pytest.raises(CredentialsNotRefreshableError):
            connection.refresh_credentials(AuthCredentials.create_api_key("k2"))

    @pytest.mark.asyncio
    async def test_needs_attention(self, connection, now):
        """Test failing and stale connections are flagged."""
        assert not connection.needs_attention(now)

        await connection.test_connection(
            ScriptedTransport(TransportResponse(500, None, {}, 1.0)), now
        )
        assert connection.needs_attention(now)

        await connection.test_connection(now=now)
        await connection.test_connection(now=now)
        assert not connection.needs_attention(now)
        assert connection.needs_attention(now + timedelta(hours=25))
