"""
Test cases for the httpx transport and the OAuth2 refresher.

Requests are answered by ``httpx.MockTransport`` handlers.
"""

import json
from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs

import httpx
import pytest

from integration_hub.core.errors import OperationTimeoutError
from integration_hub.modules.integration.domain.errors import (
    ConnectionFailedError,
    CredentialsNotRefreshableError,
)
from integration_hub.modules.integration.domain.value_objects import AuthCredentials
from integration_hub.modules.integration.infrastructure.http_clients import (
    HttpxTransport,
    OAuth2CredentialRefresher,
)


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHttpxTransport:
    """Test request building and response parsing."""

    @pytest.mark.asyncio
    async def test_json_request_and_response(self, api_endpoint):
        """Test bodies are sent as JSON and JSON answers are decoded."""
        # Arrange
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            seen["key"] = request.headers["X-API-Key"]
            return httpx.Response(
                201, json={"id": "p1"}, headers={"X-RateLimit-Remaining": "9"}
            )

        transport = HttpxTransport(client=mock_client(handler))

        # Act
        response = await transport.send(api_endpoint, {"X-API-Key": "k"}, {"orderId": "A1"})

        # Assert
        assert seen == {"method": "POST", "body": {"orderId": "A1"}, "key": "k"}
        assert response.status_code == 201
        assert response.is_success
        assert response.body == {"id": "p1"}
        assert response.headers["x-ratelimit-remaining"] == "9"
        assert response.bytes_received > 0

    @pytest.mark.asyncio
    async def test_elapsed_time_for_prebuilt_response(self, api_endpoint):
        """Test a response built in advance is timed without reading httpx's clock."""
        transport = HttpxTransport(
            client=mock_client(lambda request: httpx.Response(200, json={"ok": True}))
        )

        response = await transport.send(api_endpoint, {})

        assert response.body == {"ok": True}
        assert response.elapsed_ms is not None
        assert response.elapsed_ms >= 0

    @pytest.mark.asyncio
    async def test_text_and_empty_bodies(self, api_endpoint):
        """Test non-JSON answers are returned as text and empty ones as None."""
        answers = [httpx.Response(200, text="plain"), httpx.Response(204)]
        transport = HttpxTransport(client=mock_client(lambda request: answers.pop(0)))

        text = await transport.send(api_endpoint, {})
        empty = await transport.send(api_endpoint, {})

        assert text.body == "plain"
        assert empty.body is None

    @pytest.mark.asyncio
    async def test_error_status_is_returned(self, api_endpoint):
        """Test non-2xx answers are not raised."""
        transport = HttpxTransport(
            client=mock_client(lambda request: httpx.Response(503, json={"error": "down"}))
        )

        response = await transport.send(api_endpoint, {})

        assert response.status_code == 503
        assert not response.is_success

    @pytest.mark.asyncio
    async def test_timeout(self, api_endpoint):
        """Test httpx timeouts become operation timeouts."""

        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        transport = HttpxTransport(client=mock_client(handler))

        with pytest.raises(OperationTimeoutError) as exc_info:
            await transport.send(api_endpoint, {})

        assert exc_info.value.code == "TIMEOUT"
        assert exc_info.value.message.startswith("POST api.example.com timed out after")

    @pytest.mark.asyncio
    async def test_connect_error(self, api_endpoint):
        """Test transport errors become connection failures."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport = HttpxTransport(client=mock_client(handler))

        with pytest.raises(ConnectionFailedError) as exc_info:
            await transport.send(api_endpoint, {})

        assert exc_info.value.message == (
            "Failed to connect to api.example.com: connection refused"
        )

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self, api_endpoint):
        """Test the transport only closes clients it created."""
        client = mock_client(lambda request: httpx.Response(200))

        async with HttpxTransport(client=client) as transport:
            await transport.send(api_endpoint, {})

        assert not client.is_closed
        await client.aclose()


class TestOAuth2CredentialRefresher:
    """Test the refresh-token exchange."""

    @pytest.fixture
    def credentials(self):
        return AuthCredentials.create_oauth2(
            "old-access", "refresh-1", datetime.now(UTC) - timedelta(minutes=1), ["read"]
        )

    def refresher(self, handler) -> OAuth2CredentialRefresher:
        return OAuth2CredentialRefresher(
            "https://auth.example.com/token", "client-1", "secret-1", client=mock_client(handler)
        )

    @pytest.mark.asyncio
    async def test_successful_refresh(self, credentials):
        """Test the grant is posted and the answer becomes new credentials."""
        # Arrange
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(parse_qs(request.content.decode()))
            return httpx.Response(200, json={"access_token": "new-access", "expires_in": 3600})

        # Act
        fresh = await self.refresher(handler).refresh(credentials)

        # Assert
        assert seen["grant_type"] == ["refresh_token"]
        assert seen["refresh_token"] == ["refresh-1"]
        assert seen["client_id"] == ["client-1"]
        assert fresh.credentials["access_token"] == "new-access"
        assert fresh.refresh_token == "refresh-1"
        assert fresh.scopes == ["read"]
        assert not fresh.is_expired()
        assert fresh.expires_at <= datetime.now(UTC) + timedelta(seconds=3600)

    @pytest.mark.asyncio
    async def test_rotated_refresh_token(self, credentials):
        """Test a reissued refresh token replaces the old one."""
        refresher = self.refresher(
            lambda request: httpx.Response(
                200, json={"access_token": "a2", "refresh_token": "refresh-2"}
            )
        )

        fresh = await refresher.refresh(credentials)

        assert fresh.refresh_token == "refresh-2"
        assert fresh.expires_at is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401])
    async def test_rejected_refresh(self, credentials, status):
        """Test a rejected grant means the credentials cannot be refreshed."""
        refresher = self.refresher(
            lambda request: httpx.Response(status, json={"error": "invalid_grant"})
        )

        with pytest.raises(CredentialsNotRefreshableError):
            await refresher.refresh(credentials)

    @pytest.mark.asyncio
    async def test_server_error(self, credentials):
        """Test provider failures are connection failures."""
        refresher = self.refresher(lambda request: httpx.Response(502))

        with pytest.raises(ConnectionFailedError) as exc_info:
            await refresher.refresh(credentials)

        assert exc_info.value.message == (
            "Failed to connect to auth.example.com: token endpoint returned HTTP 502"
        )

    @pytest.mark.asyncio
    async def test_missing_access_token(self, credentials):
        """Test a token response without a token is rejected."""
        refresher = self.refresher(lambda request: httpx.Response(200, json={"expires_in": 10}))

        with pytest.raises(ConnectionFailedError):
            await refresher.refresh(credentials)

    @pytest.mark.asyncio
    async def test_non_refreshable_credentials(self):
        """Test credentials without a refresh token are refused before any request."""
        calls = []
        refresher = self.refresher(lambda request: calls.append(request))

        with pytest.raises(CredentialsNotRefreshableError):
            await refresher.refresh(AuthCredentials.create_api_key("k"))

        assert calls == []
