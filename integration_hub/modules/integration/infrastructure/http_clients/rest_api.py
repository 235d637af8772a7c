"""httpx-backed transport for outbound integration calls."""

import time
from typing import Any

import httpx

from integration_hub.core.config import HttpTransportConfig
from integration_hub.core.errors import OperationTimeoutError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.domain.errors import ConnectionFailedError
from integration_hub.modules.integration.domain.interfaces.services import (
    IHttpTransport,
    TransportResponse,
)
from integration_hub.modules.integration.domain.value_objects import ApiEndpoint

logger = get_logger(__name__)


class HttpxTransport(IHttpTransport):
    """Sends integration requests through a shared ``httpx.AsyncClient``.

    The client is created lazily and reused until ``close``. Each request
    uses the endpoint's own timeout; the config timeout only bounds
    connection setup. Non-2xx responses are returned, not raised.
    """

    def __init__(
        self,
        config: HttpTransportConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self._config = config or HttpTransportConfig()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self):
        await self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self._config.user_agent},
                timeout=httpx.Timeout(self._config.timeout_seconds),
                verify=self._config.verify_ssl,
                limits=httpx.Limits(max_connections=self._config.max_connections),
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        endpoint: ApiEndpoint,
        headers: dict[str, str],
        body: Any = None,
    ) -> TransportResponse:
        client = await self._ensure_client()
        timeout_seconds = endpoint.timeout_ms / 1000
        timeout = httpx.Timeout(
            timeout_seconds, connect=min(timeout_seconds, self._config.timeout_seconds)
        )

        started = time.perf_counter()
        try:
            response = await client.request(
                endpoint.method.value,
                endpoint.url,
                headers=headers,
                json=body,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(
                "Request timed out",
                method=endpoint.method.value,
                host=endpoint.host,
                timeout_seconds=timeout_seconds,
            )
            raise OperationTimeoutError(
                f"{endpoint.method.value} {endpoint.host}", timeout_seconds
            ) from e
        except httpx.TransportError as e:
            logger.warning(
                "Request failed",
                method=endpoint.method.value,
                host=endpoint.host,
                error=str(e) or type(e).__name__,
            )
            raise ConnectionFailedError(endpoint.host, str(e) or type(e).__name__) from e
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.debug(
            "Request completed",
            method=endpoint.method.value,
            host=endpoint.host,
            status_code=response.status_code,
        )
        return TransportResponse(
            status_code=response.status_code,
            body=self._parse_body(response),
            headers=dict(response.headers),
            elapsed_ms=elapsed_ms,
            bytes_received=len(response.content),
        )

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text
