"""OAuth 2.0 refresh-token exchange."""

from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from integration_hub.core.config import HttpTransportConfig
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.domain.errors import (
    ConnectionFailedError,
    CredentialsNotRefreshableError,
)
from integration_hub.modules.integration.domain.interfaces.services import (
    ICredentialRefresher,
)
from integration_hub.modules.integration.domain.value_objects import AuthCredentials

logger = get_logger(__name__)


class OAuth2CredentialRefresher(ICredentialRefresher):
    """Exchanges refresh tokens at a provider's token endpoint."""

    def __init__(
        self,
        token_url: str,
        client_id: str,
        client_secret: str,
        config: HttpTransportConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self._config = config or HttpTransportConfig()
        self._client = client

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={
                    "User-Agent": self._config.user_agent,
                    "Accept": "application/json",
                },
                timeout=httpx.Timeout(self._config.timeout_seconds),
                verify=self._config.verify_ssl,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        reraise=True,
    )
    async def _request_token(self, refresh_token: str) -> httpx.Response:
        client = await self._ensure_client()
        return await client.post(
            self.token_url,
            data={
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            },
        )

    async def refresh(self, credentials: AuthCredentials) -> AuthCredentials:
        if not credentials.is_refreshable():
            raise CredentialsNotRefreshableError(f"{credentials.auth_type.value} credentials")

        host = httpx.URL(self.token_url).host
        try:
            response = await self._request_token(credentials.refresh_token)
        except httpx.HTTPError as e:
            raise ConnectionFailedError(host, str(e) or type(e).__name__) from e

        if response.status_code in (400, 401):
            logger.warning(
                "Token endpoint rejected refresh", host=host, status_code=response.status_code
            )
            raise CredentialsNotRefreshableError(f"token endpoint {host}")
        if not response.is_success:
            raise ConnectionFailedError(
                host, f"token endpoint returned HTTP {response.status_code}", response.status_code
            )

        try:
            payload: dict[str, Any] = response.json()
        except ValueError as e:
            raise ConnectionFailedError(host, "token endpoint returned invalid JSON") from e
        if not payload.get("access_token"):
            raise ConnectionFailedError(host, "token response has no access_token")

        expires_at = None
        if payload.get("expires_in"):
            expires_at = datetime.now(UTC) + timedelta(seconds=int(payload["expires_in"]))

        logger.info(
            "Credentials refreshed",
            host=host,
            expires_at=expires_at.isoformat() if expires_at else None,
        )
        return credentials.refresh_with(
            access_token=payload["access_token"],
            expires_at=expires_at,
            refresh_token=payload.get("refresh_token"),
        )
