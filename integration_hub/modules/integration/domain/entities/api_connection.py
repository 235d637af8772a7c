"""API connection entity.

Binds one endpoint to the credentials used to call it and tracks whether it
is reachable: recent probe outcomes, connection status and the provider's
rate-limit window.
"""

import time
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from integration_hub.core.domain.base import Entity
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.domain.enums import ConnectionStatus
from integration_hub.modules.integration.domain.errors import (
    CredentialsExpiredError,
    CredentialsNotRefreshableError,
    InvalidStateTransitionError,
)
from integration_hub.modules.integration.domain.interfaces.services import IHttpTransport
from integration_hub.modules.integration.domain.value_objects import (
    ApiEndpoint,
    AuthCredentials,
    ConnectionTest,
    RateLimitInfo,
)

logger = get_logger(__name__)

MAX_CONNECTION_TESTS = 10
HEALTH_WINDOW = 5
STALE_TEST_AFTER = timedelta(hours=24)


def _header(headers: dict[str, str], *names: str) -> str | None:
    lowered = {key.lower(): value for key, value in headers.items()}
    for name in names:
        value = lowered.get(name)
        if value not in (None, ""):
            return value
    return None


def _from_epoch(value: str) -> datetime:
    return datetime.fromtimestamp(int(float(value)), UTC)


class ApiConnection(Entity):
    """Connectivity state for one endpoint of an integration."""

    def __init__(
        self,
        integration_id: UUID,
        endpoint: ApiEndpoint,
        auth: AuthCredentials,
        custom_headers: dict[str, str] | None = None,
        entity_id: UUID | None = None,
    ):
        super().__init__(entity_id)
        self.integration_id = integration_id
        self._endpoint = endpoint
        self._auth = auth
        self._status = ConnectionStatus.DISCONNECTED
        self._connection_tests: list[ConnectionTest] = []
        self._rate_limit_info: RateLimitInfo | None = None
        self._custom_headers = dict(custom_headers or {})
        self._is_active = True
        self.last_tested_at: datetime | None = None
        self.last_success_at: datetime | None = None
        self.last_error_at: datetime | None = None

    @property
    def endpoint(self) -> ApiEndpoint:
        return self._endpoint

    @property
    def auth(self) -> AuthCredentials:
        return self._auth

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    @property
    def connection_tests(self) -> list[ConnectionTest]:
        return list(self._connection_tests)

    @property
    def rate_limit_info(self) -> RateLimitInfo | None:
        return self._rate_limit_info

    @property
    def custom_headers(self) -> dict[str, str]:
        return dict(self._custom_headers)

    @property
    def is_active(self) -> bool:
        return self._is_active

    # State checks

    def is_rate_limited(self, now: datetime | None = None) -> bool:
        if self._rate_limit_info is None:
            return False
        return self._rate_limit_info.is_exhausted(now or datetime.now(UTC))

    def can_make_request(self, now: datetime | None = None) -> bool:
        return (
            self._is_active
            and self._status == ConnectionStatus.CONNECTED
            and not self._auth.is_expired(now)
            and not self.is_rate_limited(now)
        )

    # Lifecycle

    def connect(self, now: datetime | None = None) -> None:
        if not self._is_active:
            raise InvalidStateTransitionError("connection", "inactive", "connect")
        if self._auth.is_expired(now):
            raise CredentialsExpiredError(f"connection to {self._endpoint.host}")
        self._status = ConnectionStatus.CONNECTED
        self.mark_modified()

    def disconnect(self) -> None:
        self._status = ConnectionStatus.DISCONNECTED
        self.mark_modified()

    def activate(self) -> None:
        self._is_active = True
        self.mark_modified()

    def deactivate(self) -> None:
        self._is_active = False
        self._status = ConnectionStatus.DISCONNECTED
        self.mark_modified()

    # Probing

    async def test_connection(
        self, transport: IHttpTransport | None = None, now: datetime | None = None
    ) -> ConnectionTest:
        """Probe the endpoint and record the outcome.

        Without a transport the probe only checks that request headers can
        be built, which makes it usable in dry runs.
        """
        self._status = ConnectionStatus.TESTING
        now = now or datetime.now(UTC)
        self.last_tested_at = now
        started = time.perf_counter()

        try:
            headers = self.get_headers()
            if transport is None:
                test = ConnectionTest(now, True, 0.0, 200)
            else:
                response = await transport.send(self._endpoint, headers)
                elapsed = response.elapsed_ms
                if elapsed is None:
                    elapsed = (time.perf_counter() - started) * 1000
                self.record_rate_limit_from_response(response.headers, now)
                if response.is_success:
                    test = ConnectionTest(now, True, elapsed, response.status_code)
                else:
                    test = ConnectionTest(
                        now,
                        False,
                        elapsed,
                        response.status_code,
                        f"HTTP {response.status_code} from {self._endpoint.host}",
                    )
        except Exception as e:
            logger.warning(
                "Connection test failed",
                integration_id=str(self.integration_id),
                host=self._endpoint.host,
                error=str(e),
            )
            test = ConnectionTest(
                now, False, (time.perf_counter() - started) * 1000, None, str(e)
            )

        self._add_test(test)
        if test.success:
            self._status = ConnectionStatus.CONNECTED
            self.last_success_at = now
        else:
            self._status = ConnectionStatus.ERROR
            self.last_error_at = now
        self.mark_modified()
        return test

    def _add_test(self, test: ConnectionTest) -> None:
        self._connection_tests.append(test)
        if len(self._connection_tests) > MAX_CONNECTION_TESTS:
            self._connection_tests = self._connection_tests[-MAX_CONNECTION_TESTS:]

    def record_rate_limit_from_response(
        self, headers: dict[str, str], now: datetime | None = None
    ) -> None:
        """Capture the provider's rate-limit headers (epoch-second timestamps)."""
        remaining = _header(headers, "x-ratelimit-remaining", "x-rate-limit-remaining")
        reset = _header(headers, "x-ratelimit-reset", "x-rate-limit-reset")
        if remaining is None or reset is None:
            return

        try:
            reset_time = _from_epoch(reset)
            window_start = _header(headers, "x-ratelimit-window-start")
            started = _from_epoch(window_start) if window_start else (now or datetime.now(UTC))
            window_end = _header(headers, "x-ratelimit-window-end")
            self._rate_limit_info = RateLimitInfo(
                remaining_requests=int(float(remaining)),
                reset_time=reset_time,
                window_start=started,
                window_end=_from_epoch(window_end) if window_end else reset_time,
            )
        except (ValueError, OverflowError, OSError):
            logger.warning(
                "Ignoring malformed rate-limit headers",
                integration_id=str(self.integration_id),
                remaining=remaining,
                reset=reset,
            )
            return
        self.mark_modified()

    # Configuration

    def update_auth(self, auth: AuthCredentials) -> None:
        self._auth = auth
        self._status = ConnectionStatus.DISCONNECTED
        self.mark_modified()

    def refresh_credentials(self, new_auth: AuthCredentials) -> None:
        if not self._auth.is_refreshable():
            raise CredentialsNotRefreshableError(f"connection to {self._endpoint.host}")
        self.update_auth(new_auth)

    def update_endpoint(self, endpoint: ApiEndpoint) -> None:
        self._endpoint = endpoint
        self._status = ConnectionStatus.DISCONNECTED
        self.mark_modified()

    def set_custom_header(self, name: str, value: str) -> None:
        self._custom_headers[name] = value
        self.mark_modified()

    def remove_custom_header(self, name: str) -> None:
        self._custom_headers.pop(name, None)
        self.mark_modified()

    def get_headers(self) -> dict[str, str]:
        """Endpoint headers, then authentication, then custom headers."""
        return {
            **self._endpoint.headers,
            **self._auth.to_auth_header(),
            **self._custom_headers,
        }

    # Health

    def get_health_metrics(self) -> dict[str, Any]:
        recent = self._connection_tests[-HEALTH_WINDOW:]
        if not recent:
            return {
                "successRate": 0.0,
                "averageResponseTime": 0.0,
                "recentTestCount": 0,
                "lastFailureReason": None,
            }

        successes = sum(1 for test in recent if test.success)
        times = [test.response_time for test in recent if test.response_time is not None]
        failures = [test for test in recent if not test.success]
        return {
            "successRate": successes / len(recent) * 100,
            "averageResponseTime": sum(times) / len(times) if times else 0.0,
            "recentTestCount": len(recent),
            "lastFailureReason": failures[-1].error_message if failures else None,
        }

    def needs_attention(self, now: datetime | None = None) -> bool:
        if not self._is_active:
            return False
        now = now or datetime.now(UTC)

        if self._auth.is_expired(now) or self._auth.needs_refresh(now):
            return True

        metrics = self.get_health_metrics()
        if metrics["recentTestCount"] > 0 and metrics["successRate"] < 50:
            return True

        return bool(self.last_tested_at and now - self.last_tested_at > STALE_TEST_AFTER)

    def to_dict(self) -> dict[str, Any]:
        def iso(value: datetime | None) -> str | None:
            return value.isoformat() if value else None

        return {
            "id": str(self.id),
            "integrationId": str(self.integration_id),
            "endpoint": self._endpoint.to_dict(),
            "auth": self._auth.to_dict(),
            "status": self._status.value,
            "connectionTests": [test.to_dict() for test in self._connection_tests],
            "rateLimitInfo": (
                self._rate_limit_info.to_dict() if self._rate_limit_info else None
            ),
            "customHeaders": dict(self._custom_headers),
            "isActive": self._is_active,
            "lastTestedAt": iso(self.last_tested_at),
            "lastSuccessAt": iso(self.last_success_at),
            "lastErrorAt": iso(self.last_error_at),
        }

    def __str__(self) -> str:
        return f"ApiConnection({self._endpoint}, {self._status.value})"
