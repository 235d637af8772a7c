"""
HTTP Transport Interface

Port for outbound calls to the systems an integration connects to.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from integration_hub.modules.integration.domain.value_objects import ApiEndpoint


@dataclass(frozen=True)
class TransportResponse:
    status_code: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    elapsed_ms: float | None = None
    bytes_received: int = 0

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class IHttpTransport(ABC):
    """Port for sending a request to an endpoint."""

    @abstractmethod
    async def send(
        self,
        endpoint: ApiEndpoint,
        headers: dict[str, str],
        body: Any = None,
    ) -> TransportResponse:
        """
        Send one request.

        Args:
            endpoint: Target URL, method and timeout
            headers: Complete request headers, authentication included
            body: Optional JSON-serialisable body

        Returns:
            The response, whatever its status code

        Raises:
            OperationTimeoutError: If the endpoint timeout elapses
            ConnectionFailedError: If the request cannot be delivered
        """
        ...
