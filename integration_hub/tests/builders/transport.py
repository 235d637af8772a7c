"""Scripted HTTP transport for execution tests."""

from typing import Any

from integration_hub.modules.integration.domain.interfaces.services import (
    IHttpTransport,
    TransportResponse,
)
from integration_hub.modules.integration.domain.value_objects import ApiEndpoint


class ScriptedTransport(IHttpTransport):
    """Answers with queued responses and records every request.

    A queued exception is raised instead of answering. Once the queue is
    empty every request gets ``default``.
    """

    def __init__(self, *responses: TransportResponse | Exception, default=None):
        self._responses = list(responses)
        self._default = default or TransportResponse(200, {"ok": True}, {}, 5.0, 11)
        self.calls: list[dict[str, Any]] = []

    def enqueue(self, response: TransportResponse | Exception) -> None:
        self._responses.append(response)

    async def send(
        self,
        endpoint: ApiEndpoint,
        headers: dict[str, str],
        body: Any = None,
    ) -> TransportResponse:
        self.calls.append({"endpoint": endpoint, "headers": dict(headers), "body": body})
        response = self._responses.pop(0) if self._responses else self._default
        if isinstance(response, Exception):
            raise response
        return response
