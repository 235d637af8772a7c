"""API endpoint value object for external system connections."""

from typing import Any
from urllib.parse import urlparse

from integration_hub.core.domain.base import ValueObject
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.enums import HttpMethod

MIN_TIMEOUT_MS = 1
MAX_TIMEOUT_MS = 300_000
DEFAULT_TIMEOUT_MS = 30_000


class ApiEndpoint(ValueObject):
    """Value object representing one callable endpoint of an external API."""

    def __init__(
        self,
        url: str,
        method: HttpMethod | str = HttpMethod.GET,
        headers: dict[str, str] | None = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ):
        """Initialize API endpoint.

        Args:
            url: Absolute http(s) URL
            method: HTTP method
            headers: Default headers sent with every request
            timeout_ms: Request timeout in milliseconds (1 to 300000)

        Raises:
            ValidationError: If endpoint configuration is invalid
        """
        super().__init__()
        self.url = self._validate_url(url)
        self.method = self._validate_method(method)
        self.headers = {str(k): str(v) for k, v in (headers or {}).items()}

        if not isinstance(timeout_ms, int) or isinstance(timeout_ms, bool):
            raise ValidationError("Timeout must be an integer number of milliseconds")
        self.validate_in_range(timeout_ms, MIN_TIMEOUT_MS, MAX_TIMEOUT_MS, "timeout_ms")
        self.timeout_ms = timeout_ms

        self._freeze()

    @staticmethod
    def _validate_url(url: str) -> str:
        if not url or not isinstance(url, str) or not url.strip():
            raise ValidationError("Endpoint URL cannot be empty", field="url")

        url = url.strip()
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            raise ValidationError("Endpoint URL must use http or https", field="url")
        if not parsed.netloc:
            raise ValidationError("Endpoint URL must include a host", field="url")
        return url

    @staticmethod
    def _validate_method(method: HttpMethod | str) -> HttpMethod:
        if isinstance(method, HttpMethod):
            return method
        try:
            return HttpMethod(str(method).upper())
        except ValueError as e:
            raise ValidationError(
                f"Unsupported HTTP method: {method}", field="method"
            ) from e

    @property
    def host(self) -> str:
        return urlparse(self.url).netloc

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def with_header(self, name: str, value: str) -> "ApiEndpoint":
        return ApiEndpoint(
            self.url, self.method, {**self.headers, name: value}, self.timeout_ms
        )

    def with_timeout(self, timeout_ms: int) -> "ApiEndpoint":
        return ApiEndpoint(self.url, self.method, self.headers, timeout_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "method": self.method.value,
            "headers": dict(self.headers),
            "timeout": self.timeout_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApiEndpoint":
        return cls(
            url=data["url"],
            method=data.get("method", HttpMethod.GET.value),
            headers=data.get("headers"),
            timeout_ms=data.get("timeout", DEFAULT_TIMEOUT_MS),
        )

    def __str__(self) -> str:
        return f"{self.method.value} {self.url}"
