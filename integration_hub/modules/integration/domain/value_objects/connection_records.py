"""Connection probe and rate-limit records."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class ConnectionTest:
    timestamp: datetime
    success: bool
    response_time: float | None = None
    status_code: int | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "success": self.success,
            "responseTime": self.response_time,
            "statusCode": self.status_code,
            "errorMessage": self.error_message,
        }


@dataclass(frozen=True)
class RateLimitInfo:
    """Provider-reported rate-limit window."""

    remaining_requests: int
    reset_time: datetime
    window_start: datetime | None = None
    window_end: datetime | None = None

    def is_exhausted(self, now: datetime) -> bool:
        return self.remaining_requests <= 0 and now < self.reset_time

    def to_dict(self) -> dict[str, Any]:
        return {
            "remainingRequests": self.remaining_requests,
            "resetTime": self.reset_time.isoformat(),
            "windowStart": self.window_start.isoformat() if self.window_start else None,
            "windowEnd": self.window_end.isoformat() if self.window_end else None,
        }
