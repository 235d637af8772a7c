"""Derived health report."""

from dataclasses import dataclass, field
from typing import Any

from integration_hub.modules.integration.domain.enums import HealthStatus


@dataclass(frozen=True)
class HealthReport:
    status: HealthStatus
    issues: list[str] = field(default_factory=list)

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "issues": list(self.issues)}
