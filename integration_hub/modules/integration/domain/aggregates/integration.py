"""Integration aggregate root.

An integration is a configured connector owned by one user. It carries its
configuration, lifecycle status, tags and cumulative execution metrics.
State changes go through methods; attributes are read-only properties.
"""

import threading
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from integration_hub.core.domain.base import AggregateRoot
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.enums import (
    HealthStatus,
    IntegrationStatus,
)
from integration_hub.modules.integration.domain.errors import (
    CredentialsExpiredError,
    CredentialsNotRefreshableError,
    IntegrationConfigurationError,
    InvalidStateTransitionError,
)
from integration_hub.modules.integration.domain.events import (
    CredentialsRefreshed,
    IntegrationActivated,
    IntegrationCreated,
    IntegrationExecuted,
    IntegrationStatusChanged,
)
from integration_hub.modules.integration.domain.value_objects import (
    AuthCredentials,
    HealthReport,
    IntegrationConfig,
    IntegrationMetrics,
)

MAX_NAME_LENGTH = 100
MAX_TAGS = 20
STALE_AFTER = timedelta(days=30)


class Integration(AggregateRoot):
    """Aggregate root for a configured connector to an external system."""

    def __init__(
        self,
        user_id: UUID,
        name: str,
        config: IntegrationConfig,
        description: str | None = None,
        tags: list[str] | None = None,
        entity_id: UUID | None = None,
    ):
        """Initialize an integration in draft status.

        Args:
            user_id: Owner
            name: Display name (1-100 characters)
            config: Connector configuration, may be incomplete while drafting
            description: Optional description
            tags: Optional tags, normalised to lower case
            entity_id: Optional identifier

        Raises:
            ValidationError: If name, config or tags are invalid
        """
        super().__init__(entity_id)
        if not isinstance(config, IntegrationConfig):
            raise ValidationError("config must be an IntegrationConfig")

        self._user_id = user_id
        self._name = self._validate_name(name)
        self._description = (description or "").strip()
        self._config = config
        self._status = IntegrationStatus.DRAFT
        self._metrics = IntegrationMetrics()
        self._tags = self._normalize_tags(tags or [])
        self._is_enabled = True
        self._metrics_lock = threading.Lock()

    @classmethod
    def create(
        cls,
        user_id: UUID,
        name: str,
        config: IntegrationConfig,
        description: str | None = None,
        tags: list[str] | None = None,
    ) -> "Integration":
        integration = cls(user_id, name, config, description, tags)
        integration.add_event(
            IntegrationCreated(
                integration.id,
                user_id,
                integration.name,
                str(config.integration_type),
            )
        )
        return integration

    # Validation helpers

    @staticmethod
    def _validate_name(name: str) -> str:
        if not name or not name.strip():
            raise ValidationError("Integration name cannot be empty", field="name")
        name = name.strip()
        if len(name) > MAX_NAME_LENGTH:
            raise ValidationError(
                f"Integration name cannot exceed {MAX_NAME_LENGTH} characters",
                field="name",
            )
        return name

    @staticmethod
    def _normalize_tags(tags: list[str]) -> list[str]:
        normalized: list[str] = []
        for tag in tags:
            cleaned = str(tag).strip().lower()
            if cleaned and cleaned not in normalized:
                normalized.append(cleaned)
        if len(normalized) > MAX_TAGS:
            raise ValidationError(f"An integration can have at most {MAX_TAGS} tags")
        return normalized

    # Read-only state

    @property
    def user_id(self) -> UUID:
        return self._user_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def config(self) -> IntegrationConfig:
        return self._config

    @property
    def status(self) -> IntegrationStatus:
        return self._status

    @property
    def metrics(self) -> IntegrationMetrics:
        return self._metrics

    @property
    def tags(self) -> list[str]:
        return list(self._tags)

    @property
    def is_enabled(self) -> bool:
        return self._is_enabled

    def is_owned_by(self, user_id: UUID) -> bool:
        return self._user_id == user_id

    def is_active(self) -> bool:
        return self._status == IntegrationStatus.ACTIVE and self._is_enabled

    def can_execute(self, now: datetime | None = None) -> bool:
        auth = self._config.auth
        return self.is_active() and auth is not None and not auth.is_expired(now)

    def configuration_problems(self) -> list[str]:
        return self._config.problems()

    # Lifecycle

    def activate(self, now: datetime | None = None) -> None:
        """Move to active after full configuration validation.

        Raises:
            InvalidStateTransitionError: If disabled or already active
            IntegrationConfigurationError: If the configuration is incomplete
            CredentialsExpiredError: If the credentials have expired
        """
        if self._status == IntegrationStatus.ACTIVE:
            raise InvalidStateTransitionError("integration", self._status.value, "activate")
        if not self._is_enabled:
            raise InvalidStateTransitionError("integration", "disabled", "activate")

        problems = self._config.problems()
        if problems:
            raise IntegrationConfigurationError(problems)
        if self._config.auth.is_expired(now):
            raise CredentialsExpiredError(f"integration '{self._name}'")

        previous = self._status
        self._status = IntegrationStatus.ACTIVE
        self.add_event(IntegrationActivated(self.id, previous.value))

    def pause(self, reason: str | None = None) -> None:
        if self._status != IntegrationStatus.ACTIVE:
            raise InvalidStateTransitionError("integration", self._status.value, "pause")
        self._change_status(IntegrationStatus.PAUSED, reason)

    def fail(self, reason: str | None = None) -> None:
        self._change_status(IntegrationStatus.FAILED, reason)

    def disconnect(self, reason: str | None = None) -> None:
        self._change_status(IntegrationStatus.DISCONNECTED, reason)

    def _change_status(self, new_status: IntegrationStatus, reason: str | None) -> None:
        old_status = self._status
        self._status = new_status
        self.add_event(
            IntegrationStatusChanged(self.id, old_status.value, new_status.value, reason)
        )

    def enable(self) -> None:
        self._is_enabled = True
        self.mark_modified()

    def disable(self) -> None:
        self._is_enabled = False
        self.mark_modified()

    # Editing

    def update_details(self, name: str | None = None, description: str | None = None) -> None:
        if name is not None:
            self._name = self._validate_name(name)
        if description is not None:
            self._description = description.strip()
        self.mark_modified()

    def update_config(self, config: IntegrationConfig) -> None:
        """Replace the configuration.

        Raises:
            IntegrationConfigurationError: If the integration is active and the
                new configuration would not pass activation
        """
        if not isinstance(config, IntegrationConfig):
            raise ValidationError("config must be an IntegrationConfig")
        if self._status == IntegrationStatus.ACTIVE:
            problems = config.problems()
            if problems:
                raise IntegrationConfigurationError(problems)
        self._config = config
        self.mark_modified()

    def set_tags(self, tags: list[str]) -> None:
        self._tags = self._normalize_tags(tags)
        self.mark_modified()

    def add_tag(self, tag: str) -> None:
        self.set_tags([*self._tags, tag])

    def remove_tag(self, tag: str) -> None:
        cleaned = tag.strip().lower()
        self.set_tags([existing for existing in self._tags if existing != cleaned])

    def refresh_credentials(self, new_auth: AuthCredentials) -> None:
        """Swap in refreshed credentials.

        Raises:
            CredentialsNotRefreshableError: If the current credentials have no
                refresh capability
        """
        current = self._config.auth
        if current is None or not current.is_refreshable():
            raise CredentialsNotRefreshableError(f"integration '{self._name}'")
        self._config = self._config.with_changes(auth=new_auth)
        self.add_event(
            CredentialsRefreshed(
                self.id,
                new_auth.expires_at.isoformat() if new_auth.expires_at else None,
            )
        )

    # Metrics

    def record_execution(
        self,
        success: bool,
        response_time: float,
        error_message: str | None = None,
        at: datetime | None = None,
    ) -> IntegrationMetrics:
        """Fold one execution outcome into the cumulative metrics."""
        with self._metrics_lock:
            self._metrics = self._metrics.record(success, response_time, error_message, at)
            metrics = self._metrics
        self.add_event(IntegrationExecuted(self.id, success, response_time, error_message))
        return metrics

    # Health

    def get_health_status(self, now: datetime | None = None) -> HealthReport:
        now = now or datetime.now(UTC)
        status = HealthStatus.HEALTHY
        issues: list[str] = []

        auth = self._config.auth
        if auth is not None and auth.is_expired(now):
            status = HealthStatus.CRITICAL
            issues.append("Authentication credentials have expired")
        elif auth is not None and auth.needs_refresh(now):
            status = status.worst(HealthStatus.WARNING)
            issues.append("Authentication credentials expire soon")

        metrics = self._metrics
        if metrics.total_requests > 0:
            failure_rate = metrics.failure_rate
            if failure_rate > 50:
                status = HealthStatus.CRITICAL
                issues.append(f"High failure rate: {failure_rate:.1f}%")
            elif failure_rate > 20:
                status = status.worst(HealthStatus.WARNING)
                issues.append(f"Elevated failure rate: {failure_rate:.1f}%")

        if metrics.last_executed_at and now - metrics.last_executed_at > STALE_AFTER:
            status = status.worst(HealthStatus.WARNING)
            issues.append("No executions in the last 30 days")

        if self._status.is_broken:
            status = HealthStatus.CRITICAL
            issues.append(f"Integration is {self._status.value}")
        if not self._is_enabled:
            status = status.worst(HealthStatus.WARNING)
            issues.append("Integration is disabled")

        return HealthReport(status, issues)

    # Copying

    def clone(self, new_name: str, include_credentials: bool = False) -> "Integration":
        config = self._config
        if not include_credentials:
            config = config.with_changes(auth=None)
        copy = Integration.create(
            user_id=self._user_id,
            name=new_name,
            config=config,
            description=f"Copy of {self._description or self._name}",
            tags=self._tags,
        )
        return copy

    # Serialization and persistence support

    def to_dict(self, include_secrets: bool = False) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "userId": str(self._user_id),
            "name": self._name,
            "description": self._description,
            "status": self._status.value,
            "config": self._config.to_dict(include_secrets),
            "metrics": self._metrics.to_dict(),
            "tags": list(self._tags),
            "isEnabled": self._is_enabled,
            "isActive": self.is_active(),
            "canExecute": self.can_execute(),
            "version": self.version,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    def __getstate__(self) -> dict[str, Any]:
        state = self.__dict__.copy()
        state.pop("_metrics_lock", None)
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        self.__dict__.update(state)
        self._metrics_lock = threading.Lock()

    def __str__(self) -> str:
        return f"Integration({self._name}, {self._status.value})"
