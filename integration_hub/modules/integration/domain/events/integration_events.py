"""Integration lifecycle and execution events."""

from uuid import UUID

from integration_hub.core.domain.base import DomainEvent


class IntegrationCreated(DomainEvent):
    """Raised when a new integration is created in draft."""

    def __init__(self, integration_id: UUID, user_id: UUID, name: str, integration_type: str):
        super().__init__(integration_id)
        self.user_id = user_id
        self.name = name
        self.integration_type = integration_type

    def __str__(self) -> str:
        return f"Integration {self.name} created"


class IntegrationActivated(DomainEvent):
    """Raised when an integration passes validation and becomes active."""

    def __init__(self, integration_id: UUID, previous_status: str):
        super().__init__(integration_id)
        self.previous_status = previous_status

    def __str__(self) -> str:
        return f"Integration {self.aggregate_id} activated"


class IntegrationStatusChanged(DomainEvent):
    """Raised on pause, failure and disconnection."""

    def __init__(
        self,
        integration_id: UUID,
        old_status: str,
        new_status: str,
        reason: str | None = None,
    ):
        super().__init__(integration_id)
        self.old_status = old_status
        self.new_status = new_status
        self.reason = reason

    def __str__(self) -> str:
        return f"Integration {self.aggregate_id}: {self.old_status} -> {self.new_status}"


class IntegrationExecuted(DomainEvent):
    """Raised each time an execution outcome is recorded."""

    def __init__(
        self,
        integration_id: UUID,
        success: bool,
        response_time: float,
        error_message: str | None = None,
    ):
        super().__init__(integration_id)
        self.success = success
        self.response_time = response_time
        self.error_message = error_message

    def __str__(self) -> str:
        outcome = "succeeded" if self.success else "failed"
        return f"Integration {self.aggregate_id} execution {outcome}"


class CredentialsRefreshed(DomainEvent):
    """Raised when an integration's credentials are replaced by a refresh."""

    def __init__(self, integration_id: UUID, expires_at: str | None):
        super().__init__(integration_id)
        self.expires_at = expires_at

    def __str__(self) -> str:
        return f"Credentials refreshed for integration {self.aggregate_id}"
