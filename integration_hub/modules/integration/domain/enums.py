"""Integration domain enums for type safety and domain modeling."""

from enum import Enum


class IntegrationType(Enum):
    """Types of integrations supported by the system."""

    API = "api"
    WEBHOOK = "webhook"
    DATABASE = "database"
    FILE = "file"
    EMAIL = "email"

    def __str__(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        if self == IntegrationType.API:
            return "REST API"
        return self.value.title()

    @property
    def description(self) -> str:
        return {
            IntegrationType.API: "Connect to REST APIs and web services",
            IntegrationType.WEBHOOK: "Receive real-time events over HTTP callbacks",
            IntegrationType.DATABASE: "Read from and write to external databases",
            IntegrationType.FILE: "Exchange data through file drops and storage",
            IntegrationType.EMAIL: "Send and receive data through email",
        }[self]

    @property
    def supports_sync(self) -> bool:
        """Check if this integration type supports scheduled synchronization."""
        return self in {
            IntegrationType.API,
            IntegrationType.DATABASE,
            IntegrationType.FILE,
        }


class IntegrationStatus(Enum):
    """Lifecycle states of an integration."""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    FAILED = "failed"
    DISCONNECTED = "disconnected"

    def __str__(self) -> str:
        return self.value

    @property
    def is_operational(self) -> bool:
        return self == IntegrationStatus.ACTIVE

    @property
    def is_broken(self) -> bool:
        return self in {IntegrationStatus.FAILED, IntegrationStatus.DISCONNECTED}


class AuthType(Enum):
    """Authentication types for external integrations."""

    API_KEY = "api_key"
    OAUTH2 = "oauth2"
    BASIC = "basic"
    BEARER = "bearer"
    CUSTOM = "custom"

    def __str__(self) -> str:
        return self.value

    @property
    def is_token_based(self) -> bool:
        return self in {AuthType.API_KEY, AuthType.OAUTH2, AuthType.BEARER}


class ConnectionStatus(Enum):
    """Connectivity states of an API connection."""

    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    TESTING = "testing"
    ERROR = "error"

    def __str__(self) -> str:
        return self.value


class HttpMethod(Enum):
    """HTTP methods accepted by API endpoints."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value

    @property
    def has_body(self) -> bool:
        return self in {HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH}


class FieldType(Enum):
    """Data types of schema fields."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ARRAY = "array"
    OBJECT = "object"

    def __str__(self) -> str:
        return self.value


class TransformationType(Enum):
    """How a field mapping derives its target value."""

    DIRECT = "direct"
    FORMAT = "format"
    LOOKUP = "lookup"
    CALCULATE = "calculate"
    CUSTOM = "custom"

    def __str__(self) -> str:
        return self.value

    @property
    def requires_config(self) -> bool:
        return self in {
            TransformationType.LOOKUP,
            TransformationType.CALCULATE,
            TransformationType.CUSTOM,
        }


class MappingType(Enum):
    """Structural kind of a field mapping."""

    FIELD = "field"
    OBJECT = "object"
    ARRAY = "array"
    CONDITIONAL = "conditional"
    COMPUTED = "computed"

    def __str__(self) -> str:
        return self.value


class SyncDirection(Enum):
    """Data synchronization directions."""

    PUSH = "push"
    PULL = "pull"
    BIDIRECTIONAL = "bidirectional"

    def __str__(self) -> str:
        return self.value


class SyncJobStatus(Enum):
    """Sync job execution states."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    PAUSED = "paused"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in {
            SyncJobStatus.COMPLETED,
            SyncJobStatus.FAILED,
            SyncJobStatus.CANCELLED,
        }

    @property
    def is_in_flight(self) -> bool:
        return self in {SyncJobStatus.RUNNING, SyncJobStatus.PAUSED}


class ConflictResolution(Enum):
    """Policies for records changed on both sides."""

    SOURCE_WINS = "source_wins"
    TARGET_WINS = "target_wins"
    MERGE = "merge"
    MANUAL = "manual"
    SKIP = "skip"

    def __str__(self) -> str:
        return self.value


class ScheduleType(Enum):
    """How a sync job is triggered."""

    MANUAL = "manual"
    INTERVAL = "interval"
    CRON = "cron"

    def __str__(self) -> str:
        return self.value


class SyncPhase(Enum):
    """Phase reported in sync progress."""

    INITIALIZING = "initializing"
    FETCHING = "fetching"
    TRANSFORMING = "transforming"
    SAVING = "saving"
    FINALIZING = "finalizing"

    def __str__(self) -> str:
        return self.value


class HealthStatus(Enum):
    """Derived health of an integration."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"

    def __str__(self) -> str:
        return self.value

    @property
    def severity(self) -> int:
        return {
            HealthStatus.HEALTHY: 0,
            HealthStatus.WARNING: 1,
            HealthStatus.CRITICAL: 2,
        }[self]

    def worst(self, other: "HealthStatus") -> "HealthStatus":
        return self if self.severity >= other.severity else other

    @classmethod
    def from_score(cls, score: float) -> "HealthStatus":
        if score >= 80:
            return cls.HEALTHY
        if score >= 50:
            return cls.WARNING
        return cls.CRITICAL


class ExecutionErrorType(Enum):
    """Classification of execution failures."""

    CONNECTION = "connection"
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    TRANSFORMATION = "transformation"
    VALIDATION = "validation"
    TIMEOUT = "timeout"

    def __str__(self) -> str:
        return self.value


class ExecutionTrigger(Enum):
    """What started an execution."""

    MANUAL = "manual"
    SCHEDULED = "scheduled"
    WEBHOOK = "webhook"
    TEST = "test"

    def __str__(self) -> str:
        return self.value
