"""Integration domain value objects."""

from .api_endpoint import ApiEndpoint
from .auth_credentials import AuthCredentials
from .connection_records import ConnectionTest, RateLimitInfo
from .data_schema import DataSchema, FieldDefinition, SchemaValidationResult
from .execution_record import ExecutionRecord
from .field_mapping import FieldMapping
from .field_path import MISSING, FieldPath, JsonValue, is_missing
from .health_report import HealthReport
from .integration_config import (
    IntegrationConfig,
    IntegrationMetrics,
    RateLimits,
    RetryPolicy,
)
from .sync_records import SyncError, SyncProgress, SyncResult
from .sync_schedule import SyncSchedule

__all__ = [
    "MISSING",
    "ApiEndpoint",
    "AuthCredentials",
    "ConnectionTest",
    "DataSchema",
    "ExecutionRecord",
    "FieldDefinition",
    "FieldMapping",
    "FieldPath",
    "HealthReport",
    "IntegrationConfig",
    "IntegrationMetrics",
    "JsonValue",
    "RateLimitInfo",
    "RateLimits",
    "RetryPolicy",
    "SchemaValidationResult",
    "SyncError",
    "SyncProgress",
    "SyncResult",
    "SyncSchedule",
    "is_missing",
]
