"""Integration domain layer.

- Aggregates: Integration, DataMapping, SyncJob
- Entities: ApiConnection
- Value objects for endpoints, credentials, schemas and field mappings
- Domain services for transformation and execution
- Repository and service ports implemented by the infrastructure layer
"""

from .aggregates import DataMapping, Integration, MappingValidationResult, SyncJob
from .entities import ApiConnection
from .services import (
    DataTransformationService,
    FieldTransformer,
    IntegrationExecutionService,
)
from .value_objects import (
    ApiEndpoint,
    AuthCredentials,
    DataSchema,
    FieldDefinition,
    FieldMapping,
    FieldPath,
    IntegrationConfig,
    SyncSchedule,
)

__all__ = [
    "ApiConnection",
    "ApiEndpoint",
    "AuthCredentials",
    "DataMapping",
    "DataSchema",
    "DataTransformationService",
    "FieldDefinition",
    "FieldMapping",
    "FieldPath",
    "FieldTransformer",
    "Integration",
    "IntegrationConfig",
    "IntegrationExecutionService",
    "MappingValidationResult",
    "SyncJob",
    "SyncSchedule",
]
