"""Data mapping DTOs."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from integration_hub.modules.integration.domain.aggregates import DataMapping


@dataclass(frozen=True)
class DataMappingSummaryDTO:
    """DTO for data mapping list items."""

    mapping_id: UUID
    integration_id: UUID
    name: str
    is_active: bool
    mapping_version: str
    mapping_count: int
    is_valid: bool
    updated_at: datetime

    @classmethod
    def from_domain(cls, data_mapping: DataMapping) -> "DataMappingSummaryDTO":
        return cls(
            mapping_id=data_mapping.id,
            integration_id=data_mapping.integration_id,
            name=data_mapping.name,
            is_active=data_mapping.is_active,
            mapping_version=data_mapping.mapping_version,
            mapping_count=len(data_mapping.mappings),
            is_valid=data_mapping.validate_mapping().is_valid,
            updated_at=data_mapping.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.mapping_id),
            "integrationId": str(self.integration_id),
            "name": self.name,
            "isActive": self.is_active,
            "version": self.mapping_version,
            "mappingCount": self.mapping_count,
            "isValid": self.is_valid,
            "updatedAt": self.updated_at.isoformat(),
        }
