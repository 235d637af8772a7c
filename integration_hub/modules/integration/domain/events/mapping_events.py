"""Data mapping events."""

from uuid import UUID

from integration_hub.core.domain.base import DomainEvent


class DataMappingChanged(DomainEvent):
    """Raised when field mappings are added, updated or removed."""

    def __init__(self, mapping_id: UUID, change: str, field_mapping_id: str | None = None):
        super().__init__(mapping_id)
        self.change = change
        self.field_mapping_id = field_mapping_id

    def __str__(self) -> str:
        return f"Data mapping {self.aggregate_id} {self.change}"
