"""Integration application DTOs."""

from .integration_dto import (
    IntegrationListItemDTO,
    IntegrationMetricsDTO,
    IntegrationStatsDTO,
    IntegrationTypeDTO,
)
from .mapping_dto import DataMappingSummaryDTO
from .sync_dto import SyncJobSummaryDTO

__all__ = [
    "DataMappingSummaryDTO",
    "IntegrationListItemDTO",
    "IntegrationMetricsDTO",
    "IntegrationStatsDTO",
    "IntegrationTypeDTO",
    "SyncJobSummaryDTO",
]
