"""Data mapping queries."""

from typing import Any
from uuid import UUID

from integration_hub.core.cqrs.base import Query, QueryHandler, QueryResult
from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.application.dto import DataMappingSummaryDTO
from integration_hub.modules.integration.application.services import (
    IntegrationAccessService,
)
from integration_hub.modules.integration.domain.interfaces.repositories import (
    IDataMappingRepository,
)
from integration_hub.modules.integration.domain.services import (
    DataTransformationService,
)

logger = get_logger(__name__)


class GetDataMappingQuery(Query):
    def __init__(self, mapping_id: UUID, user_id: UUID, include_statistics: bool = True):
        super().__init__()
        self.mapping_id = mapping_id
        self.user_id = user_id
        self.include_statistics = include_statistics
        self._freeze()

    def _validate_query(self) -> None:
        if not self.mapping_id:
            raise ValidationError("mapping_id is required", field="mapping_id")


class GetDataMappingQueryHandler(QueryHandler[GetDataMappingQuery, QueryResult]):
    def __init__(self, access: IntegrationAccessService):
        self._access = access

    async def handle(self, query: GetDataMappingQuery) -> QueryResult:
        mapping, _ = await self._access.get_mapping(query.mapping_id, query.user_id)
        data = mapping.to_dict()
        data["validation"] = mapping.validate_mapping().to_dict()
        if query.include_statistics:
            data["statistics"] = mapping.get_statistics()
        return QueryResult.single_result(data)

    @property
    def query_type(self) -> type[GetDataMappingQuery]:
        return GetDataMappingQuery


class GetDataMappingsByIntegrationQuery(Query):
    def __init__(self, integration_id: UUID, user_id: UUID, active_only: bool = False):
        super().__init__()
        self.integration_id = integration_id
        self.user_id = user_id
        self.active_only = active_only
        self._freeze()

    def _validate_query(self) -> None:
        if not self.integration_id:
            raise ValidationError("integration_id is required", field="integration_id")


class GetDataMappingsByIntegrationQueryHandler(
    QueryHandler[GetDataMappingsByIntegrationQuery, QueryResult]
):
    def __init__(
        self,
        access: IntegrationAccessService,
        mapping_repository: IDataMappingRepository,
    ):
        self._access = access
        self._mapping_repository = mapping_repository

    async def handle(self, query: GetDataMappingsByIntegrationQuery) -> QueryResult:
        integration = await self._access.get_integration(query.integration_id, query.user_id)
        mappings = await self._mapping_repository.get_by_integration(integration.id)
        if query.active_only:
            mappings = [m for m in mappings if m.is_active]
        mappings.sort(key=lambda m: m.name.lower())
        return QueryResult.single_result(
            [DataMappingSummaryDTO.from_domain(m).to_dict() for m in mappings]
        )

    @property
    def query_type(self) -> type[GetDataMappingsByIntegrationQuery]:
        return GetDataMappingsByIntegrationQuery


class ValidateDataMappingQuery(Query):
    """Validate a mapping and optionally preview it against sample records."""

    def __init__(
        self,
        mapping_id: UUID,
        user_id: UUID,
        sample_data: dict[str, Any] | list[dict[str, Any]] | None = None,
    ):
        super().__init__()
        self.mapping_id = mapping_id
        self.user_id = user_id
        self.sample_data = sample_data
        self._freeze()

    def _validate_query(self) -> None:
        if not self.mapping_id:
            raise ValidationError("mapping_id is required", field="mapping_id")
        if self.sample_data is not None and not isinstance(self.sample_data, dict | list):
            raise ValidationError(
                "sample_data must be a record or a list of records", field="sample_data"
            )


class ValidateDataMappingQueryHandler(QueryHandler[ValidateDataMappingQuery, QueryResult]):
    def __init__(
        self,
        access: IntegrationAccessService,
        transformation_service: DataTransformationService | None = None,
    ):
        self._access = access
        self._transformation_service = transformation_service or DataTransformationService()

    async def handle(self, query: ValidateDataMappingQuery) -> QueryResult:
        mapping, _ = await self._access.get_mapping(query.mapping_id, query.user_id)
        validation = mapping.validate_mapping()
        data: dict[str, Any] = {
            "mappingId": str(mapping.id),
            "validation": validation.to_dict(),
        }

        # Previewing a mapping with errors would only repeat them.
        if query.sample_data is not None and validation.is_valid:
            preview = self._transformation_service.transform(mapping, query.sample_data)
            data["preview"] = preview.to_dict()

        logger.debug(
            "Data mapping validated",
            mapping_id=str(mapping.id),
            is_valid=validation.is_valid,
            previewed="preview" in data,
        )
        return QueryResult.single_result(data)

    @property
    def query_type(self) -> type[ValidateDataMappingQuery]:
        return ValidateDataMappingQuery
