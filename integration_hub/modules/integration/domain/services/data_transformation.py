"""Data transformation service.

Runs a data mapping over one record or a batch of records and reports
what happened: per-record failures, warnings and field statistics. A
failing record never stops the rest of the batch.
"""

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from integration_hub.core.domain.base import DomainService
from integration_hub.core.errors import IntegrationHubError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.domain.services.field_transformer import (
    FieldTransformer,
)

if TYPE_CHECKING:
    from integration_hub.modules.integration.domain.aggregates import DataMapping

logger = get_logger(__name__)


@dataclass
class TransformationReport:
    """Per-record bookkeeping filled in by ``DataMapping.transform_data``."""

    mapped_fields: list[str] = field(default_factory=list)
    defaulted_fields: list[str] = field(default_factory=list)
    skipped_fields: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class TransformationStatistics:
    total_records: int = 0
    successful_records: int = 0
    failed_records: int = 0
    fields_mapped: int = 0
    fields_defaulted: int = 0
    fields_skipped: int = 0
    processing_time_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRecords": self.total_records,
            "successfulRecords": self.successful_records,
            "failedRecords": self.failed_records,
            "fieldsMapped": self.fields_mapped,
            "fieldsDefaulted": self.fields_defaulted,
            "fieldsSkipped": self.fields_skipped,
            "processingTime": self.processing_time_ms,
        }


@dataclass
class TransformationResult:
    """Outcome of transforming one record or a batch.

    ``data`` mirrors the input shape: a dict for a single record, a list
    of successfully transformed records for a batch.
    """

    success: bool
    data: dict[str, Any] | list[dict[str, Any]] | None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    statistics: TransformationStatistics = field(default_factory=TransformationStatistics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "data": self.data,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "statistics": self.statistics.to_dict(),
        }


class DataTransformationService(DomainService):
    """Report-producing wrapper around ``DataMapping.transform_data``."""

    def __init__(self, transformer: FieldTransformer | None = None):
        self._transformer = transformer or FieldTransformer()

    @property
    def transformer(self) -> FieldTransformer:
        return self._transformer

    def transform(
        self,
        mapping: "DataMapping",
        data: dict[str, Any] | list[dict[str, Any]],
    ) -> TransformationResult:
        """Transform a record, or each record of a list.

        Args:
            mapping: Data mapping to apply
            data: A record or a list of records

        Returns:
            TransformationResult: success is False if any record failed
        """
        started = time.perf_counter()
        records = data if isinstance(data, list) else [data]
        statistics = TransformationStatistics(total_records=len(records))
        outputs: list[dict[str, Any]] = []
        errors: list[str] = []
        warnings: list[str] = []

        for index, record in enumerate(records):
            report = TransformationReport()
            try:
                outputs.append(mapping.transform_data(record, self._transformer, report))
            except IntegrationHubError as e:
                statistics.failed_records += 1
                errors.append(e.message if len(records) == 1 else f"Record {index}: {e.message}")
                continue

            statistics.successful_records += 1
            statistics.fields_mapped += len(report.mapped_fields)
            statistics.fields_defaulted += len(report.defaulted_fields)
            statistics.fields_skipped += len(report.skipped_fields)
            prefix = "" if len(records) == 1 else f"Record {index}: "
            warnings.extend(f"{prefix}{warning}" for warning in report.warnings)

        statistics.processing_time_ms = (time.perf_counter() - started) * 1000
        if isinstance(data, list):
            result_data: Any = outputs
        else:
            result_data = outputs[0] if outputs else None

        logger.debug(
            "Data transformation finished",
            mapping_id=str(mapping.id),
            total_records=statistics.total_records,
            failed_records=statistics.failed_records,
        )
        return TransformationResult(
            success=statistics.failed_records == 0,
            data=result_data,
            errors=errors,
            warnings=warnings,
            statistics=statistics,
        )

    def __str__(self) -> str:
        return "DataTransformationService"
