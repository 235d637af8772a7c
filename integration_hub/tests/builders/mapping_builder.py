"""
Data mapping test data builder.

The order schemas model the canonical example: an order with an ID and a
decimal total becomes a record with an ID and an amount in cents.
"""

import uuid

from integration_hub.modules.integration.domain.aggregates import DataMapping
from integration_hub.modules.integration.domain.enums import (
    FieldType,
    TransformationType,
)
from integration_hub.modules.integration.domain.value_objects import (
    DataSchema,
    FieldDefinition,
    FieldMapping,
)


def order_schemas(order_id_required: bool = True) -> tuple[DataSchema, DataSchema]:
    """Source and target schemas of the order example."""
    source = DataSchema(
        "order",
        "1.0",
        [
            FieldDefinition("orderId", FieldType.STRING, required=order_id_required),
            FieldDefinition("total", FieldType.NUMBER, required=True),
        ],
    )
    target = DataSchema(
        "payment",
        "1.0",
        [
            FieldDefinition("id", FieldType.STRING, required=True),
            FieldDefinition("amountCents", FieldType.NUMBER, required=True),
        ],
    )
    return source, target


def order_mapping(
    integration_id: uuid.UUID | None = None, order_id_required: bool = True
) -> DataMapping:
    """orderId -> id, total * 100 -> amountCents."""
    return (
        DataMappingBuilder(integration_id)
        .with_schemas(*order_schemas(order_id_required))
        .map("m1", "orderId", "id", required=True)
        .calculate("m2", "total", "amountCents", "${total} * 100", required=True)
        .build()
    )


class DataMappingBuilder:
    """Fluent builder for DataMapping aggregates."""

    def __init__(self, integration_id: uuid.UUID | None = None):
        self._integration_id = integration_id or uuid.uuid4()
        self._name = f"mapping-{uuid.uuid4().hex[:6]}"
        self._source, self._target = order_schemas()
        self._mappings: list[FieldMapping] = []
        self._active = True

    def named(self, name: str) -> "DataMappingBuilder":
        self._name = name
        return self

    def with_schemas(self, source: DataSchema, target: DataSchema) -> "DataMappingBuilder":
        self._source = source
        self._target = target
        return self

    def map(
        self, mapping_id: str, source_field: str, target_field: str, **options
    ) -> "DataMappingBuilder":
        self._mappings.append(FieldMapping(mapping_id, source_field, target_field, **options))
        return self

    def calculate(
        self,
        mapping_id: str,
        source_field: str,
        target_field: str,
        expression: str,
        dependencies: list[str] | None = None,
        **options,
    ) -> "DataMappingBuilder":
        config = {"expression": expression}
        if dependencies:
            config["dependencies"] = dependencies
        return self.map(
            mapping_id,
            source_field,
            target_field,
            transformation=TransformationType.CALCULATE,
            transformation_config=config,
            **options,
        )

    def inactive(self) -> "DataMappingBuilder":
        self._active = False
        return self

    def build(self) -> DataMapping:
        data_mapping = DataMapping(
            self._integration_id,
            self._name,
            self._source,
            self._target,
            self._mappings,
            is_active=self._active,
        )
        return data_mapping
