"""Data mapping aggregate: the record transformation engine.

A data mapping turns a source record into a target record through an
ordered set of field mappings. ``calculate`` mappings may depend on target
fields produced by other mappings; those run first, and a dependency cycle
is a validation error.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from integration_hub.core.domain.base import AggregateRoot
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.enums import TransformationType
from integration_hub.modules.integration.domain.errors import (
    CircularDependencyError,
    InvalidFieldMappingError,
    MappingValidationError,
    SchemaValidationError,
    TransformationError,
)
from integration_hub.modules.integration.domain.events import DataMappingChanged
from integration_hub.modules.integration.domain.services.condition_evaluator import (
    evaluate_condition,
    parse_condition,
)
from integration_hub.modules.integration.domain.services.data_transformation import (
    TransformationReport,
)
from integration_hub.modules.integration.domain.services.field_transformer import (
    FieldTransformer,
)
from integration_hub.modules.integration.domain.value_objects import (
    MISSING,
    DataSchema,
    FieldMapping,
    FieldPath,
)


@dataclass(frozen=True)
class MappingValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


class DataMapping(AggregateRoot):
    """Declarative source-to-target record mapping."""

    def __init__(
        self,
        integration_id: UUID,
        name: str,
        source_schema: DataSchema,
        target_schema: DataSchema,
        mappings: list[FieldMapping] | None = None,
        description: str | None = None,
        mapping_version: str = "1.0.0",
        is_active: bool = True,
        metadata: dict[str, Any] | None = None,
        entity_id: UUID | None = None,
    ):
        super().__init__(entity_id)
        if not isinstance(source_schema, DataSchema) or not isinstance(
            target_schema, DataSchema
        ):
            raise ValidationError("Source and target schemas must be DataSchema instances")

        self._integration_id = integration_id
        self._name = self._validate_name(name)
        self._description = (description or "").strip()
        self._source_schema = source_schema
        self._target_schema = target_schema
        self._mapping_version = mapping_version
        self._is_active = bool(is_active)
        self._metadata = dict(metadata or {})
        self._mappings: list[FieldMapping] = []
        for mapping in mappings or []:
            self._check_candidate(mapping)
            self._mappings.append(mapping)

    @classmethod
    def create(
        cls,
        integration_id: UUID,
        name: str,
        source_schema: DataSchema,
        target_schema: DataSchema,
        mappings: list[FieldMapping] | None = None,
        description: str | None = None,
    ) -> "DataMapping":
        data_mapping = cls(
            integration_id, name, source_schema, target_schema, mappings, description
        )
        data_mapping.add_event(DataMappingChanged(data_mapping.id, "created"))
        return data_mapping

    @staticmethod
    def _validate_name(name: str) -> str:
        if not name or not name.strip():
            raise ValidationError("Data mapping name cannot be empty", field="name")
        return name.strip()

    # Read-only state

    @property
    def integration_id(self) -> UUID:
        return self._integration_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def source_schema(self) -> DataSchema:
        return self._source_schema

    @property
    def target_schema(self) -> DataSchema:
        return self._target_schema

    @property
    def mappings(self) -> list[FieldMapping]:
        return list(self._mappings)

    @property
    def mapping_version(self) -> str:
        return self._mapping_version

    @property
    def is_active(self) -> bool:
        return self._is_active

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self._metadata)

    def get_mapping(self, mapping_id: str) -> FieldMapping | None:
        for mapping in self._mappings:
            if mapping.id == mapping_id:
                return mapping
        return None

    # Editing

    def _check_candidate(self, candidate: FieldMapping, replacing: str | None = None) -> None:
        if not isinstance(candidate, FieldMapping):
            raise InvalidFieldMappingError("mapping must be a FieldMapping")

        errors = candidate.structural_errors()
        if errors:
            raise InvalidFieldMappingError("; ".join(errors), candidate.id or None)

        for existing in self._mappings:
            if existing.id == replacing:
                continue
            if existing.id == candidate.id:
                raise InvalidFieldMappingError(
                    f"mapping ID '{candidate.id}' already exists", candidate.id
                )
            if existing.target_field == candidate.target_field:
                raise InvalidFieldMappingError(
                    f"target field '{candidate.target_field}' is already mapped",
                    candidate.id,
                )

    def add_mapping(self, mapping: FieldMapping) -> None:
        """Append a field mapping.

        Raises:
            InvalidFieldMappingError: If the mapping is incomplete or its ID or
                target field is already used
        """
        self._check_candidate(mapping)
        self._mappings.append(mapping)
        self.add_event(DataMappingChanged(self.id, "mapping_added", mapping.id))

    def update_mapping(self, mapping_id: str, **changes: Any) -> FieldMapping:
        """Apply a partial update to one field mapping and re-validate it."""
        existing = self.get_mapping(mapping_id)
        if existing is None:
            raise InvalidFieldMappingError("mapping does not exist", mapping_id)

        try:
            updated = existing.with_updates(**changes)
        except ValidationError as e:
            raise InvalidFieldMappingError(e.message, mapping_id) from e
        self._check_candidate(updated, replacing=mapping_id)

        index = self._mappings.index(existing)
        self._mappings[index] = updated
        self.add_event(DataMappingChanged(self.id, "mapping_updated", mapping_id))
        return updated

    def remove_mapping(self, mapping_id: str) -> None:
        existing = self.get_mapping(mapping_id)
        if existing is None:
            raise InvalidFieldMappingError("mapping does not exist", mapping_id)
        self._mappings.remove(existing)
        self.add_event(DataMappingChanged(self.id, "mapping_removed", mapping_id))

    def update_details(self, name: str | None = None, description: str | None = None) -> None:
        if name is not None:
            self._name = self._validate_name(name)
        if description is not None:
            self._description = description.strip()
        self.mark_modified()

    def set_metadata(self, key: str, value: Any) -> None:
        self._metadata[key] = value
        self.mark_modified()

    def activate(self) -> None:
        self._is_active = True
        self.add_event(DataMappingChanged(self.id, "activated"))

    def deactivate(self) -> None:
        self._is_active = False
        self.add_event(DataMappingChanged(self.id, "deactivated"))

    # Validation

    def validate_mapping(self) -> MappingValidationResult:
        """Check the mapping as a whole.

        Errors cover unmapped required target fields, fields unknown to
        either schema, structurally invalid mappings, bad conditions and
        dependency cycles. Unmapped optional target fields are warnings.
        """
        errors: list[str] = []
        warnings: list[str] = []

        mapped_targets = {FieldPath.parse(m.target_field).root for m in self._mappings}
        for definition in self._target_schema.required_fields:
            if definition.name not in mapped_targets:
                errors.append(f"Required target field '{definition.name}' is not mapped")
        for definition in self._target_schema.optional_fields:
            if definition.name not in mapped_targets:
                warnings.append(f"Optional target field '{definition.name}' is not mapped")

        for mapping in self._mappings:
            for problem in mapping.structural_errors():
                errors.append(f"Mapping '{mapping.id}': {problem}")

            source_root = FieldPath.parse(mapping.source_field).root
            if not self._source_schema.has_field(source_root):
                errors.append(f"Source field '{source_root}' not found in source schema")
            target_root = FieldPath.parse(mapping.target_field).root
            if not self._target_schema.has_field(target_root):
                errors.append(f"Target field '{target_root}' not found in target schema")

            if mapping.condition:
                try:
                    parse_condition(mapping.condition)
                except ValidationError as e:
                    errors.append(f"Mapping '{mapping.id}': {e.message}")

        cycle = self.detect_circular_dependencies()
        if cycle:
            errors.append(f"Circular dependencies detected: {', '.join(cycle)}")

        return MappingValidationResult(not errors, errors, warnings)

    def _dependency_graph(self) -> dict[str, list[str]]:
        return {
            mapping.target_field: mapping.dependencies
            for mapping in self._mappings
            if mapping.dependencies
        }

    def detect_circular_dependencies(self) -> list[str]:
        """Target fields taking part in a dependency cycle, in discovery order."""
        graph = self._dependency_graph()
        visited: set[str] = set()
        stack: list[str] = []
        on_stack: set[str] = set()
        cyclic: list[str] = []

        def visit(node: str) -> None:
            visited.add(node)
            stack.append(node)
            on_stack.add(node)
            for dependency in graph.get(node, []):
                if dependency in on_stack:
                    for member in stack[stack.index(dependency):]:
                        if member not in cyclic:
                            cyclic.append(member)
                elif dependency not in visited:
                    visit(dependency)
            stack.pop()
            on_stack.discard(node)

        for node in graph:
            if node not in visited:
                visit(node)
        return cyclic

    def ordered_mappings(self) -> list[FieldMapping]:
        """Mappings with calculate dependencies placed before their dependents.

        Raises:
            CircularDependencyError: If the dependency graph has a cycle
        """
        by_target = {mapping.target_field: mapping for mapping in self._mappings}
        ordered: list[FieldMapping] = []
        done: set[str] = set()
        in_progress: list[str] = []

        def visit(mapping: FieldMapping) -> None:
            target = mapping.target_field
            if target in done:
                return
            if target in in_progress:
                raise CircularDependencyError(in_progress[in_progress.index(target):])
            in_progress.append(target)
            for dependency in mapping.dependencies:
                if dependency in by_target:
                    visit(by_target[dependency])
            in_progress.pop()
            done.add(target)
            ordered.append(mapping)

        for mapping in self._mappings:
            visit(mapping)
        return ordered

    # Transformation

    def transform_data(
        self,
        source_data: dict[str, Any],
        transformer: FieldTransformer | None = None,
        report: TransformationReport | None = None,
    ) -> dict[str, Any]:
        """Transform one source record into a target record.

        Args:
            source_data: Record conforming to the source schema
            transformer: Transformer holding custom functions and lookup
                tables; a default one is used when omitted
            report: Optional report to collect warnings and field outcomes

        Returns:
            New target record; ``source_data`` is never modified

        Raises:
            MappingValidationError: If the mapping itself is invalid
            SchemaValidationError: If the source or built target record does
                not match its schema
            CircularDependencyError: If calculate dependencies form a cycle
            TransformationError: If a required mapping cannot produce a value
        """
        validation = self.validate_mapping()
        if not validation.is_valid:
            raise MappingValidationError(validation.errors)

        source_check = self._source_schema.validate_data(source_data)
        if not source_check.is_valid:
            raise SchemaValidationError("source", source_check.errors)

        transformer = transformer or FieldTransformer()
        report = report if report is not None else TransformationReport()
        target: dict[str, Any] = {}

        for mapping in self.ordered_mappings():
            self._apply_mapping(mapping, source_data, target, transformer, report)

        target_check = self._target_schema.validate_data(target)
        if not target_check.is_valid:
            raise SchemaValidationError("target", target_check.errors)
        return target

    def _apply_mapping(
        self,
        mapping: FieldMapping,
        source_data: dict[str, Any],
        target: dict[str, Any],
        transformer: FieldTransformer,
        report: TransformationReport,
    ) -> None:
        path = FieldPath.parse(mapping.target_field)

        if mapping.condition and not evaluate_condition(mapping.condition, source_data):
            if mapping.has_default:
                path.assign(target, mapping.default_value)
                report.defaulted_fields.append(mapping.target_field)
            else:
                report.skipped_fields.append(mapping.target_field)
            return

        value = FieldPath.parse(mapping.source_field).resolve(source_data)
        if (value is MISSING or value is None) and mapping.has_default:
            value = mapping.default_value

        computed = mapping.transformation == TransformationType.CALCULATE
        if not computed and (value is MISSING or (value is None and mapping.required)):
            if mapping.required:
                raise TransformationError(
                    mapping.target_field,
                    f"required source field '{mapping.source_field}' is missing",
                )
            report.skipped_fields.append(mapping.target_field)
            return

        try:
            result = transformer.transform(value, mapping, source_data, target)
        except TransformationError as e:
            if mapping.required:
                raise
            report.warnings.append(e.message)
            if mapping.has_default:
                path.assign(target, mapping.default_value)
                report.defaulted_fields.append(mapping.target_field)
            else:
                report.skipped_fields.append(mapping.target_field)
            return

        try:
            path.assign(target, result)
        except ValidationError as e:
            raise TransformationError(mapping.target_field, e.message) from e
        report.mapped_fields.append(mapping.target_field)

    # Derived mappings

    def clone(self, new_name: str) -> "DataMapping":
        metadata = dict(self._metadata)
        metadata["clonedFrom"] = str(self.id)
        return DataMapping(
            integration_id=self._integration_id,
            name=new_name,
            source_schema=self._source_schema,
            target_schema=self._target_schema,
            mappings=[mapping.with_id(f"{mapping.id}_copy") for mapping in self._mappings],
            description=self._description,
            mapping_version=self._mapping_version,
            is_active=False,
            metadata=metadata,
        )

    def invert(self) -> "DataMapping":
        """Build the reverse mapping from the unconditional direct mappings.

        Raises:
            InvalidFieldMappingError: If there is no direct mapping to invert
        """
        inverted = [
            FieldMapping(
                id=mapping.id,
                source_field=mapping.target_field,
                target_field=mapping.source_field,
                required=mapping.required,
                description=mapping.description,
            )
            for mapping in self._mappings
            if mapping.transformation == TransformationType.DIRECT and not mapping.condition
        ]
        if not inverted:
            raise InvalidFieldMappingError("no direct mappings to invert")

        metadata = dict(self._metadata)
        metadata["invertedFrom"] = str(self.id)
        return DataMapping(
            integration_id=self._integration_id,
            name=f"{self._name} (inverted)",
            source_schema=self._target_schema,
            target_schema=self._source_schema,
            mappings=inverted,
            description=self._description,
            mapping_version=self._mapping_version,
            is_active=self._is_active,
            metadata=metadata,
        )

    def get_statistics(self) -> dict[str, Any]:
        total = len(self._mappings)
        transformations = Counter(m.transformation.value for m in self._mappings)
        source_roots = {FieldPath.parse(m.source_field).root for m in self._mappings}
        target_roots = {FieldPath.parse(m.target_field).root for m in self._mappings}

        def coverage(schema: DataSchema, used: set[str]) -> float:
            names = schema.field_names
            covered = sum(1 for name in names if name in used)
            return round(covered / len(names) * 100, 2) if names else 0.0

        required = sum(1 for m in self._mappings if m.required)
        return {
            "totalMappings": total,
            "requiredMappings": required,
            "optionalMappings": total - required,
            "conditionalMappings": sum(1 for m in self._mappings if m.condition),
            "computedMappings": sum(1 for m in self._mappings if m.dependencies),
            "transformationTypes": dict(transformations),
            "sourceFieldCoverage": coverage(self._source_schema, source_roots),
            "targetFieldCoverage": coverage(self._target_schema, target_roots),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "integrationId": str(self._integration_id),
            "name": self._name,
            "description": self._description,
            "sourceSchema": self._source_schema.to_dict(),
            "targetSchema": self._target_schema.to_dict(),
            "mappings": [mapping.to_dict() for mapping in self._mappings],
            "mappingVersion": self._mapping_version,
            "version": self.version,
            "isActive": self._is_active,
            "metadata": dict(self._metadata),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    def __str__(self) -> str:
        return f"DataMapping({self._name}, {len(self._mappings)} mappings)"
