"""Data schema value object.

A schema names the fields a record is expected to carry and their types.
Schemas are immutable; ``add_field`` returns a new schema.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from dateutil import parser as date_parser

from integration_hub.core.domain.base import ValueObject
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.enums import FieldType


@dataclass(frozen=True)
class FieldDefinition:
    """One field of a schema."""

    name: str
    type: FieldType
    required: bool = False
    default_value: Any = None
    description: str | None = None

    def __post_init__(self):
        if not self.name or not str(self.name).strip():
            raise ValidationError("Field name cannot be empty", field="name")
        if not isinstance(self.type, FieldType):
            try:
                object.__setattr__(self, "type", FieldType(self.type))
            except ValueError as e:
                raise ValidationError(
                    f"Invalid type '{self.type}' for field '{self.name}'",
                    field="type",
                ) from e

    def accepts(self, value: Any) -> bool:
        """Check whether a non-null value matches this field's type."""
        return value_matches_type(value, self.type)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
        }
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldDefinition":
        return cls(
            name=data["name"],
            type=data["type"],
            required=bool(data.get("required", False)),
            default_value=data.get("defaultValue", data.get("default_value")),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class SchemaValidationResult:
    """Outcome of validating a record against a schema."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"isValid": self.is_valid, "errors": list(self.errors)}


def value_matches_type(value: Any, field_type: FieldType) -> bool:
    if field_type == FieldType.STRING:
        return isinstance(value, str)
    if field_type == FieldType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, int | float):
            return False
        return not (isinstance(value, float) and math.isnan(value))
    if field_type == FieldType.BOOLEAN:
        return isinstance(value, bool)
    if field_type == FieldType.DATE:
        if isinstance(value, datetime | date):
            return True
        if isinstance(value, str) and value.strip():
            try:
                date_parser.parse(value)
            except (ValueError, OverflowError):
                return False
            return True
        return False
    if field_type == FieldType.ARRAY:
        return isinstance(value, list)
    if field_type == FieldType.OBJECT:
        return isinstance(value, dict)
    return False


class DataSchema(ValueObject):
    """Named, versioned list of field definitions."""

    def __init__(self, name: str, version: str, fields: list[FieldDefinition]):
        """Initialize schema.

        Raises:
            ValidationError: If name or version is blank, no fields are given,
                or field names repeat
        """
        super().__init__()
        self.validate_not_empty(name, "Schema name")
        self.validate_not_empty(version, "Schema version")
        if not fields:
            raise ValidationError("Schema must define at least one field", field="fields")

        seen: set[str] = set()
        for definition in fields:
            if not isinstance(definition, FieldDefinition):
                raise ValidationError("Schema fields must be FieldDefinition instances")
            if definition.name in seen:
                raise ValidationError(
                    f"Duplicate field name in schema: {definition.name}",
                    field="fields",
                )
            seen.add(definition.name)

        self.name = name.strip()
        self.version = str(version).strip()
        self.fields = tuple(fields)
        self._freeze()

    @property
    def field_names(self) -> list[str]:
        return [definition.name for definition in self.fields]

    @property
    def required_fields(self) -> list[FieldDefinition]:
        return [definition for definition in self.fields if definition.required]

    @property
    def optional_fields(self) -> list[FieldDefinition]:
        return [definition for definition in self.fields if not definition.required]

    def get_field(self, name: str) -> FieldDefinition | None:
        for definition in self.fields:
            if definition.name == name:
                return definition
        return None

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None

    def add_field(self, definition: FieldDefinition) -> "DataSchema":
        return DataSchema(self.name, self.version, [*self.fields, definition])

    def remove_field(self, name: str) -> "DataSchema":
        remaining = [definition for definition in self.fields if definition.name != name]
        return DataSchema(self.name, self.version, remaining)

    def validate_data(self, data: Any) -> SchemaValidationResult:
        """Check required fields are present and values match their types."""
        if not isinstance(data, dict):
            return SchemaValidationResult(False, ["Data must be an object"])

        errors = []
        for definition in self.fields:
            value = data.get(definition.name)
            if value is None:
                if definition.required:
                    errors.append(f"Required field '{definition.name}' is missing")
                continue
            if not definition.accepts(value):
                errors.append(
                    f"Field '{definition.name}' must be of type {definition.type.value}"
                )
        return SchemaValidationResult(not errors, errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "fields": [definition.to_dict() for definition in self.fields],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DataSchema":
        return cls(
            name=data.get("name", ""),
            version=data.get("version", ""),
            fields=[FieldDefinition.from_dict(item) for item in data.get("fields", [])],
        )

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"
