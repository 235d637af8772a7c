"""Field mapping value object: one source-to-target rule of a data mapping."""

from typing import Any

from integration_hub.core.domain.base import ValueObject
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.enums import (
    MappingType,
    TransformationType,
)
from integration_hub.modules.integration.domain.value_objects.field_path import (
    FieldPath,
)

FORMAT_TYPES = frozenset(
    {
        "uppercase",
        "lowercase",
        "trim",
        "capitalize",
        "date",
        "number",
        "string",
        "boolean",
        "array",
        "json",
        "parse_json",
    }
)

BUILTIN_CUSTOM_TYPES = frozenset({"concat", "split", "regex_replace", "conditional"})

_UPDATABLE = (
    "source_field",
    "target_field",
    "transformation",
    "transformation_config",
    "condition",
    "default_value",
    "required",
    "mapping_type",
    "description",
)


class FieldMapping(ValueObject):
    """A single rule mapping a source path onto a target path.

    ``transformation_config`` keys by transformation:

    - format: ``format`` (one of ``FORMAT_TYPES``), ``date_format``,
      ``decimals``, ``delimiter``
    - lookup: ``lookup_table`` or ``table_name``, ``default_value``
    - calculate: ``expression``, ``dependencies``, ``null_value``, ``round_to``
    - custom: ``function_name`` or ``type`` (one of ``BUILTIN_CUSTOM_TYPES``),
      ``parameters``

    A ``default_value`` of ``None`` means "no default".
    """

    def __init__(
        self,
        id: str,
        source_field: str,
        target_field: str,
        transformation: TransformationType | str = TransformationType.DIRECT,
        transformation_config: dict[str, Any] | None = None,
        condition: str | None = None,
        default_value: Any = None,
        required: bool = False,
        mapping_type: MappingType | str = MappingType.FIELD,
        description: str | None = None,
    ):
        super().__init__()
        self.id = (id or "").strip() if isinstance(id, str) else id
        self.source_field = (source_field or "").strip()
        self.target_field = (target_field or "").strip()
        self.transformation = _coerce_enum(
            TransformationType, transformation, "transformation"
        )
        self.transformation_config = (
            dict(transformation_config) if transformation_config is not None else None
        )
        self.condition = condition.strip() if condition and condition.strip() else None
        self.default_value = default_value
        self.required = bool(required)
        self.mapping_type = _coerce_enum(MappingType, mapping_type, "mapping_type")
        self.description = description
        self._freeze()

    @property
    def config(self) -> dict[str, Any]:
        return self.transformation_config or {}

    @property
    def dependencies(self) -> list[str]:
        """Target fields this mapping needs computed first."""
        if self.transformation != TransformationType.CALCULATE:
            return []
        return [str(dep) for dep in self.config.get("dependencies") or []]

    @property
    def has_default(self) -> bool:
        return self.default_value is not None

    def structural_errors(self) -> list[str]:
        """Problems that make this mapping unusable on its own."""
        errors = []
        if not self.id or not isinstance(self.id, str):
            errors.append("Mapping ID is required")
        if not self.source_field:
            errors.append("Source field is required")
        if not self.target_field:
            errors.append("Target field is required")

        for label, path in (("Source", self.source_field), ("Target", self.target_field)):
            if path:
                try:
                    FieldPath.parse(path)
                except ValidationError as e:
                    errors.append(f"{label} field path is invalid: {e.message}")

        errors.extend(self._config_errors())
        return errors

    def _config_errors(self) -> list[str]:
        config = self.transformation_config
        kind = self.transformation

        if kind == TransformationType.FORMAT and config is not None:
            fmt = config.get("format")
            if fmt not in FORMAT_TYPES:
                return [f"Unsupported format '{fmt}'"]

        if kind == TransformationType.LOOKUP:
            if not config or not (
                isinstance(config.get("lookup_table"), dict) or config.get("table_name")
            ):
                return ["Lookup transformation requires lookup_table or table_name"]

        if kind == TransformationType.CALCULATE:
            if not config or not str(config.get("expression") or "").strip():
                return ["Calculate transformation requires an expression"]
            dependencies = config.get("dependencies") or []
            if not isinstance(dependencies, list | tuple):
                return ["Calculate dependencies must be a list of target fields"]

        if kind == TransformationType.CUSTOM:
            if not config:
                return ["Custom transformation requires configuration"]
            custom_type = config.get("type")
            if not config.get("function_name") and custom_type not in BUILTIN_CUSTOM_TYPES:
                return [
                    "Custom transformation requires function_name or one of: "
                    + ", ".join(sorted(BUILTIN_CUSTOM_TYPES))
                ]

        return []

    def with_updates(self, **changes: Any) -> "FieldMapping":
        """Return a copy with the given attributes replaced.

        Raises:
            ValidationError: If an unknown attribute is given
        """
        unknown = set(changes) - set(_UPDATABLE)
        if unknown:
            raise ValidationError(
                f"Cannot update field mapping attributes: {', '.join(sorted(unknown))}"
            )
        values = {name: getattr(self, name) for name in _UPDATABLE}
        values.update(changes)
        return FieldMapping(id=self.id, **values)

    def with_id(self, new_id: str) -> "FieldMapping":
        values = {name: getattr(self, name) for name in _UPDATABLE}
        return FieldMapping(id=new_id, **values)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "sourceField": self.source_field,
            "targetField": self.target_field,
            "transformation": self.transformation.value,
            "mappingType": self.mapping_type.value,
            "required": self.required,
        }
        if self.transformation_config is not None:
            data["transformationConfig"] = dict(self.transformation_config)
        if self.condition:
            data["condition"] = self.condition
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        if self.description:
            data["description"] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FieldMapping":
        return cls(
            id=data.get("id", ""),
            source_field=data.get("sourceField", data.get("source_field", "")),
            target_field=data.get("targetField", data.get("target_field", "")),
            transformation=data.get("transformation", TransformationType.DIRECT.value),
            transformation_config=data.get(
                "transformationConfig", data.get("transformation_config")
            ),
            condition=data.get("condition"),
            default_value=data.get("defaultValue", data.get("default_value")),
            required=data.get("required", False),
            mapping_type=data.get("mappingType", data.get("mapping_type", "field")),
            description=data.get("description"),
        )

    def __str__(self) -> str:
        return f"{self.source_field} -> {self.target_field} ({self.transformation.value})"


def _coerce_enum(enum_class, value, field_name: str):
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(value)
    except ValueError as e:
        raise ValidationError(
            f"Invalid {field_name}: {value}", field=field_name
        ) from e
