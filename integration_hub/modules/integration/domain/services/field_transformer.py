"""Per-field value transformations used by data mappings.

Each transformation kind is a method registered in a dispatch table, and
``format`` and ``custom`` keep their own tables of named operations.
Failures raise ``TransformationError`` naming the target field.
"""

import json
import math
import re
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any

from dateutil import parser as date_parser

from integration_hub.core.errors import ValidationError
from integration_hub.core.logging import get_logger
from integration_hub.modules.integration.domain.enums import TransformationType
from integration_hub.modules.integration.domain.errors import (
    ExpressionError,
    TransformationError,
)
from integration_hub.modules.integration.domain.services.condition_evaluator import (
    evaluate_condition,
)
from integration_hub.modules.integration.domain.services.expression_evaluator import (
    evaluate_expression,
)
from integration_hub.modules.integration.domain.value_objects import (
    MISSING,
    FieldMapping,
)
from integration_hub.modules.integration.domain.value_objects.field_path import (
    get_value,
)

logger = get_logger(__name__)

# (value, parameters, source_data) -> transformed value
CustomFunction = Callable[[Any, dict[str, Any], dict[str, Any]], Any]

_DATE_TOKENS = {"YYYY": "%Y", "MM": "%m", "DD": "%d", "HH": "%H", "mm": "%M", "ss": "%S"}
_DATE_TOKEN_PATTERN = re.compile("|".join(_DATE_TOKENS))
_TRUE_STRINGS = frozenset({"true", "yes", "1"})


def normalize_number(value: float) -> int | float:
    """Collapse integral floats to ``int`` so 1250.0 is written as 1250."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def to_strftime(date_format: str) -> str:
    escaped = date_format.replace("%", "%%")
    return _DATE_TOKEN_PATTERN.sub(lambda match: _DATE_TOKENS[match.group(0)], escaped)


class FieldTransformer:
    """Applies a field mapping's transformation to one value.

    Args:
        custom_functions: Extra custom hooks by ``function_name``
        lookup_tables: Named external tables for ``lookup`` mappings that
            give ``table_name`` instead of an inline ``lookup_table``
    """

    def __init__(
        self,
        custom_functions: dict[str, CustomFunction] | None = None,
        lookup_tables: dict[str, dict[str, Any]] | None = None,
    ):
        self._transformations: dict[TransformationType, Callable[..., Any]] = {
            TransformationType.DIRECT: self._transform_direct,
            TransformationType.FORMAT: self._transform_format,
            TransformationType.LOOKUP: self._transform_lookup,
            TransformationType.CALCULATE: self._transform_calculate,
            TransformationType.CUSTOM: self._transform_custom,
        }
        self._formatters: dict[str, Callable[[Any, dict[str, Any]], Any]] = {
            "uppercase": lambda value, _: str(value).upper(),
            "lowercase": lambda value, _: str(value).lower(),
            "trim": lambda value, _: str(value).strip(),
            "capitalize": self._format_capitalize,
            "date": self._format_date,
            "number": self._format_number,
            "string": self._format_string,
            "boolean": self._format_boolean,
            "array": self._format_array,
            "json": lambda value, _: json.dumps(value, default=str),
            "parse_json": self._format_parse_json,
        }
        self._builtin_custom: dict[str, CustomFunction] = {
            "concat": self._custom_concat,
            "split": self._custom_split,
            "regex_replace": self._custom_regex_replace,
            "conditional": self._custom_conditional,
        }
        self._custom_functions: dict[str, CustomFunction] = dict(custom_functions or {})
        self._lookup_tables: dict[str, dict[str, Any]] = dict(lookup_tables or {})

    def register_function(self, name: str, function: CustomFunction) -> None:
        self._custom_functions[name] = function

    def register_lookup_table(self, name: str, table: dict[str, Any]) -> None:
        self._lookup_tables[name] = dict(table)

    def has_function(self, name: str) -> bool:
        return name in self._custom_functions

    def transform(
        self,
        value: Any,
        mapping: FieldMapping,
        source_data: dict[str, Any],
        current_result: dict[str, Any],
    ) -> Any:
        """Transform ``value`` according to ``mapping``.

        Raises:
            TransformationError: If the value cannot be transformed
        """
        handler = self._transformations[mapping.transformation]
        try:
            return handler(value, mapping, source_data, current_result)
        except TransformationError:
            raise
        except (ExpressionError, ValidationError) as e:
            raise TransformationError(mapping.target_field, e.message) from e
        except (ValueError, TypeError, KeyError) as e:
            raise TransformationError(mapping.target_field, str(e)) from e

    # Transformation kinds

    def _transform_direct(self, value, mapping, source_data, current_result):
        return value

    def _transform_format(self, value, mapping, source_data, current_result):
        config = mapping.config
        fmt = config.get("format")
        if not fmt or value is None:
            return value
        formatter = self._formatters.get(fmt)
        if formatter is None:
            raise TransformationError(mapping.target_field, f"unsupported format '{fmt}'")
        return formatter(value, config)

    def _transform_lookup(self, value, mapping, source_data, current_result):
        config = mapping.config
        table = config.get("lookup_table")
        if not isinstance(table, dict):
            table_name = config.get("table_name")
            table = self._lookup_tables.get(table_name)
            if table is None:
                raise TransformationError(
                    mapping.target_field, f"lookup table '{table_name}' is not available"
                )

        for key in (value, str(value)):
            if isinstance(key, dict | list):
                continue
            if key in table:
                return table[key]
        if "default_value" in config:
            return config["default_value"]
        return value

    def _transform_calculate(self, value, mapping, source_data, current_result):
        config = mapping.config

        def resolve(path: str) -> Any:
            resolved = get_value(source_data, path)
            if resolved is MISSING:
                resolved = get_value(current_result, path)
            return None if resolved is MISSING else resolved

        result = evaluate_expression(
            str(config["expression"]), resolve, config.get("null_value", 0)
        )
        round_to = config.get("round_to")
        if round_to is not None:
            result = round(result, int(round_to))
        return normalize_number(result)

    def _transform_custom(self, value, mapping, source_data, current_result):
        config = mapping.config
        parameters = dict(config.get("parameters") or {})
        function_name = config.get("function_name")
        if function_name:
            function = self._custom_functions.get(function_name)
            if function is None:
                raise TransformationError(
                    mapping.target_field,
                    f"custom function '{function_name}' is not registered",
                )
            try:
                return function(value, parameters, source_data)
            except TransformationError:
                raise
            except Exception as e:
                logger.warning(
                    "Custom transformation raised",
                    function_name=function_name,
                    target_field=mapping.target_field,
                    error=str(e),
                )
                raise TransformationError(mapping.target_field, str(e)) from e

        return self._builtin_custom[config["type"]](value, parameters, source_data)

    # Formatters

    @staticmethod
    def _format_capitalize(value: Any, config: dict[str, Any]) -> str:
        text = str(value)
        return text[:1].upper() + text[1:]

    @staticmethod
    def _format_date(value: Any, config: dict[str, Any]) -> str:
        if isinstance(value, datetime):
            moment = value
        elif isinstance(value, date):
            moment = datetime(value.year, value.month, value.day)
        elif isinstance(value, int | float) and not isinstance(value, bool):
            moment = datetime.fromtimestamp(value, UTC)
        elif isinstance(value, str) and value.strip():
            try:
                moment = date_parser.parse(value)
            except (ValueError, OverflowError) as e:
                raise ValueError(f"'{value}' is not a valid date") from e
        else:
            raise ValueError(f"'{value}' is not a valid date")

        date_format = config.get("date_format")
        if date_format:
            return moment.strftime(to_strftime(date_format))
        return moment.isoformat()

    @staticmethod
    def _format_number(value: Any, config: dict[str, Any]) -> int | float:
        if isinstance(value, bool):
            number = float(value)
        elif isinstance(value, int | float):
            number = float(value)
        else:
            try:
                number = float(str(value).strip().replace(",", ""))
            except ValueError as e:
                raise ValueError(f"'{value}' is not a valid number") from e
        if math.isnan(number) or math.isinf(number):
            raise ValueError(f"'{value}' is not a valid number")

        decimals = config.get("decimals")
        if decimals is not None:
            number = round(number, int(decimals))
        return normalize_number(number)

    @staticmethod
    def _format_string(value: Any, config: dict[str, Any]) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, dict | list):
            return json.dumps(value, default=str)
        if isinstance(value, float):
            return str(normalize_number(value))
        return str(value)

    @staticmethod
    def _format_boolean(value: Any, config: dict[str, Any]) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int | float):
            return value != 0
        return str(value).strip().lower() in _TRUE_STRINGS

    @staticmethod
    def _format_array(value: Any, config: dict[str, Any]) -> list[Any]:
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            delimiter = config.get("delimiter") or ","
            return [item.strip() for item in value.split(delimiter) if item.strip()]
        return [value]

    @staticmethod
    def _format_parse_json(value: Any, config: dict[str, Any]) -> Any:
        if not isinstance(value, str):
            return value
        try:
            return json.loads(value)
        except ValueError as e:
            raise ValueError(f"invalid JSON: {e}") from e

    # Built-in custom functions

    @staticmethod
    def _custom_concat(value: Any, parameters: dict[str, Any], source_data: dict[str, Any]) -> str:
        separator = parameters.get("separator", " ")
        paths = parameters.get("fields")
        if paths:
            parts = [get_value(source_data, path) for path in paths]
        else:
            parts = value if isinstance(value, list) else [value]
        return separator.join(
            str(part) for part in parts if part is not MISSING and part is not None
        )

    @staticmethod
    def _custom_split(value: Any, parameters: dict[str, Any], source_data: dict[str, Any]) -> Any:
        if value is None:
            return []
        delimiter = parameters.get("delimiter", ",")
        parts = [part.strip() for part in str(value).split(delimiter)]
        index = parameters.get("index")
        if index is None:
            return parts
        index = int(index)
        return parts[index] if -len(parts) <= index < len(parts) else None

    @staticmethod
    def _custom_regex_replace(
        value: Any, parameters: dict[str, Any], source_data: dict[str, Any]
    ) -> Any:
        if value is None:
            return None
        pattern = parameters.get("pattern")
        if not pattern:
            raise ValueError("regex_replace requires a pattern")
        try:
            return re.sub(pattern, str(parameters.get("replacement", "")), str(value))
        except re.error as e:
            raise ValueError(f"invalid regular expression: {e}") from e

    @staticmethod
    def _custom_conditional(
        value: Any, parameters: dict[str, Any], source_data: dict[str, Any]
    ) -> Any:
        condition = parameters.get("condition")
        if not condition:
            raise ValueError("conditional requires a condition")
        if evaluate_condition(condition, source_data):
            return parameters.get("true_value", value)
        return parameters.get("false_value")
