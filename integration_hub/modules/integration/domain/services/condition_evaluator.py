"""Mapping conditions.

Supported forms::

    exists(customer.email)
    notEmpty(customer.email)
    equals(order.status, "paid")

The literal in ``equals`` may be a quoted string, a number, ``true``,
``false`` or ``null``.
"""

import json
import re
from typing import Any

from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.value_objects.field_path import (
    MISSING,
    get_value,
)

_CONDITION_PATTERN = re.compile(
    r"^\s*(?P<name>exists|notEmpty|equals)\s*\(\s*(?P<args>.*?)\s*\)\s*$"
)


def parse_condition(condition: str) -> tuple[str, str, Any]:
    """Split a condition into (operator, path, literal).

    Raises:
        ValidationError: If the condition is not one of the supported forms
    """
    match = _CONDITION_PATTERN.match(condition or "")
    if not match:
        raise ValidationError(f"Unsupported condition: {condition}", field="condition")

    name = match.group("name")
    args = match.group("args")
    if name != "equals":
        if not args or "," in args:
            raise ValidationError(
                f"{name}() takes exactly one field path", field="condition"
            )
        return name, args, None

    path, separator, raw_literal = args.partition(",")
    if not separator or not path.strip():
        raise ValidationError(
            "equals() takes a field path and a literal", field="condition"
        )
    return name, path.strip(), _parse_literal(raw_literal.strip())


def _parse_literal(raw: str) -> Any:
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "'\"":
        return raw[1:-1]
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def evaluate_condition(condition: str, data: Any) -> bool:
    name, path, literal = parse_condition(condition)
    value = get_value(data, path)

    if name == "exists":
        return value is not MISSING and value is not None
    if name == "notEmpty":
        if value is MISSING or value is None:
            return False
        if isinstance(value, str | list | dict):
            return len(value) > 0
        return True
    if value is MISSING:
        return False
    if isinstance(literal, int | float) and not isinstance(literal, bool):
        if isinstance(value, int | float) and not isinstance(value, bool):
            return float(value) == float(literal)
    return value == literal
