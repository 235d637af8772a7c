"""Dot-path addressing into JSON-like records.

Records are trees of ``dict``, ``list``, ``str``, ``int``, ``float``,
``bool`` and ``None``. A path such as ``customer.addresses.0.city`` walks
object keys and list indices. Reads never raise: an unreachable path
resolves to ``MISSING``, which is distinct from an explicit ``None``.
"""

from functools import lru_cache
from typing import Any, TypeAlias

from integration_hub.core.domain.base import ValueObject
from integration_hub.core.errors import ValidationError

JsonValue: TypeAlias = (
    None | bool | int | float | str | list["JsonValue"] | dict[str, "JsonValue"]
)


class _Missing:
    """Marker for a path that does not resolve."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


MISSING = _Missing()


def is_missing(value: Any) -> bool:
    return value is MISSING


class FieldPath(ValueObject):
    """A parsed dot-path."""

    def __init__(self, path: str):
        super().__init__()
        if not isinstance(path, str) or not path.strip():
            raise ValidationError("Field path cannot be empty", field="path")

        segments = tuple(segment.strip() for segment in path.strip().split("."))
        if any(not segment for segment in segments):
            raise ValidationError(f"Field path '{path}' has an empty segment", field="path")

        self.path = ".".join(segments)
        self.segments = segments
        self._freeze()

    @classmethod
    def parse(cls, path: str) -> "FieldPath":
        return _parse_cached(path)

    @property
    def root(self) -> str:
        return self.segments[0]

    @property
    def is_nested(self) -> bool:
        return len(self.segments) > 1

    def resolve(self, data: JsonValue) -> JsonValue | _Missing:
        current: Any = data
        for segment in self.segments:
            if isinstance(current, dict):
                if segment not in current:
                    return MISSING
                current = current[segment]
            elif isinstance(current, list):
                index = _list_index(segment)
                if index is None or index >= len(current):
                    return MISSING
                current = current[index]
            else:
                return MISSING
        return current

    def exists_in(self, data: JsonValue) -> bool:
        return self.resolve(data) is not MISSING

    def assign(self, data: dict[str, JsonValue], value: JsonValue) -> None:
        """Write ``value`` at this path, creating intermediate objects.

        Raises:
            ValidationError: If an intermediate segment holds a non-object value
        """
        current: Any = data
        for depth, segment in enumerate(self.segments[:-1]):
            if isinstance(current, list):
                index = _list_index(segment)
                if index is None or index >= len(current):
                    raise ValidationError(
                        f"Cannot write '{self.path}': index '{segment}' is out of range"
                    )
                current = current[index]
                continue

            child = current.get(segment, MISSING)
            if child is MISSING or child is None:
                child = {}
                current[segment] = child
            elif not isinstance(child, dict | list):
                prefix = ".".join(self.segments[: depth + 1])
                raise ValidationError(
                    f"Cannot write '{self.path}': '{prefix}' is not an object"
                )
            current = child

        leaf = self.segments[-1]
        if isinstance(current, list):
            index = _list_index(leaf)
            if index is None or index >= len(current):
                raise ValidationError(
                    f"Cannot write '{self.path}': index '{leaf}' is out of range"
                )
            current[index] = value
        else:
            current[leaf] = value

    def __str__(self) -> str:
        return self.path


def _list_index(segment: str) -> int | None:
    return int(segment) if segment.isdigit() else None


@lru_cache(maxsize=1024)
def _parse_cached(path: str) -> FieldPath:
    return FieldPath(path)


def get_value(data: JsonValue, path: str) -> JsonValue | _Missing:
    return FieldPath.parse(path).resolve(data)


def set_value(data: dict[str, JsonValue], path: str, value: JsonValue) -> None:
    FieldPath.parse(path).assign(data, value)


__all__ = [
    "MISSING",
    "FieldPath",
    "JsonValue",
    "get_value",
    "is_missing",
    "set_value",
]
