"""Parsed JSON value tree with lenient accessors."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterator


class JsonType(enum.Enum):
    """Kind of a parsed JSON value."""

    NONE = 0
    OBJECT = 1
    ARRAY = 2
    INTEGER = 3
    DOUBLE = 4
    STRING = 5
    BOOLEAN = 6
    NULL = 7


_EMPTY_PAYLOAD = {
    JsonType.OBJECT: list,
    JsonType.ARRAY: list,
    JsonType.INTEGER: int,
    JsonType.DOUBLE: float,
    JsonType.STRING: str,
    JsonType.BOOLEAN: bool,
}


@dataclass
class JsonValue:
    """A node of a parsed JSON document.

    ``value`` holds a list of ``(name, JsonValue)`` pairs for objects (order and
    duplicate names are kept), a list of ``JsonValue`` for arrays, and a plain
    Python scalar otherwise.  Lookups that do not fit the value's type return an
    empty value of type ``JsonType.NONE`` instead of raising.
    """

    type: JsonType = JsonType.NONE
    value: Any = None

    def __post_init__(self) -> None:
        if self.value is None and self.type in _EMPTY_PAYLOAD:
            self.value = _EMPTY_PAYLOAD[self.type]()

    def __getitem__(self, key: int | str) -> JsonValue:
        if isinstance(key, bool) or not isinstance(key, (int, str)):
            raise TypeError(f"JSON values are indexed by int or str, not {type(key).__name__}")
        if isinstance(key, int):
            if self.type is JsonType.ARRAY and 0 <= key < len(self.value):
                return self.value[key]
            return JsonValue()
        if self.type is JsonType.OBJECT:
            for name, item in self.value:
                if name == key:
                    return item
        return JsonValue()

    def __len__(self) -> int:
        if self.type in (JsonType.ARRAY, JsonType.OBJECT, JsonType.STRING):
            return len(self.value)
        return 0

    def __iter__(self) -> Iterator[Any]:
        if self.type is JsonType.ARRAY:
            return iter(self.value)
        if self.type is JsonType.OBJECT:
            return (name for name, _ in self.value)
        return iter(())

    def __int__(self) -> int:
        if self.type is JsonType.INTEGER:
            return self.value
        if self.type is JsonType.DOUBLE:
            return int(self.value)
        return 0

    def __float__(self) -> float:
        if self.type in (JsonType.INTEGER, JsonType.DOUBLE):
            return float(self.value)
        return 0.0

    def __bool__(self) -> bool:
        if self.type is JsonType.BOOLEAN:
            return bool(self.value)
        return False

    def __str__(self) -> str:
        if self.type is JsonType.STRING:
            return self.value
        return ""

    def items(self) -> list[tuple[str, JsonValue]]:
        """Return the ``(name, value)`` members of an object, or an empty list."""
        if self.type is JsonType.OBJECT:
            return list(self.value)
        return []

    def to_python(self) -> Any:
        """Convert the tree into plain dicts, lists and scalars.

        For objects with repeated names the first member wins, matching lookup.
        """
        if self.type is JsonType.OBJECT:
            result: dict[str, Any] = {}
            for name, item in self.value:
                if name not in result:
                    result[name] = item.to_python()
            return result
        if self.type is JsonType.ARRAY:
            return [item.to_python() for item in self.value]
        if self.type in (JsonType.NONE, JsonType.NULL):
            return None
        return self.value