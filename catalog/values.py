"""Self-describing values read back from the catalog database.

A :class:`GenericValue` carries its kind alongside its payload, so consumers
decide how to interpret each value at read time instead of relying on a fixed
schema. Maps keep their pairs in order and may repeat a key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Mapping, Sequence, Tuple

LOGGER = logging.getLogger("contentcatalog.catalog")


class ValueKind(Enum):
    NIL = "nil"
    STRING = "string"
    UINT = "uint"
    INT = "int"
    BINARY = "binary"
    MAP = "map"


@dataclass(frozen=True, slots=True)
class GenericValue:
    kind: ValueKind
    value: Any = None

    @classmethod
    def nil(cls) -> "GenericValue":
        return cls(ValueKind.NIL)

    @classmethod
    def string(cls, text: str) -> "GenericValue":
        return cls(ValueKind.STRING, str(text))

    @classmethod
    def integer(cls, number: int) -> "GenericValue":
        number = int(number)
        return cls(ValueKind.UINT if number >= 0 else ValueKind.INT, number)

    @classmethod
    def binary(cls, data: bytes | bytearray | memoryview) -> "GenericValue":
        return cls(ValueKind.BINARY, bytes(data))

    @classmethod
    def map(cls, pairs: Sequence[Tuple["GenericValue", "GenericValue"]]) -> "GenericValue":
        return cls(ValueKind.MAP, tuple(pairs))

    @classmethod
    def from_python(cls, obj: Any) -> "GenericValue":
        """Wrap a plain Python value.

        Mappings become maps; a list of ``(key, value)`` tuples also becomes a
        map so duplicate keys can be expressed. Floats have no counterpart and
        are read as nil.
        """

        if isinstance(obj, GenericValue):
            return obj
        if obj is None:
            return cls.nil()
        if isinstance(obj, bool):
            return cls.integer(int(obj))
        if isinstance(obj, int):
            return cls.integer(obj)
        if isinstance(obj, str):
            return cls.string(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls.binary(obj)
        if isinstance(obj, Mapping):
            return cls.map([(cls.from_python(k), cls.from_python(v)) for k, v in obj.items()])
        if isinstance(obj, (list, tuple)) and all(isinstance(item, tuple) and len(item) == 2 for item in obj):
            return cls.map([(cls.from_python(k), cls.from_python(v)) for k, v in obj])
        if isinstance(obj, float):
            LOGGER.debug("Reading real value %r as nil", obj)
            return cls.nil()
        raise TypeError(f"cannot represent {type(obj).__name__} as a generic value")

    @classmethod
    def from_row(cls, columns: Sequence[str], row: Sequence[Any]) -> "GenericValue":
        return cls.map([(cls.string(name), cls.from_python(value)) for name, value in zip(columns, row)])

    @property
    def is_map(self) -> bool:
        return self.kind is ValueKind.MAP

    def items(self) -> Iterator[Tuple["GenericValue", "GenericValue"]]:
        if self.kind is not ValueKind.MAP:
            raise TypeError(f"{self.kind.value} value has no items")
        return iter(self.value)

    def to_python(self) -> Any:
        if self.kind is ValueKind.MAP:
            return {key.to_python(): value.to_python() for key, value in self.value}
        return self.value


__all__ = ["GenericValue", "ValueKind"]
