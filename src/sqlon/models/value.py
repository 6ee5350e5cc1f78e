"""Scalar value and column type models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ColumnType(Enum):
    """Enumeration of supported column types."""
    INT = "int"
    TEXT = "text"
    BOOL = "bool"
    DECIMAL = "decimal"
    DATETIME = "datetime"
    NULL = "null"

    @classmethod
    def is_valid(cls, name: str) -> bool:
        """Check whether ``name`` is a known column type name."""
        return name in cls._value2member_map_


class ValueKind(Enum):
    """Enumeration of value kinds stored in rows."""
    NULL = "null"
    INT = "int"
    DECIMAL = "decimal"
    BOOL = "bool"
    TEXT = "text"


@dataclass(frozen=True)
class Value:
    """
    A single cell value.

    Values are a closed tagged union: the ``kind`` says how ``raw`` is to be
    read. Compound values do not exist; nesting is always resolved into
    separate tables before a Value is built.
    """

    kind: ValueKind
    raw: Any = None

    def __post_init__(self):
        """Validate value after initialization."""
        self._validate()

    def _validate(self) -> None:
        if self.kind == ValueKind.NULL and self.raw is not None:
            raise ValueError("null value cannot carry data")
        if self.kind == ValueKind.INT and (isinstance(self.raw, bool) or not isinstance(self.raw, int)):
            raise ValueError(f"int value requires an int, got {type(self.raw).__name__}")
        if self.kind == ValueKind.DECIMAL and not isinstance(self.raw, float):
            raise ValueError(f"decimal value requires a float, got {type(self.raw).__name__}")
        if self.kind == ValueKind.BOOL and not isinstance(self.raw, bool):
            raise ValueError(f"bool value requires a bool, got {type(self.raw).__name__}")
        if self.kind == ValueKind.TEXT and not isinstance(self.raw, str):
            raise ValueError(f"text value requires a str, got {type(self.raw).__name__}")

    @classmethod
    def null(cls) -> 'Value':
        return cls(ValueKind.NULL)

    @classmethod
    def integer(cls, value: int) -> 'Value':
        return cls(ValueKind.INT, int(value))

    @classmethod
    def decimal(cls, value: float) -> 'Value':
        return cls(ValueKind.DECIMAL, float(value))

    @classmethod
    def boolean(cls, value: bool) -> 'Value':
        return cls(ValueKind.BOOL, bool(value))

    @classmethod
    def text(cls, value: str) -> 'Value':
        return cls(ValueKind.TEXT, str(value))

    @property
    def is_null(self) -> bool:
        return self.kind == ValueKind.NULL

    def to_python(self) -> Any:
        """Convert the value to its plain Python (JSON-compatible) form."""
        return self.raw

    def __str__(self) -> str:
        if self.kind == ValueKind.NULL:
            return "null"
        return repr(self.raw)
