"""Abstract value types, type codes and comparison operators."""

from __future__ import annotations

import json
import operator as _op
from abc import ABC, abstractmethod
from enum import Enum, IntEnum
from typing import Any, ClassVar


class TypeCode(IntEnum):
    """Identifies the storage type of a column."""

    INTEGER = 0  # 8/16/32/64 bit [un]signed integer
    STRING = 1  # variable length string
    VARCHAR = 2  # fixed capacity string
    FLOAT = 3  # 32/64 bit floating point number
    DATETIME = 4  # "2024-03-25 17:15:06" format datetime


class Operator(str, Enum):
    """Comparison operators understood by values."""

    EQUAL = "="
    GREATER_OR_EQUAL = ">="
    LESS_OR_EQUAL = "<="
    GREATER = ">"
    LESS = "<"
    NOT_EQUAL = "!="

    @classmethod
    def from_symbol(cls, symbol: str | Operator) -> Operator:
        """Return the operator written as ``symbol``."""
        if isinstance(symbol, cls):
            return symbol
        try:
            return cls(symbol)
        except ValueError:
            raise ValueError(f"invalid operator:'{symbol}'") from None


_OUTCOMES = {
    Operator.EQUAL: lambda c: _op.eq(c, 0),
    Operator.GREATER_OR_EQUAL: lambda c: _op.ge(c, 0),
    Operator.LESS_OR_EQUAL: lambda c: _op.le(c, 0),
    Operator.GREATER: lambda c: _op.gt(c, 0),
    Operator.LESS: lambda c: _op.lt(c, 0),
    Operator.NOT_EQUAL: lambda c: _op.ne(c, 0),
}


class DataTypeMeta(ABC):
    """Describes a column type and produces values of it."""

    code: ClassVar[TypeCode]

    @abstractmethod
    def size(self) -> int:
        """Size in bytes of a stored value, or -1 when it varies."""

    @abstractmethod
    def default(self) -> DataType:
        """A fresh value holding the type's default."""

    @abstractmethod
    def is_fixed_size(self) -> bool:
        """Whether every value of this type takes the same space."""

    @abstractmethod
    def new_value(self) -> DataType:
        """An empty value bound to this meta."""

    @abstractmethod
    def copy(self) -> DataTypeMeta:
        """An independent copy of this meta."""

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation of this meta."""


class DataType(ABC):
    """A single typed value as stored in a row."""

    def __init__(self, meta: DataTypeMeta) -> None:
        self.meta = meta

    @property
    def code(self) -> TypeCode:
        return self.meta.code

    def size(self) -> int:
        return self.meta.size()

    def is_fixed_size(self) -> bool:
        return self.meta.is_fixed_size()

    def default(self) -> DataType:
        return self.meta.default()

    @abstractmethod
    def marshal_binary(self) -> bytes:
        """Encoding written to a data record."""

    @abstractmethod
    def unmarshal_binary(self, data: bytes) -> None:
        """Load the value from its record encoding."""

    @abstractmethod
    def copy(self) -> DataType:
        """An independent copy of the value."""

    def meta_copy(self) -> DataTypeMeta:
        return self.meta.copy()

    @abstractmethod
    def key_bytes(self) -> bytes:
        """Bytes used when the value is part of an index key."""

    @abstractmethod
    def value(self) -> Any:
        """The value as a plain Python object."""

    @abstractmethod
    def set(self, value: Any) -> DataType:
        """Store ``value`` and return self."""

    @abstractmethod
    def fill(self) -> DataType:
        """Set every byte to its maximum and return self."""

    @abstractmethod
    def zero(self) -> DataType:
        """Set every byte to zero and return self."""

    @abstractmethod
    def compare(self, other: DataType) -> int:
        """Return -1, 0 or 1 as self is below, equal to or above other."""

    def compare_op(self, operator: str | Operator, other: DataType) -> bool:
        outcome = _OUTCOMES[Operator.from_symbol(operator)]
        return outcome(self.compare(other))

    @abstractmethod
    def cast(self, meta: DataTypeMeta) -> DataType:
        """Convert to a new value of the type that ``meta`` describes."""

    def to_json(self) -> str:
        return json.dumps(self.value())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(meta={self.meta!r}, key={self.key_bytes().hex()})"