"""Variable length string and fixed capacity VARCHAR column types."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .base import DataType, DataTypeMeta, TypeCode
from .errors import CastError, InvalidDataTypeError

_ATOI = re.compile(r"[+-]?[0-9]+\Z")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_MAX_CAP = 0xFFFF


def _atoi(text: str) -> int:
    """Parse a decimal integer the lenient way: bad text gives 0, overflow clamps."""
    if not _ATOI.match(text):
        return 0
    return max(_INT64_MIN, min(_INT64_MAX, int(text)))


def _parse_float(text: str) -> float:
    if text != text.strip() or "_" in text:
        raise CastError(f"invalid float text {text!r}")
    try:
        return float(text)
    except ValueError as exc:
        raise CastError(f"invalid float text {text!r}") from exc


def _overlay(current: bytes, data: bytes) -> bytes:
    chunk = bytes(data[: len(current)])
    return chunk + current[len(chunk):]


@dataclass
class StringMeta(DataTypeMeta):
    """Meta of the variable length STRING type."""

    code = TypeCode.STRING

    def size(self) -> int:
        return -1

    def default(self) -> String:
        return self.copy().new_value().set("")

    def is_fixed_size(self) -> bool:
        return False

    def new_value(self) -> String:
        return String(self)

    def copy(self) -> StringMeta:
        return StringMeta()

    def to_dict(self) -> dict[str, Any]:
        return {}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StringMeta:
        return cls()


class String(DataType):
    """Text of any length, stored as its UTF-8 bytes."""

    meta: StringMeta

    def __init__(self, meta: StringMeta) -> None:
        super().__init__(meta)
        self._text = ""

    def _encoded(self) -> bytes:
        return self._text.encode("utf-8", errors="surrogateescape")

    def marshal_binary(self) -> bytes:
        return self._encoded()

    def unmarshal_binary(self, data: bytes) -> None:
        self._text = bytes(data).decode("utf-8", errors="surrogateescape")

    def copy(self) -> String:
        duplicate = String(self.meta_copy())
        duplicate._text = self._text
        return duplicate

    def meta_copy(self) -> StringMeta:
        return StringMeta()

    def key_bytes(self) -> bytes:
        return self._encoded()

    def value(self) -> str:
        return self._text

    def set(self, value: Any) -> String:
        if not isinstance(value, str):
            raise InvalidDataTypeError(f"invalid set data type => {value!r}")
        self._text = value
        return self

    def fill(self) -> String:
        raise InvalidDataTypeError("Fill not allowed for string type")

    def zero(self) -> String:
        raise InvalidDataTypeError("Zero not allowed for string type")

    def size(self) -> int:
        return len(self._encoded())

    def compare(self, other: DataType) -> int:
        mine, theirs = self.key_bytes(), other.key_bytes()
        return (mine > theirs) - (mine < theirs)

    def cast(self, meta: DataTypeMeta) -> DataType:
        code = meta.code
        if code == TypeCode.INTEGER:
            return meta.new_value().set(_atoi(self._text))
        if code in (TypeCode.STRING, TypeCode.VARCHAR, TypeCode.DATETIME):
            return meta.new_value().set(self._text)
        if code == TypeCode.FLOAT:
            return meta.new_value().set(_parse_float(self._text))
        raise CastError(f"typecast from {int(self.code)} to {int(code)} not supported")


@dataclass
class VarcharMeta(DataTypeMeta):
    """Meta of a VARCHAR holding at most ``cap`` bytes."""

    cap: int = 0

    code = TypeCode.VARCHAR

    def __post_init__(self) -> None:
        if not 0 <= self.cap <= _MAX_CAP:
            raise InvalidDataTypeError(f"invalid varchar capacity => {self.cap}")

    def size(self) -> int:
        return self.cap

    def default(self) -> Varchar:
        return self.copy().new_value().set("")

    def is_fixed_size(self) -> bool:
        return True

    def new_value(self) -> Varchar:
        return Varchar(self)

    def copy(self) -> VarcharMeta:
        return VarcharMeta(cap=self.cap)

    def to_dict(self) -> dict[str, Any]:
        return {"cap": self.cap}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VarcharMeta:
        return cls(cap=int(data.get("cap", 0)))


class Varchar(DataType):
    """Fixed capacity text: a 2-byte big-endian length followed by ``cap`` bytes."""

    meta: VarcharMeta

    def __init__(self, meta: VarcharMeta) -> None:
        super().__init__(meta)
        self._buffer = bytes(meta.cap)
        self.length = 0

    def size(self) -> int:
        return 2 + self.meta.size()

    def marshal_binary(self) -> bytes:
        return self.length.to_bytes(2, "big") + self._buffer

    def unmarshal_binary(self, data: bytes) -> None:
        if len(data) < 2:
            raise ValueError("varchar needs a 2 byte length prefix")
        self.length = int.from_bytes(data[:2], "big")
        self._buffer = _overlay(self._buffer, data[2:])

    def copy(self) -> Varchar:
        duplicate = Varchar(self.meta_copy())
        duplicate._buffer = self._buffer
        duplicate.length = self.length
        return duplicate

    def meta_copy(self) -> VarcharMeta:
        return VarcharMeta(cap=self.meta.cap)

    def key_bytes(self) -> bytes:
        return self._buffer[: self.length]

    def value(self) -> str:
        return self.key_bytes().decode("utf-8", errors="replace")

    def set(self, value: Any) -> Varchar:
        if isinstance(value, str):
            raw = value.encode("utf-8")
        elif isinstance(value, (bytes, bytearray)):
            raw = bytes(value)
        else:
            raise InvalidDataTypeError(f"invalid set data type => {value!r}")
        chunk = raw[: self.meta.cap]
        self._buffer = chunk + self._buffer[len(chunk):]
        self.length = len(chunk)
        return self

    def fill(self) -> Varchar:
        self.length = self.meta.cap
        self._buffer = b"\xff" * self.meta.cap
        return self

    def zero(self) -> Varchar:
        self.length = self.meta.cap
        self._buffer = bytes(self.meta.cap)
        return self

    def compare(self, other: DataType) -> int:
        mine, theirs = self.key_bytes(), other.key_bytes()
        return (mine > theirs) - (mine < theirs)

    def _whole_buffer(self) -> str:
        return self._buffer.decode("utf-8", errors="replace")

    def cast(self, meta: DataTypeMeta) -> DataType:
        code = meta.code
        if code == TypeCode.INTEGER:
            return meta.new_value().set(_atoi(self._whole_buffer()))
        if code == TypeCode.VARCHAR:
            return VarcharMeta(cap=self.meta.cap).new_value().set(self.value())
        if code == TypeCode.STRING:
            return StringMeta().new_value().set(self.value())
        if code == TypeCode.FLOAT:
            return meta.new_value().set(_parse_float(self._whole_buffer()))
        if code == TypeCode.DATETIME:
            return meta.new_value().set(self._whole_buffer())
        raise CastError(f"typecast from {int(self.code)} to {int(code)} not supported")