"""Fixed-width integer and floating point column types."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from .base import DataType, DataTypeMeta, TypeCode
from .errors import CastError, InvalidDataTypeError

_INT_SIZES = (1, 2, 4, 8)
_FLOAT_FORMATS = {4: "<f", 8: "<d"}
_INT64_SIGN = 1 << 63


def _overlay(current: bytes, data: bytes) -> bytes:
    """Copy ``data`` over the start of ``current`` without changing its length."""
    chunk = bytes(data[: len(current)])
    return chunk + current[len(chunk):]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _shortest_digits(number: float, single: bool) -> str:
    if not single:
        return repr(number)
    for precision in range(1, 10):
        text = f"{number:.{precision}g}"
        try:
            if struct.unpack("<f", struct.pack("<f", float(text)))[0] == number:
                return text
        except OverflowError:
            continue
    return repr(number)


def _format_float(number: float, single: bool) -> str:
    """Shortest text for a float, using exponent form for very large or small values."""
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "+Inf" if number > 0 else "-Inf"
    decimal = Decimal(_shortest_digits(number, single)).normalize()
    sign, digits, exponent = decimal.as_tuple()
    if decimal == 0:
        return "-0" if sign else "0"
    scientific = exponent + len(digits) - 1
    if scientific < -4 or scientific >= 21:
        head, tail = str(digits[0]), "".join(map(str, digits[1:]))
        mantissa = f"{head}.{tail}" if tail else head
        exp_sign = "-" if scientific < 0 else "+"
        return f"{'-' if sign else ''}{mantissa}e{exp_sign}{abs(scientific):02d}"
    return format(decimal, "f")


@dataclass
class AutoIncrement:
    """Auto-increment state of an integer column."""

    enabled: bool = False
    value: int = 0


@dataclass
class IntegerMeta(DataTypeMeta):
    """Meta of a signed or unsigned integer of 1, 2, 4 or 8 bytes."""

    signed: bool = False
    byte_size: int = 8
    auto_increment: AutoIncrement = field(default_factory=AutoIncrement)

    code = TypeCode.INTEGER

    def __post_init__(self) -> None:
        if self.byte_size not in _INT_SIZES:
            raise InvalidDataTypeError(f"invalid byte size => {self.byte_size}")

    def size(self) -> int:
        return self.byte_size

    def default(self) -> Integer:
        value_meta = self.copy()
        if self.auto_increment.enabled:
            self.auto_increment.value += 1
            return value_meta.new_value().set(self.auto_increment.value)
        return value_meta.new_value().set(0)

    def is_fixed_size(self) -> bool:
        return True

    def new_value(self) -> Integer:
        return Integer(self)

    def copy(self) -> IntegerMeta:
        return IntegerMeta(
            signed=self.signed,
            byte_size=self.byte_size,
            auto_increment=AutoIncrement(self.auto_increment.enabled, self.auto_increment.value),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "signed": self.signed,
            "bit_size": self.byte_size,
            "auto_increment": {
                "enabled": self.auto_increment.enabled,
                "value": self.auto_increment.value,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> IntegerMeta:
        ai = data.get("auto_increment") or {}
        return cls(
            signed=bool(data.get("signed", False)),
            byte_size=int(data.get("bit_size", 8)),
            auto_increment=AutoIncrement(bool(ai.get("enabled", False)), int(ai.get("value", 0))),
        )


class Integer(DataType):
    """Integer value; stored little-endian, keyed big-endian."""

    meta: IntegerMeta

    def __init__(self, meta: IntegerMeta) -> None:
        super().__init__(meta)
        self._raw = 0

    @property
    def _width(self) -> int:
        return self.meta.byte_size * 8

    @property
    def _mask(self) -> int:
        return (1 << self._width) - 1

    def marshal_binary(self) -> bytes:
        return self._raw.to_bytes(self.meta.byte_size, "little")

    def unmarshal_binary(self, data: bytes) -> None:
        self._raw = int.from_bytes(_overlay(self.marshal_binary(), data), "little")

    def copy(self) -> Integer:
        duplicate = Integer(self.meta_copy())
        duplicate._raw = self._raw
        return duplicate

    def meta_copy(self) -> IntegerMeta:
        return self.meta.copy()

    def key_bytes(self) -> bytes:
        return self._raw.to_bytes(self.meta.byte_size, "big")

    def value(self) -> int:
        if self.meta.signed and self._raw >= 1 << (self._width - 1):
            return self._raw - (1 << self._width)
        return self._raw

    def set(self, value: Any) -> Integer:
        if not _is_int(value):
            raise InvalidDataTypeError(f"invalid set data type => {value!r}")
        self._raw = value & self._mask
        return self

    def fill(self) -> Integer:
        self._raw = self._mask
        return self

    def zero(self) -> Integer:
        self._raw = 0
        return self

    def compare(self, other: DataType) -> int:
        mine, theirs = self.key_bytes(), other.key_bytes()
        return (mine > theirs) - (mine < theirs)

    def cast(self, meta: DataTypeMeta) -> DataType:
        code = meta.code
        number = self.value()
        if code == TypeCode.INTEGER:
            return meta.new_value().set(number)
        if code == TypeCode.FLOAT:
            as_int64 = number - (1 << 64) if number >= _INT64_SIGN else number
            return meta.new_value().set(float(as_int64))
        if code == TypeCode.STRING:
            return meta.new_value().set(str(number))
        if code == TypeCode.VARCHAR:
            return type(meta)(cap=self.meta.byte_size).new_value().set(str(number))
        if code == TypeCode.DATETIME:
            return meta.new_value().set(number)
        raise CastError(f"typecast from {int(self.code)} to {int(code)} not supported")


@dataclass
class FloatMeta(DataTypeMeta):
    """Meta of a 4 or 8 byte IEEE 754 float."""

    byte_size: int = 8

    code = TypeCode.FLOAT

    def __post_init__(self) -> None:
        if self.byte_size not in _FLOAT_FORMATS:
            raise InvalidDataTypeError(f"invalid byte size => {self.byte_size}")

    def size(self) -> int:
        return self.byte_size

    def default(self) -> Float:
        return FloatMeta(byte_size=self.byte_size).new_value().set(0.0)

    def is_fixed_size(self) -> bool:
        return True

    def new_value(self) -> Float:
        return Float(self)

    def copy(self) -> FloatMeta:
        return FloatMeta(byte_size=self.byte_size)

    def to_dict(self) -> dict[str, Any]:
        return {"bit_size": self.byte_size}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FloatMeta:
        return cls(byte_size=int(data.get("bit_size", 8)))


class Float(DataType):
    """Floating point value stored as little-endian IEEE 754 bits."""

    meta: FloatMeta

    def __init__(self, meta: FloatMeta) -> None:
        super().__init__(meta)
        self._bits = 0

    @property
    def _format(self) -> str:
        return _FLOAT_FORMATS[self.meta.byte_size]

    def marshal_binary(self) -> bytes:
        return self._bits.to_bytes(self.meta.byte_size, "little")

    def unmarshal_binary(self, data: bytes) -> None:
        self._bits = int.from_bytes(_overlay(self.marshal_binary(), data), "little")

    def copy(self) -> Float:
        duplicate = Float(self.meta_copy())
        duplicate._bits = self._bits
        return duplicate

    def meta_copy(self) -> FloatMeta:
        return self.meta.copy()

    def key_bytes(self) -> bytes:
        return self.marshal_binary()

    def value(self) -> float:
        return struct.unpack(self._format, self.marshal_binary())[0]

    def set(self, value: Any) -> Float:
        if not isinstance(value, float):
            raise InvalidDataTypeError(f"invalid set data type => {value!r}")
        try:
            packed = struct.pack(self._format, value)
        except OverflowError:
            packed = struct.pack(self._format, math.copysign(math.inf, value))
        self._bits = int.from_bytes(packed, "little")
        return self

    def fill(self) -> Float:
        self._bits = (1 << (self.meta.byte_size * 8)) - 1
        return self

    def zero(self) -> Float:
        self._bits = 0
        return self

    def compare(self, other: DataType) -> int:
        mine = self.cast(FloatMeta(byte_size=8)).value()
        theirs = other.cast(FloatMeta(byte_size=8)).value()
        return (mine > theirs) - (mine < theirs)

    def cast(self, meta: DataTypeMeta) -> DataType:
        code = meta.code
        number = self.value()
        single = self.meta.byte_size == 4
        if code == TypeCode.FLOAT:
            return meta.new_value().set(number)
        if code == TypeCode.INTEGER:
            if not math.isfinite(number):
                raise CastError(f"cannot convert {number} to integer")
            return meta.new_value().set(math.trunc(number))
        if code == TypeCode.STRING:
            return meta.new_value().set(_format_float(number, single))
        if code == TypeCode.VARCHAR:
            text = _format_float(number, single)
            return type(meta)(cap=self.meta.byte_size).new_value().set(text)
        raise CastError(f"typecast from {int(self.code)} to {int(code)} not supported")