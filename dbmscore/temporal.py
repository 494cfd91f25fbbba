"""Second-resolution datetime column type."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from .base import DataType, DataTypeMeta, TypeCode
from .errors import CastError, InvalidDataTypeError

_FORMAT = "%Y-%m-%d %H:%M:%S"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_SECOND = timedelta(seconds=1)
_UINT64_MASK = (1 << 64) - 1
_INT64_SIGN = 1 << 63
_TEXT_LENGTH = 19


def format_time(timestamp: int) -> str:
    """Format Unix seconds as ``YYYY-MM-DD HH:MM:SS`` in UTC."""
    try:
        moment = _EPOCH + timedelta(seconds=timestamp)
    except OverflowError as exc:
        raise ValueError(f"timestamp out of range: {timestamp}") from exc
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )


def parse_time(text: str) -> int:
    """Parse ``YYYY-MM-DD HH:MM:SS`` (UTC) into Unix seconds."""
    try:
        moment = datetime.strptime(text, _FORMAT)
    except (TypeError, ValueError) as exc:
        raise InvalidDataTypeError(f"invalid datetime {text!r}") from exc
    return (moment.replace(tzinfo=timezone.utc) - _EPOCH) // _SECOND


@dataclass
class DateTimeMeta(DataTypeMeta):
    """Meta of the DATETIME type; it has no parameters."""

    code = TypeCode.DATETIME

    def size(self) -> int:
        return 8

    def default(self) -> DateTime:
        return DateTimeMeta().new_value().set(0)

    def is_fixed_size(self) -> bool:
        return True

    def new_value(self) -> DateTime:
        return DateTime(self)

    def copy(self) -> DateTimeMeta:
        return DateTimeMeta()

    def to_dict(self) -> dict[str, Any]:
        return {}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DateTimeMeta:
        return cls()


class DateTime(DataType):
    """Unix seconds stored as an unsigned 64-bit number."""

    meta: DateTimeMeta

    def __init__(self, meta: DateTimeMeta) -> None:
        super().__init__(meta)
        self._seconds = 0

    def marshal_binary(self) -> bytes:
        return self._seconds.to_bytes(8, "big")

    def unmarshal_binary(self, data: bytes) -> None:
        if len(data) < 8:
            raise ValueError("datetime needs 8 bytes")
        self._seconds = int.from_bytes(data[:8], "big")

    def copy(self) -> DateTime:
        duplicate = DateTime(self.meta_copy())
        duplicate._seconds = self._seconds
        return duplicate

    def meta_copy(self) -> DateTimeMeta:
        return DateTimeMeta()

    def key_bytes(self) -> bytes:
        return self._seconds.to_bytes(8, "big")

    def _signed(self) -> int:
        if self._seconds >= _INT64_SIGN:
            return self._seconds - (1 << 64)
        return self._seconds

    def value(self) -> str:
        return format_time(self._signed())

    def set(self, value: Any) -> DateTime:
        if isinstance(value, str):
            value = parse_time(value)
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidDataTypeError(f"invalid set data type => {value!r}")
        self._seconds = value & _UINT64_MASK
        return self

    def fill(self) -> DateTime:
        self._seconds = _UINT64_MASK
        return self

    def zero(self) -> DateTime:
        self._seconds = 0
        return self

    def compare(self, other: DataType) -> int:
        if not isinstance(other, DateTime):
            raise InvalidDataTypeError(f"cannot compare datetime with {type(other).__name__}")
        theirs = other._seconds
        return (self._seconds > theirs) - (self._seconds < theirs)

    def cast(self, meta: DataTypeMeta) -> DataType:
        code = meta.code
        if code == TypeCode.INTEGER:
            return meta.new_value().set(self._seconds)
        if code == TypeCode.STRING:
            return meta.new_value().set(self.value())
        if code == TypeCode.VARCHAR:
            return type(meta)(cap=_TEXT_LENGTH).new_value().set(self.value())
        raise CastError(f"typecast from {int(self.code)} to {int(code)} not supported")