"""Binary layout of data file metadata and of the rows stored in it."""

from __future__ import annotations

import struct
from collections.abc import Sequence
from dataclasses import dataclass, field

from .base import DataType
from .column import Column

MAGIC = 0xD0D
VERSION = 1
METADATA_SIZE = 14

_META = struct.Struct(">HBBHQ")
_LENGTH = struct.Struct(">H")
_MAX_LENGTH = 0xFFFF


@dataclass
class Metadata:
    """Header of a data file: format marker, version, page size and row count."""

    page_size: int = 0
    count: int = 0
    magic: int = MAGIC
    version: int = VERSION
    flags: int = 0
    dirty: bool = field(default=True, compare=False)

    def to_bytes(self) -> bytes:
        return _META.pack(
            self.magic & 0xFFFF,
            self.version & 0xFF,
            self.flags & 0xFF,
            self.page_size & 0xFFFF,
            self.count & 0xFFFFFFFFFFFFFFFF,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Metadata:
        if len(data) < METADATA_SIZE:
            raise ValueError(f"metadata needs {METADATA_SIZE} bytes, got {len(data)}")
        magic, version, flags, page_size, count = _META.unpack_from(data)
        return cls(
            page_size=page_size,
            count=count,
            magic=magic,
            version=version,
            flags=flags,
            dirty=False,
        )


@dataclass
class Record:
    """One row of a data file, its values in column order."""

    columns: list[Column]
    data: list[DataType]
    dirty: bool = True

    def size(self) -> int:
        """Bytes reserved for the row: one per value, plus length prefixes of variable values."""
        return sum(
            1 + value.size() + (0 if value.is_fixed_size() else _LENGTH.size)
            for value in self.data
        )

    def to_bytes(self) -> bytes:
        out = bytearray()
        for value in self.data:
            encoded = value.marshal_binary()
            if not value.is_fixed_size():
                if len(encoded) > _MAX_LENGTH:
                    raise ValueError(f"value of {len(encoded)} bytes is too long for a record")
                out += _LENGTH.pack(len(encoded))
            out += encoded
        out += bytes(self.size() - len(out))
        return bytes(out)

    @classmethod
    def from_bytes(cls, columns: Sequence[Column], data: bytes) -> Record:
        view = memoryview(bytes(data))
        offset = 0
        values: list[DataType] = []
        for column in columns:
            value = column.meta.copy().new_value()
            if value.is_fixed_size():
                size = value.size()
            else:
                if offset + _LENGTH.size > len(view):
                    raise ValueError("record data is truncated")
                (size,) = _LENGTH.unpack_from(view, offset)
                offset += _LENGTH.size
            chunk = bytes(view[offset:offset + size])
            if len(chunk) < size:
                raise ValueError("record data is truncated")
            value.unmarshal_binary(chunk)
            values.append(value)
            offset += size
        return cls(list(columns), values, dirty=False)