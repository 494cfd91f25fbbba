"""On-disk heap of rows addressed by pointers, with an in-memory write cache."""

from __future__ import annotations

import mmap
import os
import struct
import threading
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from .base import DataType
from .column import Column
from .errors import DBMSError, KeyTooLargeError, NotFoundError
from .record import METADATA_SIZE, VERSION, Metadata, Record

_HEADER = struct.Struct(">BI")
HEADER_SIZE = _HEADER.size
_USED = 0
_FREE = 1
_POINTER = struct.Struct(">QI")
POINTER_SIZE = _POINTER.size
CACHE_SIZE = 10000

_META_ADDR = HEADER_SIZE
_DATA_START = HEADER_SIZE + METADATA_SIZE


@dataclass
class Options:
    """Configuration of a data file."""

    page_size: int = field(default_factory=lambda: mmap.PAGESIZE)
    columns: list[Column] = field(default_factory=list)


@dataclass(frozen=True)
class Pointer:
    """Location of a row: address of its block and the block's capacity."""

    addr: int
    size: int

    def to_bytes(self) -> bytes:
        return _POINTER.pack(self.addr, self.size)

    @classmethod
    def from_bytes(cls, data: bytes) -> Pointer:
        if len(data) < POINTER_SIZE:
            raise ValueError(f"pointer needs {POINTER_SIZE} bytes, got {len(data)}")
        addr, size = _POINTER.unpack_from(data)
        return cls(addr, size)


class DataFile:
    """Rows of fixed columns stored in blocks of a single file."""

    def __init__(self, path: str | os.PathLike[str], options: Options | None = None) -> None:
        options = options or Options()
        if not options.columns:
            raise ValueError("provide at least 1 column")
        self.path = f"{os.fspath(path)}.dat"
        self.columns = list(options.columns)
        self._lock = threading.RLock()
        self._cache: dict[int, Record] = {}
        self._free: dict[int, int] = {}
        self._end = 0
        self._file = open(self.path, "r+b" if os.path.exists(self.path) else "w+b")
        try:
            self._open(options)
        except BaseException:
            self._file.close()
            self._file = None
            raise

    # low level file access

    def _read(self, pos: int, size: int) -> bytes:
        self._file.seek(pos)
        return self._file.read(size)

    def _write(self, pos: int, data: bytes) -> None:
        self._file.seek(pos)
        self._file.write(data)

    def _read_header(self, pos: int) -> tuple[int, int]:
        raw = self._read(pos, HEADER_SIZE)
        if len(raw) < HEADER_SIZE:
            raise DBMSError("data file is corrupted: truncated block header")
        return _HEADER.unpack(raw)

    def _open(self, options: Options) -> None:
        self._file.seek(0, os.SEEK_END)
        self._end = self._file.tell()
        if self._end == 0:
            self.meta = Metadata(page_size=options.page_size)
            self._append(METADATA_SIZE, _USED)
            self._write_meta()
            self._file.flush()
            return

        flag, cap = self._read_header(0)
        if flag != _USED or cap != METADATA_SIZE:
            raise DBMSError("data file is corrupted: bad metadata block")
        self.meta = Metadata.from_bytes(self._read(_META_ADDR, METADATA_SIZE))
        if self.meta.version != VERSION:
            raise DBMSError(
                f"incompatible version {self.meta.version:#x} (expected: {VERSION:#x})"
            )
        self._load_blocks()

    def _load_blocks(self) -> None:
        pos = _DATA_START
        while pos < self._end:
            flag, cap = self._read_header(pos)
            addr = pos + HEADER_SIZE
            if addr + cap > self._end:
                raise DBMSError("data file is corrupted: block exceeds file size")
            if flag == _FREE:
                self._free[addr] = cap
            pos = addr + cap

    # block allocation

    def _append(self, size: int, flag: int) -> Pointer:
        pos = self._end
        self._write(pos, _HEADER.pack(flag, size) + bytes(size))
        self._end = pos + HEADER_SIZE + size
        return Pointer(pos + HEADER_SIZE, size)

    def _alloc(self, size: int) -> Pointer:
        for addr in sorted(self._free):
            cap = self._free[addr]
            if cap < size:
                continue
            del self._free[addr]
            rest = cap - size - HEADER_SIZE
            if rest > 0:
                self._write(addr - HEADER_SIZE, _HEADER.pack(_USED, size))
                tail = addr + size + HEADER_SIZE
                self._write(tail - HEADER_SIZE, _HEADER.pack(_FREE, rest))
                self._free[tail] = rest
                return Pointer(addr, size)
            self._write(addr - HEADER_SIZE, _HEADER.pack(_USED, cap))
            return Pointer(addr, cap)
        return self._append(size, _USED)

    def _release(self, ptr: Pointer) -> None:
        self._cache.pop(ptr.addr, None)
        self._write(ptr.addr - HEADER_SIZE, _HEADER.pack(_FREE, ptr.size))
        self._free[ptr.addr] = ptr.size

    def _ensure_live(self, ptr: Pointer) -> None:
        if ptr.addr in self._cache:
            return
        if ptr.addr < _DATA_START + HEADER_SIZE or ptr.addr + ptr.size > self._end:
            raise NotFoundError(f"no record at {ptr.addr}")
        flag, cap = self._read_header(ptr.addr - HEADER_SIZE)
        if flag != _USED or cap != ptr.size:
            raise NotFoundError(f"no record at {ptr.addr}")

    # record cache

    def _remember(self, addr: int, record: Record) -> None:
        if addr not in self._cache and len(self._cache) >= CACHE_SIZE:
            self._write_records()
            self._cache.clear()
        self._cache[addr] = record

    def _fetch(self, ptr: Pointer) -> Record:
        record = self._cache.get(ptr.addr)
        if record is not None:
            return record
        self._ensure_live(ptr)
        record = Record.from_bytes(self.columns, self._read(ptr.addr, ptr.size))
        self._remember(ptr.addr, record)
        return record

    def _write_records(self) -> None:
        for addr, record in self._cache.items():
            if record.dirty:
                self._write(addr, record.to_bytes())
                record.dirty = False

    def _write_meta(self) -> None:
        if self.meta.dirty:
            self._write(_META_ADDR, self.meta.to_bytes())
            self.meta.dirty = False

    def _check_open(self) -> None:
        if self._file is None:
            raise ValueError("data file is closed")

    def _new_record(self, values: Sequence[DataType]) -> Record:
        values = list(values)
        if len(values) != len(self.columns):
            raise KeyTooLargeError()
        return Record(self.columns, values, dirty=True)

    # public interface

    def get(self, ptr: Pointer) -> list[DataType]:
        """Copies of the values of the row at ``ptr``."""
        with self._lock:
            self._check_open()
            return [value.copy() for value in self._fetch(ptr).data]

    def get_map(self, ptr: Pointer) -> dict[str, DataType]:
        """Copies of the values of the row at ``ptr``, keyed by column name."""
        with self._lock:
            self._check_open()
            record = self._fetch(ptr)
            return {col.name: value.copy() for col, value in zip(self.columns, record.data)}

    def insert(self, values: Sequence[DataType]) -> Pointer:
        ptr = self.insert_mem(values)
        self.flush()
        return ptr

    def insert_mem(self, values: Sequence[DataType]) -> Pointer:
        """Insert a row without writing it to disk yet."""
        record = self._new_record(values)
        with self._lock:
            self._check_open()
            ptr = self._alloc(record.size())
            self._remember(ptr.addr, record)
            self.meta.count += 1
            self.meta.dirty = True
            return ptr

    def update(self, ptr: Pointer, values: Sequence[DataType]) -> Pointer:
        new_ptr = self.update_mem(ptr, values)
        self.flush()
        return new_ptr

    def update_mem(self, ptr: Pointer, values: Sequence[DataType]) -> Pointer:
        """Replace a row; it moves to a new pointer when it no longer fits its block."""
        record = self._new_record(values)
        with self._lock:
            self._check_open()
            self._ensure_live(ptr)
            if record.size() <= ptr.size:
                self._remember(ptr.addr, record)
                return ptr
            self._release(ptr)
            new_ptr = self._alloc(record.size())
            self._remember(new_ptr.addr, record)
            return new_ptr

    def delete(self, ptr: Pointer) -> None:
        self.delete_mem(ptr)
        self.flush()

    def delete_mem(self, ptr: Pointer) -> None:
        """Free the row's block for reuse."""
        with self._lock:
            self._check_open()
            self._ensure_live(ptr)
            self._release(ptr)
            self.meta.count -= 1
            self.meta.dirty = True

    def scan(self) -> Iterator[tuple[Pointer, list[DataType]]]:
        """Yield every live row in file order with its pointer."""
        pos = _DATA_START
        while True:
            with self._lock:
                self._check_open()
                if pos >= self._end:
                    return
                flag, cap = self._read_header(pos)
                ptr = Pointer(pos + HEADER_SIZE, cap)
                row = None
                if flag == _USED:
                    row = [value.copy() for value in self._fetch(ptr).data]
                pos = ptr.addr + cap
            if row is not None:
                yield ptr, row

    def prepare_space(self, size: int) -> None:
        """Reserve ``size`` bytes at the end of the file for upcoming inserts."""
        with self._lock:
            self._check_open()
            if size <= HEADER_SIZE:
                return
            ptr = self._append(size - HEADER_SIZE, _FREE)
            self._free[ptr.addr] = ptr.size

    def count(self) -> int:
        return self.meta.count

    def heap_size(self) -> int:
        return self._end

    def flush(self) -> None:
        """Write pending rows and metadata to disk."""
        with self._lock:
            self._check_open()
            self._write_records()
            self._write_meta()
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file is None:
                return
            try:
                self.flush()
            finally:
                self._file.close()
                self._file = None

    def __enter__(self) -> DataFile:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()