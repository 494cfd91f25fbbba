"""Reader of length-prefixed response messages."""

from __future__ import annotations

from typing import Protocol

from .pipe import HEADER_SIZE


class _Source(Protocol):
    def read(self, size: int) -> bytes: ...


class ResponseReader:
    """Reads messages framed by a 4-byte big-endian length from a byte source."""

    def __init__(self, source: _Source) -> None:
        self._source = source

    def read_line(self) -> bytes:
        """Return the next message; raise EOFError if the source ends first."""
        header = self._read_exact(HEADER_SIZE)
        return self._read_exact(int.from_bytes(header, "big"))

    def _read_exact(self, size: int) -> bytes:
        data = bytearray()
        while len(data) < size:
            part = self._source.read(size - len(data))
            if not part:
                raise EOFError(f"expected {size} bytes, got {len(data)}")
            data += part
        return bytes(data)