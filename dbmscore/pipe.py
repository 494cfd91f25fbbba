"""In-process byte pipe that frames each write with a 4-byte length header."""

from __future__ import annotations

import threading
from typing import Protocol

HEADER_SIZE = 4
EOS = b"EOS"  # end of stream marker
_CHUNK = 64 * 1024


class _Sink(Protocol):
    def write(self, data: bytes) -> object: ...


def frame(data: bytes) -> bytes:
    """Prefix ``data`` with its length as a 4-byte big-endian number."""
    data = bytes(data)
    if len(data) > 0xFFFFFFFF:
        raise ValueError(f"message of {len(data)} bytes is too long to frame")
    return len(data).to_bytes(HEADER_SIZE, "big") + data


class Pipe:
    """A thread-safe pipe: writers push framed messages, readers get raw bytes.

    Writing the end-of-stream marker closes the writing side.
    """

    def __init__(self, initial: bytes = b"") -> None:
        self._cond = threading.Condition()
        self._buffer = bytearray()
        self._writer_closed = False
        self._reader_closed = False
        if initial:
            self.write(initial)

    def write(self, data: bytes) -> int:
        """Write one framed message; return the number of bytes written."""
        payload = frame(data)
        with self._cond:
            if self._reader_closed or self._writer_closed:
                raise BrokenPipeError("write on closed pipe")
            self._buffer += payload
            self._cond.notify_all()
        if bytes(data) == EOS:
            self.close_writer()
        return len(payload)

    def read(self, size: int = -1) -> bytes:
        """Read up to ``size`` bytes, waiting for data; ``b""`` once the writer closed."""
        with self._cond:
            if self._reader_closed:
                raise BrokenPipeError("read on closed pipe")
            if size == 0:
                return b""
            while not self._buffer and not self._writer_closed and not self._reader_closed:
                self._cond.wait()
            if self._reader_closed:
                raise BrokenPipeError("read on closed pipe")
            take = len(self._buffer) if size < 0 else min(size, len(self._buffer))
            chunk = bytes(self._buffer[:take])
            del self._buffer[:take]
            return chunk

    def write_to(self, sink: _Sink) -> int:
        """Copy everything until the writer closes into ``sink``; return the byte count."""
        total = 0
        while True:
            chunk = self.read(_CHUNK)
            if not chunk:
                return total
            sink.write(chunk)
            total += len(chunk)

    def close_writer(self) -> None:
        with self._cond:
            self._writer_closed = True
            self._cond.notify_all()

    def close_reader(self) -> None:
        with self._cond:
            self._reader_closed = True
            self._buffer.clear()
            self._cond.notify_all()