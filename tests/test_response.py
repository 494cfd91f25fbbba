import io
import threading

import pytest

from dbmscore.pipe import EOS, Pipe, frame
from dbmscore.response import ResponseReader


class _Trickle:
    """Source that hands out one byte per read."""

    def __init__(self, data):
        self._data = io.BytesIO(data)

    def read(self, size):
        return self._data.read(min(size, 1))


def test_reads_messages_in_order():
    reader = ResponseReader(io.BytesIO(frame(b"first") + frame(b"second")))
    assert reader.read_line() == b"first"
    assert reader.read_line() == b"second"


def test_empty_message():
    reader = ResponseReader(io.BytesIO(frame(b"")))
    assert reader.read_line() == b""


def test_short_reads_are_joined():
    reader = ResponseReader(_Trickle(frame(b"[1,2,3]")))
    assert reader.read_line() == b"[1,2,3]"


def test_end_of_source_raises():
    reader = ResponseReader(io.BytesIO(frame(b"only")))
    reader.read_line()
    with pytest.raises(EOFError):
        reader.read_line()


def test_truncated_body_raises():
    reader = ResponseReader(io.BytesIO(frame(b"abcdef")[:-2]))
    with pytest.raises(EOFError):
        reader.read_line()


def test_reads_from_pipe_written_by_another_thread():
    pipe = Pipe()
    reader = ResponseReader(pipe)

    def produce():
        pipe.write(b"row")
        pipe.write(EOS)

    writer = threading.Thread(target=produce)
    writer.start()
    lines = [reader.read_line(), reader.read_line()]
    writer.join(timeout=5)
    assert lines == [b"row", EOS]