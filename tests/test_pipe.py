import io
import threading

import pytest

from dbmscore.pipe import EOS, HEADER_SIZE, Pipe, frame


def test_frame_wire_bytes():
    assert frame(b"abc") == b"\x00\x00\x00\x03abc"


def test_frame_empty():
    assert frame(b"") == b"\x00" * HEADER_SIZE


def test_write_returns_framed_length():
    pipe = Pipe()
    assert pipe.write(b"hello") == HEADER_SIZE + len(b"hello")


def test_write_then_read_gives_frames():
    pipe = Pipe()
    pipe.write(b"one")
    pipe.write(b"two")
    assert pipe.read() == frame(b"one") + frame(b"two")


def test_partial_read():
    pipe = Pipe()
    pipe.write(b"abcdef")
    first = pipe.read(2)
    rest = pipe.read()
    assert first + rest == frame(b"abcdef")
    assert len(first) == 2


def test_initial_data_is_framed():
    pipe = Pipe(b"start")
    assert pipe.read() == frame(b"start")


def test_eos_closes_writer():
    pipe = Pipe()
    pipe.write(b"row")
    pipe.write(EOS)
    with pytest.raises(BrokenPipeError):
        pipe.write(b"late")
    assert pipe.read() == frame(b"row") + frame(EOS)
    assert pipe.read() == b""


def test_write_to_copies_everything():
    pipe = Pipe()
    pipe.write(b"x")
    pipe.write(EOS)
    sink = io.BytesIO()
    count = pipe.write_to(sink)
    assert sink.getvalue() == frame(b"x") + frame(EOS)
    assert count == len(sink.getvalue())


def test_read_waits_for_writer():
    pipe = Pipe()
    result = []
    reader = threading.Thread(target=lambda: result.append(pipe.read()))
    reader.start()
    pipe.write(b"later")
    reader.join(timeout=5)
    assert result == [frame(b"later")]


def test_read_after_close_writer_is_empty():
    pipe = Pipe()
    pipe.close_writer()
    assert pipe.read() == b""


def test_close_reader_breaks_pipe():
    pipe = Pipe()
    pipe.close_reader()
    with pytest.raises(BrokenPipeError):
        pipe.write(b"data")
    with pytest.raises(BrokenPipeError):
        pipe.read()


def test_read_zero_bytes():
    pipe = Pipe(b"abc")
    assert pipe.read(0) == b""
    assert pipe.read() == frame(b"abc")