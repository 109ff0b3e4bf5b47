"""Tests for the MessagePack output stream."""

import io

import pytest

from packson.output import MsgPackOutputStream


class RecordingOutput:
    def __init__(self):
        self.writes = []
        self.flushed = 0

    def write(self, data):
        self.writes.append(data)

    def flush(self):
        self.flushed += 1


def written(build) -> bytes:
    out = io.BytesIO()
    stream = MsgPackOutputStream(out)
    build(stream)
    stream.flush()
    return out.getvalue()


class TestAppend:
    """Each append writes one MessagePack item."""

    def test_scalars(self):
        data = written(lambda s: s.append_null().append_boolean(True).append_boolean(False))
        assert data == b"\xc0\xc3\xc2"

    def test_numbers(self):
        assert written(lambda s: s.append_number(5)) == b"\x05"
        assert written(lambda s: s.append_number(-1)) == b"\xff"
        assert written(lambda s: s.append_number(2.0)) == b"\xcb\x40\x00\x00\x00\x00\x00\x00\x00"

    def test_number_out_of_range(self):
        stream = MsgPackOutputStream(io.BytesIO())
        with pytest.raises(OverflowError):
            stream.append_number(2 ** 64)
        with pytest.raises(OverflowError):
            stream.append_number(-(2 ** 63) - 1)

    def test_string_and_binary(self):
        assert written(lambda s: s.append_string("ab")) == b"\xa2ab"
        assert written(lambda s: s.append_binary(b"ab")) == b"\xc4\x02ab"

    def test_headers(self):
        data = written(lambda s: s.start_map(2).start_array(3))
        assert data == b"\x82\x93"
        assert written(lambda s: s.start_array(70000)) == b"\xdd\x00\x01\x11\x70"

    def test_pipes(self):
        assert written(lambda s: s.pipe_reader(io.StringIO("ü" * 3), chunk_size=2)) == "üüü".encode()
        assert written(lambda s: s.pipe_stream(io.BytesIO(b"\x00\x01\x02"), chunk_size=1)) == b"\x00\x01\x02"


class TestBuffering:
    """Bytes are collected and written in chunks."""

    def test_nothing_written_before_flush(self):
        out = RecordingOutput()
        stream = MsgPackOutputStream(out)
        stream.append_string("hello")
        assert out.writes == []
        stream.flush()
        assert out.writes == [b"\xa5hello"]
        assert out.flushed == 1

    def test_full_buffer_is_drained(self):
        out = RecordingOutput()
        stream = MsgPackOutputStream(out, buffer_size=4)
        stream.append_string("abcdef")
        assert out.writes == [b"\xa6abcdef"]

    def test_bytes_written(self):
        stream = MsgPackOutputStream(io.BytesIO())
        stream.start_map(1).append_string("a").append_number(1)
        assert stream.bytes_written == 4

    def test_write_errors_propagate(self):
        class Broken:
            def write(self, data):
                raise BrokenPipeError("gone")

        stream = MsgPackOutputStream(Broken())
        stream.append_null()
        with pytest.raises(BrokenPipeError):
            stream.flush()
