"""
MessagePack output stream.

MsgPackOutputStream is the only object that writes to the caller's
output. Scalar framing is delegated to msgpack.Packer, which always
picks the smallest encoding that fits:

    None            0xc0
    False / True    0xc2 / 0xc3
    int             positive/negative fixint, (u)int 8/16/32/64
    float           float 64
    str             fixstr, str 8/16/32 (UTF-8)
    bytes           bin 8/16/32
    map header      fixmap, map 16/32
    array header    fixarray, array 16/32

Writes are buffered and handed to the underlying output in chunks.
Readers and byte streams are copied through without any header.
"""

from __future__ import annotations

import numbers
from typing import Any, BinaryIO

import msgpack

_INT_MIN = -(2 ** 63)
_INT_MAX = 2 ** 64 - 1


class MsgPackOutputStream:
    """
    Buffered MessagePack writer over a binary file-like object.

    Args:
        out: Anything with a write(bytes) method.
        buffer_size: Bytes collected before they are passed to out.

    Attributes:
        bytes_written: Total number of bytes appended so far.
    """

    def __init__(self, out: BinaryIO, buffer_size: int = 8192):
        self._out = out
        self._buffer = bytearray()
        self._buffer_size = buffer_size
        self._packer = msgpack.Packer(use_bin_type=True, autoreset=True)
        self.bytes_written = 0

    def _write(self, data: bytes) -> "MsgPackOutputStream":
        self._buffer += data
        self.bytes_written += len(data)
        if len(self._buffer) >= self._buffer_size:
            self._drain()
        return self

    def _drain(self) -> None:
        if self._buffer:
            data = bytes(self._buffer)
            self._buffer.clear()
            self._out.write(data)

    def append_null(self) -> "MsgPackOutputStream":
        return self._write(self._packer.pack(None))

    def append_boolean(self, value: bool) -> "MsgPackOutputStream":
        return self._write(self._packer.pack(bool(value)))

    def append_number(self, value: Any) -> "MsgPackOutputStream":
        """
        Append an integral or real number.

        Raises:
            OverflowError: If an integral value does not fit in 64 bits.
        """
        if isinstance(value, numbers.Integral):
            value = int(value)
            if value < _INT_MIN or value > _INT_MAX:
                raise OverflowError(f"Integer {value} does not fit in 64 bits")
        else:
            value = float(value)
        return self._write(self._packer.pack(value))

    def append_string(self, value: str) -> "MsgPackOutputStream":
        return self._write(self._packer.pack(str(value)))

    def append_binary(self, value: bytes | bytearray | memoryview) -> "MsgPackOutputStream":
        return self._write(self._packer.pack(bytes(value)))

    def start_map(self, size: int) -> "MsgPackOutputStream":
        return self._write(self._packer.pack_map_header(size))

    def start_array(self, size: int) -> "MsgPackOutputStream":
        return self._write(self._packer.pack_array_header(size))

    def write_raw(self, data: bytes) -> "MsgPackOutputStream":
        return self._write(data)

    def pipe_reader(self, reader: Any, chunk_size: int = 8192) -> "MsgPackOutputStream":
        """Copy a text reader through as UTF-8 bytes."""
        while True:
            chunk = reader.read(chunk_size)
            if not chunk:
                return self
            self._write(chunk.encode("utf-8"))

    def pipe_stream(self, stream: Any, chunk_size: int = 8192) -> "MsgPackOutputStream":
        """Copy a byte stream through unchanged."""
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                return self
            self._write(chunk)

    def flush(self) -> None:
        self._drain()
        flush = getattr(self._out, "flush", None)
        if flush is not None:
            flush()
