"""
Bounds-checked big-endian reader over an immutable byte buffer.
"""

import struct

from .errors import InvalidAttribute, UnexpectedEof

_U2 = struct.Struct(">H")
_U4 = struct.Struct(">I")
_I4 = struct.Struct(">i")
_I8 = struct.Struct(">q")
_F4 = struct.Struct(">f")
_F8 = struct.Struct(">d")


class Cursor:
    """Sequential reader. Every read raises UnexpectedEof instead of overrunning."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        self.pos = 0

    def remaining(self) -> int:
        return len(self.data) - self.pos

    def _require(self, length: int):
        if length < 0 or self.remaining() < length:
            raise UnexpectedEof(length, self.remaining())

    def _unpack(self, fmt: struct.Struct):
        self._require(fmt.size)
        val = fmt.unpack_from(self.data, self.pos)[0]
        self.pos += fmt.size
        return val

    def read_u1(self) -> int:
        self._require(1)
        val = self.data[self.pos]
        self.pos += 1
        return val

    def read_u2(self) -> int:
        return self._unpack(_U2)

    def read_u4(self) -> int:
        return self._unpack(_U4)

    def read_i4(self) -> int:
        return self._unpack(_I4)

    def read_i8(self) -> int:
        return self._unpack(_I8)

    def read_f4(self) -> float:
        return self._unpack(_F4)

    def read_f8(self) -> float:
        return self._unpack(_F8)

    def read_bytes(self, length: int) -> bytes:
        self._require(length)
        val = self.data[self.pos:self.pos + length]
        self.pos += length
        return val

    def sub_cursor(self, length: int) -> "Cursor":
        """Carve the next `length` bytes into an independent cursor."""
        return Cursor(self.read_bytes(length))

    def expect_end(self, name: str):
        """Raise InvalidAttribute unless every byte has been consumed."""
        if self.remaining():
            raise InvalidAttribute(name, f"{self.remaining()} trailing bytes")
