"""Primitive codecs for instruction data

Strings are a u32 little-endian byte length followed by the UTF-8 bytes.
Integers are fixed width, little-endian.
"""

import struct

from .errors import DecodingError, EncodingError, EncodingOverflow

U8_MAX = 0xFF
U32_MAX = 0xFFFFFFFF
U64_MAX = 0xFFFFFFFFFFFFFFFF
I64_MIN = -(1 << 63)
I64_MAX = (1 << 63) - 1


def _check_int(value: int, low: int, high: int, width: str) -> None:
    # bool is an int subclass but never a valid field value
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{width} field expects an int, got {type(value).__name__}")
    if not low <= value <= high:
        raise EncodingOverflow(value, width)


def encode_u8(value: int) -> bytes:
    """Encode a single unsigned byte"""
    _check_int(value, 0, U8_MAX, 'u8')
    return bytes([value])


def encode_u32_le(value: int) -> bytes:
    _check_int(value, 0, U32_MAX, 'u32')
    return struct.pack('<I', value)


def encode_u64_le(value: int) -> bytes:
    """Encode an unsigned 64-bit integer, little-endian"""
    _check_int(value, 0, U64_MAX, 'u64')
    return struct.pack('<Q', value)


def encode_i64_le(value: int) -> bytes:
    """Encode a signed 64-bit integer, little-endian two's complement"""
    _check_int(value, I64_MIN, I64_MAX, 'i64')
    return struct.pack('<q', value)


def encode_string(value: str) -> bytes:
    """Encode a string as u32 byte length + UTF-8 bytes"""
    if not isinstance(value, str):
        raise EncodingError(f"string field expects a str, got {type(value).__name__}")
    raw = value.encode('utf-8')
    if len(raw) > U32_MAX:
        raise EncodingOverflow(len(raw), 'u32 length prefix')
    return struct.pack('<I', len(raw)) + raw


class BinaryReader:
    """Sequential reader for buffers produced by the encoders above"""

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _take(self, size: int) -> bytes:
        if self.remaining() < size:
            raise DecodingError(
                f"Need {size} bytes at offset {self._offset}, have {self.remaining()}"
            )
        chunk = self._data[self._offset:self._offset + size]
        self._offset += size
        return chunk

    def read_u8(self) -> int:
        return self._take(1)[0]

    def read_u32(self) -> int:
        return struct.unpack('<I', self._take(4))[0]

    def read_u64(self) -> int:
        return struct.unpack('<Q', self._take(8))[0]

    def read_i64(self) -> int:
        return struct.unpack('<q', self._take(8))[0]

    def read_string(self) -> str:
        length = self.read_u32()
        raw = self._take(length)
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodingError(f"Invalid UTF-8 in string field: {e}") from e

    def expect_end(self) -> None:
        """Fail if unread bytes remain"""
        if self.remaining():
            raise DecodingError(f"{self.remaining()} trailing bytes after offset {self._offset}")


def decode_string(data: bytes) -> str:
    """Decode a single length-prefixed string occupying the whole buffer"""
    reader = BinaryReader(data)
    value = reader.read_string()
    reader.expect_end()
    return value
