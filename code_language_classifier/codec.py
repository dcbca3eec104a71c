"""
Binary encoding shared by every backend.

Layout of an encoded classifier, big-endian throughout:

    magic (4 bytes) | format version (u16) | backend-specific fields

Strings are a u32 byte length followed by UTF-8 bytes. Arrays are a u8 rank
(1 or 2), one u32 per dimension and the elements as float64 (or uint32 for
index arrays). The magic tag and version are checked before anything else is
parsed.
"""

import math
import struct
from typing import List, Sequence, Tuple

import numpy as np

from .exceptions import DecodeError

FORMAT_VERSION = 1
MAGIC_LENGTH = 4
MAX_ARRAY_RANK = 2

_HEADER = struct.Struct("!4sH")
_U8 = struct.Struct("!B")
_U32 = struct.Struct("!I")
_F64 = struct.Struct("!d")

_FLOAT_DTYPE = np.dtype(">f8")
_INDEX_DTYPE = np.dtype(">u4")


class ModelWriter:
    """Accumulates the encoded form of a classifier."""

    def __init__(self, magic: bytes):
        if len(magic) != MAGIC_LENGTH:
            raise ValueError(f"Magic tag must be {MAGIC_LENGTH} bytes, got {len(magic)}")
        self._parts: List[bytes] = [_HEADER.pack(magic, FORMAT_VERSION)]

    def write_byte(self, value: int) -> None:
        self._parts.append(_U8.pack(value))

    def write_uint(self, value: int) -> None:
        self._parts.append(_U32.pack(value))

    def write_float(self, value: float) -> None:
        self._parts.append(_F64.pack(value))

    def write_string(self, value: str) -> None:
        data = value.encode("utf-8")
        self.write_uint(len(data))
        self._parts.append(data)

    def write_strings(self, values: Sequence[str]) -> None:
        self.write_uint(len(values))
        for value in values:
            self.write_string(value)

    def write_array(self, array: np.ndarray) -> None:
        self._write_shape(array.shape)
        self._parts.append(np.ascontiguousarray(array, dtype=_FLOAT_DTYPE).tobytes())

    def write_index_array(self, array: np.ndarray) -> None:
        self._write_shape(array.shape)
        self._parts.append(np.ascontiguousarray(array, dtype=_INDEX_DTYPE).tobytes())

    def _write_shape(self, shape: Tuple[int, ...]) -> None:
        self.write_byte(len(shape))
        for dimension in shape:
            self.write_uint(dimension)

    def getvalue(self) -> bytes:
        return b"".join(self._parts)


class ModelReader:
    """
    Bounds-checked reader over encoded classifier bytes.

    Every read raises DecodeError instead of returning partial data, so a
    decoder either builds a complete classifier or fails.
    """

    def __init__(self, data: bytes, magic: bytes):
        """
        Validate the header of encoded classifier bytes.

        Args:
            data: Encoded classifier
            magic: Tag expected by the decoding backend

        Raises:
            DecodeError: If data is not bytes, is too short, or has the wrong magic or version
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise DecodeError(f"Expected bytes, got {type(data).__name__}")
        self._data = bytes(data)
        self._offset = 0

        if len(self._data) < _HEADER.size:
            raise DecodeError(f"Data too short for a classifier header: {len(self._data)} bytes")

        found_magic, version = _HEADER.unpack_from(self._data, 0)
        if found_magic != magic:
            raise DecodeError(f"Bad magic tag: expected {magic!r}, got {found_magic!r}")
        if version != FORMAT_VERSION:
            raise DecodeError(f"Unsupported format version {version}, expected {FORMAT_VERSION}")
        self._offset = _HEADER.size

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _take(self, size: int) -> bytes:
        if size > self.remaining:
            raise DecodeError(
                f"Truncated data: needed {size} bytes at offset {self._offset}, {self.remaining} left"
            )
        chunk = self._data[self._offset:self._offset + size]
        self._offset += size
        return chunk

    def read_byte(self) -> int:
        return _U8.unpack(self._take(_U8.size))[0]

    def read_uint(self) -> int:
        return _U32.unpack(self._take(_U32.size))[0]

    def read_float(self) -> float:
        value = _F64.unpack(self._take(_F64.size))[0]
        if not math.isfinite(value):
            raise DecodeError(f"Non-finite value at offset {self._offset - _F64.size}")
        return value

    def read_string(self) -> str:
        length = self.read_uint()
        try:
            return self._take(length).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Invalid UTF-8 string: {e}") from e

    def read_strings(self) -> List[str]:
        count = self.read_uint()
        # Every string costs at least its length prefix
        if count * _U32.size > self.remaining:
            raise DecodeError(f"String count {count} exceeds remaining data")
        return [self.read_string() for _ in range(count)]

    def read_array(self, shape: Tuple[int, ...] = None) -> np.ndarray:
        """
        Read a float array.

        Args:
            shape: Expected shape, checked when given

        Raises:
            DecodeError: If the shape mismatches, data is truncated or values are not finite
        """
        found_shape = self._read_shape(shape)
        array = self._read_elements(found_shape, _FLOAT_DTYPE).astype(float)
        if not np.all(np.isfinite(array)):
            raise DecodeError("Array contains non-finite values")
        return array

    def read_index_array(self, shape: Tuple[int, ...] = None, bound: int = None) -> np.ndarray:
        """Read an unsigned index array, optionally checking every index is below bound."""
        found_shape = self._read_shape(shape)
        array = self._read_elements(found_shape, _INDEX_DTYPE).astype(np.int64)
        if bound is not None and array.size and int(array.max()) >= bound:
            raise DecodeError(f"Index {int(array.max())} out of range for {bound} entries")
        return array

    def _read_shape(self, expected: Tuple[int, ...] = None) -> Tuple[int, ...]:
        rank = self.read_byte()
        if not 1 <= rank <= MAX_ARRAY_RANK:
            raise DecodeError(f"Array rank must be between 1 and {MAX_ARRAY_RANK}, got {rank}")
        shape = tuple(self.read_uint() for _ in range(rank))
        if expected is not None and shape != tuple(expected):
            raise DecodeError(f"Array shape {shape} does not match expected {tuple(expected)}")
        return shape

    def _read_elements(self, shape: Tuple[int, ...], dtype: np.dtype) -> np.ndarray:
        count = 1
        for dimension in shape:
            count *= dimension
        raw = self._take(count * dtype.itemsize)
        try:
            return np.frombuffer(raw, dtype=dtype).reshape(shape)
        except ValueError as e:
            raise DecodeError(f"Cannot build array of shape {shape}: {e}") from e

    def finish(self) -> None:
        """Raise DecodeError if any bytes were left unread."""
        if self.remaining:
            raise DecodeError(f"Corrupt classifier data: {self.remaining} trailing bytes")
