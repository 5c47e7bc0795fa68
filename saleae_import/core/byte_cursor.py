"""
Bounds-checked sequential reader over a little-endian byte buffer.

The cursor only moves forward. Every read checks the remaining length first
and returns ``None`` on a short buffer instead of reading past the end, so
callers can turn truncation into a descriptive error for their own stage.
"""

import struct
from typing import Optional, Sequence, Union

_INT32 = struct.Struct("<i")
_UINT32 = struct.Struct("<I")
_INT64 = struct.Struct("<q")
_UINT64 = struct.Struct("<Q")
_FLOAT32 = struct.Struct("<f")
_FLOAT64 = struct.Struct("<d")

Number = Union[int, float]


class ByteCursor:
    """Forward-only reader with explicit position tracking."""

    def __init__(self, data: Union[bytes, bytearray, memoryview], pos: int = 0):
        self._data = memoryview(data)
        self.pos = pos

    def __len__(self) -> int:
        return len(self._data)

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return len(self._data) - self.pos

    def has(self, size: int) -> bool:
        """Check whether ``size`` more bytes can be read."""
        return size >= 0 and self.pos + size <= len(self._data)

    def startswith(self, prefix: bytes) -> bool:
        """Check whether the unread data begins with ``prefix``."""
        if not self.has(len(prefix)):
            return False
        return self._data[self.pos : self.pos + len(prefix)] == prefix

    def skip(self, size: int) -> bool:
        if not self.has(size):
            return False
        self.pos += size
        return True

    def _read(self, fmt: struct.Struct) -> Optional[Number]:
        if not self.has(fmt.size):
            return None
        (value,) = fmt.unpack_from(self._data, self.pos)
        self.pos += fmt.size
        return value

    def read_i32(self) -> Optional[int]:
        return self._read(_INT32)

    def read_u32(self) -> Optional[int]:
        return self._read(_UINT32)

    def read_i64(self) -> Optional[int]:
        return self._read(_INT64)

    def read_u64(self) -> Optional[int]:
        return self._read(_UINT64)

    def read_f32(self) -> Optional[float]:
        return self._read(_FLOAT32)

    def read_f64(self) -> Optional[float]:
        return self._read(_FLOAT64)

    def read_fields(self, fmt: str) -> Optional[Sequence[Number]]:
        """
        Read a packed group of fields in one bounds check.

        Args:
            fmt: ``struct`` format string without byte-order prefix

        Returns:
            Tuple of decoded values, or None if the buffer is too short
        """
        layout = struct.Struct("<" + fmt)
        if not self.has(layout.size):
            return None
        values = layout.unpack_from(self._data, self.pos)
        self.pos += layout.size
        return values

    def read_array(self, code: str, count: int) -> Optional[Sequence[Number]]:
        """
        Read ``count`` consecutive values of one type.

        The whole array is bounds-checked before anything is consumed.

        Args:
            code: Single ``struct`` type code, e.g. ``"d"`` or ``"f"``
            count: Number of elements

        Returns:
            Tuple of values, or None if ``count`` is negative or the array
            does not fit in the remaining buffer
        """
        if count < 0:
            return None
        if not self.has(struct.calcsize("<" + code) * count):
            return None
        layout = struct.Struct(f"<{count}{code}")
        values = layout.unpack_from(self._data, self.pos)
        self.pos += layout.size
        return values
