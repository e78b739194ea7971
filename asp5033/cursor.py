"""Big-endian reader over a fixed byte buffer."""

from __future__ import annotations


class SimpleCursor:
    """Reads big-endian integers one after another from a byte buffer."""

    def __init__(self, buf: bytes | bytearray | memoryview) -> None:
        self._buf = bytes(buf)
        self._pos = 0

    def read_i24(self) -> int:
        """Read three bytes as an unsigned 24-bit big-endian value.

        The value is not sign-extended: the result is always in 0..0xFFFFFF.
        """
        return int.from_bytes(self._take(3), "big", signed=False)

    def read_i16(self) -> int:
        """Read two bytes as a signed 16-bit big-endian value."""
        return int.from_bytes(self._take(2), "big", signed=True)

    def _take(self, length: int) -> bytes:
        end = self._pos + length
        if end > len(self._buf):
            raise IndexError(
                f"cannot read {length} bytes at offset {self._pos}: "
                f"buffer holds {len(self._buf)}"
            )
        chunk = self._buf[self._pos:end]
        self._pos = end
        return chunk