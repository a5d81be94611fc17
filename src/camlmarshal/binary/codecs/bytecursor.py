from __future__ import annotations
import struct

from ..errors import TruncatedInput


class Cursor:
    __slots__ = ("buf", "pos", "_dead")

    def __init__(self, data: bytes | bytearray | memoryview):
        self.buf = memoryview(data)
        self.pos = 0
        self._dead = False

    def remaining(self) -> int: return len(self.buf) - self.pos
    def tell(self) -> int: return self.pos

    def take(self, n: int) -> bytes:
        if self._dead:
            raise TruncatedInput("cursor is unusable after a truncated read", offset=self.pos)
        end = self.pos + n
        if n < 0 or end > len(self.buf):
            # no partial read: position stays put and the cursor is poisoned
            self._dead = True
            raise TruncatedInput(f"need {n} bytes, {self.remaining()} left", offset=self.pos)
        out = self.buf[self.pos:end].tobytes()
        self.pos = end
        return out

    def _unpack(self, fmt: str, n: int):
        return struct.unpack(fmt, self.take(n))[0]

    # big-endian
    def u8(self) -> int:  return self._unpack(">B", 1)
    def s8(self) -> int:  return self._unpack(">b", 1)
    def u16(self) -> int: return self._unpack(">H", 2)
    def s16(self) -> int: return self._unpack(">h", 2)
    def u32(self) -> int: return self._unpack(">I", 4)
    def s32(self) -> int: return self._unpack(">i", 4)
    def u64(self) -> int: return self._unpack(">Q", 8)
    def s64(self) -> int: return self._unpack(">q", 8)
    def f64(self) -> float: return self._unpack(">d", 8)

    # little-endian, only used by the *_LITTLE double codes
    def u8_le(self) -> int:  return self._unpack("<B", 1)
    def u32_le(self) -> int: return self._unpack("<I", 4)
    def u64_le(self) -> int: return self._unpack("<Q", 8)
    def f64_le(self) -> float: return self._unpack("<d", 8)

    def f64_array(self, count: int, *, little: bool = False) -> list[float]:
        if count == 0:
            return []
        raw = self.take(8 * count)
        return list(struct.unpack(f"{'<' if little else '>'}{count}d", raw))

    def peek(self, n: int) -> bytes:
        """Look ahead without consuming. A failed peek raises but leaves the cursor usable."""
        end = self.pos + n
        if self._dead or end > len(self.buf):
            raise TruncatedInput(f"peek of {n} bytes past end", offset=self.pos)
        return self.buf[self.pos:end].tobytes()
