from __future__ import annotations

import struct
from typing import Tuple

from .errors import StructuralError


def _u8(b, off: int) -> int:
    return b[off]


def _u16(b, off: int) -> int:
    return struct.unpack_from("<H", b, off)[0]


def _u32(b, off: int) -> int:
    return struct.unpack_from("<I", b, off)[0]


class BitReader:
    """
    Sequential field reader over a little-endian byte window.

    Fields come out LSB-first in the order they are requested. Reserved ranges
    are consumed with reserved() so the bit count stays exact. Nothing is ever
    read past the end of the window: a short window raises StructuralError
    carrying the capability name.
    """

    def __init__(self, window, name: str, size: int = 0):
        self._window = memoryview(window)
        self.name = name
        self._pos = 0
        self.require(size)

    def __len__(self) -> int:
        return len(self._window)

    def require(self, size: int) -> None:
        if len(self._window) < size:
            raise StructuralError(self.name, size)

    @property
    def position(self) -> int:
        return self._pos

    @property
    def consumed(self) -> int:
        return (self._pos + 7) // 8

    @property
    def remaining(self) -> int:
        return max(len(self._window) - self.consumed, 0)

    def take(self, bits: int) -> int:
        if bits < 0:
            raise ValueError("negative field width")
        end = self._pos + bits
        if end > len(self._window) * 8:
            raise StructuralError(self.name, (end + 7) // 8)
        first = self._pos // 8
        last = (end + 7) // 8
        chunk = int.from_bytes(self._window[first:last], "little")
        value = (chunk >> (self._pos % 8)) & ((1 << bits) - 1)
        self._pos = end
        return value

    def flag(self) -> bool:
        return bool(self.take(1))

    def reserved(self, bits: int) -> None:
        self.take(bits)

    def fields(self, *widths: int) -> Tuple[int, ...]:
        return tuple(self.take(w) for w in widths)

    def u8(self) -> int:
        return self.take(8)

    def u16(self) -> int:
        return self.take(16)

    def u32(self) -> int:
        return self.take(32)

    def u64(self) -> int:
        return self.take(64)

    def skip(self, nbytes: int) -> None:
        self.take(nbytes * 8)

    def rest(self) -> memoryview:
        if self._pos % 8:
            raise ValueError(f"{self.name}: reader is not byte aligned")
        return self._window[self._pos // 8:]
