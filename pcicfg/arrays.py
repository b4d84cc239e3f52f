from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Tuple, TypeVar

from .bits import BitReader
from .errors import ArrayLengthError

T = TypeVar("T")


def packed_entries(window, count: int, bits: int) -> Iterator[int]:
    """
    Yield `count` little-endian entries of `bits` width from `window`.

    Sub-byte entries (1, 2 or 4 bits) are peeled off the current byte LSB
    first; the next byte is only pulled once the shift wraps.
    """
    if bits % 8 == 0:
        step = bits // 8
        for i in range(count):
            yield int.from_bytes(window[i * step:(i + 1) * step], "little")
        return
    mask = (1 << bits) - 1
    data = iter(window)
    byte = 0
    shift = 0
    for _ in range(count):
        if shift == 0:
            byte = next(data)
        yield (byte >> shift) & mask
        shift = (shift + bits) % 8


@dataclass(frozen=True)
class PackedArray:
    window: memoryview
    count: int
    bits: int

    def __post_init__(self):
        if self.bits <= 0 or (self.bits < 8 and 8 % self.bits) or (self.bits > 8 and self.bits % 8):
            raise ValueError(f"unsupported entry width {self.bits}")
        expected = array_bytes(self.count, self.bits)
        if len(self.window) < expected:
            raise ValueError(
                f"{self.count} entries of {self.bits} bits need {expected} bytes, window has {len(self.window)}"
            )

    def __iter__(self) -> Iterator[int]:
        return packed_entries(self.window, self.count, self.bits)

    def __len__(self) -> int:
        return self.count


def array_bytes(count: int, bits: int, unit: int = 8) -> int:
    units = (count * bits + unit - 1) // unit
    return units * unit // 8


def take_array(reader: BitReader, count: int, bits: int, name: str, unit: int = 8) -> PackedArray:
    """Consume a declared-length array from `reader`, checking it fits first."""
    expected = array_bytes(count, bits, unit)
    found = reader.remaining
    if expected > found:
        raise ArrayLengthError(name, expected, found)
    window = reader.rest()[:expected]
    reader.skip(expected)
    return PackedArray(window, count, bits)


def take_records(
    reader: BitReader,
    count: int,
    size: int,
    decode: Callable[[BitReader], T],
    name: str,
) -> Tuple[T, ...]:
    expected = count * size
    found = reader.remaining
    if expected > found:
        raise ArrayLengthError(name, expected, found)
    return tuple(decode(reader) for _ in range(count))


def array_at(window, start: int, count: int, bits: int, name: str) -> PackedArray:
    """Array placed by an offset field, relative to the start of `window`."""
    expected = array_bytes(count, bits)
    found = max(len(window) - start, 0)
    if expected > found:
        raise ArrayLengthError(name, expected, found)
    return PackedArray(window[start:start + expected], count, bits)
