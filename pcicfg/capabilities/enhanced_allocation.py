"""
Enhanced Allocation (EA) capability.

Each entry declares its own size in DWORDs, not counting the first DWORD.
The next entry starts at `entry start + 4 + entry_size * 4` whatever the
entry's 64-bit flags made us read; `decoded_size` records the latter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..bits import BitReader
from ..errors import ArrayLengthError, FieldValueError
from ..ids import PciCapID
from .registry import BRIDGE_CAPABILITIES, CAPABILITIES

# Entries carry at least Base and MaxOffset after the first DWORD.
MIN_ENTRY_SIZE = 2


@dataclass(frozen=True)
class EaEntry:
    entry_size: int  # DWORDs after the first one
    bei: int
    primary_properties: int
    secondary_properties: int
    writable: bool
    enable: bool
    base: int
    max_offset: int
    base_64: bool
    max_offset_64: bool
    decoded_size: int  # bytes read while decoding

    @property
    def size(self) -> int:
        return 4 + self.entry_size * 4


@dataclass(frozen=True)
class EnhancedAllocation:
    num_entries: int
    entries: Tuple[EaEntry, ...]
    fixed_secondary_bus: Optional[int] = None
    fixed_subordinate_bus: Optional[int] = None


def _decode_entry(window, name: str) -> EaEntry:
    r = BitReader(window, name, 4)
    entry_size = r.take(3)
    if entry_size < MIN_ENTRY_SIZE:
        raise FieldValueError(name, "entry size", entry_size)
    r.reserved(1)
    bei = r.take(4)
    primary = r.u8()
    secondary = r.u8()
    r.reserved(6)
    writable = r.flag()
    enable = r.flag()

    r.reserved(1)
    base_64 = r.flag()
    base = r.take(30) << 2
    r.reserved(1)
    max_offset_64 = r.flag()
    max_offset = (r.take(30) << 2) | 0x3
    if base_64:
        base |= r.u32() << 32
    if max_offset_64:
        max_offset |= r.u32() << 32
    return EaEntry(
        entry_size=entry_size,
        bei=bei,
        primary_properties=primary,
        secondary_properties=secondary,
        writable=writable,
        enable=enable,
        base=base,
        max_offset=max_offset,
        base_64=base_64,
        max_offset_64=max_offset_64,
        decoded_size=r.consumed,
    )


def _entries(r: BitReader, count: int) -> Tuple[EaEntry, ...]:
    entries = []
    for _ in range(count):
        window = r.rest()
        entry = _decode_entry(window, r.name)
        if entry.size > len(window):
            raise ArrayLengthError(r.name, entry.size, len(window))
        r.skip(entry.size)
        entries.append(entry)
    return tuple(entries)


@CAPABILITIES.register(PciCapID.EA, size=2)
def decode_ea(r: BitReader) -> EnhancedAllocation:
    num_entries = r.take(6)
    r.reserved(2 + 8)
    return EnhancedAllocation(num_entries, _entries(r, num_entries))


@BRIDGE_CAPABILITIES.register(PciCapID.EA, size=6)
def decode_ea_bridge(r: BitReader) -> EnhancedAllocation:
    num_entries = r.take(6)
    r.reserved(2 + 8)
    secondary = r.u8()
    subordinate = r.u8()
    r.reserved(16)
    return EnhancedAllocation(num_entries, _entries(r, num_entries), secondary, subordinate)
