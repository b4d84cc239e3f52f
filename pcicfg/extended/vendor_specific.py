from __future__ import annotations

from dataclasses import dataclass

from ..bits import BitReader
from ..errors import ArrayLengthError
from ..ids import PciExtCapID
from .registry import EXTENDED_CAPABILITIES

# Extended capability header plus vendor-specific header
PCI_EVNDR_HEADERS = 8


@dataclass(frozen=True)
class VendorSpecificExtended:
    vid: int
    rev: int
    length: int  # whole capability, both headers included
    registers: memoryview


@EXTENDED_CAPABILITIES.register(PciExtCapID.VNDR, size=4)
def decode_vsec(r: BitReader) -> VendorSpecificExtended:
    vid = r.u16()
    rev = r.take(4)
    length = r.take(12)
    wanted = max(length - PCI_EVNDR_HEADERS, 0)
    if wanted > r.remaining:
        raise ArrayLengthError(r.name, wanted, r.remaining)
    registers = r.rest()[:wanted]
    r.skip(wanted)
    return VendorSpecificExtended(vid, rev, length, registers)
