from __future__ import annotations

from dataclasses import dataclass

from ..bits import BitReader
from ..ids import PciCapID
from .registry import CAPABILITIES


@dataclass(frozen=True)
class MsixLocation:
    bir: int
    offset: int  # QWORD aligned, low 3 bits hold the BIR


@dataclass(frozen=True)
class MsiX:
    table_size: int  # number of entries, the register holds N-1
    function_mask: bool
    enable: bool
    table: MsixLocation
    pba: MsixLocation


def _location(r: BitReader) -> MsixLocation:
    bir = r.take(3)
    offset = r.take(29) << 3
    return MsixLocation(bir, offset)


@CAPABILITIES.register(PciCapID.MSIX, size=10)
def decode_msix(r: BitReader) -> MsiX:
    table_size = r.take(11) + 1
    r.reserved(3)
    function_mask = r.flag()
    enable = r.flag()
    table = _location(r)
    pba = _location(r)
    return MsiX(table_size, function_mask, enable, table, pba)
