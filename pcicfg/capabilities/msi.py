from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..bits import BitReader
from ..ids import PciCapID
from .registry import CAPABILITIES


@dataclass(frozen=True)
class MessageControl:
    enable: bool
    multiple_message_capable: int  # log2 of vectors requested
    multiple_message_enable: int  # log2 of vectors allocated
    addr_64: bool
    per_vector_masking: bool
    extended_message_data_capable: bool
    extended_message_data_enable: bool

    @property
    def qsize(self) -> int:
        return 1 << self.multiple_message_enable

    @property
    def qmask(self) -> int:
        return 1 << self.multiple_message_capable


@dataclass(frozen=True)
class Msi:
    control: MessageControl
    address: int
    data: int
    extended_data: int
    mask: Optional[int] = None
    pending: Optional[int] = None


def _msi_size(control: MessageControl) -> int:
    size = 10
    if control.addr_64:
        size += 4
    if control.per_vector_masking:
        size += 8
    return size


@CAPABILITIES.register(PciCapID.MSI, size=10)
def decode_msi(r: BitReader) -> Msi:
    enable = r.flag()
    mmc = r.take(3)
    mme = r.take(3)
    addr_64 = r.flag()
    pvm = r.flag()
    emd_cap = r.flag()
    emd_en = r.flag()
    r.reserved(5)
    control = MessageControl(
        enable=enable,
        multiple_message_capable=mmc,
        multiple_message_enable=mme,
        addr_64=addr_64,
        per_vector_masking=pvm,
        extended_message_data_capable=emd_cap,
        extended_message_data_enable=emd_en,
    )
    r.require(_msi_size(control))

    address = r.u64() if addr_64 else r.u32()
    data = r.u16()
    extended_data = r.u16()
    mask = pending = None
    if pvm:
        mask = r.u32()
        pending = r.u32()
    return Msi(control, address, data, extended_data, mask, pending)
