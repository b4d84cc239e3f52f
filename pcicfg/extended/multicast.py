from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..bits import BitReader
from ..ids import PciExtCapID
from .registry import EXTENDED_CAPABILITIES

# Header through MC_Block_Untranslated; MC_Overlay_BAR follows when present
MULTICAST_SIZE = 0x28
OVERLAY_BAR_SIZE = 8


@dataclass(frozen=True)
class McBaseAddress:
    index_position: int
    address: int


@dataclass(frozen=True)
class McOverlayBar:
    overlay_size: int  # log2 bytes, below 6 means overlay disabled
    address: int


@dataclass(frozen=True)
class Multicast:
    max_group: int  # number of groups supported, register holds N-1
    window_size_requested: int
    ecrc_regeneration_supported: bool
    num_group: int
    enable: bool
    base_address: McBaseAddress
    receive: int
    block_all: int
    block_untranslated: int
    overlay_bar: Optional[McOverlayBar] = None


@EXTENDED_CAPABILITIES.register(PciExtCapID.MULTICAST, size=MULTICAST_SIZE, with_header=True)
def decode_multicast(r: BitReader) -> Multicast:
    r.skip(4)
    max_group = r.take(6) + 1
    r.reserved(2)
    window_size = r.take(6)
    r.reserved(1)
    ecrc = r.flag()

    num_group = r.take(6) + 1
    r.reserved(9)
    enable = r.flag()

    index_position = r.take(6)
    r.reserved(6)
    base_address = McBaseAddress(index_position, r.take(52) << 12)

    receive = r.u64()
    block_all = r.u64()
    block_untranslated = r.u64()

    overlay = None
    if r.remaining >= OVERLAY_BAR_SIZE:
        overlay_size = r.take(6)
        overlay = McOverlayBar(overlay_size, r.take(58) << 6)
    return Multicast(
        max_group=max_group,
        window_size_requested=window_size,
        ecrc_regeneration_supported=ecrc,
        num_group=num_group,
        enable=enable,
        base_address=base_address,
        receive=receive,
        block_all=block_all,
        block_untranslated=block_untranslated,
        overlay_bar=overlay,
    )
