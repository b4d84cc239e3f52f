from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..arrays import take_records
from ..bits import BitReader
from ..ids import PciExtCapID
from .registry import EXTENDED_CAPABILITIES

PMUX_ENTRY_SIZE = 4
PMUX_CHANNELS = 4


@dataclass(frozen=True)
class PmuxLinkSpeeds:
    speed_2_5_gtps: bool
    speed_5_0_gtps: bool
    speed_8_0_gtps: bool
    speed_16_0_gtps: bool


@dataclass(frozen=True)
class PmuxChannelStatus:
    disabled_link_speed: bool
    disabled_link_width: bool
    disabled_link_protocol_specific: bool


@dataclass(frozen=True)
class PmuxProtocol:
    protocol_id: int
    authority_id: int


@dataclass(frozen=True)
class ProtocolMultiplexing:
    protocol_array_size: int
    supported_link_speeds: PmuxLinkSpeeds
    channel_assignment: Tuple[int, ...]  # protocol array index per channel, 0 is PCIe
    channel_status: Tuple[PmuxChannelStatus, ...]
    protocols: Tuple[PmuxProtocol, ...]


def _protocol(r: BitReader) -> PmuxProtocol:
    return PmuxProtocol(r.u16(), r.u16())


@EXTENDED_CAPABILITIES.register(PciExtCapID.PMUX, size=12)
def decode_pmux(r: BitReader) -> ProtocolMultiplexing:
    size = r.take(6)
    r.reserved(2)
    speeds = PmuxLinkSpeeds(*(r.flag() for _ in range(4)))
    r.reserved(4)
    r.reserved(16)

    assignment = []
    for _ in range(PMUX_CHANNELS):
        assignment.append(r.take(6))
        r.reserved(2)

    status = []
    for _ in range(PMUX_CHANNELS):
        status.append(PmuxChannelStatus(r.flag(), r.flag(), r.flag()))
        r.reserved(5)

    protocols = take_records(r, size, PMUX_ENTRY_SIZE, _protocol, r.name)
    return ProtocolMultiplexing(size, speeds, tuple(assignment), tuple(status), protocols)
