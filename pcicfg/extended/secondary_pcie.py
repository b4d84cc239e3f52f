"""
Secondary PCI Express.

The Lane Equalization Control registers follow the two fixed registers,
one 16-bit entry per lane. The lane count is the link width from the PCI
Express capability, which this capability does not carry, so the entries
are decoded on request from the bytes kept in `lane_data`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..arrays import take_records
from ..bits import BitReader
from ..ids import PciExtCapID
from .registry import EXTENDED_CAPABILITIES

LANE_ENTRY_SIZE = 2
SKP_OS_SPEEDS = (2.5, 5.0, 8.0, 16.0, 32.0, 64.0)  # GT/s, one bit each


@dataclass(frozen=True)
class LaneEqualizationControl:
    downstream_transmitter_preset: int
    downstream_receiver_preset_hint: int
    upstream_transmitter_preset: int
    upstream_receiver_preset_hint: int


def _lane(r: BitReader) -> LaneEqualizationControl:
    ds_preset = r.take(4)
    ds_hint = r.take(3)
    r.reserved(1)
    us_preset = r.take(4)
    us_hint = r.take(3)
    r.reserved(1)
    return LaneEqualizationControl(ds_preset, ds_hint, us_preset, us_hint)


@dataclass(frozen=True)
class SecondaryPciExpress:
    perform_equalization: bool
    link_equalization_request_interrupt_enable: bool
    lower_skp_os_generation_vector: int
    lane_error_status: int
    lane_data: memoryview

    @property
    def lower_skp_os_generation_speeds(self) -> Tuple[float, ...]:
        return tuple(s for i, s in enumerate(SKP_OS_SPEEDS) if self.lower_skp_os_generation_vector & (1 << i))

    def lanes_with_errors(self) -> Tuple[int, ...]:
        return tuple(i for i in range(32) if self.lane_error_status & (1 << i))

    def lane_equalization(self, link_width: int) -> Tuple[LaneEqualizationControl, ...]:
        """Decode one Lane Equalization Control entry per lane of `link_width`."""
        name = "Secondary PCI Express"
        r = BitReader(self.lane_data, name)
        return take_records(r, link_width, LANE_ENTRY_SIZE, _lane, name)


@EXTENDED_CAPABILITIES.register(PciExtCapID.SECPCI, size=8)
def decode_secondary_pcie(r: BitReader) -> SecondaryPciExpress:
    perform_eq = r.flag()
    eq_interrupt = r.flag()
    r.reserved(7)
    skp_vector = r.take(7)
    r.reserved(16)
    lane_errors = r.u32()
    return SecondaryPciExpress(
        perform_equalization=perform_eq,
        link_equalization_request_interrupt_enable=eq_interrupt,
        lower_skp_os_generation_vector=skp_vector,
        lane_error_status=lane_errors,
        lane_data=r.rest(),
    )
