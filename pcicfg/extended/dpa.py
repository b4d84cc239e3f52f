from __future__ import annotations

from dataclasses import dataclass

from ..arrays import PackedArray, take_array
from ..bits import BitReader
from ..ids import PciExtCapID
from .registry import EXTENDED_CAPABILITIES

TRANSITION_LATENCY_UNIT_MS = {0: 1, 1: 10, 2: 100}
POWER_ALLOCATION_SCALE = {0: 10.0, 1: 1.0, 2: 0.1, 3: 0.01}


@dataclass(frozen=True)
class DynamicPowerAllocation:
    substate_max: int
    transition_latency_unit: int
    power_allocation_scale: int
    transition_latency_value_0: int
    transition_latency_value_1: int
    latency_indicator: int  # bit n selects the latency value for substate n
    substate_status: int
    substate_control_enabled: bool
    substate_control: int
    # Power in units of power_allocation_scale watts, substate_max + 1 entries
    allocation: PackedArray

    @property
    def transition_latency_unit_ms(self) -> int:
        return TRANSITION_LATENCY_UNIT_MS.get(self.transition_latency_unit, 0)

    def substate_latency_value(self, substate: int) -> int:
        if (self.latency_indicator >> substate) & 1:
            return self.transition_latency_value_1
        return self.transition_latency_value_0


@EXTENDED_CAPABILITIES.register(PciExtCapID.DPA, size=12)
def decode_dpa(r: BitReader) -> DynamicPowerAllocation:
    substate_max = r.take(5)
    r.reserved(3)
    tlunit = r.take(2)
    r.reserved(2)
    pas = r.take(2)
    r.reserved(2)
    xlcy0 = r.u8()
    xlcy1 = r.u8()

    latency_indicator = r.u32()

    substate_status = r.take(5)
    r.reserved(3)
    control_enabled = r.flag()
    r.reserved(7)

    substate_control = r.take(5)
    r.reserved(11)

    allocation = take_array(r, substate_max + 1, 8, r.name)
    return DynamicPowerAllocation(
        substate_max=substate_max,
        transition_latency_unit=tlunit,
        power_allocation_scale=pas,
        transition_latency_value_0=xlcy0,
        transition_latency_value_1=xlcy1,
        latency_indicator=latency_indicator,
        substate_status=substate_status,
        substate_control_enabled=control_enabled,
        substate_control=substate_control,
        allocation=allocation,
    )
