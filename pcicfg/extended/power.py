"""Power Budgeting and L1 PM Substates."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from ..bits import BitReader
from ..ids import PciExtCapID, _enum_or_none
from .registry import EXTENDED_CAPABILITIES
from .simple import Latency

DATA_SCALE = (1.0, 0.1, 0.01, 0.001)
# Base power above 0xEF selects a range instead of a value
BASE_POWER_MAX_VALUE = 0xEF


class PmState(enum.IntEnum):
    D0 = 0
    D1 = 1
    D2 = 2
    D3 = 3


class OperationCondition(enum.IntEnum):
    PME_AUX = 0
    AUXILIARY = 1
    IDLE = 2
    SUSTAINED = 3
    SUSTAINED_EMERGENCY_POWER_REDUCTION = 4
    MAXIMUM_EMERGENCY_POWER_REDUCTION = 5
    MAXIMUM = 7


class PowerRail(enum.IntEnum):
    POWER_12V = 0
    POWER_3_3V = 1
    POWER_1_5V_OR_1_8V = 2
    THERMAL = 3


@dataclass(frozen=True)
class PowerBudgeting:
    data_select: int
    base_power: int
    data_scale: int
    pm_sub_state: int
    pm_state: PmState
    operation_condition: int
    power_rail: int
    system_allocated: bool

    @property
    def watts(self) -> Optional[float]:
        if self.base_power > BASE_POWER_MAX_VALUE:
            return None
        return self.base_power * DATA_SCALE[self.data_scale]

    @property
    def operation_condition_enum(self) -> Optional[OperationCondition]:
        return _enum_or_none(OperationCondition, self.operation_condition)

    @property
    def power_rail_enum(self) -> Optional[PowerRail]:
        return _enum_or_none(PowerRail, self.power_rail)


@EXTENDED_CAPABILITIES.register(PciExtCapID.PWR, size=12)
def decode_power_budgeting(r: BitReader) -> PowerBudgeting:
    data_select = r.u8()
    r.reserved(24)
    base_power = r.u8()
    data_scale = r.take(2)
    pm_sub_state = r.take(3)
    pm_state = PmState(r.take(2))
    condition = r.take(3)
    rail = r.take(3)
    r.reserved(11)
    system_allocated = r.flag()
    r.reserved(31)
    return PowerBudgeting(
        data_select=data_select,
        base_power=base_power,
        data_scale=data_scale,
        pm_sub_state=pm_sub_state,
        pm_state=pm_state,
        operation_condition=condition,
        power_rail=rail,
        system_allocated=system_allocated,
    )


T_POWER_ON_SCALE_US = (2, 10, 100)


@dataclass(frozen=True)
class TPowerOn:
    value: int
    scale: int

    @property
    def us(self) -> Optional[int]:
        if self.scale >= len(T_POWER_ON_SCALE_US):
            return None
        return self.value * T_POWER_ON_SCALE_US[self.scale]


def _t_power_on(r: BitReader) -> TPowerOn:
    scale = r.take(2)
    r.reserved(1)
    return TPowerOn(r.take(5), scale)


@dataclass(frozen=True)
class L1PmSubstates:
    pci_pm_l1_2_supported: bool
    pci_pm_l1_1_supported: bool
    aspm_l1_2_supported: bool
    aspm_l1_1_supported: bool
    l1_pm_substates_supported: bool
    port_common_mode_restore_time: int  # us
    port_t_power_on: TPowerOn
    pci_pm_l1_2_enable: bool
    pci_pm_l1_1_enable: bool
    aspm_l1_2_enable: bool
    aspm_l1_1_enable: bool
    common_mode_restore_time: int  # us
    ltr_l1_2_threshold: Latency
    t_power_on: TPowerOn


@EXTENDED_CAPABILITIES.register(PciExtCapID.L1PM, size=12)
def decode_l1pm(r: BitReader) -> L1PmSubstates:
    supported = r.fields(1, 1, 1, 1, 1)
    r.reserved(3)
    port_restore_time = r.u8()
    port_t_power_on = _t_power_on(r)
    r.reserved(8)

    enabled = r.fields(1, 1, 1, 1)
    r.reserved(4)
    restore_time = r.u8()
    threshold_value = r.take(10)
    r.reserved(3)
    threshold = Latency(threshold_value, r.take(3))

    t_power_on = _t_power_on(r)
    r.reserved(24)
    return L1PmSubstates(
        *(bool(b) for b in supported),
        port_restore_time,
        port_t_power_on,
        *(bool(b) for b in enabled),
        restore_time,
        threshold,
        t_power_on,
    )
