from __future__ import annotations

import enum
from dataclasses import dataclass

from ..bits import BitReader
from ..ids import PciCapID
from .registry import CAPABILITIES

PM_AUX_CURRENT = (0, 55, 100, 160, 220, 270, 320, 375)  # mA


class PmeSupport(enum.Flag):
    D0 = 1 << 0
    D1 = 1 << 1
    D2 = 1 << 2
    D3_HOT = 1 << 3
    D3_COLD = 1 << 4


class PowerState(enum.IntEnum):
    D0 = 0
    D1 = 1
    D2 = 2
    D3_HOT = 3


@dataclass(frozen=True)
class PMStatus:
    power_state: PowerState
    no_soft_reset: bool
    pme_enable: bool
    data_select: int
    data_scale: int
    pme_status: bool


@dataclass(frozen=True)
class PowerManagement:
    version: int
    pme_clock: bool
    immediate_readiness_on_return_to_d0: bool
    dsi: bool
    aux_current: int  # mA
    d1_support: bool
    d2_support: bool
    pme_support: PmeSupport
    status: PMStatus
    b2_b3: bool
    bpcc_enabled: bool
    data: int


@CAPABILITIES.register(PciCapID.PM, size=6)
def decode_pm(r: BitReader) -> PowerManagement:
    version = r.take(3)
    pme_clock = r.flag()
    immediate_readiness = r.flag()
    dsi = r.flag()
    aux_current = r.take(3)
    d1 = r.flag()
    d2 = r.flag()
    pme_support = PmeSupport(r.take(5))

    power_state = PowerState(r.take(2))
    r.reserved(1)
    no_soft_reset = r.flag()
    r.reserved(4)
    pme_enable = r.flag()
    data_select = r.take(4)
    data_scale = r.take(2)
    pme_status = r.flag()

    # PMCSR_BSE
    r.reserved(6)
    b2_b3 = r.flag()
    bpcc_enabled = r.flag()

    data = r.u8()
    return PowerManagement(
        version=version,
        pme_clock=pme_clock,
        immediate_readiness_on_return_to_d0=immediate_readiness,
        dsi=dsi,
        aux_current=PM_AUX_CURRENT[aux_current],
        d1_support=d1,
        d2_support=d2,
        pme_support=pme_support,
        status=PMStatus(
            power_state=power_state,
            no_soft_reset=no_soft_reset,
            pme_enable=pme_enable,
            data_select=data_select,
            data_scale=data_scale,
            pme_status=pme_status,
        ),
        b2_b3=b2_b3,
        bpcc_enabled=bpcc_enabled,
        data=data,
    )
