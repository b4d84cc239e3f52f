from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple

from ..bits import BitReader
from ..ids import PciExtCapID
from .registry import EXTENDED_CAPABILITIES

# Registers common to every device type, header excluded
AER_COMMON_SIZE = 0x2C - 0x04
# Root Ports and Root Complex Event Collectors add three more registers
AER_ROOT_SIZE = 0x38 - 0x04
# TLP Prefix Log, present when Advanced Error Capabilities bit 11 is set
AER_FULL_SIZE = 0x48 - 0x04
TLP_PREFIX_LOG_DWORDS = 4


class AERUncorrectableError(enum.Flag):
    TRAIN = 1 << 0
    DLP = 1 << 4
    SDES = 1 << 5
    POISON_TLP = 1 << 12
    FCP = 1 << 13
    COMP_TIME = 1 << 14
    COMP_ABORT = 1 << 15
    UNX_COMP = 1 << 16
    RX_OVER = 1 << 17
    MALF_TLP = 1 << 18
    ECRC = 1 << 19
    UNSUP = 1 << 20
    ACS_VIOL = 1 << 21
    INTERNAL = 1 << 22
    MC_BLOCKED_TLP = 1 << 23
    ATOMICOP_EGRESS_BLOCKED = 1 << 24
    TLP_PREFIX_BLOCKED = 1 << 25
    POISONED_TLP_EGRESS = 1 << 26
    DMWR_REQ_EGRESS_BLOCKED = 1 << 27
    IDE_CHECK = 1 << 28
    MISR_IDE_TLP = 1 << 29
    PCRC_CHECK = 1 << 30
    TLP_XLAT_EGRESS_BLOCKED = 1 << 31

    @classmethod
    def _missing_(cls, value):
        # Allow any integer value, even with unknown bits
        pseudo_member = object.__new__(cls)
        pseudo_member._name_ = f"AERUncorrectableError({value})"
        pseudo_member._value_ = value
        return cls._value2member_map_.setdefault(value, pseudo_member)


class AERCorrectableError(enum.Flag):
    RCVR = 1 << 0
    BAD_TLP = 1 << 6
    BAD_DLLP = 1 << 7
    REP_ROLL = 1 << 8
    REP_TIMER = 1 << 12
    REP_ANFE = 1 << 13
    INTERNAL = 1 << 14
    HDRLOG_OVER = 1 << 15

    @classmethod
    def _missing_(cls, value):
        # Allow any integer value, even with unknown bits
        pseudo_member = object.__new__(cls)
        pseudo_member._name_ = f"AERCorrectableError({value})"
        pseudo_member._value_ = value
        return cls._value2member_map_.setdefault(value, pseudo_member)


class AERCapability(enum.Flag):
    ECRC_GENC = 1 << 5
    ECRC_GENE = 1 << 6
    ECRC_CHKC = 1 << 7
    ECRC_CHKE = 1 << 8
    MULT_HDRC = 1 << 9
    MULT_HDRE = 1 << 10
    TLP_PFX = 1 << 11
    HDR_LOG = 1 << 12

    @classmethod
    def _missing_(cls, value):
        # Allow any integer value, even with unknown bits
        pseudo_member = object.__new__(cls)
        pseudo_member._name_ = f"AERCapability({value})"
        pseudo_member._value_ = value
        return cls._value2member_map_.setdefault(value, pseudo_member)

    @property
    def first_error_pointer(self) -> int:
        return self._value_ & 0x1F


@dataclass(frozen=True)
class ErrorSourceId:
    correctable: int  # ERR_COR requester ID
    uncorrectable: int  # ERR_FATAL/NONFATAL requester ID


@dataclass(frozen=True)
class AdvancedErrorReporting:
    uncor_status_raw: int
    uncor_mask_raw: int
    uncor_severity_raw: int
    cor_status_raw: int
    cor_mask_raw: int
    err_cap_raw: int
    hdr_log: Tuple[int, int, int, int]
    root_error_command: Optional[int] = None
    root_error_status: Optional[int] = None
    error_source_id: Optional[ErrorSourceId] = None
    tlp_prefix_log: Optional[Tuple[int, int, int, int]] = None

    @property
    def uncor_status(self) -> AERUncorrectableError:
        return AERUncorrectableError(self.uncor_status_raw)

    @property
    def uncor_mask(self) -> AERUncorrectableError:
        return AERUncorrectableError(self.uncor_mask_raw)

    @property
    def uncor_severity(self) -> AERUncorrectableError:
        return AERUncorrectableError(self.uncor_severity_raw)

    @property
    def cor_status(self) -> AERCorrectableError:
        return AERCorrectableError(self.cor_status_raw)

    @property
    def cor_mask(self) -> AERCorrectableError:
        return AERCorrectableError(self.cor_mask_raw)

    @property
    def err_cap(self) -> AERCapability:
        return AERCapability(self.err_cap_raw)


@EXTENDED_CAPABILITIES.register(PciExtCapID.AER, size=AER_COMMON_SIZE)
def decode_aer(r: BitReader) -> AdvancedErrorReporting:
    uncor_status = r.u32()
    uncor_mask = r.u32()
    uncor_severity = r.u32()
    cor_status = r.u32()
    cor_mask = r.u32()
    err_cap = r.u32()
    hdr_log = (r.u32(), r.u32(), r.u32(), r.u32())

    command = status = source = None
    if len(r) >= AER_ROOT_SIZE:
        command = r.u32()
        status = r.u32()
        source = ErrorSourceId(r.u16(), r.u16())

    prefix_log = None
    if err_cap & AERCapability.TLP_PFX.value:
        r.require(AER_FULL_SIZE)
        r.skip(AER_ROOT_SIZE - r.consumed)
        prefix_log = tuple(r.u32() for _ in range(TLP_PREFIX_LOG_DWORDS))

    return AdvancedErrorReporting(
        uncor_status_raw=uncor_status,
        uncor_mask_raw=uncor_mask,
        uncor_severity_raw=uncor_severity,
        cor_status_raw=cor_status,
        cor_mask_raw=cor_mask,
        err_cap_raw=err_cap,
        hdr_log=hdr_log,
        root_error_command=command,
        root_error_status=status,
        error_source_id=source,
        tlp_prefix_log=prefix_log,
    )
