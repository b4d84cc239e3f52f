from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..bits import BitReader
from ..ids import PciExtCapID
from .registry import EXTENDED_CAPABILITIES

DPC_SIZE = 0x0C - 0x04
# RP PIO Status through Header Log
RP_EXTENSIONS_SIZE = 0x30 - 0x04
HEADER_LOG_DWORDS = 4
MAX_TLP_PREFIX_DWORDS = 4


@dataclass(frozen=True)
class DpcCapability:
    interrupt_message_number: int
    rp_extensions: bool
    poisoned_tlp_egress_blocking_supported: bool
    software_triggering_supported: bool
    rp_pio_log_size: int  # DWORDs
    dl_active_err_cor_signaling_supported: bool


@dataclass(frozen=True)
class DpcControl:
    trigger_enable: int
    completion_control: bool
    interrupt_enable: bool
    err_cor_enable: bool
    poisoned_tlp_egress_blocking_enable: bool
    software_trigger: bool
    dl_active_err_cor_enable: bool
    sig_sfw_enable: bool


@dataclass(frozen=True)
class DpcStatus:
    trigger_status: bool
    trigger_reason: int
    interrupt_status: bool
    rp_busy: bool
    trigger_reason_extension: int
    rp_pio_first_error_pointer: int


@dataclass(frozen=True)
class RpPio:
    status: int
    mask: int
    severity: int
    syserror: int
    exception: int
    header_log: Tuple[int, ...]
    impspec_log: Optional[int] = None
    tlp_prefix_log: Tuple[int, ...] = ()


@dataclass(frozen=True)
class DownstreamPortContainment:
    capability: DpcCapability
    control: DpcControl
    status: DpcStatus
    error_source_id: int
    rp_pio: Optional[RpPio] = None


def _dwords(r: BitReader, count: int) -> Tuple[int, ...]:
    return tuple(r.u32() for _ in range(count))


@EXTENDED_CAPABILITIES.register(PciExtCapID.DPC, size=DPC_SIZE)
def decode_dpc(r: BitReader) -> DownstreamPortContainment:
    int_msg = r.take(5)
    rp_extensions = r.flag()
    ptlp_supported = r.flag()
    sw_trigger_supported = r.flag()
    log_size = r.take(4)
    dl_active_supported = r.flag()
    r.reserved(3)
    capability = DpcCapability(
        int_msg, rp_extensions, ptlp_supported, sw_trigger_supported, log_size, dl_active_supported
    )

    trigger_enable = r.take(2)
    control = DpcControl(trigger_enable, *(r.flag() for _ in range(7)))
    r.reserved(7)

    trigger_status = r.flag()
    reason = r.take(2)
    int_status = r.flag()
    rp_busy = r.flag()
    reason_ext = r.take(2)
    r.reserved(1)
    first_error = r.take(5)
    r.reserved(3)
    status = DpcStatus(trigger_status, reason, int_status, rp_busy, reason_ext, first_error)

    error_source_id = r.u16()

    rp_pio = None
    if rp_extensions:
        prefix_dwords = min(max(log_size - 5, 0), MAX_TLP_PREFIX_DWORDS)
        size = RP_EXTENSIONS_SIZE
        if log_size >= 5:
            size += 4 + prefix_dwords * 4
        r.require(size)
        pio_status, mask, severity, syserror, exception = _dwords(r, 5)
        header_log = _dwords(r, HEADER_LOG_DWORDS)
        impspec = r.u32() if log_size >= 5 else None
        prefix = _dwords(r, prefix_dwords)
        rp_pio = RpPio(pio_status, mask, severity, syserror, exception, header_log, impspec, prefix)
    return DownstreamPortContainment(capability, control, status, error_source_id, rp_pio)
