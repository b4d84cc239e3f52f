"""Fixed-layout extended capabilities."""

from __future__ import annotations

from dataclasses import dataclass

from ..bits import BitReader
from ..ids import PciExtCapID
from .registry import EXTENDED_CAPABILITIES


@dataclass(frozen=True)
class DeviceSerialNumber:
    lower_dword: int
    upper_dword: int

    @property
    def serial(self) -> int:
        return (self.upper_dword << 32) | self.lower_dword

    def __str__(self) -> str:
        return "-".join(f"{b:02x}" for b in self.serial.to_bytes(8, "big"))


@EXTENDED_CAPABILITIES.register(PciExtCapID.DSN, size=8)
def decode_dsn(r: BitReader) -> DeviceSerialNumber:
    return DeviceSerialNumber(r.u32(), r.u32())


@dataclass(frozen=True)
class RootComplexRegisterBlockHeader:
    vendor_id: int
    device_id: int
    crs_software_visibility: bool
    crs_software_visibility_enable: bool


@EXTENDED_CAPABILITIES.register(PciExtCapID.RCRB, size=0x14, with_header=True)
def decode_rcrb(r: BitReader) -> RootComplexRegisterBlockHeader:
    r.skip(4)
    vendor_id = r.u16()
    device_id = r.u16()
    crs = r.flag()
    r.reserved(31)
    crs_enable = r.flag()
    r.reserved(31)
    r.skip(4)
    return RootComplexRegisterBlockHeader(vendor_id, device_id, crs, crs_enable)


@dataclass(frozen=True)
class ConfigurationAccessCorrelation:
    device_correlation: int


@EXTENDED_CAPABILITIES.register(PciExtCapID.CAC, size=8, with_header=True)
def decode_cac(r: BitReader) -> ConfigurationAccessCorrelation:
    r.skip(4)
    return ConfigurationAccessCorrelation(r.u32())


@dataclass(frozen=True)
class AlternativeRoutingId:
    mfvc_function_groups_capability: bool
    acs_function_groups_capability: bool
    next_function_number: int
    mfvc_function_groups_enable: bool
    acs_function_groups_enable: bool
    function_group: int


@EXTENDED_CAPABILITIES.register(PciExtCapID.ARI, size=4)
def decode_ari(r: BitReader) -> AlternativeRoutingId:
    mfvc_cap = r.flag()
    acs_cap = r.flag()
    r.reserved(6)
    next_fn = r.u8()
    mfvc_en = r.flag()
    acs_en = r.flag()
    r.reserved(2)
    group = r.take(3)
    r.reserved(9)
    return AlternativeRoutingId(mfvc_cap, acs_cap, next_fn, mfvc_en, acs_en, group)


@dataclass(frozen=True)
class AddressTranslationServices:
    invalidate_queue_depth: int  # 0 means 32
    page_aligned_request: bool
    global_invalidate_supported: bool
    relaxed_ordering: bool
    smallest_translation_unit: int
    enable: bool


@EXTENDED_CAPABILITIES.register(PciExtCapID.ATS, size=4)
def decode_ats(r: BitReader) -> AddressTranslationServices:
    depth = r.take(5)
    par, gis, ro = r.flag(), r.flag(), r.flag()
    r.reserved(8)
    stu = r.take(5)
    r.reserved(10)
    enable = r.flag()
    return AddressTranslationServices(depth or 32, par, gis, ro, stu, enable)


@dataclass(frozen=True)
class PageRequestInterface:
    enable: bool
    reset: bool
    response_failure: bool
    unexpected_page_request_group_index: bool
    stopped: bool
    prg_response_pasid_required: bool
    outstanding_page_request_capacity: int
    outstanding_page_request_allocation: int


@EXTENDED_CAPABILITIES.register(PciExtCapID.PRI, size=12)
def decode_pri(r: BitReader) -> PageRequestInterface:
    enable = r.flag()
    reset = r.flag()
    r.reserved(14)
    failure = r.flag()
    uprgi = r.flag()
    r.reserved(6)
    stopped = r.flag()
    r.reserved(6)
    pasid_required = r.flag()
    return PageRequestInterface(enable, reset, failure, uprgi, stopped, pasid_required, r.u32(), r.u32())


@dataclass(frozen=True)
class Latency:
    value: int
    scale: int

    @property
    def ns(self) -> int:
        return self.value * (1 << (5 * self.scale))


@dataclass(frozen=True)
class LatencyToleranceReporting:
    max_snoop_latency: Latency
    max_no_snoop_latency: Latency


def _latency(r: BitReader) -> Latency:
    value = r.take(10)
    scale = r.take(3)
    r.reserved(3)
    return Latency(value, scale)


@EXTENDED_CAPABILITIES.register(PciExtCapID.LTR, size=4)
def decode_ltr(r: BitReader) -> LatencyToleranceReporting:
    return LatencyToleranceReporting(_latency(r), _latency(r))


@dataclass(frozen=True)
class ProcessAddressSpaceId:
    execute_permission_supported: bool
    privileged_mode_supported: bool
    max_pasid_width: int
    enable: bool
    execute_permission_enable: bool
    privileged_mode_enable: bool


@EXTENDED_CAPABILITIES.register(PciExtCapID.PASID, size=4)
def decode_pasid(r: BitReader) -> ProcessAddressSpaceId:
    r.reserved(1)
    exec_supported = r.flag()
    priv_supported = r.flag()
    r.reserved(5)
    width = r.take(5)
    r.reserved(3)
    enable, exec_enable, priv_enable = r.flag(), r.flag(), r.flag()
    r.reserved(13)
    return ProcessAddressSpaceId(exec_supported, priv_supported, width, enable, exec_enable, priv_enable)


@dataclass(frozen=True)
class PrecisionTimeMeasurement:
    requester_capable: bool
    responder_capable: bool
    root_capable: bool
    local_clock_granularity: int  # ns
    enable: bool
    root_select: bool
    effective_granularity: int


@EXTENDED_CAPABILITIES.register(PciExtCapID.PTM, size=8)
def decode_ptm(r: BitReader) -> PrecisionTimeMeasurement:
    requester, responder, root = r.flag(), r.flag(), r.flag()
    r.reserved(5)
    granularity = r.u8()
    r.reserved(16)
    enable, root_select = r.flag(), r.flag()
    r.reserved(6)
    effective = r.u8()
    r.reserved(16)
    return PrecisionTimeMeasurement(requester, responder, root, granularity, enable, root_select, effective)
