"""Small fixed-layout legacy capabilities."""

from __future__ import annotations

from dataclasses import dataclass

from ..bits import BitReader
from ..errors import ArrayLengthError
from ..ids import PciCapID
from .registry import CAPABILITIES


@dataclass(frozen=True)
class VitalProductData:
    address: int
    transfer_completed: bool  # F flag
    data: int


@CAPABILITIES.register(PciCapID.VPD, size=6)
def decode_vpd(r: BitReader) -> VitalProductData:
    address = r.take(15)
    flag = r.flag()
    data = r.u32()
    return VitalProductData(address, flag, data)


@dataclass(frozen=True)
class SlotIdentification:
    expansion_slots_provided: int
    first_in_chassis: bool
    chassis_number: int


@CAPABILITIES.register(PciCapID.SLOT_ID, size=2)
def decode_slot_id(r: BitReader) -> SlotIdentification:
    slots = r.take(5)
    first = r.flag()
    r.reserved(2)
    chassis = r.u8()
    return SlotIdentification(slots, first, chassis)


@dataclass(frozen=True)
class VendorSpecific:
    length: int  # whole capability, id and next bytes included
    data: memoryview


@CAPABILITIES.register(PciCapID.VNDR, size=1)
def decode_vendor_specific(r: BitReader) -> VendorSpecific:
    length = r.u8()
    wanted = max(length - 3, 0)
    if wanted > r.remaining:
        raise ArrayLengthError(r.name, wanted, r.remaining)
    data = r.rest()[:wanted]
    r.skip(wanted)
    return VendorSpecific(length, data)


@dataclass(frozen=True)
class DebugPort:
    offset: int
    bar: int


@CAPABILITIES.register(PciCapID.DBG, size=2)
def decode_debug_port(r: BitReader) -> DebugPort:
    offset = r.take(13)
    bar = r.take(3)
    return DebugPort(offset, bar)


@dataclass(frozen=True)
class BridgeSubsystemVendorId:
    subsystem_vendor_id: int
    subsystem_id: int


@CAPABILITIES.register(PciCapID.SSVID, size=6)
def decode_ssvid(r: BitReader) -> BridgeSubsystemVendorId:
    r.skip(2)
    return BridgeSubsystemVendorId(r.u16(), r.u16())


@dataclass(frozen=True)
class Sata:
    revision_major: int
    revision_minor: int
    bar_location: int
    bar_offset: int  # bytes


@CAPABILITIES.register(PciCapID.SATA, size=6)
def decode_sata(r: BitReader) -> Sata:
    minor = r.take(4)
    major = r.take(4)
    r.reserved(8)
    bar_location = r.take(4)
    bar_offset = r.take(20) * 4
    r.reserved(8)
    return Sata(major, minor, bar_location, bar_offset)


@dataclass(frozen=True)
class AdvancedFeatures:
    length: int
    transactions_pending_capable: bool
    flr_capable: bool
    initiate_flr: bool
    transactions_pending: bool


@CAPABILITIES.register(PciCapID.AF, size=4)
def decode_af(r: BitReader) -> AdvancedFeatures:
    length = r.u8()
    tp_cap = r.flag()
    flr_cap = r.flag()
    r.reserved(6)
    initiate_flr = r.flag()
    r.reserved(7)
    tp = r.flag()
    r.reserved(7)
    return AdvancedFeatures(length, tp_cap, flr_cap, initiate_flr, tp)
