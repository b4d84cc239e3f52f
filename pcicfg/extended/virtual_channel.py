"""
Virtual Channel (IDs 0x0002 and 0x0009) and Multi-Function Virtual
Channel (0x0008).

The three share the port registers and the per-VC resource layout. They
are decoded from the start of the capability (header included) because
the arbitration table offsets count 16-byte units from there.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..arrays import PackedArray, array_at
from ..bits import BitReader
from ..errors import FieldValueError
from ..ids import PciExtCapID
from .registry import EXTENDED_CAPABILITIES

DQWORD = 0x10
PORT_VC_REGISTERS_SIZE = 0x10
VC_RESOURCE_SIZE = 0x0C
VAT_ENTRY_BITS = 4

# Phases per arbitration select value
VC_ARBITRATION_TABLE_LENGTH = {1: 32, 2: 64, 3: 128}
ARBITRATION_TABLE_LENGTH = {1: 32, 2: 64, 3: 128, 4: 128, 5: 256}


@dataclass(frozen=True)
class PortVcCapability:
    extended_vc_count: int
    low_priority_extended_vc_count: int
    reference_clock: int
    arbitration_table_entry_bits: int
    vc_arbitration_capability: int
    vc_arbitration_table_offset: int


@dataclass(frozen=True)
class VcResource:
    """
    One VC resource. The arbitration fields describe port arbitration for
    a Virtual Channel capability and function arbitration for MFVC.
    """

    arbitration_capability: int
    advanced_packet_switching: bool
    reject_snoop_transactions: bool
    maximum_time_slots: int
    arbitration_table_offset: int
    tc_vc_map: int
    load_arbitration_table: bool
    arbitration_select: int
    vc_id: int
    vc_enable: bool
    arbitration_table_status: bool
    vc_negotiation_pending: bool
    arbitration_table: Optional[PackedArray] = None


@dataclass(frozen=True)
class VirtualChannel:
    capability: PortVcCapability
    load_vc_arbitration_table: bool
    vc_arbitration_select: int
    vc_arbitration_table_status: bool
    resources: Tuple[VcResource, ...]
    vc_arbitration_table: Optional[PackedArray] = None


@dataclass(frozen=True)
class MultiFunctionVirtualChannel(VirtualChannel):
    pass


def _table_offset(name: str, field: str, value: int) -> Optional[int]:
    # 1 would place the table on top of the port registers
    if value == 0:
        return None
    if value == 1:
        raise FieldValueError(name, field, value)
    return value * DQWORD


def _resource(r: BitReader, window, entry_bits: int, switching: bool) -> VcResource:
    arb_cap = r.take(6)
    r.reserved(2 + 6)
    if switching:
        aps, reject_snoop = r.flag(), r.flag()
    else:
        r.reserved(2)
        aps = reject_snoop = False
    max_time_slots = r.take(7) + 1
    r.reserved(1)
    table_offset = r.u8()

    tc_vc_map = r.u8()
    r.reserved(8)
    load_table = r.flag()
    select = r.take(3)
    r.reserved(4)
    vc_id = r.take(3)
    r.reserved(4)
    enable = r.flag()

    r.reserved(16)
    table_status = r.flag()
    negotiation_pending = r.flag()
    r.reserved(14)

    table = None
    start = _table_offset(r.name, "arbitration table offset", table_offset)
    if start is not None:
        count = ARBITRATION_TABLE_LENGTH.get(select, 0)
        table = array_at(window, start, count, entry_bits, r.name)
    return VcResource(
        arbitration_capability=arb_cap,
        advanced_packet_switching=aps,
        reject_snoop_transactions=reject_snoop,
        maximum_time_slots=max_time_slots,
        arbitration_table_offset=table_offset,
        tc_vc_map=tc_vc_map,
        load_arbitration_table=load_table,
        arbitration_select=select,
        vc_id=vc_id,
        vc_enable=enable,
        arbitration_table_status=table_status,
        vc_negotiation_pending=negotiation_pending,
        arbitration_table=table,
    )


def _decode(r: BitReader, cls, switching: bool):
    window = r.rest()
    r.skip(4)

    extended_vc_count = r.take(3)
    r.reserved(1)
    lpevc = r.take(3)
    r.reserved(1)
    reference_clock = r.take(2)
    entry_bits = 1 << r.take(2)
    r.reserved(20)

    vc_arb_cap = r.u8()
    r.reserved(16)
    vat_offset = r.u8()

    load_vat = r.flag()
    vc_arb_select = r.take(3)
    r.reserved(12)
    vat_status = r.flag()
    r.reserved(15)

    capability = PortVcCapability(
        extended_vc_count=extended_vc_count,
        low_priority_extended_vc_count=lpevc,
        reference_clock=reference_clock,
        arbitration_table_entry_bits=entry_bits,
        vc_arbitration_capability=vc_arb_cap,
        vc_arbitration_table_offset=vat_offset,
    )

    vat = None
    start = _table_offset(r.name, "VC arbitration table offset", vat_offset)
    if start is not None:
        count = VC_ARBITRATION_TABLE_LENGTH.get(vc_arb_select, 0)
        vat = array_at(window, start, count, VAT_ENTRY_BITS, r.name)

    # VC0 plus the extended VCs
    count = extended_vc_count + 1
    r.require(PORT_VC_REGISTERS_SIZE + count * VC_RESOURCE_SIZE)
    resources = tuple(_resource(r, window, entry_bits, switching) for _ in range(count))
    return cls(
        capability=capability,
        load_vc_arbitration_table=load_vat,
        vc_arbitration_select=vc_arb_select,
        vc_arbitration_table_status=vat_status,
        resources=resources,
        vc_arbitration_table=vat,
    )


@EXTENDED_CAPABILITIES.register(PciExtCapID.VC, size=PORT_VC_REGISTERS_SIZE, with_header=True)
@EXTENDED_CAPABILITIES.register(PciExtCapID.VC9, size=PORT_VC_REGISTERS_SIZE, with_header=True)
def decode_vc(r: BitReader) -> VirtualChannel:
    return _decode(r, VirtualChannel, switching=True)


@EXTENDED_CAPABILITIES.register(PciExtCapID.MFVC, size=PORT_VC_REGISTERS_SIZE, with_header=True)
def decode_mfvc(r: BitReader) -> MultiFunctionVirtualChannel:
    return _decode(r, MultiFunctionVirtualChannel, switching=False)
