# tests/test_capability_decoders.py
from __future__ import annotations
import struct
import pytest
from pcicfg.capabilities import BRIDGE_CAPABILITIES, CAPABILITIES
from pcicfg.capabilities.pci_express import DeviceType, RegisterGroup, RootRegisters
from pcicfg.capabilities.power_management import PmeSupport, PowerState
from pcicfg.errors import ArrayLengthError, FieldValueError, StructuralError


def test_power_management_fields():
    payload = struct.pack("<HHBB", 0x4A8B, 0xA50B, 0xC0, 0x12)
    pm, consumed = CAPABILITIES.decode(0x01, payload)
    assert consumed == 6
    assert pm.version == 3
    assert pm.pme_clock
    assert not pm.dsi
    assert pm.aux_current == 100
    assert pm.d1_support and not pm.d2_support
    assert pm.pme_support & PmeSupport.D0
    assert pm.pme_support & PmeSupport.D3_HOT
    assert not pm.pme_support & PmeSupport.D1
    assert pm.status.power_state is PowerState.D3_HOT
    assert pm.status.no_soft_reset
    assert pm.status.pme_enable
    assert pm.status.data_select == 2
    assert pm.status.data_scale == 1
    assert pm.status.pme_status
    assert pm.b2_b3 and pm.bpcc_enabled
    assert pm.data == 0x12


def test_power_management_records_compare_equal():
    # PME from D0, D3hot and D3cold
    payload = bytes([0x03, 0xC8, 0x08, 0x00, 0x00, 0x00])
    first, _ = CAPABILITIES.decode(0x01, payload)
    second, _ = CAPABILITIES.decode(0x01, payload)
    assert first.pme_support == PmeSupport.D0 | PmeSupport.D3_HOT | PmeSupport.D3_COLD
    assert first == second


def test_power_management_without_pme_support():
    first, _ = CAPABILITIES.decode(0x01, bytes(6))
    second, _ = CAPABILITIES.decode(0x01, bytes(6))
    assert not first.pme_support
    assert first == second


def test_power_management_too_short():
    with pytest.raises(StructuralError) as ei:
        CAPABILITIES.decode(0x01, bytes(5))
    assert (ei.value.name, ei.value.size) == ("Power Management Interface", 6)


def test_msi_32bit_without_masking():
    payload = struct.pack("<HIHH", 0x0015, 0xFEE00000, 0x4021, 0)
    msi, consumed = CAPABILITIES.decode(0x05, payload + bytes(8))
    assert consumed == 10
    assert msi.control.enable
    assert msi.control.qmask == 4
    assert msi.control.qsize == 2
    assert not msi.control.addr_64
    assert msi.address == 0xFEE00000
    assert msi.data == 0x4021
    assert msi.mask is None and msi.pending is None


def test_msi_64bit_with_masking():
    payload = struct.pack("<HIIHHII", 0x0180, 0xFEE00000, 0x1, 0x0030, 0, 0x3, 0x1)
    msi, consumed = CAPABILITIES.decode(0x05, payload)
    assert consumed == 22
    assert msi.address == 0x1_FEE00000
    assert msi.data == 0x30
    assert (msi.mask, msi.pending) == (0x3, 0x1)


def test_msi_64bit_truncated():
    with pytest.raises(StructuralError) as ei:
        CAPABILITIES.decode(0x05, struct.pack("<H", 0x0080) + bytes(11))
    assert ei.value.size == 14


def test_msix():
    payload = struct.pack("<HII", 0x800F, 0x00002000, 0x00003001)
    msix, _ = CAPABILITIES.decode(0x11, payload)
    assert msix.table_size == 16
    assert msix.enable and not msix.function_mask
    assert (msix.table.bir, msix.table.offset) == (0, 0x2000)
    assert (msix.pba.bir, msix.pba.offset) == (1, 0x3000)


PCIE_V1 = struct.pack("<HIHHIHHIHH", 0x0001, 0, 0, 0, 0, 0, 0, 0, 0, 0)
PCIE_V2 = (
    struct.pack("<HIHHIHHIHH", 0x0042, 0x10000001, 0, 0, 0x07000043, 0, 0x0043, 0x00280000, 0, 0)
    + struct.pack("<HHI", 0, 0, 0)
    + struct.pack("<IHH", 0x12345678, 1, 2)
    + bytes(16)
)


def test_pci_express_version_1_layout():
    exp, consumed = CAPABILITIES.decode(0x10, PCIE_V1)
    assert consumed == 26
    assert exp.version == 1
    assert exp.device_type_enum is DeviceType.ENDPOINT
    assert exp.device_capabilities.max_payload_size_supported == 128
    assert exp.root is None
    assert exp.device2 is None and exp.link2 is None and exp.slot2 is None


def test_pci_express_version_2_appends_register_groups():
    exp, consumed = CAPABILITIES.decode(0x10, PCIE_V2)
    assert consumed == 58
    assert exp.device_type_enum is DeviceType.ROOT_PORT
    assert exp.device_capabilities.max_payload_size_supported == 256
    assert exp.device_capabilities.function_level_reset_capability
    assert exp.link_capabilities.max_link_speed_gts == 8.0
    assert exp.link_capabilities.max_link_width == 4
    assert exp.link_capabilities.port_number == 7
    assert exp.link_status.negotiated_link_width == 4
    assert exp.slot.physical_slot_number == 5
    assert exp.root == RootRegisters(0, 0, 0)
    assert exp.device2 == RegisterGroup(0x12345678, 1, 2)
    assert exp.link2 == RegisterGroup(0, 0, 0)


@pytest.mark.parametrize("device_type", [0x4, 0xA])
def test_pci_express_root_registers_required(device_type):
    caps = struct.pack("<H", 0x0001 | device_type << 4)
    with pytest.raises(StructuralError) as ei:
        CAPABILITIES.decode(0x10, caps + PCIE_V1[2:])
    assert ei.value.size == 34
    exp, consumed = CAPABILITIES.decode(0x10, caps + PCIE_V1[2:] + struct.pack("<HHI", 0x1F, 0x1, 0x10000))
    assert consumed == 34
    assert exp.root == RootRegisters(0x1F, 0x1, 0x10000)


def test_pci_express_version_2_truncated():
    with pytest.raises(StructuralError) as ei:
        CAPABILITIES.decode(0x10, PCIE_V2[:40])
    assert (ei.value.name, ei.value.size) == ("PCI Express", 58)


def _ea_entry(dw0, *dwords):
    return struct.pack("<" + "I" * (1 + len(dwords)), dw0, *dwords)


def test_enhanced_allocation_uses_declared_entry_size():
    payload = (
        bytes([2, 0])
        # entry_size=4, 64-bit base only, one DWORD of slack
        + _ea_entry(0x80000004, 0xFE000002, 0x0000FFFC, 0x00000001, 0xDEADBEEF)
        + _ea_entry(0x00000012, 0x00001000, 0x00000FFC)
    )
    ea, consumed = CAPABILITIES.decode(0x14, payload)
    assert consumed == 2 + 20 + 12
    first, second = ea.entries
    assert first.decoded_size == 16
    assert first.size == 20
    assert first.base_64 and not first.max_offset_64
    assert first.base == 0x1_FE000000
    assert first.max_offset == 0xFFFF
    assert first.enable
    assert second.bei == 1
    assert second.base == 0x1000
    assert second.max_offset == 0xFFF


def test_enhanced_allocation_bridge_header():
    ea, consumed = BRIDGE_CAPABILITIES.decode(0x14, bytes([0, 0, 1, 5, 0, 0]))
    assert consumed == 6
    assert ea.entries == ()
    assert (ea.fixed_secondary_bus, ea.fixed_subordinate_bus) == (1, 5)


def test_enhanced_allocation_bad_entry_size():
    with pytest.raises(FieldValueError):
        CAPABILITIES.decode(0x14, bytes([1, 0]) + _ea_entry(0x00000001, 0, 0))


def test_enhanced_allocation_entry_overruns_window():
    with pytest.raises(ArrayLengthError) as ei:
        CAPABILITIES.decode(0x14, bytes([1, 0]) + _ea_entry(0x00000007, 0, 0))
    assert (ei.value.expected, ei.value.found) == (32, 12)


def test_vendor_specific():
    vs, consumed = CAPABILITIES.decode(0x09, bytes([6]) + b"abcxyz")
    assert vs.length == 6
    assert bytes(vs.data) == b"abc"
    assert consumed == 4


def test_vendor_specific_length_overrun():
    with pytest.raises(ArrayLengthError):
        CAPABILITIES.decode(0x09, bytes([0x20]) + b"abc")


def test_advanced_features():
    af, _ = CAPABILITIES.decode(0x13, bytes([0x06, 0x03, 0x00, 0x01]))
    assert af.length == 6
    assert af.transactions_pending_capable and af.flr_capable
    assert not af.initiate_flr
    assert af.transactions_pending


def test_sata_and_debug_port():
    sata, _ = CAPABILITIES.decode(0x12, bytes([0x10, 0x00]) + struct.pack("<I", 0x0000004F))
    assert (sata.revision_major, sata.revision_minor) == (1, 0)
    assert sata.bar_location == 0xF
    assert sata.bar_offset == 0x10
    dbg, _ = CAPABILITIES.decode(0x0A, struct.pack("<H", 0x2080))
    assert (dbg.offset, dbg.bar) == (0x80, 1)


def test_vpd():
    vpd, _ = CAPABILITIES.decode(0x03, struct.pack("<HI", 0x8010, 0x11223344))
    assert vpd.address == 0x10
    assert vpd.transfer_completed
    assert vpd.data == 0x11223344
