# tests/test_capabilities.py
from __future__ import annotations
import itertools
import logging
import pytest
from pcicfg import Capabilities, ConfigurationSpace, Marker, Reserved
from pcicfg.capabilities.misc import BridgeSubsystemVendorId, SlotIdentification
from pcicfg.capabilities.power_management import PowerManagement
from pcicfg.ids import PciCapID


def test_single_power_management_record(legacy_space, pm_payload):
    legacy_space.cap(0x40, 0x01, 0x00, pm_payload)
    caps = list(Capabilities(legacy_space.bytes(), 0x40))
    assert len(caps) == 1
    assert caps[0].pointer == 0x40
    assert caps[0].cap_id_enum is PciCapID.PM
    assert caps[0].name == "Power Management Interface"
    assert caps[0].short_name == "Power Management"
    assert isinstance(caps[0].kind, PowerManagement)
    assert caps[0].kind.version == 3
    assert caps[0].kind.status.no_soft_reset


def test_chain_follows_links_not_offsets(legacy_space, pm_payload):
    legacy_space.cap(0x40, 0x01, 0x80, pm_payload)
    legacy_space.cap(0x80, 0x0D, 0x60, [0, 0, 0x86, 0x80, 0x34, 0x12])
    legacy_space.cap(0x60, 0x04, 0x00, [0x21, 0x07])
    caps = list(Capabilities(legacy_space.bytes(), 0x40))
    assert [c.pointer for c in caps] == [0x40, 0x80, 0x60]
    assert caps[1].kind == BridgeSubsystemVendorId(0x8086, 0x1234)
    assert caps[2].kind == SlotIdentification(1, True, 7)


def test_pointer_at_anchor_is_valid(legacy_space):
    legacy_space.cap(0x40, 0x06, 0x00)
    assert [c.kind for c in Capabilities(legacy_space.bytes(), 0x40)] == [Marker(0x06, "CompactPCI Hot Swap")]


def test_pointer_below_anchor_stops_silently(legacy_space):
    legacy_space.cap(0x3F, 0x06, 0x00)
    assert list(Capabilities(legacy_space.bytes(), 0x3F)) == []


def test_next_pointer_below_anchor_ends_walk(legacy_space, pm_payload):
    legacy_space.cap(0x40, 0x01, 0x20, pm_payload)
    assert [c.pointer for c in Capabilities(legacy_space.bytes(), 0x40)] == [0x40]


def test_null_pointer_is_empty(legacy_space):
    assert list(Capabilities(legacy_space.bytes(), 0)) == []


def test_unknown_id_continues(legacy_space, pm_payload):
    legacy_space.cap(0x40, 0xEE, 0x50)
    legacy_space.cap(0x50, 0x01, 0x00, pm_payload)
    caps = list(Capabilities(legacy_space.bytes(), 0x40))
    assert caps[0].kind == Reserved(0xEE)
    assert caps[0].cap_id_enum is None
    assert caps[0].name == "Unknown 0xee"
    assert caps[0].short_name == "Unknown 0xee"
    assert isinstance(caps[1].kind, PowerManagement)


def test_malformed_record_truncates_quietly(legacy_space, pm_payload, caplog):
    legacy_space.cap(0x40, 0x01, 0xF0, pm_payload)
    # MSI, 64-bit with per-vector masking needs 22 bytes; only 14 remain
    legacy_space.cap(0xF0, 0x05, 0x60, [0x80, 0x01])
    legacy_space.cap(0x60, 0x01, 0x00, pm_payload)
    with caplog.at_level(logging.DEBUG, logger="pcicfg"):
        caps = list(Capabilities(legacy_space.bytes(), 0x40))
    assert [c.pointer for c in caps] == [0x40]
    assert "Message Signaled Interrupts" in caplog.text


def test_record_at_end_of_region(legacy_space):
    legacy_space.cap(0xFE, 0x06, 0x00)
    assert [c.pointer for c in Capabilities(legacy_space.bytes(), 0xFE)] == [0xFE]


def test_header_past_end_of_data():
    assert list(Capabilities(bytes(0x50), 0x4F)) == []


def test_self_loop_is_bounded(legacy_space, pm_payload, caplog):
    legacy_space.cap(0x40, 0x01, 0x40, pm_payload)
    with caplog.at_level(logging.WARNING, logger="pcicfg"):
        caps = list(Capabilities(legacy_space.bytes(), 0x40, limit=5))
    assert len(caps) == 5
    assert "exceeds 5 entries" in caplog.text


def test_default_bound_is_region_size(legacy_space, pm_payload):
    legacy_space.cap(0x40, 0x01, 0x40, pm_payload)
    assert len(list(Capabilities(legacy_space.bytes(), 0x40))) == 0xC0 // 2


def test_bound_from_environment(monkeypatch, legacy_space, pm_payload):
    monkeypatch.setenv("PCICFG_MAX_CAPS", "3")
    legacy_space.cap(0x40, 0x01, 0x40, pm_payload)
    assert len(list(Capabilities(legacy_space.bytes(), 0x40))) == 3


def test_zero_bound_walks_forever(legacy_space, pm_payload):
    legacy_space.cap(0x40, 0x01, 0x40, pm_payload)
    walk = Capabilities(legacy_space.bytes(), 0x40, limit=0)
    assert len(list(itertools.islice(walk, 500))) == 500


def test_walk_is_restartable(legacy_space, pm_payload):
    legacy_space.cap(0x40, 0x01, 0x50, pm_payload)
    legacy_space.cap(0x50, 0x06, 0x00)
    walk = Capabilities(legacy_space.bytes(), 0x40)
    assert list(walk) == list(walk)


def test_configuration_space_entry_point(legacy_space, pm_payload):
    legacy_space.header(0x40)
    legacy_space.cap(0x40, 0x01, 0x00, pm_payload)
    cfg = ConfigurationSpace.from_bytes(legacy_space.bytes())
    assert cfg.has_capabilities
    assert cfg.capabilities_pointer == 0x40
    assert [c.cap_id for c in cfg.capabilities()] == [0x01]
    assert list(cfg.extended_capabilities()) == []


def test_configuration_space_without_capability_list(legacy_space, pm_payload):
    legacy_space.cap(0x40, 0x01, 0x00, pm_payload)
    legacy_space.put(0x34, [0x40])
    cfg = ConfigurationSpace.from_bytes(legacy_space.bytes())
    assert not cfg.has_capabilities
    assert cfg.capabilities_pointer is None
    assert list(cfg.capabilities()) == []


@pytest.mark.parametrize("header_type, pointer_offset", [(0x00, 0x34), (0x81, 0x34), (0x02, 0x14)])
def test_capabilities_pointer_by_header_type(legacy_space, header_type, pointer_offset):
    legacy_space.put(0x06, [0x10, 0x00])
    legacy_space.put(0x0E, [header_type])
    legacy_space.put(pointer_offset, [0x48])
    cfg = ConfigurationSpace.from_bytes(legacy_space.bytes())
    assert cfg.header_type == header_type & 0x7F
    assert cfg.multi_function == bool(header_type & 0x80)
    assert cfg.capabilities_pointer == 0x48
