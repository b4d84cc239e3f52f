# tests/test_space.py
from __future__ import annotations
import pytest
from pcicfg import ConfigurationSpace, parse_hexdump
from pcicfg.config import WalkLimits, load_limits

LSPCI_X = """\
00:02.0 VGA compatible controller: Intel Corporation Device 9a49 (rev 01)
00: 86 80 49 9a 07 04 10 00 01 00 00 03 00 00 00 00
10: 04 00 00 a4 60 00 00 00 0c 00 00 80 40 00 00 00
20: 01 30 00 00 00 00 00 00 00 00 00 00 28 10 3b 0a
30: 00 00 00 00 40 00 00 00 00 00 00 00 ff 01 00 00

"""


def test_parse_lspci_x_output():
    data = parse_hexdump(LSPCI_X)
    assert len(data) == 0x40
    assert data[:4] == bytes([0x86, 0x80, 0x49, 0x9A])
    assert data[0x34] == 0x40


def test_short_dump_has_no_capability_region():
    cfg = ConfigurationSpace.from_hexdump(LSPCI_X)
    assert cfg.vendor_id == 0x8086
    assert cfg.device_id == 0x9A49
    assert cfg.has_capabilities
    assert list(cfg.capabilities()) == []


def test_gaps_are_zero_filled():
    data = parse_hexdump("100: 01 00 01 00\n")
    assert len(data) == 0x104
    assert data[:0x100] == bytes(0x100)


def test_dump_beyond_configuration_space():
    with pytest.raises(ValueError):
        parse_hexdump("ffe: 00 00 00 00\n")


def test_view_is_read_only():
    cfg = ConfigurationSpace.from_bytes(bytearray(256))
    with pytest.raises(TypeError):
        cfg.data[0] = 1


def test_default_limits():
    assert load_limits({}) == WalkLimits(legacy=96, extended=960)


def test_limits_from_environment():
    assert load_limits({"PCICFG_MAX_CAPS": "0x10", "PCICFG_MAX_EXT_CAPS": "0"}) == WalkLimits(16, 0)


@pytest.mark.parametrize("raw", ["many", "-1"])
def test_bad_limits(raw):
    with pytest.raises(ValueError) as ei:
        load_limits({"PCICFG_MAX_CAPS": raw})
    assert "PCICFG_MAX_CAPS" in str(ei.value)


def test_version_string():
    import pcicfg

    assert isinstance(pcicfg.__version__, str)
    assert pcicfg.__version__
