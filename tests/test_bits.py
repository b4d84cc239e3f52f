# tests/test_bits.py
from __future__ import annotations
import pytest
from pcicfg.bits import BitReader, _u16, _u32
from pcicfg.errors import StructuralError


def test_fields_come_out_lsb_first():
    r = BitReader(b"\xa5\x0f", "T")
    assert r.take(4) == 0x5
    assert r.take(4) == 0xA
    assert r.take(8) == 0x0F
    assert r.consumed == 2


def test_field_spanning_bytes():
    r = BitReader(b"\x34\x12", "T")
    assert r.take(12) == 0x234
    assert r.take(4) == 0x1


def test_reserved_bits_are_counted():
    r = BitReader(b"\x05", "T")
    assert r.flag() is True
    r.reserved(1)
    assert r.flag() is True
    assert r.position == 3
    assert r.consumed == 1


def test_fields_in_order():
    r = BitReader(b"\xff", "T")
    assert r.fields(3, 5) == (7, 31)


def test_whole_registers():
    r = BitReader(b"\x78\x56\x34\x12\xcd\xab", "T")
    assert r.u32() == 0x12345678
    assert r.u16() == 0xABCD
    assert r.remaining == 0


def test_minimum_size_checked_up_front():
    with pytest.raises(StructuralError) as ei:
        BitReader(b"\x00", "Thing", 2)
    assert ei.value.name == "Thing"
    assert ei.value.size == 2
    assert "Thing" in str(ei.value)


def test_overrun_raises_instead_of_reading_past_end():
    r = BitReader(b"\x00\x00", "Thing")
    with pytest.raises(StructuralError) as ei:
        r.take(24)
    assert ei.value.size == 3


def test_require_after_conditional_field():
    r = BitReader(b"\x01\x00\x00", "Thing")
    assert r.flag()
    with pytest.raises(StructuralError) as ei:
        r.require(8)
    assert ei.value.size == 8


def test_remaining_counts_from_byte_boundary():
    r = BitReader(b"\x00" * 4, "T")
    r.take(9)
    assert r.consumed == 2
    assert r.remaining == 2


def test_rest_requires_alignment():
    r = BitReader(b"\x01\x02\x03", "T")
    r.take(8)
    assert bytes(r.rest()) == b"\x02\x03"
    r.take(1)
    with pytest.raises(ValueError):
        r.rest()


def test_fixed_offset_helpers():
    data = b"\x00\x10\x00\x00\x78\x56\x34\x12"
    assert _u16(data, 1) == 0x0010
    assert _u32(data, 4) == 0x12345678
