# tests/conftest.py
from __future__ import annotations
import struct
from typing import Iterable
import pytest


class SpaceBuilder:
    """Assemble a configuration space image byte by byte."""

    def __init__(self, size: int = 4096):
        self.buf = bytearray(size)

    def put(self, offset: int, data: Iterable[int]) -> "SpaceBuilder":
        data = bytes(data)
        self.buf[offset:offset + len(data)] = data
        return self

    def header(self, pointer: int, header_type: int = 0) -> "SpaceBuilder":
        self.put(0x00, struct.pack("<HH", 0x8086, 0x1234))
        self.put(0x06, struct.pack("<H", 0x0010))  # capabilities list
        self.put(0x0E, [header_type])
        self.put(0x34, [pointer])
        return self

    def cap(self, offset: int, cap_id: int, next_ptr: int, payload: Iterable[int] = b"") -> "SpaceBuilder":
        return self.put(offset, bytes([cap_id, next_ptr]) + bytes(payload))

    def ext(self, offset: int, cap_id: int, version: int, next_off: int, payload: Iterable[int] = b"") -> "SpaceBuilder":
        return self.put(offset, ext_header(cap_id, version, next_off) + bytes(payload))

    def bytes(self) -> bytes:
        return bytes(self.buf)


def ext_header(cap_id: int, version: int, next_off: int) -> bytes:
    return struct.pack("<I", cap_id | (version << 16) | (next_off << 20))


def hexdump(data: bytes) -> str:
    lines = ["00:1f.3 Audio device: Intel Corporation Device 1234"]
    for off in range(0, len(data), 16):
        row = " ".join(f"{b:02x}" for b in data[off:off + 16])
        lines.append(f"{off:02x}: {row}" if off < 0x100 else f"{off:03x}: {row}")
    return "\n".join(lines) + "\n"


# Power Management: version 3, NoSoftRst+
PM_PAYLOAD = bytes([0x03, 0x00, 0x08, 0x00, 0x00, 0x00])


@pytest.fixture
def space() -> SpaceBuilder:
    return SpaceBuilder()


@pytest.fixture
def legacy_space() -> SpaceBuilder:
    return SpaceBuilder(256)


@pytest.fixture
def pm_payload() -> bytes:
    return PM_PAYLOAD


@pytest.fixture
def make_ext_header():
    return ext_header


@pytest.fixture
def make_hexdump():
    return hexdump
