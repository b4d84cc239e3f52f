from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from .bits import _u8, _u16
from .capabilities import BRIDGE_CAPABILITIES, CAPABILITIES, Capabilities
from .extended import ExtendedCapabilities
from .regions import (
    CAPABILITIES_POINTER,
    CARDBUS_CAPABILITIES_POINTER,
    CONFIG_SPACE_LENGTH,
    HEADER_LENGTH,
    HEADER_TYPE,
    STATUS,
    STATUS_CAP_LIST,
)

# "00: 86 80 c8 9d ..." as printed by lspci -x / -xxx / -xxxx
_HEXDUMP_LINE = re.compile(r"^\s*([0-9a-fA-F]{2,3}):((?:\s+[0-9a-fA-F]{2})+)\s*$")


def parse_hexdump(text: str) -> bytes:
    """
    Turn an `lspci -x`-style dump into raw bytes. Lines that are not
    "offset: bytes" (the device banner, blank lines) are skipped; gaps are
    zero filled.
    """
    buf = bytearray()
    for line in text.splitlines():
        m = _HEXDUMP_LINE.match(line)
        if not m:
            continue
        offset = int(m.group(1), 16)
        values = bytes(int(tok, 16) for tok in m.group(2).split())
        end = offset + len(values)
        if end > CONFIG_SPACE_LENGTH:
            raise ValueError(f"hexdump offset 0x{offset:x} beyond configuration space")
        if end > len(buf):
            buf.extend(b"\x00" * (end - len(buf)))
        buf[offset:end] = values
    return bytes(buf)


@dataclass(frozen=True)
class ConfigurationSpace:
    """Read-only view over a function's configuration space bytes."""

    data: memoryview

    @classmethod
    def from_bytes(cls, data) -> "ConfigurationSpace":
        return cls(memoryview(data).toreadonly())

    @classmethod
    def from_hexdump(cls, text: str) -> "ConfigurationSpace":
        return cls.from_bytes(parse_hexdump(text))

    def __len__(self) -> int:
        return len(self.data)

    @property
    def vendor_id(self) -> int:
        return _u16(self.data, 0x00)

    @property
    def device_id(self) -> int:
        return _u16(self.data, 0x02)

    @property
    def status(self) -> int:
        return _u16(self.data, STATUS)

    @property
    def has_capabilities(self) -> bool:
        # Status register bit 4 (Capabilities List)
        if len(self.data) < HEADER_LENGTH:
            return False
        return bool(self.status & STATUS_CAP_LIST)

    @property
    def header_type(self) -> int:
        return _u8(self.data, HEADER_TYPE) & 0x7F

    @property
    def multi_function(self) -> bool:
        return bool(_u8(self.data, HEADER_TYPE) & 0x80)

    @property
    def capabilities_pointer(self) -> Optional[int]:
        if not self.has_capabilities:
            return None
        if self.header_type == 2:
            return _u8(self.data, CARDBUS_CAPABILITIES_POINTER)
        return _u8(self.data, CAPABILITIES_POINTER)

    def capabilities(self, *, limit: Optional[int] = None) -> Capabilities:
        pointer = self.capabilities_pointer
        if pointer is None:
            return Capabilities(self.data, 0, limit=limit)
        table = BRIDGE_CAPABILITIES if self.header_type == 1 else CAPABILITIES
        return Capabilities(self.data, pointer, table=table, limit=limit)

    def extended_capabilities(self, *, limit: Optional[int] = None) -> ExtendedCapabilities:
        return ExtendedCapabilities(self.data, limit=limit)
