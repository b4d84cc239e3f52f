"""
Legacy capability list: 8-bit pointers chained through the device-dependent
region, starting from the header's capabilities pointer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from ..bits import _u8
from ..config import load_limits
from ..dispatch import DispatchTable
from ..errors import DecodeError
from ..ids import PciCapID, _enum_or_none, cap_long_name, cap_short_name
from ..regions import DDR_OFFSET, ECS_OFFSET
from .registry import BRIDGE_CAPABILITIES, CAPABILITIES

# Importing the decoder modules registers them.
from . import (  # noqa: F401
    enhanced_allocation,
    misc,
    msi,
    msix,
    pci_express,
    power_management,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Capability:
    pointer: int  # absolute offset of the id byte
    cap_id: int
    kind: object

    @property
    def cap_id_enum(self) -> Optional[PciCapID]:
        return _enum_or_none(PciCapID, self.cap_id)

    @property
    def name(self) -> str:
        return cap_long_name(self.cap_id)

    @property
    def short_name(self) -> str:
        return cap_short_name(self.cap_id)


class Capabilities:
    """
    Iterable over the legacy capability chain.

    A record that fails to decode ends the walk quietly: the caller sees the
    records before it and nothing after. Each iteration restarts the walk.
    """

    def __init__(
        self,
        data,
        pointer: int,
        *,
        table: Optional[DispatchTable] = None,
        limit: Optional[int] = None,
    ):
        self._data = memoryview(data)
        self._pointer = pointer
        self._table = table if table is not None else CAPABILITIES
        self._limit = load_limits().legacy if limit is None else limit

    def __iter__(self) -> Iterator[Capability]:
        data = self._data
        end = min(len(data), ECS_OFFSET)
        cursor = self._pointer
        count = 0
        while cursor != 0:
            if cursor < DDR_OFFSET:
                logger.debug("capability pointer 0x%02x below 0x%02x, stopping", cursor, DDR_OFFSET)
                return
            if cursor + 2 > end:
                logger.debug("capability pointer 0x%02x past end of data, stopping", cursor)
                return
            if self._limit and count >= self._limit:
                logger.warning("capability list exceeds %d entries, stopping", self._limit)
                return
            cap_id = _u8(data, cursor)
            next_ptr = _u8(data, cursor + 1)
            try:
                kind, _ = self._table.decode(cap_id, data[cursor + 2:end])
            except DecodeError as exc:
                logger.debug("capability at 0x%02x: %s, stopping", cursor, exc)
                return
            yield Capability(cursor, cap_id, kind)
            count += 1
            cursor = next_ptr


__all__ = [
    "BRIDGE_CAPABILITIES",
    "CAPABILITIES",
    "Capabilities",
    "Capability",
]
