"""
Extended capability list: DWORD headers chained through extended
configuration space, starting at 0x100.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from ..bits import _u32
from ..config import load_limits
from ..dispatch import DispatchTable
from ..errors import RangeError
from ..ids import PciExtCapID, _enum_or_none, extcap_long_name, extcap_short_name
from ..regions import CONFIG_SPACE_LENGTH, ECS_OFFSET
from .registry import EXTENDED_CAPABILITIES

# Importing the decoder modules registers them.
from . import (  # noqa: F401
    acs,
    aer,
    dpa,
    dpc,
    multicast,
    pmux,
    power,
    secondary_pcie,
    simple,
    tph,
    vendor_specific,
    virtual_channel,
)

logger = logging.getLogger(__name__)

ECH_BYTES = 4


@dataclass(frozen=True)
class ExtendedCapability:
    offset: int
    version: int
    cap_id: int
    kind: object

    @property
    def cap_id_enum(self) -> Optional[PciExtCapID]:
        return _enum_or_none(PciExtCapID, self.cap_id)

    @property
    def name(self) -> str:
        return extcap_long_name(self.cap_id)

    @property
    def short_name(self) -> str:
        return extcap_short_name(self.cap_id)


class ExtendedCapabilities:
    """
    Iterable over the extended capability chain.

    Unlike the legacy walk, a failure is raised to the caller: a next pointer
    below 0x100 raises RangeError, a record that fails to decode raises its
    DecodeError. Records before the failure have already been produced and
    the iteration is over. An all-zero header ends the chain normally.
    """

    def __init__(
        self,
        data,
        *,
        table: Optional[DispatchTable] = None,
        limit: Optional[int] = None,
    ):
        self._data = memoryview(data)
        self._table = table if table is not None else EXTENDED_CAPABILITIES
        self._limit = load_limits().extended if limit is None else limit

    def __iter__(self) -> Iterator[ExtendedCapability]:
        data = self._data
        end = min(len(data), CONFIG_SPACE_LENGTH)
        offset = ECS_OFFSET
        count = 0
        while offset != 0:
            if offset < ECS_OFFSET:
                raise RangeError(offset)
            if offset + ECH_BYTES > end:
                logger.debug("extended capability offset 0x%03x past end of data, stopping", offset)
                return
            header = _u32(data, offset)
            if header == 0:
                return
            if self._limit and count >= self._limit:
                logger.warning("extended capability list exceeds %d entries, stopping", self._limit)
                return
            cap_id = header & 0xFFFF
            version = (header >> 16) & 0xF
            next_off = header >> 20
            start = offset if self._table.with_header(cap_id) else offset + ECH_BYTES
            kind, _ = self._table.decode(cap_id, data[start:end])
            yield ExtendedCapability(offset, version, cap_id, kind)
            count += 1
            offset = next_off


__all__ = [
    "EXTENDED_CAPABILITIES",
    "ExtendedCapabilities",
    "ExtendedCapability",
]
