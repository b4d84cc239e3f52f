from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple

from ..arrays import take_records
from ..bits import BitReader
from ..errors import FieldValueError
from ..ids import PciExtCapID, _enum_or_none
from .registry import EXTENDED_CAPABILITIES

ST_ENTRY_SIZE = 2
# Largest table size field allowed when the table lives in the capability
ST_TABLE_SIZE_MAX = 63


class StTableLocation(enum.IntEnum):
    NOT_PRESENT = 0
    CAPABILITY = 1
    MSIX_TABLE = 2


class StModeSelect(enum.IntEnum):
    NO_ST = 0
    INTERRUPT_VECTOR = 1
    DEVICE_SPECIFIC = 2


class TphRequesterEnable(enum.IntEnum):
    NOT_PERMITTED = 0
    TPH_PERMITTED = 1
    TPH_AND_EXTENDED_TPH_PERMITTED = 3


@dataclass(frozen=True)
class SteeringTag:
    lower: int
    upper: int


@dataclass(frozen=True)
class TphRequester:
    no_st_mode_supported: bool
    interrupt_vector_mode_supported: bool
    device_specific_mode_supported: bool
    extended_tph_requester_supported: bool
    st_table_location: int
    st_table_size: int  # entries
    st_mode_select: int
    tph_requester_enable: int
    st_table: Optional[Tuple[SteeringTag, ...]] = None

    @property
    def st_table_location_enum(self) -> Optional[StTableLocation]:
        return _enum_or_none(StTableLocation, self.st_table_location)

    @property
    def st_mode_select_enum(self) -> Optional[StModeSelect]:
        return _enum_or_none(StModeSelect, self.st_mode_select)

    @property
    def tph_requester_enable_enum(self) -> Optional[TphRequesterEnable]:
        return _enum_or_none(TphRequesterEnable, self.tph_requester_enable)


def _steering_tag(r: BitReader) -> SteeringTag:
    return SteeringTag(r.u8(), r.u8())


@EXTENDED_CAPABILITIES.register(PciExtCapID.TPH, size=8)
def decode_tph(r: BitReader) -> TphRequester:
    no_st, int_vec, dev_spec = r.flag(), r.flag(), r.flag()
    r.reserved(5)
    extended = r.flag()
    location = r.take(2)
    r.reserved(5)
    size = r.take(11)
    r.reserved(5)

    mode = r.take(3)
    r.reserved(5)
    enable = r.take(2)
    r.reserved(22)

    table = None
    if location == StTableLocation.CAPABILITY:
        if size > ST_TABLE_SIZE_MAX:
            raise FieldValueError(r.name, "ST table size", size)
        table = take_records(r, size + 1, ST_ENTRY_SIZE, _steering_tag, r.name)
    return TphRequester(
        no_st_mode_supported=no_st,
        interrupt_vector_mode_supported=int_vec,
        device_specific_mode_supported=dev_spec,
        extended_tph_requester_supported=extended,
        st_table_location=location,
        st_table_size=size + 1,
        st_mode_select=mode,
        tph_requester_enable=enable,
        st_table=table,
    )
