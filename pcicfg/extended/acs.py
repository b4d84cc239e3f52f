from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..arrays import PackedArray, take_array
from ..bits import BitReader
from ..ids import PciExtCapID
from .registry import EXTENDED_CAPABILITIES

# An egress control vector size of 0 means 256 ports.
EGRESS_VECTOR_MAX = 256


@dataclass(frozen=True)
class AcsCapability:
    source_validation: bool
    translation_blocking: bool
    p2p_request_redirect: bool
    p2p_completion_redirect: bool
    upstream_forwarding: bool
    p2p_egress_control: bool
    direct_translated_p2p: bool
    enhanced_capability: bool
    egress_control_vector_size: int  # bits


@dataclass(frozen=True)
class AcsControl:
    source_validation_enable: bool
    translation_blocking_enable: bool
    p2p_request_redirect_enable: bool
    p2p_completion_redirect_enable: bool
    upstream_forwarding_enable: bool
    p2p_egress_control_enable: bool
    direct_translated_p2p_enable: bool


@dataclass(frozen=True)
class AccessControlServices:
    capability: AcsCapability
    control: AcsControl
    # One bit per port or function, present with P2P Egress Control only
    egress_control_vector: Optional[PackedArray] = None


@EXTENDED_CAPABILITIES.register(PciExtCapID.ACS, size=4)
def decode_acs(r: BitReader) -> AccessControlServices:
    v, b, rr, c, u, e, t, ec = (r.flag() for _ in range(8))
    size = r.u8() or EGRESS_VECTOR_MAX
    capability = AcsCapability(v, b, rr, c, u, e, t, ec, size)
    control = AcsControl(*(r.flag() for _ in range(7)))
    r.reserved(9)
    vector = None
    if e:
        # The vector occupies whole DWORDs
        vector = take_array(r, size, 1, r.name, unit=32)
    return AccessControlServices(capability, control, vector)
