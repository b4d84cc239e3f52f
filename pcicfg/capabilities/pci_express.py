from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from ..bits import BitReader
from ..ids import PciCapID, _enum_or_none
from .registry import CAPABILITIES

# Capabilities register through Slot Status
V1_SIZE = 0x1C - 0x02
# ... plus Root Control/Capabilities/Status
V1_ROOT_SIZE = 0x24 - 0x02
# ... plus Device/Link/Slot 2 register groups
V2_SIZE = 0x3C - 0x02

LINK_SPEEDS = {1: 2.5, 2: 5.0, 3: 8.0, 4: 16.0, 5: 32.0, 6: 64.0}  # GT/s


class DeviceType(enum.IntEnum):
    ENDPOINT = 0x0
    LEGACY_ENDPOINT = 0x1
    ROOT_PORT = 0x4
    UPSTREAM_PORT = 0x5
    DOWNSTREAM_PORT = 0x6
    PCIE_TO_PCI_BRIDGE = 0x7
    PCI_TO_PCIE_BRIDGE = 0x8
    RC_INTEGRATED_ENDPOINT = 0x9
    RC_EVENT_COLLECTOR = 0xA


# Device types that always carry the root registers
ROOT_DEVICE_TYPES = (DeviceType.ROOT_PORT, DeviceType.RC_EVENT_COLLECTOR)


@dataclass(frozen=True)
class DeviceCapabilities:
    max_payload_size_supported: int  # bytes
    phantom_functions_supported: int
    extended_tag_field_supported: bool
    endpoint_l0s_acceptable_latency: int
    endpoint_l1_acceptable_latency: int
    role_based_error_reporting: bool
    captured_slot_power_limit_value: int
    captured_slot_power_limit_scale: int
    function_level_reset_capability: bool


@dataclass(frozen=True)
class DeviceControl:
    correctable_error_reporting_enable: bool
    non_fatal_error_reporting_enable: bool
    fatal_error_reporting_enable: bool
    unsupported_request_reporting_enable: bool
    enable_relaxed_ordering: bool
    max_payload_size: int  # bytes
    extended_tag_field_enable: bool
    phantom_functions_enable: bool
    aux_power_pm_enable: bool
    enable_no_snoop: bool
    max_read_request_size: int  # bytes
    initiate_function_level_reset: bool


@dataclass(frozen=True)
class DeviceStatus:
    correctable_error_detected: bool
    non_fatal_error_detected: bool
    fatal_error_detected: bool
    unsupported_request_detected: bool
    aux_power_detected: bool
    transactions_pending: bool
    emergency_power_reduction_detected: bool


@dataclass(frozen=True)
class LinkCapabilities:
    max_link_speed: int
    max_link_width: int
    aspm_support: int
    l0s_exit_latency: int
    l1_exit_latency: int
    clock_power_management: bool
    surprise_down_error_reporting_capable: bool
    data_link_layer_link_active_reporting_capable: bool
    link_bandwidth_notification_capability: bool
    aspm_optionality_compliance: bool
    port_number: int

    @property
    def max_link_speed_gts(self) -> Optional[float]:
        return LINK_SPEEDS.get(self.max_link_speed)


@dataclass(frozen=True)
class LinkControl:
    aspm_control: int
    read_completion_boundary_128: bool
    link_disable: bool
    retrain_link: bool
    common_clock_configuration: bool
    extended_synch: bool
    enable_clock_power_management: bool
    hardware_autonomous_width_disable: bool
    link_bandwidth_management_interrupt_enable: bool
    link_autonomous_bandwidth_interrupt_enable: bool
    drs_signaling_control: int


@dataclass(frozen=True)
class LinkStatus:
    current_link_speed: int
    negotiated_link_width: int
    link_training: bool
    slot_clock_configuration: bool
    data_link_layer_link_active: bool
    link_bandwidth_management_status: bool
    link_autonomous_bandwidth_status: bool

    @property
    def current_link_speed_gts(self) -> Optional[float]:
        return LINK_SPEEDS.get(self.current_link_speed)


@dataclass(frozen=True)
class RegisterGroup:
    capabilities: int
    control: int
    status: int


@dataclass(frozen=True)
class SlotRegisters:
    capabilities: int
    control: int
    status: int

    @property
    def physical_slot_number(self) -> int:
        return self.capabilities >> 19


@dataclass(frozen=True)
class RootRegisters:
    control: int
    capabilities: int
    status: int


@dataclass(frozen=True)
class PciExpress:
    version: int
    device_type: int
    slot_implemented: bool
    interrupt_message_number: int
    device_capabilities: DeviceCapabilities
    device_control: DeviceControl
    device_status: DeviceStatus
    link_capabilities: LinkCapabilities
    link_control: LinkControl
    link_status: LinkStatus
    slot: SlotRegisters
    root: Optional[RootRegisters] = None
    device2: Optional[RegisterGroup] = None
    link2: Optional[RegisterGroup] = None
    slot2: Optional[RegisterGroup] = None

    @property
    def device_type_enum(self) -> Optional[DeviceType]:
        return _enum_or_none(DeviceType, self.device_type)


def _device_capabilities(r: BitReader) -> DeviceCapabilities:
    mps = r.take(3)
    phantom = r.take(2)
    ext_tag = r.flag()
    l0s = r.take(3)
    l1 = r.take(3)
    r.reserved(3)
    rber = r.flag()
    r.reserved(2)
    power_value = r.u8()
    power_scale = r.take(2)
    flr = r.flag()
    r.reserved(3)
    return DeviceCapabilities(
        max_payload_size_supported=128 << mps,
        phantom_functions_supported=phantom,
        extended_tag_field_supported=ext_tag,
        endpoint_l0s_acceptable_latency=l0s,
        endpoint_l1_acceptable_latency=l1,
        role_based_error_reporting=rber,
        captured_slot_power_limit_value=power_value,
        captured_slot_power_limit_scale=power_scale,
        function_level_reset_capability=flr,
    )


def _device_control(r: BitReader) -> DeviceControl:
    cere, nfere, fere, urre, ero = (r.flag() for _ in range(5))
    mps = r.take(3)
    etfe, pfe, appme, ens = (r.flag() for _ in range(4))
    mrrs = r.take(3)
    iflr = r.flag()
    return DeviceControl(
        correctable_error_reporting_enable=cere,
        non_fatal_error_reporting_enable=nfere,
        fatal_error_reporting_enable=fere,
        unsupported_request_reporting_enable=urre,
        enable_relaxed_ordering=ero,
        max_payload_size=128 << mps,
        extended_tag_field_enable=etfe,
        phantom_functions_enable=pfe,
        aux_power_pm_enable=appme,
        enable_no_snoop=ens,
        max_read_request_size=128 << mrrs,
        initiate_function_level_reset=iflr,
    )


def _device_status(r: BitReader) -> DeviceStatus:
    flags = [r.flag() for _ in range(7)]
    r.reserved(9)
    return DeviceStatus(*flags)


def _link_capabilities(r: BitReader) -> LinkCapabilities:
    speed = r.take(4)
    width = r.take(6)
    aspm = r.take(2)
    l0s = r.take(3)
    l1 = r.take(3)
    cpm, sderc, dllla, lbnc, aspmoc = (r.flag() for _ in range(5))
    r.reserved(1)
    port = r.u8()
    return LinkCapabilities(speed, width, aspm, l0s, l1, cpm, sderc, dllla, lbnc, aspmoc, port)


def _link_control(r: BitReader) -> LinkControl:
    aspm = r.take(2)
    r.reserved(1)
    rcb = r.flag()
    ld, rl, ccc, es, ecpm, hawd, lbmie, labie = (r.flag() for _ in range(8))
    r.reserved(2)
    drs = r.take(2)
    return LinkControl(aspm, rcb, ld, rl, ccc, es, ecpm, hawd, lbmie, labie, drs)


def _link_status(r: BitReader) -> LinkStatus:
    speed = r.take(4)
    width = r.take(6)
    r.reserved(1)
    lt, scc, dllla, lbms, labs = (r.flag() for _ in range(5))
    return LinkStatus(speed, width, lt, scc, dllla, lbms, labs)


def _group(r: BitReader) -> RegisterGroup:
    return RegisterGroup(r.u32(), r.u16(), r.u16())


@CAPABILITIES.register(PciCapID.EXP, size=V1_SIZE)
def decode_pci_express(r: BitReader) -> PciExpress:
    version = r.take(4)
    device_type = r.take(4)
    slot_implemented = r.flag()
    interrupt_message_number = r.take(5)
    r.reserved(2)
    if version > 1:
        r.require(V2_SIZE)
    if device_type in ROOT_DEVICE_TYPES:
        r.require(V1_ROOT_SIZE)

    device_capabilities = _device_capabilities(r)
    device_control = _device_control(r)
    device_status = _device_status(r)
    link_capabilities = _link_capabilities(r)
    link_control = _link_control(r)
    link_status = _link_status(r)
    slot = SlotRegisters(r.u32(), r.u16(), r.u16())

    root = None
    if r.remaining >= V1_ROOT_SIZE - V1_SIZE:
        root = RootRegisters(r.u16(), r.u16(), r.u32())

    device2 = link2 = slot2 = None
    if version > 1:
        device2 = _group(r)
        link2 = _group(r)
        slot2 = _group(r)

    return PciExpress(
        version=version,
        device_type=device_type,
        slot_implemented=slot_implemented,
        interrupt_message_number=interrupt_message_number,
        device_capabilities=device_capabilities,
        device_control=device_control,
        device_status=device_status,
        link_capabilities=link_capabilities,
        link_control=link_control,
        link_status=link_status,
        slot=slot,
        root=root,
        device2=device2,
        link2=link2,
        slot2=slot2,
    )
