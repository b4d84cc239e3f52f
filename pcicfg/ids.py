from __future__ import annotations

import enum
from typing import Dict, Optional, Tuple


class PciCapID(enum.IntEnum):
    NULL     =  0x00
    PM       =  0x01
    AGP      =  0x02
    VPD      =  0x03
    SLOT_ID  =  0x04
    MSI      =  0x05
    CHSWP    =  0x06
    PCIX     =  0x07
    HT       =  0x08
    VNDR     =  0x09
    DBG      =  0x0A
    CCRC     =  0x0B
    HOTPLUG  =  0x0C
    SSVID    =  0x0D
    AGP3     =  0x0E
    SECURE   =  0x0F
    EXP      =  0x10
    MSIX     =  0x11
    SATA     =  0x12
    AF       =  0x13
    EA       =  0x14
    FPB      =  0x15


CAP_NAMES: Dict[PciCapID, Tuple[str, str]] = {
    PciCapID.NULL: ("Null", "Null Capability"),
    PciCapID.PM: ("Power Management", "Power Management Interface"),
    PciCapID.AGP: ("AGP", "Accelerated Graphics Port"),
    PciCapID.VPD: ("VPD", "Vital Product Data"),
    PciCapID.SLOT_ID: ("Slot Identification", "Slot Identification"),
    PciCapID.MSI: ("MSI", "Message Signaled Interrupts"),
    PciCapID.CHSWP: ("Hot-Swap", "CompactPCI Hot Swap"),
    PciCapID.PCIX: ("PCI-X", "PCI-X Capability"),
    PciCapID.HT: ("HyperTransport", "HyperTransport Capability"),
    PciCapID.VNDR: ("Vendor Specific", "Vendor Specific Capability"),
    PciCapID.DBG: ("Debug Port", "Debug Port"),
    PciCapID.CCRC: ("Central Resource Control", "CompactPCI Central Resource Control"),
    PciCapID.HOTPLUG: ("Hot-Plug", "PCI Hot-Plug"),
    PciCapID.SSVID: ("Bridge SSID", "PCI Bridge Subsystem Vendor ID"),
    PciCapID.AGP3: ("AGP 3.0", "AGP 8x"),
    PciCapID.SECURE: ("Secure Device", "Secure Device"),
    PciCapID.EXP: ("PCI Express", "PCI Express"),
    PciCapID.MSIX: ("MSI-X", "MSI-X"),
    PciCapID.SATA: ("SATA", "Serial ATA Data/Index Configuration"),
    PciCapID.AF: ("AF", "Advanced Features"),
    PciCapID.EA: ("EA", "Enhanced Allocation"),
    PciCapID.FPB: ("FPB", "Flattening Portal Bridge"),
}


def cap_short_name(capid: int) -> str:
    short, _ = CAP_NAMES.get(capid, (None, None))
    if short is None:
        return f"Unknown 0x{capid:02x}"
    return short


def cap_long_name(capid: int) -> str:
    _, long = CAP_NAMES.get(capid, (None, None))
    if long is None:
        return f"Unknown 0x{capid:02x}"
    return long


class PciExtCapID(enum.IntEnum):
    NULL           =  0x0000
    AER            =  0x0001
    VC             =  0x0002
    DSN            =  0x0003
    PWR            =  0x0004
    RC_LINK        =  0x0005
    RC_INT_LINK    =  0x0006
    RCEC_ASSOC     =  0x0007
    MFVC           =  0x0008
    VC9            =  0x0009
    RCRB           =  0x000A
    VNDR           =  0x000B
    CAC            =  0x000C
    ACS            =  0x000D
    ARI            =  0x000E
    ATS            =  0x000F
    SRIOV          =  0x0010
    MRIOV          =  0x0011
    MULTICAST      =  0x0012
    PRI            =  0x0013
    AMD            =  0x0014
    REBAR          =  0x0015
    DPA            =  0x0016
    TPH            =  0x0017
    LTR            =  0x0018
    SECPCI         =  0x0019
    PMUX           =  0x001A
    PASID          =  0x001B
    LNR            =  0x001C
    DPC            =  0x001D
    L1PM           =  0x001E
    PTM            =  0x001F
    M_PCIE         =  0x0020
    FRS            =  0x0021
    RTR            =  0x0022
    DVSEC          =  0x0023
    VF_REBAR       =  0x0024
    DLNK           =  0x0025
    PL16GT         =  0x0026
    LMR            =  0x0027
    HIER_ID        =  0x0028
    NPEM           =  0x0029
    PL32GT         =  0x002A
    ALT_PROT       =  0x002B
    SFI            =  0x002C
    SHADOW         =  0x002D
    DOE            =  0x002E
    DEV3           =  0x002F
    IDE            =  0x0030
    PL64GT         =  0x0031
    FLIT_LOG       =  0x0032
    FLIT_PM        =  0x0033
    FLIT_EI        =  0x0034
    SVC            =  0x0035
    MMIO_RBL       =  0x0036
    NOP_FLIT       =  0x0037
    SIOV           =  0x0038
    PL128GT        =  0x0039
    CAPT_D         =  0x003A


EXT_CAP_NAMES: Dict[PciExtCapID, Tuple[str, str]] = {
    PciExtCapID.NULL: ("Null", "Null Capability"),
    PciExtCapID.AER: ("Advanced Error Reporting", "Advanced Error Reporting"),
    PciExtCapID.VC: ("Virtual Channel", "Virtual Channel"),
    PciExtCapID.DSN: ("Device Serial Number", "Device Serial Number"),
    PciExtCapID.PWR: ("Power Budgeting", "Power Budgeting"),
    PciExtCapID.RC_LINK: ("Root Complex Link", "Root Complex Link Declaration"),
    PciExtCapID.RC_INT_LINK: ("RC Internal Link", "Root Complex Internal Link Control"),
    PciExtCapID.RCEC_ASSOC: ("RCEC Association", "Root Complex Event Collector Endpoint Association"),
    PciExtCapID.MFVC: ("MFVC", "Multi-Function Virtual Channel"),
    PciExtCapID.VC9: ("Virtual Channel", "Virtual Channel (MFVC present)"),
    PciExtCapID.RCRB: ("RCRB", "Root Complex Register Block Header"),
    PciExtCapID.VNDR: ("VNDR", "Vendor-Specific Extended Capability"),
    PciExtCapID.CAC: ("CAC", "Configuration Access Correlation"),
    PciExtCapID.ACS: ("ACS", "Access Control Services"),
    PciExtCapID.ARI: ("ARI", "Alternative Routing-ID Interpretation"),
    PciExtCapID.ATS: ("ATS", "Address Translation Services"),
    PciExtCapID.SRIOV: ("SR-IOV", "Single Root I/O Virtualization"),
    PciExtCapID.MRIOV: ("MR-IOV", "Multi-Root I/O Virtualization"),
    PciExtCapID.MULTICAST: ("Multicast", "Multicast"),
    PciExtCapID.PRI: ("PRI", "Page Request Interface"),
    PciExtCapID.AMD: ("AMD", "Reserved for AMD"),
    PciExtCapID.REBAR: ("REBAR", "Resizable BAR"),
    PciExtCapID.DPA: ("DPA", "Dynamic Power Allocation"),
    PciExtCapID.TPH: ("TPH", "TPH Requester"),
    PciExtCapID.LTR: ("LTR", "Latency Tolerance Reporting"),
    PciExtCapID.SECPCI: ("Secondary PCIe", "Secondary PCI Express"),
    PciExtCapID.PMUX: ("PMUX", "Protocol Multiplexing"),
    PciExtCapID.PASID: ("PASID", "Process Address Space ID"),
    PciExtCapID.LNR: ("LNR", "LN Requester"),
    PciExtCapID.DPC: ("DPC", "Downstream Port Containment"),
    PciExtCapID.L1PM: ("L1 PM Substates", "L1 PM Substates"),
    PciExtCapID.PTM: ("PTM", "Precision Time Measurement"),
    PciExtCapID.M_PCIE: ("M_PCIE", "PCI Express over M-PHY"),
    PciExtCapID.FRS: ("FRS", "FRS Queueing"),
    PciExtCapID.RTR: ("RTR", "Readiness Time Reporting"),
    PciExtCapID.DVSEC: ("DVSEC", "Designated Vendor-Specific Extended Capability"),
    PciExtCapID.VF_REBAR: ("VF REBAR", "VF Resizable BAR"),
    PciExtCapID.DLNK: ("DLNK", "Data Link Feature"),
    PciExtCapID.PL16GT: ("Physical Layer 16.0 GT/s", "Physical Layer 16.0 GT/s"),
    PciExtCapID.LMR: ("Lane Margining", "Lane Margining at the Receiver"),
    PciExtCapID.HIER_ID: ("Hierarchy ID", "Hierarchy ID"),
    PciExtCapID.NPEM: ("NPEM", "Native PCIe Enclosure Management"),
    PciExtCapID.PL32GT: ("Physical Layer 32.0 GT/s", "Physical Layer 32.0 GT/s"),
    PciExtCapID.ALT_PROT: ("Alternate Protocol", "Alternate Protocol"),
    PciExtCapID.SFI: ("SFI", "System Firmware Intermediary"),
    PciExtCapID.SHADOW: ("Shadow Functions", "Shadow Functions"),
    PciExtCapID.DOE: ("DOE", "Data Object Exchange"),
    PciExtCapID.DEV3: ("DEV3", "Device 3"),
    PciExtCapID.IDE: ("IDE", "Integrity and Data Encryption"),
    PciExtCapID.PL64GT: ("Physical Layer 64.0 GT/s", "Physical Layer 64.0 GT/s"),
    PciExtCapID.FLIT_LOG: ("Flit Logging", "Flit Logging"),
    PciExtCapID.FLIT_PM: ("Flit Performance Measurement", "Flit Performance Measurement"),
    PciExtCapID.FLIT_EI: ("Flit Error Injection", "Flit Error Injection"),
    PciExtCapID.SVC: ("SVC", "Streamlined Virtual Channel"),
    PciExtCapID.MMIO_RBL: ("MMIO RBL", "MMIO Register Block Locator"),
    PciExtCapID.NOP_FLIT: ("NOP Flit", "NOP Flit"),
    PciExtCapID.SIOV: ("SIOV", "Scalable I/O Virtualization"),
    PciExtCapID.PL128GT: ("Physical Layer 128.0 GT/s", "Physical Layer 128.0 GT/s"),
    PciExtCapID.CAPT_D: ("Captured Data", "Captured Data"),
}


def extcap_short_name(capid: int) -> str:
    short, _ = EXT_CAP_NAMES.get(capid, (None, None))
    if short is None:
        return f"Unknown 0x{capid:04x}"
    return short


def extcap_long_name(capid: int) -> str:
    _, long = EXT_CAP_NAMES.get(capid, (None, None))
    if long is None:
        return f"Unknown 0x{capid:04x}"
    return long


def _enum_or_none(enum_cls, value: int) -> Optional[enum.IntEnum]:
    try:
        return enum_cls(value)
    except ValueError:
        return None
