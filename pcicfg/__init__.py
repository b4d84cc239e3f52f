"""
pcicfg: PCI/PCIe configuration space capability decoder.

Public API:
    - Entry point:
        ConfigurationSpace, parse_hexdump
    - Walkers:
        Capabilities, ExtendedCapabilities
    - Records:
        Capability, ExtendedCapability, Marker, Reserved
    - Errors:
        DecodeError, StructuralError, RangeError, ArrayLengthError, FieldValueError
"""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version

# Version from installed dist; falls back to dev string when run from source tree.
try:
    __version__ = version("pcicfg")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0.dev0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API re-exports
from .bits import BitReader
from .capabilities import Capabilities, Capability
from .config import WalkLimits, load_limits
from .dispatch import DispatchTable, Marker, Reserved
from .errors import ArrayLengthError, DecodeError, FieldValueError, RangeError, StructuralError
from .extended import ExtendedCapabilities, ExtendedCapability
from .ids import PciCapID, PciExtCapID
from .space import ConfigurationSpace, parse_hexdump

__all__ = [
    "__version__",
    # Entry point
    "ConfigurationSpace",
    "parse_hexdump",
    # Walkers and records
    "Capabilities",
    "Capability",
    "ExtendedCapabilities",
    "ExtendedCapability",
    "Marker",
    "Reserved",
    "PciCapID",
    "PciExtCapID",
    # Building blocks
    "BitReader",
    "DispatchTable",
    "WalkLimits",
    "load_limits",
    # Errors
    "DecodeError",
    "StructuralError",
    "RangeError",
    "ArrayLengthError",
    "FieldValueError",
]
