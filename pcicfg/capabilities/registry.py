from __future__ import annotations

from ..dispatch import DispatchTable
from ..ids import CAP_NAMES

CAPABILITIES = DispatchTable({int(k): long for k, (_, long) in CAP_NAMES.items()})

# Type 1 (bridge) headers lay out Enhanced Allocation differently.
BRIDGE_CAPABILITIES = CAPABILITIES.derive()
