from __future__ import annotations

from ..dispatch import DispatchTable
from ..ids import EXT_CAP_NAMES

EXTENDED_CAPABILITIES = DispatchTable({int(k): long for k, (_, long) in EXT_CAP_NAMES.items()})
