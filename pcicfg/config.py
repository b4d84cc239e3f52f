from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .regions import DDR_LENGTH, ECS_LENGTH

# Smallest possible record in each region: id + next bytes, one header dword.
DEFAULT_LEGACY_LIMIT = DDR_LENGTH // 2
DEFAULT_EXTENDED_LIMIT = ECS_LENGTH // 4


@dataclass(frozen=True)
class WalkLimits:
    """Upper bound on records produced per walk; 0 means unbounded."""

    legacy: int = DEFAULT_LEGACY_LIMIT
    extended: int = DEFAULT_EXTENDED_LIMIT


def _parse_limit(var: str, raw: Optional[str], default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw, 0)
    except ValueError:
        raise ValueError(f"{var} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{var} must not be negative, got {value}")
    return value


def load_limits(env: Optional[Mapping[str, str]] = None) -> WalkLimits:
    """
    Read walk bounds from the environment:
      PCICFG_MAX_CAPS      legacy capability list
      PCICFG_MAX_EXT_CAPS  extended capability list
    """
    if env is None:
        env = os.environ
    return WalkLimits(
        legacy=_parse_limit("PCICFG_MAX_CAPS", env.get("PCICFG_MAX_CAPS"), DEFAULT_LEGACY_LIMIT),
        extended=_parse_limit("PCICFG_MAX_EXT_CAPS", env.get("PCICFG_MAX_EXT_CAPS"), DEFAULT_EXTENDED_LIMIT),
    )
