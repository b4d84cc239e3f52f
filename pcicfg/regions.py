from __future__ import annotations

# Configuration space zones.
HEADER_LENGTH = 0x40
DDR_OFFSET = 0x40
DDR_LENGTH = 0xC0
ECS_OFFSET = 0x100
ECS_LENGTH = 0xF00
CONFIG_SPACE_LENGTH = ECS_OFFSET + ECS_LENGTH

# Predefined header registers consumed by the walkers.
STATUS = 0x06
STATUS_CAP_LIST = 1 << 4
HEADER_TYPE = 0x0E
CAPABILITIES_POINTER = 0x34
CARDBUS_CAPABILITIES_POINTER = 0x14
