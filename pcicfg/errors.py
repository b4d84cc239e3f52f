from __future__ import annotations


class DecodeError(ValueError):
    """Base class for configuration space decode failures."""


class StructuralError(DecodeError):
    def __init__(self, name: str, size: int):
        super().__init__(f"{name}: expected at least {size} bytes")
        self.name = name
        self.size = size


class RangeError(DecodeError):
    def __init__(self, offset: int):
        super().__init__(f"capability offset 0x{offset:x} precedes its region")
        self.offset = offset


class ArrayLengthError(DecodeError):
    def __init__(self, name: str, expected: int, found: int):
        super().__init__(f"{name}: array needs {expected} bytes, found {found}")
        self.name = name
        self.expected = expected
        self.found = found


class FieldValueError(DecodeError):
    def __init__(self, name: str, field: str, value: int):
        super().__init__(f"{name}: invalid {field} value {value}")
        self.name = name
        self.field = field
        self.value = value
