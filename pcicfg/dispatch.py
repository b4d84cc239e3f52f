from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Mapping, NamedTuple, Optional, Tuple

from .bits import BitReader

Decoder = Callable[[BitReader], object]
DecodeResult = Tuple[object, int]


@dataclass(frozen=True)
class Reserved:
    """An ID this package does not know; the walk carries on past it."""

    cap_id: int


@dataclass(frozen=True)
class Marker:
    """A known ID whose registers carry nothing further to decode."""

    cap_id: int
    name: str


class Entry(NamedTuple):
    decoder: Decoder
    size: int = 0
    with_header: bool = False


class DispatchTable:
    """
    Maps a numeric capability ID to its decoder and display name.

    Every ID in `names` is known. Decoders attach with the `register`
    decorator; known IDs without one decode to a Marker:

        @CAPABILITIES.register(PciCapID.PM, size=6)
        def decode_pm(r: BitReader) -> PowerManagement: ...

    `size` is the fixed minimum window checked before the decoder runs.
    """

    def __init__(self, names: Mapping[int, str], parent: Optional["DispatchTable"] = None):
        self._names = dict(names)
        self._entries: Dict[int, Entry] = {}
        self._parent = parent

    def register(self, cap_id: int, *, size: int = 0, with_header: bool = False):
        if cap_id not in self._names:
            raise KeyError(f"no name for capability 0x{cap_id:x}")

        def wrap(fn: Decoder) -> Decoder:
            self._entries[cap_id] = Entry(fn, size, with_header)
            return fn

        return wrap

    def __contains__(self, cap_id: int) -> bool:
        return cap_id in self._names

    def name(self, cap_id: int) -> Optional[str]:
        return self._names.get(cap_id)

    def with_header(self, cap_id: int) -> bool:
        entry = self._entry(cap_id)
        return bool(entry and entry.with_header)

    def decode(self, cap_id: int, window) -> DecodeResult:
        name = self._names.get(cap_id)
        if name is None:
            return Reserved(cap_id), 0
        entry = self._entry(cap_id)
        if entry is None:
            return Marker(cap_id, name), 0
        reader = BitReader(window, name, entry.size)
        kind = entry.decoder(reader)
        return kind, reader.consumed

    def _entry(self, cap_id: int) -> Optional[Entry]:
        entry = self._entries.get(cap_id)
        if entry is None and self._parent is not None:
            return self._parent._entry(cap_id)
        return entry

    def derive(self) -> "DispatchTable":
        """A table that overrides some of this one's decoders and falls back to it."""
        return DispatchTable(self._names, parent=self)
