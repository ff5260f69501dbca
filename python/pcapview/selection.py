"""Currently inspected packet and detail field."""

from __future__ import annotations

import dataclasses
from typing import Optional

from .packet import Packet, PacketField


class SelectionState:
    def __init__(self) -> None:
        self._packet: Optional[Packet] = None
        self._field: Optional[PacketField] = None

    @property
    def packet(self) -> Optional[Packet]:
        return self._packet

    @property
    def field(self) -> Optional[PacketField]:
        return self._field

    def select(self, packet: Packet) -> None:
        """Inspect a copy of ``packet``; any previously chosen field is dropped."""
        self._packet = dataclasses.replace(packet, extra=dict(packet.extra))
        self._field = None

    def select_field(self, key: str) -> bool:
        if self._packet is None:
            return False
        for row in self._packet.detail_fields():
            if row.key == key:
                self._field = row
                return True
        return False

    def clear(self) -> bool:
        """Reset to nothing selected; return whether anything was selected."""
        had_selection = self._packet is not None
        self._packet = None
        self._field = None
        return had_selection


__all__ = ["SelectionState"]
