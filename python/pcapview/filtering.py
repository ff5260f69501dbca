"""Local substring filter over the currently loaded page."""

from __future__ import annotations

from typing import List, Sequence

from .packet import Packet


def packet_matches(packet: Packet, needle: str) -> bool:
    """True if any field of ``packet`` contains ``needle`` (already casefolded)."""
    return any(needle in text.casefold() for text in packet.field_strings())


def derive_filtered(packets: Sequence[Packet], filter_text: str) -> List[Packet]:
    """Return the packets whose string-rendered fields contain ``filter_text``.

    Matching is case-insensitive and keeps the input order. An empty filter
    returns every packet. Only the given packets are searched, so with a
    paged store this filters the loaded page, not the whole capture.
    """
    if not filter_text:
        return list(packets)
    needle = filter_text.casefold()
    return [packet for packet in packets if packet_matches(packet, needle)]


__all__ = ["derive_filtered", "packet_matches"]
