"""Small formatting helpers used by the packet and stream key modules."""

from __future__ import annotations

import ipaddress
from typing import Tuple

HEX_DUMP_WIDTH = 16

_PRINTABLE_LOW = 0x20
_PRINTABLE_HIGH = 0x7E


def format_endpoint(address: str, port: int) -> str:
    """Render an endpoint the way the packet store spells it in stream keys."""
    return f"{address}:{port}"


def endpoint_sort_key(address: str, port: int) -> Tuple[int, int, bytes, int]:
    """Ordering used to canonicalise the two sides of a conversation.

    IP addresses compare by version and packed bytes; anything that does not
    parse as an IP sorts after them by its UTF-8 text.
    """
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return (1, 0, address.encode("utf-8"), port)
    return (0, ip.version, ip.packed, port)


def format_hex_dump(data: bytes, width: int = HEX_DUMP_WIDTH) -> str:
    """Return a hex + ASCII dump with a four digit offset column."""
    lines = []
    for offset in range(0, len(data), width):
        chunk = data[offset : offset + width]
        hex_part = " ".join(f"{byte:02x}" for byte in chunk)
        ascii_part = "".join(
            chr(byte) if _PRINTABLE_LOW <= byte <= _PRINTABLE_HIGH else "." for byte in chunk
        )
        lines.append(f"{offset:04x}  {hex_part.ljust(width * 3 - 1)}  {ascii_part}")
    return "\n".join(lines)


__all__ = ["HEX_DUMP_WIDTH", "format_endpoint", "endpoint_sort_key", "format_hex_dump"]
