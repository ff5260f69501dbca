"""Packet records as returned by the packet store service."""

from __future__ import annotations

import binascii
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from .errors import DecodeError
from .utils import format_endpoint, format_hex_dump

Timestamp = Union[str, int, float]

PROTOCOL_BUCKETS = ("TCP", "UDP", "ICMP", "ARP", "DNS")
OTHER_PROTOCOL = "Other"

_WIRE_FIELDS = (
    "index",
    "timestamp",
    "src_ip",
    "src_port",
    "dst_ip",
    "dst_port",
    "protocol",
    "length",
    "info",
    "packet_dump",
    "payload_hex",
    "payload_ascii",
)
_INT_FIELDS = ("src_port", "dst_port", "length")


def protocol_bucket(label: Optional[str]) -> str:
    """Map a store protocol label onto the closed set used for display."""
    if not label:
        return OTHER_PROTOCOL
    upper = label.strip().upper()
    for bucket in PROTOCOL_BUCKETS:
        if upper == bucket or upper.startswith(bucket + "V"):
            return bucket
    return OTHER_PROTOCOL


@dataclass(frozen=True)
class PacketField:
    """One row of the packet detail tree."""

    key: str
    label: str
    value: Any


@dataclass(frozen=True)
class Packet:
    timestamp: Timestamp
    src_ip: str
    src_port: int
    dst_ip: str
    dst_port: int
    protocol: str
    length: int
    index: Optional[int] = None
    info: Optional[str] = None
    packet_dump: Optional[str] = None
    payload_hex: Optional[str] = None
    payload_ascii: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, hash=False)

    # Wire conversion ----------------------------------------------------
    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> "Packet":
        if not isinstance(data, Mapping):
            raise DecodeError(f"Packet entry must be an object, got {type(data).__name__}")

        values: Dict[str, Any] = {}
        for name in _INT_FIELDS:
            values[name] = _as_int(data.get(name, 0), name)

        index = data.get("index")
        values["index"] = None if index is None else _as_int(index, "index")

        timestamp = data.get("timestamp", "")
        if not isinstance(timestamp, (str, int, float)) or isinstance(timestamp, bool):
            raise DecodeError(f"Unsupported timestamp value: {timestamp!r}")
        values["timestamp"] = timestamp

        for name in ("src_ip", "dst_ip", "protocol"):
            values[name] = _as_text(data.get(name), name) or ""
        for name in ("info", "packet_dump", "payload_hex", "payload_ascii"):
            values[name] = _as_text(data.get(name), name)

        values["extra"] = {key: value for key, value in data.items() if key not in _WIRE_FIELDS}
        return cls(**values)

    def to_wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {}
        for name in _WIRE_FIELDS:
            value = getattr(self, name)
            if value is not None:
                wire[name] = value
        wire.update(self.extra)
        return wire

    # Field access -------------------------------------------------------
    def field_values(self) -> Iterator[Tuple[str, Any]]:
        """Yield every populated field, including ones the store added."""
        for name in _WIRE_FIELDS:
            value = getattr(self, name)
            if value is not None:
                yield name, value
        for name, value in self.extra.items():
            if value is not None:
                yield name, value

    def field_strings(self) -> Iterator[str]:
        for _, value in self.field_values():
            yield str(value)

    @property
    def source(self) -> str:
        return format_endpoint(self.src_ip, self.src_port)

    @property
    def destination(self) -> str:
        return format_endpoint(self.dst_ip, self.dst_port)

    @property
    def protocol_bucket(self) -> str:
        return protocol_bucket(self.protocol)

    # Detail view --------------------------------------------------------
    def byte_dump(self) -> Optional[str]:
        """Raw bytes for the detail pane, preferring the store's own dump."""
        if self.packet_dump:
            return self.packet_dump
        if not self.payload_hex:
            return None
        try:
            data = binascii.unhexlify(self.payload_hex.strip())
        except (binascii.Error, ValueError):
            return None
        return format_hex_dump(data)

    def detail_fields(self) -> List[PacketField]:
        number = "?" if self.index is None else str(self.index)
        rows = [
            PacketField("frame", f"Frame {number}: {self.length} bytes on wire", self.length),
            PacketField("timestamp", f"Arrival time: {self.timestamp}", self.timestamp),
            PacketField("source", f"Source: {self.source}", self.source),
            PacketField("destination", f"Destination: {self.destination}", self.destination),
            PacketField("protocol", f"Protocol: {self.protocol or OTHER_PROTOCOL}", self.protocol),
        ]
        if self.info:
            rows.append(PacketField("info", f"Info: {self.info}", self.info))
        return rows


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise DecodeError(f"Field {name!r} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise DecodeError(f"Field {name!r} must be an integer, got {value!r}")


def _as_text(value: Any, name: str) -> Optional[str]:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise DecodeError(f"Field {name!r} must be a string, got {value!r}")


__all__ = [
    "OTHER_PROTOCOL",
    "PROTOCOL_BUCKETS",
    "Packet",
    "PacketField",
    "Timestamp",
    "protocol_bucket",
]
