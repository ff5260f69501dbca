"""Identifiers for bidirectional conversations ("streams")."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union
from urllib.parse import quote, unquote

from .errors import ValidationError
from .packet import Packet
from .utils import endpoint_sort_key, format_endpoint

STREAM_SEPARATOR = " -> "


@dataclass(frozen=True)
class Endpoint:
    address: str
    port: int

    def __str__(self) -> str:
        return format_endpoint(self.address, self.port)

    def sort_key(self):
        return endpoint_sort_key(self.address, self.port)

    @classmethod
    def parse(cls, text: str) -> "Endpoint":
        # rpartition keeps IPv6 addresses intact: only the last colon is the port.
        address, sep, port = text.strip().rpartition(":")
        if not sep or not port.isdigit():
            raise ValidationError(f"Endpoint must look like address:port, got {text!r}")
        return cls(address=address, port=int(port))


@dataclass(frozen=True)
class StreamKey:
    """An ordered endpoint pair, rendered as ``A:pA -> B:pB``.

    The store files every packet under both orientations of its pair, so
    either orientation names the same conversation. ``canonical()`` picks a
    fixed orientation so the same conversation always yields the same key on
    the client side, whichever direction the selected packet travelled.
    """

    source: Endpoint
    destination: Endpoint

    def __str__(self) -> str:
        return f"{self.source}{STREAM_SEPARATOR}{self.destination}"

    @classmethod
    def from_packet(cls, packet: Packet, *, canonical: bool = True) -> "StreamKey":
        key = cls(
            source=Endpoint(packet.src_ip, packet.src_port),
            destination=Endpoint(packet.dst_ip, packet.dst_port),
        )
        return key.canonical() if canonical else key

    @classmethod
    def parse(cls, text: str) -> "StreamKey":
        left, sep, right = text.partition("->")
        if not sep or "->" in right:
            raise ValidationError(f"Stream key must contain exactly one '->', got {text!r}")
        return cls(source=Endpoint.parse(left), destination=Endpoint.parse(right))

    def reversed(self) -> "StreamKey":
        return StreamKey(source=self.destination, destination=self.source)

    def canonical(self) -> "StreamKey":
        if self.destination.sort_key() < self.source.sort_key():
            return self.reversed()
        return self

    def encode(self) -> str:
        """Percent-encode the key for use as a single URL path segment."""
        return encode_stream_segment(str(self))


def encode_stream_segment(key: Union[str, StreamKey]) -> str:
    return quote(str(key), safe="")


def decode_stream_segment(segment: str) -> StreamKey:
    return StreamKey.parse(unquote(segment))


__all__ = [
    "STREAM_SEPARATOR",
    "Endpoint",
    "StreamKey",
    "decode_stream_segment",
    "encode_stream_segment",
]
