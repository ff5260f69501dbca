"""Client-side session for browsing captured packets held by a remote packet store."""

from .errors import DecodeError, PacketStoreError, TransportError, ValidationError
from .packet import Packet, PacketField, protocol_bucket
from .stream_key import Endpoint, StreamKey
from .store import HttpPacketStore, PacketPage, PacketStore, parse_packet_page
from .query import QueryState
from .filtering import derive_filtered
from .selection import SelectionState
from .fetch import FetchCycle, ImmediateExecutor, Phase
from .options import SessionOptions, load_options, save_options
from .session import InspectionSession
from .capture_file import CaptureSummary, inspect_capture

__all__ = [
    "PacketStoreError",
    "TransportError",
    "DecodeError",
    "ValidationError",
    "Packet",
    "PacketField",
    "protocol_bucket",
    "Endpoint",
    "StreamKey",
    "PacketStore",
    "PacketPage",
    "HttpPacketStore",
    "parse_packet_page",
    "QueryState",
    "derive_filtered",
    "SelectionState",
    "FetchCycle",
    "ImmediateExecutor",
    "Phase",
    "SessionOptions",
    "load_options",
    "save_options",
    "InspectionSession",
    "CaptureSummary",
    "inspect_capture",
]
