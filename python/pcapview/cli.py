"""Command-line front end for browsing a remote packet store."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from .capture_file import inspect_capture
from .errors import PacketStoreError, ValidationError
from .fetch import ImmediateExecutor, Phase
from .options import SessionOptions, load_options
from .packet import Packet
from .session import InspectionSession
from .store import HttpPacketStore
from .stream_key import StreamKey

logger = logging.getLogger(__name__)

_TABLE_COLUMNS = ("No.", "Time", "Source", "Destination", "Protocol", "Length", "Info")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse packets, follow streams and upload captures to a packet store.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="JSON options file (default: ~/.pcapview.json when present).",
    )
    parser.add_argument(
        "--base-url",
        help="Packet store base URL (default: http://localhost:8080).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Per-request timeout in seconds (default: 10).",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Log level for diagnostic output.",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    packets = commands.add_parser("packets", help="List one page of packets.")
    packets.add_argument("--page", type=int, default=1, help="Page number (default: 1).")
    packets.add_argument("--limit", type=int, help="Packets per page (default: 10).")
    packets.add_argument(
        "--filter",
        default="",
        metavar="TEXT",
        help="Only show packets of the page with a field containing TEXT.",
    )
    packets.add_argument(
        "--select",
        type=int,
        metavar="ROW",
        help="Print details and bytes of the given row (1-based) of the shown packets.",
    )
    packets.add_argument("--json", action="store_true", help="Print packets as JSON.")

    stream = commands.add_parser("stream", help="Follow one stream.")
    stream.add_argument("key", help="Stream key, e.g. '10.0.0.1:443 -> 10.0.0.2:51010'.")
    stream.add_argument("--limit", type=int, help="Maximum packets to fetch (default: 50).")
    stream.add_argument(
        "--as-given",
        action="store_true",
        help="Do not reorder the key's endpoints before querying.",
    )
    stream.add_argument("--json", action="store_true", help="Print packets as JSON.")

    commands.add_parser("streams", help="List the stream keys known to the store.")

    upload = commands.add_parser("upload", help="Upload a capture file for ingestion.")
    upload.add_argument("pcap_path", type=Path, help="Path to a pcap or pcapng file.")
    upload.add_argument(
        "--no-refresh",
        action="store_true",
        help="Do not list the first page once the upload is accepted.",
    )
    return parser


def _resolve_options(args: argparse.Namespace) -> SessionOptions:
    options = load_options(args.config)
    if args.base_url:
        options.base_url = args.base_url
    if args.timeout is not None:
        options.request_timeout_s = args.timeout
    if getattr(args, "limit", None) is not None:
        if args.command == "stream":
            options.stream_page_size = args.limit
        else:
            options.page_size = args.limit
    return options.validate()


def format_table(packets: Sequence[Packet], numbers: Sequence[int]) -> str:
    rows = [_TABLE_COLUMNS]
    for number, packet in zip(numbers, packets):
        rows.append(
            (
                str(number),
                str(packet.timestamp),
                packet.source,
                packet.destination,
                packet.protocol,
                str(packet.length),
                packet.info or "N/A",
            )
        )
    widths = [max(len(row[column]) for row in rows) for column in range(len(_TABLE_COLUMNS))]
    return "\n".join(
        "  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip() for row in rows
    )


def format_details(packet: Packet) -> str:
    lines = ["Packet Details"]
    lines.extend(f"  {row.label}" for row in packet.detail_fields())
    lines.append("Packet Bytes")
    dump = packet.byte_dump()
    lines.append(dump if dump else "  No Data Found")
    return "\n".join(lines)


def format_stream(packets: Sequence[Packet]) -> str:
    lines = []
    for number, packet in enumerate(packets, 1):
        payload = packet.payload_ascii or "No Data"
        lines.append(
            f"{number:>4}  {packet.timestamp}  {packet.source} -> {packet.destination}  {payload}"
        )
    return "\n".join(lines) if lines else "No packets in this stream."


def _print_json(packets: Sequence[Packet]) -> None:
    print(json.dumps([packet.to_wire() for packet in packets], indent=2))


def _run_packets(args: argparse.Namespace, session: InspectionSession) -> int:
    session.set_filter_text(args.filter)
    if args.page != session.page:
        # The page count is unknown until the first answer arrives.
        session.refresh()
        if session.phase is Phase.LOADED:
            session.set_page(args.page)
    else:
        session.refresh()

    if session.phase is Phase.FAILED:
        logger.error(session.error_message)
        return 1

    shown = session.filtered_packets
    if args.json:
        _print_json(shown)
    else:
        numbers = [session.row_number(row) for row in range(len(shown))]
        print(format_table(shown, numbers) if shown else "No packets available")
        print(session.status_text())

    if args.select is not None:
        if not session.select_row(args.select - 1):
            logger.error("Row %d is not among the %d shown packets", args.select, len(shown))
            return 1
        selected = session.selected_packet
        if selected is None:
            logger.error("Row %d could not be selected", args.select)
            return 1
        print(format_details(selected))
    return 0


def _run_stream(args: argparse.Namespace, session: InspectionSession) -> int:
    try:
        key = StreamKey.parse(args.key)
    except ValidationError as exc:
        logger.error(str(exc))
        return 2
    if not args.as_given and session.options.canonical_stream_keys:
        key = key.canonical()

    if session.open_stream(key) is None:
        return 1
    if session.stream_phase is Phase.FAILED:
        logger.error(session.stream_error_message)
        return 1

    if args.json:
        _print_json(session.stream_packets)
    else:
        print(f"Follow Stream: {session.stream_key}")
        print(format_stream(session.stream_packets))
    return 0


def _run_streams(store: HttpPacketStore) -> int:
    try:
        keys = store.list_streams()
    except PacketStoreError as exc:
        logger.error(str(exc))
        return 1
    for key in sorted(keys):
        print(key)
    return 0


def _run_upload(args: argparse.Namespace, session: InspectionSession, store: HttpPacketStore) -> int:
    try:
        summary = inspect_capture(args.pcap_path)
    except (FileNotFoundError, ValidationError) as exc:
        logger.error(str(exc))
        return 1
    logger.info("Uploading %s (%d packets)", summary.path.name, summary.packet_count)

    try:
        ack = store.ingest(summary.path)
    except PacketStoreError as exc:
        logger.error("Failed to upload file: %s", exc)
        return 1
    print(ack.get("message", "File uploaded successfully"))

    if args.no_refresh:
        return 0
    session.notify_ingest_completed()
    if session.phase is Phase.FAILED:
        logger.error(session.error_message)
        return 1
    shown = session.filtered_packets
    numbers = [session.row_number(row) for row in range(len(shown))]
    print(format_table(shown, numbers) if shown else "No packets available")
    print(session.status_text())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        options = _resolve_options(args)
    except ValidationError as exc:
        parser.error(str(exc))

    store = HttpPacketStore(options.base_url, timeout_s=options.request_timeout_s)
    with InspectionSession(store, options, executor=ImmediateExecutor()) as session:
        if args.command == "packets":
            return _run_packets(args, session)
        if args.command == "stream":
            return _run_stream(args, session)
        if args.command == "streams":
            return _run_streams(store)
        if args.command == "upload":
            return _run_upload(args, session, store)
    parser.error(f"unknown command {args.command!r}")


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
