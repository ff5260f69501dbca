"""Local capture file inspection before it is handed to the packet store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

import dpkt
import dpkt.pcapng

from .errors import ValidationError

logger = logging.getLogger(__name__)

# The store refuses multipart bodies above 50 MiB.
MAX_UPLOAD_BYTES = 50 << 20
CAPTURE_SUFFIXES = {".pcap", ".pcapng", ".cap"}


@dataclass(frozen=True)
class CaptureSummary:
    path: Path
    format: str
    link_type: int
    packet_count: int
    size_bytes: int
    first_timestamp: Optional[float] = None
    last_timestamp: Optional[float] = None

    @property
    def duration_s(self) -> float:
        if self.first_timestamp is None or self.last_timestamp is None:
            return 0.0
        return max(self.last_timestamp - self.first_timestamp, 0.0)


def _open_reader(fh: BinaryIO, path: Path):
    try:
        return "pcap", dpkt.pcap.Reader(fh)
    except (ValueError, dpkt.dpkt.NeedData):
        fh.seek(0)
    try:
        return "pcapng", dpkt.pcapng.Reader(fh)
    except (ValueError, dpkt.dpkt.NeedData, dpkt.UnpackError) as exc:
        raise ValidationError(f"{path} is not a pcap or pcapng capture") from exc


def inspect_capture(
    path: Union[str, Path],
    *,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> CaptureSummary:
    """Count the frames of a capture and reject files the store cannot take."""
    capture = Path(path)
    if not capture.is_file():
        raise FileNotFoundError(f"Capture file does not exist: {capture}")

    size = capture.stat().st_size
    if size > max_bytes:
        raise ValidationError(
            f"{capture.name} is {size} bytes; the store accepts at most {max_bytes} bytes"
        )
    if capture.suffix.lower() not in CAPTURE_SUFFIXES:
        logger.warning("%s does not have a capture file extension", capture.name)

    count = 0
    first: Optional[float] = None
    last: Optional[float] = None
    with capture.open("rb") as fh:
        fmt, reader = _open_reader(fh, capture)
        try:
            for timestamp, _frame in reader:
                if first is None:
                    first = float(timestamp)
                last = float(timestamp)
                count += 1
        except (dpkt.dpkt.NeedData, dpkt.UnpackError, ValueError) as exc:
            raise ValidationError(f"{capture.name} is truncated after {count} packets") from exc
        link_type = reader.datalink()

    logger.info("Inspected %s: %s, %d packets, %d bytes", capture.name, fmt, count, size)
    return CaptureSummary(
        path=capture,
        format=fmt,
        link_type=link_type,
        packet_count=count,
        size_bytes=size,
        first_timestamp=first,
        last_timestamp=last,
    )


__all__ = ["CAPTURE_SUFFIXES", "MAX_UPLOAD_BYTES", "CaptureSummary", "inspect_capture"]
