from __future__ import annotations

import socket

import dpkt
import pytest

from pcapview import ValidationError, inspect_capture


def _write_udp_capture(path, count: int = 3) -> None:
    with path.open("wb") as fh:
        writer = dpkt.pcap.Writer(fh)
        for number in range(count):
            udp = dpkt.udp.UDP(sport=51000 + number, dport=53)
            udp.data = b"query"
            udp.ulen = len(udp)
            ip = dpkt.ip.IP(
                src=socket.inet_aton("10.0.0.5"),
                dst=socket.inet_aton("8.8.8.8"),
                p=dpkt.ip.IP_PROTO_UDP,
                ttl=64,
            )
            ip.data = udp
            eth = dpkt.ethernet.Ethernet(
                src=b"\xaa\xbb\xcc\xdd\xee\xff",
                dst=b"\x11\x22\x33\x44\x55\x66",
                type=dpkt.ethernet.ETH_TYPE_IP,
                data=ip,
            )
            writer.writepkt(bytes(eth), ts=100.0 + number * 0.5)


def test_inspect_counts_frames(tmp_path):
    capture = tmp_path / "dns.pcap"
    _write_udp_capture(capture)

    summary = inspect_capture(capture)

    assert summary.format == "pcap"
    assert summary.packet_count == 3
    assert summary.link_type == dpkt.pcap.DLT_EN10MB
    assert summary.size_bytes == capture.stat().st_size
    assert summary.first_timestamp == pytest.approx(100.0)
    assert summary.duration_s == pytest.approx(1.0)


def test_empty_capture(tmp_path):
    capture = tmp_path / "empty.pcap"
    _write_udp_capture(capture, count=0)

    summary = inspect_capture(capture)
    assert summary.packet_count == 0
    assert summary.duration_s == 0.0


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        inspect_capture(tmp_path / "nope.pcap")


def test_oversized_file_is_rejected(tmp_path):
    capture = tmp_path / "dns.pcap"
    _write_udp_capture(capture)

    with pytest.raises(ValidationError):
        inspect_capture(capture, max_bytes=10)


def test_non_capture_is_rejected(tmp_path):
    capture = tmp_path / "notes.pcap"
    capture.write_bytes(b"these are not packets at all")

    with pytest.raises(ValidationError):
        inspect_capture(capture)
