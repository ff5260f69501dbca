from urllib.parse import unquote

import pytest

from pcapview import Endpoint, Packet, StreamKey, ValidationError
from pcapview.stream_key import decode_stream_segment, encode_stream_segment


def _packet(src_ip, src_port, dst_ip, dst_port):
    return Packet(
        timestamp=1.0,
        src_ip=src_ip,
        src_port=src_port,
        dst_ip=dst_ip,
        dst_port=dst_port,
        protocol="TCP",
        length=60,
    )


def test_key_text_matches_store_format():
    key = StreamKey(Endpoint("10.0.0.1", 1234), Endpoint("10.0.0.2", 80))
    assert str(key) == "10.0.0.1:1234 -> 10.0.0.2:80"


def test_from_packet_as_given_keeps_direction():
    key = StreamKey.from_packet(_packet("10.0.0.2", 80, "10.0.0.1", 1234), canonical=False)
    assert str(key) == "10.0.0.2:80 -> 10.0.0.1:1234"


def test_canonical_key_is_the_same_for_both_directions():
    forward = StreamKey.from_packet(_packet("10.0.0.1", 1234, "10.0.0.2", 80))
    backward = StreamKey.from_packet(_packet("10.0.0.2", 80, "10.0.0.1", 1234))
    assert forward == backward
    assert str(forward) == "10.0.0.1:1234 -> 10.0.0.2:80"


def test_canonical_orders_numerically_not_lexically():
    key = StreamKey.parse("10.0.0.10:5 -> 10.0.0.9:5").canonical()
    assert str(key) == "10.0.0.9:5 -> 10.0.0.10:5"


def test_canonical_puts_ip_before_other_addresses():
    key = StreamKey.parse("host.local:1 -> 192.0.2.1:2").canonical()
    assert key.source.address == "192.0.2.1"


def test_parse_ipv6_endpoint():
    key = StreamKey.parse("2001:db8::1:443 -> 2001:db8::2:51000")
    assert key.source == Endpoint("2001:db8::1", 443)
    assert key.destination == Endpoint("2001:db8::2", 51000)


@pytest.mark.parametrize(
    "text",
    ["", "10.0.0.1:80", "10.0.0.1:80 -> 10.0.0.2", "a:1 -> b:2 -> c:3", "10.0.0.1:x -> 10.0.0.2:80"],
)
def test_parse_rejects_malformed_keys(text):
    with pytest.raises(ValidationError):
        StreamKey.parse(text)


def test_encoded_segment_has_no_path_separators():
    key = StreamKey.parse("10.0.0.1:1234 -> 10.0.0.2:80")
    segment = key.encode()
    assert "/" not in segment
    assert " " not in segment
    assert segment == encode_stream_segment(str(key))
    assert decode_stream_segment(segment) == key


def test_reversed():
    key = StreamKey.parse("10.0.0.1:1 -> 10.0.0.2:2")
    assert str(key.reversed()) == "10.0.0.2:2 -> 10.0.0.1:1"


@pytest.mark.parametrize(
    "text",
    [
        "10.0.0.1:443 -> 10.0.0.2:51010",
        "2001:db8::1:443 -> 2001:db8::2:51010",
        "fe80::1%eth0:5353 -> ff02::fb:5353",
    ],
)
def test_encoded_segment_decodes_to_the_exact_key_text(text):
    segment = encode_stream_segment(text)

    assert "/" not in segment
    assert unquote(segment) == text
    assert str(decode_stream_segment(segment)) == text
