from pcapview import Packet, SelectionState


def _packet(**extra):
    return Packet(
        timestamp=1.5,
        src_ip="10.0.0.1",
        src_port=1234,
        dst_ip="10.0.0.2",
        dst_port=80,
        protocol="TCP",
        length=60,
        index=3,
        info="SYN",
        extra=extra,
    )


def test_select_stores_a_copy():
    original = _packet(ttl=64)
    selection = SelectionState()

    selection.select(original)
    original.extra["ttl"] = 1

    assert selection.packet is not original
    assert selection.packet.extra == {"ttl": 64}


def test_selecting_a_packet_resets_the_field():
    selection = SelectionState()
    selection.select(_packet())
    assert selection.select_field("source")
    assert selection.field.value == "10.0.0.1:1234"

    selection.select(_packet())
    assert selection.field is None


def test_select_field_requires_known_key_and_packet():
    selection = SelectionState()
    assert not selection.select_field("source")

    selection.select(_packet())
    assert not selection.select_field("checksum")
    assert selection.field is None


def test_clear():
    selection = SelectionState()
    assert not selection.clear()

    selection.select(_packet())
    selection.select_field("info")
    assert selection.clear()
    assert selection.packet is None
    assert selection.field is None
