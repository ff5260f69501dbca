import unittest

from pcapview import DecodeError, Packet, protocol_bucket


def _wire(**overrides):
    data = {
        "index": 7,
        "timestamp": "2024-03-01T10:00:00.000001Z",
        "src_ip": "10.0.0.1",
        "src_port": 51000,
        "dst_ip": "8.8.8.8",
        "dst_port": 53,
        "protocol": "DNS",
        "length": 74,
        "info": "Standard query A example.com",
    }
    data.update(overrides)
    return data


class PacketWireTest(unittest.TestCase):
    def test_from_wire_reads_known_fields(self) -> None:
        packet = Packet.from_wire(_wire())

        self.assertEqual(packet.index, 7)
        self.assertEqual(packet.src_port, 51000)
        self.assertEqual(packet.source, "10.0.0.1:51000")
        self.assertEqual(packet.destination, "8.8.8.8:53")
        self.assertEqual(packet.protocol_bucket, "DNS")
        self.assertEqual(packet.extra, {})

    def test_unknown_fields_are_kept(self) -> None:
        packet = Packet.from_wire(_wire(ttl=64, flags="SA"))

        self.assertEqual(packet.extra, {"ttl": 64, "flags": "SA"})
        self.assertIn("64", list(packet.field_strings()))
        self.assertEqual(packet.to_wire()["ttl"], 64)

    def test_numeric_strings_and_integral_floats_are_accepted(self) -> None:
        packet = Packet.from_wire(_wire(src_port="443", length=60.0))

        self.assertEqual(packet.src_port, 443)
        self.assertEqual(packet.length, 60)

    def test_invalid_port_raises_decode_error(self) -> None:
        with self.assertRaises(DecodeError):
            Packet.from_wire(_wire(dst_port="http"))
        with self.assertRaises(DecodeError):
            Packet.from_wire(_wire(length=True))

    def test_non_object_entry_raises_decode_error(self) -> None:
        with self.assertRaises(DecodeError):
            Packet.from_wire(["10.0.0.1", 80])  # type: ignore[arg-type]

    def test_to_wire_omits_missing_optional_fields(self) -> None:
        wire = Packet.from_wire(_wire(info=None)).to_wire()

        self.assertNotIn("info", wire)
        self.assertNotIn("payload_hex", wire)
        self.assertEqual(wire["src_ip"], "10.0.0.1")


class PacketDetailTest(unittest.TestCase):
    def test_byte_dump_prefers_store_dump(self) -> None:
        packet = Packet.from_wire(_wire(packet_dump="0000  de ad", payload_hex="beef"))

        self.assertEqual(packet.byte_dump(), "0000  de ad")

    def test_byte_dump_renders_payload_hex(self) -> None:
        packet = Packet.from_wire(_wire(payload_hex="474554202f"))

        dump = packet.byte_dump()
        assert dump is not None
        self.assertTrue(dump.startswith("0000  47 45 54 20 2f"))
        self.assertTrue(dump.endswith("GET /"))

    def test_byte_dump_is_none_without_data(self) -> None:
        self.assertIsNone(Packet.from_wire(_wire()).byte_dump())
        self.assertIsNone(Packet.from_wire(_wire(payload_hex="zz")).byte_dump())

    def test_detail_fields(self) -> None:
        rows = Packet.from_wire(_wire()).detail_fields()

        self.assertEqual(
            [row.key for row in rows],
            ["frame", "timestamp", "source", "destination", "protocol", "info"],
        )
        self.assertEqual(rows[0].label, "Frame 7: 74 bytes on wire")

    def test_detail_fields_without_index(self) -> None:
        rows = Packet.from_wire(_wire(index=None, info="")).detail_fields()

        self.assertEqual(rows[0].label, "Frame ?: 74 bytes on wire")
        self.assertNotIn("info", [row.key for row in rows])


class ProtocolBucketTest(unittest.TestCase):
    def test_buckets(self) -> None:
        self.assertEqual(protocol_bucket("tcp"), "TCP")
        self.assertEqual(protocol_bucket("ICMPv6"), "ICMP")
        self.assertEqual(protocol_bucket("ARP"), "ARP")
        self.assertEqual(protocol_bucket("TLSv1.2"), "Other")
        self.assertEqual(protocol_bucket("TCPX"), "Other")
        self.assertEqual(protocol_bucket(""), "Other")
        self.assertEqual(protocol_bucket(None), "Other")


if __name__ == "__main__":
    unittest.main()
