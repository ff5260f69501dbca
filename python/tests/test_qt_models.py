import pytest

pytest.importorskip("PySide6.QtCore")

from PySide6.QtCore import Qt  # noqa: E402

from pcapview import InspectionSession, ImmediateExecutor, Packet, Phase, SessionOptions  # noqa: E402
from pcapview.store import PacketPage  # noqa: E402
from pcapview.qtui.packet_model import PacketTableModel, StreamTableModel, row_color  # noqa: E402
from pcapview.qtui.session_bridge import QtSessionBridge  # noqa: E402


def _packet(index, protocol="TCP", **fields):
    return Packet(
        timestamp=f"t{index}",
        src_ip="10.0.0.1",
        src_port=1000,
        dst_ip="10.0.0.2",
        dst_port=80,
        protocol=protocol,
        length=60,
        index=index,
        **fields,
    )


@pytest.mark.parametrize(
    "protocol,color",
    [
        ("TCP", "#B4FFB4"),
        ("UDP", "#B4D8FF"),
        ("ICMPv6", "#FFF4B4"),
        ("ARP", "#FFD1A4"),
        ("DNS", "#E4B4FF"),
        ("QUIC", "#EAEAEA"),
    ],
)
def test_row_color(protocol, color):
    assert row_color(_packet(1, protocol)) == color


def test_packet_model_rows():
    model = PacketTableModel()
    model.set_packets([_packet(11), _packet(12, "UDP", info="query")], [11, 12])

    assert model.rowCount() == 2
    assert model.columnCount() == 7
    assert model.headerData(2, Qt.Horizontal) == "Source"
    assert model.data(model.index(0, 0)) == "11"
    assert model.data(model.index(0, 2)) == "10.0.0.1:1000"
    assert model.data(model.index(0, 6)) == "N/A"
    assert model.data(model.index(1, 6)) == "query"
    assert model.data(model.index(1, 0), Qt.BackgroundRole).name().upper() == "#B4D8FF"
    assert model.packet_at(1).index == 12
    assert model.packet_at(5) is None

    model.clear()
    assert model.rowCount() == 0


def test_stream_model_shows_payload():
    model = StreamTableModel()
    model.set_packets([_packet(1, payload_ascii="GET / HTTP/1.1"), _packet(2)])

    assert model.columnCount() == 5
    assert model.data(model.index(0, 0)) == "1"
    assert model.data(model.index(0, 4)) == "GET / HTTP/1.1"
    assert model.data(model.index(1, 4)) == "No Data"
    assert model.data(model.index(0, 0), Qt.BackgroundRole) is None


class _Store:
    def list_packets(self, page, limit):
        return PacketPage([_packet(1), _packet(2)], 1)


def test_bridge_reemits_session_events():
    session = InspectionSession(_Store(), SessionOptions(), executor=ImmediateExecutor())
    bridge = QtSessionBridge(session)
    phases = []
    statuses = []
    loaded = []
    bridge.phase_changed.connect(phases.append)
    bridge.status_changed.connect(statuses.append)
    bridge.page_loaded.connect(lambda: loaded.append(True))

    session.refresh()

    assert phases == ["loading", "loaded"]
    assert loaded == [True]
    assert statuses[-1] == "Packets: 2 | Page: 1 of 1 | Selected: None"


def test_bridge_reports_phase_in_effect_when_notifications_interleave():
    queued = []

    class QueueExecutor:
        def submit(self, fn, *args):
            queued.append((fn, args))

    session = InspectionSession(_Store(), SessionOptions(), executor=QueueExecutor())
    bridge = QtSessionBridge(session)
    phases = []
    bridge.phase_changed.connect(phases.append)

    session.refresh()
    # A late "loaded" notification for an older request arrives while this one is in flight.
    bridge.on_phase_changed(Phase.LOADED)

    assert phases == ["loading", "loading"]

    fn, args = queued.pop()
    fn(*args)
    assert phases[-1] == "loaded"
