"""Model classes backing the packet and stream table views."""

from __future__ import annotations

from typing import List, Optional, Sequence

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QColor

from ..packet import OTHER_PROTOCOL, Packet

# Wireshark-style row colouring.
PROTOCOL_COLORS = {
    "TCP": "#B4FFB4",
    "UDP": "#B4D8FF",
    "ICMP": "#FFF4B4",
    "ARP": "#FFD1A4",
    "DNS": "#E4B4FF",
    OTHER_PROTOCOL: "#EAEAEA",
}


def row_color(packet: Packet) -> str:
    return PROTOCOL_COLORS.get(packet.protocol_bucket, PROTOCOL_COLORS[OTHER_PROTOCOL])


class PacketTableModel(QAbstractTableModel):
    """Qt table model showing one snapshot of packets."""

    headers = ["No.", "Time", "Source", "Destination", "Protocol", "Length", "Info"]

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self._rows: List[Packet] = []
        self._numbers: List[int] = []

    # ------------------------------------------------------------------
    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # noqa: N802 - Qt API
        if parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # noqa: N802 - Qt API
        if parent.isValid():
            return 0
        return len(self.headers)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # noqa: N802 - Qt API
        if not index.isValid() or not 0 <= index.row() < len(self._rows):
            return None

        packet = self._rows[index.row()]
        if role == Qt.DisplayRole:
            return self._display(index.row(), index.column(), packet)
        if role == Qt.BackgroundRole:
            return QColor(row_color(packet))
        if role == Qt.ForegroundRole:
            return QColor("#000000")
        return None

    def headerData(
        self,
        section: int,
        orientation: Qt.Orientation,
        role: int = Qt.DisplayRole,
    ):
        if role != Qt.DisplayRole:
            return None
        if orientation == Qt.Horizontal:
            if 0 <= section < len(self.headers):
                return self.headers[section]
        return None

    def _display(self, row: int, column: int, packet: Packet) -> Optional[str]:
        if column == 0:
            return str(self._numbers[row])
        if column == 1:
            return str(packet.timestamp)
        if column == 2:
            return packet.source
        if column == 3:
            return packet.destination
        if column == 4:
            return packet.protocol
        if column == 5:
            return str(packet.length)
        if column == 6:
            return packet.info or "N/A"
        return None

    # ------------------------------------------------------------------
    def set_packets(self, packets: Sequence[Packet], numbers: Optional[Sequence[int]] = None) -> None:
        """Replace every row; ``numbers`` defaults to 1..n."""
        self.beginResetModel()
        self._rows = list(packets)
        if numbers is None:
            self._numbers = list(range(1, len(self._rows) + 1))
        else:
            self._numbers = list(numbers)
        self.endResetModel()

    def clear(self) -> None:
        self.set_packets([])

    def packet_at(self, row: int) -> Optional[Packet]:
        if 0 <= row < len(self._rows):
            return self._rows[row]
        return None


class StreamTableModel(PacketTableModel):
    """Follow-stream rows: addressing plus the printable payload."""

    headers = ["No.", "Time", "Source", "Destination", "Payload"]

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # noqa: N802 - Qt API
        if role in (Qt.BackgroundRole, Qt.ForegroundRole):
            return None
        return super().data(index, role)

    def _display(self, row: int, column: int, packet: Packet) -> Optional[str]:
        if column == 4:
            return packet.payload_ascii or "No Data"
        return super()._display(row, column, packet)


__all__ = ["PROTOCOL_COLORS", "PacketTableModel", "StreamTableModel", "row_color"]
