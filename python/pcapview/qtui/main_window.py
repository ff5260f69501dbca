"""Main Qt window for browsing a packet store."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QAbstractItemView,
    QDialog,
    QDialogButtonBox,
    QFileDialog,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QSplitter,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from ..fetch import Phase
from ..options import SessionOptions
from ..session import InspectionSession
from ..store import HttpPacketStore
from .packet_model import PacketTableModel, StreamTableModel
from .session_bridge import QtSessionBridge
from .upload_runner import UploadRunner

logger = logging.getLogger(__name__)


class StreamDialog(QDialog):
    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Follow Stream")
        self.resize(900, 450)
        self.model = StreamTableModel(self)

        layout = QVBoxLayout(self)
        self.title_label = QLabel()
        self.empty_label = QLabel("No packets in this stream.")
        self.table = QTableView()
        self.table.setModel(self.model)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setStretchLastSection(True)
        buttons = QDialogButtonBox(QDialogButtonBox.Close)
        buttons.rejected.connect(self.reject)

        layout.addWidget(self.title_label)
        layout.addWidget(self.table)
        layout.addWidget(self.empty_label)
        layout.addWidget(buttons)

    def show_stream(self, key: str, packets) -> None:
        self.title_label.setText(f"Follow Stream: {key}")
        self.model.set_packets(packets)
        self.empty_label.setVisible(not packets)
        self.table.setVisible(bool(packets))
        self.show()
        self.raise_()


class MainWindow(QMainWindow):
    """Packet table with filter, paging, details, byte dump and follow stream."""

    def __init__(self, options: Optional[SessionOptions] = None) -> None:
        super().__init__()
        self.setWindowTitle("PCAP Analyzer")
        self.resize(1200, 800)

        self._options = (options or SessionOptions()).validate()
        self._store = HttpPacketStore(
            self._options.base_url, timeout_s=self._options.request_timeout_s
        )
        self._bridge = QtSessionBridge(InspectionSession(self._store, self._options), self)
        self._upload_runner = UploadRunner(self._store, self)
        self._packet_model = PacketTableModel(self)
        self._stream_dialog = StreamDialog(self)
        self._upload_path: Optional[str] = None

        self._setup_ui()
        self._connect_signals()
        self._bridge.session.refresh()

    @property
    def session(self) -> InspectionSession:
        return self._bridge.session

    # ------------------------------------------------------------------
    def _setup_ui(self) -> None:
        container = QWidget(self)
        layout = QVBoxLayout(container)
        layout.setContentsMargins(12, 12, 12, 12)

        upload_row = QHBoxLayout()
        self.choose_button = QPushButton("Choose File")
        self.upload_button = QPushButton("Upload")
        self.upload_button.setEnabled(False)
        self.upload_label = QLabel()
        upload_row.addWidget(self.choose_button)
        upload_row.addWidget(self.upload_button)
        upload_row.addWidget(self.upload_label, 1)
        layout.addLayout(upload_row)

        query_row = QHBoxLayout()
        self.filter_line = QLineEdit()
        self.filter_line.setPlaceholderText("Filter packets...")
        self.prev_button = QPushButton("<")
        self.page_spin = QSpinBox()
        self.page_spin.setRange(1, 1)
        self.next_button = QPushButton(">")
        self.total_label = QLabel("of 1")
        self.follow_button = QPushButton("Follow Stream")
        self.follow_button.setEnabled(self._options.stream_enabled)
        query_row.addWidget(self.filter_line, 1)
        query_row.addWidget(self.prev_button)
        query_row.addWidget(self.page_spin)
        query_row.addWidget(self.total_label)
        query_row.addWidget(self.next_button)
        query_row.addWidget(self.follow_button)
        layout.addLayout(query_row)

        self.table = QTableView()
        self.table.setModel(self._packet_model)
        self.table.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SingleSelection)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self.table.horizontalHeader().setStretchLastSection(True)

        self.error_label = QLabel()
        self.error_label.setStyleSheet("color: #b00020;")
        self.error_label.setVisible(False)

        self.details_list = QListWidget()
        self.bytes_view = QPlainTextEdit()
        self.bytes_view.setReadOnly(True)
        self.bytes_view.setStyleSheet("font-family: monospace;")

        lower = QSplitter(Qt.Horizontal)
        lower.addWidget(self.details_list)
        lower.addWidget(self.bytes_view)
        splitter = QSplitter(Qt.Vertical)
        splitter.addWidget(self.table)
        splitter.addWidget(lower)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 2)

        layout.addWidget(self.error_label)
        layout.addWidget(splitter, 1)
        self.setCentralWidget(container)
        self.statusBar().showMessage("Loading packets...")

    def _connect_signals(self) -> None:
        self.choose_button.clicked.connect(self._on_choose_file)
        self.upload_button.clicked.connect(self._on_upload_clicked)
        self.filter_line.textChanged.connect(self.session.set_filter_text)
        self.prev_button.clicked.connect(self.session.previous_page)
        self.next_button.clicked.connect(self.session.next_page)
        self.page_spin.valueChanged.connect(self.session.set_page)
        self.follow_button.clicked.connect(self._on_follow_clicked)
        self.table.clicked.connect(lambda index: self.session.select_row(index.row()))
        self.details_list.itemClicked.connect(self._on_detail_clicked)
        self._stream_dialog.rejected.connect(self.session.close_stream)

        self._bridge.phase_changed.connect(self._on_phase_changed)
        self._bridge.page_loaded.connect(self._on_page_loaded)
        self._bridge.page_failed.connect(self._on_page_failed)
        self._bridge.view_changed.connect(self._on_view_changed)
        self._bridge.selection_changed.connect(self._on_selection_changed)
        self._bridge.stream_loaded.connect(self._on_stream_loaded)
        self._bridge.stream_failed.connect(self._on_stream_failed)
        self._bridge.stream_closed.connect(self._stream_dialog.hide)
        self._bridge.status_changed.connect(self.statusBar().showMessage)

        self._upload_runner.upload_started.connect(self._on_upload_started)
        self._upload_runner.upload_finished.connect(self._on_upload_finished)
        self._upload_runner.upload_failed.connect(self._on_upload_failed)

    # ------------------------------------------------------------------
    def _on_phase_changed(self, _phase: str) -> None:
        loading = self.session.phase is Phase.LOADING
        self.prev_button.setEnabled(not loading)
        self.next_button.setEnabled(not loading)
        self.page_spin.setEnabled(not loading)

    def _on_page_loaded(self) -> None:
        session = self.session
        self.error_label.setVisible(False)
        self.page_spin.blockSignals(True)
        self.page_spin.setRange(1, session.total_pages)
        self.page_spin.setValue(session.page)
        self.page_spin.blockSignals(False)
        self.total_label.setText(f"of {session.total_pages}")

    def _on_page_failed(self, message: str) -> None:
        self.error_label.setText(message)
        self.error_label.setVisible(True)

    def _on_view_changed(self) -> None:
        session = self.session
        packets = session.filtered_packets
        self._packet_model.set_packets(
            packets, [session.row_number(row) for row in range(len(packets))]
        )

    def _on_selection_changed(self) -> None:
        packet = self.session.selected_packet
        field = self.session.selected_field
        self.details_list.clear()
        if packet is None:
            self.bytes_view.clear()
            return
        for row in packet.detail_fields():
            item = QListWidgetItem(row.label)
            item.setData(Qt.UserRole, row.key)
            self.details_list.addItem(item)
            if field is not None and field.key == row.key:
                item.setSelected(True)
        self.bytes_view.setPlainText(packet.byte_dump() or "No Data Found")

    def _on_detail_clicked(self, item: QListWidgetItem) -> None:
        self.session.select_field(item.data(Qt.UserRole))

    def _on_follow_clicked(self) -> None:
        packet = self.session.selected_packet
        if packet is None:
            QMessageBox.information(self, "Follow Stream", "Select a packet first.")
            return
        self.session.follow_packet(packet)

    def _on_stream_loaded(self) -> None:
        session = self.session
        if session.stream_dialog_open:
            self._stream_dialog.show_stream(session.stream_key or "", session.stream_packets)

    def _on_stream_failed(self, message: str) -> None:
        QMessageBox.warning(self, "Follow Stream", message)

    # ------------------------------------------------------------------
    def _on_choose_file(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Select PCAP", "", "Captures (*.pcap *.pcapng *.cap);;All files (*)"
        )
        if not path:
            return
        self._upload_path = path
        self.upload_label.setText(f"Selected: {path}")
        self.upload_button.setEnabled(True)

    def _on_upload_clicked(self) -> None:
        if not self._upload_path:
            self.upload_label.setText("Please select a PCAP file.")
            return
        if self._upload_runner.start_upload(self._upload_path):
            self.upload_button.setEnabled(False)
            self.upload_label.setText("Uploading...")

    def _on_upload_started(self, name: str, packet_count: int) -> None:
        self.upload_label.setText(f"Uploading {name} ({packet_count} packets)...")

    def _on_upload_finished(self, message: str) -> None:
        self.upload_label.setText(message)
        self.upload_button.setEnabled(True)
        self.session.notify_ingest_completed()

    def _on_upload_failed(self, message: str) -> None:
        self.upload_label.setText(f"Failed to upload file: {message}")
        self.upload_button.setEnabled(True)

    # ------------------------------------------------------------------
    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802 - Qt API
        self._bridge.shutdown()
        super().closeEvent(event)


__all__ = ["MainWindow", "StreamDialog"]
