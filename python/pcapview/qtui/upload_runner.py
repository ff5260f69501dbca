"""Background capture uploads for the Qt operator console."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QObject, Signal

from ..capture_file import inspect_capture
from ..store import PacketStore

logger = logging.getLogger(__name__)


class UploadRunner(QObject):
    """Uploads one capture at a time on a worker thread and reports via signals."""

    upload_started = Signal(str, int)
    upload_finished = Signal(str)
    upload_failed = Signal(str)

    def __init__(self, store: PacketStore, parent=None) -> None:
        super().__init__(parent)
        self._store = store
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.RLock()
        self._running = False

    # ------------------------------------------------------------------
    def start_upload(self, pcap_path: str) -> bool:
        with self._lock:
            if self._running:
                return False
            self._running = True

        self._thread = threading.Thread(
            target=self._run_upload,
            args=(pcap_path,),
            name="pcapview-upload",
            daemon=True,
        )
        self._thread.start()
        return True

    def is_running(self) -> bool:
        with self._lock:
            return self._running

    # ------------------------------------------------------------------
    def _run_upload(self, pcap_path: str) -> None:
        try:
            summary = inspect_capture(Path(pcap_path).expanduser().resolve())
            self.upload_started.emit(summary.path.name, summary.packet_count)
            ack = self._store.ingest(summary.path)
            message = str(ack.get("message") or "File uploaded successfully")
            logger.info("Upload of %s accepted: %s", summary.path.name, message)
            self.upload_finished.emit(message)
        except Exception as exc:  # pragma: no cover - protects against runtime errors
            logger.error("Upload of %s failed: %s", pcap_path, exc)
            self.upload_failed.emit(str(exc))
        finally:
            with self._lock:
                self._running = False


__all__ = ["UploadRunner"]
