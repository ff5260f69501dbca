"""Qt-aware bridge around the inspection session."""

from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from ..fetch import Phase
from ..session import InspectionSession

logger = logging.getLogger(__name__)


class QtSessionBridge(QObject):
    """Listens to an :class:`InspectionSession` and re-emits events as Qt signals.

    Session callbacks arrive on fetch worker threads; Qt queues the signals
    to receivers living on the GUI thread.
    """

    phase_changed = Signal(str)
    page_loaded = Signal()
    page_failed = Signal(str)
    view_changed = Signal()
    selection_changed = Signal()
    stream_phase_changed = Signal(str)
    stream_loaded = Signal()
    stream_failed = Signal(str)
    stream_closed = Signal()
    status_changed = Signal(str)

    def __init__(self, session: InspectionSession, parent=None) -> None:
        super().__init__(parent)
        self._session: Optional[InspectionSession] = session
        session.set_listener(self)

    @property
    def session(self) -> InspectionSession:
        if self._session is None:
            raise RuntimeError("Session bridge has been shut down")
        return self._session

    def shutdown(self) -> None:
        session = self._session
        self._session = None
        if session is None:
            return
        session.set_listener(None)
        try:
            session.close()
        except Exception:  # pragma: no cover - close failures depend on runtime environment
            logger.exception("Error closing inspection session")

    # ------------------------------------------------------------------
    def on_phase_changed(self, phase: Phase) -> None:
        # Notifications of two requests can interleave; report the phase in effect now.
        session = self._session
        current = phase if session is None else session.phase
        self.phase_changed.emit(current.value)
        self._emit_status()

    def on_page_loaded(self) -> None:
        self.page_loaded.emit()

    def on_page_failed(self, message: str) -> None:
        self.page_failed.emit(message)

    def on_view_changed(self) -> None:
        self.view_changed.emit()
        self._emit_status()

    def on_selection_changed(self) -> None:
        self.selection_changed.emit()
        self._emit_status()

    def on_stream_phase_changed(self, phase: Phase) -> None:
        self.stream_phase_changed.emit(phase.value)

    def on_stream_loaded(self) -> None:
        self.stream_loaded.emit()

    def on_stream_failed(self, message: str) -> None:
        self.stream_failed.emit(message)

    def on_stream_closed(self) -> None:
        self.stream_closed.emit()

    def _emit_status(self) -> None:
        if self._session is not None:
            self.status_changed.emit(self._session.status_text())


__all__ = ["QtSessionBridge"]
