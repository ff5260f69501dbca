"""Listener interface for session state changes."""

from __future__ import annotations

from typing import Protocol

from .fetch import Phase


class SessionListener(Protocol):
    """Receives session notifications, on whichever thread settled a request.

    Callbacks run after the session lock is released; read the session's
    accessors for the new state.
    """

    def on_phase_changed(self, phase: Phase) -> None:  # pragma: no cover - protocol definition
        ...

    def on_page_loaded(self) -> None:  # pragma: no cover - protocol definition
        ...

    def on_page_failed(self, message: str) -> None:  # pragma: no cover - protocol definition
        ...

    def on_view_changed(self) -> None:  # pragma: no cover - protocol definition
        ...

    def on_selection_changed(self) -> None:  # pragma: no cover - protocol definition
        ...

    def on_stream_phase_changed(self, phase: Phase) -> None:  # pragma: no cover - protocol definition
        ...

    def on_stream_loaded(self) -> None:  # pragma: no cover - protocol definition
        ...

    def on_stream_failed(self, message: str) -> None:  # pragma: no cover - protocol definition
        ...

    def on_stream_closed(self) -> None:  # pragma: no cover - protocol definition
        ...


__all__ = ["SessionListener"]
