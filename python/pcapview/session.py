"""Packet inspection session controller."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import List, Optional, Sequence, Union

from .fetch import PageFetcher, Phase
from .filtering import derive_filtered
from .listeners import SessionListener
from .options import SessionOptions
from .packet import Packet, PacketField
from .query import QueryState
from .selection import SelectionState
from .store import HttpPacketStore, PacketStore
from .stream_key import StreamKey
from .stream_session import StreamSession

logger = logging.getLogger(__name__)


class InspectionSession:
    """Owns paging, filtering, selection and follow-stream state for one viewer.

    Requests run on ``executor``; their completions apply under the session
    lock, so state changes are serialised as if on a single thread. Only the
    newest page request may change the loaded page. External callers read
    snapshots through the accessors and change state through the operations
    below.
    """

    def __init__(
        self,
        store: PacketStore,
        options: Optional[SessionOptions] = None,
        *,
        executor: Optional[Executor] = None,
        listener: Optional[SessionListener] = None,
    ) -> None:
        self.options = (options or SessionOptions()).validate()
        self._store = store
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=self.options.max_workers,
            thread_name_prefix="pcapview-fetch",
        )
        self._lock = threading.RLock()
        self._listener = listener

        self._query = QueryState(limit=self.options.page_size)
        self._selection = SelectionState()
        self._filtered: List[Packet] = []
        self._pages = PageFetcher(
            store,
            self._query,
            self._executor,
            self._lock,
            dynamic_total_pages=self.options.dynamic_total_pages,
            fixed_total_pages=self.options.fixed_total_pages,
            on_started=lambda: self._emit("on_phase_changed", Phase.LOADING),
            on_commit=self._commit_page,
            on_loaded=self._page_loaded,
            on_failed=self._page_failed,
        )
        self._stream = StreamSession(
            store,
            self._executor,
            self._lock,
            page_size=self.options.stream_page_size,
            on_started=lambda: self._emit("on_stream_phase_changed", Phase.LOADING),
            on_loaded=self._stream_loaded,
            on_failed=self._stream_failed,
        )

    @classmethod
    def connect(
        cls,
        options: Optional[SessionOptions] = None,
        *,
        executor: Optional[Executor] = None,
        listener: Optional[SessionListener] = None,
    ) -> "InspectionSession":
        """Build a session talking to the HTTP store named in ``options``."""
        options = (options or SessionOptions()).validate()
        store = HttpPacketStore(options.base_url, timeout_s=options.request_timeout_s)
        return cls(store, options, executor=executor, listener=listener)

    # ------------------------------------------------------------------
    def __enter__(self) -> "InspectionSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)
        close_store = getattr(self._store, "close", None)
        if callable(close_store):
            close_store()

    def set_listener(self, listener: Optional[SessionListener]) -> None:
        with self._lock:
            self._listener = listener

    # Page operations ----------------------------------------------------
    def refresh(self) -> int:
        """Reload the current page; supersedes any request still in flight."""
        with self._lock:
            page, limit = self._query.page, self._query.limit
        return self._pages.refresh(page, limit)

    def set_page(self, page: int) -> bool:
        """Go to ``page`` (clamped to the known range); fetch only if it changed."""
        with self._lock:
            changed = self._query.set_page(page)
        if changed:
            self.refresh()
        return changed

    def next_page(self) -> bool:
        with self._lock:
            target = self._query.page + 1
        return self.set_page(target)

    def previous_page(self) -> bool:
        with self._lock:
            target = self._query.page - 1
        return self.set_page(target)

    def set_filter_text(self, text: str) -> bool:
        with self._lock:
            changed = self._query.set_filter_text(text)
            if changed:
                self._filtered = derive_filtered(self._pages.packets, self._query.filter_text)
        if changed:
            self._emit("on_view_changed")
        return changed

    def notify_ingest_completed(self) -> int:
        """React to a finished capture upload by reloading the current page."""
        logger.info("Capture ingestion finished; refreshing packets")
        return self.refresh()

    # Stream operations --------------------------------------------------
    def open_stream(self, key: Union[str, StreamKey]) -> Optional[int]:
        if not self.options.stream_enabled:
            logger.warning("Follow stream is disabled; ignoring request for %s", key)
            return None
        return self._stream.open(key)

    def follow_packet(self, packet: Packet) -> Optional[int]:
        key = StreamKey.from_packet(packet, canonical=self.options.canonical_stream_keys)
        return self.open_stream(key)

    def close_stream(self) -> bool:
        closed = self._stream.close()
        if closed:
            self._emit("on_stream_phase_changed", self._stream.phase)
            self._emit("on_stream_closed")
        return closed

    # Selection operations -----------------------------------------------
    def select_packet(self, packet: Packet) -> bool:
        with self._lock:
            if packet not in self._pages.packets:
                logger.warning("Refusing to select a packet that is not on the loaded page")
                return False
            self._selection.select(packet)
        self._emit("on_selection_changed")
        return True

    def select_row(self, row: int) -> bool:
        """Select by position in the filtered view."""
        with self._lock:
            if not 0 <= row < len(self._filtered):
                return False
            self._selection.select(self._filtered[row])
        self._emit("on_selection_changed")
        return True

    def select_field(self, key: str) -> bool:
        with self._lock:
            selected = self._selection.select_field(key)
        if selected:
            self._emit("on_selection_changed")
        return selected

    def clear_selection(self) -> bool:
        with self._lock:
            cleared = self._selection.clear()
        if cleared:
            self._emit("on_selection_changed")
        return cleared

    # Accessors ----------------------------------------------------------
    @property
    def page(self) -> int:
        with self._lock:
            return self._query.page

    @property
    def limit(self) -> int:
        return self._query.limit

    @property
    def total_pages(self) -> int:
        with self._lock:
            return self._query.total_pages

    @property
    def filter_text(self) -> str:
        with self._lock:
            return self._query.filter_text

    @property
    def packets(self) -> Sequence[Packet]:
        with self._lock:
            return self._pages.packets

    @property
    def filtered_packets(self) -> Sequence[Packet]:
        with self._lock:
            return tuple(self._filtered)

    @property
    def phase(self) -> Phase:
        with self._lock:
            return self._pages.phase

    @property
    def error_message(self) -> Optional[str]:
        with self._lock:
            return self._pages.error_message

    @property
    def selected_packet(self) -> Optional[Packet]:
        with self._lock:
            return self._selection.packet

    @property
    def selected_field(self) -> Optional[PacketField]:
        with self._lock:
            return self._selection.field

    @property
    def stream_dialog_open(self) -> bool:
        with self._lock:
            return self._stream.dialog_open

    @property
    def stream_packets(self) -> Sequence[Packet]:
        with self._lock:
            return self._stream.packets

    @property
    def stream_key(self) -> Optional[str]:
        with self._lock:
            return self._stream.key

    @property
    def stream_phase(self) -> Phase:
        with self._lock:
            return self._stream.phase

    @property
    def stream_error_message(self) -> Optional[str]:
        with self._lock:
            return self._stream.error_message

    def row_number(self, row: int) -> int:
        """Packet number shown for ``row`` of the filtered view."""
        with self._lock:
            if 0 <= row < len(self._filtered) and self._filtered[row].index is not None:
                return self._filtered[row].index
            return row + 1 + (self._shown_page() - 1) * self._query.limit

    def status_text(self) -> str:
        with self._lock:
            loaded = len(self._pages.packets)
            if self._query.filter_text:
                count = f"{len(self._filtered)}/{loaded}"
            else:
                count = str(loaded)
            selected = self._selection.packet
            if selected is None:
                selected_label = "None"
            elif selected.index is None:
                selected_label = f"Packet {selected.source} -> {selected.destination}"
            else:
                selected_label = f"Packet {selected.index}"
            shown = self._shown_page()
            page_label = f"{shown} of {self._query.total_pages}"
            if self._query.page != shown:
                page_label += f" (requested {self._query.page})"
            return f"Packets: {count} | Page: {page_label} | Selected: {selected_label}"

    def _shown_page(self) -> int:
        # The records on screen may still be those of an earlier page.
        loaded = self._pages.loaded_page
        return self._query.page if loaded is None else loaded

    # Completion hooks ---------------------------------------------------
    def _commit_page(self) -> None:
        # Runs under the lock together with the page swap.
        self._selection.clear()
        self._filtered = derive_filtered(self._pages.packets, self._query.filter_text)

    def _page_loaded(self) -> None:
        self._emit("on_phase_changed", Phase.LOADED)
        self._emit("on_page_loaded")
        self._emit("on_selection_changed")
        self._emit("on_view_changed")

    def _page_failed(self, message: str) -> None:
        self._emit("on_phase_changed", Phase.FAILED)
        self._emit("on_page_failed", message)

    def _stream_loaded(self) -> None:
        self._emit("on_stream_phase_changed", Phase.LOADED)
        self._emit("on_stream_loaded")

    def _stream_failed(self, message: str) -> None:
        self._emit("on_stream_phase_changed", Phase.FAILED)
        self._emit("on_stream_failed", message)

    def _emit(self, name: str, *args) -> None:
        with self._lock:
            listener = self._listener
        if listener is None:
            return
        callback = getattr(listener, name, None)
        if callback is not None:
            callback(*args)


__all__ = ["InspectionSession"]
