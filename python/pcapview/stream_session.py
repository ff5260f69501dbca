"""Follow-stream sub-session, independent of the primary page fetch."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor
from typing import Callable, List, Optional, Sequence, Union

from .fetch import GuardedFetch, Notifier, Phase
from .packet import Packet
from .store import PacketPage, PacketStore
from .stream_key import StreamKey

logger = logging.getLogger(__name__)

DEFAULT_STREAM_PAGE_SIZE = 50


class StreamSession:
    """Loads every packet of one conversation and tracks the dialog flag.

    Closing the dialog supersedes an in-flight request, so a late answer for
    a stream the operator already dismissed never reopens it.
    """

    def __init__(
        self,
        store: PacketStore,
        executor: Executor,
        lock: threading.RLock,
        *,
        page_size: int = DEFAULT_STREAM_PAGE_SIZE,
        on_started: Optional[Callable[[], None]] = None,
        on_loaded: Optional[Callable[[], None]] = None,
        on_failed: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._store = store
        self._lock = lock
        self._fetch = GuardedFetch(
            "stream",
            executor,
            lock,
            on_started=on_started,
        )
        self.page_size = page_size
        self._on_loaded = on_loaded
        self._on_failed = on_failed
        self._packets: List[Packet] = []
        self._key: Optional[str] = None
        self._requested_key: Optional[str] = None
        self._dialog_open = False

    # ------------------------------------------------------------------
    @property
    def phase(self) -> Phase:
        return self._fetch.cycle.phase

    @property
    def error_message(self) -> Optional[str]:
        return self._fetch.cycle.error

    @property
    def packets(self) -> Sequence[Packet]:
        return tuple(self._packets)

    @property
    def key(self) -> Optional[str]:
        """Key of the stream whose packets are currently held."""
        return self._key

    @property
    def requested_key(self) -> Optional[str]:
        return self._requested_key

    @property
    def dialog_open(self) -> bool:
        return self._dialog_open

    # ------------------------------------------------------------------
    def open(self, key: Union[str, StreamKey]) -> int:
        text = str(key)
        with self._lock:
            self._requested_key = text
        logger.info("Following stream %s", text)
        return self._fetch.start(
            lambda: self._store.list_stream(text, 1, self.page_size),
            lambda result: self._apply(text, result),
            self._fail,
            describe=lambda reason: f"Failed to load stream {text}: {reason}",
        )

    def close(self) -> bool:
        """Hide the dialog; return True if it was open or a request was pending."""
        with self._lock:
            was_open = self._dialog_open
            self._dialog_open = False
            cancelled = self._fetch.cycle.invalidate()
        if cancelled:
            logger.info("Dropped pending stream request for %s", self._requested_key)
        return was_open or cancelled

    # ------------------------------------------------------------------
    def _apply(self, key: str, result: PacketPage) -> Notifier:
        # Store order is chronological; never re-sort.
        self._packets = list(result.packets)
        self._key = key
        self._dialog_open = True
        logger.info("Loaded %d packets for stream %s", len(self._packets), key)
        return self._on_loaded

    def _fail(self, message: str) -> Notifier:
        logger.error(message)
        if self._on_failed is None:
            return None
        return lambda: self._on_failed(message)


__all__ = ["DEFAULT_STREAM_PAGE_SIZE", "StreamSession"]
