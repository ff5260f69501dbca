"""Asynchronous fetch cycles guarded against stale responses."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from enum import Enum
from typing import Callable, List, Optional, Sequence, TypeVar

from .errors import PacketStoreError
from .packet import Packet
from .query import QueryState
from .store import PacketPage, PacketStore

logger = logging.getLogger(__name__)

T = TypeVar("T")
Notifier = Optional[Callable[[], None]]


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class ImmediateExecutor(Executor):
    """Runs submitted work inline on the calling thread."""

    def submit(self, fn, /, *args, **kwargs) -> Future:  # type: ignore[override]
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:  # pragma: no cover - worker functions settle their own errors
            future.set_exception(exc)
        return future


class FetchCycle:
    """Phase tracking with a monotonically increasing request sequence.

    Only the most recently issued sequence may settle the cycle; answers for
    older sequences are superseded and must be dropped by the caller.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._latest = 0
        self._phase = Phase.IDLE
        self._error: Optional[str] = None

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def latest_sequence(self) -> int:
        return self._latest

    def begin(self) -> int:
        self._latest += 1
        self._phase = Phase.LOADING
        self._error = None
        return self._latest

    def is_current(self, sequence: int) -> bool:
        return sequence == self._latest

    def succeed(self, sequence: int) -> bool:
        if not self.is_current(sequence):
            return False
        self._phase = Phase.LOADED
        self._error = None
        return True

    def fail(self, sequence: int, message: str) -> bool:
        if not self.is_current(sequence):
            return False
        self._phase = Phase.FAILED
        self._error = message
        return True

    def invalidate(self) -> bool:
        """Supersede any in-flight request; return True if one was loading."""
        self._latest += 1
        if self._phase is Phase.LOADING:
            self._phase = Phase.IDLE
            return True
        return False


class GuardedFetch:
    """Runs one kind of request on an executor and applies only the newest answer.

    ``apply`` receives the result and ``failed`` the described error message.
    Both run under ``lock`` and may return a notifier, which is called after
    the lock is released. A ``describe`` passed to ``start`` replaces the
    default wording for that request only.
    """

    def __init__(
        self,
        name: str,
        executor: Executor,
        lock: threading.RLock,
        *,
        describe: Optional[Callable[[str], str]] = None,
        on_started: Optional[Callable[[], None]] = None,
    ) -> None:
        self.cycle = FetchCycle(name)
        self._executor = executor
        self._lock = lock
        self._describe = describe or (lambda reason: reason)
        self._on_started = on_started

    def start(
        self,
        call: Callable[[], T],
        apply: Callable[[T], Notifier],
        failed: Callable[[str], Notifier],
        describe: Optional[Callable[[str], str]] = None,
    ) -> int:
        with self._lock:
            sequence = self.cycle.begin()
        if self._on_started is not None:
            self._on_started()
        self._executor.submit(
            self._run, sequence, call, apply, failed, describe or self._describe
        )
        return sequence

    def _run(
        self,
        sequence: int,
        call: Callable[[], T],
        apply: Callable[[T], Notifier],
        failed: Callable[[str], Notifier],
        describe: Callable[[str], str],
    ) -> None:
        try:
            result = call()
        except PacketStoreError as exc:
            self._settle_failure(sequence, str(exc), failed, describe)
            return
        except Exception as exc:  # pragma: no cover - protects the cycle from programming errors
            logger.exception("Unexpected error during %s request #%d", self.cycle.name, sequence)
            self._settle_failure(sequence, f"unexpected error: {exc}", failed, describe)
            return

        with self._lock:
            if not self.cycle.succeed(sequence):
                logger.debug("Discarding stale %s response #%d", self.cycle.name, sequence)
                return
            notifier = apply(result)
        if notifier is not None:
            notifier()

    def _settle_failure(
        self,
        sequence: int,
        reason: str,
        failed: Callable[[str], Notifier],
        describe: Callable[[str], str],
    ) -> None:
        with self._lock:
            message = describe(reason)
            if not self.cycle.fail(sequence, message):
                logger.debug("Discarding stale %s failure #%d: %s", self.cycle.name, sequence, reason)
                return
            notifier = failed(message)
        if notifier is not None:
            notifier()


class PageFetcher:
    """Fetch orchestrator for the primary packet page.

    Owns the loaded page of packets and is the only writer of
    ``QueryState.total_pages``. A failed request keeps the previous page.
    """

    def __init__(
        self,
        store: PacketStore,
        query: QueryState,
        executor: Executor,
        lock: threading.RLock,
        *,
        dynamic_total_pages: bool = True,
        fixed_total_pages: int = 5,
        on_started: Optional[Callable[[], None]] = None,
        on_commit: Optional[Callable[[], None]] = None,
        on_loaded: Optional[Callable[[], None]] = None,
        on_failed: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._store = store
        self._query = query
        self._lock = lock
        self._fetch = GuardedFetch(
            "page",
            executor,
            lock,
            describe=lambda reason: f"Failed to load packets: {reason}",
            on_started=on_started,
        )
        self._dynamic_total_pages = dynamic_total_pages
        self._fixed_total_pages = fixed_total_pages
        self._on_commit = on_commit
        self._on_loaded = on_loaded
        self._on_failed = on_failed
        self._packets: List[Packet] = []
        self._loaded_page: Optional[int] = None

        if not dynamic_total_pages:
            query.update_total_pages(fixed_total_pages)

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
    def loaded_page(self) -> Optional[int]:
        return self._loaded_page

    # ------------------------------------------------------------------
    def refresh(self, page: int, limit: int) -> int:
        logger.info("Requesting packets page=%d limit=%d", page, limit)
        return self._fetch.start(
            lambda: self._store.list_packets(page, limit),
            lambda result: self._apply(page, result),
            self._fail,
        )

    def _apply(self, page: int, result: PacketPage) -> Notifier:
        self._packets = list(result.packets)
        self._loaded_page = page
        moved = False
        if self._dynamic_total_pages:
            if result.total_pages is not None:
                moved = self._query.update_total_pages(result.total_pages)
            elif self._query.total_pages < self._fixed_total_pages:
                # Bare arrays carry no page count; page with the fixed pager instead.
                moved = self._query.update_total_pages(self._fixed_total_pages)
        logger.info(
            "Loaded %d packets for page %d (total pages %d)",
            len(self._packets),
            page,
            self._query.total_pages,
        )
        if self._on_commit is not None:
            self._on_commit()

        def notify() -> None:
            if self._on_loaded is not None:
                self._on_loaded()
            if moved:
                with self._lock:
                    target, limit = self._query.page, self._query.limit
                logger.info("Page %d is past the last page; reloading page %d", page, target)
                self.refresh(target, limit)

        return notify

    def _fail(self, message: str) -> Notifier:
        logger.error(message)
        if self._on_failed is None:
            return None
        return lambda: self._on_failed(message)


__all__ = ["FetchCycle", "GuardedFetch", "ImmediateExecutor", "PageFetcher", "Phase"]
