"""Cancellation token source for a single wizard prompt phase."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """Read-only view of a :class:`CancellationTokenSource`.

    Safe to poll from any thread.  Steps that run long operations may
    pass the token along and check ``is_cancellation_requested``.
    """

    def __init__(self, source: CancellationTokenSource):
        self._source = source

    @property
    def is_cancellation_requested(self) -> bool:
        return self._source._event.is_set()

    def on_cancellation_requested(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register *callback*; returns a callable that unregisters it.

        If cancellation was already requested the callback runs immediately.
        """
        return self._source._add_listener(callback)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancellation is requested or *timeout* elapses."""
        return self._source._event.wait(timeout)


class CancellationTokenSource:
    """Owns a cancellation signal and hands out tokens for it."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._listeners: list[Callable[[], None]] = []
        self._disposed = False
        self.token = CancellationToken(self)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def cancel(self) -> None:
        """Request cancellation.  Idempotent; ignored after ``dispose()``."""
        with self._lock:
            if self._disposed or self._event.is_set():
                return
            self._event.set()
            listeners = list(self._listeners)

        logger.debug("Cancellation requested (%d listener(s))", len(listeners))
        for listener in listeners:
            listener()

    def dispose(self) -> None:
        with self._lock:
            self._disposed = True
            self._listeners.clear()

    def _add_listener(self, callback: Callable[[], None]) -> Callable[[], None]:
        with self._lock:
            fire_now = self._event.is_set()
            if not fire_now and not self._disposed:
                self._listeners.append(callback)

        if fire_now:
            callback()

        def _remove() -> None:
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return _remove
