"""One-shot change tokens.

A ``ChangeToken`` fires exactly once. Consumers that want to observe every
change re-subscribe to a fresh token after each firing; ``on_change`` does
that bookkeeping for them.
"""

import threading
from typing import Callable, List, Optional

from loguru import logger


class ChangeToken:
    """Single-shot notification handle."""

    def __init__(self):
        self._fired = threading.Event()
        self._callbacks: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def has_changed(self) -> bool:
        """True once the token has fired."""
        return self._fired.is_set()

    def register_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback invoked when the token fires.

        If the token already fired, the callback runs immediately.

        Args:
            callback: Zero-argument callable

        Returns:
            A function that removes the callback again
        """
        with self._lock:
            if not self._fired.is_set():
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)

        callback()
        return lambda: None

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the token fires.

        Returns:
            True if the token fired, False if the timeout elapsed first
        """
        return self._fired.wait(timeout)

    def fire(self) -> None:
        """Fire the token. Subsequent calls are no-ops."""
        with self._lock:
            if self._fired.is_set():
                return
            self._fired.set()
            callbacks, self._callbacks = self._callbacks, []

        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception(f"Change callback {callback!r} failed")

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def __repr__(self) -> str:
        return f"ChangeToken(has_changed={self.has_changed})"


class ChangeRegistration:
    """Subscription created by ``on_change``. Dispose to stop listening."""

    def __init__(
        self,
        producer: Callable[[], ChangeToken],
        consumer: Callable[[], None],
    ):
        self._producer = producer
        self._consumer = consumer
        self._lock = threading.Lock()
        self._disposed = False
        self._unregister: Callable[[], None] = lambda: None
        self._subscribe()

    def _subscribe(self) -> None:
        token = self._producer()
        with self._lock:
            if self._disposed:
                return
            self._unregister = token.register_callback(self._on_fired)

    def _on_fired(self) -> None:
        if self._disposed:
            return
        try:
            self._consumer()
        finally:
            self._subscribe()

    def dispose(self) -> None:
        with self._lock:
            self._disposed = True
            unregister = self._unregister
        unregister()

    def __enter__(self) -> "ChangeRegistration":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()


def on_change(
    producer: Callable[[], ChangeToken],
    consumer: Callable[[], None],
) -> ChangeRegistration:
    """Invoke ``consumer`` on every change signalled by tokens from ``producer``.

    Example:
        with on_change(provider.get_reload_token, lambda: print("changed")):
            provider.load()
    """
    return ChangeRegistration(producer, consumer)
