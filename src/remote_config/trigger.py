"""Periodic reload trigger."""

import threading
from datetime import timedelta
from typing import Callable, List, Optional, Union

from loguru import logger

Interval = Union[float, int, timedelta]


def to_seconds(interval: Interval) -> float:
    """Normalize an interval given as seconds or a timedelta."""
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


class ReloadTrigger:
    """Fires registered handlers every ``interval`` seconds until stopped.

    Each firing arms a fresh one-shot timer once the handlers return, so the
    interval is measured from the end of one firing to the start of the
    next, and a new interval or a stop takes effect at the next arming.

    ``block_until_idle`` lets a caller wait for handlers that are currently
    running, e.g. before a serverless runtime freezes the process.
    """

    def __init__(self, interval: Optional[Interval] = None, name: str = "reload-trigger"):
        self.name = name
        self._interval: Optional[float] = None
        if interval is not None:
            self._interval = self._validate(interval)
        self._handlers: List[Callable[[], None]] = []
        self._lock = threading.RLock()
        self._idle = threading.Condition(self._lock)
        self._active = 0
        self._local = threading.local()
        self._timer: Optional[threading.Timer] = None
        self._running = False

    @staticmethod
    def _validate(interval: Interval) -> float:
        seconds = to_seconds(interval)
        if seconds <= 0:
            raise ValueError(f"Reload interval must be positive, got {interval!r}")
        return seconds

    @property
    def interval(self) -> Optional[float]:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_triggering(self) -> bool:
        """True while handlers are executing."""
        return self._active > 0

    def on_triggered(self, handler: Callable[[], None]) -> None:
        """Register a handler called on every firing."""
        with self._lock:
            self._handlers.append(handler)

    def remove_handler(self, handler: Callable[[], None]) -> bool:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)
                return True
        return False

    def start(self, interval: Optional[Interval] = None) -> None:
        """Start firing periodically.

        Args:
            interval: Seconds or timedelta between firings. Defaults to the
                interval given at construction.
        """
        with self._lock:
            if interval is not None:
                self._interval = self._validate(interval)
            if self._interval is None:
                raise ValueError("A reload interval is required to start the trigger")
            if self._running:
                return
            self._running = True
            self._arm()
        logger.info(f"Started {self.name} (every {self._interval}s)")

    def change_interval(self, interval: Interval) -> None:
        """Use a new interval from the next arming on."""
        with self._lock:
            self._interval = self._validate(interval)

    def stop(self) -> None:
        """Stop future firings. A firing in progress runs to completion."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        logger.info(f"Stopped {self.name}")

    def block_until_idle(self, timeout: Optional[Interval] = None) -> bool:
        """Block until no firing is in progress.

        Returns immediately when idle. Firings running on the calling thread
        are not waited for, so a handler may call this without deadlocking.

        Returns:
            True if idle, False if the timeout elapsed first
        """
        seconds = to_seconds(timeout) if timeout is not None else None
        own = getattr(self._local, "depth", 0)
        with self._idle:
            return self._idle.wait_for(lambda: self._active <= own, seconds)

    def fire(self) -> None:
        """Run all handlers now, on the calling thread.

        A failing handler is logged and does not prevent the others from
        running.
        """
        with self._lock:
            handlers = list(self._handlers)
            self._active += 1
            self._local.depth = getattr(self._local, "depth", 0) + 1

        try:
            for handler in handlers:
                try:
                    handler()
                except Exception:
                    logger.exception(f"{self.name} handler {handler!r} failed")
        finally:
            with self._lock:
                self._active -= 1
                self._local.depth -= 1
                self._idle.notify_all()

    def _arm(self) -> None:
        timer = threading.Timer(self._interval, self._on_elapsed)
        timer.daemon = True
        timer.name = f"{self.name}-timer"
        self._timer = timer
        timer.start()
        logger.debug(f"{self.name} armed for {self._interval}s")

    def _on_elapsed(self) -> None:
        try:
            with self._lock:
                if not self._running or self._timer is not threading.current_thread():
                    return
            self.fire()
        finally:
            with self._lock:
                # a stop/start during the firing has already armed a new timer
                if self._running and self._timer is threading.current_thread():
                    self._arm()

    def __enter__(self) -> "ReloadTrigger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def __repr__(self) -> str:
        return (
            f"ReloadTrigger(name={self.name!r}, interval={self._interval}, "
            f"running={self._running})"
        )
