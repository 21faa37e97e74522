"""Process-wide admission control for outbound provider calls."""

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class AdmissionGate:
    """Bounds concurrency and spacing of calls to one upstream account.

    At most ``max_concurrent`` callers hold a slot at once, and successive
    admissions are at least ``min_interval`` seconds apart. Admission order
    follows whoever reserves a spacing slot first; there is no FIFO queue.
    """

    def __init__(
        self,
        min_interval: float = 0.066,
        max_concurrent: int = 5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self.min_interval = min_interval
        self.max_concurrent = max_concurrent
        self._clock = clock
        self._sleep = sleep
        self._slots = threading.BoundedSemaphore(max_concurrent)
        self._lock = threading.Lock()
        self._next_start: float | None = None
        self._in_flight = 0

    @classmethod
    def from_config(cls, min_interval_ms: int, max_concurrent: int) -> "AdmissionGate":
        return cls(min_interval=min_interval_ms / 1000.0, max_concurrent=max_concurrent)

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @contextmanager
    def admit(self) -> Iterator[None]:
        """Block until a call may start; the slot is released on exit."""
        self._slots.acquire()
        try:
            delay = self._reserve_start()
            if delay > 0:
                logger.debug("Admission delayed %.3fs", delay)
                self._sleep(delay)
            with self._lock:
                self._in_flight += 1
            try:
                yield
            finally:
                with self._lock:
                    self._in_flight -= 1
        finally:
            self._slots.release()

    def _reserve_start(self) -> float:
        """Claim the next start time and return how long to wait for it."""
        with self._lock:
            now = self._clock()
            start = now if self._next_start is None else max(now, self._next_start)
            self._next_start = start + self.min_interval
            return start - now
