"""Cancellable timers driven by an explicit clock.

Nothing here runs on its own: the owner calls :meth:`Scheduler.run_due`
once per frame and every due callback fires on that call, in due-time
order.  This keeps all state mutation on the frame loop.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator

Clock = Callable[[], float]


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass(eq=False)
class TimerHandle:
    due: float
    callback: Callable[[], None]
    interval: float | None = None
    name: str = ""
    cancelled: bool = field(default=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """Holds pending timers for one game session."""

    def __init__(self, clock: Clock = monotonic_ms) -> None:
        self._clock = clock
        self._timers: list[TimerHandle] = []
        self._firing_at: float | None = None

    # -- time -----------------------------------------------------------------

    @property
    def now(self) -> float:
        """Current time; inside a callback, the due time of that callback."""
        if self._firing_at is not None:
            return self._firing_at
        return self._clock()

    @contextmanager
    def at(self, now: float) -> Iterator[None]:
        """Treat *now* as the current time for work done inside the block."""
        previous = self._firing_at
        self._firing_at = now
        try:
            yield
        finally:
            self._firing_at = previous

    # -- scheduling -----------------------------------------------------------

    def call_later(
        self, delay_ms: float, callback: Callable[[], None], name: str = ""
    ) -> TimerHandle:
        handle = TimerHandle(self.now + delay_ms, callback, name=name)
        self._timers.append(handle)
        return handle

    def call_every(
        self, interval_ms: float, callback: Callable[[], None], name: str = ""
    ) -> TimerHandle:
        if interval_ms <= 0:
            raise ValueError(f"Interval must be positive, got {interval_ms}.")
        handle = TimerHandle(
            self.now + interval_ms, callback, interval=interval_ms, name=name
        )
        self._timers.append(handle)
        return handle

    def cancel_all(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers.clear()

    @property
    def pending(self) -> int:
        return sum(1 for h in self._timers if not h.cancelled)

    # -- firing ---------------------------------------------------------------

    def run_due(self, now: float | None = None) -> int:
        """Fire every timer due at or before *now*.  Returns the count fired."""
        if now is None:
            now = self._clock()
        fired = 0
        while True:
            self._timers = [h for h in self._timers if not h.cancelled]
            due = [h for h in self._timers if h.due <= now]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            if handle.interval is None:
                self._timers.remove(handle)
                handle.cancelled = True
            with self.at(handle.due):
                handle.callback()
            if handle.interval is not None and not handle.cancelled:
                handle.due += handle.interval
            fired += 1
        return fired
