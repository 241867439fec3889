"""Recurring timer driving the poll ticks."""

import threading
import time
from typing import Callable


class RecurringTimer(threading.Thread):
    """Calls ``function`` every ``interval`` seconds until cancelled.

    Ticks are scheduled at a fixed rate from the start time, independent of
    how long each call takes. Ticks missed while a call was running are
    skipped rather than fired back to back. The first call happens one
    interval after ``start()``.
    """

    def __init__(
        self,
        interval: float,
        function: Callable[[], None],
        name: str = "poll-timer",
    ) -> None:
        super().__init__(name=name, daemon=True)
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self.function = function
        self.ticks = 0
        self._finished = threading.Event()

    def cancel(self) -> None:
        """Stop the timer; a call already running completes first."""
        self._finished.set()

    @property
    def cancelled(self) -> bool:
        return self._finished.is_set()

    def run(self) -> None:
        next_tick = time.monotonic() + self.interval
        while not self._finished.wait(max(0.0, next_tick - time.monotonic())):
            self.ticks += 1
            self.function()
            now = time.monotonic()
            next_tick += self.interval
            if next_tick <= now:
                missed = int((now - next_tick) // self.interval) + 1
                next_tick += missed * self.interval
