"""
Tick Scheduler
==============
Runs a callback at a fixed period on a single background thread.
"""

import time
import logging
from threading import Thread, Event, Lock, current_thread
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Fixed-rate ticker.

    Ticks run one after another on the same thread, so they never overlap.
    If a tick overruns one or more periods the missed deadlines are skipped.
    stop() may be called from inside the callback.
    """

    JOIN_TIMEOUT = 2.0

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self.interval: Optional[float] = None
        self.ticks = 0
        self.skipped = 0
        self._on_tick: Optional[Callable[[], None]] = None
        self._stop_event = Event()
        self._lock = Lock()
        self._thread: Optional[Thread] = None

    @property
    def running(self) -> bool:
        thread = self._thread
        return (
            thread is not None
            and thread.is_alive()
            and not self._stop_event.is_set()
        )

    def start(self, interval: float, on_tick: Callable[[], None]):
        """
        Start ticking every `interval` seconds; the first tick fires after
        one full interval.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")

        if self._thread is not None:
            self.stop()

        self.interval = interval
        self._on_tick = on_tick
        self.ticks = 0
        self.skipped = 0
        self._stop_event = Event()
        self._thread = Thread(
            target=self._run,
            args=(self._stop_event,),
            daemon=True,
            name="Scheduler-Tick"
        )
        self._thread.start()
        logger.debug(f"Scheduler started ({interval}s)")

    def _run(self, stop_event: Event):
        next_deadline = self.clock() + self.interval

        while True:
            remaining = next_deadline - self.clock()
            if remaining > 0 and stop_event.wait(remaining):
                break

            # A tick begins only if stop() has not completed
            with self._lock:
                if stop_event.is_set():
                    break
                self.ticks += 1

            try:
                self._on_tick()
            except Exception as e:
                logger.exception(f"Tick error: {e}")

            next_deadline += self.interval
            now = self.clock()
            if now >= next_deadline:
                missed = int((now - next_deadline) // self.interval) + 1
                self.skipped += missed
                next_deadline += missed * self.interval
                logger.debug(f"Tick overran, skipped {missed} period(s)")

    def stop(self):
        """Stop ticking. Safe to call repeatedly and from within a tick."""
        with self._lock:
            self._stop_event.set()
            thread = self._thread

        if thread is None:
            return

        if thread is not current_thread():
            thread.join(timeout=self.JOIN_TIMEOUT)
            if thread.is_alive():
                logger.warning("Scheduler thread did not exit within timeout")

        logger.debug("Scheduler stopped")
