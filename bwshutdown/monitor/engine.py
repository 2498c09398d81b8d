"""
Monitor Engine
==============
Wires counter reading, rate sampling and threshold detection under a
fixed-rate scheduler.

Every tick runs on the scheduler thread:
    sample -> record -> emit event
Display code reads through get_stats(), which only ever sees copies.
When the trigger fires the scheduler is halted, but the window is kept
until stop() so the final average can still be read.
"""

import logging
from datetime import datetime
from threading import Event
from typing import Callable, Optional

from ..config import MonitorConfig, ConfigError
from ..models import (
    BelowThreshold,
    MonitorEvent,
    SampleFailed,
    SessionStats,
)
from .counters import CounterReader, CounterReadError
from .sampler import RateSampler
from .threshold import ThresholdMonitor
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


class MonitorEngine:
    """
    Low-bandwidth detection engine.

    The event callback is invoked on the scheduler thread once per tick.
    It may call stop() on the engine.
    """

    def __init__(
        self,
        config: Optional[MonitorConfig] = None,
        reader: Optional[CounterReader] = None,
        event_callback: Optional[Callable[[MonitorEvent], None]] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.config = config or MonitorConfig()
        self.sampler = RateSampler(reader)
        self.monitor = ThresholdMonitor(self.sampler)
        self.scheduler = scheduler or Scheduler()
        self.event_callback = event_callback

        self.session = SessionStats()
        self.finished = Event()

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self, config: Optional[MonitorConfig] = None):
        """
        Start a monitoring session.

        Raises:
            ConfigError: invalid settings; nothing is started
        """
        config = config or self.config
        errors = config.validate()
        if errors:
            raise ConfigError(errors)

        self.config = config
        self.scheduler.stop()
        self.monitor.start(self.config)

        self.session = SessionStats(start_time=datetime.now().isoformat())
        self.finished.clear()
        self.scheduler.start(self.config.interval_seconds, self.tick)

    def tick(self) -> Optional[MonitorEvent]:
        """One sampling cycle. Returns the emitted event."""
        if not self.monitor.active or self.monitor.fired:
            return None

        try:
            rate = self.sampler.sample()
        except CounterReadError as e:
            logger.warning(f"Skipping tick: {e}")
            self.session.failed_ticks += 1
            event = SampleFailed(reason=str(e))
            self._emit(event)
            return event

        try:
            event = self.monitor.record(rate)
        except RuntimeError:
            # stop() landed between the sample and the record
            logger.debug("Monitor stopped during tick; sample discarded")
            return None

        self.session.record_rate(rate)
        self.session.final_average_kbps = event.average

        fired = isinstance(event, BelowThreshold)
        if fired:
            # Halt sampling; state is cleared only by an explicit stop()
            self.session.fired = True
            self.scheduler.stop()

        self._emit(event)

        if fired:
            self.finished.set()
        return event

    def _emit(self, event: MonitorEvent):
        if not self.event_callback:
            return
        try:
            self.event_callback(event)
        except Exception as e:
            logger.exception(f"Event callback error: {e}")

    def stop(self):
        """Stop sampling and clear monitor state. Idempotent."""
        self.scheduler.stop()
        self.monitor.stop()
        self.finished.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the trigger fires or the engine is stopped."""
        return self.finished.wait(timeout)

    def get_stats(self) -> dict:
        """Current figures for display (copy-on-read)."""
        status = self.monitor.status()
        return {
            'state': status.state.value,
            'rate_kbps': status.latest_rate,
            'average_kbps': status.average,
            'threshold_kbps': status.threshold_kbps,
            'samples': status.samples,
            'samples_required': status.samples_required,
            'below_threshold': status.below_threshold,
            'fired': status.fired,
        }

    def get_session_summary(self) -> dict:
        """Get final session summary."""
        return {
            'session': self.session.to_dict(),
            'stats': self.get_stats(),
            'config': {
                'threshold_kbps': self.config.threshold_kbps,
                'interval_seconds': self.config.interval_seconds,
                'delay_seconds': self.config.delay_seconds,
                'testing_mode': self.config.testing_mode,
            },
        }
