"""
Threshold Monitor
=================
Decides, one sample at a time, whether the windowed average has stayed
below threshold for a full window.

States:
    IDLE        no window contents, no snapshot history
    MONITORING  window filling or full; may be "fired" after a trigger

Once BelowThreshold has been emitted the monitor keeps its window and
average so the caller can read them; only stop() clears them.
"""

import logging
from threading import Lock
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .sampler import RateSampler

from ..config import MonitorConfig, ConfigError
from ..models import MonitorState, MonitorStatus, Nominal, BelowThreshold
from .window import SlidingWindow

logger = logging.getLogger(__name__)


class ThresholdMonitor:
    """
    Sliding-window low-bandwidth detector.

    All mutation happens from record()/start()/stop(); status() returns a
    copy taken under the same lock so display code never sees a window
    in the middle of an update.
    """

    def __init__(self, sampler: Optional["RateSampler"] = None):
        """
        Args:
            sampler: Sampler whose snapshot history is reset on start/stop
        """
        self.sampler = sampler
        self.state = MonitorState.IDLE
        self.config: Optional[MonitorConfig] = None
        self.window: Optional[SlidingWindow] = None
        self.samples_required = 0
        self.fired = False
        self.latest_rate = 0.0
        self._lock = Lock()

    @property
    def active(self) -> bool:
        return self.state is MonitorState.MONITORING

    def start(self, config: MonitorConfig):
        """
        Begin a monitoring session.

        Raises:
            ConfigError: config failed validation; monitor stays IDLE
        """
        errors = config.validate()
        if errors:
            raise ConfigError(errors)

        with self._lock:
            self.config = config
            self.samples_required = config.samples_required
            self.window = SlidingWindow(self.samples_required)
            self.fired = False
            self.latest_rate = 0.0
            self.state = MonitorState.MONITORING

        if self.sampler:
            self.sampler.reset()

        logger.info(
            f"Monitoring started: threshold={config.threshold_kbps} KB/s, "
            f"interval={config.interval_seconds}s, delay={config.delay_seconds}s, "
            f"window={self.samples_required} samples"
        )

    def record(self, rate: float) -> Union[Nominal, BelowThreshold]:
        """
        Push one sample and evaluate the window.

        Returns:
            BelowThreshold when the window is full and its average is
            below threshold, otherwise Nominal

        Raises:
            RuntimeError: not monitoring, or already fired this session
        """
        with self._lock:
            if self.state is not MonitorState.MONITORING:
                raise RuntimeError("record() called while monitor is idle")
            if self.fired:
                raise RuntimeError("record() called after the trigger fired")

            self.window.push(rate)
            self.latest_rate = rate
            average = self.window.average()
            count = self.window.count()

            if count >= self.samples_required and average < self.config.threshold_kbps:
                self.fired = True
                event = BelowThreshold(
                    average=average,
                    samples=count,
                    testing_mode=self.config.testing_mode,
                )
            else:
                event = Nominal(rate=rate, average=average, samples=count)

        if isinstance(event, BelowThreshold):
            logger.warning(
                f"Average {average:.1f} KB/s below threshold "
                f"{self.config.threshold_kbps} KB/s over {count} samples"
            )
        else:
            logger.debug(f"Rate {rate:.1f} KB/s, average {average:.1f} KB/s ({count} samples)")

        return event

    def stop(self):
        """Return to IDLE and clear window and snapshot history. Idempotent."""
        with self._lock:
            was_active = self.state is MonitorState.MONITORING
            self.state = MonitorState.IDLE
            if self.window is not None:
                self.window.clear()
            self.fired = False
            self.latest_rate = 0.0

        if self.sampler:
            self.sampler.reset()

        if was_active:
            logger.info("Monitoring stopped")

    @property
    def sample_count(self) -> int:
        with self._lock:
            return self.window.count() if self.window is not None else 0

    @property
    def average(self) -> float:
        with self._lock:
            return self.window.average() if self.window is not None else 0.0

    def status(self) -> MonitorStatus:
        """Copy of the observable state."""
        with self._lock:
            window = self.window
            return MonitorStatus(
                state=self.state,
                fired=self.fired,
                latest_rate=self.latest_rate,
                average=window.average() if window is not None else 0.0,
                samples=window.count() if window is not None else 0,
                samples_required=self.samples_required,
                threshold_kbps=self.config.threshold_kbps if self.config else 0.0,
            )
