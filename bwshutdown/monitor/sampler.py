"""
Rate Sampler
============
Turns successive counter snapshots into an aggregate KB/s rate.
"""

import math
import logging
from threading import Lock
from typing import Optional

from ..models import InterfaceSnapshot
from .counters import CounterReader

logger = logging.getLogger(__name__)


def compute_rate_kbps(previous: InterfaceSnapshot, current: InterfaceSnapshot) -> float:
    """
    Aggregate receive rate between two snapshots in KB/s.

    Only interfaces present in both snapshots are summed. A counter that went
    backwards (interface reset) contributes nothing. Returns 0.0 when the
    elapsed time is not positive.
    """
    elapsed = current.timestamp - previous.timestamp
    if elapsed <= 0:
        return 0.0

    delta_bytes = 0
    for name, current_bytes in current.counters.items():
        previous_bytes = previous.counters.get(name)
        if previous_bytes is None:
            continue
        delta_bytes += max(0, current_bytes - previous_bytes)

    rate = (delta_bytes / elapsed) / 1024
    if not math.isfinite(rate):
        return 0.0
    return rate


class RateSampler:
    """
    Stateful sampler holding the previous snapshot.

    The first sample after construction or reset() is a calibration
    sample and is always 0.0. A reset() that lands while a read is in
    flight wins: the snapshot from that read is discarded.
    """

    def __init__(self, reader: Optional[CounterReader] = None):
        self.reader = reader or CounterReader()
        self._previous: Optional[InterfaceSnapshot] = None
        self._generation = 0
        self._lock = Lock()

    @property
    def calibrated(self) -> bool:
        """True once a snapshot is held to compute deltas against."""
        return self._previous is not None

    @property
    def previous(self) -> Optional[InterfaceSnapshot]:
        return self._previous

    def sample(self) -> float:
        """
        Take one sample.

        Returns:
            Rate in KB/s since the previous sample

        Raises:
            CounterReadError: propagated from the reader; the stored
                snapshot is left as it was
        """
        with self._lock:
            generation = self._generation

        current = self.reader.read()

        with self._lock:
            if generation != self._generation:
                logger.debug("Sampler reset during read; snapshot discarded")
                return 0.0
            previous, self._previous = self._previous, current

        if previous is None:
            logger.debug("Calibration sample taken")
            return 0.0

        if current.timestamp <= previous.timestamp:
            logger.warning(
                f"Clock moved backwards or stalled "
                f"({previous.timestamp} -> {current.timestamp}); re-anchoring"
            )
            return 0.0

        return compute_rate_kbps(previous, current)

    def reset(self):
        """Drop snapshot history; the next sample calibrates."""
        with self._lock:
            self._generation += 1
            self._previous = None
