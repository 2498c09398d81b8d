"""
Sliding Window
==============
Fixed-capacity FIFO of rate samples with a running mean.
"""

import math
from threading import Lock
from collections import deque


class SlidingWindow:
    """
    Thread-safe sliding window over the most recent samples.
    The oldest sample is evicted once capacity is reached.
    """

    def __init__(self, capacity: int):
        """
        Initialize window.

        Args:
            capacity: Maximum number of samples held
        """
        if capacity <= 0:
            raise ValueError("capacity must be positive")

        self.capacity = capacity
        self._samples: deque = deque(maxlen=capacity)
        self._lock = Lock()

    def push(self, sample: float):
        """
        Add a rate sample (KB/s).

        Raises:
            ValueError: sample is negative or not finite
        """
        if not math.isfinite(sample) or sample < 0:
            raise ValueError(f"sample must be a non-negative finite number, got {sample}")

        with self._lock:
            self._samples.append(float(sample))

    def average(self) -> float:
        """Arithmetic mean of the held samples, 0.0 when empty."""
        with self._lock:
            if not self._samples:
                return 0.0
            return sum(self._samples) / len(self._samples)

    def count(self) -> int:
        """Get number of samples in window."""
        with self._lock:
            return len(self._samples)

    def __len__(self) -> int:
        return self.count()

    @property
    def full(self) -> bool:
        return self.count() >= self.capacity

    def snapshot(self) -> tuple:
        """Copy of the held samples, oldest first."""
        with self._lock:
            return tuple(self._samples)

    def clear(self):
        """Clear all samples."""
        with self._lock:
            self._samples.clear()
