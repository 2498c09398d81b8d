"""
Interface Counter Reader
========================
Reads cumulative received-byte counters of the active interfaces.
"""

import time
import logging
from typing import Callable

import psutil
from psutil import Error as PsutilError

from ..models import InterfaceSnapshot

logger = logging.getLogger(__name__)


class CounterReadError(RuntimeError):
    """Interface counters could not be read for this tick."""


class CounterReader:
    """
    Snapshot source backed by psutil.

    Only interfaces reported as up are included. No other filtering is
    applied, so the aggregate is best-effort across whatever is active at
    the moment of the read.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """
        Initialize reader.

        Args:
            clock: Wall-clock source for snapshot timestamps
        """
        self.clock = clock

    def read(self) -> InterfaceSnapshot:
        """
        Capture the current counters.

        Raises:
            CounterReadError: OS query failed or no interface is up
        """
        try:
            if_stats = psutil.net_if_stats()
            io_counters = psutil.net_io_counters(pernic=True)
        except (OSError, PsutilError) as e:
            raise CounterReadError(f"interface query failed: {e}") from e

        counters = {
            name: int(io.bytes_recv)
            for name, io in io_counters.items()
            if name in if_stats and if_stats[name].isup
        }

        if not counters:
            raise CounterReadError("no active network interfaces")

        logger.debug(f"Read counters for {len(counters)} interface(s)")
        return InterfaceSnapshot(timestamp=self.clock(), counters=counters)
