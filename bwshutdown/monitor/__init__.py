# bwshutdown monitor subpackage
from .counters import CounterReader, CounterReadError
from .sampler import RateSampler, compute_rate_kbps
from .window import SlidingWindow
from .threshold import ThresholdMonitor
from .scheduler import Scheduler
from .engine import MonitorEngine

__all__ = [
    'CounterReader', 'CounterReadError', 'RateSampler', 'compute_rate_kbps',
    'SlidingWindow', 'ThresholdMonitor', 'Scheduler', 'MonitorEngine',
]
