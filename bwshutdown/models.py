"""
bwshutdown Data Models
======================
Snapshots, monitor events and session statistics.

String fields that end up in log files are sanitized on construction.
"""

import re
from enum import Enum
from types import MappingProxyType
from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Union


# ============================================================================
# SANITIZATION
# ============================================================================

# Pattern for dangerous characters in logs
DANGEROUS_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')
MAX_FIELD_LENGTH = 256


def sanitize_string(value: str, max_length: int = MAX_FIELD_LENGTH) -> str:
    """
    Sanitize string for safe logging.

    Removes control characters, truncates to max length and strips
    leading/trailing whitespace.
    """
    if not isinstance(value, str):
        value = str(value)

    # Remove control characters
    value = DANGEROUS_CHARS.sub('', value)

    # Truncate
    if len(value) > max_length:
        value = value[:max_length - 3] + "..."

    return value.strip()


def _now_iso() -> str:
    return datetime.now().isoformat()


# ============================================================================
# MONITOR STATE
# ============================================================================

class MonitorState(Enum):
    IDLE = "idle"
    MONITORING = "monitoring"


# ============================================================================
# SNAPSHOTS
# ============================================================================

@dataclass(frozen=True)
class InterfaceSnapshot:
    """
    Cumulative received-byte counters of the active interfaces,
    captured at a single wall-clock instant.
    """
    timestamp: float
    counters: Mapping[str, int]

    def __post_init__(self):
        # Freeze the mapping so a snapshot cannot change after capture
        object.__setattr__(self, 'counters', MappingProxyType(dict(self.counters)))

    @property
    def interfaces(self) -> list[str]:
        return list(self.counters)

    @property
    def total_bytes(self) -> int:
        return sum(self.counters.values())


# ============================================================================
# EVENTS
# ============================================================================

@dataclass
class Nominal:
    """Tick result while the window is not (yet) below threshold."""
    rate: float
    average: float
    samples: int = 0
    timestamp: str = field(default_factory=_now_iso)

    event_type = "nominal"

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "event_type": self.event_type,
            "rate_kbps": round(self.rate, 2),
            "average_kbps": round(self.average, 2),
            "samples": self.samples,
        }


@dataclass
class BelowThreshold:
    """
    Trigger: the windowed average stayed below threshold for a full window.
    Emitted at most once per monitoring session.
    """
    average: float
    samples: int = 0
    testing_mode: bool = False
    timestamp: str = field(default_factory=_now_iso)

    event_type = "below_threshold"

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "event_type": self.event_type,
            "average_kbps": round(self.average, 2),
            "samples": self.samples,
            "testing_mode": self.testing_mode,
        }


@dataclass
class SampleFailed:
    """A tick that was skipped because interface counters could not be read."""
    reason: str
    timestamp: str = field(default_factory=_now_iso)

    event_type = "sample_failed"

    def __post_init__(self):
        self.reason = sanitize_string(self.reason)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "event_type": self.event_type,
            "reason": self.reason,
        }


MonitorEvent = Union[Nominal, BelowThreshold, SampleFailed]


# ============================================================================
# STATUS / STATS
# ============================================================================

@dataclass(frozen=True)
class MonitorStatus:
    """Point-in-time copy of the monitor, safe to hand to display code."""
    state: MonitorState
    fired: bool
    latest_rate: float
    average: float
    samples: int
    samples_required: int
    threshold_kbps: float

    @property
    def below_threshold(self) -> bool:
        return (
            self.samples_required > 0
            and self.samples >= self.samples_required
            and self.average < self.threshold_kbps
        )


@dataclass
class SessionStats:
    """Aggregated statistics for one monitoring session."""
    start_time: str = ""
    ticks: int = 0
    failed_ticks: int = 0
    min_rate_kbps: float = 0.0
    max_rate_kbps: float = 0.0
    final_average_kbps: float = 0.0
    fired: bool = False

    def record_rate(self, rate: float):
        if self.ticks == 0:
            self.min_rate_kbps = rate
            self.max_rate_kbps = rate
        else:
            self.min_rate_kbps = min(self.min_rate_kbps, rate)
            self.max_rate_kbps = max(self.max_rate_kbps, rate)
        self.ticks += 1

    def to_dict(self) -> dict:
        return {
            "start_time": self.start_time,
            "ticks": self.ticks,
            "failed_ticks": self.failed_ticks,
            "min_rate_kbps": round(self.min_rate_kbps, 2),
            "max_rate_kbps": round(self.max_rate_kbps, 2),
            "final_average_kbps": round(self.final_average_kbps, 2),
            "fired": self.fired,
        }
