"""
bwshutdown Test Fixtures
========================
Shared pytest fixtures for all test modules.
"""

import pytest
from pathlib import Path
import sys

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from bwshutdown.config import MonitorConfig
from bwshutdown.models import InterfaceSnapshot, Nominal, BelowThreshold, SampleFailed
from bwshutdown.monitor.counters import CounterReadError


# ============================================================================
# FAKE COUNTER SOURCE
# ============================================================================

class FakeCounterReader:
    """
    Scripted counter reader.

    Each read() pops the next item: a snapshot is returned, an exception
    is raised. Once the script is exhausted the last snapshot repeats.
    """

    def __init__(self, script=None):
        self.script = list(script or [])
        self.reads = 0
        self._last = None

    def push(self, item):
        self.script.append(item)

    def read(self) -> InterfaceSnapshot:
        self.reads += 1
        if self.script:
            item = self.script.pop(0)
        elif self._last is not None:
            item = self._last
        else:
            raise CounterReadError("no scripted snapshot")

        if isinstance(item, Exception):
            raise item

        self._last = item
        return item


def snap(timestamp: float, **counters) -> InterfaceSnapshot:
    """Build a snapshot: snap(10.0, eth0=1024, wlan0=0)."""
    return InterfaceSnapshot(timestamp=timestamp, counters=counters)


# ============================================================================
# CONFIG FIXTURES
# ============================================================================

@pytest.fixture
def default_config():
    """Default monitor configuration."""
    return MonitorConfig()


@pytest.fixture
def test_config(tmp_path):
    """Small window: 3 samples of 1s against 200 KB/s."""
    return MonitorConfig(
        threshold_kbps=200.0,
        interval_seconds=1,
        delay_seconds=3,
        testing_mode=True,
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def scenario_config():
    """interval=2s, delay=60s -> 30 samples, threshold 200 KB/s."""
    return MonitorConfig(threshold_kbps=200.0, interval_seconds=2, delay_seconds=60)


@pytest.fixture
def fast_config():
    """Real-time config for scheduler driven tests."""
    return MonitorConfig(
        threshold_kbps=200.0,
        interval_seconds=0.02,
        delay_seconds=0.06,
        testing_mode=True,
    )


# ============================================================================
# COUNTER FIXTURES
# ============================================================================

@pytest.fixture
def fake_reader():
    """Empty scripted reader; tests push snapshots onto it."""
    return FakeCounterReader()


@pytest.fixture
def idle_reader():
    """Reader whose counters never move (0 KB/s forever)."""
    return FakeCounterReader([snap(t, eth0=1000) for t in range(1, 200)])


# ============================================================================
# EVENT FIXTURES
# ============================================================================

@pytest.fixture
def sample_nominal():
    return Nominal(rate=512.0, average=300.5, samples=3, timestamp="2024-01-01T00:00:00")


@pytest.fixture
def sample_trigger():
    return BelowThreshold(average=12.3, samples=30, testing_mode=True,
                          timestamp="2024-01-01T00:01:00")


@pytest.fixture
def sample_failure():
    return SampleFailed(reason="no active network interfaces", timestamp="2024-01-01T00:00:30")


# ============================================================================
# DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_log_dir(tmp_path):
    """Temporary directory for log files."""
    log_dir = tmp_path / "bwshutdown_logs"
    log_dir.mkdir()
    return log_dir


@pytest.fixture
def temp_config_file(tmp_path):
    """Temporary YAML config file."""
    config_content = """
monitor:
  threshold_kbps: 150
  interval_seconds: 5
  delay_seconds: 300
  testing_mode: true
logging:
  directory: /tmp/bw-logs
  enabled: false
action:
  shutdown_command: ["systemctl", "poweroff"]
"""
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content)
    return config_file
