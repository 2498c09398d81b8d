"""
Counter Reader Tests
====================
Tests for psutil-backed interface counter reads.
"""

import pytest
from collections import namedtuple
from unittest.mock import patch

from bwshutdown.monitor.counters import CounterReader, CounterReadError

IfStats = namedtuple("IfStats", "isup duplex speed mtu")
IoCounters = namedtuple("IoCounters", "bytes_sent bytes_recv packets_sent packets_recv")


def _if(isup: bool) -> IfStats:
    return IfStats(isup=isup, duplex=2, speed=1000, mtu=1500)


def _io(recv: int) -> IoCounters:
    return IoCounters(bytes_sent=0, bytes_recv=recv, packets_sent=0, packets_recv=0)


@pytest.fixture
def mock_psutil():
    """Mock psutil so tests do not depend on host interfaces."""
    with patch('bwshutdown.monitor.counters.psutil') as mock:
        mock.net_if_stats.return_value = {
            "eth0": _if(True),
            "wlan0": _if(True),
            "docker0": _if(False),
        }
        mock.net_io_counters.return_value = {
            "eth0": _io(1000),
            "wlan0": _io(2000),
            "docker0": _io(999_999),
        }
        yield mock


class TestCounterReader:
    """Snapshot capture."""

    def test_only_up_interfaces(self, mock_psutil):
        snapshot = CounterReader(clock=lambda: 42.0).read()

        assert dict(snapshot.counters) == {"eth0": 1000, "wlan0": 2000}
        assert snapshot.timestamp == 42.0

    def test_queries_per_interface(self, mock_psutil):
        CounterReader().read()

        mock_psutil.net_io_counters.assert_called_once_with(pernic=True)

    def test_interface_without_stats_excluded(self, mock_psutil):
        mock_psutil.net_io_counters.return_value = {
            "eth0": _io(1000),
            "ghost0": _io(5),
        }

        snapshot = CounterReader().read()

        assert list(snapshot.counters) == ["eth0"]

    def test_no_active_interfaces_raises(self, mock_psutil):
        mock_psutil.net_if_stats.return_value = {"eth0": _if(False)}

        with pytest.raises(CounterReadError):
            CounterReader().read()

    def test_os_error_wrapped(self, mock_psutil):
        mock_psutil.net_io_counters.side_effect = OSError("permission denied")

        with pytest.raises(CounterReadError) as exc_info:
            CounterReader().read()

        assert "permission denied" in str(exc_info.value)
