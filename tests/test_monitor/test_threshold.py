"""
Threshold Monitor Tests
=======================
Tests for the windowed below-threshold decision.
"""

import pytest

from bwshutdown.config import MonitorConfig, ConfigError
from bwshutdown.models import MonitorState, Nominal, BelowThreshold
from bwshutdown.monitor.sampler import RateSampler
from bwshutdown.monitor.threshold import ThresholdMonitor

from conftest import FakeCounterReader, snap


@pytest.fixture
def monitor(test_config):
    m = ThresholdMonitor()
    m.start(test_config)
    return m


class TestLifecycle:
    """start/stop transitions."""

    def test_initially_idle(self):
        monitor = ThresholdMonitor()

        assert monitor.state is MonitorState.IDLE
        assert monitor.sample_count == 0

    def test_start_enters_monitoring(self, monitor, test_config):
        assert monitor.state is MonitorState.MONITORING
        assert monitor.samples_required == 3
        assert monitor.window.capacity == 3

    def test_invalid_config_rejected_stays_idle(self):
        monitor = ThresholdMonitor()

        with pytest.raises(ConfigError):
            monitor.start(MonitorConfig(interval_seconds=0))

        assert monitor.state is MonitorState.IDLE

    @pytest.mark.parametrize("kwargs", [
        {"threshold_kbps": 0},
        {"threshold_kbps": -5},
        {"delay_seconds": 0},
        {"interval_seconds": 10, "delay_seconds": 5},
    ])
    def test_start_validates(self, kwargs):
        monitor = ThresholdMonitor()

        with pytest.raises(ConfigError):
            monitor.start(MonitorConfig(**kwargs))

    def test_stop_clears_window(self, monitor):
        monitor.record(10.0)
        monitor.record(10.0)

        monitor.stop()

        assert monitor.state is MonitorState.IDLE
        assert monitor.sample_count == 0

    def test_stop_idempotent(self, monitor):
        monitor.stop()
        monitor.stop()

        assert monitor.state is MonitorState.IDLE
        assert monitor.sample_count == 0

    def test_stop_while_idle(self):
        monitor = ThresholdMonitor()
        monitor.stop()

        assert monitor.state is MonitorState.IDLE
        assert monitor.sample_count == 0

    def test_restart_begins_cold(self, monitor, test_config):
        for _ in range(2):
            monitor.record(0.0)

        monitor.start(test_config)

        assert monitor.sample_count == 0
        assert monitor.fired is False

    def test_record_while_idle_raises(self):
        with pytest.raises(RuntimeError):
            ThresholdMonitor().record(1.0)


class TestSamplerReset:
    """start/stop reset snapshot history."""

    def test_start_resets_sampler(self, test_config):
        reader = FakeCounterReader([snap(0.0, eth0=0), snap(1.0, eth0=1024)])
        sampler = RateSampler(reader)
        sampler.sample()
        monitor = ThresholdMonitor(sampler)

        monitor.start(test_config)

        assert not sampler.calibrated

    def test_first_record_after_start_is_calibration(self, test_config):
        """First sample after start is 0 whatever the traffic."""
        reader = FakeCounterReader([
            snap(0.0, eth0=0),
            snap(1.0, eth0=10_000_000),
            snap(2.0, eth0=20_000_000),
        ])
        sampler = RateSampler(reader)
        sampler.sample()
        monitor = ThresholdMonitor(sampler)
        monitor.start(test_config)

        event = monitor.record(sampler.sample())

        assert isinstance(event, Nominal)
        assert event.rate == 0.0

    def test_stop_resets_sampler(self, test_config):
        reader = FakeCounterReader([snap(0.0, eth0=0)])
        sampler = RateSampler(reader)
        monitor = ThresholdMonitor(sampler)
        monitor.start(test_config)
        sampler.sample()

        monitor.stop()

        assert not sampler.calibrated


class TestGate:
    """No trigger before the window is full."""

    def test_zeros_do_not_fire_until_full(self, monitor):
        events = [monitor.record(0.0) for _ in range(2)]

        assert all(isinstance(e, Nominal) for e in events)
        assert monitor.fired is False

        assert isinstance(monitor.record(0.0), BelowThreshold)

    def test_single_sample_window_fires_immediately(self):
        monitor = ThresholdMonitor()
        monitor.start(MonitorConfig(threshold_kbps=100, interval_seconds=5, delay_seconds=5))

        assert isinstance(monitor.record(0.0), BelowThreshold)

    def test_average_equal_to_threshold_does_not_fire(self, monitor):
        for _ in range(3):
            event = monitor.record(200.0)

        assert isinstance(event, Nominal)

    def test_nominal_carries_rate_and_average(self, monitor):
        monitor.record(100.0)
        event = monitor.record(400.0)

        assert event.rate == 400.0
        assert event.average == pytest.approx(250.0)
        assert event.samples == 2


class TestFiring:
    """Terminal fired condition."""

    def test_trigger_forwards_testing_mode(self, monitor):
        for _ in range(3):
            event = monitor.record(0.0)

        assert isinstance(event, BelowThreshold)
        assert event.testing_mode is True
        assert event.average == 0.0
        assert event.samples == 3

    def test_state_kept_after_firing(self, monitor):
        for value in (10.0, 20.0, 30.0):
            monitor.record(value)

        assert monitor.fired
        assert monitor.state is MonitorState.MONITORING
        assert monitor.sample_count == 3
        assert monitor.average == pytest.approx(20.0)

    def test_record_after_firing_raises(self, monitor):
        for _ in range(3):
            monitor.record(0.0)

        with pytest.raises(RuntimeError):
            monitor.record(0.0)

    def test_stop_after_firing_clears(self, monitor):
        for _ in range(3):
            monitor.record(0.0)

        monitor.stop()

        assert monitor.fired is False
        assert monitor.sample_count == 0


class TestScenario:
    """interval=2s, delay=60s -> 30-sample window at 200 KB/s."""

    def test_sixty_second_scenario(self, scenario_config):
        monitor = ThresholdMonitor()
        monitor.start(scenario_config)
        assert monitor.samples_required == 30

        # 30 samples at 1000 KB/s: full window, average well above threshold
        for _ in range(30):
            event = monitor.record(1000.0)
        assert isinstance(event, Nominal)
        assert monitor.sample_count == 30

        # 31st sample evicts the oldest 1000
        event = monitor.record(0.0)
        assert isinstance(event, Nominal)
        assert event.average == pytest.approx((29 * 1000 + 0) / 30)
        assert monitor.sample_count == 30

        # Zeros 2..29: average still >= threshold until enough 1000s are gone
        zeros = 1
        while True:
            event = monitor.record(0.0)
            zeros += 1
            if isinstance(event, BelowThreshold):
                break
            assert event.average >= 200.0

        # avg < 200 first happens once fewer than 6 thousands remain (5*1000/30 = 166.7)
        assert zeros == 25
        assert event.average == pytest.approx(5 * 1000 / 30)

    def test_all_zero_window_triggers_on_thirtieth(self):
        """With a threshold no partial window can dip under, the 30th zero fires."""
        monitor = ThresholdMonitor()
        monitor.start(MonitorConfig(threshold_kbps=1, interval_seconds=2, delay_seconds=60))

        for _ in range(30):
            monitor.record(1000.0)

        for i in range(1, 31):
            event = monitor.record(0.0)
            if i < 30:
                assert isinstance(event, Nominal), f"fired early at zero #{i}"

        assert isinstance(event, BelowThreshold)
        assert event.average == 0.0


class TestStatus:
    """Copy-on-read status."""

    def test_status_copy(self, monitor):
        monitor.record(300.0)
        status = monitor.status()

        monitor.record(0.0)

        assert status.latest_rate == 300.0
        assert status.samples == 1
        assert status.threshold_kbps == 200.0
        assert status.state is MonitorState.MONITORING

    def test_status_when_idle(self):
        status = ThresholdMonitor().status()

        assert status.state is MonitorState.IDLE
        assert status.samples == 0
        assert status.average == 0.0
