"""
Tests for Gesture Coordinator Module
=====================================
"""

import threading

import numpy as np
import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from wristgesture.core.errors import ConfigurationError
from wristgesture.core.events import CallbackListener, GestureListener
from wristgesture.core.types import GestureEvent, SensorChannel, SensorSample
from wristgesture.recognition.coordinator import DetectorConfig, GestureCoordinator

MS = 1_000_000
ROT = SensorChannel.ROTATION
ACC = SensorChannel.ACCELERATION


def rot(x, y=0.0, z=0.0):
    return (x, y, z)


def acc(z, x=0.0, y=0.0):
    return (x, y, z)


class Recorder(GestureListener):
    """Listener collecting every event it receives."""

    def __init__(self):
        self.events = []

    def on_event(self, event):
        self.events.append(event)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def coordinator(recorder):
    coord = GestureCoordinator()
    coord.registry.add(recorder)
    return coord


class TestDetectorConfig:
    """Test suite for DetectorConfig."""

    def test_default_values(self):
        config = DetectorConfig()

        assert config.throttle_ms == 1200
        assert config.throttle_ns == 1_200_000_000
        assert config.rotation_threshold == 10.0
        assert config.acceleration_threshold == 6.0

    def test_from_dict_partial(self):
        config = DetectorConfig.from_dict({"throttle_ms": 500})

        assert config.throttle_ms == 500
        assert config.rotation_threshold == 10.0

    def test_threshold_for_channel(self):
        config = DetectorConfig(rotation_threshold=3.0, acceleration_threshold=4.0)

        assert config.threshold_for(ROT) == 3.0
        assert config.threshold_for(ACC) == 4.0

    @pytest.mark.parametrize("kwargs", [
        {"throttle_ms": -1},
        {"rotation_threshold": 0.0},
        {"acceleration_threshold": -2.0},
        {"rotation_threshold": float("nan")},
        {"acceleration_threshold": float("inf")},
        {"throttle_ms": float("inf")},
    ])
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            DetectorConfig(**kwargs)

    @pytest.mark.parametrize("section", [
        {"throttle_ms": "soon"},
        {"throttle_ms": None},
        {"rotation_threshold": "high"},
        {"acceleration_threshold": True},
        {"throttle_ms": float("inf")},
    ])
    def test_from_dict_rejects_bad_types(self, section):
        with pytest.raises(ConfigurationError, match="detection"):
            DetectorConfig.from_dict(section)

    def test_from_dict_converts_numeric_strings(self):
        config = DetectorConfig.from_dict({"throttle_ms": "800", "rotation_threshold": 12})

        assert config.throttle_ms == 800
        assert config.rotation_threshold == 12.0


class TestWristGestures:
    """Rotation channel: gyroscope X drives wrist in/out."""

    def test_end_to_end_wrist_out(self, coordinator, recorder):
        """Test start, finish, throttled sample, then a new phase."""
        assert coordinator.on_sample(ROT, 0, rot(12.0)) is None
        assert coordinator.on_sample(ROT, 500 * MS, rot(-13.0)) is GestureEvent.WRIST_OUT
        assert recorder.events == [GestureEvent.WRIST_OUT]
        assert coordinator.last_gesture_timestamp_ns == 500 * MS

        # Inside the throttle window: dropped without arming
        assert coordinator.on_sample(ROT, 600 * MS, rot(15.0)) is None
        assert not coordinator.wrist.in_progress
        assert coordinator.stats["throttled"] == 1

        # Past the window: starts a new phase
        assert coordinator.on_sample(ROT, 1800 * MS, rot(15.0)) is None
        assert coordinator.wrist.in_progress
        assert coordinator.wrist.start_value == 15.0
        assert recorder.events == [GestureEvent.WRIST_OUT]

    def test_wrist_in(self, coordinator):
        coordinator.on_sample(ROT, 0, rot(-11.0))
        assert coordinator.on_sample(ROT, 100 * MS, rot(14.0)) is GestureEvent.WRIST_IN

    def test_zero_sum_is_wrist_in(self, coordinator):
        """Test (value, -value) resolves to WRIST_IN."""
        coordinator.on_sample(ROT, 0, rot(12.0))
        assert coordinator.on_sample(ROT, 500 * MS, rot(-12.0)) is GestureEvent.WRIST_IN

    def test_only_x_axis_counts(self, coordinator):
        """Test large Y/Z rotation does not make a sample significant."""
        coordinator.on_sample(ROT, 0, rot(1.0, y=50.0, z=-50.0))

        assert not coordinator.wrist.in_progress
        assert coordinator.stats["insignificant"] == 1

    def test_threshold_is_strict(self, coordinator):
        coordinator.on_sample(ROT, 0, rot(10.0))
        coordinator.on_sample(ROT, 1 * MS, rot(-10.0))
        assert not coordinator.wrist.in_progress

        coordinator.on_sample(ROT, 2 * MS, rot(10.01))
        assert coordinator.wrist.in_progress


class TestArmGestures:
    """Acceleration channel: linear acceleration Z drives arm up/down."""

    @pytest.mark.parametrize("start, finish, expected", [
        (-8.0, 1.0, GestureEvent.ARM_DOWN),   # sum < 0
        (-8.0, 9.0, GestureEvent.ARM_DOWN),   # sum >= 0 but start negative
        (8.0, 1.0, GestureEvent.ARM_UP),      # sum >= 0 and start positive
        (8.0, -9.0, GestureEvent.ARM_DOWN),   # sum < 0
        (7.0, -7.0, GestureEvent.ARM_UP),     # zero sum, start positive
        (-7.0, 7.0, GestureEvent.ARM_DOWN),   # zero sum, start negative
    ])
    def test_direction_mapping(self, start, finish, expected):
        """Test the start sign decides when the sum is non-negative."""
        # Low threshold so the small finishing values count
        coordinator = GestureCoordinator(DetectorConfig(acceleration_threshold=0.5))

        assert coordinator.on_sample(ACC, 0, acc(start)) is None
        assert coordinator.on_sample(ACC, 100 * MS, acc(finish)) is expected

    def test_default_threshold_pairs(self, coordinator, recorder):
        coordinator.on_sample(ACC, 0, acc(8.0))
        coordinator.on_sample(ACC, 100 * MS, acc(7.0))
        coordinator.on_sample(ACC, 2000 * MS, acc(-8.0))
        coordinator.on_sample(ACC, 2100 * MS, acc(9.0))

        assert recorder.events == [GestureEvent.ARM_UP, GestureEvent.ARM_DOWN]

    def test_only_z_axis_counts(self, coordinator):
        coordinator.on_sample(ACC, 0, acc(1.0, x=30.0, y=-30.0))

        assert not coordinator.arm.in_progress


class TestMutualExclusion:
    """One axis in progress blocks the other."""

    def test_arm_in_progress_blocks_wrist(self, coordinator, recorder):
        coordinator.on_sample(ACC, 0, acc(8.0))
        assert coordinator.on_sample(ROT, 10 * MS, rot(12.0)) is None
        assert coordinator.on_sample(ROT, 20 * MS, rot(-13.0)) is None

        assert not coordinator.wrist.in_progress
        assert coordinator.arm.start_value == 8.0
        assert coordinator.stats["blocked"] == 2
        assert recorder.events == []

        # The arm capture still completes normally
        assert coordinator.on_sample(ACC, 30 * MS, acc(7.0)) is GestureEvent.ARM_UP

    def test_wrist_in_progress_blocks_arm(self, coordinator):
        coordinator.on_sample(ROT, 0, rot(-12.0))
        assert coordinator.on_sample(ACC, 10 * MS, acc(-9.0)) is None

        assert not coordinator.arm.in_progress
        assert coordinator.wrist.start_value == -12.0

    def test_insignificant_sample_is_not_blocked(self, coordinator):
        """Test significance is checked before mutual exclusion."""
        coordinator.on_sample(ACC, 0, acc(8.0))
        coordinator.on_sample(ROT, 10 * MS, rot(2.0))

        assert coordinator.stats["insignificant"] == 1
        assert coordinator.stats["blocked"] == 0


class TestThrottle:
    """A completed gesture suppresses both channels for the window."""

    def test_throttle_applies_across_channels(self, coordinator):
        coordinator.on_sample(ROT, 0, rot(12.0))
        coordinator.on_sample(ROT, 100 * MS, rot(-13.0))

        assert coordinator.on_sample(ACC, 900 * MS, acc(8.0)) is None
        assert not coordinator.arm.in_progress

    def test_window_boundary_is_accepted(self, coordinator):
        coordinator.on_sample(ROT, 0, rot(12.0))
        coordinator.on_sample(ROT, 100 * MS, rot(-13.0))

        coordinator.on_sample(ACC, 1299 * MS, acc(8.0))
        assert not coordinator.arm.in_progress
        coordinator.on_sample(ACC, 1300 * MS, acc(8.0))
        assert coordinator.arm.in_progress

    def test_no_throttle_before_first_gesture(self, coordinator):
        assert coordinator.on_sample(ROT, 0, rot(12.0)) is None
        assert coordinator.on_sample(ROT, 1, rot(-13.0)) is GestureEvent.WRIST_OUT

    def test_custom_window(self, recorder):
        coordinator = GestureCoordinator(DetectorConfig(throttle_ms=100))
        coordinator.on_sample(ROT, 0, rot(12.0))
        coordinator.on_sample(ROT, 1 * MS, rot(-13.0))

        coordinator.on_sample(ROT, 101 * MS, rot(12.0))
        assert coordinator.wrist.in_progress

    def test_reset_clears_throttle(self, coordinator):
        coordinator.on_sample(ROT, 0, rot(12.0))
        coordinator.on_sample(ROT, 100 * MS, rot(-13.0))
        coordinator.on_sample(ACC, 150 * MS, acc(8.0))
        coordinator.reset()

        assert coordinator.last_gesture_timestamp_ns is None
        coordinator.on_sample(ACC, 200 * MS, acc(8.0))
        assert coordinator.arm.in_progress


class TestRandomStreams:
    """Invariants over long random sample streams."""

    @staticmethod
    def random_stream(seed, count=2000):
        rng = np.random.default_rng(seed)
        timestamp = 0
        for _ in range(count):
            timestamp += int(rng.integers(1, 300)) * MS
            channel = ROT if rng.random() < 0.5 else ACC
            values = rng.uniform(-20.0, 20.0, size=3)
            yield channel, timestamp, values

    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_gestures_never_closer_than_window(self, seed):
        coordinator = GestureCoordinator()
        emitted = []
        for channel, timestamp, values in self.random_stream(seed):
            if coordinator.on_sample(channel, timestamp, values) is not None:
                emitted.append(timestamp)

        assert len(emitted) > 1
        assert all(b - a >= 1200 * MS for a, b in zip(emitted, emitted[1:]))

    @pytest.mark.parametrize("seed", [3, 11])
    def test_other_axis_untouched_while_in_progress(self, seed):
        coordinator = GestureCoordinator()
        for channel, timestamp, values in self.random_stream(seed):
            other = coordinator.detector_for(ACC if channel is ROT else ROT)
            own = coordinator.detector_for(channel)
            blocked = other.in_progress
            other_state, own_state = other.state, own.state

            event = coordinator.on_sample(channel, timestamp, values)

            if blocked:
                assert event is None
                assert other.state == other_state
                assert own.state == own_state
            assert not (coordinator.wrist.in_progress and coordinator.arm.in_progress)


class TestBoundary:
    """Malformed samples, disabled channels and listener failures."""

    @pytest.mark.parametrize("values", [
        (12.0, 0.0),
        (12.0, 0.0, 0.0, 0.0),
        (float("nan"), 0.0, 0.0),
        (float("inf"), 0.0, 0.0),
        ("a", "b", "c"),
        None,
    ])
    def test_malformed_sample_dropped(self, coordinator, recorder, values):
        assert coordinator.on_sample(ROT, 0, values) is None

        assert coordinator.stats["malformed"] == 1
        assert not coordinator.wrist.in_progress
        assert recorder.events == []

    def test_malformed_timestamp_dropped(self, coordinator):
        assert coordinator.on_sample(ROT, "later", rot(12.0)) is None
        assert coordinator.stats["malformed"] == 1

    def test_malformed_does_not_break_capture(self, coordinator):
        coordinator.on_sample(ROT, 0, rot(12.0))
        coordinator.on_sample(ROT, 1 * MS, (float("nan"), 0.0, 0.0))

        assert coordinator.on_sample(ROT, 2 * MS, rot(-13.0)) is GestureEvent.WRIST_OUT

    def test_numpy_vector_accepted(self, coordinator):
        coordinator.on_sample(ROT, 0, np.array([12.0, 0.0, 0.0], dtype=np.float32))
        assert coordinator.wrist.in_progress

    def test_process_sample(self, coordinator):
        coordinator.process_sample(SensorSample.from_raw(ACC, 0, acc(8.0)))
        assert coordinator.arm.in_progress

    def test_disabled_channel_never_detects(self, recorder):
        coordinator = GestureCoordinator(enabled_channels=[ROT])
        coordinator.registry.add(recorder)
        coordinator.on_sample(ACC, 0, acc(8.0))
        coordinator.on_sample(ACC, 1 * MS, acc(8.0))

        assert recorder.events == []
        assert coordinator.stats["disabled"] == 2
        assert not coordinator.is_channel_enabled(ACC)

    def test_disabling_channel_abandons_capture(self, coordinator):
        coordinator.on_sample(ACC, 0, acc(8.0))
        coordinator.set_channel_enabled(ACC, False)

        assert not coordinator.arm.in_progress
        coordinator.on_sample(ROT, 1 * MS, rot(12.0))
        assert coordinator.wrist.in_progress

    def test_failing_listener_isolated(self, coordinator, recorder):
        failing = Mock(spec=GestureListener)
        failing.on_event.side_effect = RuntimeError("boom")
        coordinator.registry.clear()
        coordinator.registry.add(failing)
        coordinator.registry.add(recorder)

        coordinator.on_sample(ROT, 0, rot(12.0))
        event = coordinator.on_sample(ROT, 1 * MS, rot(-13.0))

        assert event is GestureEvent.WRIST_OUT
        failing.on_event.assert_called_once_with(GestureEvent.WRIST_OUT)
        assert recorder.events == [GestureEvent.WRIST_OUT]
        assert coordinator.last_gesture_timestamp_ns == 1 * MS

    def test_listener_may_reset_coordinator(self, coordinator):
        """Test re-entrant calls from a listener do not deadlock."""
        coordinator.registry.add(CallbackListener(lambda event: coordinator.reset()))
        coordinator.on_sample(ROT, 0, rot(12.0))
        coordinator.on_sample(ROT, 1 * MS, rot(-13.0))

        assert coordinator.last_gesture_timestamp_ns is None

    def test_reset_stats(self, coordinator):
        coordinator.on_sample(ROT, 0, rot(1.0))
        coordinator.reset_stats()
        assert all(v == 0 for v in coordinator.stats.values())


class TestConcurrency:
    """Samples delivered from two sensor threads."""

    def test_concurrent_delivery(self, coordinator, recorder):
        errors = []

        def deliver(channel, make):
            try:
                for i in range(2000):
                    sign = 1.0 if i % 3 else -1.0
                    coordinator.on_sample(channel, i * 10 * MS, make(sign * 15.0))
            except Exception as e:
                errors.append(e)

        threads = [
            threading.Thread(target=deliver, args=(ROT, rot)),
            threading.Thread(target=deliver, args=(ACC, acc)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert coordinator.stats["gestures"] == len(recorder.events)
        assert not (coordinator.wrist.in_progress and coordinator.arm.in_progress)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
