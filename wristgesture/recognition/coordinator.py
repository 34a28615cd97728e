"""
Gesture coordinator: the single entry point for raw sensor samples.

Owns one AxisDetector per channel and all cross-axis policy:

    sample -> validation -> throttle -> significance -> mutual exclusion
           -> AxisDetector.evaluate -> GestureEvent -> ListenerRegistry

Channel to axis mapping:
    rotation     (gyroscope X)            -> wrist in / wrist out
    acceleration (linear acceleration Z)  -> arm up / arm down
"""

import logging
import math
import threading
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from wristgesture.core.errors import ConfigurationError, MalformedSampleError
from wristgesture.core.events import ListenerRegistry
from wristgesture.core.types import (
    AXIS_X, AXIS_Z, MS_TO_NS, Direction, GestureEvent, SensorChannel, SensorSample,
)
from .axis_detector import AxisDetector

logger = logging.getLogger(__name__)

THROTTLE_EVENT_TIME_MS = 1200
SIGNIFICANT_THRESHOLD_GYROSCOPE = 10.0
SIGNIFICANT_THRESHOLD_ACCELEROMETER = 6.0

# Axis read on each channel, in the host sensor framework's axis order
CHANNEL_AXIS = {
    SensorChannel.ROTATION: AXIS_X,
    SensorChannel.ACCELERATION: AXIS_Z,
}

COUNTER_NAMES = ("throttled", "insignificant", "blocked", "malformed", "disabled", "gestures")


@dataclass
class DetectorConfig:
    """Detection thresholds and throttle window."""
    throttle_ms: int = THROTTLE_EVENT_TIME_MS
    rotation_threshold: float = SIGNIFICANT_THRESHOLD_GYROSCOPE
    acceleration_threshold: float = SIGNIFICANT_THRESHOLD_ACCELEROMETER

    def __post_init__(self):
        if not math.isfinite(self.throttle_ms) or self.throttle_ms < 0:
            raise ConfigurationError(f"throttle_ms must be >= 0, got {self.throttle_ms}")
        if not math.isfinite(self.rotation_threshold) or self.rotation_threshold <= 0:
            raise ConfigurationError(
                f"rotation_threshold must be a finite value > 0, got {self.rotation_threshold}")
        if not math.isfinite(self.acceleration_threshold) or self.acceleration_threshold <= 0:
            raise ConfigurationError(
                f"acceleration_threshold must be a finite value > 0, "
                f"got {self.acceleration_threshold}")

    @classmethod
    def from_dict(cls, config: dict) -> "DetectorConfig":
        """Create config from dictionary (YAML parsed).

        Raises:
            ConfigurationError: if a value is not a number or is out of range
        """
        fields = (
            ("throttle_ms", int, THROTTLE_EVENT_TIME_MS),
            ("rotation_threshold", float, SIGNIFICANT_THRESHOLD_GYROSCOPE),
            ("acceleration_threshold", float, SIGNIFICANT_THRESHOLD_ACCELEROMETER),
        )
        values = {}
        for key, convert, default in fields:
            value = config.get(key, default)
            if isinstance(value, bool):
                raise ConfigurationError(f"detection.{key}: expected a number, got {value!r}")
            try:
                values[key] = convert(value)
            except (TypeError, ValueError, OverflowError) as e:
                raise ConfigurationError(f"detection.{key}: {e}") from e
        return cls(**values)

    @property
    def throttle_ns(self) -> int:
        return self.throttle_ms * MS_TO_NS

    def threshold_for(self, channel: SensorChannel) -> float:
        if channel is SensorChannel.ROTATION:
            return self.rotation_threshold
        return self.acceleration_threshold


class GestureCoordinator:
    """Classifies raw rotation/acceleration samples into gestures.

    At most one axis may have a capture in progress; samples on the other
    axis are dropped until it finishes. After a gesture completes, every
    sample from either channel is dropped for the throttle window.

    Calls to on_sample() are serialized with a re-entrant lock, so sensor
    callbacks may arrive on separate threads.

    Example:
        >>> coordinator = GestureCoordinator()
        >>> coordinator.registry.add(my_listener)
        >>> coordinator.on_sample(SensorChannel.ROTATION, 0, (12.0, 0.0, 0.0))
    """

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        registry: Optional[ListenerRegistry] = None,
        enabled_channels: Optional[Iterable[SensorChannel]] = None,
    ):
        self.config = config or DetectorConfig()
        self.registry = registry if registry is not None else ListenerRegistry()
        self._lock = threading.RLock()

        self._wrist = AxisDetector("wrist")
        self._arm = AxisDetector("arm")

        if enabled_channels is None:
            enabled_channels = tuple(SensorChannel)
        self._enabled = frozenset(enabled_channels)

        self._last_gesture_ns: Optional[int] = None
        self._counters = {name: 0 for name in COUNTER_NAMES}

    # ------------------------------------------------------------------
    # Sample ingestion
    # ------------------------------------------------------------------

    def on_sample(self, channel: SensorChannel, timestamp_ns: int,
                  values: Sequence[float]) -> Optional[GestureEvent]:
        """Process one raw sample delivered by a sensor callback.

        Malformed samples are dropped and counted, never raised.

        Returns:
            The GestureEvent emitted by this sample, or None
        """
        with self._lock:
            try:
                sample = SensorSample.from_raw(channel, timestamp_ns, values)
            except MalformedSampleError as e:
                self._counters["malformed"] += 1
                logger.debug("Dropping malformed sample: %s", e)
                return None
            return self._process(sample)

    def process_sample(self, sample: SensorSample) -> Optional[GestureEvent]:
        """Process an already validated SensorSample."""
        with self._lock:
            return self._process(sample)

    def _process(self, sample: SensorSample) -> Optional[GestureEvent]:
        channel = sample.channel
        if channel not in self._enabled:
            self._counters["disabled"] += 1
            return None

        if self._should_drop(sample.timestamp_ns):
            self._counters["throttled"] += 1
            return None

        value = float(sample.values[CHANNEL_AXIS[channel]])
        if abs(value) <= self.config.threshold_for(channel):
            self._counters["insignificant"] += 1
            return None

        if channel is SensorChannel.ROTATION:
            logger.debug("Timestamp : %d, values : (%f, %f, %f)",
                         sample.timestamp_ns, sample.x, sample.y, sample.z)
            event = self._on_significant_wrist(value)
        else:
            logger.info("Timestamp : %d, values : (%f, %f, %f)",
                        sample.timestamp_ns, sample.x, sample.y, sample.z)
            event = self._on_significant_arm(value)

        if event is not None:
            self._last_gesture_ns = sample.timestamp_ns
            self._counters["gestures"] += 1
            logger.info("Gesture detected: %s at %d ns", event.value, sample.timestamp_ns)
            self.registry.notify_all(event)
        return event

    def _should_drop(self, timestamp_ns: int) -> bool:
        """Throttle: a gesture was detected too recently."""
        if self._last_gesture_ns is None:
            return False
        return timestamp_ns - self._last_gesture_ns < self.config.throttle_ns

    # ------------------------------------------------------------------
    # Per-axis handling
    # ------------------------------------------------------------------

    def _on_significant_wrist(self, value: float) -> Optional[GestureEvent]:
        if self._arm.in_progress:
            self._counters["blocked"] += 1
            logger.warning("Dropping wrist sample - arm gesture in progress")
            return None

        direction = self._wrist.evaluate(value)
        if direction is None:
            return None
        if direction is Direction.POSITIVE:
            return GestureEvent.WRIST_IN
        return GestureEvent.WRIST_OUT

    def _on_significant_arm(self, value: float) -> Optional[GestureEvent]:
        if self._wrist.in_progress:
            self._counters["blocked"] += 1
            logger.warning("Dropping arm sample - wrist gesture in progress")
            return None

        # The start sign breaks non-negative sums, unlike the wrist axis
        start_value = self._arm.start_value
        direction = self._arm.evaluate(value)
        if direction is None:
            return None
        if direction is Direction.NEGATIVE or start_value < 0:
            return GestureEvent.ARM_DOWN
        return GestureEvent.ARM_UP

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def reset(self):
        """Abandon captures in progress and clear the throttle clock."""
        with self._lock:
            self._wrist.reset()
            self._arm.reset()
            self._last_gesture_ns = None

    def set_channel_enabled(self, channel: SensorChannel, enabled: bool):
        with self._lock:
            if enabled:
                self._enabled = self._enabled | {channel}
            else:
                self._enabled = self._enabled - {channel}
                self.detector_for(channel).reset()

    def is_channel_enabled(self, channel: SensorChannel) -> bool:
        return channel in self._enabled

    def detector_for(self, channel: SensorChannel) -> AxisDetector:
        return self._wrist if channel is SensorChannel.ROTATION else self._arm

    @property
    def wrist(self) -> AxisDetector:
        return self._wrist

    @property
    def arm(self) -> AxisDetector:
        return self._arm

    @property
    def last_gesture_timestamp_ns(self) -> Optional[int]:
        return self._last_gesture_ns

    @property
    def stats(self) -> dict:
        """Snapshot of drop and detection counters."""
        with self._lock:
            return dict(self._counters)

    def reset_stats(self):
        with self._lock:
            for name in self._counters:
                self._counters[name] = 0
