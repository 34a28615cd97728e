"""
Shared domain types for the wrist gesture detector.

Centralizes enums, sensor constants and the sample container used across
modules to eliminate circular imports and ensure type consistency.
"""

import math
from enum import Enum
from typing import Sequence, Tuple

import numpy as np

from .errors import MalformedSampleError


# =============================================================================
# Sensor Constants
# =============================================================================

# Axis indices follow the host sensor framework convention (x, y, z)
AXIS_X = 0
AXIS_Y = 1
AXIS_Z = 2

AXIS_COUNT = 3

MS_TO_NS = 1_000_000


# =============================================================================
# Gesture Types
# =============================================================================

class GestureEvent(Enum):
    """The four gestures the detector can report."""
    WRIST_IN = "wrist_in"
    WRIST_OUT = "wrist_out"
    ARM_UP = "arm_up"
    ARM_DOWN = "arm_down"


class Direction(Enum):
    """Outcome of a completed two-phase capture on one axis."""
    POSITIVE = "positive"
    NEGATIVE = "negative"


class SensorChannel(Enum):
    """Physical sensor streams consumed by the detector."""
    ROTATION = "rotation"          # gyroscope, rad/s
    ACCELERATION = "acceleration"  # linear acceleration, m/s^2

    @classmethod
    def from_string(cls, name: str) -> 'SensorChannel':
        """Parse a channel name, raising MalformedSampleError if unknown."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            raise MalformedSampleError(f"Unknown sensor channel: {name!r}") from None

    @property
    def sensor_name(self) -> str:
        return "gyroscope" if self is SensorChannel.ROTATION else "accelerometer"


# =============================================================================
# Data Containers
# =============================================================================

class SensorSample:
    """A single timestamped 3-axis reading from one channel.

    Uses __slots__ since samples arrive at sensor rate.
    """

    __slots__ = ("channel", "timestamp_ns", "values")

    def __init__(self, channel: SensorChannel, timestamp_ns: int, values: np.ndarray):
        self.channel = channel
        self.timestamp_ns = timestamp_ns
        self.values = values

    @classmethod
    def from_raw(cls, channel: SensorChannel, timestamp_ns, values: Sequence[float]) -> 'SensorSample':
        """Validate raw callback data and build a sample.

        Raises:
            MalformedSampleError: if the timestamp is not a number or the
                vector is not exactly three finite floats.
        """
        if not isinstance(channel, SensorChannel):
            raise MalformedSampleError(f"Not a sensor channel: {channel!r}")
        if isinstance(timestamp_ns, bool) or not isinstance(timestamp_ns, (int, np.integer)):
            if not (isinstance(timestamp_ns, float) and math.isfinite(timestamp_ns)):
                raise MalformedSampleError(f"Invalid timestamp: {timestamp_ns!r}")
        try:
            vector = np.asarray(values)
        except (TypeError, ValueError) as e:
            raise MalformedSampleError(f"Non-numeric sample values: {values!r}") from e
        # Integers and floats only; strings, bools and objects are rejected
        if vector.dtype.kind not in "iuf":
            raise MalformedSampleError(f"Non-numeric sample values: {values!r}")
        vector = vector.astype(np.float64)
        if vector.shape != (AXIS_COUNT,):
            raise MalformedSampleError(
                f"Expected {AXIS_COUNT} axis values, got shape {vector.shape}"
            )
        # NaN or infinite readings would poison the direction sum
        if not np.isfinite(vector).all():
            raise MalformedSampleError(f"Non-finite sample values: {vector.tolist()}")
        return cls(channel, int(timestamp_ns), vector)

    @property
    def x(self) -> float:
        return float(self.values[AXIS_X])

    @property
    def y(self) -> float:
        return float(self.values[AXIS_Y])

    @property
    def z(self) -> float:
        return float(self.values[AXIS_Z])

    def as_tuple(self) -> Tuple[float, float, float]:
        return self.x, self.y, self.z

    def __repr__(self):
        return (f"SensorSample({self.channel.value}, t={self.timestamp_ns}, "
                f"({self.x:.3f}, {self.y:.3f}, {self.z:.3f}))")
