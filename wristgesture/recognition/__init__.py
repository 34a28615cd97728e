"""Gesture recognition module."""
from .axis_detector import AxisDetector, Armed, Idle
from .coordinator import DetectorConfig, GestureCoordinator
from .detector import WristGestureDetector

__all__ = [
    "AxisDetector",
    "Armed",
    "Idle",
    "DetectorConfig",
    "GestureCoordinator",
    "WristGestureDetector",
]
