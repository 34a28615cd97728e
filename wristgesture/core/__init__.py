"""Shared types, errors and listener registry."""
from .types import GestureEvent, Direction, SensorChannel, SensorSample
from .errors import WristGestureError, MalformedSampleError, ConfigurationError
from .events import GestureListener, CallbackListener, ListenerRegistry

__all__ = [
    "GestureEvent",
    "Direction",
    "SensorChannel",
    "SensorSample",
    "WristGestureError",
    "MalformedSampleError",
    "ConfigurationError",
    "GestureListener",
    "CallbackListener",
    "ListenerRegistry",
]
