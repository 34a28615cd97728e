"""
Host-facing wrist gesture detector.

Binds a SampleSource to a GestureCoordinator: works out which channels the
device can provide, starts and stops their delivery, and manages the
gesture listeners.

Lifecycle (called by the host application):
    start()  - typically when the UI becomes active
    stop()   - typically when the UI is paused
"""

import logging
from typing import Callable, Iterable, Optional, Union

from wristgesture.capture.sample_source import SampleSource
from wristgesture.core.events import CallbackListener, GestureListener
from wristgesture.core.types import GestureEvent, SensorChannel
from .coordinator import DetectorConfig, GestureCoordinator

logger = logging.getLogger(__name__)

ListenerLike = Union[GestureListener, Callable[[GestureEvent], None]]


def _as_listener(listener: ListenerLike) -> GestureListener:
    if isinstance(listener, GestureListener):
        return listener
    if callable(listener):
        return CallbackListener(listener)
    raise TypeError(f"Not a gesture listener: {listener!r}")


class WristGestureDetector:
    """Detects wrist gestures using the gyroscope and arm gestures using
    the linear accelerometer.

    Example:
        >>> detector = WristGestureDetector(source)
        >>> detector.add_listener(lambda event: print(event.value))
        >>> with detector:
        ...     source.replay()
    """

    def __init__(self, source: SampleSource, config: Optional[DetectorConfig] = None,
                 enabled_channels: Optional[Iterable[SensorChannel]] = None):
        self._source = source
        self._channels = self._initialize_channels(enabled_channels)
        self._coordinator = GestureCoordinator(config, enabled_channels=self._channels)
        self._running = False

    def _initialize_channels(self, enabled_channels) -> frozenset:
        wanted = set(SensorChannel) if enabled_channels is None else set(enabled_channels)
        channels = set()
        for channel in SensorChannel:
            if not self._source.is_available(channel):
                logger.error("%s not available", channel.sensor_name.capitalize())
            elif channel in wanted:
                channels.add(channel)
            else:
                logger.info("%s disabled by configuration", channel.sensor_name.capitalize())
        return frozenset(channels)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: ListenerLike) -> bool:
        """Add a listener called whenever a gesture is detected.

        Accepts a GestureListener or a function taking the GestureEvent.
        """
        return self._coordinator.registry.add(_as_listener(listener))

    def remove_listener(self, listener: ListenerLike) -> bool:
        """Remove a listener, returning False if it was not registered."""
        return self._coordinator.registry.remove(_as_listener(listener))

    def remove_all_listeners(self):
        self._coordinator.registry.clear()

    # ------------------------------------------------------------------
    # Capabilities
    # ------------------------------------------------------------------

    def can_detect_arm_gestures(self) -> bool:
        """True if arm up/down can be detected (accelerometer present)."""
        return SensorChannel.ACCELERATION in self._channels

    def can_detect_wrist_gestures(self) -> bool:
        """True if wrist in/out can be detected (gyroscope present)."""
        return SensorChannel.ROTATION in self._channels

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Start sample delivery for every usable channel."""
        if self._running:
            return
        for channel in (SensorChannel.ACCELERATION, SensorChannel.ROTATION):
            if channel in self._channels:
                if self._source.start(channel, self._coordinator.on_sample):
                    logger.debug("%s listener registered", channel.sensor_name.capitalize())
        self._running = True

    def stop(self):
        """Stop sample delivery and abandon any capture in progress."""
        if not self._running:
            return
        for channel in (SensorChannel.ROTATION, SensorChannel.ACCELERATION):
            if channel in self._channels:
                self._source.stop(channel)
                logger.debug("%s listener unregistered", channel.sensor_name.capitalize())
        self._coordinator.reset()
        self._running = False

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def coordinator(self) -> GestureCoordinator:
        return self._coordinator

    @property
    def stats(self) -> dict:
        return self._coordinator.stats
