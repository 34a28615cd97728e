"""
Abstract sensor sample source.

Defines the contract the detector needs from the host platform:

1. is_available(channel) - does the device have this sensor at all
2. start(channel, callback) - begin delivering samples for a channel
3. stop(channel) - stop delivering samples for a channel

Callbacks receive (channel, timestamp_ns, values) where values holds the
three sensor-native axis readings and timestamp_ns is monotonic.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Sequence

from wristgesture.core.types import SensorChannel

logger = logging.getLogger(__name__)

SampleCallback = Callable[[SensorChannel, int, Sequence[float]], None]


class SampleSource(ABC):
    """Base class for anything that delivers rotation/acceleration samples."""

    def __init__(self):
        self._callbacks: Dict[SensorChannel, SampleCallback] = {}

    @abstractmethod
    def is_available(self, channel: SensorChannel) -> bool:
        """Whether the host device provides this channel."""

    def start(self, channel: SensorChannel, callback: SampleCallback) -> bool:
        """Start delivering samples of a channel to callback.

        Returns:
            True if delivery started, False if the channel is unavailable
        """
        if not self.is_available(channel):
            logger.warning("Cannot start %s: sensor not available", channel.sensor_name)
            return False
        self._callbacks[channel] = callback
        logger.debug("%s delivery started", channel.sensor_name.capitalize())
        return True

    def stop(self, channel: SensorChannel):
        """Stop delivering samples of a channel."""
        if self._callbacks.pop(channel, None) is not None:
            logger.debug("%s delivery stopped", channel.sensor_name.capitalize())

    def is_started(self, channel: SensorChannel) -> bool:
        return channel in self._callbacks

    def _deliver(self, channel: SensorChannel, timestamp_ns: int, values: Sequence[float]) -> bool:
        """Forward a sample to the channel's callback, if started."""
        callback = self._callbacks.get(channel)
        if callback is None:
            return False
        callback(channel, timestamp_ns, values)
        return True

    def get_source_info(self) -> dict:
        """Metadata about this source, useful for debugging."""
        return {
            "source_type": self.__class__.__name__,
            "available": {c.value: self.is_available(c) for c in SensorChannel},
            "started": sorted(c.value for c in self._callbacks),
        }
