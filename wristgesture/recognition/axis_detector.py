"""
Two-phase threshold detector for a single sensor axis.

Each detector alternates between two states:

    Idle  --significant sample-->  Armed(start_value)
    Armed --significant sample-->  Idle, emits a Direction

The direction is the sign of (finish_value + start_value), with a zero sum
resolving to POSITIVE.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from wristgesture.core.types import Direction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Idle:
    """No capture in progress."""


@dataclass(frozen=True)
class Armed:
    """First half of a capture seen; waiting for the finishing sample."""
    start_value: float


AxisState = Union[Idle, Armed]

IDLE = Idle()


class AxisDetector:
    """Turns significant readings on one axis into directional outcomes."""

    def __init__(self, name: str):
        self.name = name
        self._state: AxisState = IDLE

    def evaluate(self, value: float) -> Optional[Direction]:
        """Feed one significant reading.

        Returns:
            None on the start phase, the Direction on the finish phase
        """
        state = self._state
        if isinstance(state, Armed):
            total = value + state.start_value
            direction = Direction.POSITIVE if total >= 0 else Direction.NEGATIVE
            self._state = IDLE
            logger.debug("%s capture finished: %.3f + %.3f -> %s",
                         self.name, state.start_value, value, direction.value)
            return direction

        self._state = Armed(value)
        logger.debug("%s capture started at %.3f", self.name, value)
        return None

    def reset(self):
        """Abandon any capture in progress."""
        self._state = IDLE

    @property
    def state(self) -> AxisState:
        return self._state

    @property
    def in_progress(self) -> bool:
        return isinstance(self._state, Armed)

    @property
    def start_value(self) -> Optional[float]:
        """Value recorded at the start phase, None while idle."""
        if isinstance(self._state, Armed):
            return self._state.start_value
        return None

    def __repr__(self):
        return f"AxisDetector({self.name}, {self._state})"
