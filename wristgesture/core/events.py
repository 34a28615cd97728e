"""
Gesture listener contract and ordered listener registry.

The coordinator publishes each recognized gesture to a ListenerRegistry,
which fans it out to every registered GestureListener in registration order.

Usage:
    registry = ListenerRegistry()
    registry.add(CallbackListener(lambda event: print(event.value)))
    registry.notify_all(GestureEvent.WRIST_IN)
"""

import logging
import threading
from typing import Callable, List

from .types import GestureEvent

logger = logging.getLogger(__name__)


class GestureListener:
    """Receives notifications when a wrist or arm gesture is detected.

    Override the hooks of interest; the others are no-ops.
    """

    def on_wrist_out(self):
        """Called when a wrist out (scroll down) gesture has been detected."""

    def on_wrist_in(self):
        """Called when a wrist in (scroll up) gesture has been detected."""

    def on_arm_down(self):
        """Called when an arm down (tap) gesture has been detected."""

    def on_arm_up(self):
        """Called when an arm up (back) gesture has been detected."""

    def on_event(self, event: GestureEvent):
        """Dispatch a gesture to the matching hook."""
        if event is GestureEvent.WRIST_OUT:
            self.on_wrist_out()
        elif event is GestureEvent.WRIST_IN:
            self.on_wrist_in()
        elif event is GestureEvent.ARM_DOWN:
            self.on_arm_down()
        elif event is GestureEvent.ARM_UP:
            self.on_arm_up()


class CallbackListener(GestureListener):
    """Adapts a plain function taking the GestureEvent."""

    def __init__(self, callback: Callable[[GestureEvent], None]):
        self._callback = callback

    def on_event(self, event: GestureEvent):
        self._callback(event)

    def __eq__(self, other):
        if isinstance(other, CallbackListener):
            return self._callback == other._callback
        return NotImplemented

    def __hash__(self):
        return hash(self._callback)

    def __repr__(self):
        name = getattr(self._callback, "__name__", repr(self._callback))
        return f"CallbackListener({name})"


class ListenerRegistry:
    """Thread-safe ordered collection of gesture listeners.

    Dispatch runs over a snapshot so listeners may be added or removed
    while a notification is in flight.
    """

    def __init__(self):
        self._listeners: List[GestureListener] = []
        self._lock = threading.Lock()

    def add(self, listener: GestureListener) -> bool:
        """Append a listener. Duplicates are allowed.

        Returns:
            True, the collection always changes
        """
        with self._lock:
            self._listeners.append(listener)
        logger.debug("Added gesture listener: %r", listener)
        return True

    def remove(self, listener: GestureListener) -> bool:
        """Remove the first occurrence of a listener.

        Returns:
            True if the listener was registered, False otherwise
        """
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                return False
        logger.debug("Removed gesture listener: %r", listener)
        return True

    def clear(self):
        """Remove all listeners."""
        with self._lock:
            self._listeners.clear()

    def notify_all(self, event: GestureEvent) -> int:
        """Notify every listener of a gesture, in registration order.

        A failing listener is logged and skipped.

        Returns:
            Number of listeners notified without error
        """
        with self._lock:
            listeners = list(self._listeners)

        delivered = 0
        for listener in listeners:
            try:
                listener.on_event(event)
                delivered += 1
            except Exception:
                logger.exception("Gesture listener error [%s -> %r]", event.value, listener)
        return delivered

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def __len__(self):
        return self.listener_count

    def __contains__(self, listener):
        with self._lock:
            return listener in self._listeners
