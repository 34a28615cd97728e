"""
Logging setup and a listener that logs every detected gesture.
"""

import os
import logging
import logging.handlers

from wristgesture.core.events import GestureListener
from wristgesture.core.types import GestureEvent


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure logging for the application."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-32s | %(message)s"
    date_format = "%H:%M:%S"

    level_value = getattr(logging, str(level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)

    # Remove existing handlers
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(level_value)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    # File handler (rotating), always verbose
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.DEBUG)

    return root_logger


class GestureLogger(GestureListener):
    """Gesture listener that writes each gesture to the 'gesture_events' log."""

    def __init__(self):
        self.logger = logging.getLogger("gesture_events")
        self._counts = {event: 0 for event in GestureEvent}

    def on_event(self, event: GestureEvent):
        self._counts[event] += 1
        self.logger.info("Gesture: %-10s | Total: %d", event.value, self.total_gestures)

    def count(self, event: GestureEvent) -> int:
        return self._counts[event]

    @property
    def counts(self) -> dict:
        return {event.value: n for event, n in self._counts.items()}

    @property
    def total_gestures(self) -> int:
        return sum(self._counts.values())
