"""
Exception hierarchy for the wrist gesture detector.

The detection core itself never fails terminally; these are raised at the
boundaries (sample ingestion, configuration, recorded session loading).
"""


class WristGestureError(ValueError):
    """Base class for all wrist gesture errors."""


class MalformedSampleError(WristGestureError):
    """A sensor sample could not be turned into a 3-axis reading."""


class ConfigurationError(WristGestureError):
    """Detector configuration holds an unusable value."""
