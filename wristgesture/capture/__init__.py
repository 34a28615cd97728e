"""Sensor sample sources."""
from .sample_source import SampleSource, SampleCallback
from .replay_source import ReplaySampleSource

__all__ = ["SampleSource", "SampleCallback", "ReplaySampleSource"]
