"""
Wrist Gesture Detection
=======================

Detects wrist-in / wrist-out and arm-up / arm-down gestures from the
gyroscope and linear accelerometer streams of a wrist-worn device.

Modules:
    - core: Shared types, errors and the gesture listener registry
    - capture: Sensor sample sources
    - recognition: Axis detectors, gesture coordinator and host facade
    - utils: Configuration and logging
"""

__version__ = "1.0.0"
__author__ = "Bracelet Team"
