#!/usr/bin/env python3
"""
Wrist Gesture Detection - recorded session replay.

Feeds a recorded gyroscope / linear accelerometer session through the
gesture detector and prints every detected gesture.

Usage:
    python main.py                                  # Replay bundled session
    python main.py --replay my_session.csv          # Replay a recording
    python main.py --no-acceleration                # Simulate a missing accelerometer
    python main.py --log-level DEBUG                # Show every significant sample
"""

import sys
import os
import argparse
import logging

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)

from wristgesture.capture.replay_source import ReplaySampleSource
from wristgesture.core.errors import WristGestureError
from wristgesture.core.events import CallbackListener
from wristgesture.core.types import SensorChannel
from wristgesture.recognition.coordinator import DetectorConfig
from wristgesture.recognition.detector import WristGestureDetector
from wristgesture.utils.config import Config
from wristgesture.utils.logger import setup_logging, GestureLogger

logger = logging.getLogger(__name__)

DEFAULT_SESSION = os.path.join(PROJECT_ROOT, "data", "sample_session.csv")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Wrist Gesture Detection - replay a recorded sensor session"
    )
    parser.add_argument(
        "--replay", type=str, default=DEFAULT_SESSION,
        help="CSV session (channel,timestamp_ns,x,y,z)"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to config.yaml"
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level"
    )
    parser.add_argument(
        "--no-rotation", action="store_true",
        help="Treat the gyroscope as unavailable"
    )
    parser.add_argument(
        "--no-acceleration", action="store_true",
        help="Treat the linear accelerometer as unavailable"
    )
    return parser.parse_args(argv)


def available_channels(config: Config, args) -> set:
    channels = set()
    if config.get("sensors.rotation", True) and not args.no_rotation:
        channels.add(SensorChannel.ROTATION)
    if config.get("sensors.acceleration", True) and not args.no_acceleration:
        channels.add(SensorChannel.ACCELERATION)
    return channels


def main(argv=None) -> int:
    args = parse_args(argv)

    # Load configuration
    config = Config()
    config.load(config_path=args.config)

    # Setup logging
    log_cfg = config.get_section("logging")
    setup_logging(
        level=args.log_level or log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    try:
        detector_config = DetectorConfig.from_dict(config.detection)
        source = ReplaySampleSource.from_csv(
            args.replay, available=available_channels(config, args))
    except (WristGestureError, OSError) as e:
        logger.error("Cannot start replay: %s", e)
        return 1

    detector = WristGestureDetector(source, detector_config)
    gesture_logger = GestureLogger()
    detector.add_listener(gesture_logger)
    detector.add_listener(CallbackListener(lambda event: print(event.value)))

    logger.info("Wrist gestures: %s | Arm gestures: %s",
                "yes" if detector.can_detect_wrist_gestures() else "no",
                "yes" if detector.can_detect_arm_gestures() else "no")

    with detector:
        delivered = source.replay()
        stats = detector.stats

    logger.info("Replayed %d samples, %d gestures", delivered, gesture_logger.total_gestures)
    logger.info("Dropped: throttled=%d insignificant=%d blocked=%d malformed=%d",
                stats["throttled"], stats["insignificant"],
                stats["blocked"], stats["malformed"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
