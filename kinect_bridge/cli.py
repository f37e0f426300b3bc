"""
Kinect Gesture Bridge
Command-line application.

Opens the sensor, tracks body frames, and turns the nearest person's hand
swipes into slide navigation messages.

Usage:
    kinect-gesture-bridge                    # Real sensor (driver from config)
    kinect-gesture-bridge --mode demo        # Simulated sensor, no hardware
    kinect-gesture-bridge --config my.yaml   # Alternate config file
"""

import argparse
import asyncio
import importlib
import json
import logging
import signal

from kinect_bridge import __version__
from kinect_bridge.core.dispatcher import StreamDispatcher
from kinect_bridge.core.errors import KinectError
from kinect_bridge.core.events import EventBus
from kinect_bridge.core.types import StreamType
from kinect_bridge.modules.analysis import SkeletalAnalyzer
from kinect_bridge.modules.capture import SimulatedDriver
from kinect_bridge.modules.control import SlideController
from kinect_bridge.modules.recognition import GestureDetector, SwipeConfig, SwipeDetector
from kinect_bridge.modules.utils.config import Config
from kinect_bridge.modules.utils.logger import GestureLogger, setup_logging

logger = logging.getLogger(__name__)


def load_driver(config: Config, mode: str):
    """Build the sensor driver for the selected mode."""
    if mode == "demo":
        return SimulatedDriver(fps=config.get("demo.fps", 30))

    driver_cfg = config.driver
    module_name = driver_cfg.get("module")
    class_name = driver_cfg.get("class")
    if not module_name or not class_name:
        raise KinectError("No sensor driver configured (driver.module / driver.class)")
    driver_cls = getattr(importlib.import_module(module_name), class_name)
    return driver_cls(**driver_cfg.get("options", {}))


def log_broadcast(message):
    """Default broadcaster: log the serialized message."""
    logger.debug("Broadcast: %s", json.dumps(message.to_dict(), separators=(",", ":")))


class GestureBridge:
    """Wires the dispatcher, analyzers and slide controller together."""

    def __init__(self, config: Config, driver, broadcast=log_broadcast):
        self._config = config
        self._bus = EventBus()
        self._dispatcher = StreamDispatcher(driver, self._bus)
        self._stop = None

        self._swipes = SwipeDetector(SwipeConfig.from_dict(config.swipe))
        self._gesture_log = GestureLogger()
        self._controller = SlideController(
            swipe_detector=self._swipes,
            broadcast=broadcast,
            analyzer=SkeletalAnalyzer(),
            gesture_detector=GestureDetector(config.gestures),
            gesture_logger=self._gesture_log,
        ).attach(self._bus)

        logger.info("GestureBridge initialized")

    async def start(self):
        await self._dispatcher.open_sensor()

        streams_cfg = self._config.streams
        for name in streams_cfg.get("enabled", ["body"]):
            stream_type = StreamType.from_string(name)
            if stream_type is StreamType.MULTI_SOURCE:
                await self._dispatcher.open(
                    stream_type,
                    frame_types=[StreamType.from_string(n)
                                 for n in streams_cfg.get("multi_source_frame_types", ["body"])],
                    include_joint_floor_data=streams_cfg.get("include_joint_floor_data", False),
                )
            else:
                await self._dispatcher.open(stream_type)

        logger.info("Tracking started: %s",
                    ", ".join(s.value for s in self._dispatcher.active_streams))

    async def run(self):
        self._stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_stop, sig)
            except NotImplementedError:
                # Windows event loops have no signal handlers
                pass

        try:
            await self.start()
            await self._stop.wait()
        finally:
            await self.shutdown()

    def request_stop(self, signum=None):
        logger.info("Signal %s received, shutting down...", signum)
        if self._stop is not None:
            self._stop.set()

    async def shutdown(self):
        """Last-resort teardown; failures are logged, never raised."""
        logger.info("Cleaning up resources...")
        self._controller.detach(self._bus)
        try:
            await self._dispatcher.close_all()
            logger.info("Kinect sensor closed successfully")
        except KinectError as e:
            logger.error("Error closing Kinect sensor: %s", e)
        logger.info("Shutdown complete (%d messages sent, %d swipes).",
                    self._controller.messages_sent, self._gesture_log.total_swipes)


def parse_args():
    parser = argparse.ArgumentParser(description="Kinect Gesture Bridge")
    parser.add_argument(
        "--mode", choices=["control", "demo"], default="control",
        help="control: real sensor, demo: simulated sensor",
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    parser.add_argument("--log-level", type=str, default=None, help="Override logging.level")
    return parser.parse_args()


def main():
    args = parse_args()

    config = Config()
    config.load(config_path=args.config)
    if args.log_level:
        config.update({"logging": {"level": args.log_level}})

    log_cfg = config.logging
    setup_logging(
        level=log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    logger.info("=" * 60)
    logger.info("  KINECT GESTURE BRIDGE  v%s", __version__)
    logger.info("  Mode: %s", args.mode)
    logger.info("=" * 60)

    try:
        driver = load_driver(config, args.mode)
        asyncio.run(GestureBridge(config, driver).run())
    except KinectError as e:
        logger.error("Fatal: %s", e)
        return 1
    return 0

