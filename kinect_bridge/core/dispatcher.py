"""
Stream dispatcher: reader lifecycle, metering and typed frame events.

Owns the open/close lifecycle of the eight reader kinds, feeds each
arrival to the RateMeter and FrameStore, and republishes it on the
EventBus. The composite multi-source reader additionally fans each
populated sub-frame out on that sub-frame's own event.

Every lifecycle operation is a coroutine with defined idempotency:
opening an open stream or closing a closed one succeeds immediately, and
a close requested while another close of the same stream is in flight
waits on the in-flight one.
"""

import asyncio
import logging
from typing import Callable, Dict, Iterable, List, Optional, Union

from kinect_bridge.core.driver import SensorDriver
from kinect_bridge.core.errors import (
    KinectError,
    NotInitializedError,
    SensorOpenError,
    StreamCloseError,
    StreamOpenError,
    TeardownError,
)
from kinect_bridge.core.events import EventBus, Events
from kinect_bridge.core.types import MAX_BODIES, Body, BodyFrame, StreamType
from kinect_bridge.modules.metering import FrameStore, RateMeter

logger = logging.getLogger(__name__)

# stream -> (driver open method, driver close method); body index has no native close
_READERS = {
    StreamType.COLOR: ("open_color_reader", "close_color_reader"),
    StreamType.DEPTH: ("open_depth_reader", "close_depth_reader"),
    StreamType.INFRARED: ("open_infrared_reader", "close_infrared_reader"),
    StreamType.LONG_EXPOSURE_INFRARED: ("open_long_exposure_infrared_reader",
                                        "close_long_exposure_infrared_reader"),
    StreamType.RAW_DEPTH: ("open_raw_depth_reader", "close_raw_depth_reader"),
    StreamType.BODY: ("open_body_reader", "close_body_reader"),
    StreamType.BODY_INDEX: ("track_pixels_for_body_indices", None),
    StreamType.MULTI_SOURCE: ("open_multi_source_reader", "close_multi_source_reader"),
}

PRIMITIVE_STREAMS = tuple(s for s in StreamType if s is not StreamType.MULTI_SOURCE)


def frame_type_mask(frame_types: Iterable[Union[StreamType, int]]) -> int:
    """OR stream kinds (or raw driver bits) into a multi-source bitmask."""
    mask = 0
    for frame_type in frame_types:
        mask |= frame_type.frame_type if isinstance(frame_type, StreamType) else int(frame_type)
    return mask


class StreamDispatcher:
    """Translates driver callbacks into typed events.

    Args:
        driver: Sensor binding
        event_bus: Bus to publish on (a private one is created if omitted)
        clock: Millisecond clock for rate metering
    """

    def __init__(self, driver: SensorDriver, event_bus: Optional[EventBus] = None,
                 clock: Optional[Callable[[], float]] = None):
        self._driver = driver
        self._bus = event_bus or EventBus()
        self._rate_meter = RateMeter(clock)
        self._frame_store = FrameStore()

        self._initialized = False
        self._listeners: Dict[StreamType, Callable] = {}
        self._closing: Dict[StreamType, asyncio.Task] = {}

    # ------------------------------------------------------------------
    # Sensor handle
    # ------------------------------------------------------------------

    async def open_sensor(self) -> bool:
        """Open the sensor handle (idempotent)."""
        if self._initialized:
            return True
        if not self._driver.open():
            raise SensorOpenError()
        self._initialized = True
        logger.info("Kinect sensor opened")
        return True

    async def close_all(self) -> bool:
        """Close every active stream, then release the sensor handle.

        Streams are closed concurrently and all of them are awaited before
        the handle is released. Streams that closed successfully stay closed
        even when others fail.

        Raises:
            TeardownError: if any stream, or the sensor itself, failed to close
        """
        if not self._initialized:
            return True

        active = list(self._listeners)
        results = await asyncio.gather(*(self.close(s) for s in active),
                                       return_exceptions=True)
        failures = {
            stream.value: result
            for stream, result in zip(active, results)
            if isinstance(result, BaseException)
        }

        try:
            await self._await_driver_close(
                self._driver.close, lambda err: KinectError(f"Failed to close sensor: {err}"))
            self._initialized = False
            logger.info("Kinect sensor closed")
        except KinectError as e:
            failures["sensor"] = e

        if failures:
            for name, error in failures.items():
                logger.error("Teardown of %s failed: %s", name, error)
            raise TeardownError(failures)
        return True

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    async def open(self, stream_type: StreamType,
                   frame_types: Optional[Iterable[Union[StreamType, int]]] = None,
                   include_joint_floor_data: bool = False) -> bool:
        """Start tracking a stream (idempotent).

        Args:
            stream_type: Reader to open
            frame_types: Multi-source only, sub-frame kinds to include
                (defaults to every primitive kind)
            include_joint_floor_data: Multi-source only, forwarded to the driver

        Raises:
            NotInitializedError: sensor handle is not open
            StreamOpenError: the driver refused to open the reader
        """
        pending = self._closing.get(stream_type)
        if pending is not None:
            await asyncio.wait({pending})

        if stream_type in self._listeners:
            return True
        if not self._initialized:
            raise NotInitializedError()

        if not self._open_reader(stream_type, frame_types, include_joint_floor_data):
            logger.error("Driver refused to open %s reader", stream_type.value)
            raise StreamOpenError(stream_type)

        self._rate_meter.start(stream_type)

        def _listener(frame, _stream=stream_type):
            self._on_frame(_stream, frame)

        self._driver.on(Events.for_stream(stream_type).value, _listener)
        self._listeners[stream_type] = _listener
        logger.info("Tracking %s frames", stream_type.value)
        return True

    async def close(self, stream_type: StreamType) -> bool:
        """Stop tracking a stream (idempotent).

        Raises:
            StreamCloseError: the driver reported a close failure; the stream
                stays open
        """
        pending = self._closing.get(stream_type)
        if pending is not None:
            return await asyncio.shield(pending)
        if stream_type not in self._listeners:
            return True

        task = asyncio.ensure_future(self._close_stream(stream_type))
        self._closing[stream_type] = task
        try:
            return await task
        finally:
            self._closing.pop(stream_type, None)

    async def _close_stream(self, stream_type: StreamType) -> bool:
        _, close_method = _READERS[stream_type]
        result = True
        if close_method is not None:
            result = await self._await_driver_close(
                getattr(self._driver, close_method),
                lambda err: StreamCloseError(stream_type, err))

        listener = self._listeners.pop(stream_type)
        self._driver.remove_listener(Events.for_stream(stream_type).value, listener)
        self._frame_store.clear(stream_type)
        self._rate_meter.stop(stream_type)
        logger.info("Stopped tracking %s frames", stream_type.value)
        return result

    def _open_reader(self, stream_type, frame_types, include_joint_floor_data) -> bool:
        open_method = getattr(self._driver, _READERS[stream_type][0])
        if stream_type is StreamType.MULTI_SOURCE:
            mask = frame_type_mask(frame_types if frame_types is not None else PRIMITIVE_STREAMS)
            return bool(open_method(mask, include_joint_floor_data))
        if stream_type is StreamType.BODY_INDEX:
            return bool(open_method(list(range(MAX_BODIES))))
        return bool(open_method())

    async def _await_driver_close(self, close_method, make_error) -> bool:
        """Adapt a callback-style driver close into an awaitable."""
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def _callback(err, result=True):
            if future.done():
                return
            if err:
                future.set_exception(make_error(err))
            else:
                future.set_result(True if result is None else bool(result))

        close_method(_callback)
        return await future

    # ------------------------------------------------------------------
    # Frame arrival
    # ------------------------------------------------------------------

    def _on_frame(self, stream_type: StreamType, frame):
        if self._rate_meter.tick(stream_type):
            self._bus.emit(Events.FPS_UPDATE, self._rate_meter.snapshot())

        self._frame_store.put(stream_type, frame)
        self._bus.emit(Events.for_stream(stream_type), frame)

        if stream_type is StreamType.MULTI_SOURCE:
            for sub_type, sub_frame in frame.populated():
                self._bus.emit(Events.for_stream(sub_type), sub_frame)

    # ------------------------------------------------------------------
    # Queries & subscriptions
    # ------------------------------------------------------------------

    def on(self, event: Events, callback: Callable, priority: int = 0):
        self._bus.subscribe(event, callback, priority)
        return self

    def off(self, event: Events, callback: Callable):
        self._bus.unsubscribe(event, callback)
        return self

    def latest_frame(self, stream_type: StreamType):
        return self._frame_store.get(stream_type)

    def tracked_bodies(self) -> List[Body]:
        frame: Optional[BodyFrame] = self._frame_store.get(StreamType.BODY)
        return frame.tracked_bodies() if frame else []

    def is_tracking(self, stream_type: StreamType) -> bool:
        return stream_type in self._listeners

    @property
    def is_open(self) -> bool:
        return self._initialized

    @property
    def active_streams(self) -> List[StreamType]:
        return list(self._listeners)

    @property
    def fps(self) -> Dict[str, int]:
        return self._rate_meter.snapshot()

    @property
    def event_bus(self) -> EventBus:
        return self._bus
