"""
Typed event bus for frame and rate events.

Publish/subscribe over a fixed set of event kinds, so subscribers never
deal with free-form event names or unchecked payloads.

Usage:
    bus = EventBus()
    bus.subscribe(Events.BODY_FRAME, on_body_frame)
    bus.emit(Events.BODY_FRAME, frame)
"""

import logging
import time
from collections import defaultdict, deque
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from kinect_bridge.core.types import StreamType

logger = logging.getLogger(__name__)


class Events(Enum):
    """Every event the dispatcher can publish."""

    COLOR_FRAME = "colorFrame"
    DEPTH_FRAME = "depthFrame"
    INFRARED_FRAME = "infraredFrame"
    LONG_EXPOSURE_INFRARED_FRAME = "longExposureInfraredFrame"
    RAW_DEPTH_FRAME = "rawDepthFrame"
    BODY_FRAME = "bodyFrame"
    BODY_INDEX_FRAME = "bodyIndexFrame"
    MULTI_SOURCE_FRAME = "multiSourceFrame"
    FPS_UPDATE = "fpsUpdate"

    @classmethod
    def for_stream(cls, stream_type: StreamType) -> "Events":
        """Frame-arrived event of a stream type."""
        return _STREAM_EVENTS[stream_type]


_STREAM_EVENTS = {
    StreamType.COLOR: Events.COLOR_FRAME,
    StreamType.DEPTH: Events.DEPTH_FRAME,
    StreamType.INFRARED: Events.INFRARED_FRAME,
    StreamType.LONG_EXPOSURE_INFRARED: Events.LONG_EXPOSURE_INFRARED_FRAME,
    StreamType.RAW_DEPTH: Events.RAW_DEPTH_FRAME,
    StreamType.BODY: Events.BODY_FRAME,
    StreamType.BODY_INDEX: Events.BODY_INDEX_FRAME,
    StreamType.MULTI_SOURCE: Events.MULTI_SOURCE_FRAME,
}


Listener = Callable[[object], None]


class EventBus:
    """Publish/subscribe bus with priority ordering.

    Dispatch is synchronous on the caller's thread; the dispatcher only ever
    emits from the event loop, so no locking is needed.
    """

    def __init__(self, max_history: int = 100):
        self._listeners: Dict[Events, List[Tuple[int, Listener]]] = defaultdict(list)
        self._history = deque(maxlen=max_history)

    def subscribe(self, event: Events, callback: Listener, priority: int = 0):
        """Register a listener for an event.

        Args:
            event: Event to listen for
            callback: Called with the event payload
            priority: Higher priority callbacks run first (default 0)
        """
        self._check(event)
        self._listeners[event].append((priority, callback))
        # Stable sort keeps registration order within a priority
        self._listeners[event].sort(key=lambda x: -x[0])
        logger.debug("Subscribed to '%s': %s (priority=%d)",
                     event.value, getattr(callback, "__name__", callback), priority)

    def once(self, event: Events, callback: Listener, priority: int = 0):
        """Register a listener that is removed after its first call."""

        def _wrapper(payload):
            self.unsubscribe(event, _wrapper)
            callback(payload)

        _wrapper.__name__ = getattr(callback, "__name__", "once")
        self.subscribe(event, _wrapper, priority)
        return _wrapper

    def unsubscribe(self, event: Events, callback: Listener):
        """Remove a listener for an event."""
        self._listeners[event] = [
            (p, cb) for p, cb in self._listeners[event] if cb != callback
        ]

    def emit(self, event: Events, payload=None) -> bool:
        """Emit an event to all registered listeners.

        Returns:
            True if at least one listener was registered
        """
        self._check(event)
        listeners = list(self._listeners.get(event, []))

        self._history.append({"event": event.value, "time": time.time()})

        for _, callback in listeners:
            try:
                callback(payload)
            except Exception as e:
                logger.error("Event handler error [%s -> %s]: %s",
                             event.value, getattr(callback, "__name__", callback), e)
        return bool(listeners)

    def clear(self, event: Optional[Events] = None):
        """Remove all listeners, optionally for a specific event."""
        if event is not None:
            self._listeners.pop(event, None)
        else:
            self._listeners.clear()

    @property
    def registered_events(self) -> list:
        """List all events with registered listeners."""
        return [event for event, cbs in self._listeners.items() if cbs]

    @property
    def listener_count(self) -> int:
        """Total number of registered listeners."""
        return sum(len(cbs) for cbs in self._listeners.values())

    def get_history(self, last_n: int = 10) -> list:
        """Get recent event history."""
        return list(self._history)[-last_n:]

    @staticmethod
    def _check(event):
        if not isinstance(event, Events):
            raise ValueError(f"Unknown event: {event!r}")
