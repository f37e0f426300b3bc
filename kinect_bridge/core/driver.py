"""
Sensor driver interface.

Describes the native Kinect binding the dispatcher sits on. Concrete
drivers implement the reader open/close primitives; frame delivery goes
through ``on()``/``remove_listener()`` with the driver's event names
("bodyFrame", "colorFrame", ...) and must happen on the asyncio loop
thread (bindings with their own capture thread should hop over with
``loop.call_soon_threadsafe``).

Close primitives are callback based, ``callback(err, result)``, matching
the native binding; the dispatcher wraps them into awaitables.
"""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

CloseCallback = Callable[[Optional[BaseException], bool], None]


class SensorDriver(ABC):
    """Base class for sensor bindings."""

    def __init__(self):
        self._frame_listeners = defaultdict(list)

    # --- Sensor handle ---

    @abstractmethod
    def open(self) -> bool:
        """Open the sensor. Returns False if it is unavailable."""

    @abstractmethod
    def close(self, callback: CloseCallback):
        """Release the sensor handle."""

    # --- Readers ---

    @abstractmethod
    def open_color_reader(self) -> bool: ...

    @abstractmethod
    def open_depth_reader(self) -> bool: ...

    @abstractmethod
    def open_infrared_reader(self) -> bool: ...

    @abstractmethod
    def open_long_exposure_infrared_reader(self) -> bool: ...

    @abstractmethod
    def open_raw_depth_reader(self) -> bool: ...

    @abstractmethod
    def open_body_reader(self) -> bool: ...

    @abstractmethod
    def open_multi_source_reader(self, frame_types: int,
                                 include_joint_floor_data: bool = False) -> bool: ...

    @abstractmethod
    def track_pixels_for_body_indices(self, indices: Iterable[int]) -> bool:
        """Start body-index frames. There is no matching native close."""

    @abstractmethod
    def close_color_reader(self, callback: CloseCallback): ...

    @abstractmethod
    def close_depth_reader(self, callback: CloseCallback): ...

    @abstractmethod
    def close_infrared_reader(self, callback: CloseCallback): ...

    @abstractmethod
    def close_long_exposure_infrared_reader(self, callback: CloseCallback): ...

    @abstractmethod
    def close_raw_depth_reader(self, callback: CloseCallback): ...

    @abstractmethod
    def close_body_reader(self, callback: CloseCallback): ...

    @abstractmethod
    def close_multi_source_reader(self, callback: CloseCallback): ...

    # --- Frame delivery ---

    def on(self, event_name: str, listener: Callable):
        self._frame_listeners[event_name].append(listener)
        return self

    def remove_listener(self, event_name: str, listener: Callable):
        listeners = self._frame_listeners.get(event_name, [])
        if listener in listeners:
            listeners.remove(listener)
        return self

    def listener_count(self, event_name: str) -> int:
        return len(self._frame_listeners.get(event_name, []))

    def deliver(self, event_name: str, frame):
        """Hand a frame to every listener of ``event_name``."""
        for listener in list(self._frame_listeners.get(event_name, [])):
            listener(frame)
