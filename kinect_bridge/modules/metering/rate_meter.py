"""
Per-stream frame-rate metering with a 1-second rolling window.

Each arrival bumps a counter; once at least one second has passed since
the window opened, the rate is computed as round(count * 1000 / elapsed_ms)
and the window restarts.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from kinect_bridge.core.types import StreamType

logger = logging.getLogger(__name__)

RATE_WINDOW_MS = 1000


def wall_clock_ms() -> float:
    return time.time() * 1000


@dataclass
class RateRecord:
    count: int = 0
    window_start: float = 0.0
    rate: int = 0


class RateMeter:
    """Tracks FPS for every active stream."""

    def __init__(self, clock: Optional[Callable[[], float]] = None,
                 window_ms: int = RATE_WINDOW_MS):
        self._clock = clock or wall_clock_ms
        self._window_ms = window_ms
        self._records: Dict[StreamType, RateRecord] = {}

    def start(self, stream_type: StreamType):
        """(Re)initialize a stream's counter; window starts now."""
        self._records[stream_type] = RateRecord(window_start=self._clock())

    def stop(self, stream_type: StreamType):
        self._records.pop(stream_type, None)

    def tick(self, stream_type: StreamType) -> bool:
        """Record one arrival.

        Returns:
            True when the window rolled over and a new rate was computed
        """
        record = self._records.get(stream_type)
        if record is None:
            # Arrival on a stream that is not metered (already closed)
            return False

        record.count += 1
        now = self._clock()
        elapsed = now - record.window_start
        if elapsed < self._window_ms:
            return False

        # Half-up rounding
        record.rate = int(math.floor(record.count * 1000 / elapsed + 0.5))
        record.count = 0
        record.window_start = now
        logger.debug("%s: %d fps", stream_type.value, record.rate)
        return True

    def rate(self, stream_type: StreamType) -> int:
        record = self._records.get(stream_type)
        return record.rate if record else 0

    def snapshot(self) -> Dict[str, int]:
        """Latest known rate of every metered stream, keyed by stream name."""
        return {stream.value: record.rate for stream, record in self._records.items()}

    def is_metering(self, stream_type: StreamType) -> bool:
        return stream_type in self._records
