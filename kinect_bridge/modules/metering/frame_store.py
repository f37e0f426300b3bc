"""Holds the most recent frame of each stream type."""

from typing import Dict, Optional

from kinect_bridge.core.types import StreamType


class FrameStore:
    """Latest-frame cache; each arrival overwrites the previous frame."""

    def __init__(self):
        self._frames: Dict[StreamType, object] = {}

    def put(self, stream_type: StreamType, frame):
        self._frames[stream_type] = frame

    def get(self, stream_type: StreamType) -> Optional[object]:
        return self._frames.get(stream_type)

    def clear(self, stream_type: StreamType):
        self._frames.pop(stream_type, None)

    def __contains__(self, stream_type) -> bool:
        return stream_type in self._frames

    def __len__(self) -> int:
        return len(self._frames)
