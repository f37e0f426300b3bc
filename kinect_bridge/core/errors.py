"""
Exception hierarchy for sensor and stream lifecycle failures.

Gesture detection never raises: missing joints, untracked hands and
degenerate time deltas degrade to "no result" instead.
"""

from typing import Dict

from kinect_bridge.core.types import StreamType


class KinectError(Exception):
    """Base class for all sensor errors."""


class NotInitializedError(KinectError):
    """An operation needing an open sensor was attempted while it is closed."""

    def __init__(self, message: str = "Kinect not initialized"):
        super().__init__(message)


class SensorOpenError(KinectError):
    def __init__(self, message: str = "Could not open Kinect sensor"):
        super().__init__(message)


class StreamOpenError(KinectError):
    """The driver refused to open a reader."""

    def __init__(self, stream_type: StreamType):
        self.stream_type = stream_type
        super().__init__(f"Failed to open {stream_type.value} reader")


class StreamCloseError(KinectError):
    """The driver reported an error while closing a reader."""

    def __init__(self, stream_type: StreamType, cause=None):
        self.stream_type = stream_type
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to close {stream_type.value} reader{detail}")


class TeardownError(KinectError):
    """One or more readers (or the sensor itself) failed to close during close_all()."""

    def __init__(self, failures: Dict[str, BaseException]):
        self.failures = failures
        names = ", ".join(sorted(failures))
        super().__init__(f"Teardown failed for: {names}")
