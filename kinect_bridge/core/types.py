"""
Shared domain types for the Kinect gesture bridge.

Centralizes enums, frame containers and result types used across modules
to eliminate circular imports and ensure type consistency. Values of the
integer enums match the numeric codes delivered by the sensor driver.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Deque, Dict, Iterator, List, Optional, Tuple

import numpy as np


MAX_BODIES = 6


# =============================================================================
# Driver Enumerations
# =============================================================================

class JointType(IntEnum):
    """Skeletal joint ids as reported by the sensor."""
    SPINE_BASE = 0
    SPINE_MID = 1
    NECK = 2
    HEAD = 3
    SHOULDER_LEFT = 4
    ELBOW_LEFT = 5
    WRIST_LEFT = 6
    HAND_LEFT = 7
    SHOULDER_RIGHT = 8
    ELBOW_RIGHT = 9
    WRIST_RIGHT = 10
    HAND_RIGHT = 11
    HIP_LEFT = 12
    KNEE_LEFT = 13
    ANKLE_LEFT = 14
    FOOT_LEFT = 15
    HIP_RIGHT = 16
    KNEE_RIGHT = 17
    ANKLE_RIGHT = 18
    FOOT_RIGHT = 19
    SPINE_SHOULDER = 20
    HAND_TIP_LEFT = 21
    THUMB_LEFT = 22
    HAND_TIP_RIGHT = 23
    THUMB_RIGHT = 24


class TrackingState(IntEnum):
    NOT_TRACKED = 0
    INFERRED = 1
    TRACKED = 2


class HandState(Enum):
    """Open/closed classification of a hand."""
    UNKNOWN = "unknown"
    NOT_TRACKED = "notTracked"
    OPEN = "open"
    CLOSED = "closed"
    LASSO = "lasso"

    @classmethod
    def from_code(cls, code) -> "HandState":
        """Map the driver's numeric hand state, defaulting to UNKNOWN."""
        try:
            return _HAND_STATE_CODES.get(code, cls.UNKNOWN)
        except TypeError:
            # Unhashable codes
            return cls.UNKNOWN


_HAND_STATE_CODES = {
    1: HandState.NOT_TRACKED,
    2: HandState.OPEN,
    3: HandState.CLOSED,
    4: HandState.LASSO,
}


class Hand(Enum):
    LEFT = "left"
    RIGHT = "right"

    @property
    def hand_joint(self) -> JointType:
        return JointType.HAND_LEFT if self is Hand.LEFT else JointType.HAND_RIGHT

    @property
    def shoulder_joint(self) -> JointType:
        return JointType.SHOULDER_LEFT if self is Hand.LEFT else JointType.SHOULDER_RIGHT


class StreamType(Enum):
    """The eight reader kinds a sensor exposes.

    ``frame_type`` is the driver bitmask bit used to select sub-frames of a
    multi-source reader; the composite stream itself has none.
    """
    COLOR = "color"
    DEPTH = "depth"
    INFRARED = "infrared"
    LONG_EXPOSURE_INFRARED = "longExposureInfrared"
    RAW_DEPTH = "rawDepth"
    BODY = "body"
    BODY_INDEX = "bodyIndex"
    MULTI_SOURCE = "multiSource"

    @property
    def frame_type(self) -> int:
        return _FRAME_TYPE_BITS.get(self, 0)

    @classmethod
    def from_string(cls, name: str) -> "StreamType":
        """Accept either the enum value ('rawDepth') or member name ('raw_depth')."""
        try:
            return cls(name)
        except ValueError:
            return cls[name.upper()]


_FRAME_TYPE_BITS = {
    StreamType.COLOR: 0x1,
    StreamType.INFRARED: 0x2,
    StreamType.LONG_EXPOSURE_INFRARED: 0x4,
    StreamType.DEPTH: 0x8,
    StreamType.BODY_INDEX: 0x10,
    StreamType.BODY: 0x20,
    StreamType.RAW_DEPTH: 0x40,
}


# =============================================================================
# Skeleton
# =============================================================================

@dataclass(frozen=True)
class Joint:
    """A single skeletal landmark for one frame.

    Camera-space coordinates are meters with Y increasing downward (sensor
    convention used throughout gesture logic). Depth/color coordinates are
    normalized 2D projections.
    """

    joint_type: JointType
    camera_x: float = 0.0
    camera_y: float = 0.0
    camera_z: float = 0.0
    depth_x: float = 0.0
    depth_y: float = 0.0
    color_x: float = 0.0
    color_y: float = 0.0
    orientation_w: float = 1.0
    orientation_x: float = 0.0
    orientation_y: float = 0.0
    orientation_z: float = 0.0
    tracking_state: int = TrackingState.NOT_TRACKED

    @property
    def is_tracked(self) -> bool:
        """Tracked or inferred."""
        return self.tracking_state > TrackingState.NOT_TRACKED

    @property
    def is_fully_tracked(self) -> bool:
        return self.tracking_state == TrackingState.TRACKED

    @property
    def position(self) -> np.ndarray:
        return np.array([self.camera_x, self.camera_y, self.camera_z], dtype=np.float64)


@dataclass
class Body:
    """One detected person's skeleton plus per-hand open/closed state."""

    tracking_id: int = 0
    tracked: bool = False
    joints: Dict[JointType, Joint] = field(default_factory=dict)
    left_hand_state: int = 0
    right_hand_state: int = 0

    def joint(self, joint_type: JointType) -> Optional[Joint]:
        return self.joints.get(joint_type)

    def tracked_joint(self, joint_type: JointType) -> Optional[Joint]:
        """Return the joint only if it is tracked or inferred."""
        joint = self.joints.get(joint_type)
        if joint is None or not joint.is_tracked:
            return None
        return joint


@dataclass(frozen=True)
class FloorClipPlane:
    x: float
    y: float
    z: float
    w: float


@dataclass
class BodyFrame:
    bodies: List[Body] = field(default_factory=list)
    timestamp: float = 0.0
    floor_clip_plane: Optional[FloorClipPlane] = None

    def tracked_bodies(self) -> List[Body]:
        return [body for body in self.bodies if body.tracked]


# =============================================================================
# Image-like Frames
# =============================================================================

@dataclass
class ImageFrame:
    """Raw buffer frame (color, infrared, body index...)."""

    data: bytes = b""
    width: int = 0
    height: int = 0
    timestamp: float = 0.0


class ColorFrame(ImageFrame):
    pass


class InfraredFrame(ImageFrame):
    pass


class LongExposureInfraredFrame(ImageFrame):
    pass


class RawDepthFrame(ImageFrame):
    pass


class BodyIndexFrame(ImageFrame):
    pass


@dataclass
class DepthFrame(ImageFrame):
    min_reliable_distance: int = 0
    max_reliable_distance: int = 0


@dataclass
class MultiSourceFrame:
    """Composite frame carrying zero or more sub-frames."""

    timestamp: float = 0.0
    color: Optional[ColorFrame] = None
    depth: Optional[DepthFrame] = None
    infrared: Optional[InfraredFrame] = None
    long_exposure_infrared: Optional[LongExposureInfraredFrame] = None
    raw_depth: Optional[RawDepthFrame] = None
    body: Optional[BodyFrame] = None
    body_index: Optional[BodyIndexFrame] = None

    def populated(self) -> Iterator[Tuple[StreamType, object]]:
        """Yield (stream type, sub-frame) for each sub-frame present."""
        for stream_type, attr in _MULTI_SOURCE_FIELDS:
            sub_frame = getattr(self, attr)
            if sub_frame is not None:
                yield stream_type, sub_frame


_MULTI_SOURCE_FIELDS = (
    (StreamType.COLOR, "color"),
    (StreamType.DEPTH, "depth"),
    (StreamType.INFRARED, "infrared"),
    (StreamType.LONG_EXPOSURE_INFRARED, "long_exposure_infrared"),
    (StreamType.RAW_DEPTH, "raw_depth"),
    (StreamType.BODY, "body"),
    (StreamType.BODY_INDEX, "body_index"),
)


# =============================================================================
# Gesture Results
# =============================================================================

class SwipeDirection(Enum):
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    FORWARD = "forward"
    BACKWARD = "backward"


@dataclass(frozen=True)
class SwipeResult:
    direction: SwipeDirection
    distance: float
    velocity: float

    def __repr__(self):
        return (f"SwipeResult({self.direction.value}, "
                f"{self.distance:.2f}m @ {self.velocity:.2f}m/s)")


@dataclass(frozen=True)
class HandPositionSample:
    """Hand position at ``timestamp`` (detector clock, ms) from a frame captured at ``body_timestamp``."""

    x: float
    y: float
    z: float
    timestamp: float
    body_timestamp: float


@dataclass
class HandTrackingState:
    positions: Deque[HandPositionSample] = field(default_factory=deque)
    last_swipe_time: Optional[float] = None


@dataclass
class JointAngles:
    """Flexion angles in degrees; None where the joint triple was not tracked."""

    left_elbow: Optional[float] = None
    right_elbow: Optional[float] = None
    left_knee: Optional[float] = None
    right_knee: Optional[float] = None

    def to_dict(self) -> Dict[str, float]:
        return {
            name: value for name, value in (
                ("leftElbow", self.left_elbow),
                ("rightElbow", self.right_elbow),
                ("leftKnee", self.left_knee),
                ("rightKnee", self.right_knee),
            ) if value is not None
        }


@dataclass
class GestureResults:
    left_raised: bool = False
    right_raised: bool = False
    left_hand_state: HandState = HandState.UNKNOWN
    right_hand_state: HandState = HandState.UNKNOWN
    is_jumping: bool = False
