"""
Shared fixtures: a scriptable sensor driver, a manual clock and skeleton builders.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from kinect_bridge.core.driver import SensorDriver
from kinect_bridge.core.types import Body, BodyFrame, Joint, JointType, TrackingState


class ManualClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


class FakeDriver(SensorDriver):
    """Driver whose open results and close errors are set per test.

    ``refuse`` holds open-method names that return False; ``close_errors``
    maps close-method names to the error passed to the callback.
    ``defer_close`` holds close-method names whose callbacks are parked in
    ``pending_closes`` until a test fires them.
    """

    def __init__(self):
        super().__init__()
        self.refuse = set()
        self.close_errors = {}
        self.defer_close = set()
        self.pending_closes = {}
        self.calls = []

    def _open(self, name, *args):
        self.calls.append((name,) + args)
        return name not in self.refuse

    def _close(self, name, callback):
        self.calls.append((name,))
        if name in self.defer_close:
            self.pending_closes[name] = callback
            return
        error = self.close_errors.get(name)
        callback(error, error is None)

    def open(self):
        return self._open("open")

    def close(self, callback):
        self._close("close", callback)

    def open_color_reader(self):
        return self._open("open_color_reader")

    def open_depth_reader(self):
        return self._open("open_depth_reader")

    def open_infrared_reader(self):
        return self._open("open_infrared_reader")

    def open_long_exposure_infrared_reader(self):
        return self._open("open_long_exposure_infrared_reader")

    def open_raw_depth_reader(self):
        return self._open("open_raw_depth_reader")

    def open_body_reader(self):
        return self._open("open_body_reader")

    def open_multi_source_reader(self, frame_types, include_joint_floor_data=False):
        return self._open("open_multi_source_reader", frame_types, include_joint_floor_data)

    def track_pixels_for_body_indices(self, indices):
        return self._open("track_pixels_for_body_indices", tuple(indices))

    def close_color_reader(self, callback):
        self._close("close_color_reader", callback)

    def close_depth_reader(self, callback):
        self._close("close_depth_reader", callback)

    def close_infrared_reader(self, callback):
        self._close("close_infrared_reader", callback)

    def close_long_exposure_infrared_reader(self, callback):
        self._close("close_long_exposure_infrared_reader", callback)

    def close_raw_depth_reader(self, callback):
        self._close("close_raw_depth_reader", callback)

    def close_body_reader(self, callback):
        self._close("close_body_reader", callback)

    def close_multi_source_reader(self, callback):
        self._close("close_multi_source_reader", callback)

    def called(self, name) -> bool:
        return any(call[0] == name for call in self.calls)


def make_joint(joint_type, x=0.0, y=0.0, z=2.0, state=TrackingState.TRACKED, **kwargs):
    return Joint(joint_type=joint_type, camera_x=x, camera_y=y, camera_z=z,
                 tracking_state=state, **kwargs)


def make_body(joints=None, tracked=True, tracking_id=1, left_hand_state=0, right_hand_state=0):
    """Body from a {JointType: (x, y, z)} or {JointType: Joint} mapping."""
    built = {}
    for joint_type, value in (joints or {}).items():
        built[joint_type] = value if isinstance(value, Joint) else make_joint(joint_type, *value)
    return Body(tracking_id=tracking_id, tracked=tracked, joints=built,
                left_hand_state=left_hand_state, right_hand_state=right_hand_state)


def make_frame(*bodies, timestamp=0.0):
    return BodyFrame(bodies=list(bodies), timestamp=timestamp)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def standing_body():
    """Person standing 2m away with arms down."""
    return make_body({
        JointType.SPINE_BASE: (0.0, 0.0, 2.0),
        JointType.HEAD: (0.0, -0.70, 2.0),
        JointType.SHOULDER_LEFT: (-0.20, -0.50, 2.0),
        JointType.SHOULDER_RIGHT: (0.20, -0.50, 2.0),
        JointType.HAND_LEFT: (-0.28, 0.02, 2.0),
        JointType.HAND_RIGHT: (0.28, 0.02, 2.0),
        JointType.FOOT_LEFT: (-0.11, 0.90, 2.0),
        JointType.FOOT_RIGHT: (0.11, 0.90, 2.0),
    })
