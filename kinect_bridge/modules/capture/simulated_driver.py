"""
Simulated sensor for running without hardware.

Generates body frames on the asyncio loop: one tracked person standing
about 2m from the sensor whose right hand sweeps side to side. Non-body
readers open successfully but never produce frames.
"""

import asyncio
import logging
import math
import time

from kinect_bridge.core.driver import SensorDriver
from kinect_bridge.core.types import (
    Body,
    BodyFrame,
    FloorClipPlane,
    Joint,
    JointType,
    MultiSourceFrame,
    StreamType,
    TrackingState,
)

logger = logging.getLogger(__name__)

# Standing pose, camera space (meters, Y down)
_REST_POSE = {
    JointType.SPINE_BASE: (0.0, 0.0, 2.0),
    JointType.SPINE_MID: (0.0, -0.30, 2.0),
    JointType.NECK: (0.0, -0.55, 2.0),
    JointType.HEAD: (0.0, -0.70, 2.0),
    JointType.SHOULDER_LEFT: (-0.20, -0.50, 2.0),
    JointType.ELBOW_LEFT: (-0.25, -0.25, 2.0),
    JointType.WRIST_LEFT: (-0.27, -0.05, 2.0),
    JointType.HAND_LEFT: (-0.28, 0.02, 2.0),
    JointType.SHOULDER_RIGHT: (0.20, -0.50, 2.0),
    JointType.ELBOW_RIGHT: (0.25, -0.40, 1.85),
    JointType.WRIST_RIGHT: (0.25, -0.45, 1.70),
    JointType.HAND_RIGHT: (0.25, -0.45, 1.65),
    JointType.HIP_LEFT: (-0.10, 0.05, 2.0),
    JointType.KNEE_LEFT: (-0.11, 0.45, 2.0),
    JointType.ANKLE_LEFT: (-0.11, 0.85, 2.0),
    JointType.FOOT_LEFT: (-0.11, 0.90, 1.95),
    JointType.HIP_RIGHT: (0.10, 0.05, 2.0),
    JointType.KNEE_RIGHT: (0.11, 0.45, 2.0),
    JointType.ANKLE_RIGHT: (0.11, 0.85, 2.0),
    JointType.FOOT_RIGHT: (0.11, 0.90, 1.95),
    JointType.SPINE_SHOULDER: (0.0, -0.50, 2.0),
}


class SimulatedDriver(SensorDriver):
    """Synthetic body-frame source.

    Args:
        fps: Frame rate of generated body frames
        sweep_period: Seconds for one full left-right-left hand sweep
        sweep_amplitude: Half-width of the sweep in meters
    """

    def __init__(self, fps: float = 30.0, sweep_period: float = 3.0, sweep_amplitude: float = 0.35):
        super().__init__()
        self._interval = 1.0 / fps
        self._sweep_period = sweep_period
        self._amplitude = sweep_amplitude
        self._opened = False
        self._start = time.time()
        self._tasks = {}
        self._multi_source_mask = 0

    def open(self) -> bool:
        self._opened = True
        self._start = time.time()
        return True

    def close(self, callback):
        self._stop_all()
        self._opened = False
        callback(None, True)

    # --- Readers ---

    def open_body_reader(self) -> bool:
        return self._start_stream(StreamType.BODY)

    def open_multi_source_reader(self, frame_types: int, include_joint_floor_data: bool = False) -> bool:
        self._multi_source_mask = frame_types
        return self._start_stream(StreamType.MULTI_SOURCE)

    def open_color_reader(self) -> bool:
        return self._opened

    def open_depth_reader(self) -> bool:
        return self._opened

    def open_infrared_reader(self) -> bool:
        return self._opened

    def open_long_exposure_infrared_reader(self) -> bool:
        return self._opened

    def open_raw_depth_reader(self) -> bool:
        return self._opened

    def track_pixels_for_body_indices(self, indices) -> bool:
        return self._opened

    def close_body_reader(self, callback):
        self._stop_stream(StreamType.BODY)
        callback(None, True)

    def close_multi_source_reader(self, callback):
        self._stop_stream(StreamType.MULTI_SOURCE)
        callback(None, True)

    def close_color_reader(self, callback):
        callback(None, True)

    def close_depth_reader(self, callback):
        callback(None, True)

    def close_infrared_reader(self, callback):
        callback(None, True)

    def close_long_exposure_infrared_reader(self, callback):
        callback(None, True)

    def close_raw_depth_reader(self, callback):
        callback(None, True)

    # --- Generation ---

    def _start_stream(self, stream_type: StreamType) -> bool:
        if not self._opened:
            return False
        if stream_type not in self._tasks:
            self._tasks[stream_type] = asyncio.ensure_future(self._produce(stream_type))
        return True

    def _stop_stream(self, stream_type: StreamType):
        task = self._tasks.pop(stream_type, None)
        if task is not None:
            task.cancel()

    def _stop_all(self):
        for stream_type in list(self._tasks):
            self._stop_stream(stream_type)

    async def _produce(self, stream_type: StreamType):
        while True:
            body_frame = self.body_frame(time.time() - self._start)
            if stream_type is StreamType.BODY:
                self.deliver("bodyFrame", body_frame)
            else:
                frame = MultiSourceFrame(timestamp=body_frame.timestamp)
                if self._multi_source_mask & StreamType.BODY.frame_type:
                    frame.body = body_frame
                self.deliver("multiSourceFrame", frame)
            await asyncio.sleep(self._interval)

    def body_frame(self, elapsed: float) -> BodyFrame:
        """Body frame ``elapsed`` seconds into the simulation."""
        offset = self._amplitude * math.sin(2 * math.pi * elapsed / self._sweep_period)
        joints = {}
        for joint_type, (x, y, z) in _REST_POSE.items():
            if joint_type in (JointType.HAND_RIGHT, JointType.WRIST_RIGHT):
                x += offset
            joints[joint_type] = Joint(
                joint_type=joint_type,
                camera_x=x,
                camera_y=y,
                camera_z=z,
                # Rough depth-space projection, normalized
                depth_x=0.5 + x / (2 * z),
                depth_y=0.5 + y / (2 * z),
                tracking_state=TrackingState.TRACKED,
            )
        body = Body(tracking_id=1, tracked=True, joints=joints,
                    left_hand_state=2, right_hand_state=2)
        untracked = [Body(tracking_id=0, tracked=False) for _ in range(5)]
        return BodyFrame(
            bodies=[body] + untracked,
            timestamp=elapsed * 1000,
            floor_clip_plane=FloorClipPlane(0.0, 1.0, 0.0, 0.9),
        )
