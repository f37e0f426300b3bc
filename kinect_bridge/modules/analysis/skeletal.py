"""
Skeletal analysis over a single body frame.

Nearest-person selection and three-point joint flexion angles. Nothing
here keeps state between frames.
"""

import logging
import math
from typing import Optional

import numpy as np

from kinect_bridge.core.types import Body, BodyFrame, Joint, JointAngles, JointType

logger = logging.getLogger(__name__)

# (result field, first joint, vertex, last joint)
_ANGLE_TRIPLES = (
    ("left_elbow", JointType.SHOULDER_LEFT, JointType.ELBOW_LEFT, JointType.WRIST_LEFT),
    ("right_elbow", JointType.SHOULDER_RIGHT, JointType.ELBOW_RIGHT, JointType.WRIST_RIGHT),
    ("left_knee", JointType.HIP_LEFT, JointType.KNEE_LEFT, JointType.ANKLE_LEFT),
    ("right_knee", JointType.HIP_RIGHT, JointType.KNEE_RIGHT, JointType.ANKLE_RIGHT),
)


def nearest_person(frame: Optional[BodyFrame]) -> Optional[Body]:
    """Tracked body with the smallest spine-base depth.

    Bodies whose spine base is not tracked are skipped. On equal depth the
    first body in frame order wins. Returns None if no body qualifies.
    """
    if frame is None:
        return None

    nearest = None
    min_distance = math.inf
    for body in frame.bodies:
        if not body.tracked:
            continue
        spine_base = body.tracked_joint(JointType.SPINE_BASE)
        if spine_base is None:
            continue
        if spine_base.camera_z < min_distance:
            min_distance = spine_base.camera_z
            nearest = body
    return nearest


def joint_angle(a: Optional[Joint], vertex: Optional[Joint], c: Optional[Joint]) -> Optional[float]:
    """Angle in degrees at ``vertex`` between the rays to ``a`` and ``c``.

    Returns None if any joint is missing or untracked, or if a ray has zero
    length.
    """
    if any(j is None or not j.is_tracked for j in (a, vertex, c)):
        return None

    v1 = a.position - vertex.position
    v2 = c.position - vertex.position
    norm = np.linalg.norm(v1) * np.linalg.norm(v2)
    if norm == 0:
        return None

    # Clamp so float overshoot never leaves arccos' domain
    cos_angle = np.clip(np.dot(v1, v2) / norm, -1.0, 1.0)
    return float(np.degrees(np.arccos(cos_angle)))


class SkeletalAnalyzer:
    """Frame-level skeletal queries for the application layer."""

    def nearest_person(self, frame: Optional[BodyFrame]) -> Optional[Body]:
        return nearest_person(frame)

    def joint_angle(self, a, vertex, c) -> Optional[float]:
        return joint_angle(a, vertex, c)

    def joint_angles(self, body: Body) -> JointAngles:
        """Elbow and knee angles per side; sides missing a tracked joint are omitted."""
        angles = JointAngles()
        for name, first, vertex, last in _ANGLE_TRIPLES:
            value = joint_angle(body.joint(first), body.joint(vertex), body.joint(last))
            if value is not None:
                setattr(angles, name, value)
        return angles
