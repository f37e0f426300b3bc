"""
Frame-local posture detection: raised hands, jumping and hand state.

Pure functions of the current body; no history is kept. Camera-space Y
grows downward, so "higher" means a smaller Y.
"""

import logging

from kinect_bridge.core.types import Body, GestureResults, Hand, HandState, JointType

logger = logging.getLogger(__name__)

RAISE_HEAD_TOLERANCE = 0.1   # meters a hand may rise above the head
JUMP_THRESHOLD = 0.10        # meters, average foot height


class GestureDetector:
    """Raised-hand, jump and hand-state classification."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._raise_tolerance = config.get("raise_head_tolerance", RAISE_HEAD_TOLERANCE)
        self._jump_threshold = config.get("jump_threshold", JUMP_THRESHOLD)

    def hand_raised(self, body: Body, hand: Hand) -> bool:
        head = body.tracked_joint(JointType.HEAD)
        shoulder = body.tracked_joint(hand.shoulder_joint)
        hand_joint = body.tracked_joint(hand.hand_joint)
        if head is None or shoulder is None or hand_joint is None:
            return False

        above_shoulder = hand_joint.camera_y < shoulder.camera_y
        # Reject readings absurdly far above the head (tracking jitter)
        not_too_high = hand_joint.camera_y >= head.camera_y - self._raise_tolerance
        return above_shoulder and not_too_high

    def is_jumping(self, body: Body) -> bool:
        foot_left = body.tracked_joint(JointType.FOOT_LEFT)
        foot_right = body.tracked_joint(JointType.FOOT_RIGHT)
        spine_base = body.tracked_joint(JointType.SPINE_BASE)
        if foot_left is None or foot_right is None or spine_base is None:
            return False

        avg_foot_height = (foot_left.camera_y + foot_right.camera_y) / 2
        return avg_foot_height > self._jump_threshold

    @staticmethod
    def hand_state(code) -> HandState:
        return HandState.from_code(code)

    def detect(self, body: Body) -> GestureResults:
        """Run every posture check against one body."""
        return GestureResults(
            left_raised=self.hand_raised(body, Hand.LEFT),
            right_raised=self.hand_raised(body, Hand.RIGHT),
            left_hand_state=self.hand_state(body.left_hand_state),
            right_hand_state=self.hand_state(body.right_hand_state),
            is_jumping=self.is_jumping(body),
        )
