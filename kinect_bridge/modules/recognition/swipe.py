"""
Swipe Detector
==============

Per-hand sliding-window classifier for directional hand swipes.

Each fully tracked hand sample is appended to that hand's window, and
samples older than ``tracking_duration`` are pruned from the front. Once
the window holds two samples and the hand is out of cooldown, the oldest
and newest samples are compared:

    velocity too low            -> no swipe
    horizontal test passes      -> left / right
    vertical test passes        -> up / down   (Y grows downward)
    depth test passes           -> forward / backward

Axes are tried in that order and the first match wins. A swipe clears
the whole window and starts the cooldown.
"""

import logging
import math
import time
from dataclasses import dataclass, fields
from typing import Callable, Dict, List, Optional, Sequence

from kinect_bridge.core.types import (
    Hand,
    HandPositionSample,
    HandTrackingState,
    Joint,
    SwipeDirection,
    SwipeResult,
)

logger = logging.getLogger(__name__)


@dataclass
class SwipeConfig:
    """Swipe detection thresholds. Distances in meters, durations in ms."""
    velocity_threshold: float = 0.2       # Minimum speed (m/s)
    min_movement_distance: float = 0.15   # Minimum travel along the swipe axis
    max_horizontal_change: float = 0.35   # Allowed X drift for vertical/depth swipes
    max_vertical_change: float = 0.35     # Allowed Y drift for horizontal/depth swipes
    tracking_duration: float = 700        # Window length
    cooldown_period: float = 800          # Quiet time after a swipe

    def __post_init__(self):
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ValueError(f"{f.name} must be non-negative, got {getattr(self, f.name)!r}")

    @classmethod
    def from_dict(cls, config: dict) -> "SwipeConfig":
        """Create config from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in (config or {}).items() if k in known})


class SwipeDetector:
    """
    Stateful swipe classifier, one window per hand.

    Example:
        >>> detector = SwipeDetector()
        >>> swipe = detector.classify(Hand.RIGHT, body.joint(JointType.HAND_RIGHT), frame.timestamp)
        >>> if swipe:
        ...     print(swipe.direction)
    """

    def __init__(self, config: Optional[SwipeConfig] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.config = config or SwipeConfig()
        self._clock = clock or (lambda: time.time() * 1000)
        self._hands: Dict[Hand, HandTrackingState] = {
            Hand.LEFT: HandTrackingState(),
            Hand.RIGHT: HandTrackingState(),
        }

    def classify(self, hand: Hand, joint: Optional[Joint], timestamp: float) -> Optional[SwipeResult]:
        """
        Feed one hand sample and check for a swipe.

        Args:
            hand: Which hand the joint belongs to
            joint: Hand joint of the current frame (None if absent)
            timestamp: Capture timestamp of the source frame

        Returns:
            SwipeResult if this sample completed a swipe, else None
        """
        # Inferred or lost samples are skipped without touching the window
        if joint is None or not joint.is_fully_tracked:
            return None

        now = self._clock()
        state = self._hands[hand]
        state.positions.append(HandPositionSample(
            x=joint.camera_x,
            y=joint.camera_y,
            z=joint.camera_z,
            timestamp=now,
            body_timestamp=timestamp,
        ))

        while state.positions and now - state.positions[0].timestamp > self.config.tracking_duration:
            state.positions.popleft()

        if len(state.positions) < 2 or self._in_cooldown(state, now):
            return None

        swipe = self.detect_swipe(state.positions)
        if swipe is None:
            return None

        logger.debug("%s HAND SWIPE DETECTED: %s (%.2fm at %.2fm/s)",
                     hand.value.upper(), swipe.direction.value.upper(),
                     swipe.distance, swipe.velocity)
        state.last_swipe_time = now
        state.positions.clear()
        return swipe

    def detect_swipe(self, positions: Sequence[HandPositionSample]) -> Optional[SwipeResult]:
        """Classify the motion between the oldest and newest samples."""
        if len(positions) < 2:
            return None

        first = positions[0]
        last = positions[-1]

        elapsed = (last.timestamp - first.timestamp) / 1000
        if elapsed == 0:
            return None

        dx = last.x - first.x
        dy = last.y - first.y
        dz = last.z - first.z
        distance = math.sqrt(dx * dx + dy * dy + dz * dz)
        velocity = distance / elapsed

        cfg = self.config
        if velocity < cfg.velocity_threshold:
            return None

        if abs(dx) > cfg.min_movement_distance and abs(dy) < cfg.max_vertical_change:
            direction = SwipeDirection.RIGHT if dx > 0 else SwipeDirection.LEFT
            return SwipeResult(direction, abs(dx), velocity)

        if abs(dy) > cfg.min_movement_distance and abs(dx) < cfg.max_horizontal_change:
            direction = SwipeDirection.UP if dy < 0 else SwipeDirection.DOWN
            return SwipeResult(direction, abs(dy), velocity)

        if (abs(dz) > cfg.min_movement_distance
                and abs(dx) < cfg.max_horizontal_change
                and abs(dy) < cfg.max_vertical_change):
            direction = SwipeDirection.FORWARD if dz < 0 else SwipeDirection.BACKWARD
            return SwipeResult(direction, abs(dz), velocity)

        return None

    def _in_cooldown(self, state: HandTrackingState, now: float) -> bool:
        if state.last_swipe_time is None:
            return False
        return now - state.last_swipe_time <= self.config.cooldown_period

    def reset(self) -> None:
        """Clear both hand windows (cooldown clocks are kept)."""
        for state in self._hands.values():
            state.positions.clear()

    def positions(self, hand: Hand) -> List[HandPositionSample]:
        """Current window of a hand, oldest first."""
        return list(self._hands[hand].positions)

    def last_swipe_time(self, hand: Hand) -> Optional[float]:
        return self._hands[hand].last_swipe_time
