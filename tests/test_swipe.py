"""
Tests for Swipe Detection
=========================
"""

import pytest

from kinect_bridge.core.types import (
    Hand,
    HandPositionSample,
    JointType,
    SwipeDirection,
    TrackingState,
)
from kinect_bridge.modules.recognition.swipe import SwipeConfig, SwipeDetector

from conftest import make_joint


def hand_joint(x=0.0, y=0.0, z=2.0, state=TrackingState.TRACKED):
    return make_joint(JointType.HAND_RIGHT, x, y, z, state=state)


def sample(x, y, z, t):
    return HandPositionSample(x=x, y=y, z=z, timestamp=t, body_timestamp=t)


class TestSwipeConfig:
    """Test suite for SwipeConfig."""

    def test_default_values(self):
        config = SwipeConfig()

        assert config.velocity_threshold == 0.2
        assert config.min_movement_distance == 0.15
        assert config.max_horizontal_change == 0.35
        assert config.max_vertical_change == 0.35
        assert config.tracking_duration == 700
        assert config.cooldown_period == 800

    def test_from_dict_partial(self):
        config = SwipeConfig.from_dict({"cooldown_period": 500, "unknown_key": 1})

        assert config.cooldown_period == 500
        assert config.tracking_duration == 700  # Default

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValueError):
            SwipeConfig(min_movement_distance=-0.1)


class TestDetectSwipe:
    """Test suite for the window classifier."""

    @pytest.fixture
    def detector(self, clock):
        return SwipeDetector(clock=clock)

    def test_fewer_than_two_samples(self, detector):
        assert detector.detect_swipe([]) is None
        assert detector.detect_swipe([sample(0, 0, 2, 0)]) is None

    def test_zero_elapsed_time(self, detector):
        assert detector.detect_swipe([sample(0, 0, 2, 100), sample(0.5, 0, 2, 100)]) is None

    @pytest.mark.parametrize("dx,expected", [
        (0.3, SwipeDirection.RIGHT),
        (-0.3, SwipeDirection.LEFT),
    ])
    def test_horizontal(self, detector, dx, expected):
        swipe = detector.detect_swipe([sample(0, 0, 2, 0), sample(dx, 0.05, 2, 300)])

        assert swipe.direction == expected
        assert swipe.distance == pytest.approx(0.3)

    @pytest.mark.parametrize("dy,expected", [
        (-0.3, SwipeDirection.UP),
        (0.3, SwipeDirection.DOWN),
    ])
    def test_vertical_y_grows_downward(self, detector, dy, expected):
        swipe = detector.detect_swipe([sample(0, 0, 2, 0), sample(0.02, dy, 2, 300)])

        assert swipe.direction == expected

    @pytest.mark.parametrize("dz,expected", [
        (-0.3, SwipeDirection.FORWARD),
        (0.3, SwipeDirection.BACKWARD),
    ])
    def test_depth(self, detector, dz, expected):
        swipe = detector.detect_swipe([sample(0, 0, 2, 0), sample(0.02, 0.02, 2 + dz, 300)])

        assert swipe.direction == expected
        assert swipe.distance == pytest.approx(0.3)

    def test_horizontal_wins_over_vertical(self, detector):
        # Both axes exceed min distance and stay inside the cross-axis bounds
        swipe = detector.detect_swipe([sample(0, 0, 2, 0), sample(0.25, -0.25, 2, 300)])

        assert swipe.direction == SwipeDirection.RIGHT

    def test_vertical_wins_over_depth(self, detector):
        swipe = detector.detect_swipe([sample(0, 0, 2, 0), sample(0, 0.25, 1.7, 300)])

        assert swipe.direction == SwipeDirection.DOWN

    def test_too_slow(self, detector):
        # 0.3m over 2s = 0.15 m/s
        assert detector.detect_swipe([sample(0, 0, 2, 0), sample(0.3, 0, 2, 2000)]) is None

    def test_too_short(self, detector):
        assert detector.detect_swipe([sample(0, 0, 2, 0), sample(0.1, 0, 2, 100)]) is None

    def test_diagonal_outside_cross_axis_bounds(self, detector):
        assert detector.detect_swipe([sample(0, 0, 2, 0), sample(0.5, 0.5, 2, 300)]) is None

    def test_cross_axis_knobs_are_independent(self, clock):
        detector = SwipeDetector(SwipeConfig(max_vertical_change=0.1), clock=clock)

        # Horizontal rejected by the tight vertical bound, vertical still allowed
        swipe = detector.detect_swipe([sample(0, 0, 2, 0), sample(0.2, 0.3, 2, 300)])

        assert swipe.direction == SwipeDirection.DOWN


class TestClassify:
    """Test suite for the per-hand state machine."""

    @pytest.fixture
    def detector(self, clock):
        return SwipeDetector(clock=clock)

    def feed(self, detector, clock, hand, xs, step=100, y=0.0):
        result = None
        for i, x in enumerate(xs):
            if i:
                clock.advance(step)
            result = detector.classify(hand, hand_joint(x, y), clock.now)
        return result

    def test_right_swipe_scenario(self, detector, clock):
        """Three samples 200ms apart moving 0.25m right."""
        results = []
        for x in (0.0, 0.125, 0.25):
            results.append(detector.classify(Hand.RIGHT, hand_joint(x), clock.now))
            clock.advance(200)

        assert results[0] is None
        assert results[1] is None
        swipe = results[2]
        assert swipe.direction == SwipeDirection.RIGHT
        assert swipe.distance == pytest.approx(0.25)
        assert swipe.velocity == pytest.approx(0.625, abs=0.05)

    def test_single_sample_never_classifies(self, detector, clock):
        assert detector.classify(Hand.LEFT, hand_joint(1.0), clock.now) is None

    def test_window_cleared_after_swipe(self, detector, clock):
        assert self.feed(detector, clock, Hand.RIGHT, [0.0, 0.3]) is not None

        assert detector.positions(Hand.RIGHT) == []
        assert detector.last_swipe_time(Hand.RIGHT) == clock.now

    def test_pre_clear_samples_do_not_retrigger(self, detector, clock):
        self.feed(detector, clock, Hand.RIGHT, [0.0, 0.3])

        clock.advance(900)  # past cooldown
        assert detector.classify(Hand.RIGHT, hand_joint(0.3), clock.now) is None

    def test_cooldown_blocks_second_swipe(self, detector, clock):
        self.feed(detector, clock, Hand.RIGHT, [0.0, 0.3])

        # Fresh motion inside the 800ms cooldown
        assert self.feed(detector, clock, Hand.RIGHT, [0.3, 0.0, -0.3]) is None

    def test_swipe_after_cooldown(self, detector, clock):
        self.feed(detector, clock, Hand.RIGHT, [0.0, 0.3])
        clock.advance(900)

        swipe = self.feed(detector, clock, Hand.RIGHT, [0.3, 0.0])

        assert swipe.direction == SwipeDirection.LEFT

    def test_hands_are_independent(self, detector, clock):
        self.feed(detector, clock, Hand.RIGHT, [0.0, 0.3])

        swipe = self.feed(detector, clock, Hand.LEFT, [0.0, -0.3])

        assert swipe.direction == SwipeDirection.LEFT
        assert detector.positions(Hand.RIGHT) == []

    def test_cooldown_boundary_is_inclusive(self, detector, clock):
        clock.advance(100)
        self.feed(detector, clock, Hand.RIGHT, [0.0, 0.3])
        swipe_time = detector.last_swipe_time(Hand.RIGHT)

        clock.now = swipe_time + 700
        detector.classify(Hand.RIGHT, hand_joint(0.3), clock.now)
        clock.advance(100)  # exactly 800ms after the swipe
        assert detector.classify(Hand.RIGHT, hand_joint(-0.3), clock.now) is None

        clock.advance(1)
        swipe = detector.classify(Hand.RIGHT, hand_joint(-0.3), clock.now)
        assert swipe.direction == SwipeDirection.LEFT

    def test_sample_at_window_edge_is_kept(self, detector, clock):
        detector.classify(Hand.RIGHT, hand_joint(0.0), clock.now)
        clock.advance(700)
        detector.classify(Hand.RIGHT, hand_joint(0.01), clock.now)

        assert len(detector.positions(Hand.RIGHT)) == 2

        clock.advance(1)
        detector.classify(Hand.RIGHT, hand_joint(0.02), clock.now)
        assert [p.x for p in detector.positions(Hand.RIGHT)] == [0.01, 0.02]

    def test_old_samples_pruned(self, detector, clock):
        detector.classify(Hand.RIGHT, hand_joint(0.0), clock.now)
        clock.advance(800)
        detector.classify(Hand.RIGHT, hand_joint(0.01), clock.now)

        assert len(detector.positions(Hand.RIGHT)) == 1

    def test_slow_drift_does_not_swipe(self, detector, clock):
        # 0.05m every 300ms never covers 0.15m inside the 700ms window fast enough
        assert self.feed(detector, clock, Hand.RIGHT,
                         [0.0, 0.05, 0.10, 0.15, 0.20, 0.25], step=300) is None

    @pytest.mark.parametrize("state", [TrackingState.INFERRED, TrackingState.NOT_TRACKED])
    def test_untracked_sample_ignored_without_reset(self, detector, clock, state):
        detector.classify(Hand.RIGHT, hand_joint(0.0), clock.now)
        clock.advance(100)

        assert detector.classify(Hand.RIGHT, hand_joint(0.5, state=state), clock.now) is None
        assert len(detector.positions(Hand.RIGHT)) == 1

        clock.advance(100)
        swipe = detector.classify(Hand.RIGHT, hand_joint(0.3), clock.now)
        assert swipe.direction == SwipeDirection.RIGHT

    def test_missing_joint(self, detector, clock):
        assert detector.classify(Hand.RIGHT, None, clock.now) is None
        assert detector.positions(Hand.RIGHT) == []

    def test_sample_keeps_frame_timestamp(self, detector, clock):
        clock.advance(5000)
        detector.classify(Hand.RIGHT, hand_joint(0.0), 1234.0)

        position = detector.positions(Hand.RIGHT)[0]
        assert position.timestamp == 5000
        assert position.body_timestamp == 1234.0

    def test_reset_clears_windows(self, detector, clock):
        detector.classify(Hand.LEFT, hand_joint(0.0), clock.now)
        detector.classify(Hand.RIGHT, hand_joint(0.0), clock.now)

        detector.reset()

        assert detector.positions(Hand.LEFT) == []
        assert detector.positions(Hand.RIGHT) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
