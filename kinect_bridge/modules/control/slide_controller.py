"""
Slide control from body frames.

For every body frame, the nearest person's hands are fed to the swipe
detector and turned into a presentation message:

    left hand swipes right   -> "previous"
    right hand swipes left   -> "next"
    right hand closed        -> right_hand.is_closed

The message is handed to a broadcaster callable; how it reaches clients
is up to the caller. When nobody is tracked, both hand windows are
reset and nothing is sent.
"""

import logging
import time
from dataclasses import asdict, dataclass, field
from typing import Callable, Optional

from kinect_bridge.core.events import EventBus, Events
from kinect_bridge.core.types import BodyFrame, Hand, HandState, SwipeDirection
from kinect_bridge.modules.analysis import SkeletalAnalyzer
from kinect_bridge.modules.recognition import GestureDetector, SwipeDetector
from kinect_bridge.modules.utils.logger import GestureLogger

logger = logging.getLogger(__name__)

SLIDE_NEXT = "next"
SLIDE_PREVIOUS = "previous"


@dataclass
class RightHand:
    is_closed: bool = False
    x: float = 0.5
    y: float = 0.5


@dataclass
class SlideMessage:
    right_hand: RightHand = field(default_factory=RightHand)
    slide_state: Optional[str] = None
    timestamp: float = 0.0

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            "rightHand": {
                "isClosed": data["right_hand"]["is_closed"],
                "x": data["right_hand"]["x"],
                "y": data["right_hand"]["y"],
            },
            "slideState": self.slide_state,
            "timestamp": self.timestamp,
        }


class SlideController:
    """Turns body frames into slide navigation messages."""

    def __init__(self, swipe_detector: SwipeDetector,
                 broadcast: Callable[[SlideMessage], None],
                 analyzer: Optional[SkeletalAnalyzer] = None,
                 gesture_detector: Optional[GestureDetector] = None,
                 gesture_logger: Optional[GestureLogger] = None):
        self._swipes = swipe_detector
        self._broadcast = broadcast
        self._analyzer = analyzer or SkeletalAnalyzer()
        self._gestures = gesture_detector or GestureDetector()
        self._gesture_logger = gesture_logger or GestureLogger()
        self._messages_sent = 0

    def attach(self, bus: EventBus):
        bus.subscribe(Events.BODY_FRAME, self.on_body_frame)
        bus.subscribe(Events.FPS_UPDATE, self._gesture_logger.log_fps)
        return self

    def detach(self, bus: EventBus):
        bus.unsubscribe(Events.BODY_FRAME, self.on_body_frame)
        bus.unsubscribe(Events.FPS_UPDATE, self._gesture_logger.log_fps)

    def on_body_frame(self, frame: BodyFrame) -> Optional[SlideMessage]:
        person = self._analyzer.nearest_person(frame)
        if person is None:
            self._swipes.reset()
            return None

        frame_time = frame.timestamp or time.time() * 1000
        message = SlideMessage(timestamp=time.time() * 1000)

        right = person.joint(Hand.RIGHT.hand_joint)
        if right is not None:
            message.right_hand.x = right.depth_x
            message.right_hand.y = right.depth_y

        left_swipe = self._swipes.classify(Hand.LEFT, person.joint(Hand.LEFT.hand_joint), frame_time)
        right_swipe = self._swipes.classify(Hand.RIGHT, right, frame_time)

        gestures = self._gestures.detect(person)
        message.right_hand.is_closed = gestures.right_hand_state is HandState.CLOSED

        if left_swipe is not None:
            if left_swipe.direction is SwipeDirection.RIGHT:
                message.slide_state = SLIDE_PREVIOUS
            self._gesture_logger.log_swipe(Hand.LEFT, left_swipe, message.slide_state)

        if right_swipe is not None:
            if right_swipe.direction is SwipeDirection.LEFT:
                message.slide_state = SLIDE_NEXT
            self._gesture_logger.log_swipe(
                Hand.RIGHT, right_swipe,
                SLIDE_NEXT if right_swipe.direction is SwipeDirection.LEFT else None)

        self._broadcast(message)
        self._messages_sent += 1
        return message

    @property
    def messages_sent(self) -> int:
        return self._messages_sent
