"""Posture and swipe gesture recognition."""
from .posture import GestureDetector
from .swipe import SwipeConfig, SwipeDetector

__all__ = ["GestureDetector", "SwipeConfig", "SwipeDetector"]
