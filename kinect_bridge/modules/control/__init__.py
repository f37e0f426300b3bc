"""Application-level control built on the derived gesture signals."""
from .slide_controller import SlideController, SlideMessage

__all__ = ["SlideController", "SlideMessage"]
