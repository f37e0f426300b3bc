"""Kinect gesture bridge: skeletal tracking streams to semantic gesture signals."""

__version__ = "1.0.0"
