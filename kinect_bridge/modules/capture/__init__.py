"""Sensor drivers."""
from .simulated_driver import SimulatedDriver

__all__ = ["SimulatedDriver"]
