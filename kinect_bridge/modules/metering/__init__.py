"""Per-stream frame-rate metering and latest-frame storage."""
from .rate_meter import RateMeter, RateRecord
from .frame_store import FrameStore

__all__ = ["RateMeter", "RateRecord", "FrameStore"]
