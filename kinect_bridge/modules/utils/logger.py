"""
Logging setup plus a gesture event log.
"""

import logging
import logging.handlers
import os
import time


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console and optional rotating-file logging."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-25s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(root_logger.level)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class GestureLogger:
    """Logs derived gesture signals and keeps a bounded history."""

    def __init__(self, max_history: int = 500):
        self.logger = logging.getLogger("gesture_events")
        self._history = []
        self._max_history = max_history

    def _record(self, entry: dict):
        self._history.append(entry)
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]

    def log_swipe(self, hand, swipe, slide_state=None):
        """Log a classified swipe."""
        self._record({
            "timestamp": time.time(),
            "hand": hand.value,
            "direction": swipe.direction.value,
            "distance": swipe.distance,
            "velocity": swipe.velocity,
            "slide_state": slide_state,
        })
        self.logger.info(
            "Swipe: %-5s %-8s | %.2fm @ %.2fm/s | Slide: %s",
            hand.value,
            swipe.direction.value,
            swipe.distance,
            swipe.velocity,
            slide_state or "none",
        )

    def log_fps(self, rates: dict):
        self.logger.debug("FPS: %s", ", ".join(f"{k}={v}" for k, v in sorted(rates.items())))

    def get_history(self, last_n=None):
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def total_swipes(self):
        return len(self._history)
