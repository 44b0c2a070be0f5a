"""
Device Base
===========

Polling bookkeeping shared by sensors and actuators.
"""

import numpy as np

from .exceptions import TimeOrderError


class Device:
    """
    A simulated device polled on its own interval.

    A device is due when ``now - last_poll_ms >= polling_interval_ms``.
    ``last_poll_ms`` starts at the run start time, so the first poll happens
    one full interval after the run begins.
    """

    kind = "device"

    def __init__(self, polling_interval_ms: int, position: np.ndarray):
        if polling_interval_ms <= 0:
            raise ValueError("Polling interval must be positive")
        self.polling_interval_ms = int(polling_interval_ms)
        self.position = np.array(position, dtype=float)
        self.last_poll_ms = 0
        self.poll_count = 0

    @property
    def next_deadline_ms(self) -> int:
        return self.last_poll_ms + self.polling_interval_ms

    def is_due(self, now_ms: int) -> bool:
        return now_ms - self.last_poll_ms >= self.polling_interval_ms

    def mark_polled(self, now_ms: int):
        if now_ms < self.last_poll_ms:
            raise TimeOrderError(
                f"{type(self).__name__} polled at {now_ms} ms, "
                f"before previous poll at {self.last_poll_ms} ms")
        self.last_poll_ms = now_ms
        self.poll_count += 1

    def reset(self, start_ms: int = 0):
        """Forget polling history; next poll is one interval after ``start_ms``."""
        self.last_poll_ms = start_ms
        self.poll_count = 0
