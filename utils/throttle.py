"""
Rate limiting by explicit timestamp comparison
"""

from typing import Optional

from core.interfaces import Clock
from core.constants import THROTTLE_FPS
from .clock import SystemClock


class Throttle:
    """Admit at most one frame per interval"""

    def __init__(self, rate_hz: float = THROTTLE_FPS, clock: Optional[Clock] = None):
        """
        Initialize throttle

        Args:
            rate_hz: Target processing rate
            clock: Time source used when callers do not pass a timestamp
        """
        self.interval = 1.0 / rate_hz if rate_hz > 0 else 0.0
        self.clock = clock or SystemClock()
        self.last_time: Optional[float] = None

    def admit(self, timestamp: Optional[float] = None) -> bool:
        """Return True and remember the time if enough time has elapsed"""
        now = self.clock.now() if timestamp is None else timestamp
        if self.last_time is not None and now - self.last_time < self.interval:
            return False
        self.last_time = now
        return True

    def reset(self):
        self.last_time = None
