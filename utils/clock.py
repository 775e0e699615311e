"""
Clock implementations
"""

import time

from core.interfaces import Clock


class SystemClock(Clock):
    """Monotonic wall clock"""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


class ManualClock(Clock):
    """Clock advanced explicitly, sleeping just moves time forward"""

    def __init__(self, start: float = 0.0):
        self.current = float(start)
        self.sleeps = []

    def now(self) -> float:
        return self.current

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            self.sleeps.append(seconds)
            self.current += seconds

    def advance(self, seconds: float):
        self.current += seconds
