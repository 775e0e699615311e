"""
Time- and count-capped sliding window used for pose and detection history
"""

from collections import deque
from typing import Generic, Iterable, List, Tuple, TypeVar

from core.constants import WINDOW_MAX_DURATION, WINDOW_MAX_FRAMES

T = TypeVar('T')


class SlidingWindow(Generic[T]):
    """
    Timestamp-ordered window of frames

    Entries must expose a ``timestamp`` attribute. After every append the
    window drops entries older than ``max_duration`` relative to the newest
    timestamp, then the oldest entries beyond ``max_frames``.
    """

    def __init__(self,
                 max_duration: float = WINDOW_MAX_DURATION,
                 max_frames: int = WINDOW_MAX_FRAMES):
        self.max_duration = max_duration
        self.max_frames = max_frames
        self._entries = deque()

    def append(self, entry: T, now: float = None):
        """Append an entry and enforce both caps"""
        self._entries.append(entry)
        self.trim(entry.timestamp if now is None else now)

    def trim(self, now: float):
        cutoff = now - self.max_duration
        while self._entries and self._entries[0].timestamp < cutoff:
            self._entries.popleft()

        while len(self._entries) > self.max_frames:
            self._entries.popleft()

    def snapshot(self) -> Tuple[T, ...]:
        return tuple(self._entries)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def window_slice(entries: Iterable[T], center: float, radius: float) -> List[T]:
    """Entries with timestamp in [center - radius, center + radius]"""
    lower = center - radius
    upper = center + radius
    return [e for e in entries if lower <= e.timestamp <= upper]
