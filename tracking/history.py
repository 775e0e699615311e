"""
Track history cleaning and trimming
"""

import math
from typing import Optional, Tuple

from core.constants import NOMINAL_FPS
from core.models import TrackPoint, TrackState
from .association import TrackTuning

History = Tuple[TrackPoint, ...]


def glitch_bound(previous: TrackPoint, current: TrackPoint, tuning: TrackTuning) -> float:
    """Largest plausible jump between two consecutive history points"""
    elapsed_frames = max(1.0, (current.timestamp - previous.timestamp) * NOMINAL_FPS)
    return max(tuning.glitch_min_jump,
               tuning.glitch_size_multiplier * previous.size) * elapsed_frames


def clean_history(history: History,
                  track: Optional[TrackState],
                  tuning: TrackTuning) -> Tuple[History, Optional[TrackState]]:
    """
    Drop a just-appended measured point that jumped implausibly far

    The track is rolled back to the previous point with zero velocity.
    Predicted points are never removed.
    """
    if len(history) < 2:
        return history, track

    previous, current = history[-2], history[-1]
    if current.is_predicted:
        return history, track

    jump = math.hypot(current.x - previous.x, current.y - previous.y)
    if jump <= glitch_bound(previous, current, tuning):
        return history, track

    if track is not None:
        track = TrackState(latest=previous, velocity=(0.0, 0.0), missed_time=0.0)
    return history[:-1], track


def trim_history(history: History, now: float, max_age: float) -> History:
    """Drop points older than max_age seconds"""
    cutoff = now - max_age
    for i, point in enumerate(history):
        if point.timestamp >= cutoff:
            return history[i:]
    return ()
