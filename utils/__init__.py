"""
Utility functions
"""

from .clock import SystemClock, ManualClock
from .geometry import (
    clamp, lerp, normalized_score, clamp_vector,
    clamp_to_frame, center_pixels, size_pixels,
    normalized_rect_from_xyxy
)
from .logging import setup_logging
from .sliding_window import SlidingWindow, window_slice
from .throttle import Throttle
from .vision_queue import VisionQueue

__all__ = [
    'SystemClock', 'ManualClock',
    'clamp', 'lerp', 'normalized_score', 'clamp_vector',
    'clamp_to_frame', 'center_pixels', 'size_pixels',
    'normalized_rect_from_xyxy',
    'setup_logging',
    'SlidingWindow', 'window_slice',
    'Throttle',
    'VisionQueue'
]
