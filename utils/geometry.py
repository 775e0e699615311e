"""
Geometry helpers shared by tracking, pose scoring and shot logic
"""

import math
from typing import Tuple

from core.models import NormalizedRect


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]"""
    return min(max(value, lower), upper)


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation from a toward b"""
    return a + (b - a) * t


def normalized_score(value: float, lower: float, upper: float) -> float:
    """Map value linearly onto [0, 1] between lower and upper bounds"""
    if upper <= lower:
        return 0.0
    return clamp((value - lower) / (upper - lower), 0.0, 1.0)


def clamp_vector(vector: Tuple[float, float], max_magnitude: float) -> Tuple[float, float]:
    """Scale a 2D vector down so its magnitude is at most max_magnitude"""
    if max_magnitude <= 0:
        return (0.0, 0.0)
    magnitude = math.hypot(vector[0], vector[1])
    if magnitude <= max_magnitude or magnitude <= 1e-6:
        return (float(vector[0]), float(vector[1]))
    scale = max_magnitude / magnitude
    return (vector[0] * scale, vector[1] * scale)


def clamp_to_frame(x: float, y: float, frame_w: float, frame_h: float) -> Tuple[float, float]:
    """Keep a pixel point inside the frame"""
    return clamp(x, 0.0, frame_w), clamp(y, 0.0, frame_h)


def center_pixels(bbox: NormalizedRect, frame_w: float, frame_h: float) -> Tuple[float, float]:
    """Normalized bottom-left bbox center -> pixel point with top-left origin"""
    return bbox.mid_x * frame_w, (1.0 - bbox.mid_y) * frame_h


def size_pixels(bbox: NormalizedRect, frame_w: float, frame_h: float) -> Tuple[float, float]:
    """Normalized bbox size -> pixel size"""
    return bbox.width * frame_w, bbox.height * frame_h


def normalized_rect_from_xyxy(xyxy, image_w: float, image_h: float) -> NormalizedRect:
    """Top-left pixel box [x1, y1, x2, y2] -> normalized bottom-left rect"""
    x1, y1, x2, y2 = (float(v) for v in xyxy)
    x1, x2 = clamp(x1, 0.0, image_w), clamp(x2, 0.0, image_w)
    y1, y2 = clamp(y1, 0.0, image_h), clamp(y2, 0.0, image_h)
    return NormalizedRect(
        x=x1 / image_w,
        y=1.0 - y2 / image_h,
        width=(x2 - x1) / image_w,
        height=(y2 - y1) / image_h
    )
