"""
Single-object association and prediction with occlusion bridging
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from core.constants import (
    MIN_BOX_PIXELS, MIN_TIME_DELTA, PREDICTED_CONFIDENCE_DECAY,
    PREDICTED_MIN_CONFIDENCE, PREDICTED_VELOCITY_DECAY, SIZE_BLEND,
    VELOCITY_KEEP, VELOCITY_NEW
)
from core.models import Detection, NormalizedRect, TargetClass, TrackPoint, TrackState
from utils.geometry import (
    center_pixels, clamp, clamp_to_frame, clamp_vector, lerp, size_pixels
)

# Absorbs float noise when comparing accumulated missed time to the tolerance
_TOLERANCE_EPSILON = 1e-9


@dataclass(frozen=True)
class TrackTuning:
    """Per-class association, prediction and history tuning"""
    occlusion_tolerance: float            # seconds a track may go unmeasured
    association_distance_multiplier: float
    min_association_distance: float      # pixels
    max_speed: float                     # pixels per second
    measurement_blend: float             # weight of the measurement vs prediction
    reacquire_confidence: float          # associate regardless of distance above this
    glitch_min_jump: float               # pixels
    glitch_size_multiplier: float
    history_max_age: float               # seconds

    def association_radius(self, point: TrackPoint) -> float:
        return max(self.min_association_distance,
                   self.association_distance_multiplier * point.size)


BALL_TRACKING = TrackTuning(
    occlusion_tolerance=0.8,
    association_distance_multiplier=3.0,
    min_association_distance=28.0,
    max_speed=1650.0,
    measurement_blend=0.78,
    reacquire_confidence=0.60,
    glitch_min_jump=30.0,
    glitch_size_multiplier=5.0,
    history_max_age=6.0
)

HOOP_TRACKING = TrackTuning(
    occlusion_tolerance=3.0,
    association_distance_multiplier=1.8,
    min_association_distance=22.0,
    max_speed=300.0,
    measurement_blend=0.60,
    reacquire_confidence=0.70,
    glitch_min_jump=20.0,
    glitch_size_multiplier=1.8,
    history_max_age=8.0
)


@dataclass(frozen=True)
class TrackUpdate:
    """Outcome of one association step"""
    track: Optional[TrackState]
    point: Optional[TrackPoint]
    detection: Optional[Detection]


def track_point_from_detection(detection: Detection,
                               frame_w: float,
                               frame_h: float,
                               frame_index: int,
                               timestamp: float,
                               is_predicted: bool = False) -> TrackPoint:
    """Normalized bottom-left detection -> pixel track point with top-left origin"""
    x, y = center_pixels(detection.bbox, frame_w, frame_h)
    w, h = size_pixels(detection.bbox, frame_w, frame_h)
    return TrackPoint(
        x=x, y=y,
        frame_index=frame_index,
        timestamp=timestamp,
        width=w, height=h,
        confidence=float(detection.confidence),
        is_predicted=is_predicted
    )


def detection_from_track_point(point: TrackPoint,
                               cls: TargetClass,
                               frame_w: float,
                               frame_h: float) -> Optional[Detection]:
    """
    Render a track point back into a normalized bottom-left detection

    Box sides are floored at MIN_BOX_PIXELS and the result is clamped to
    the unit square. Returns None for an empty frame or a box that ends up
    with no area.
    """
    if frame_w <= 0 or frame_h <= 0:
        return None

    width_px = max(MIN_BOX_PIXELS, point.width)
    height_px = max(MIN_BOX_PIXELS, point.height)
    x_min_px = point.x - width_px / 2.0
    y_top_px = point.y - height_px / 2.0

    x = clamp(x_min_px / frame_w, 0.0, 1.0)
    y = clamp(1.0 - (y_top_px + height_px) / frame_h, 0.0, 1.0)
    w = clamp(width_px / frame_w, 0.0, 1.0 - x)
    h = clamp(height_px / frame_h, 0.0, 1.0 - y)

    if w <= 0 or h <= 0:
        return None
    return Detection(cls=cls, confidence=point.confidence, bbox=NormalizedRect(x, y, w, h))


def project_center(point: TrackPoint,
                   velocity: Tuple[float, float],
                   dt: float,
                   max_speed: float) -> Tuple[float, float]:
    """Advance a point by its speed-capped velocity over dt seconds"""
    vx, vy = clamp_vector(velocity, max_speed)
    return point.x + vx * dt, point.y + vy * dt


def update_track(track: Optional[TrackState],
                 cls: TargetClass,
                 measurement: Optional[Detection],
                 tuning: TrackTuning,
                 frame_w: float,
                 frame_h: float,
                 frame_index: int,
                 timestamp: float,
                 min_dt: float = MIN_TIME_DELTA) -> TrackUpdate:
    """
    Advance one track by one frame

    Args:
        track: Current track or None
        cls: Class of the tracked object
        measurement: Best accepted candidate this frame
        tuning: Class tuning
        frame_w: Oriented frame width in pixels
        frame_h: Oriented frame height in pixels
        frame_index: Index of this frame
        timestamp: Time of this frame in seconds
        min_dt: Floor for the time step used in prediction and velocity

    Returns:
        New track, the point appended to history (if any) and the detection
        to publish for this frame
    """
    measured = None
    if measurement is not None:
        measured = track_point_from_detection(measurement, frame_w, frame_h, frame_index, timestamp)

    if track is None:
        if measured is None:
            return TrackUpdate(None, None, None)
        return _start_track(measured, cls, frame_w, frame_h)

    latest = track.latest
    raw_dt = max(0.0, timestamp - latest.timestamp)
    dt = max(min_dt, raw_dt)
    predicted_x, predicted_y = project_center(latest, track.velocity, dt, tuning.max_speed)

    if measured is not None:
        distance = math.hypot(measured.x - predicted_x, measured.y - predicted_y)
        associate = (distance <= tuning.association_radius(latest)
                     or measurement.confidence >= tuning.reacquire_confidence)

        if associate:
            x, y = clamp_to_frame(
                lerp(predicted_x, measured.x, tuning.measurement_blend),
                lerp(predicted_y, measured.y, tuning.measurement_blend),
                frame_w, frame_h
            )
            point = TrackPoint(
                x=x, y=y,
                frame_index=frame_index,
                timestamp=timestamp,
                width=lerp(latest.width, measured.width, SIZE_BLEND),
                height=lerp(latest.height, measured.height, SIZE_BLEND),
                confidence=measured.confidence,
                is_predicted=False
            )
            raw_velocity = clamp_vector(((x - latest.x) / dt, (y - latest.y) / dt), tuning.max_speed)
            velocity = (
                track.velocity[0] * VELOCITY_KEEP + raw_velocity[0] * VELOCITY_NEW,
                track.velocity[1] * VELOCITY_KEEP + raw_velocity[1] * VELOCITY_NEW
            )
            return TrackUpdate(
                track=TrackState(latest=point, velocity=velocity, missed_time=0.0),
                point=point,
                detection=detection_from_track_point(point, cls, frame_w, frame_h)
            )

    missed_time = track.missed_time + raw_dt
    if missed_time <= tuning.occlusion_tolerance + _TOLERANCE_EPSILON:
        vx, vy = clamp_vector(track.velocity, tuning.max_speed)
        x, y = clamp_to_frame(latest.x + vx * dt, latest.y + vy * dt, frame_w, frame_h)
        point = TrackPoint(
            x=x, y=y,
            frame_index=frame_index,
            timestamp=timestamp,
            width=latest.width,
            height=latest.height,
            confidence=max(PREDICTED_MIN_CONFIDENCE, latest.confidence * PREDICTED_CONFIDENCE_DECAY),
            is_predicted=True
        )
        velocity = (vx * PREDICTED_VELOCITY_DECAY, vy * PREDICTED_VELOCITY_DECAY)
        return TrackUpdate(
            track=TrackState(latest=point, velocity=velocity, missed_time=missed_time),
            point=point,
            detection=detection_from_track_point(point, cls, frame_w, frame_h)
        )

    # Track lost; a new one can start from the next frame's measurement
    return TrackUpdate(None, None, None)


def _start_track(point: TrackPoint, cls: TargetClass,
                 frame_w: float, frame_h: float) -> TrackUpdate:
    return TrackUpdate(
        track=TrackState(latest=point, velocity=(0.0, 0.0), missed_time=0.0),
        point=point,
        detection=detection_from_track_point(point, cls, frame_w, frame_h)
    )
