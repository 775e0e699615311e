"""
Shot phase state machine - arms on upward ball motion near the hoop, scores rim crossings
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from core.constants import (
    ATTEMPT_TIMEOUT, CROSSING_FINALIZE_TIMEOUT, LOST_TRACK_TIMEOUT,
    MIN_TIME_DELTA, SHOT_COOLDOWN
)
from core.models import (
    DetectedShotEvent, FrameSource, ShotDiagnostics, ShotPhase, TrackPoint
)
from utils.geometry import clamp

REASON_CROSSING_SETTLED = "crossing_settled"
REASON_CROSSING_TIMEOUT = "crossing_timeout"
REASON_ATTEMPT_TIMEOUT = "attempt_timeout"
REASON_DESCENDED_PAST_HOOP = "descended_past_hoop"
REASON_ESCAPED_SIDEWAYS = "escaped_sideways"


@dataclass(frozen=True)
class ShotTuning:
    """Thresholds of the shot phase machine, pixels and seconds"""
    # Arming
    near_hoop_min_dx: float = 35.0
    near_hoop_width_factor: float = 3.2
    arm_velocity: float = -22.0
    strong_arm_velocity: float = -36.0
    arm_zone_height_factor: float = 2.5
    pose_release_threshold: float = 0.33

    # Rim
    rim_height_factor: float = 0.5
    above_rim_margin_factor: float = 0.2

    # Finalizing
    settled_height_factor: float = 0.85
    crossing_timeout: float = CROSSING_FINALIZE_TIMEOUT
    attempt_timeout: float = ATTEMPT_TIMEOUT
    descend_velocity: float = 22.0
    descend_height_factor: float = 0.4
    escape_min_dx: float = 80.0
    escape_width_factor: float = 4.2
    escape_velocity: float = 12.0
    cooldown: float = SHOT_COOLDOWN
    lost_track_timeout: float = LOST_TRACK_TIMEOUT
    min_dt: float = MIN_TIME_DELTA

    # Make decision
    inner_min_half_width: float = 8.0
    inner_width_factor: float = 0.42
    outer_min_half_width: float = 12.0
    outer_width_factor: float = 0.68

    # Event confidence
    make_base: float = 0.55
    miss_base: float = 0.28
    alignment_weight: float = 0.30
    pose_weight: float = 0.25
    alignment_min_width: float = 12.0
    alignment_width_factor: float = 0.85
    no_crossing_alignment: float = 0.35
    min_confidence: float = 0.05
    max_confidence: float = 0.99


def ball_velocity_y(ball_history: Sequence[TrackPoint], min_dt: float = MIN_TIME_DELTA) -> Optional[float]:
    """Vertical ball velocity in px/s from the last two history points"""
    if len(ball_history) < 2:
        return None
    previous, current = ball_history[-2], ball_history[-1]
    dt = max(min_dt, current.timestamp - previous.timestamp)
    return (current.y - previous.y) / dt


def downward_rim_crossing_x(ball_history: Sequence[TrackPoint], rim_y: float) -> Optional[float]:
    """
    Interpolated x where the ball passed down through rim level

    Requires the previous point above the rim (smaller y) and the current
    one at or below it. Two predicted points never count as a crossing.
    """
    if len(ball_history) < 2:
        return None
    previous, current = ball_history[-2], ball_history[-1]

    if not (previous.y < rim_y <= current.y):
        return None
    if previous.is_predicted and current.is_predicted:
        return None

    dy = current.y - previous.y
    if abs(dy) <= 1e-5:
        return None

    t = (rim_y - previous.y) / dy
    if t < 0 or t > 1:
        return None
    return previous.x + (current.x - previous.x) * t


def shot_confidence(is_make: bool,
                    crossing_offset: Optional[float],
                    hoop_width: float,
                    pose_confidence: float,
                    tuning: ShotTuning = ShotTuning()) -> float:
    """Confidence of a finalized attempt"""
    base = tuning.make_base if is_make else tuning.miss_base
    if crossing_offset is None:
        alignment = tuning.no_crossing_alignment
    else:
        scale = max(tuning.alignment_min_width, tuning.alignment_width_factor * hoop_width)
        alignment = 1.0 - min(1.0, abs(crossing_offset) / scale)
    value = base + tuning.alignment_weight * alignment + tuning.pose_weight * pose_confidence
    return clamp(value, tuning.min_confidence, tuning.max_confidence)


class ShotStateMachine:
    """Idle -> Tracking -> Cooldown -> Idle, one instance per session"""

    def __init__(self, tuning: Optional[ShotTuning] = None):
        self.tuning = tuning or ShotTuning()
        self.logger = logging.getLogger(__name__)
        self.phase = ShotPhase.idle()
        self._reset_attempt()

    def _reset_attempt(self):
        self.saw_ball_above_rim = False
        self.crossing_x: Optional[float] = None
        self.crossing_time: Optional[float] = None
        self.max_pose_confidence = 0.0
        self.source = FrameSource.LIVE_CAMERA

    def reset(self):
        self.phase = ShotPhase.idle()
        self._reset_attempt()

    def update(self,
               ball_history: Sequence[TrackPoint],
               hoop_history: Sequence[TrackPoint],
               pose_confidence: float,
               source: FrameSource,
               now: float) -> Optional[DetectedShotEvent]:
        """
        Evaluate one tracker frame

        Args:
            ball_history: Ball track points, oldest first
            hoop_history: Hoop track points, oldest first
            pose_confidence: Release confidence of this frame
            source: Where the frame came from
            now: Frame timestamp

        Returns:
            The finalized shot event, if this frame finalized one
        """
        t = self.tuning

        if self.phase.is_cooldown:
            if now >= self.phase.until_time:
                self.phase = ShotPhase.idle()
            return None

        if not ball_history or not hoop_history:
            if self.phase.is_tracking and now - self.phase.start_time > t.lost_track_timeout:
                self.logger.debug("Shot attempt abandoned after losing tracks")
                self._to_idle()
            return None

        ball = ball_history[-1]
        hoop = hoop_history[-1]
        rim_y = hoop.y - t.rim_height_factor * hoop.height
        above_rim = ball.y < rim_y - t.above_rim_margin_factor * hoop.height
        dx = abs(ball.x - hoop.x)
        velocity_y = ball_velocity_y(ball_history, t.min_dt) or 0.0

        if self.phase.is_idle:
            near_hoop_x = dx <= max(t.near_hoop_min_dx, t.near_hoop_width_factor * hoop.width)
            in_arm_zone = ball.y < hoop.y + t.arm_zone_height_factor * hoop.height
            strong_upward = velocity_y < t.strong_arm_velocity
            if (near_hoop_x and velocity_y < t.arm_velocity and in_arm_zone
                    and (pose_confidence >= t.pose_release_threshold or strong_upward)):
                self.phase = ShotPhase.tracking(now)
                self.saw_ball_above_rim = above_rim
                self.crossing_x = None
                self.crossing_time = None
                self.max_pose_confidence = pose_confidence
                self.source = source
                self.logger.debug(f"Shot attempt armed at t={now:.3f} (vy={velocity_y:.1f}px/s)")
            return None

        # Tracking
        self.saw_ball_above_rim = self.saw_ball_above_rim or above_rim
        self.max_pose_confidence = max(self.max_pose_confidence, pose_confidence)

        if self.crossing_time is None and self.saw_ball_above_rim:
            crossing_x = downward_rim_crossing_x(ball_history, rim_y)
            if crossing_x is not None:
                self.crossing_x = crossing_x
                self.crossing_time = now

        if self.crossing_time is not None:
            settled = ball.y > hoop.y + t.settled_height_factor * hoop.height
            timed_out = now - self.crossing_time > t.crossing_timeout
            if settled or timed_out:
                centered_at_rim = abs(self.crossing_x - hoop.x) <= max(
                    t.inner_min_half_width, t.inner_width_factor * hoop.width)
                stayed_near_center = dx <= max(
                    t.outer_min_half_width, t.outer_width_factor * hoop.width)
                return self._finalize(
                    is_make=centered_at_rim and stayed_near_center,
                    reason=REASON_CROSSING_SETTLED if settled else REASON_CROSSING_TIMEOUT,
                    hoop=hoop,
                    now=now,
                    centered_at_rim=centered_at_rim,
                    stayed_near_center=stayed_near_center
                )
            return None

        reason = None
        if now - self.phase.start_time > t.attempt_timeout:
            reason = REASON_ATTEMPT_TIMEOUT
        elif (self.saw_ball_above_rim and velocity_y > t.descend_velocity
              and ball.y > hoop.y + t.descend_height_factor * hoop.height):
            reason = REASON_DESCENDED_PAST_HOOP
        elif (dx > max(t.escape_min_dx, t.escape_width_factor * hoop.width)
              and velocity_y > t.escape_velocity):
            reason = REASON_ESCAPED_SIDEWAYS

        if reason is None:
            return None
        if self.saw_ball_above_rim:
            return self._finalize(is_make=False, reason=reason, hoop=hoop, now=now)

        self.logger.debug(f"Shot attempt discarded ({reason}), ball never above rim")
        self._to_idle()
        return None

    def _to_idle(self):
        self.phase = ShotPhase.idle()
        self._reset_attempt()

    def _finalize(self, is_make: bool, reason: str, hoop: TrackPoint, now: float,
                  centered_at_rim: Optional[bool] = None,
                  stayed_near_center: Optional[bool] = None) -> DetectedShotEvent:
        offset = self.crossing_x - hoop.x if self.crossing_x is not None else None
        event = DetectedShotEvent(
            timestamp=now,
            is_make=is_make,
            confidence=shot_confidence(is_make, offset, hoop.width, self.max_pose_confidence, self.tuning),
            source=self.source,
            diagnostics=ShotDiagnostics(
                reason=reason,
                pose_release_confidence=self.max_pose_confidence,
                saw_ball_above_rim=self.saw_ball_above_rim,
                crossing_offset_pixels=offset,
                centered_at_rim=centered_at_rim,
                stayed_near_center_below=stayed_near_center
            )
        )
        self.logger.info(f"Shot finalized: {event.summary()}")
        self._reset_attempt()
        self.phase = ShotPhase.cooldown(now + self.tuning.cooldown)
        return event
