"""
Explicit tracker state and the pure per-frame update
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from core.constants import (
    BALL_MIN_CONFIDENCE, BALL_NEAR_HOOP_MIN_CONFIDENCE, HOOP_MIN_CONFIDENCE, MIN_TIME_DELTA
)
from core.models import AnalysisFrame, Detection, TargetClass, TrackPoint, TrackState
from utils.geometry import center_pixels
from .association import BALL_TRACKING, HOOP_TRACKING, TrackTuning, update_track
from .history import History, clean_history, trim_history


@dataclass(frozen=True)
class AcceptanceRules:
    """Candidate confidence thresholds"""
    hoop_min_confidence: float = HOOP_MIN_CONFIDENCE
    ball_min_confidence: float = BALL_MIN_CONFIDENCE
    ball_near_hoop_min_confidence: float = BALL_NEAR_HOOP_MIN_CONFIDENCE


@dataclass(frozen=True)
class TrackerState:
    """Ball and hoop tracks with their pixel-space histories"""
    ball_track: Optional[TrackState] = None
    hoop_track: Optional[TrackState] = None
    ball_history: History = ()
    hoop_history: History = ()
    frame_index: int = 0

    @property
    def hoop_reference(self) -> Optional[TrackPoint]:
        """Latest hoop position, from the live track or else the history"""
        if self.hoop_track is not None:
            return self.hoop_track.latest
        return self.hoop_history[-1] if self.hoop_history else None


@dataclass(frozen=True)
class TrackerStep:
    """Published detections of one frame"""
    best_ball: Optional[Detection]
    best_hoop: Optional[Detection]


def in_hoop_region(x: float, y: float, hoop: Optional[TrackPoint]) -> bool:
    """True when a pixel point lies strictly inside the region around the hoop"""
    if hoop is None:
        return False
    return (hoop.x - hoop.width < x < hoop.x + hoop.width
            and hoop.y - hoop.height < y < hoop.y + 0.5 * hoop.height)


def best_by_confidence(candidates: List[Detection]) -> Optional[Detection]:
    if not candidates:
        return None
    return max(candidates, key=lambda d: d.confidence)


def select_hoop(candidates: List[Detection], rules: AcceptanceRules) -> Optional[Detection]:
    return best_by_confidence([
        d for d in candidates
        if d.cls == TargetClass.HOOP and d.confidence >= rules.hoop_min_confidence
    ])


def select_ball(candidates: List[Detection],
                rules: AcceptanceRules,
                hoop: Optional[TrackPoint],
                frame_w: float,
                frame_h: float) -> Optional[Detection]:
    """Best ball candidate; weak candidates count only inside the hoop region"""
    accepted = []
    for d in candidates:
        if d.cls != TargetClass.BASKETBALL:
            continue
        if d.confidence >= rules.ball_min_confidence:
            accepted.append(d)
        elif d.confidence >= rules.ball_near_hoop_min_confidence:
            x, y = center_pixels(d.bbox, frame_w, frame_h)
            if in_hoop_region(x, y, hoop):
                accepted.append(d)
    return best_by_confidence(accepted)


def _advance_class(track: Optional[TrackState],
                   history: History,
                   cls: TargetClass,
                   measurement: Optional[Detection],
                   tuning: TrackTuning,
                   frame: AnalysisFrame,
                   frame_index: int,
                   min_dt: float) -> Tuple[Optional[TrackState], History, Optional[Detection]]:
    update = update_track(
        track, cls, measurement, tuning,
        frame.width, frame.height, frame_index, frame.timestamp, min_dt
    )
    track = update.track
    if update.point is not None:
        history = history + (update.point,)
    history, track = clean_history(history, track, tuning)
    history = trim_history(history, frame.timestamp, tuning.history_max_age)
    return track, history, update.detection


def advance_tracker_state(state: TrackerState,
                          candidates: List[Detection],
                          frame: AnalysisFrame,
                          rules: AcceptanceRules = AcceptanceRules(),
                          ball_tuning: TrackTuning = BALL_TRACKING,
                          hoop_tuning: TrackTuning = HOOP_TRACKING,
                          min_dt: float = MIN_TIME_DELTA) -> Tuple[TrackerState, TrackerStep]:
    """
    Fold one frame of detector candidates into the tracker state

    The hoop is updated first so the ball acceptance region uses this
    frame's hoop position.

    Args:
        state: State before this frame
        candidates: Raw detector output for the frame
        frame: Frame the candidates came from
        rules: Candidate acceptance thresholds
        ball_tuning: Ball association tuning
        hoop_tuning: Hoop association tuning
        min_dt: Time step floor

    Returns:
        (new state, published best detections)
    """
    index = state.frame_index

    hoop_track, hoop_history, best_hoop = _advance_class(
        state.hoop_track, state.hoop_history, TargetClass.HOOP,
        select_hoop(candidates, rules), hoop_tuning, frame, index, min_dt
    )
    state = replace(state, hoop_track=hoop_track, hoop_history=hoop_history)

    ball_measurement = select_ball(
        candidates, rules, state.hoop_reference, frame.width, frame.height
    )
    ball_track, ball_history, best_ball = _advance_class(
        state.ball_track, state.ball_history, TargetClass.BASKETBALL,
        ball_measurement, ball_tuning, frame, index, min_dt
    )
    state = replace(
        state,
        ball_track=ball_track,
        ball_history=ball_history,
        frame_index=index + 1
    )
    return state, TrackerStep(best_ball=best_ball, best_hoop=best_hoop)
