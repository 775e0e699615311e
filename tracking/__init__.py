"""
Ball and hoop tracking with occlusion bridging
"""

from .association import (
    TrackTuning, TrackUpdate, BALL_TRACKING, HOOP_TRACKING,
    update_track, project_center,
    track_point_from_detection, detection_from_track_point
)
from .history import clean_history, trim_history, glitch_bound
from .state import (
    AcceptanceRules, TrackerState, TrackerStep,
    advance_tracker_state, in_hoop_region, select_ball, select_hoop
)
from .tracker import BallHoopTracker, TrackerFrameResult

__all__ = [
    'TrackTuning', 'TrackUpdate', 'BALL_TRACKING', 'HOOP_TRACKING',
    'update_track', 'project_center',
    'track_point_from_detection', 'detection_from_track_point',
    'clean_history', 'trim_history', 'glitch_bound',
    'AcceptanceRules', 'TrackerState', 'TrackerStep',
    'advance_tracker_state', 'in_hoop_region', 'select_ball', 'select_hoop',
    'BallHoopTracker', 'TrackerFrameResult'
]
