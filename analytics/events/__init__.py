"""
Shot event detection
"""

from .shot_phase import (
    ShotStateMachine, ShotTuning,
    ball_velocity_y, downward_rim_crossing_x, shot_confidence
)

__all__ = [
    'ShotStateMachine', 'ShotTuning',
    'ball_velocity_y', 'downward_rim_crossing_x', 'shot_confidence'
]
