"""
Shot analytics - pose release signal and shot phase detection
"""

from .events import ShotStateMachine, ShotTuning
from .pose import PoseEstimator

__all__ = [
    'ShotStateMachine', 'ShotTuning',
    'PoseEstimator'
]
