"""
Pose estimation and release scoring
"""

from .estimator import PoseEstimator, PoseSnapshot, filter_keypoints
from .release import arm_release_confidence, release_confidence

__all__ = [
    'PoseEstimator', 'PoseSnapshot', 'filter_keypoints',
    'arm_release_confidence', 'release_confidence'
]
