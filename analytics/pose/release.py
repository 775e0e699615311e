"""
Release confidence scoring from arm keypoints
"""

from typing import Optional

from core.constants import POSE_VELOCITY_MIN_DT
from core.models import JointMap, NormalizedPoint, PoseJoint
from utils.geometry import clamp, normalized_score

# Weights of the per-arm release components
WRIST_ABOVE_SHOULDER_WEIGHT = 0.32
WRIST_ABOVE_ELBOW_WEIGHT = 0.26
ELBOW_UNDER_WRIST_WEIGHT = 0.18
UPWARD_VELOCITY_WEIGHT = 0.24

ARMS = (
    (PoseJoint.LEFT_SHOULDER, PoseJoint.LEFT_ELBOW, PoseJoint.LEFT_WRIST),
    (PoseJoint.RIGHT_SHOULDER, PoseJoint.RIGHT_ELBOW, PoseJoint.RIGHT_WRIST),
)


def arm_release_confidence(shoulder: Optional[NormalizedPoint],
                           elbow: Optional[NormalizedPoint],
                           wrist: Optional[NormalizedPoint],
                           previous_wrist: Optional[NormalizedPoint] = None,
                           previous_timestamp: Optional[float] = None,
                           current_timestamp: float = 0.0) -> float:
    """
    Score how much one arm looks like it is releasing a shot

    Points are normalized with the origin at the bottom-left, so a larger
    y is higher in the image.

    Args:
        shoulder: Shoulder point or None
        elbow: Elbow point or None
        wrist: Wrist point or None
        previous_wrist: Same wrist in the previous pose frame
        previous_timestamp: Timestamp of the previous pose frame
        current_timestamp: Timestamp of this frame

    Returns:
        Score in [0, 1], 0 when any joint of the arm is missing
    """
    if shoulder is None or elbow is None or wrist is None:
        return 0.0

    wrist_above_shoulder = normalized_score(wrist[1] - shoulder[1], 0.02, 0.30)
    wrist_above_elbow = normalized_score(wrist[1] - elbow[1], 0.0, 0.18)
    elbow_under_wrist_x = 1.0 - normalized_score(abs(wrist[0] - elbow[0]), 0.02, 0.24)

    upward_velocity = 0.0
    if previous_wrist is not None and previous_timestamp is not None:
        dt = max(POSE_VELOCITY_MIN_DT, current_timestamp - previous_timestamp)
        velocity_y = (wrist[1] - previous_wrist[1]) / dt
        upward_velocity = normalized_score(velocity_y, 0.05, 0.9)

    weighted = (WRIST_ABOVE_SHOULDER_WEIGHT * wrist_above_shoulder
                + WRIST_ABOVE_ELBOW_WEIGHT * wrist_above_elbow
                + ELBOW_UNDER_WRIST_WEIGHT * elbow_under_wrist_x
                + UPWARD_VELOCITY_WEIGHT * upward_velocity)
    return clamp(weighted, 0.0, 1.0)


def release_confidence(body_joints: JointMap,
                       previous_joints: Optional[JointMap],
                       previous_timestamp: Optional[float],
                       current_timestamp: float) -> float:
    """Best release score over the left and right arm"""
    previous_joints = previous_joints or {}
    scores = [
        arm_release_confidence(
            body_joints.get(shoulder),
            body_joints.get(elbow),
            body_joints.get(wrist),
            previous_wrist=previous_joints.get(wrist),
            previous_timestamp=previous_timestamp,
            current_timestamp=current_timestamp
        )
        for shoulder, elbow, wrist in ARMS
    ]
    return max(scores)
