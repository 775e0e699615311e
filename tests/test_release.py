import pytest

from analytics.pose.release import arm_release_confidence, release_confidence
from core.models import PoseJoint


SHOULDER = (0.5, 0.5)
ELBOW = (0.5, 0.65)
WRIST = (0.5, 0.85)


def test_arm_straight_up_without_motion():
    score = arm_release_confidence(SHOULDER, ELBOW, WRIST)
    assert score == pytest.approx(0.32 + 0.26 + 0.18)


def test_upward_wrist_motion_adds_velocity_component():
    score = arm_release_confidence(
        SHOULDER, ELBOW, WRIST,
        previous_wrist=(0.5, 0.75),
        previous_timestamp=1.0,
        current_timestamp=1.1
    )
    assert score == pytest.approx(1.0)


def test_missing_joint_scores_zero():
    assert arm_release_confidence(SHOULDER, None, WRIST) == 0.0
    assert arm_release_confidence(None, ELBOW, WRIST) == 0.0


def test_lowered_arm_scores_low():
    # Wrist below elbow below shoulder, elbow far out to the side
    score = arm_release_confidence((0.5, 0.5), (0.8, 0.4), (0.5, 0.3))
    assert score == pytest.approx(0.0)


def test_best_arm_wins():
    joints = {
        PoseJoint.LEFT_SHOULDER: (0.4, 0.5),
        PoseJoint.LEFT_ELBOW: (0.35, 0.4),
        PoseJoint.LEFT_WRIST: (0.35, 0.3),
        PoseJoint.RIGHT_SHOULDER: SHOULDER,
        PoseJoint.RIGHT_ELBOW: ELBOW,
        PoseJoint.RIGHT_WRIST: WRIST,
    }
    assert release_confidence(joints, None, None, 0.0) == pytest.approx(0.76)


def test_empty_body_scores_zero():
    assert release_confidence({}, {}, 0.0, 0.1) == 0.0
