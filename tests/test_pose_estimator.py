import pytest

from analytics.pose.estimator import PoseEstimator, filter_keypoints
from core.models import Keypoint, PoseJoint
from tests.conftest import CannedPoseModel, make_frame, shooting_pose


@pytest.fixture
def estimator():
    model = CannedPoseModel(shooting_pose())
    estimator = PoseEstimator(model)
    yield estimator
    estimator.vision_queue.shutdown()


def test_filter_keypoints_drops_low_confidence():
    joints = filter_keypoints({
        PoseJoint.NOSE: Keypoint(0.5, 0.9, 0.95),
        PoseJoint.NECK: Keypoint(0.5, 0.8, 0.19),
        PoseJoint.LEFT_HIP: Keypoint(0.4, 0.4, 0.2),
    })
    assert joints == {PoseJoint.NOSE: (0.5, 0.9), PoseJoint.LEFT_HIP: (0.4, 0.4)}


def test_synchronous_process_publishes_frame(estimator):
    score = estimator.process(make_frame(0.0), synchronous=True)

    assert score == pytest.approx(0.76)
    assert estimator.release_confidence == pytest.approx(0.76)
    assert PoseJoint.RIGHT_WRIST in estimator.body_joints
    assert len(estimator.current_pose_window()) == 1


def test_throttled_frame_returns_last_confidence(estimator):
    estimator.process(make_frame(0.0), synchronous=True)
    estimator.model.body = {}

    # Arrives faster than 15 fps, model is not called
    score = estimator.process(make_frame(0.03), synchronous=True)

    assert score == pytest.approx(0.76)
    assert estimator.model.calls == [0.0]
    assert len(estimator.current_pose_window()) == 1


def test_unthrottled_frames_always_run(estimator):
    estimator.process(make_frame(0.0), apply_throttle=False, synchronous=True)
    estimator.process(make_frame(0.01), apply_throttle=False, synchronous=True)
    assert estimator.model.calls == [0.0, 0.01]


def test_model_failure_yields_empty_joints(estimator):
    estimator.process(make_frame(0.0), synchronous=True)
    estimator.model.fail = True

    score = estimator.process(make_frame(0.1), synchronous=True)

    assert score == 0.0
    assert estimator.body_joints == {}
    assert estimator.hands == ()
    window = estimator.current_pose_window()
    assert len(window) == 2
    assert window[-1].release_confidence == 0.0


def test_hands_capped_and_empty_hands_dropped(estimator):
    hand = {PoseJoint.WRIST: Keypoint(0.5, 0.9, 0.8)}
    weak_hand = {PoseJoint.WRIST: Keypoint(0.5, 0.9, 0.05)}
    estimator.model.hands = [hand, weak_hand, hand]

    estimator.process(make_frame(0.0), synchronous=True)

    assert estimator.hands == ({PoseJoint.WRIST: (0.5, 0.9)},)


def test_asynchronous_process_returns_previous_confidence(estimator):
    assert estimator.process(make_frame(0.0)) == 0.0
    estimator.vision_queue.drain()
    assert estimator.release_confidence == pytest.approx(0.76)


def test_window_slice_is_inclusive(estimator):
    for t in [0.0, 1.0, 2.0, 3.0]:
        estimator.process(make_frame(t), synchronous=True)

    assert [f.timestamp for f in estimator.pose_window_slice(2.0, 1.0)] == [1.0, 2.0, 3.0]
    assert [f.timestamp for f in estimator.pose_window_slice(0.0)] == [0.0, 1.0]


def test_reset_is_idempotent(estimator):
    estimator.process(make_frame(0.0), synchronous=True)

    estimator.reset_session()
    estimator.reset_session()

    assert estimator.current_pose_window() == ()
    assert estimator.body_joints == {}
    assert estimator.release_confidence == 0.0
    # Throttle was reset, so an early timestamp is admitted again
    estimator.process(make_frame(0.01), synchronous=True)
    assert len(estimator.current_pose_window()) == 1
