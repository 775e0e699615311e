"""
Pose signal estimator - body/hand keypoints, pose window and release confidence
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from core.constants import (
    DEFAULT_SLICE_RADIUS, MAX_HANDS, MIN_KEYPOINT_CONFIDENCE,
    THROTTLE_FPS, WINDOW_MAX_DURATION, WINDOW_MAX_FRAMES
)
from core.interfaces import PoseModel
from core.models import AnalysisFrame, JointMap, Keypoint, PoseFrame, PoseJoint
from utils.sliding_window import SlidingWindow, window_slice
from utils.throttle import Throttle
from utils.vision_queue import VisionQueue
from .release import release_confidence


@dataclass(frozen=True)
class PoseSnapshot:
    """Latest published pose state, replaced as a whole after every frame"""
    body_joints: JointMap
    hands: Tuple[JointMap, ...]
    release_confidence: float
    window: Tuple[PoseFrame, ...]


EMPTY_SNAPSHOT = PoseSnapshot(body_joints={}, hands=(), release_confidence=0.0, window=())


def filter_keypoints(keypoints: Dict[PoseJoint, Keypoint],
                     min_confidence: float = MIN_KEYPOINT_CONFIDENCE) -> JointMap:
    """Drop low-confidence keypoints and keep (x, y)"""
    return {
        joint: (float(kp.x), float(kp.y))
        for joint, kp in keypoints.items()
        if kp.confidence >= min_confidence
    }


class PoseEstimator:
    """
    Runs the pose model per frame and maintains the pose sliding window

    All model calls and internal state changes happen on the vision queue.
    Readers see the last published snapshot.
    """

    def __init__(self,
                 model: PoseModel,
                 vision_queue: Optional[VisionQueue] = None,
                 throttle_fps: float = THROTTLE_FPS,
                 window_max_duration: float = WINDOW_MAX_DURATION,
                 window_max_frames: int = WINDOW_MAX_FRAMES,
                 min_keypoint_confidence: float = MIN_KEYPOINT_CONFIDENCE):
        """
        Initialize pose estimator

        Args:
            model: Body and hand keypoint model
            vision_queue: Shared serial worker, a private one is created if omitted
            throttle_fps: Maximum processing rate for throttled frames
            window_max_duration: Pose window age cap in seconds
            window_max_frames: Pose window length cap
            min_keypoint_confidence: Keypoints below this are discarded
        """
        self.model = model
        self.vision_queue = vision_queue or VisionQueue(name="pose")
        self.min_keypoint_confidence = min_keypoint_confidence
        self.logger = logging.getLogger(__name__)

        # Owned by the vision queue
        self._throttle = Throttle(throttle_fps)
        self._window: SlidingWindow[PoseFrame] = SlidingWindow(window_max_duration, window_max_frames)
        self._previous_frame: Optional[PoseFrame] = None
        self._last_confidence = 0.0

        self._snapshot = EMPTY_SNAPSHOT

    # Published state

    @property
    def body_joints(self) -> JointMap:
        return self._snapshot.body_joints

    @property
    def hands(self) -> Tuple[JointMap, ...]:
        return self._snapshot.hands

    @property
    def release_confidence(self) -> float:
        return self._snapshot.release_confidence

    def current_pose_window(self) -> Tuple[PoseFrame, ...]:
        return self._snapshot.window

    def pose_window_slice(self, center: float,
                          radius: float = DEFAULT_SLICE_RADIUS) -> List[PoseFrame]:
        return window_slice(self._snapshot.window, center, radius)

    # Processing

    def process(self, frame: AnalysisFrame, apply_throttle: bool = True,
                synchronous: bool = False) -> float:
        """
        Process one frame

        Args:
            frame: Frame to analyze
            apply_throttle: Skip frames arriving faster than the throttle rate
            synchronous: Block until this frame is processed

        Returns:
            This frame's release confidence when synchronous, otherwise the
            last published confidence
        """
        if synchronous:
            return self.vision_queue.run_sync(self.process_on_queue, frame, apply_throttle)

        confidence = self.release_confidence
        self.vision_queue.submit(self.process_on_queue, frame, apply_throttle)
        return confidence

    def process_on_queue(self, frame: AnalysisFrame, apply_throttle: bool = True) -> float:
        """Process a frame; must run on the vision queue"""
        if apply_throttle and not self._throttle.admit(frame.timestamp):
            return self._last_confidence

        try:
            observation = self.model.detect(frame)
            body = filter_keypoints(observation.body, self.min_keypoint_confidence)
            hands = tuple(
                hand for hand in (
                    filter_keypoints(h, self.min_keypoint_confidence)
                    for h in observation.hands[:MAX_HANDS]
                )
                if hand
            )
            previous = self._previous_frame
            score = release_confidence(
                body,
                previous.body_joints if previous else None,
                previous.timestamp if previous else None,
                frame.timestamp
            )
        except Exception as e:
            self.logger.warning(f"Pose detection failed at t={frame.timestamp:.3f}: {e}")
            body, hands, score = {}, (), 0.0

        pose_frame = PoseFrame(
            timestamp=frame.timestamp,
            body_joints=body,
            hands=hands,
            release_confidence=score
        )
        self._previous_frame = pose_frame
        self._last_confidence = score
        self._publish(pose_frame)
        return score

    def _publish(self, pose_frame: PoseFrame):
        self._window.append(pose_frame)
        self._snapshot = PoseSnapshot(
            body_joints=pose_frame.body_joints,
            hands=pose_frame.hands,
            release_confidence=pose_frame.release_confidence,
            window=self._window.snapshot()
        )

    def reset_session(self):
        """Clear window, published joints, throttle and previous frame"""
        self.vision_queue.run_sync(self._reset_on_queue)

    def _reset_on_queue(self):
        self._throttle.reset()
        self._window.clear()
        self._previous_frame = None
        self._last_confidence = 0.0
        self._snapshot = EMPTY_SNAPSHOT

    def close(self):
        self.model.close()
