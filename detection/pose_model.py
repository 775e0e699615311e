"""
MediaPipe body and hand keypoint model
"""

import logging
from typing import Dict

import cv2

try:
    import mediapipe as mp
    MEDIAPIPE_AVAILABLE = True
except ImportError:
    MEDIAPIPE_AVAILABLE = False

from core.constants import MAX_HANDS
from core.exceptions import ModelLoadError
from core.interfaces import PoseModel
from core.models import AnalysisFrame, Keypoint, PoseJoint, PoseObservation
from video_io.frames import orient_image

# MediaPipe Pose landmark index -> joint
BODY_LANDMARKS = {
    0: PoseJoint.NOSE,
    11: PoseJoint.LEFT_SHOULDER, 12: PoseJoint.RIGHT_SHOULDER,
    13: PoseJoint.LEFT_ELBOW, 14: PoseJoint.RIGHT_ELBOW,
    15: PoseJoint.LEFT_WRIST, 16: PoseJoint.RIGHT_WRIST,
    23: PoseJoint.LEFT_HIP, 24: PoseJoint.RIGHT_HIP,
    25: PoseJoint.LEFT_KNEE, 26: PoseJoint.RIGHT_KNEE,
    27: PoseJoint.LEFT_ANKLE, 28: PoseJoint.RIGHT_ANKLE
}

# MediaPipe Hands landmark index -> joint
HAND_LANDMARKS = {
    0: PoseJoint.WRIST,
    4: PoseJoint.THUMB_TIP,
    8: PoseJoint.INDEX_TIP,
    12: PoseJoint.MIDDLE_TIP,
    16: PoseJoint.RING_TIP,
    20: PoseJoint.LITTLE_TIP
}


class MediaPipePoseModel(PoseModel):
    """Body pose plus up to two hands from MediaPipe solutions"""

    def __init__(self,
                 model_complexity: int = 1,
                 min_detection_confidence: float = 0.5,
                 min_tracking_confidence: float = 0.5,
                 max_hands: int = MAX_HANDS):
        """
        Initialize MediaPipe models

        Raises:
            ModelLoadError: If mediapipe is missing or fails to initialize
        """
        if not MEDIAPIPE_AVAILABLE:
            raise ModelLoadError("mediapipe is required for pose estimation")

        self.logger = logging.getLogger(__name__)
        try:
            self.pose_detector = mp.solutions.pose.Pose(
                static_image_mode=False,
                model_complexity=model_complexity,
                smooth_landmarks=True,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence
            )
            self.hand_detector = mp.solutions.hands.Hands(
                static_image_mode=False,
                max_num_hands=max_hands,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence
            )
        except Exception as e:
            raise ModelLoadError(f"MediaPipe initialization failed: {e}") from e

        self.logger.info("MediaPipe pose and hand models initialized")

    def detect(self, frame: AnalysisFrame) -> PoseObservation:
        """Detect keypoints; coordinates are returned with a bottom-left origin"""
        rgb = cv2.cvtColor(orient_image(frame.image, frame.orientation), cv2.COLOR_BGR2RGB)

        observation = PoseObservation()

        pose_results = self.pose_detector.process(rgb)
        if pose_results.pose_landmarks:
            observation.body = self._body_keypoints(pose_results.pose_landmarks)

        hand_results = self.hand_detector.process(rgb)
        if hand_results.multi_hand_landmarks:
            handedness = hand_results.multi_handedness or []
            for i, landmarks in enumerate(hand_results.multi_hand_landmarks):
                score = handedness[i].classification[0].score if i < len(handedness) else 1.0
                observation.hands.append(self._hand_keypoints(landmarks, float(score)))

        return observation

    @staticmethod
    def _body_keypoints(landmarks) -> Dict[PoseJoint, Keypoint]:
        body = {}
        for idx, joint in BODY_LANDMARKS.items():
            lm = landmarks.landmark[idx]
            body[joint] = Keypoint(x=float(lm.x), y=1.0 - float(lm.y), confidence=float(lm.visibility))

        # MediaPipe has no neck landmark; use the shoulder midpoint
        left = body[PoseJoint.LEFT_SHOULDER]
        right = body[PoseJoint.RIGHT_SHOULDER]
        body[PoseJoint.NECK] = Keypoint(
            x=(left.x + right.x) / 2,
            y=(left.y + right.y) / 2,
            confidence=min(left.confidence, right.confidence)
        )
        return body

    @staticmethod
    def _hand_keypoints(landmarks, score: float) -> Dict[PoseJoint, Keypoint]:
        return {
            joint: Keypoint(
                x=float(landmarks.landmark[idx].x),
                y=1.0 - float(landmarks.landmark[idx].y),
                confidence=score
            )
            for idx, joint in HAND_LANDMARKS.items()
        }

    def close(self):
        """Release MediaPipe graphs"""
        self.pose_detector.close()
        self.hand_detector.close()
