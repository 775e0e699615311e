"""
Shared fixtures: scripted detector, canned pose model, manual clock
"""

from typing import Callable, Dict, List, Optional

import numpy as np
import pytest

from core.interfaces import BallHoopDetector, PoseModel
from core.models import (
    AnalysisFrame, Detection, ExifOrientation, Keypoint, NormalizedRect,
    PoseJoint, PoseObservation, TargetClass, TrackPoint
)
from utils.clock import ManualClock

FRAME_W = 1000.0
FRAME_H = 1000.0


def make_frame(timestamp: float, width: float = FRAME_W, height: float = FRAME_H) -> AnalysisFrame:
    """Frame with a tiny buffer but a full-size oriented image"""
    return AnalysisFrame(
        image=np.zeros((4, 4, 3), dtype=np.uint8),
        timestamp=timestamp,
        orientation=ExifOrientation.UP,
        oriented_image_size=(width, height)
    )


def detection_at(cls: TargetClass, x: float, y: float, w: float, h: float,
                 confidence: float = 0.9,
                 frame_w: float = FRAME_W, frame_h: float = FRAME_H) -> Detection:
    """Detection whose pixel center (top-left origin) is (x, y)"""
    return Detection(
        cls=cls,
        confidence=confidence,
        bbox=NormalizedRect(
            x=(x - w / 2) / frame_w,
            y=1.0 - (y + h / 2) / frame_h,
            width=w / frame_w,
            height=h / frame_h
        )
    )


def ball_at(x, y, size=20.0, confidence=0.9):
    return detection_at(TargetClass.BASKETBALL, x, y, size, size, confidence)


def hoop_at(x=500.0, y=500.0, w=100.0, h=40.0, confidence=0.9):
    return detection_at(TargetClass.HOOP, x, y, w, h, confidence)


def point(x, y, t, w=20.0, h=20.0, predicted=False, index=0, confidence=0.9) -> TrackPoint:
    return TrackPoint(x=x, y=y, frame_index=index, timestamp=t, width=w, height=h,
                      confidence=confidence, is_predicted=predicted)


class ScriptedDetector(BallHoopDetector):
    """Returns detections from a script keyed by frame timestamp"""

    def __init__(self, script: Optional[Callable[[float], List[Detection]]] = None):
        self.script = script or (lambda t: [])
        self.calls: List[float] = []
        self.fail_at = set()

    def detect(self, frame: AnalysisFrame) -> List[Detection]:
        self.calls.append(frame.timestamp)
        if round(frame.timestamp, 6) in self.fail_at:
            raise RuntimeError("detector glitch")
        return self.script(frame.timestamp)


class CannedPoseModel(PoseModel):
    """Returns the same observation for every frame unless told to fail"""

    def __init__(self, body: Optional[Dict[PoseJoint, Keypoint]] = None):
        self.body = body or {}
        self.hands: List[Dict[PoseJoint, Keypoint]] = []
        self.fail = False
        self.calls: List[float] = []
        self.closed = False

    def detect(self, frame: AnalysisFrame) -> PoseObservation:
        self.calls.append(frame.timestamp)
        if self.fail:
            raise RuntimeError("pose model glitch")
        return PoseObservation(body=dict(self.body), hands=[dict(h) for h in self.hands])

    def close(self):
        self.closed = True


def shooting_pose(wrist_y: float = 0.85, confidence: float = 0.9) -> Dict[PoseJoint, Keypoint]:
    """Right arm straight up above the shoulder"""
    return {
        PoseJoint.RIGHT_SHOULDER: Keypoint(0.5, 0.5, confidence),
        PoseJoint.RIGHT_ELBOW: Keypoint(0.5, 0.65, confidence),
        PoseJoint.RIGHT_WRIST: Keypoint(0.5, wrist_y, confidence),
    }


@pytest.fixture
def clock():
    return ManualClock(start=100.0)


@pytest.fixture
def detector():
    return ScriptedDetector()


@pytest.fixture
def pose_model():
    return CannedPoseModel()
