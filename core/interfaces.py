"""
Abstract interfaces for the external models and services the core depends on
"""

from abc import ABC, abstractmethod
from typing import List

from .models import AnalysisFrame, Detection, PoseObservation


class BallHoopDetector(ABC):
    """Abstract interface for the ball/hoop object detector"""

    @abstractmethod
    def detect(self, frame: AnalysisFrame) -> List[Detection]:
        """
        Detect ball and hoop candidates in a single frame

        Bounding boxes are normalized to the oriented image with the origin
        at the bottom-left corner. Implementations may raise; callers treat
        an exception as an empty frame.
        """
        pass


class PoseModel(ABC):
    """Abstract interface for body and hand keypoint detection"""

    @abstractmethod
    def detect(self, frame: AnalysisFrame) -> PoseObservation:
        """Detect body keypoints and up to two hands in a single frame"""
        pass

    def close(self):
        """Release model resources"""
        pass


class Clock(ABC):
    """Time source, injectable so throttling and pacing are testable"""

    @abstractmethod
    def now(self) -> float:
        """Monotonic time in seconds"""
        pass

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Block the calling thread"""
        pass
