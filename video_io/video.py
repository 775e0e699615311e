"""
Video input operations
"""

import math
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from core.exceptions import VideoAnalysisError
from core.models import ExifOrientation
from .frames import transform_for_rotation, video_exif_orientation


class VideoReader:
    """Video reader yielding raw BGR frames with presentation timestamps"""

    def __init__(self, video_path: str):
        """
        Initialize video reader

        Args:
            video_path: Path to the video file

        Raises:
            VideoAnalysisError: If the file cannot be opened
        """
        self.video_path = video_path
        self.logger = logging.getLogger(__name__)
        self.cap = cv2.VideoCapture(video_path)

        if not self.cap.isOpened():
            raise VideoAnalysisError(f"Failed to open video: {video_path}")

        # Frames are analyzed as stored; orientation is carried separately
        if hasattr(cv2, 'CAP_PROP_ORIENTATION_AUTO'):
            self.cap.set(cv2.CAP_PROP_ORIENTATION_AUTO, 0)

    @property
    def fps(self) -> float:
        fps = self.cap.get(cv2.CAP_PROP_FPS)
        return float(fps) if fps and math.isfinite(fps) else 0.0

    @property
    def frame_count(self) -> int:
        count = self.cap.get(cv2.CAP_PROP_FRAME_COUNT)
        return int(count) if count and math.isfinite(count) and count > 0 else 0

    @property
    def duration(self) -> float:
        """Duration in seconds, 0 when the container does not say"""
        if self.fps <= 0:
            return 0.0
        return self.frame_count / self.fps

    @property
    def rotation(self) -> float:
        """Clockwise display rotation from the container metadata"""
        if not hasattr(cv2, 'CAP_PROP_ORIENTATION_META'):
            return 0.0
        value = self.cap.get(cv2.CAP_PROP_ORIENTATION_META)
        return float(value) if value and math.isfinite(value) else 0.0

    @property
    def orientation(self) -> ExifOrientation:
        return video_exif_orientation(transform_for_rotation(self.rotation))

    def read(self) -> Optional[Tuple[np.ndarray, float]]:
        """
        Read the next frame

        Returns:
            (frame, timestamp seconds) or None at end of stream
        """
        index = int(self.cap.get(cv2.CAP_PROP_POS_FRAMES))
        ret, frame = self.cap.read()
        if not ret or frame is None:
            return None

        timestamp = self.cap.get(cv2.CAP_PROP_POS_MSEC) / 1000.0
        if not math.isfinite(timestamp) or (timestamp <= 0 and index > 0):
            # Some backends do not report positions
            timestamp = index / self.fps if self.fps > 0 else 0.0
        return frame, timestamp

    def close(self):
        """Close video reader"""
        if hasattr(self, 'cap') and self.cap is not None:
            self.cap.release()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.close()
