"""
Frame adapter - turns live camera buffers and decoded file frames into AnalysisFrame records
"""

import math
import logging
from enum import Enum
from typing import Optional, Tuple

import cv2
import numpy as np

from core.interfaces import Clock
from core.models import AnalysisFrame, ExifOrientation

logger = logging.getLogger(__name__)

# Affine (a, b, c, d) of a video track's preferred transform
Transform = Tuple[float, float, float, float]

IDENTITY_TRANSFORM: Transform = (1.0, 0.0, 0.0, 1.0)
ROTATE_90_CW_TRANSFORM: Transform = (0.0, 1.0, -1.0, 0.0)
ROTATE_90_CCW_TRANSFORM: Transform = (0.0, -1.0, 1.0, 0.0)
ROTATE_180_TRANSFORM: Transform = (-1.0, 0.0, 0.0, -1.0)


class DeviceOrientation(Enum):
    """Physical orientation of the capturing device"""
    PORTRAIT = "portrait"
    PORTRAIT_UPSIDE_DOWN = "portrait_upside_down"
    LANDSCAPE_LEFT = "landscape_left"
    LANDSCAPE_RIGHT = "landscape_right"
    FACE_UP = "face_up"
    FACE_DOWN = "face_down"
    UNKNOWN = "unknown"


class CameraPosition(Enum):
    """Which camera produced the buffer"""
    BACK = "back"
    FRONT = "front"


# (back camera, front camera) per device orientation
_DEVICE_ORIENTATIONS = {
    DeviceOrientation.PORTRAIT: (ExifOrientation.RIGHT, ExifOrientation.LEFT_MIRRORED),
    DeviceOrientation.PORTRAIT_UPSIDE_DOWN: (ExifOrientation.LEFT, ExifOrientation.RIGHT_MIRRORED),
    DeviceOrientation.LANDSCAPE_LEFT: (ExifOrientation.UP, ExifOrientation.DOWN_MIRRORED),
    DeviceOrientation.LANDSCAPE_RIGHT: (ExifOrientation.DOWN, ExifOrientation.UP_MIRRORED),
}


def oriented_image_size(width: float, height: float,
                        orientation: ExifOrientation) -> Tuple[float, float]:
    """Size of the image once the orientation is applied"""
    if orientation.swaps_dimensions:
        return float(height), float(width)
    return float(width), float(height)


def device_exif_orientation(device_orientation: DeviceOrientation,
                            camera_position: CameraPosition) -> ExifOrientation:
    """
    Map device orientation and camera to the EXIF orientation of the buffer

    Face up, face down and unknown orientations fall back to the portrait rule.
    """
    back, front = _DEVICE_ORIENTATIONS.get(
        device_orientation, _DEVICE_ORIENTATIONS[DeviceOrientation.PORTRAIT]
    )
    return front if camera_position == CameraPosition.FRONT else back


def _matches(transform: Transform, expected: Transform) -> bool:
    return all(math.isclose(a, b, abs_tol=1e-6) for a, b in zip(transform, expected))


def video_exif_orientation(transform: Transform) -> ExifOrientation:
    """Map a video track's preferred transform to an EXIF orientation"""
    if _matches(transform, ROTATE_90_CW_TRANSFORM):
        return ExifOrientation.RIGHT
    if _matches(transform, ROTATE_90_CCW_TRANSFORM):
        return ExifOrientation.LEFT
    if _matches(transform, IDENTITY_TRANSFORM):
        return ExifOrientation.UP
    if _matches(transform, ROTATE_180_TRANSFORM):
        return ExifOrientation.DOWN
    # Phone footage is portrait far more often than not
    return ExifOrientation.RIGHT


def transform_for_rotation(degrees: float) -> Transform:
    """
    Convert rotation metadata in degrees to the matching preferred transform

    OpenCV reports clockwise display rotation (0, 90, 180, 270). Values that
    are not a multiple of 90 yield a transform matching nothing, which maps
    to the portrait default.
    """
    rotation = int(round(degrees)) % 360
    if rotation == 0:
        return IDENTITY_TRANSFORM
    if rotation == 90:
        return ROTATE_90_CW_TRANSFORM
    if rotation == 180:
        return ROTATE_180_TRANSFORM
    if rotation == 270:
        return ROTATE_90_CCW_TRANSFORM
    logger.debug(f"Unsupported rotation metadata: {degrees}")
    return (0.0, 0.0, 0.0, 0.0)


def live_frame(image: np.ndarray,
               timestamp: Optional[float],
               device_orientation: DeviceOrientation,
               camera_position: CameraPosition,
               clock: Clock) -> AnalysisFrame:
    """
    Build an AnalysisFrame from a live camera buffer

    Args:
        image: Raw BGR buffer as delivered by the camera
        timestamp: Presentation timestamp in seconds; absent or non-finite
            values fall back to the clock
        device_orientation: Current device orientation
        camera_position: Front or back camera
        clock: Fallback time source

    Returns:
        AnalysisFrame with orientation and oriented size filled in
    """
    if timestamp is None or not math.isfinite(timestamp):
        timestamp = clock.now()

    orientation = device_exif_orientation(device_orientation, camera_position)
    height, width = image.shape[:2]
    return AnalysisFrame(
        image=image,
        timestamp=float(timestamp),
        orientation=orientation,
        oriented_image_size=oriented_image_size(width, height, orientation)
    )


def file_frame(image: np.ndarray, timestamp: float,
               orientation: ExifOrientation) -> AnalysisFrame:
    """Build an AnalysisFrame from a decoded video file frame"""
    height, width = image.shape[:2]
    return AnalysisFrame(
        image=image,
        timestamp=float(timestamp),
        orientation=orientation,
        oriented_image_size=oriented_image_size(width, height, orientation)
    )


def orient_image(image: np.ndarray, orientation: ExifOrientation) -> np.ndarray:
    """
    Return an upright copy of a raw buffer

    RIGHT means the buffer must be rotated 90 degrees clockwise to display
    upright, LEFT counter-clockwise. Mirrored variants flip horizontally
    after the rotation. The input array is never modified.
    """
    if orientation == ExifOrientation.UP:
        return image.copy()
    if orientation == ExifOrientation.UP_MIRRORED:
        return cv2.flip(image, 1)
    if orientation == ExifOrientation.DOWN:
        return cv2.rotate(image, cv2.ROTATE_180)
    if orientation == ExifOrientation.DOWN_MIRRORED:
        return cv2.flip(image, 0)
    if orientation == ExifOrientation.RIGHT:
        return cv2.rotate(image, cv2.ROTATE_90_CLOCKWISE)
    if orientation == ExifOrientation.RIGHT_MIRRORED:
        return cv2.flip(cv2.rotate(image, cv2.ROTATE_90_CLOCKWISE), 1)
    if orientation == ExifOrientation.LEFT:
        return cv2.rotate(image, cv2.ROTATE_90_COUNTERCLOCKWISE)
    return cv2.flip(cv2.rotate(image, cv2.ROTATE_90_COUNTERCLOCKWISE), 1)
