"""
Input/output operations
"""

from .frames import (
    DeviceOrientation, CameraPosition,
    oriented_image_size, device_exif_orientation, video_exif_orientation,
    transform_for_rotation, live_frame, file_frame, orient_image
)
from .video import VideoReader
from .serialization import NumpyJsonEncoder, save_json, load_json

__all__ = [
    'DeviceOrientation', 'CameraPosition',
    'oriented_image_size', 'device_exif_orientation', 'video_exif_orientation',
    'transform_for_rotation', 'live_frame', 'file_frame', 'orient_image',
    'VideoReader',
    'NumpyJsonEncoder', 'save_json', 'load_json'
]
