"""
Concrete detector and pose model adapters

- YoloBallHoopDetector: Ultralytics YOLO ball/hoop detector
- MediaPipePoseModel: MediaPipe body and hand keypoints

Both raise ModelLoadError at construction when their backend is missing
or the model fails to load.
"""

from .yolo_detector import YoloBallHoopDetector, select_device
from .pose_model import MediaPipePoseModel

__all__ = [
    'YoloBallHoopDetector',
    'select_device',
    'MediaPipePoseModel',
    'create_ball_hoop_detector'
]


def create_ball_hoop_detector(model_path: str,
                              device: str = 'auto',
                              confidence: float = 0.1) -> YoloBallHoopDetector:
    """
    Create a ball/hoop YOLO detector

    Args:
        model_path: Path to YOLO model weights
        device: Device for inference ('auto', 'cuda', 'mps' or 'cpu')
        confidence: Minimum confidence passed to the model

    Returns:
        Configured YoloBallHoopDetector
    """
    return YoloBallHoopDetector(
        model_path=model_path,
        device=device,
        confidence=confidence
    )
