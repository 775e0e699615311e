"""
YOLO-based ball and hoop detection
"""

import logging
from typing import List, Optional

import numpy as np

try:
    import torch
    import supervision as sv
    from ultralytics import YOLO
    ULTRALYTICS_AVAILABLE = True
except ImportError:
    ULTRALYTICS_AVAILABLE = False

from core.exceptions import ModelLoadError
from core.interfaces import BallHoopDetector
from core.models import AnalysisFrame, Detection, TargetClass
from utils.geometry import normalized_rect_from_xyxy
from video_io.frames import orient_image


def select_device(device: str = 'auto') -> str:
    """Resolve 'auto' to the best available torch device"""
    if device != 'auto':
        if device.startswith('cuda') and not torch.cuda.is_available():
            return 'cpu'
        return device
    if torch.cuda.is_available():
        return 'cuda'
    if getattr(torch.backends, 'mps', None) is not None and torch.backends.mps.is_available():
        return 'mps'
    return 'cpu'


class YoloBallHoopDetector(BallHoopDetector):
    """Ball/hoop detector backed by an Ultralytics YOLO model"""

    def __init__(self,
                 model_path: str,
                 device: str = 'auto',
                 confidence: float = 0.1,
                 nms_threshold: float = 0.5):
        """
        Initialize YOLO detector

        Args:
            model_path: Path to YOLO weights trained on the ball/hoop labels
            device: Inference device or 'auto'
            confidence: Minimum confidence passed to the model; acceptance
                thresholds are applied later by the tracker
            nms_threshold: IoU threshold for per-class NMS

        Raises:
            ModelLoadError: If ultralytics is missing or the weights fail to load
        """
        if not ULTRALYTICS_AVAILABLE:
            raise ModelLoadError("ultralytics, supervision and torch are required for YOLO detection")

        self.logger = logging.getLogger(__name__)
        self.device = select_device(device)
        self.confidence = confidence
        self.nms_threshold = nms_threshold

        try:
            self.model = YOLO(model_path)
            self.model.to(self.device)
        except Exception as e:
            raise ModelLoadError(f"Failed to load YOLO model {model_path}: {e}") from e

        self.logger.info(f"Loaded YOLO model {model_path} on {self.device}")

    def detect(self, frame: AnalysisFrame) -> List[Detection]:
        """Detect ball and hoop candidates on the upright frame"""
        image = orient_image(frame.image, frame.orientation)
        if image is None or image.size == 0:
            return []

        results = self.model.predict(
            image,
            device=self.device,
            conf=self.confidence,
            verbose=False
        )
        if not results:
            return []
        return self._convert_result(results[0], frame.width, frame.height)

    def _convert_result(self, result, image_w: float, image_h: float) -> List[Detection]:
        """Convert one ultralytics result into normalized detections"""
        sv_detections = sv.Detections.from_ultralytics(result)
        if len(sv_detections) == 0:
            return []

        sv_detections = sv_detections.with_nms(
            threshold=self.nms_threshold,
            class_agnostic=False
        )

        names = sv_detections.data.get('class_name')
        detections = []
        for i in range(len(sv_detections)):
            label = self._label(result, names, int(sv_detections.class_id[i]), i)
            cls = TargetClass.from_label(label)
            if cls is None:
                continue
            detections.append(Detection(
                cls=cls,
                confidence=float(sv_detections.confidence[i]),
                bbox=normalized_rect_from_xyxy(sv_detections.xyxy[i], image_w, image_h)
            ))
        return detections

    @staticmethod
    def _label(result, names: Optional[np.ndarray], class_id: int, index: int) -> str:
        if names is not None:
            return str(names[index])
        return str(result.names.get(class_id, class_id))
