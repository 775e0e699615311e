"""
End-to-end shot analysis of a video file with the concrete models
"""

import os
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from config.model_paths import get_model_path
from config.settings import Settings, get_settings
from core.exceptions import AnalysisCancelled, VideoAnalysisError
from core.interfaces import BallHoopDetector, PoseModel
from core.models import AnalysisResult
from video_io.serialization import save_json
from .session import ShotAnalysisEngine, UploadAnalysisState


@dataclass
class ProcessorConfig:
    """Configuration for video processor"""
    # Model paths
    yolo_model_path: Optional[str] = None

    # Processing parameters
    target_fps: Optional[float] = None
    synchronize_to_timeline: Optional[bool] = None

    # Detection parameters
    detection_confidence: Optional[float] = None
    device: Optional[str] = None

    # Output
    output_path: Optional[str] = None


class VideoProcessor:
    """Runs uploaded-video shot analysis and packages the result"""

    def __init__(self,
                 config: Optional[ProcessorConfig] = None,
                 settings: Optional[Settings] = None,
                 detector: Optional[BallHoopDetector] = None,
                 pose_model: Optional[PoseModel] = None):
        """
        Initialize video processor

        Models not passed in are created from the settings; creation
        failures raise ModelLoadError.
        """
        self.config = config or ProcessorConfig()
        self.settings = settings or get_settings()
        self.logger = logging.getLogger(__name__)

        detector = detector or self._create_detector()
        pose_model = pose_model or self._create_pose_model()

        self.engine = ShotAnalysisEngine(
            detector,
            pose_model,
            shot_tuning=self.settings.shot_tuning(),
            acceptance=self.settings.acceptance_rules(),
            ball_tuning=self.settings.ball_tuning(),
            hoop_tuning=self.settings.hoop_tuning(),
            tracker_options=self.settings.tracker_options(),
            pose_options=self.settings.pose_options(),
            slice_radius=self.settings.slice_radius
        )

    def _create_detector(self) -> BallHoopDetector:
        from detection import create_ball_hoop_detector

        model_path = self.config.yolo_model_path or get_model_path('yolo', self.settings.detector_model)
        return create_ball_hoop_detector(
            model_path,
            device=self.config.device or self.settings.device,
            confidence=(self.config.detection_confidence
                        if self.config.detection_confidence is not None
                        else self.settings.detection_confidence)
        )

    def _create_pose_model(self) -> PoseModel:
        from detection import MediaPipePoseModel

        return MediaPipePoseModel(model_complexity=self.settings.pose_model_complexity)

    def process_video(self, video_path: str,
                      progress_callback: Optional[Callable[[float], None]] = None,
                      cancel_event: Optional[threading.Event] = None) -> AnalysisResult:
        """
        Analyze a video file for shot attempts

        Raises:
            VideoAnalysisError: If the video cannot be analyzed
            AnalysisCancelled: If cancel_event was set
        """
        self.logger.info(f"Starting shot analysis: {video_path}")
        start_time = time.time()

        target_fps = self.config.target_fps or self.settings.target_fps
        synchronize = (self.config.synchronize_to_timeline
                       if self.config.synchronize_to_timeline is not None
                       else self.settings.synchronize_to_timeline)

        upload = self.engine.analyze_uploaded_video(
            video_path,
            target_fps=target_fps,
            synchronize_to_timeline=synchronize,
            progress_handler=progress_callback,
            cancel_event=cancel_event
        )

        if upload.state == UploadAnalysisState.CANCELLED:
            raise AnalysisCancelled(f"Analysis of {video_path} was cancelled")
        if upload.state == UploadAnalysisState.FAILED:
            raise VideoAnalysisError(upload.error or f"Analysis of {video_path} failed")

        result = AnalysisResult(
            video_path=video_path,
            summary=upload.summary,
            events=list(upload.events),
            processing_time=time.time() - start_time
        )

        if self.config.output_path:
            self._save_result(result)

        return result

    def _save_result(self, result: AnalysisResult):
        """Save shot events to file"""
        output_path = self.config.output_path
        if os.path.isdir(output_path):
            stem = os.path.splitext(os.path.basename(result.video_path))[0]
            output_path = os.path.join(output_path, f"{stem}_shots.json")

        save_json(result.to_dict(), output_path)
        self.logger.info(f"Shot events saved to: {output_path}")

    def close(self):
        self.engine.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
