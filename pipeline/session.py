"""
Session orchestrator - wires frames through pose and tracking on one vision queue
"""

import logging
import queue
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from analytics.events.shot_phase import ShotStateMachine, ShotTuning
from analytics.pose.estimator import PoseEstimator
from core.constants import DEFAULT_SLICE_RADIUS, DEFAULT_TARGET_FPS
from core.exceptions import AnalysisCancelled, ShotTrackerError
from core.interfaces import BallHoopDetector, Clock, PoseModel
from core.models import (
    AnalysisFrame, AnalysisSummary, BestDetectionFrame, DetectedShotEvent,
    FrameSource, PoseFrame, ShotCounters
)
from tracking.association import BALL_TRACKING, HOOP_TRACKING, TrackTuning
from tracking.state import AcceptanceRules
from tracking.tracker import BallHoopTracker, TrackerFrameResult
from utils.clock import SystemClock
from utils.vision_queue import VisionQueue
from video_io.frames import CameraPosition, DeviceOrientation, live_frame
from .video_file_analyzer import ProgressHandler, VideoFileAnalyzer

ShotEventCallback = Callable[[DetectedShotEvent], None]


class UploadAnalysisState(Enum):
    """Terminal state of an uploaded video analysis"""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadAnalysisResult:
    """Outcome of analyze_uploaded_video"""
    state: UploadAnalysisState
    summary: Optional[AnalysisSummary] = None
    events: Tuple[DetectedShotEvent, ...] = ()
    error: Optional[str] = None

    @property
    def shots(self) -> int:
        return len(self.events)

    @property
    def makes(self) -> int:
        return sum(1 for e in self.events if e.is_make)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'state': self.state.value,
            'summary': self.summary.to_dict() if self.summary else None,
            'events': [e.to_dict() for e in self.events],
            'error': self.error
        }


def build_feedback_payload(event: DetectedShotEvent,
                           shot_index: int,
                           pose_window: List[PoseFrame],
                           detection_window: List[BestDetectionFrame]) -> Dict[str, Any]:
    """JSON-ready feedback request body for one shot"""
    return {
        'shot': {
            'shot_index': shot_index,
            'is_make': event.is_make,
            'timestamp': float(event.timestamp),
            'confidence': float(event.confidence)
        },
        'pose_window': [f.to_dict() for f in pose_window],
        'detection_window': [f.to_dict() for f in detection_window]
    }


class ShotAnalysisEngine:
    """
    Session orchestrator for live and uploaded-video shot analysis

    Each frame is one job on the shared vision queue: pose first, then the
    tracker with that frame's release confidence.
    """

    def __init__(self,
                 detector: BallHoopDetector,
                 pose_model: PoseModel,
                 clock: Optional[Clock] = None,
                 on_shot_event: Optional[ShotEventCallback] = None,
                 shot_tuning: Optional[ShotTuning] = None,
                 acceptance: Optional[AcceptanceRules] = None,
                 ball_tuning: TrackTuning = BALL_TRACKING,
                 hoop_tuning: TrackTuning = HOOP_TRACKING,
                 tracker_options: Optional[Dict[str, Any]] = None,
                 pose_options: Optional[Dict[str, Any]] = None,
                 file_analyzer: Optional[VideoFileAnalyzer] = None,
                 slice_radius: float = DEFAULT_SLICE_RADIUS):
        """
        Initialize the engine

        Args:
            detector: Ball/hoop detector
            pose_model: Body and hand keypoint model
            clock: Time source for live timestamps and file pacing
            on_shot_event: Called on the vision queue for every emitted event
            shot_tuning: Shot phase machine thresholds
            acceptance: Candidate confidence thresholds
            ball_tuning: Ball association tuning
            hoop_tuning: Hoop association tuning
            tracker_options: Extra BallHoopTracker keyword arguments
            pose_options: Extra PoseEstimator keyword arguments
            file_analyzer: Uploaded video reader
            slice_radius: Default half-width in seconds of window slices
        """
        self.clock = clock or SystemClock()
        self.vision_queue = VisionQueue(name="vision")
        self.logger = logging.getLogger(__name__)

        self.pose = PoseEstimator(pose_model, vision_queue=self.vision_queue, **(pose_options or {}))
        self.tracker = BallHoopTracker(
            detector,
            vision_queue=self.vision_queue,
            shot_machine=ShotStateMachine(shot_tuning),
            acceptance=acceptance,
            ball_tuning=ball_tuning,
            hoop_tuning=hoop_tuning,
            **(tracker_options or {})
        )
        self.file_analyzer = file_analyzer or VideoFileAnalyzer(clock=self.clock)
        self.slice_radius = slice_radius

        self.on_shot_event = on_shot_event
        self.event_channel: "queue.Queue[DetectedShotEvent]" = queue.Queue()
        self._events: Tuple[DetectedShotEvent, ...] = ()

    # Published state

    @property
    def shots(self) -> int:
        return self.tracker.shots

    @property
    def makes(self) -> int:
        return self.tracker.makes

    @property
    def last_result_text(self) -> str:
        return self.tracker.last_result_text

    @property
    def counters(self) -> ShotCounters:
        return self.tracker.counters

    @property
    def frame_results(self) -> queue.Queue:
        """Channel of TrackerFrameResult values, one per processed frame"""
        return self.tracker.result_channel

    def shot_events(self) -> Tuple[DetectedShotEvent, ...]:
        return self._events

    def pose_window_slice(self, center: float, radius: Optional[float] = None) -> List[PoseFrame]:
        return self.pose.pose_window_slice(center, self._radius(radius))

    def detection_window_slice(self, center: float,
                               radius: Optional[float] = None) -> List[BestDetectionFrame]:
        return self.tracker.detection_window_slice(center, self._radius(radius))

    def build_feedback_payload(self, event: DetectedShotEvent, shot_index: int,
                               radius: Optional[float] = None) -> Dict[str, Any]:
        """Feedback request body with the pose and detection windows around the shot"""
        return build_feedback_payload(
            event,
            shot_index,
            self.pose_window_slice(event.timestamp, radius),
            self.detection_window_slice(event.timestamp, radius)
        )

    def _radius(self, radius: Optional[float]) -> float:
        return self.slice_radius if radius is None else radius

    # Frame entry points

    def process_live_frame(self,
                           image: np.ndarray,
                           timestamp: Optional[float],
                           device_orientation: DeviceOrientation = DeviceOrientation.PORTRAIT,
                           camera_position: CameraPosition = CameraPosition.BACK):
        """Queue a live camera frame; returns immediately"""
        frame = live_frame(image, timestamp, device_orientation, camera_position, self.clock)
        self.vision_queue.submit(self._analyze_frame, frame, FrameSource.LIVE_CAMERA, True)

    def process_uploaded_frame(self, frame: AnalysisFrame) -> Optional[TrackerFrameResult]:
        """Analyze a file frame synchronously and without throttling"""
        return self.vision_queue.run_sync(
            self._analyze_frame, frame, FrameSource.UPLOADED_VIDEO, False
        )

    def _analyze_frame(self, frame: AnalysisFrame, source: FrameSource,
                       apply_throttle: bool) -> Optional[TrackerFrameResult]:
        confidence = self.pose.process_on_queue(frame, apply_throttle)
        result = self.tracker.process_on_queue(frame, confidence, source, apply_throttle)
        if result is not None and result.shot_event is not None:
            self._deliver(result.shot_event)
        return result

    def _deliver(self, event: DetectedShotEvent):
        self._events = self._events + (event,)
        self.event_channel.put(event)
        if self.on_shot_event is not None:
            try:
                self.on_shot_event(event)
            except Exception as e:
                self.logger.error(f"Shot event callback failed: {e}", exc_info=True)

    # Session control

    def reset_session(self):
        """Clear pose, tracking, shot phase, counters and events after queued work"""
        self.vision_queue.run_sync(self._reset_on_queue)

    def _reset_on_queue(self):
        self.pose.reset_session()
        self.tracker.reset_session()
        self._events = ()

    def restore_counters(self, shots: int, makes: int):
        self.tracker.restore_counters(shots, makes)

    def analyze_uploaded_video(self,
                               video_path: str,
                               target_fps: float = DEFAULT_TARGET_FPS,
                               synchronize_to_timeline: bool = True,
                               progress_handler: Optional[ProgressHandler] = None,
                               cancel_event: Optional[threading.Event] = None) -> UploadAnalysisResult:
        """
        Analyze an uploaded video in a clean session

        The session is reset before and after the run so live processing
        resumes from an empty state.

        Returns:
            UploadAnalysisResult with state COMPLETED, CANCELLED or FAILED
        """
        self.reset_session()
        try:
            summary = self.file_analyzer.analyze_video(
                video_path,
                target_fps=target_fps,
                synchronize_to_timeline=synchronize_to_timeline,
                progress_handler=progress_handler,
                frame_handler=self.process_uploaded_frame,
                cancel_event=cancel_event
            )
            result = UploadAnalysisResult(
                state=UploadAnalysisState.COMPLETED,
                summary=summary,
                events=self.shot_events()
            )
        except AnalysisCancelled:
            result = UploadAnalysisResult(
                state=UploadAnalysisState.CANCELLED,
                events=self.shot_events()
            )
        except ShotTrackerError as e:
            self.logger.error(f"Uploaded video analysis failed: {e}")
            result = UploadAnalysisResult(
                state=UploadAnalysisState.FAILED,
                events=self.shot_events(),
                error=str(e)
            )
        finally:
            self.reset_session()

        self.logger.info(
            f"Uploaded video analysis {result.state.value}: "
            f"{result.shots} shots, {result.makes} makes"
        )
        return result

    def shutdown(self):
        """Finish queued work and stop the vision queue"""
        self.vision_queue.shutdown(wait=True)
        self.pose.close()
