"""
Ball/hoop tracker - detector calls, tracking, shot state machine and published results
"""

import logging
import queue
from dataclasses import dataclass
from typing import List, Optional, Tuple

from analytics.events.shot_phase import ShotStateMachine
from core.constants import (
    DEFAULT_SLICE_RADIUS, MIN_TIME_DELTA, THROTTLE_FPS, WAITING_TEXT,
    WINDOW_MAX_DURATION, WINDOW_MAX_FRAMES
)
from core.interfaces import BallHoopDetector
from core.models import (
    AnalysisFrame, BestDetectionFrame, Detection, DetectedShotEvent,
    FrameSource, ShotCounters
)
from utils.sliding_window import SlidingWindow, window_slice
from utils.throttle import Throttle
from utils.vision_queue import VisionQueue
from .association import BALL_TRACKING, HOOP_TRACKING, TrackTuning
from .state import AcceptanceRules, TrackerState, advance_tracker_state

RESULT_CHANNEL_SIZE = 256


@dataclass(frozen=True)
class TrackerFrameResult:
    """Everything the tracker published for one frame"""
    timestamp: float
    frame_index: int
    best_ball: Optional[Detection]
    best_hoop: Optional[Detection]
    oriented_image_size: Tuple[float, float]
    shot_event: Optional[DetectedShotEvent]
    counters: ShotCounters


class BallHoopTracker:
    """
    Runs the detector per frame and tracks the ball and hoop

    Tracking state, the shot machine and the detection window are only
    touched on the vision queue. Counters, the window snapshot and the
    latest best detections are published by replacing immutable values.
    """

    def __init__(self,
                 detector: BallHoopDetector,
                 vision_queue: Optional[VisionQueue] = None,
                 shot_machine: Optional[ShotStateMachine] = None,
                 acceptance: Optional[AcceptanceRules] = None,
                 ball_tuning: TrackTuning = BALL_TRACKING,
                 hoop_tuning: TrackTuning = HOOP_TRACKING,
                 throttle_fps: float = THROTTLE_FPS,
                 window_max_duration: float = WINDOW_MAX_DURATION,
                 window_max_frames: int = WINDOW_MAX_FRAMES,
                 min_dt: float = MIN_TIME_DELTA,
                 result_channel: Optional[queue.Queue] = None):
        """
        Initialize tracker

        Args:
            detector: Ball/hoop object detector
            vision_queue: Shared serial worker, a private one is created if omitted
            shot_machine: Shot phase machine fed after every frame
            acceptance: Candidate confidence thresholds
            ball_tuning: Ball association tuning
            hoop_tuning: Hoop association tuning
            throttle_fps: Maximum processing rate for throttled frames
            window_max_duration: Detection window age cap in seconds
            window_max_frames: Detection window length cap
            min_dt: Time step floor for prediction
            result_channel: Queue receiving one TrackerFrameResult per frame
        """
        self.detector = detector
        self.vision_queue = vision_queue or VisionQueue(name="tracker")
        self.shot_machine = shot_machine or ShotStateMachine()
        self.acceptance = acceptance or AcceptanceRules()
        self.ball_tuning = ball_tuning
        self.hoop_tuning = hoop_tuning
        self.min_dt = min_dt
        self.result_channel = result_channel or queue.Queue(maxsize=RESULT_CHANNEL_SIZE)
        self.logger = logging.getLogger(__name__)

        # Owned by the vision queue
        self.state = TrackerState()
        self._throttle = Throttle(throttle_fps)
        self._window: SlidingWindow[BestDetectionFrame] = SlidingWindow(
            window_max_duration, window_max_frames
        )

        # Published
        self._counters = ShotCounters()
        self._window_snapshot: Tuple[BestDetectionFrame, ...] = ()
        self._latest: Optional[TrackerFrameResult] = None

    # Published state

    @property
    def counters(self) -> ShotCounters:
        return self._counters

    @property
    def shots(self) -> int:
        return self._counters.shots

    @property
    def makes(self) -> int:
        return self._counters.makes

    @property
    def last_result_text(self) -> str:
        return self._counters.last_result_text

    @property
    def latest_result(self) -> Optional[TrackerFrameResult]:
        return self._latest

    def current_detection_window(self) -> Tuple[BestDetectionFrame, ...]:
        return self._window_snapshot

    def detection_window_slice(self, center: float,
                               radius: float = DEFAULT_SLICE_RADIUS) -> List[BestDetectionFrame]:
        return window_slice(self._window_snapshot, center, radius)

    # Processing

    def process(self,
                frame: AnalysisFrame,
                pose_release_confidence: float = 0.0,
                source: FrameSource = FrameSource.LIVE_CAMERA,
                apply_throttle: bool = True,
                synchronous: bool = False) -> Optional[TrackerFrameResult]:
        """
        Process one frame

        Returns:
            This frame's result when synchronous (None if throttled out),
            otherwise None
        """
        args = (frame, pose_release_confidence, source, apply_throttle)
        if synchronous:
            return self.vision_queue.run_sync(self.process_on_queue, *args)
        self.vision_queue.submit(self.process_on_queue, *args)
        return None

    def process_on_queue(self,
                         frame: AnalysisFrame,
                         pose_release_confidence: float = 0.0,
                         source: FrameSource = FrameSource.LIVE_CAMERA,
                         apply_throttle: bool = True) -> Optional[TrackerFrameResult]:
        """Process a frame; must run on the vision queue"""
        if apply_throttle and not self._throttle.admit(frame.timestamp):
            return None

        try:
            candidates = list(self.detector.detect(frame))
        except Exception as e:
            self.logger.warning(f"Detection failed at t={frame.timestamp:.3f}: {e}")
            candidates = []

        frame_index = self.state.frame_index
        self.state, step = advance_tracker_state(
            self.state, candidates, frame,
            rules=self.acceptance,
            ball_tuning=self.ball_tuning,
            hoop_tuning=self.hoop_tuning,
            min_dt=self.min_dt
        )

        event = self.shot_machine.update(
            self.state.ball_history,
            self.state.hoop_history,
            pose_release_confidence,
            source,
            frame.timestamp
        )

        counters = self._counters.record(event) if event is not None else self._counters
        self._window.append(BestDetectionFrame(
            timestamp=frame.timestamp, ball=step.best_ball, hoop=step.best_hoop
        ))

        result = TrackerFrameResult(
            timestamp=frame.timestamp,
            frame_index=frame_index,
            best_ball=step.best_ball,
            best_hoop=step.best_hoop,
            oriented_image_size=frame.oriented_image_size,
            shot_event=event,
            counters=counters
        )
        self._publish(result)
        return result

    def _publish(self, result: TrackerFrameResult):
        self._counters = result.counters
        self._window_snapshot = self._window.snapshot()
        self._latest = result
        try:
            self.result_channel.put_nowait(result)
        except queue.Full:
            # Consumer is behind; keep the newest results
            try:
                self.result_channel.get_nowait()
            except queue.Empty:
                pass
            self.result_channel.put_nowait(result)

    def restore_counters(self, shots: int, makes: int):
        """Restore persisted totals, keeping 0 <= makes <= shots"""
        def restore():
            restored_shots = max(0, int(shots))
            self._counters = ShotCounters(
                shots=restored_shots,
                makes=max(0, min(int(makes), restored_shots)),
                last_result_text=WAITING_TEXT
            )
        self.vision_queue.run_sync(restore)

    def reset_session(self):
        """Clear tracks, histories, shot phase, window and counters"""
        self.vision_queue.run_sync(self._reset_on_queue)

    def _reset_on_queue(self):
        self.state = TrackerState()
        self.shot_machine.reset()
        self._throttle.reset()
        self._window.clear()
        self._counters = ShotCounters()
        self._window_snapshot = ()
        self._latest = None
        while True:
            try:
                self.result_channel.get_nowait()
            except queue.Empty:
                break
