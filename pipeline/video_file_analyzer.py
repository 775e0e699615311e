"""
Uploaded video analysis - sampling, timeline pacing, progress and cancellation
"""

import math
import logging
import threading
from pathlib import Path
from typing import Callable, Optional

import cv2

from core.constants import DEFAULT_TARGET_FPS, MAX_TARGET_FPS, MIN_TARGET_FPS, TIMESTAMP_SLACK
from core.exceptions import AnalysisCancelled, VideoAnalysisError
from core.interfaces import Clock
from core.models import AnalysisFrame, AnalysisSummary
from utils.clock import SystemClock
from utils.geometry import clamp
from video_io.frames import file_frame
from video_io.video import VideoReader

ProgressHandler = Callable[[float], None]
FrameHandler = Callable[[AnalysisFrame], None]


class VideoFileAnalyzer:
    """Reads a video file and feeds sampled frames to a handler"""

    def __init__(self, clock: Optional[Clock] = None,
                 reader_factory: Callable[[str], VideoReader] = VideoReader):
        """
        Initialize analyzer

        Args:
            clock: Time source used for timeline pacing
            reader_factory: Opens a path and returns a VideoReader-like object
        """
        self.clock = clock or SystemClock()
        self.reader_factory = reader_factory
        self.logger = logging.getLogger(__name__)

    def analyze_video(self,
                      video_path: str,
                      target_fps: float = DEFAULT_TARGET_FPS,
                      synchronize_to_timeline: bool = True,
                      progress_handler: Optional[ProgressHandler] = None,
                      frame_handler: Optional[FrameHandler] = None,
                      cancel_event: Optional[threading.Event] = None) -> AnalysisSummary:
        """
        Sample a video file at a target rate

        Args:
            video_path: Video file to read
            target_fps: Sampling rate, clamped to [1, 60]
            synchronize_to_timeline: Sleep so wall time follows media time
            progress_handler: Receives fractional progress in [0, 1]
            frame_handler: Receives each sampled frame
            cancel_event: Set to stop before the next frame read

        Returns:
            AnalysisSummary of the run

        Raises:
            VideoAnalysisError: Missing, unreadable or zero-length video
            AnalysisCancelled: cancel_event was set during the run
        """
        progress_handler = progress_handler or (lambda _: None)
        frame_handler = frame_handler or (lambda _: None)

        if not Path(video_path).is_file():
            raise VideoAnalysisError(f"Video file not found: {video_path}")

        capped_fps = clamp(target_fps, MIN_TARGET_FPS, MAX_TARGET_FPS)
        frame_interval = 1.0 / capped_fps

        with self.reader_factory(video_path) as reader:
            duration = reader.duration
            if not math.isfinite(duration) or duration <= 0:
                raise VideoAnalysisError(f"Video duration is invalid or unsupported: {video_path}")

            orientation = reader.orientation
            self.logger.info(
                f"Analyzing {video_path}: {duration:.1f}s at {capped_fps:.0f} fps, "
                f"orientation {orientation.name}"
            )

            next_accepted = 0.0
            first_sampled: Optional[float] = None
            start_uptime: Optional[float] = None
            total_frames = 0
            sampled_frames = 0

            while True:
                if cancel_event is not None and cancel_event.is_set():
                    self.logger.info(f"Analysis cancelled after {total_frames} frames")
                    raise AnalysisCancelled(f"Analysis of {video_path} was cancelled")

                try:
                    item = reader.read()
                except cv2.error as e:
                    raise VideoAnalysisError(f"Video analysis failed: {e}") from e
                if item is None:
                    break

                image, seconds = item
                total_frames += 1
                if not math.isfinite(seconds):
                    continue

                if seconds + TIMESTAMP_SLACK < next_accepted:
                    progress_handler(clamp(seconds / duration, 0.0, 1.0))
                    continue
                next_accepted = seconds + frame_interval

                if synchronize_to_timeline:
                    if first_sampled is None:
                        first_sampled = seconds
                        start_uptime = self.clock.now()
                    target_uptime = start_uptime + max(0.0, seconds - first_sampled)
                    delay = target_uptime - self.clock.now()
                    if delay > 0:
                        self.clock.sleep(delay)

                frame_handler(file_frame(image, seconds, orientation))
                sampled_frames += 1
                progress_handler(clamp(seconds / duration, 0.0, 1.0))

        progress_handler(1.0)
        summary = AnalysisSummary(
            duration_seconds=duration,
            total_frames_read=total_frames,
            sampled_frames_processed=sampled_frames
        )
        self.logger.info(f"Read {total_frames} frames, analyzed {sampled_frames}")
        return summary
