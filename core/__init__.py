"""
Core domain models and interfaces for basketball shot tracking
"""

from .models import (
    TargetClass, FrameSource, ExifOrientation, PoseJoint,
    NormalizedRect, Detection, Keypoint, PoseObservation, AnalysisFrame,
    TrackPoint, TrackState, PoseFrame, BestDetectionFrame,
    ShotPhase, ShotPhaseKind, ShotDiagnostics, DetectedShotEvent, ShotCounters,
    AnalysisSummary, AnalysisResult
)
from .interfaces import BallHoopDetector, PoseModel, Clock
from .exceptions import (
    ShotTrackerError, ModelLoadError, VideoAnalysisError, AnalysisCancelled
)

__all__ = [
    # Models
    'TargetClass', 'FrameSource', 'ExifOrientation', 'PoseJoint',
    'NormalizedRect', 'Detection', 'Keypoint', 'PoseObservation', 'AnalysisFrame',
    'TrackPoint', 'TrackState', 'PoseFrame', 'BestDetectionFrame',
    'ShotPhase', 'ShotPhaseKind', 'ShotDiagnostics', 'DetectedShotEvent',
    'ShotCounters', 'AnalysisSummary', 'AnalysisResult',
    # Interfaces
    'BallHoopDetector', 'PoseModel', 'Clock',
    # Errors
    'ShotTrackerError', 'ModelLoadError', 'VideoAnalysisError', 'AnalysisCancelled'
]
