"""
Core data models for shot tracking - detections, tracks, pose frames and shot events
"""

import uuid
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Tuple, Any
from enum import Enum
import numpy as np

from .constants import BALL_LABEL, HOOP_LABEL, WAITING_TEXT


class TargetClass(Enum):
    """Object classes produced by the ball/hoop detector"""
    BASKETBALL = BALL_LABEL
    HOOP = HOOP_LABEL

    @classmethod
    def from_label(cls, label: str) -> Optional['TargetClass']:
        """Map a detector label to a target class, None for anything else"""
        for member in cls:
            if member.value == label:
                return member
        return None


class FrameSource(Enum):
    """Where analyzed frames come from"""
    LIVE_CAMERA = "live_camera"
    UPLOADED_VIDEO = "uploaded_video"


class ExifOrientation(Enum):
    """EXIF-style orientation of a raw pixel buffer"""
    UP = 1
    UP_MIRRORED = 2
    DOWN = 3
    DOWN_MIRRORED = 4
    LEFT_MIRRORED = 5
    RIGHT = 6
    RIGHT_MIRRORED = 7
    LEFT = 8

    @property
    def swaps_dimensions(self) -> bool:
        return self in (
            ExifOrientation.LEFT, ExifOrientation.RIGHT,
            ExifOrientation.LEFT_MIRRORED, ExifOrientation.RIGHT_MIRRORED
        )


class PoseJoint(Enum):
    """Unified body and hand joint names"""
    # Body
    NOSE = "nose"
    NECK = "neck"
    LEFT_SHOULDER = "left_shoulder"
    LEFT_ELBOW = "left_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_SHOULDER = "right_shoulder"
    RIGHT_ELBOW = "right_elbow"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    LEFT_KNEE = "left_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_HIP = "right_hip"
    RIGHT_KNEE = "right_knee"
    RIGHT_ANKLE = "right_ankle"

    # Hand (one map per detected hand, left/right is not tagged)
    WRIST = "wrist"
    THUMB_TIP = "thumb_tip"
    INDEX_TIP = "index_tip"
    MIDDLE_TIP = "middle_tip"
    RING_TIP = "ring_tip"
    LITTLE_TIP = "little_tip"


# Normalized point, origin bottom-left
NormalizedPoint = Tuple[float, float]
JointMap = Dict[PoseJoint, NormalizedPoint]


@dataclass(frozen=True)
class NormalizedRect:
    """Normalized bounding box with origin at the bottom-left corner"""
    x: float
    y: float
    width: float
    height: float

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2

    def to_dict(self) -> Dict[str, float]:
        return {
            'x': float(self.x),
            'y': float(self.y),
            'width': float(self.width),
            'height': float(self.height)
        }


@dataclass(frozen=True)
class Detection:
    """Single ball or hoop detection (or a track rendered back into one)"""
    cls: TargetClass
    confidence: float
    bbox: NormalizedRect

    def to_dict(self) -> Dict[str, Any]:
        return {
            'class': self.cls.value,
            'confidence': float(self.confidence),
            'bbox': self.bbox.to_dict()
        }


@dataclass(frozen=True)
class Keypoint:
    """Raw keypoint from a pose model, normalized bottom-left coordinates"""
    x: float
    y: float
    confidence: float


@dataclass
class PoseObservation:
    """Raw output of a pose model for one frame"""
    body: Dict[PoseJoint, Keypoint] = field(default_factory=dict)
    hands: List[Dict[PoseJoint, Keypoint]] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class AnalysisFrame:
    """Uniform frame record shared by live and file sources"""
    image: np.ndarray  # H x W x 3 BGR, never mutated
    timestamp: float
    orientation: ExifOrientation
    oriented_image_size: Tuple[float, float]  # (width, height) after orientation

    @property
    def width(self) -> float:
        return self.oriented_image_size[0]

    @property
    def height(self) -> float:
        return self.oriented_image_size[1]


@dataclass(frozen=True)
class TrackPoint:
    """Measured or predicted track sample in pixel space (origin top-left)"""
    x: float
    y: float
    frame_index: int
    timestamp: float
    width: float
    height: float
    confidence: float
    is_predicted: bool = False

    @property
    def size(self) -> float:
        """Largest side in pixels"""
        return max(self.width, self.height)


@dataclass(frozen=True)
class TrackState:
    """Per-class track: latest point, velocity in px/s and time since last measurement"""
    latest: TrackPoint
    velocity: Tuple[float, float] = (0.0, 0.0)
    missed_time: float = 0.0


@dataclass(frozen=True)
class PoseFrame:
    """One entry of the pose sliding window"""
    timestamp: float
    body_joints: JointMap = field(default_factory=dict)
    hands: Tuple[JointMap, ...] = ()
    release_confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': float(self.timestamp),
            'body_joints': _joints_to_dict(self.body_joints),
            'hands': [_joints_to_dict(hand) for hand in self.hands],
            'release_confidence': float(self.release_confidence)
        }


@dataclass(frozen=True)
class BestDetectionFrame:
    """One entry of the detection sliding window"""
    timestamp: float
    ball: Optional[Detection] = None
    hoop: Optional[Detection] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': float(self.timestamp),
            'ball': self.ball.to_dict() if self.ball else None,
            'hoop': self.hoop.to_dict() if self.hoop else None
        }


class ShotPhaseKind(Enum):
    """State of the shot phase machine"""
    IDLE = "idle"
    TRACKING = "tracking"
    COOLDOWN = "cooldown"


@dataclass(frozen=True)
class ShotPhase:
    """Shot phase with its timing payload"""
    kind: ShotPhaseKind = ShotPhaseKind.IDLE
    start_time: Optional[float] = None   # set while tracking
    until_time: Optional[float] = None   # set while cooling down

    @classmethod
    def idle(cls) -> 'ShotPhase':
        return cls()

    @classmethod
    def tracking(cls, start_time: float) -> 'ShotPhase':
        return cls(kind=ShotPhaseKind.TRACKING, start_time=start_time)

    @classmethod
    def cooldown(cls, until_time: float) -> 'ShotPhase':
        return cls(kind=ShotPhaseKind.COOLDOWN, until_time=until_time)

    @property
    def is_idle(self) -> bool:
        return self.kind == ShotPhaseKind.IDLE

    @property
    def is_tracking(self) -> bool:
        return self.kind == ShotPhaseKind.TRACKING

    @property
    def is_cooldown(self) -> bool:
        return self.kind == ShotPhaseKind.COOLDOWN


@dataclass(frozen=True)
class ShotDiagnostics:
    """Why a shot attempt was scored the way it was"""
    reason: str
    pose_release_confidence: float
    saw_ball_above_rim: bool
    crossing_offset_pixels: Optional[float] = None
    centered_at_rim: Optional[bool] = None
    stayed_near_center_below: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'reason': self.reason,
            'pose_release_confidence': float(self.pose_release_confidence),
            'saw_ball_above_rim': self.saw_ball_above_rim,
            'crossing_offset_pixels': (
                float(self.crossing_offset_pixels)
                if self.crossing_offset_pixels is not None else None
            ),
            'centered_at_rim': self.centered_at_rim,
            'stayed_near_center_below': self.stayed_near_center_below
        }


@dataclass(frozen=True)
class DetectedShotEvent:
    """A finalized shot attempt"""
    timestamp: float
    is_make: bool
    confidence: float
    source: FrameSource
    diagnostics: ShotDiagnostics
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def result_text(self) -> str:
        return "Make" if self.is_make else "Miss"

    def summary(self) -> str:
        """Short diagnostic line for display"""
        text = f"{self.result_text} ({self.confidence:.0%}, {self.diagnostics.reason})"
        if self.diagnostics.crossing_offset_pixels is not None:
            text += f" offset {self.diagnostics.crossing_offset_pixels:+.0f}px"
        return text

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'timestamp': float(self.timestamp),
            'is_make': self.is_make,
            'confidence': float(self.confidence),
            'source': self.source.value,
            'diagnostics': self.diagnostics.to_dict()
        }


@dataclass(frozen=True)
class ShotCounters:
    """Running totals published to display consumers"""
    shots: int = 0
    makes: int = 0
    last_result_text: str = WAITING_TEXT

    def record(self, event: DetectedShotEvent) -> 'ShotCounters':
        return ShotCounters(
            shots=self.shots + 1,
            makes=self.makes + (1 if event.is_make else 0),
            last_result_text=event.summary()
        )


@dataclass(frozen=True)
class AnalysisSummary:
    """Outcome of reading an uploaded video"""
    duration_seconds: float
    total_frames_read: int
    sampled_frames_processed: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'duration_seconds': float(self.duration_seconds),
            'total_frames_read': self.total_frames_read,
            'sampled_frames_processed': self.sampled_frames_processed
        }


@dataclass
class AnalysisResult:
    """Complete shot analysis of one video file"""
    video_path: str
    summary: AnalysisSummary
    events: List[DetectedShotEvent] = field(default_factory=list)
    processing_time: float = 0.0

    @property
    def shots(self) -> int:
        return len(self.events)

    @property
    def makes(self) -> int:
        return sum(1 for e in self.events if e.is_make)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return {
            'video_info': {
                'path': self.video_path,
                **self.summary.to_dict()
            },
            'totals': {
                'shots': self.shots,
                'makes': self.makes,
                'misses': self.shots - self.makes
            },
            'processing_time': self.processing_time,
            'events': [e.to_dict() for e in self.events]
        }

    def get_summary(self) -> str:
        """Get human-readable summary"""
        lines = [
            f"Video: {self.video_path}",
            f"Duration: {self.summary.duration_seconds:.1f}s",
            f"Frames: {self.summary.sampled_frames_processed}/{self.summary.total_frames_read} analyzed",
            f"Shots: {self.shots}  Makes: {self.makes}  Misses: {self.shots - self.makes}",
        ]
        if self.processing_time > 0:
            lines.append(f"Processing time: {self.processing_time:.1f}s")
        return "\n".join(lines)


def _joints_to_dict(joints: JointMap) -> Dict[str, Dict[str, float]]:
    return {
        joint.value: {'x': float(point[0]), 'y': float(point[1])}
        for joint, point in joints.items()
    }
