"""
Global settings management
"""

import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
import json
from pathlib import Path

from analytics.events.shot_phase import ShotTuning
from tracking.association import TrackTuning
from tracking.state import AcceptanceRules

ENV_PREFIX = "SHOTTRACK_"


@dataclass
class Settings:
    """Global application settings"""

    # Paths
    model_dir: str = "./models"

    # Models
    detector_model: str = "default"
    detection_confidence: float = 0.1
    device: str = "auto"
    pose_model_complexity: int = 1

    # Frame processing
    throttle_fps: float = 15.0
    window_max_duration: float = 5.0
    window_max_frames: int = 90
    slice_radius: float = 1.25
    min_time_delta: float = 1.0 / 60.0

    # Pose
    min_keypoint_confidence: float = 0.2

    # Candidate acceptance
    hoop_min_confidence: float = 0.50
    ball_min_confidence: float = 0.30
    ball_near_hoop_min_confidence: float = 0.15

    # Ball tracking
    ball_occlusion_tolerance: float = 0.8
    ball_association_distance_multiplier: float = 3.0
    ball_min_association_distance: float = 28.0
    ball_max_speed: float = 1650.0
    ball_measurement_blend: float = 0.78
    ball_reacquire_confidence: float = 0.60
    ball_glitch_min_jump: float = 30.0
    ball_glitch_size_multiplier: float = 5.0
    ball_history_max_age: float = 6.0

    # Hoop tracking
    hoop_occlusion_tolerance: float = 3.0
    hoop_association_distance_multiplier: float = 1.8
    hoop_min_association_distance: float = 22.0
    hoop_max_speed: float = 300.0
    hoop_measurement_blend: float = 0.60
    hoop_reacquire_confidence: float = 0.70
    hoop_glitch_min_jump: float = 20.0
    hoop_glitch_size_multiplier: float = 1.8
    hoop_history_max_age: float = 8.0

    # Shot phase
    pose_release_threshold: float = 0.33
    shot_cooldown: float = 0.8
    crossing_timeout: float = 0.9
    attempt_timeout: float = 3.6
    lost_track_timeout: float = 4.0

    # Uploaded video
    target_fps: float = 15.0
    synchronize_to_timeline: bool = True

    # Logging
    log_level: str = "INFO"

    @classmethod
    def from_file(cls, filepath: str) -> 'Settings':
        """Load settings from JSON file"""
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls(**data)

    @classmethod
    def from_env(cls) -> 'Settings':
        """Load settings from environment variables"""
        settings = cls()

        # Override from environment
        for field in settings.__dataclass_fields__:
            env_key = f"{ENV_PREFIX}{field.upper()}"
            if env_key in os.environ:
                value = os.environ[env_key]
                # Convert types
                field_type = settings.__dataclass_fields__[field].type
                if field_type == int:
                    value = int(value)
                elif field_type == float:
                    value = float(value)
                elif field_type == bool:
                    value = value.lower() in ('true', '1', 'yes')
                setattr(settings, field, value)

        return settings

    def save(self, filepath: str):
        """Save settings to JSON file"""
        Path(filepath).parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(asdict(self), f, indent=2)

    # Component tuning

    def _track_tuning(self, prefix: str) -> TrackTuning:
        return TrackTuning(
            occlusion_tolerance=getattr(self, f"{prefix}_occlusion_tolerance"),
            association_distance_multiplier=getattr(self, f"{prefix}_association_distance_multiplier"),
            min_association_distance=getattr(self, f"{prefix}_min_association_distance"),
            max_speed=getattr(self, f"{prefix}_max_speed"),
            measurement_blend=getattr(self, f"{prefix}_measurement_blend"),
            reacquire_confidence=getattr(self, f"{prefix}_reacquire_confidence"),
            glitch_min_jump=getattr(self, f"{prefix}_glitch_min_jump"),
            glitch_size_multiplier=getattr(self, f"{prefix}_glitch_size_multiplier"),
            history_max_age=getattr(self, f"{prefix}_history_max_age")
        )

    def ball_tuning(self) -> TrackTuning:
        return self._track_tuning("ball")

    def hoop_tuning(self) -> TrackTuning:
        return self._track_tuning("hoop")

    def acceptance_rules(self) -> AcceptanceRules:
        return AcceptanceRules(
            hoop_min_confidence=self.hoop_min_confidence,
            ball_min_confidence=self.ball_min_confidence,
            ball_near_hoop_min_confidence=self.ball_near_hoop_min_confidence
        )

    def shot_tuning(self) -> ShotTuning:
        return ShotTuning(
            pose_release_threshold=self.pose_release_threshold,
            cooldown=self.shot_cooldown,
            crossing_timeout=self.crossing_timeout,
            attempt_timeout=self.attempt_timeout,
            lost_track_timeout=self.lost_track_timeout,
            min_dt=self.min_time_delta
        )

    def tracker_options(self) -> Dict[str, Any]:
        """Keyword arguments for BallHoopTracker"""
        return {
            'throttle_fps': self.throttle_fps,
            'window_max_duration': self.window_max_duration,
            'window_max_frames': self.window_max_frames,
            'min_dt': self.min_time_delta
        }

    def pose_options(self) -> Dict[str, Any]:
        """Keyword arguments for PoseEstimator"""
        return {
            'throttle_fps': self.throttle_fps,
            'window_max_duration': self.window_max_duration,
            'window_max_frames': self.window_max_frames,
            'min_keypoint_confidence': self.min_keypoint_confidence
        }


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get global settings instance"""
    global _settings

    if _settings is None:
        # Try loading from file first
        config_file = os.environ.get(f"{ENV_PREFIX}CONFIG", "config/settings.json")
        if os.path.exists(config_file):
            _settings = Settings.from_file(config_file)
        else:
            # Load from environment or use defaults
            _settings = Settings.from_env()

    return _settings


def reset_settings():
    """Reset settings (mainly for testing)"""
    global _settings
    _settings = None
