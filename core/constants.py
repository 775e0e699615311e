"""
Constants for the basketball shot tracking core
"""

# Detector labels (from the ball/hoop YOLO model)
BALL_LABEL = "Basketball"
HOOP_LABEL = "Basketball Hoop"

# Frame processing
THROTTLE_FPS = 15.0
NOMINAL_FPS = 15.0
MIN_TIME_DELTA = 1.0 / 60.0

# Sliding windows (pose + detection)
WINDOW_MAX_DURATION = 5.0
WINDOW_MAX_FRAMES = 90
DEFAULT_SLICE_RADIUS = 1.25

# Pose
MIN_KEYPOINT_CONFIDENCE = 0.2
POSE_VELOCITY_MIN_DT = 0.016
MAX_HANDS = 2

# Candidate acceptance
HOOP_MIN_CONFIDENCE = 0.50
BALL_MIN_CONFIDENCE = 0.30
BALL_NEAR_HOOP_MIN_CONFIDENCE = 0.15

# Track size blend toward the measurement
SIZE_BLEND = 0.35

# Velocity smoothing (old/new)
VELOCITY_KEEP = 0.55
VELOCITY_NEW = 0.45

# Occlusion bridging decay
PREDICTED_VELOCITY_DECAY = 0.90
PREDICTED_CONFIDENCE_DECAY = 0.85
PREDICTED_MIN_CONFIDENCE = 0.05

# Minimum reconstructed bbox side in pixels
MIN_BOX_PIXELS = 2.0

# Shot phase timing (seconds)
SHOT_COOLDOWN = 0.8
CROSSING_FINALIZE_TIMEOUT = 0.9
ATTEMPT_TIMEOUT = 3.6
LOST_TRACK_TIMEOUT = 4.0

# Video file analysis
DEFAULT_TARGET_FPS = 15.0
MIN_TARGET_FPS = 1.0
MAX_TARGET_FPS = 60.0
TIMESTAMP_SLACK = 0.0001

WAITING_TEXT = "Waiting..."
