"""
Exception types surfaced by the shot tracking core
"""


class ShotTrackerError(Exception):
    """Base class for shot tracking errors"""


class ModelLoadError(ShotTrackerError):
    """A detection or pose model could not be loaded. Fatal at startup."""


class VideoAnalysisError(ShotTrackerError):
    """An uploaded video could not be read or analyzed"""


class AnalysisCancelled(ShotTrackerError):
    """Uploaded video analysis was cancelled before it finished"""
