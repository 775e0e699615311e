"""
High-level processing pipelines for shot analysis
"""

from .session import (
    ShotAnalysisEngine, UploadAnalysisState, UploadAnalysisResult, build_feedback_payload
)
from .video_file_analyzer import VideoFileAnalyzer
from .video_processor import VideoProcessor, ProcessorConfig

__all__ = [
    'ShotAnalysisEngine', 'UploadAnalysisState', 'UploadAnalysisResult', 'build_feedback_payload',
    'VideoFileAnalyzer',
    'VideoProcessor', 'ProcessorConfig'
]
