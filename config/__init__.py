"""
Configuration management
"""

from .settings import Settings, get_settings, reset_settings
from .model_paths import ModelPaths, get_model_path, get_model_paths, reset_model_paths

__all__ = [
    'Settings', 'get_settings', 'reset_settings',
    'ModelPaths', 'get_model_path', 'get_model_paths', 'reset_model_paths'
]
