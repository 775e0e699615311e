"""
Model path management
"""

from typing import Dict, Optional
from pathlib import Path

from .settings import get_settings


class ModelPaths:
    """Manage paths to ball/hoop detector weights"""

    def __init__(self, base_dir: str = "./models"):
        self.base_dir = Path(base_dir)

        # Default model paths
        self.models = {
            'yolo': {
                'default': 'yolo/ball_hoop.pt',
                'nano': 'yolo/ball_hoop_n.pt',
                'small': 'yolo/ball_hoop_s.pt'
            }
        }

    def get_model_path(self, model_type: str, version: str = 'default') -> str:
        """
        Get full path to model

        Args:
            model_type: Type of model (yolo)
            version: Model version

        Returns:
            Full path to model file
        """
        if model_type not in self.models:
            raise ValueError(f"Unknown model type: {model_type}")

        if version not in self.models[model_type]:
            # Try default
            version = 'default'

        relative_path = self.models[model_type][version]
        full_path = self.base_dir / relative_path

        if not full_path.exists():
            # Try alternative locations
            alternatives = [
                Path(relative_path),  # Current directory
                Path(f"./checkpoints/{relative_path}"),  # Checkpoints dir
            ]

            for alt_path in alternatives:
                if alt_path.exists():
                    return str(alt_path)

        # Return expected path even if not found
        return str(full_path)

    def register_model(self, model_type: str, version: str, path: str):
        """Register a new model path"""
        if model_type not in self.models:
            self.models[model_type] = {}
        self.models[model_type][version] = path

    def list_models(self) -> Dict[str, Dict[str, Dict]]:
        """List all registered models"""
        result = {}

        for model_type, versions in self.models.items():
            result[model_type] = {}
            for version, path in versions.items():
                full_path = self.base_dir / path
                result[model_type][version] = {
                    'path': str(full_path),
                    'exists': full_path.exists()
                }

        return result


# Global model paths instance
_model_paths: Optional[ModelPaths] = None


def get_model_paths() -> ModelPaths:
    """Get global model paths instance"""
    global _model_paths

    if _model_paths is None:
        base_dir = get_settings().model_dir
        _model_paths = ModelPaths(base_dir)

    return _model_paths


def get_model_path(model_type: str, version: str = 'default') -> str:
    """Get path to model"""
    return get_model_paths().get_model_path(model_type, version)


def reset_model_paths():
    """Reset model paths (mainly for testing)"""
    global _model_paths
    _model_paths = None
