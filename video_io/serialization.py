"""
Data serialization utilities
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any

import numpy as np


class NumpyJsonEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy types, enums and to_dict() models"""

    def default(self, obj):
        if isinstance(obj, np.integer):
            return int(obj)
        elif isinstance(obj, np.floating):
            return float(obj)
        elif isinstance(obj, np.ndarray):
            return obj.tolist()
        elif isinstance(obj, set):
            return list(obj)
        elif isinstance(obj, Enum):
            return obj.value
        elif hasattr(obj, 'to_dict'):
            return obj.to_dict()
        return super().default(obj)


def save_json(data: Any, filepath: str, indent: int = 2):
    """Save data to JSON file"""
    Path(filepath).parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, 'w') as f:
        json.dump(data, f, cls=NumpyJsonEncoder, indent=indent)


def load_json(filepath: str) -> Any:
    """Load data from JSON file"""
    with open(filepath, 'r') as f:
        return json.load(f)
