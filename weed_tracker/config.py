"""Tracker configuration.

Values can come from code, a dict, or a YAML file. The YAML may either hold
the keys at top level or nest them under a `tracker:` section, so the same
file can also carry the detector's parameters:

    tracker:
      distance_tolerance: 7.0
      max_disappeared_frames: 5
      min_valid_frame_count: 3
"""

import numbers
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Union

import yaml

# Key names used by the vision node's parameter file (vision_test.yaml)
KEY_ALIASES = {
    "filter_distance_tolerance_cm": "distance_tolerance",
}


@dataclass
class TrackerConfig:
    """Construction parameters for CentroidTracker."""

    # Max distance (same units as positions) for a detection to keep an ID
    distance_tolerance: float = 7.0

    # Consecutive missed frames tolerated before an object is dropped
    max_disappeared_frames: int = 5

    # Consecutive matched frames before an object can be handed out
    min_valid_frame_count: int = 3

    # Weight of the size difference in the matching distance (0 = ignore)
    size_weight: float = 0.0

    def __post_init__(self):
        self.validate()

    def validate(self):
        if not self.distance_tolerance > 0:
            raise ValueError(f"distance_tolerance must be positive, got {self.distance_tolerance}")
        for name in ("max_disappeared_frames", "min_valid_frame_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if self.max_disappeared_frames < 0:
            raise ValueError(f"max_disappeared_frames must be >= 0, got {self.max_disappeared_frames}")
        if self.min_valid_frame_count < 0:
            raise ValueError(f"min_valid_frame_count must be >= 0, got {self.min_valid_frame_count}")
        if self.size_weight < 0:
            raise ValueError(f"size_weight must be >= 0, got {self.size_weight}")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "TrackerConfig":
        """Build from a plain dict, accepting the vision node's key names."""
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            name = KEY_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown tracker config key: {key}")
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Union[str, os.PathLike]) -> TrackerConfig:
    """Load a TrackerConfig from a YAML file."""
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping in {path}, got {type(data).__name__}")

    if "tracker" in data:
        data = data["tracker"] or {}

    return TrackerConfig.from_dict(data)
