"""weed_tracker: persistent plant identities and target selection.

    detector.detect(frame) -> List[Detection] -> tracker.update(detections)
    tracker.top_valid() -> next plant to uproot
"""

from .config import TrackerConfig, load_config
from .perception.detection import Detector
from .perception.tracking import (
    CentroidTracker,
    Detection,
    TrackedObject,
    UpdateStats,
)

__version__ = "0.1.0"

__all__ = [
    "TrackerConfig",
    "load_config",
    "Detector",
    "CentroidTracker",
    "Detection",
    "TrackedObject",
    "UpdateStats",
]
