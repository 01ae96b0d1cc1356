"""Perception for weed_tracker.

Components:
- detection: Detector interface, frame -> List[Detection]
- tracking: Identity persistence and target selection
"""

from .detection import Detector
from .tracking import CentroidTracker, Detection, TrackedObject

__all__ = [
    "Detector",
    "CentroidTracker",
    "Detection",
    "TrackedObject",
]
