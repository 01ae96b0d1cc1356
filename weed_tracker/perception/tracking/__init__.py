"""Plant tracking.

Bridges the gap between per-frame detections (anonymous blobs) and the
persistent identities needed to pick and uproot one weed at a time.

Key insight: the detector sees "a blob at (x, y, z)" every frame, the actuator
needs "plant 7, which has been stable for 3 frames and was never targeted".
The tracker maintains this mapping across frames using 3D position association.
"""

from .interface import Detection, TrackedObject, TrackerInterface, UpdateStats
from .assignment import Assignment, greedy_assignment
from .metric import distance_matrix, euclidean_distance
from .registry import ObjectRegistry, rank_by_size
from .centroid_tracker import CentroidTracker

__all__ = [
    "Detection",
    "TrackedObject",
    "TrackerInterface",
    "UpdateStats",
    "Assignment",
    "greedy_assignment",
    "distance_matrix",
    "euclidean_distance",
    "ObjectRegistry",
    "rank_by_size",
    "CentroidTracker",
]
