"""Centroid tracker for plant identity persistence and target selection.

Simple but effective approach for a weeding robot:
- Plants move slowly through the camera's field of view
- Few plants in view at once (< 20)
- Ground-projected 3D positions give a strong association signal

Algorithm:
1. Each frame, match detections to tracked plants by distance (greedy,
   closest pairs first, strict tolerance)
2. Unmatched detections become new plants
3. Unmatched plants count a missed frame and are dropped once they have
   been missing for too long
4. A plant matched for enough consecutive frames is handed out as the next
   target, exactly once
"""

import logging
from typing import List, Optional

from ...config import TrackerConfig
from .assignment import greedy_assignment
from .interface import Detection, TrackedObject, TrackerInterface, UpdateStats
from .metric import distance_matrix
from .registry import ObjectRegistry, RankKey

logger = logging.getLogger(__name__)


class CentroidTracker(TrackerInterface):
    """Distance-based tracker with exactly-once target hand-out.

    Not thread safe: update() and top_valid() both mutate state, so callers
    running frames and actuation on different threads must serialize access.

    Usage:
        tracker = CentroidTracker(distance_tolerance=7.0,
                                  max_disappeared_frames=5,
                                  min_valid_frame_count=3)

        # Each frame
        tracker.update(detector.detect(frame))

        # When the actuator is free
        target = tracker.top_valid()
        if target is not None:
            actuate(target.position)
    """

    def __init__(
        self,
        distance_tolerance: float,
        max_disappeared_frames: int,
        min_valid_frame_count: int,
        rank_key: Optional[RankKey] = None,
        size_weight: float = 0.0,
    ):
        """Initialize the tracker.

        Args:
            distance_tolerance: Max distance for a detection to keep an ID
            max_disappeared_frames: Missed frames tolerated before removal
            min_valid_frame_count: Consecutive matched frames required before
                an object is eligible for top_valid()
            rank_key: Ranking of objects, higher first. Defaults to size.
            size_weight: Weight of size difference in the matching distance
        """
        config = TrackerConfig(
            distance_tolerance=distance_tolerance,
            max_disappeared_frames=max_disappeared_frames,
            min_valid_frame_count=min_valid_frame_count,
            size_weight=size_weight,
        )
        self.distance_tolerance = config.distance_tolerance
        self.max_disappeared_frames = config.max_disappeared_frames
        self.min_valid_frame_count = config.min_valid_frame_count
        self.size_weight = config.size_weight

        self._registry = ObjectRegistry(rank_key=rank_key)
        self.last_stats = UpdateStats()

    @classmethod
    def from_config(cls, config: TrackerConfig, rank_key: Optional[RankKey] = None) -> "CentroidTracker":
        return cls(
            distance_tolerance=config.distance_tolerance,
            max_disappeared_frames=config.max_disappeared_frames,
            min_valid_frame_count=config.min_valid_frame_count,
            rank_key=rank_key,
            size_weight=config.size_weight,
        )

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, detections: List[Detection]) -> None:
        """Process one frame of detections.

        1. No detections: every tracked object missed this frame
        2. Nothing tracked: register every detection
        3. Otherwise: greedy distance matching, see assignment.py
        4. Always: drop objects missing for too long
        """
        detections = list(detections)
        stats = UpdateStats(n_detections=len(detections))

        if len(detections) == 0:
            for object_id in self._registry.ids():
                self._registry.mark_missed(object_id)
                stats.n_missed += 1

        elif len(self._registry) == 0:
            logger.debug("Tracker -- no current objects, registering all objects")
            for detection in detections:
                self._registry.register(detection)
                stats.n_new += 1

        else:
            active_ids = self._registry.ids()
            dists = distance_matrix(self._registry.objects(), detections, self.size_weight)
            assignment = greedy_assignment(dists, self.distance_tolerance)

            for row, col in assignment.matches:
                self._registry.mark_matched(active_ids[row], detections[col])
                stats.n_matched += 1

            for row in assignment.unmatched_rows:
                self._registry.mark_missed(active_ids[row])
                stats.n_missed += 1

            for col in assignment.unmatched_cols:
                self._registry.register(detections[col])
                stats.n_new += 1

        stats.removed_ids = self._cleanup_disappeared()
        stats.n_removed = len(stats.removed_ids)
        self.last_stats = stats

        logger.debug(
            "Tracker -- %d detections: %d matched, %d new, %d missed, %d removed, %d active",
            stats.n_detections, stats.n_matched, stats.n_new,
            stats.n_missed, stats.n_removed, len(self._registry),
        )

    def _cleanup_disappeared(self) -> List[int]:
        """Deregister objects missing for more than max_disappeared_frames."""
        expired = self._registry.expired(self.max_disappeared_frames)
        for object_id in expired:
            self._registry.deregister(object_id)
        return expired

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def active_objects(self) -> List[TrackedObject]:
        """All tracked objects, best ranked first."""
        return [obj.snapshot() for obj in self._registry.objects()]

    def count(self) -> int:
        """Number of currently tracked objects."""
        return len(self._registry)

    def __len__(self) -> int:
        return self.count()

    def get(self, object_id: int) -> Optional[TrackedObject]:
        obj = self._registry.get(object_id)
        return obj.snapshot() if obj is not None else None

    def top(self) -> Optional[TrackedObject]:
        """Best ranked object regardless of stability or claim state."""
        ids = self._registry.ids()
        if not ids:
            return None
        return self._registry.get(ids[0]).snapshot()

    def top_valid(self) -> Optional[TrackedObject]:
        """Next target: stable for long enough and not handed out before.

        Scans objects in registration order, so the oldest eligible plant
        goes first. The returned object is claimed and will never be
        returned again.
        """
        for object_id, obj in self._registry.items():
            if obj.match_streak >= self.min_valid_frame_count and not obj.claimed:
                self._registry.claim(object_id)
                return obj.snapshot()
        return None

    def reset(self):
        """Forget every tracked object. IDs keep counting up."""
        self._registry.clear()
        self.last_stats = UpdateStats()
