"""Authoritative table of tracked plants.

One TrackedObject per ID, plus the list of IDs kept in ranked order
(best first). The ranked list is maintained by insertion, never re-sorted
as a whole: fine for the dozen or so plants in view at once, but O(n) per
registration.
"""

import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .interface import Detection, TrackedObject

logger = logging.getLogger(__name__)

RankKey = Callable[[TrackedObject], Any]


def rank_by_size(obj: TrackedObject) -> float:
    """Default ranking: biggest plant first."""
    return obj.size


class ObjectRegistry:
    """Registered objects and their lifecycle bookkeeping.

    Usage:
        registry = ObjectRegistry()
        object_id = registry.register(detection)
        registry.mark_matched(object_id, next_detection)
        registry.mark_missed(object_id)
        for object_id in registry.expired(max_disappeared=5):
            registry.deregister(object_id)
    """

    def __init__(self, rank_key: Optional[RankKey] = None, first_id: int = 1):
        self.rank_key = rank_key or rank_by_size
        self._objects: Dict[int, TrackedObject] = {}
        self._ranked_ids: List[int] = []
        self._next_id = first_id

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def register(self, detection: Detection) -> int:
        """Start tracking a detection under the next free ID."""
        x, y, z = (float(v) for v in detection.position[:3])
        logger.info("Tracking (x,y,z,size) = (%.2f,%.2f,%.2f,%.2f)", x, y, z, detection.size)

        object_id = self._next_id
        self._next_id += 1

        obj = TrackedObject(
            object_id=object_id,
            position=detection.position.copy(),
            size=detection.size,
            disappeared_count=0,
            match_streak=1,
            claimed=False,
        )
        self._objects[object_id] = obj
        self._insert_ranked(object_id)

        return object_id

    def deregister(self, object_id: int):
        """Stop tracking an object. Unknown IDs raise KeyError."""
        del self._objects[object_id]
        self._ranked_ids.remove(object_id)
        logger.debug("Tracker -- deregistered object %d", object_id)

    def mark_matched(self, object_id: int, detection: Detection):
        """Refresh an object from the detection it was matched to."""
        obj = self._objects[object_id]
        old_rank = self.rank_key(obj)

        obj.position = detection.position.copy()
        obj.size = detection.size
        obj.match_streak += 1

        self._rerank(object_id, old_rank)

    def mark_missed(self, object_id: int):
        obj = self._objects[object_id]
        old_rank = self.rank_key(obj)

        obj.disappeared_count += 1
        obj.match_streak = 0

        self._rerank(object_id, old_rank)

    def claim(self, object_id: int):
        """Flag an object as handed out. There is no way back."""
        obj = self._objects[object_id]
        old_rank = self.rank_key(obj)

        obj.claimed = True

        self._rerank(object_id, old_rank)

    def expired(self, max_disappeared: int) -> List[int]:
        """IDs missing for more than max_disappeared frames."""
        return [
            object_id for object_id, obj in self._objects.items()
            if obj.disappeared_count > max_disappeared
        ]

    def clear(self):
        """Drop every object. IDs handed out so far are not reused."""
        self._objects = {}
        self._ranked_ids = []

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, object_id: int) -> Optional[TrackedObject]:
        return self._objects.get(object_id)

    def ids(self) -> List[int]:
        """IDs in ranked order, best first."""
        return list(self._ranked_ids)

    def objects(self) -> List[TrackedObject]:
        """Objects in ranked order, best first."""
        return [self._objects[object_id] for object_id in self._ranked_ids]

    def items(self) -> Iterator[Tuple[int, TrackedObject]]:
        """(id, object) pairs in registration order."""
        return iter(list(self._objects.items()))

    def __contains__(self, object_id: int) -> bool:
        return object_id in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _rerank(self, object_id: int, old_rank):
        """Move an object whose rank changed back into sorted position."""
        if self.rank_key(self._objects[object_id]) != old_rank:
            self._ranked_ids.remove(object_id)
            self._insert_ranked(object_id)

    def _insert_ranked(self, object_id: int):
        """Insertion sort step: place after every strictly better object."""
        rank = self.rank_key(self._objects[object_id])
        idx = 0
        while idx < len(self._ranked_ids) and self.rank_key(self._objects[self._ranked_ids[idx]]) > rank:
            idx += 1
        self._ranked_ids.insert(idx, object_id)
