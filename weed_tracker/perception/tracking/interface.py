"""Tracker interface for plant identity persistence.

Design Philosophy:
- Detector outputs: plant blobs as 3D positions + size, one list per frame
- Tracker outputs: persistent integer IDs + per-identity bookkeeping
- Actuator receives: one stabilized target at a time, each exactly once

This separation allows:
1. Detector to focus purely on "where are the plants?" (segmentation)
2. Tracker to focus on "which one is this?" (association)
3. Target selection to focus on "what do we uproot next?"
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import List, Optional
import numpy as np


@dataclass
class Detection:
    """Single plant observation from the detector.

    This is the OUTPUT of the detector, INPUT to the tracker.
    """
    position: np.ndarray      # 3D position in the ground frame [x, y, z]
    size: float = 0.0         # Blob size, same units as position

    def __post_init__(self):
        if not isinstance(self.position, np.ndarray):
            self.position = np.asarray(self.position, dtype=float)

    @classmethod
    def from_xyz(cls, x: float, y: float, z: float, size: float = 0.0) -> "Detection":
        return cls(position=np.array([x, y, z], dtype=float), size=size)


@dataclass
class TrackedObject:
    """Plant with persistent identity.

    This is the OUTPUT of the tracker.
    """
    object_id: int            # Never reused, even after deregistration

    # Last matched observation
    position: np.ndarray
    size: float = 0.0

    # Lifecycle bookkeeping
    disappeared_count: int = 0   # Frames without a match
    match_streak: int = 1        # Consecutive matched frames, 0 after a miss
    claimed: bool = False        # Already handed out as a target ("uprooted")

    def __post_init__(self):
        if not isinstance(self.position, np.ndarray):
            self.position = np.asarray(self.position, dtype=float)

    def snapshot(self) -> "TrackedObject":
        """Copy that callers may keep or mutate without touching the registry."""
        return replace(self, position=self.position.copy())


@dataclass
class UpdateStats:
    """Bookkeeping for a single update() call."""
    n_detections: int = 0     # Input detections this frame
    n_matched: int = 0        # Detections matched to existing objects
    n_new: int = 0            # New identities registered
    n_missed: int = 0         # Existing identities without a match
    n_removed: int = 0        # Identities deregistered during cleanup
    removed_ids: List[int] = field(default_factory=list)


class TrackerInterface(ABC):
    """Abstract base class for plant trackers.

    Implementations must handle:
    1. Associating detections to existing objects (data association)
    2. Registering new objects for unmatched detections
    3. Managing object lifecycle (miss counting, deletion)
    4. Handing out each stabilized object as a target at most once
    """

    @abstractmethod
    def update(self, detections: List[Detection]) -> None:
        """Process one frame of detections and update the registry.

        Args:
            detections: All detections for the frame, possibly empty
        """
        pass

    @abstractmethod
    def active_objects(self) -> List[TrackedObject]:
        """All tracked objects, best ranked first."""
        pass

    @abstractmethod
    def count(self) -> int:
        pass

    @abstractmethod
    def top(self) -> Optional[TrackedObject]:
        """Best ranked object, or None when nothing is tracked."""
        pass

    @abstractmethod
    def top_valid(self) -> Optional[TrackedObject]:
        """Next stable, unclaimed object. Claims it before returning."""
        pass

    @abstractmethod
    def reset(self):
        """Forget every tracked object."""
        pass

