"""Detection interface for plant detection.

Note: Detection dataclass is defined in tracking/interface.py.
This module re-exports it for convenience, but the canonical definition
is in tracking since detections flow into the tracker.
"""

from abc import ABC, abstractmethod
from typing import List
import numpy as np

# Re-export Detection from tracking (single source of truth)
from ..tracking.interface import Detection


class Detector(ABC):
    """Abstract base class for plant detectors.

    Implementations threshold, filter and blob-extract a camera frame, then
    project each blob onto the ground plane.

    Output flows to tracker:
        detector.detect(frame) -> List[Detection] -> tracker.update(detections)

    Positions must be finite. The tracker does not check them, and a NaN
    coordinate silently breaks matching for the whole frame.
    """

    @abstractmethod
    def detect(self, frame: np.ndarray) -> List[Detection]:
        """Detect plants in a frame.

        Args:
            frame: Image as numpy array (H, W, 3), uint8

        Returns:
            One Detection per plant, in any order, possibly empty.
        """
        pass
