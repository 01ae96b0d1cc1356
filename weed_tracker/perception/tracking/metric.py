"""Distance between tracked positions.

Only (x, y, z) take part unless a size_weight is given.
"""

from typing import Sequence, Union
import numpy as np

from .interface import Detection, TrackedObject

Positioned = Union[Detection, TrackedObject]


def euclidean_distance(a: Positioned, b: Positioned, size_weight: float = 0.0) -> float:
    """Euclidean distance between two observations.

    Args:
        a, b: Anything with a 3D `position` and a scalar `size`
        size_weight: Scale applied to the size difference before it is
            added as a fourth coordinate. 0 excludes size.
    """
    delta = np.asarray(a.position, dtype=float) - np.asarray(b.position, dtype=float)
    sq = float(np.dot(delta, delta))
    if size_weight:
        d_size = size_weight * (float(a.size) - float(b.size))
        sq += d_size * d_size
    return float(np.sqrt(sq))


def distance_matrix(
    objects: Sequence[Positioned],
    detections: Sequence[Positioned],
    size_weight: float = 0.0,
) -> np.ndarray:
    """Pairwise distances, rows = objects, cols = detections.

    Returns:
        (m, n) float array. Empty inputs give a (m, 0) or (0, n) array.
    """
    m, n = len(objects), len(detections)
    if m == 0 or n == 0:
        return np.zeros((m, n))

    obj_pos = np.stack([np.asarray(o.position, dtype=float) for o in objects])
    det_pos = np.stack([np.asarray(d.position, dtype=float) for d in detections])

    diff = obj_pos[:, None, :] - det_pos[None, :, :]
    sq = np.einsum("ijk,ijk->ij", diff, diff)

    if size_weight:
        obj_size = np.array([o.size for o in objects], dtype=float)
        det_size = np.array([d.size for d in detections], dtype=float)
        d_size = size_weight * (obj_size[:, None] - det_size[None, :])
        sq = sq + d_size * d_size

    return np.sqrt(sq)
