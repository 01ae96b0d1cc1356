"""Greedy frame-to-frame assignment.

Given the distance matrix between tracked objects (rows) and new detections
(cols):

                 __  detections --->  __
        objects | D_1,1 . . . . . . D_1,n|
           |    |  .       .             |
           |    |  .           .         |
           V    | D_m,1             D_m,n|
                |__                    __|

1. Sort each row so its closest detection comes first
2. Sort the rows by that closest distance
3. Walk the rows in order; each takes its closest detection that is still
   free and strictly inside the tolerance, otherwise it is a miss
4. Detections nobody took are new objects

This is not a globally optimal assignment. A detection close to two objects
goes to whichever row is visited first, which is not necessarily the closer
of the two. For a handful of slowly drifting plants per frame that is good
enough and it keeps the solver O(m*n log n).
"""

from dataclasses import dataclass, field
from typing import List, Tuple
import numpy as np


@dataclass
class Assignment:
    """Correspondence between tracked objects and detections for one frame."""
    matches: List[Tuple[int, int]] = field(default_factory=list)  # (row, col)
    unmatched_rows: List[int] = field(default_factory=list)
    unmatched_cols: List[int] = field(default_factory=list)


def rank_columns(dist_matrix: np.ndarray) -> np.ndarray:
    """Column indices of each row ordered by ascending distance.

    Stable, so equal distances keep their original column order.
    """
    return np.argsort(dist_matrix, axis=1, kind="stable")


def rank_rows(dist_matrix: np.ndarray, col_order: np.ndarray) -> np.ndarray:
    """Row indices ordered by each row's closest distance (stable)."""
    rows = np.arange(dist_matrix.shape[0])
    best = dist_matrix[rows, col_order[:, 0]]
    return np.argsort(best, kind="stable")


def greedy_assignment(dist_matrix: np.ndarray, distance_tolerance: float) -> Assignment:
    """Match rows to columns greedily, closest rows first.

    Args:
        dist_matrix: (m, n) distances, rows = tracked objects
        distance_tolerance: A pair only matches if its distance is strictly
            below this value

    Returns:
        Assignment with matches in the order they were made
    """
    dist_matrix = np.asarray(dist_matrix, dtype=float)
    m, n = dist_matrix.shape

    if m == 0 or n == 0:
        return Assignment(unmatched_rows=list(range(m)), unmatched_cols=list(range(n)))

    col_order = rank_columns(dist_matrix)
    row_order = rank_rows(dist_matrix, col_order)

    result = Assignment()
    used_cols = set()

    for row in row_order:
        row = int(row)
        for col in col_order[row]:
            col = int(col)
            if col not in used_cols and dist_matrix[row, col] < distance_tolerance:
                used_cols.add(col)
                result.matches.append((row, col))
                break
        else:
            result.unmatched_rows.append(row)

    # Any row's ranking is a permutation of all columns
    result.unmatched_cols = [int(c) for c in col_order[0] if int(c) not in used_cols]

    return result
