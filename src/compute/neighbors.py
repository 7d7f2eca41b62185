"""
Nearest neighbour queries with a Theiler exclusion window
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np
from scipy.spatial import cKDTree

from compute.errors import ArgumentError

# minkowski p for each supported metric
METRICS = {
    'euclidean': 2.0,
    'chebyshev': np.inf,
    'cityblock': 1.0,
}


@dataclass
class Theiler:
    """excludes indices j with |i - j| <= w around query index i"""
    w: int = 0

    def __post_init__(self):
        if self.w < 0:
            raise ArgumentError(f"theiler window must be >= 0, got {self.w}")

    def __call__(self, i: int) -> Callable[[int], bool]:
        return lambda j: abs(j - i) <= self.w


def metric_p(metric: str) -> float:
    if metric not in METRICS:
        raise ArgumentError(f"invalid metric '{metric}', must be one of {set(METRICS)}")
    return METRICS[metric]


def build_tree(points: np.ndarray) -> cKDTree:
    return cKDTree(points)


def knn(tree: cKDTree, point: np.ndarray, n: int = 1,
        skip: Optional[Callable[[int], bool]] = None,
        p: float = 2.0) -> Tuple[np.ndarray, np.ndarray]:
    """
    n nearest neighbours of point in tree, ignoring indices for which skip(j) is true

    returns (indices, distances), sorted by distance; fewer than n entries
    come back only when the tree does not hold enough admissible points
    """
    total = tree.n
    num_query = n if skip is None else n + 1

    while True:
        num_query = min(num_query, total)
        dists, inds = tree.query(point, k=num_query, p=p)
        dists, inds = np.atleast_1d(dists), np.atleast_1d(inds)

        # missing neighbours are reported with index == tree.n
        mask = inds < total
        if skip is not None:
            mask &= np.array([not skip(int(j)) for j in inds], dtype=bool)

        if mask.sum() >= n or num_query >= total:
            return inds[mask][:n], dists[mask][:n]
        num_query *= 2
