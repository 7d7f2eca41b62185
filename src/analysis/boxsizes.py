"""
Automatic choice of box sizes for fractal dimension estimates
"""

import math
from typing import Tuple

import numpy as np

from compute.errors import ArgumentError, RangeError
from compute.neighbors import Theiler, build_tree, knn, metric_p


def _as_dataset(points) -> np.ndarray:
    A = np.asarray(points, dtype=np.float64)
    if A.ndim == 1:
        A = A[:, None]
    if A.ndim != 2 or A.shape[0] == 0:
        raise ArgumentError(f"points must be a non-empty (N, D) array, got shape {A.shape}")
    return A


def minimum_pairwise_distance(points, metric: str = 'euclidean',
                              theiler: int = 0) -> Tuple[float, Tuple[int, int]]:
    """
    minimum distance between any two points and the pair that attains it

    neighbours within the theiler window (|i - j| <= theiler) are ignored;
    theiler=0 only excludes the point itself. returns (inf, (-1, -1)) when
    no admissible pair exists.
    """
    A = _as_dataset(points)
    p = metric_p(metric)
    tree = build_tree(A)
    window = Theiler(theiler)

    min_d = np.inf
    min_pair = (-1, -1)
    for i in range(len(A)):
        inds, dists = knn(tree, A[i], 1, window(i), p=p)
        if len(inds) == 0:
            continue
        if dists[0] < min_d:
            min_d = float(dists[0])
            min_pair = (i, int(inds[0]))
    return min_d, min_pair


def estimate_boxsizes(points, k: int = 20, z: float = -1.0, w: float = 1.0,
                      base: float = math.e, metric: str = 'euclidean') -> np.ndarray:
    """
    k exponentially spaced sizes base ** linspace(lower + w, upper + z, k)

    lower = log_base(d_min) with d_min the minimum pairwise distance and
    upper = log_base(d_max) with d_max the length of the diagonal of the
    box containing the points. with the defaults w=1, z=-1 the sizes start
    a factor `base` above the smallest distance and stop a factor `base`
    below the largest one.
    """
    A = _as_dataset(points)
    if k < 1:
        raise ArgumentError(f"k must be >= 1, got {k}")
    if base <= 0 or base == 1:
        raise ArgumentError(f"base must be positive and != 1, got {base}")

    # diagonal of the bounding box, not the largest single-axis range
    max_d = float(np.linalg.norm(A.max(axis=0) - A.min(axis=0)))
    min_d, _ = minimum_pairwise_distance(A, metric=metric)

    with np.errstate(divide='ignore'):
        lower = np.log(min_d) / np.log(base)
        upper = np.log(max_d) / np.log(base)

    if min_d == 0:
        raise RangeError("boxsize estimation failed: the dataset contains repeated points, "
                         "so the minimum pairwise distance is 0. remove duplicates first.")
    if not lower < upper:
        raise RangeError("boxsize estimation failed: lower was found >= upper. "
                         "adjust keywords or provide a bigger dataset.")
    return float(base) ** np.linspace(lower + w, upper + z, k)
