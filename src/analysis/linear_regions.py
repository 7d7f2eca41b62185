"""
Linear scaling regions of a curve y(x)

used to read off the slope of a scaling law (e.g. a fractal dimension from
a log-log plot) when the curve is only linear over part of its range.
boundaries are 0-based indices into x; a region [lrs[i], lrs[i+1]]
includes both ends.
"""

import warnings
from typing import Optional, Tuple

import numpy as np

from compute.errors import ArgumentError, DimensionMismatch, NumericError

METHODS = ('sequential', 'overlap')
DEFAULT_DXI = {'sequential': 1, 'overlap': 3}


class LinearRegionWarning(UserWarning):
    """the detected linear region may be too short to trust its slope"""


def linreg(x, y) -> Tuple[float, float]:
    """
    least squares fit of y = a + b*x, returns (a, b)

    b = cov(x, y)/var(x), a = mean(y) - b*mean(x); the n vs n-1
    normalization cancels in the ratio
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.shape != y.shape:
        raise DimensionMismatch(f"x has size {x.shape} and y has size {y.shape}, "
                                f"but these must be the same size")
    if x.size < 2:
        raise ArgumentError(f"linear regression needs at least 2 points, got {x.size}")
    if np.ptp(x) == 0:
        raise NumericError("x has zero variance, the slope is undefined")

    mx, my = x.mean(), y.mean()
    dx = x - mx
    b = np.dot(dx, y - my) / np.dot(dx, dx)
    a = my - b * mx
    return float(a), float(b)


def slope(x, y) -> float:
    return linreg(x, y)[1]


def _as_curve(x, y) -> Tuple[np.ndarray, np.ndarray]:
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.ndim != 1 or y.ndim != 1:
        raise ArgumentError("x and y must be one dimensional")
    if x.shape != y.shape:
        raise DimensionMismatch(f"x has size {x.shape} and y has size {y.shape}, "
                                f"but these must be the same size")
    return x, y


def _is_continuation(tang: float, prevtang: float, tol: float) -> bool:
    return abs(tang - prevtang) <= tol * abs(prevtang)


def _refit(x: np.ndarray, y: np.ndarray, lrs) -> Tuple[np.ndarray, np.ndarray]:
    """slope of every merged region, fitted over its full span"""
    tangents = [slope(x[lo:hi + 1], y[lo:hi + 1]) for lo, hi in zip(lrs[:-1], lrs[1:])]
    return np.asarray(lrs, dtype=int), np.asarray(tangents, dtype=np.float64)


def linear_regions(x, y, method: str = 'sequential', dxi: Optional[int] = None,
                   tol: float = 0.25) -> Tuple[np.ndarray, np.ndarray]:
    """
    identify the regions where the curve y(x) is linear

    method='sequential' scans x every dxi indices (x[0..dxi-1], x[dxi-1..2dxi-1],
    ...). when the slope of a window is within relative tolerance tol of the
    slope that opened the current region, the window extends that region,
    otherwise a new region starts. method='overlap' does the same with
    overlapping windows of width dxi centred on every index.

    returns (lrs, tangents): region boundaries lrs (first 0, last len(x)-1)
    and the slope of each region, re-fitted over the whole region
    """
    x, y = _as_curve(x, y)
    if method not in METHODS:
        raise ArgumentError(f"invalid method '{method}', must be one of {METHODS}")
    if tol < 0:
        raise ArgumentError(f"tol must be >= 0, got {tol}")
    dxi = DEFAULT_DXI[method] if dxi is None else dxi
    if int(dxi) != dxi or dxi < 1:
        raise ArgumentError(f"dxi must be a positive integer, got {dxi}")
    dxi = int(dxi)

    if method == 'sequential':
        return _linear_regions_sequential(x, y, dxi, tol)
    return _linear_regions_overlap(x, y, dxi, tol)


def _linear_regions_sequential(x, y, dxi, tol):
    n = len(x)
    if n < max(2 * dxi, 2):
        raise ArgumentError(f"need at least {max(2 * dxi, 2)} points for dxi={dxi}, got {n}")
    maxit = n // dxi

    first = max(dxi, 2)
    prevtang = slope(x[:first], y[:first])
    lrs = [0]  # first region always starts at 0

    for k in range(1, maxit):
        lo, hi = k * dxi - 1, (k + 1) * dxi
        tang = slope(x[lo:hi], y[lo:hi])
        if _is_continuation(tang, prevtang, tol):
            continue

        # start of a new region, which is also the end of the previous one
        lrs.append(lo)
        prevtang = tang

    lrs.append(n - 1)
    return _refit(x, y, lrs)


def _linear_regions_overlap(x, y, dxi, tol):
    n = len(x)
    if dxi < 2:
        raise ArgumentError(f"overlapping windows need dxi >= 2, got {dxi}")
    if n < dxi:
        raise ArgumentError(f"need at least {dxi} points for dxi={dxi}, got {n}")
    half = dxi // 2

    def window_slope(center):
        lo = center - half
        return slope(x[lo:lo + dxi], y[lo:lo + dxi])

    prevtang = window_slope(half)
    lrs = [0]

    for center in range(half + 1, n - dxi + half + 1):
        tang = window_slope(center)
        if _is_continuation(tang, prevtang, tol):
            continue
        if center < n - 1:
            lrs.append(center)
        prevtang = tang

    lrs.append(n - 1)
    return _refit(x, y, lrs)


def linear_region(x, y, dxi: Optional[int] = None, tol: float = 0.2,
                  ignore_saturation: bool = True,
                  method: str = 'sequential') -> Tuple[Tuple[int, int], float]:
    """
    the largest linear region of y(x) and its slope, as ((start, end), slope)

    dxi, tol and method are passed on to linear_regions. with
    ignore_saturation the flat tail in which y(x) typically saturates is cut
    off before the search.
    """
    x, y = _as_curve(x, y)

    if ignore_saturation:
        changes = np.nonzero(y[1:] != y[:-1])[0]
        if changes.size:
            last = changes[-1] + 1
            x, y = x[:last + 1], y[:last + 1]

    lrs, tangents = linear_regions(x, y, method=method, dxi=dxi, tol=tol)

    # biggest linear region, first one on ties
    j = int(np.argmax(np.diff(lrs)))
    if lrs[j + 1] - lrs[j] <= len(x) // 3:
        warnings.warn("found linear region spans less than a 3rd of the available x-axis "
                      "and might imply inaccurate slope or insufficient data. "
                      "recommended: plot x vs y", LinearRegionWarning, stacklevel=2)
    return (int(lrs[j]), int(lrs[j + 1])), float(tangents[j])
