"""
Chaos detection and scaling-region analysis
"""

from .gali import (
    gali, gali_from_integrator, GaliConfig, GaliResult, GaliStatus, GaliTracker,
    orthonormal, normalize_deviations, singular_values,
)

# scaling regions of log-log curves
from .linear_regions import linreg, slope, linear_regions, linear_region, LinearRegionWarning
from .boxsizes import estimate_boxsizes, minimum_pairwise_distance

from compute.errors import ArgumentError, DimensionMismatch, RangeError, NumericError

__all__ = [
    'gali', 'gali_from_integrator', 'GaliConfig', 'GaliResult', 'GaliStatus', 'GaliTracker',
    'orthonormal', 'normalize_deviations', 'singular_values',
    'linreg', 'slope', 'linear_regions', 'linear_region', 'LinearRegionWarning',
    'estimate_boxsizes', 'minimum_pairwise_distance',
    'ArgumentError', 'DimensionMismatch', 'RangeError', 'NumericError',
]
