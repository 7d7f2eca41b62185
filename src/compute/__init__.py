"""
Tangent integration, extended-state storage and neighbour search
"""

from compute.state import ExtendedState, BufferState, FrozenState, make_state
from compute.kernels import MapKernels
from compute.tangent import (
    IntegrationConfig, TangentIntegrator,
    DiscreteTangentIntegrator, ContinuousTangentIntegrator,
)
from compute.neighbors import Theiler, knn, build_tree

__all__ = [
    'ExtendedState', 'BufferState', 'FrozenState', 'make_state', 'MapKernels',
    'IntegrationConfig', 'TangentIntegrator', 'DiscreteTangentIntegrator',
    'ContinuousTangentIntegrator', 'Theiler', 'knn', 'build_tree',
]
