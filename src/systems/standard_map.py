"""
Chirikov standard map implementation
"""

import math

import numpy as np

from compute.kernels import MapKernels
from .base import DiscreteSystem, SystemConfig


class StandardMap(DiscreteSystem):
    """
    area preserving map on the torus, state (theta, p):

        p'     = p + k sin(theta)      (mod 2pi)
        theta' = theta + p'            (mod 2pi)

    mostly regular for small k, globally chaotic for k >> 1
    """

    kernel = staticmethod(MapKernels.standard_map_tangent_kernel)

    def __init__(self, k: float = 1.0, u0=(0.001245, 0.00875)):
        config = SystemConfig(
            name="Standard",
            params={'k': k},
            u0=list(u0),
        )
        super().__init__(config)

    def kernel_args(self) -> tuple:
        return (float(self.params['k']),)

    def rule(self, u, t=0):
        k = self.params['k']
        theta, p = u
        p_new = p + k * math.sin(theta)
        return np.array([(theta + p_new) % (2 * math.pi), p_new % (2 * math.pi)])

    def jacobian(self, u, t=0):
        kc = self.params['k'] * math.cos(u[0])
        return np.array([[1.0 + kc, 1.0],
                         [kc, 1.0]])
