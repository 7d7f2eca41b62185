"""
Hénon map implementation
"""

import numpy as np

from compute.kernels import MapKernels
from .base import DiscreteSystem, SystemConfig


class HenonMap(DiscreteSystem):
    kernel = staticmethod(MapKernels.henon_tangent_kernel)

    def __init__(self, a: float = 1.4, b: float = 0.3, u0=(0.0, 0.0)):
        config = SystemConfig(
            name="Hénon",
            params={'a': a, 'b': b},
            u0=list(u0),
        )
        super().__init__(config)

    def kernel_args(self) -> tuple:
        return float(self.params['a']), float(self.params['b'])

    def rule(self, u, t=0):
        """Evolve a single point under Hénon map"""
        a, b = self.params['a'], self.params['b']
        x, y = u
        return np.array([1.0 - a * x * x + y, b * x])

    def jacobian(self, u, t=0):
        """Return Jacobian matrix for Hénon map"""
        a, b = self.params['a'], self.params['b']
        return np.array([[-2.0 * a * u[0], 1.0],
                         [b, 0.0]])
