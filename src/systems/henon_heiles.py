"""
Hénon-Heiles system implementation
"""

import numpy as np

from .base import ContinuousSystem, SystemConfig


class HenonHeiles(ContinuousSystem):
    """
    two degree of freedom hamiltonian, state (x, y, px, py):

        H = (px^2 + py^2)/2 + (x^2 + y^2)/2 + x^2 y - y^3/3

    orbits with energy below 1/6 stay bounded
    """

    def __init__(self, u0=(0.0, -0.25, 0.42081, 0.0)):
        config = SystemConfig(
            name="Hénon-Heiles",
            params={},
            u0=list(u0),
        )
        super().__init__(config)

    @staticmethod
    def energy(u) -> float:
        x, y, px, py = u
        return 0.5 * (px * px + py * py) + 0.5 * (x * x + y * y) + x * x * y - y ** 3 / 3.0

    def rule(self, u, t=0.0):
        x, y, px, py = u
        return np.array([px, py, -x - 2.0 * x * y, -y - x * x + y * y])

    def jacobian(self, u, t=0.0):
        x, y = u[0], u[1]
        return np.array([
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
            [-1.0 - 2.0 * y, -2.0 * x, 0.0, 0.0],
            [-2.0 * x, -1.0 + 2.0 * y, 0.0, 0.0],
        ])
