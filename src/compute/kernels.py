"""
Fused map + tangent kernels compiled with numba

Each kernel advances a D x (k+1) extended state in place: column 0 is
iterated under the map, columns 1..k are multiplied by the jacobian taken
at the pre-image point.
"""

import math

import numpy as np
from numba import njit

TWO_PI = 2.0 * math.pi


class MapKernels:
    """fused kernel collection for the built-in maps"""

    @staticmethod
    @njit
    def henon_tangent_kernel(u, num_steps, a, b):
        n_cols = u.shape[1]

        for step in range(num_steps):
            x, y = u[0, 0], u[1, 0]

            # Henon jacobian at (x, y)
            j11, j12, j21, j22 = -2.0 * a * x, 1.0, b, 0.0

            u[0, 0] = 1.0 - a * x * x + y
            u[1, 0] = b * x

            for col in range(1, n_cols):
                dx, dy = u[0, col], u[1, col]
                u[0, col] = j11 * dx + j12 * dy
                u[1, col] = j21 * dx + j22 * dy

    @staticmethod
    @njit
    def standard_map_tangent_kernel(u, num_steps, k):
        n_cols = u.shape[1]

        for step in range(num_steps):
            theta, p = u[0, 0], u[1, 0]
            kc = k * math.cos(theta)

            # (theta, p) -> (theta + p', p') with p' = p + k sin(theta)
            j11, j12, j21, j22 = 1.0 + kc, 1.0, kc, 1.0

            p_new = p + k * math.sin(theta)
            u[0, 0] = (theta + p_new) % TWO_PI
            u[1, 0] = p_new % TWO_PI

            for col in range(1, n_cols):
                dtheta, dp = u[0, col], u[1, col]
                u[0, col] = j11 * dtheta + j12 * dp
                u[1, col] = j21 * dtheta + j22 * dp


def generic_map_step(system, u: np.ndarray, t: int, num_steps: int) -> None:
    """python fallback for maps without a compiled kernel"""
    for step in range(num_steps):
        x = u[:, 0].copy()
        J = np.asarray(system.jacobian(x, t + step), dtype=np.float64)
        u[:, 0] = system.rule(x, t + step)
        u[:, 1:] = J @ u[:, 1:]
