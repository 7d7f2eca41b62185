import math

import numpy as np
import pytest

from systems import ContinuousSystem, DiscreteSystem, HenonMap, SystemConfig


class HarmonicOscillators(ContinuousSystem):
    """two uncoupled oscillators, state (x1, x2, p1, p2); every orbit is regular"""

    def __init__(self, w1=1.0, w2=math.sqrt(2.0), u0=(1.0, 0.5, 0.0, 0.3)):
        super().__init__(SystemConfig(name="oscillators", params={'w1': w1, 'w2': w2}, u0=list(u0)))

    def rule(self, u, t=0.0):
        w1, w2 = self.params['w1'], self.params['w2']
        x1, x2, p1, p2 = u
        return np.array([p1, p2, -w1 * w1 * x1, -w2 * w2 * x2])

    def jacobian(self, u, t=0.0):
        w1, w2 = self.params['w1'], self.params['w2']
        return np.array([
            [0.0, 0.0, 1.0, 0.0],
            [0.0, 0.0, 0.0, 1.0],
            [-w1 * w1, 0.0, 0.0, 0.0],
            [0.0, -w2 * w2, 0.0, 0.0],
        ])


class PythonHenon(HenonMap):
    """Hénon map stepped by the generic python loop instead of the numba kernel"""
    kernel = None


class LinearMap(DiscreteSystem):
    """u -> A u, with a fixed matrix A"""

    def __init__(self, A, u0):
        self.A = np.asarray(A, dtype=float)
        super().__init__(SystemConfig(name="linear", params={}, u0=list(u0)))

    def rule(self, u, t=0):
        return self.A @ u

    def jacobian(self, u, t=0):
        return self.A


@pytest.fixture
def oscillators():
    return HarmonicOscillators()


@pytest.fixture
def henon():
    return HenonMap()


@pytest.fixture
def python_henon():
    return PythonHenon()


@pytest.fixture
def linear_map():
    return LinearMap([[2.0, 0.0], [0.0, 0.5]], u0=[1.0, 1.0])
