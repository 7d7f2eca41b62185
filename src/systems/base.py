"""
Base classes for dynamical systems with tangent dynamics
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

import numpy as np


@dataclass
class SystemConfig:
    name: str
    params: Dict[str, float]
    u0: Sequence[float] = field(default_factory=list)


class DynamicalSystem(ABC):
    """a system rule f(u, t) together with its jacobian Df(u, t)"""

    is_discrete: bool = False

    def __init__(self, config: SystemConfig):
        self.config = config
        self._state = np.array(config.u0, dtype=np.float64)
        if self._state.ndim != 1 or self._state.size == 0:
            raise ValueError(f"{config.name}: initial state must be a non-empty vector")

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def params(self) -> Dict[str, float]:
        return self.config.params

    @property
    def dimension(self) -> int:
        return self._state.size

    @property
    def state(self) -> np.ndarray:
        return self._state.copy()

    @state.setter
    def state(self, u: Sequence[float]):
        u = np.asarray(u, dtype=np.float64)
        if u.shape != self._state.shape:
            raise ValueError(f"{self.name}: state must have shape {self._state.shape}, got {u.shape}")
        self._state = u.copy()

    @property
    def t0(self):
        return 0 if self.is_discrete else 0.0

    @abstractmethod
    def rule(self, u: np.ndarray, t) -> np.ndarray:
        """Return the next state (maps) or the time derivative (flows) at u"""

    @abstractmethod
    def jacobian(self, u: np.ndarray, t) -> np.ndarray:
        """Return the D x D jacobian of `rule` at u"""

    @abstractmethod
    def tangent_integrator(self, w0: np.ndarray, u0: Optional[Sequence[float]] = None, **kwargs):
        """Build an integrator evolving u0 together with the deviation vectors w0"""

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{type(self).__name__}({params}, D={self.dimension})"


class DiscreteSystem(DynamicalSystem):
    """iterated map u_{n+1} = f(u_n, n)"""

    is_discrete = True

    # optional fused numba kernel: kernel(u, n_steps, *kernel_args()) advancing
    # the D x (k+1) extended state in place
    kernel = None

    def kernel_args(self) -> tuple:
        return ()

    def tangent_integrator(self, w0, u0=None, **kwargs):
        from compute.tangent import DiscreteTangentIntegrator
        u0 = self.state if u0 is None else u0
        return DiscreteTangentIntegrator(self, u0, w0, t0=self.t0, **kwargs)


class ContinuousSystem(DynamicalSystem):
    """flow du/dt = f(u, t)"""

    is_discrete = False

    def tangent_integrator(self, w0, u0=None, **kwargs):
        from compute.tangent import ContinuousTangentIntegrator
        u0 = self.state if u0 is None else u0
        return ContinuousTangentIntegrator(self, u0, w0, t0=self.t0, **kwargs)
