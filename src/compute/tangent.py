"""
Tangent integrators: evolve a trajectory together with its deviation vectors
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from scipy import integrate

from compute.errors import ArgumentError
from compute.kernels import generic_map_step
from compute.state import ExtendedState, make_state

# scipy OdeSolver classes usable for continuous flows
ODE_METHODS = {
    'RK23': integrate.RK23,
    'RK45': integrate.RK45,
    'DOP853': integrate.DOP853,
    'Radau': integrate.Radau,
    'BDF': integrate.BDF,
    'LSODA': integrate.LSODA,
}


@dataclass
class IntegrationConfig:
    """solver settings for continuous tangent integration"""
    method: str = 'DOP853'
    rtol: float = 1e-6
    atol: float = 1e-6
    max_step: float = np.inf

    def __post_init__(self):
        # yaml reads exponent-only floats such as 1e-9 as strings
        self.rtol = float(self.rtol)
        self.atol = float(self.atol)
        self.max_step = float(self.max_step)
        if self.method not in ODE_METHODS:
            raise ArgumentError(f"invalid integration method '{self.method}', must be one of {set(ODE_METHODS)}")
        if self.rtol <= 0 or self.atol <= 0:
            raise ArgumentError("rtol and atol must be positive")
        if not self.max_step > 0:
            raise ArgumentError("max_step must be positive")


def build_extended_state(u0: Sequence[float], w0: np.ndarray, dimension: int) -> np.ndarray:
    """stack u0 and the columns of w0 into a D x (k+1) matrix"""
    u0 = np.asarray(u0, dtype=np.float64)
    w0 = np.asarray(w0, dtype=np.float64)
    if u0.shape != (dimension,):
        raise ArgumentError(f"u0 must have shape {(dimension,)}, got {u0.shape}")
    if w0.ndim != 2 or w0.shape[0] != dimension or w0.shape[1] < 1:
        raise ArgumentError(f"w0 must have shape ({dimension}, k) with k >= 1, got {w0.shape}")
    return np.column_stack((u0, w0))


class TangentIntegrator:
    """shared bookkeeping for discrete and continuous tangent integrators"""

    def __init__(self, system, u0, w0, t0=0, state_type: str = 'buffer'):
        self.system = system
        self.state_type = state_type
        self.t0 = t0
        self.t = t0
        self.state: ExtendedState = make_state(
            build_extended_state(u0, w0, system.dimension), state_type
        )
        self._modified = True

    @property
    def u(self) -> np.ndarray:
        return self.state.data

    @property
    def k(self) -> int:
        return self.state.num_deviation_vectors()

    def u_modified(self, modified: bool = True) -> None:
        """flag that u was changed from outside the integrator"""
        self._modified = modified

    def reinit(self, u0: Sequence[float], w0: Optional[np.ndarray] = None, t0=None) -> None:
        """restart from a new initial condition, keeping the same settings"""
        w0 = self.state.deviations() if w0 is None else w0
        self.state = make_state(
            build_extended_state(u0, w0, self.system.dimension), self.state_type
        )
        self.t = self.t0 if t0 is None else t0
        self._modified = True

    def step(self, dt) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.system.name}, t={self.t}, k={self.k})"


class DiscreteTangentIntegrator(TangentIntegrator):
    """iterates a map and its jacobian; step(dt) applies int(dt) iterations"""

    def step(self, dt=1) -> None:
        num_steps = int(dt)
        if num_steps < 1:
            raise ArgumentError(f"discrete systems step by whole iterations, got dt={dt}")

        work = np.array(self.u, dtype=np.float64)
        kernel = self.system.kernel
        if kernel is not None:
            kernel(work, num_steps, *self.system.kernel_args())
        else:
            generic_map_step(self.system, work, self.t, num_steps)

        self.state.assign(work)
        self.t += num_steps
        self._modified = False


class ContinuousTangentIntegrator(TangentIntegrator):
    """
    integrates du/dt = f(u, t) and dW/dt = Df(u, t) W with a scipy OdeSolver

    the solver is kept alive between calls to step() so that its adaptive
    step size carries over; it is rebuilt whenever u_modified() was called.
    step(dt) takes whole solver steps until t >= t_start + dt, so the time
    reached is only approximately a multiple of dt.
    """

    def __init__(self, system, u0, w0, t0=0.0, config: Optional[IntegrationConfig] = None,
                 state_type: str = 'buffer'):
        super().__init__(system, u0, w0, t0=float(t0), state_type=state_type)
        self.config = config if config is not None else IntegrationConfig()
        self._solver = None

    def _rhs(self, t, y):
        U = y.reshape(self.u.shape)
        x = U[:, 0]
        out = np.empty_like(U)
        out[:, 0] = self.system.rule(x, t)
        out[:, 1:] = np.asarray(self.system.jacobian(x, t), dtype=np.float64) @ U[:, 1:]
        return out.ravel()

    def _build_solver(self):
        solver_cls = ODE_METHODS[self.config.method]
        self._solver = solver_cls(
            self._rhs, self.t, np.array(self.u, dtype=np.float64).ravel(), np.inf,
            rtol=self.config.rtol, atol=self.config.atol, max_step=self.config.max_step,
        )

    def step(self, dt=1.0) -> None:
        if not dt > 0:
            raise ArgumentError(f"dt must be positive, got {dt}")
        if self._solver is None or self._modified:
            self._build_solver()
            self._modified = False

        target = self.t + dt
        while self._solver.t < target:
            message = self._solver.step()
            if self._solver.status == 'failed':
                raise RuntimeError(f"{self.system.name}: integration failed at t={self._solver.t}: {message}")

        self.t = float(self._solver.t)
        self.state.assign(self._solver.y.reshape(self.u.shape))

    def reinit(self, u0, w0=None, t0=None) -> None:
        super().reinit(u0, w0, t0)
        self.t = float(self.t)
        self._solver = None
