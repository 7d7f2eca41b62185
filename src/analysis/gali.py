"""
Generalized Alignment Index (GALI_k) for chaos detection

GALI_k is the volume spanned by k unit deviation vectors evolved with the
tangent dynamics of an orbit. The asymptotic behaviour tells chaotic and
regular orbits apart:

- chaotic orbit:  GALI_k(t) ~ exp[-sum_{j=2..k} (l_1 - l_j) t], with l_j the
  lyapunov exponents, so it collapses exponentially fast
- regular orbit on a d-dimensional torus (1 <= d <= D/2):
      const.             if 2 <= k <= d
      t^-(k - d)         if d < k <= D - d
      t^-(2k - D)        if D - d < k <= D

traditionally an orbit whose GALI_k falls below `threshold` before `tmax`
is classified as chaotic, otherwise as regular.

the volume is computed as the product of the singular values of the matrix
whose columns are the (renormalized) deviation vectors, as in
Skokos et al., Lecture Notes in Physics 915, ch. 5 (2016), rather than
through the wedge product of the original paper,
Skokos et al., Physica D 231, pp 30-54 (2007).
"""

from dataclasses import dataclass, asdict, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import yaml

from compute.errors import ArgumentError, NumericError
from compute.tangent import IntegrationConfig, TangentIntegrator

# Configuration
DEFAULT_THRESHOLD = 1e-12  # terminate once GALI_k drops below this
DEFAULT_DT = 1             # time between deviation vector normalizations


class GaliStatus(Enum):
    RUNNING = "running"
    CONVERGED = "converged"
    TIMED_OUT = "timed_out"


@dataclass
class GaliConfig:
    """configuration for a GALI_k computation"""
    threshold: float = DEFAULT_THRESHOLD
    dt: float = DEFAULT_DT  # approximate for continuous systems
    u0: Optional[Sequence[float]] = None  # defaults to the system state
    w0: Optional[Any] = None  # D x k initial deviation vectors, random orthonormal if None
    seed: Optional[int] = None  # seed for the random w0
    integration: IntegrationConfig = field(default_factory=IntegrationConfig)
    verbose: bool = False

    def __post_init__(self):
        if isinstance(self.integration, dict):
            self.integration = IntegrationConfig(**self.integration)
        # yaml reads exponent-only floats such as 1e-12 as strings
        self.threshold = float(self.threshold)
        self.dt = float(self.dt)
        if not self.threshold >= 0:
            raise ArgumentError(f"threshold must be >= 0, got {self.threshold}")
        if not self.dt > 0:
            raise ArgumentError(f"dt must be positive, got {self.dt}")

    def replace(self, **overrides) -> 'GaliConfig':
        unknown = set(overrides) - set(self.__dataclass_fields__)
        if unknown:
            raise ArgumentError(f"unknown gali options: {sorted(unknown)}")
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ('u0', 'w0'):
            if data[key] is not None:
                data[key] = np.asarray(data[key], dtype=float).tolist()
        data['integration']['max_step'] = float(data['integration']['max_step'])
        return data

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'GaliConfig':
        """load gali configuration from yaml file"""
        with open(yaml_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        return cls(**config)

    def to_yaml(self, yaml_path: str):
        """save gali configuration to yaml file"""
        with open(yaml_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)


@dataclass
class GaliResult:
    """
    GALI_k time series plus the reason the loop stopped

    unpacks as ``gali_values, times = result``
    """
    gali: np.ndarray
    t: np.ndarray
    status: GaliStatus
    threshold: float = DEFAULT_THRESHOLD

    def __iter__(self):
        return iter((self.gali, self.t))

    def __len__(self) -> int:
        return len(self.gali)

    @property
    def converged(self) -> bool:
        return self.status is GaliStatus.CONVERGED

    @property
    def is_chaotic(self) -> bool:
        return self.converged

    @property
    def is_regular(self) -> bool:
        return self.status is GaliStatus.TIMED_OUT

    @property
    def final_value(self) -> float:
        return float(self.gali[-1])


def orthonormal(dimension: int, k: int, seed: Optional[int] = None) -> np.ndarray:
    """k random orthonormal vectors in R^dimension, as the columns of a D x k matrix"""
    if k > dimension:
        raise ArgumentError(f"cannot build {k} orthonormal vectors in dimension {dimension}")
    rng = np.random.RandomState(seed)
    q, r = np.linalg.qr(rng.standard_normal((dimension, k)))
    # fix column signs so the distribution is uniform
    return q * np.sign(np.diag(r))


def normalize_deviations(integ: TangentIntegrator) -> np.ndarray:
    """
    rescale every deviation vector of integ to unit length

    the trajectory column is left untouched. mutable states are divided in
    place, frozen states get a freshly built block. the integrator is told
    that its state was modified. returns the norms before rescaling.
    """
    state = integ.state
    k = state.num_deviation_vectors()

    if state.is_mutable:
        norms = np.empty(k)
        for i in range(1, k + 1):
            column = state.get_column(i)
            norms[i - 1] = np.linalg.norm(column)
            _check_norm(norms[i - 1], i)
            column /= norms[i - 1]
    else:
        block = state.deviations()
        norms = np.linalg.norm(block, axis=0)
        for i, norm in enumerate(norms, start=1):
            _check_norm(norm, i)
        state.set_deviation_block(block / norms)

    integ.u_modified(True)
    return norms


def _check_norm(norm: float, i: int):
    if not np.isfinite(norm) or norm == 0.0:
        raise NumericError(f"deviation vector {i} has norm {norm}, cannot normalize")


def singular_values(u: np.ndarray, k: Optional[int] = None) -> np.ndarray:
    """all k singular values of the deviation block u[:, 1:k+1]"""
    u = np.asarray(u)
    k = u.shape[1] - 1 if k is None else k
    return np.linalg.svd(u[:, 1:k + 1], compute_uv=False)


class GaliTracker:
    """runs the GALI_k loop on a tangent integrator, one synchronization per advance()"""

    def __init__(self, integ: TangentIntegrator, tmax: float,
                 dt: float = DEFAULT_DT, threshold: float = DEFAULT_THRESHOLD,
                 verbose: bool = False):
        if integ.k < 2:
            raise ArgumentError(f"GALI_k needs k >= 2 deviation vectors, got {integ.k}")
        if tmax < 0:
            raise ArgumentError(f"tmax must be >= 0, got {tmax}")
        self.integ = integ
        self.tmax = tmax
        self.dt = dt
        self.threshold = threshold
        self.verbose = verbose
        self.reset()

    def reset(self):
        """reset the series to (t0, 1) at the integrator's current time"""
        self.t0 = self.integ.t
        self.times: List = [self.integ.t]
        self.values: List[float] = [1.0]
        self.status = GaliStatus.RUNNING

    @property
    def k(self) -> int:
        return self.integ.k

    @property
    def t_end(self):
        return self.t0 + self.tmax

    def should_continue(self) -> bool:
        """check the time limit; moves RUNNING to TIMED_OUT once tmax is reached"""
        if self.status is not GaliStatus.RUNNING:
            return False
        if self.integ.t >= self.t_end:
            self.status = GaliStatus.TIMED_OUT
            if self.verbose:
                print(f"  gali_{self.k}: reached t={self.integ.t} (value={self.values[-1]:.3e})")
            return False
        return True

    def advance(self) -> float:
        """step, renormalize, and record one GALI_k value"""
        self.integ.step(self.dt)
        normalize_deviations(self.integ)
        zs = singular_values(self.integ.u, self.k)
        value = float(np.prod(zs))

        self.values.append(value)
        self.times.append(self.integ.t)

        if value < self.threshold:
            self.status = GaliStatus.CONVERGED
            if self.verbose:
                print(f"  gali_{self.k}: below threshold {self.threshold:.1e} at t={self.integ.t}")
        return value

    def run(self) -> GaliResult:
        while self.should_continue():
            self.advance()
        return self.result()

    def result(self) -> GaliResult:
        return GaliResult(
            gali=np.array(self.values),
            t=np.array(self.times),
            status=self.status,
            threshold=self.threshold,
        )


def gali_from_integrator(integ: TangentIntegrator, tmax: float,
                         dt: float = DEFAULT_DT, threshold: float = DEFAULT_THRESHOLD,
                         verbose: bool = False) -> GaliResult:
    """
    GALI_k on an existing tangent integrator, k being its number of deviation vectors

    for loops over initial conditions build one integrator and reinit() it
    between calls instead of going through gali() every time
    """
    return GaliTracker(integ, tmax, dt=dt, threshold=threshold, verbose=verbose).run()


def gali(system, k: int, tmax: float, config: Optional[GaliConfig] = None, **kwargs) -> GaliResult:
    """
    compute GALI_k of the orbit of `system` up to time tmax

    options (see GaliConfig), either as keywords or through `config`:
        threshold = 1e-12 : stop as soon as GALI_k < threshold
        dt = 1            : time between normalizations (approximate for flows)
        u0                : initial state, defaults to system.state
        w0                : D x k initial deviation vectors, defaults to
                            k random orthonormal vectors
        seed              : seed for the random w0
        integration       : IntegrationConfig for continuous systems

    returns a GaliResult; ``gali_values, times = gali(...)`` works too.
    gali_values[0] == 1 and times[0] == t0 always.
    """
    if config is None:
        config = GaliConfig()
    if kwargs:
        config = config.replace(**kwargs)

    dimension = system.dimension
    if k < 2:
        raise ArgumentError(f"GALI_k needs k >= 2, got {k}")

    if config.w0 is None:
        w0 = orthonormal(dimension, k, seed=config.seed)
    else:
        w0 = np.asarray(config.w0, dtype=np.float64)
    if w0.shape != (dimension, k):
        raise ArgumentError(f"w0 does not have correct size! expected {(dimension, k)}, got {w0.shape}")

    u0 = system.state if config.u0 is None else config.u0

    if system.is_discrete:
        integ = system.tangent_integrator(w0, u0=u0)
    else:
        integ = system.tangent_integrator(w0, u0=u0, config=config.integration)

    if config.verbose:
        print(f"  gali_{k}: {system.name}, tmax={tmax}, dt={config.dt}, threshold={config.threshold:.1e}")

    return gali_from_integrator(integ, tmax, dt=config.dt, threshold=config.threshold,
                                verbose=config.verbose)
