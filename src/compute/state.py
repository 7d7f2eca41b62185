"""
Extended state storage for tangent integrators

The extended state is a D x (k+1) matrix: column 0 holds the trajectory
point, columns 1..k hold the deviation vectors.
"""

from abc import ABC, abstractmethod

import numpy as np

from compute.errors import ArgumentError


class ExtendedState(ABC):
    """common interface over mutable and immutable extended states"""

    is_mutable: bool = True

    @property
    @abstractmethod
    def data(self) -> np.ndarray:
        """the full D x (k+1) matrix"""

    @abstractmethod
    def assign(self, u: np.ndarray) -> None:
        """replace the whole extended state with u"""

    @abstractmethod
    def set_deviation_block(self, block: np.ndarray) -> None:
        """replace columns 1..k with block (D x k)"""

    @property
    def shape(self):
        return self.data.shape

    def get_column(self, i: int) -> np.ndarray:
        return self.data[:, i]

    def trajectory(self) -> np.ndarray:
        return self.data[:, 0].copy()

    def deviations(self) -> np.ndarray:
        return self.data[:, 1:].copy()

    def num_deviation_vectors(self) -> int:
        return self.data.shape[1] - 1

    def _check_block(self, block: np.ndarray) -> np.ndarray:
        block = np.asarray(block, dtype=np.float64)
        expected = (self.data.shape[0], self.num_deviation_vectors())
        if block.shape != expected:
            raise ArgumentError(f"deviation block must have shape {expected}, got {block.shape}")
        return block


class BufferState(ExtendedState):
    """mutable buffer, updated in place"""

    is_mutable = True

    def __init__(self, u: np.ndarray):
        self._u = np.array(u, dtype=np.float64)

    @property
    def data(self) -> np.ndarray:
        return self._u

    def assign(self, u: np.ndarray) -> None:
        u = np.asarray(u, dtype=np.float64)
        if u.shape != self._u.shape:
            raise ArgumentError(f"extended state must have shape {self._u.shape}, got {u.shape}")
        self._u[...] = u

    def set_deviation_block(self, block: np.ndarray) -> None:
        self._u[:, 1:] = self._check_block(block)


class FrozenState(ExtendedState):
    """immutable block, every update builds a new read-only matrix"""

    is_mutable = False

    def __init__(self, u: np.ndarray):
        self._u = self._freeze(u)

    @staticmethod
    def _freeze(u: np.ndarray) -> np.ndarray:
        frozen = np.array(u, dtype=np.float64)
        frozen.setflags(write=False)
        return frozen

    @property
    def data(self) -> np.ndarray:
        return self._u

    def get_column(self, i: int) -> np.ndarray:
        return self._u[:, i].copy()

    def assign(self, u: np.ndarray) -> None:
        u = np.asarray(u, dtype=np.float64)
        if u.shape != self._u.shape:
            raise ArgumentError(f"extended state must have shape {self._u.shape}, got {u.shape}")
        self._u = self._freeze(u)

    def set_deviation_block(self, block: np.ndarray) -> None:
        block = self._check_block(block)
        self._u = self._freeze(np.column_stack((self._u[:, 0], block)))


STATE_TYPES = {
    'buffer': BufferState,
    'frozen': FrozenState,
}


def make_state(u: np.ndarray, state_type: str = 'buffer') -> ExtendedState:
    if state_type not in STATE_TYPES:
        raise ArgumentError(f"invalid state type '{state_type}', must be one of {set(STATE_TYPES)}")
    return STATE_TYPES[state_type](u)
