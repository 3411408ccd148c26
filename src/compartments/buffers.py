"""
===========================================================
buffers.py
Last Updated: 2026-10-19
===========================================================

Description:
    Per-compartment trajectory storage.

    A CompartmentBuffer is an ordered, fixed-length sequence of
    floats indexed by time step. Two backends share the same
    interface so the steppers never see how values are stored:

        "array"  - flat numpy vector of shape (n,)
        "matrix" - single column of a numpy matrix, shape (n, 1)

    TrajectoryBuffers groups one buffer per compartment and moves
    whole state vectors in and out of them.
-----------------------------------------------------------
License: MIT
===========================================================
"""

from __future__ import annotations
import numpy as np
from typing import Dict, Sequence, Tuple

from .errors import ConfigurationError


class CompartmentBuffer:
    """Zero-filled numeric sequence for one compartment"""

    shape: Tuple[int, ...]

    def __len__(self) -> int:
        raise NotImplementedError

    def __getitem__(self, t: int) -> float:
        raise NotImplementedError

    def __setitem__(self, t: int, value: float) -> None:
        raise NotImplementedError

    def extend(self, n: int) -> None:
        """Append n zero entries"""
        raise NotImplementedError

    def truncate(self, n: int) -> None:
        """Keep only the first n entries"""
        raise NotImplementedError

    def to_numpy(self) -> np.ndarray:
        """Copy of the values as a flat array"""
        raise NotImplementedError


class ArrayBuffer(CompartmentBuffer):
    def __init__(self, n: int):
        self._data = np.zeros(n, dtype=float)

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._data.shape

    def __len__(self) -> int:
        return self._data.shape[0]

    def __getitem__(self, t: int) -> float:
        return float(self._data[t])

    def __setitem__(self, t: int, value: float) -> None:
        self._data[t] = value

    def extend(self, n: int) -> None:
        self._data = np.concatenate([self._data, np.zeros(n, dtype=float)])

    def truncate(self, n: int) -> None:
        self._data = self._data[:n].copy()

    def to_numpy(self) -> np.ndarray:
        return self._data.copy()


class MatrixBuffer(CompartmentBuffer):
    def __init__(self, n: int):
        self._data = np.zeros((n, 1), dtype=float)

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._data.shape

    def __len__(self) -> int:
        return self._data.shape[0]

    def __getitem__(self, t: int) -> float:
        return float(self._data[t, 0])

    def __setitem__(self, t: int, value: float) -> None:
        self._data[t, 0] = value

    def extend(self, n: int) -> None:
        self._data = np.vstack([self._data, np.zeros((n, 1), dtype=float)])

    def truncate(self, n: int) -> None:
        self._data = self._data[:n, :].copy()

    def to_numpy(self) -> np.ndarray:
        return self._data[:, 0].copy()


BACKENDS = {
    "array": ArrayBuffer,
    "matrix": MatrixBuffer,
}


def make_buffer(n: int, backend: str = "array") -> CompartmentBuffer:
    if backend not in BACKENDS:
        raise ConfigurationError(f"backend must be one of {sorted(BACKENDS)}, got {backend!r}")
    return BACKENDS[backend](n)


class TrajectoryBuffers:
    """
    One buffer per compartment, all the same length.

    Parameters:
    -----------
    names: sequence of str
        compartment names, in state vector order
    n: int
        number of time indices
    backend: str
        "array" or "matrix"
    """
    def __init__(self, names: Sequence[str], n: int, backend: str = "array"):
        if n < 1:
            raise ConfigurationError(f"buffers need at least one index, got {n}")
        self.names = tuple(names)
        self.backend = backend
        self._buffers: Dict[str, CompartmentBuffer] = {
            name: make_buffer(n, backend) for name in self.names
        }

    def __len__(self) -> int:
        return len(self._buffers[self.names[0]])

    def __getitem__(self, name: str) -> CompartmentBuffer:
        return self._buffers[name]

    def state(self, t: int) -> np.ndarray:
        """State vector at index t, in compartment order"""
        return np.array([self._buffers[name][t] for name in self.names], dtype=float)

    def write(self, t: int, y: np.ndarray) -> None:
        for name, value in zip(self.names, y):
            self._buffers[name][t] = value

    def snapshot(self, t: int) -> Dict[str, float]:
        return {name: self._buffers[name][t] for name in self.names}

    def extend(self, n: int) -> None:
        for buf in self._buffers.values():
            buf.extend(n)

    def truncate(self, n: int) -> None:
        """Drop every index from n onwards"""
        if not 1 <= n <= len(self):
            raise ConfigurationError(f"truncate length must be in [1, {len(self)}], got {n}")
        for buf in self._buffers.values():
            buf.truncate(n)

    def to_numpy(self) -> np.ndarray:
        """Copy of all trajectories, shape (n, n_compartments)"""
        return np.column_stack([self._buffers[name].to_numpy() for name in self.names])
