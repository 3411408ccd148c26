"""
===========================================================
model.py
Last Updated: 2026-10-19
===========================================================

Description:
    Base class shared by the SIR and DisMod models. Owns one
    parameter set, one time grid and one TrajectoryBuffers, and
    drives the integrators over them.

Lifecycle:
    UNINITIALIZED --initialize()--> INITIALIZED --run()--> RUN_COMPLETE

    - initialize() may be called at any time; it always resets the
      buffers to the initial condition.
    - run() before initialize() raises ModelStateError.
    - run() after a completed run needs an explicit `rerun`:
        "reset"    - re-initialize, then run from index 0
        "continue" - append another grid's worth of indices and
                     keep integrating from the last state
-----------------------------------------------------------
License: MIT
===========================================================
"""

from __future__ import annotations
import logging
import warnings
import numpy as np
import pandas as pd
from enum import Enum
from typing import Dict, Optional, Tuple

from .buffers import BACKENDS, TrajectoryBuffers
from .errors import ConfigurationError, ModelStateError, PopulationInvariantWarning
from .integrators import (
    InvariantReport, Observer, advance, check_invariants, get_stepper
)
from .parameters import TimeGrid

logger = logging.getLogger(__name__)

RERUN_POLICIES = ("reset", "continue")


class ModelState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    RUN_COMPLETE = "run_complete"


class CompartmentModel:
    """
    Compartment model over a fixed time grid.

    Subclasses set `compartments` (state vector order, susceptible first),
    `peak_compartment` and implement rhs().

    Parameters:
    -----------
    params: frozen parameter dataclass
        must provide initial_fractions() for every compartment but S
    length: int
        horizon in time units
    step_size: float
        spacing between indices, in (0, 1]
    backend: str
        buffer storage, "array" or "matrix"
    """
    compartments: Tuple[str, ...] = ()
    peak_compartment: str = ""

    def __init__(self, params, length: int, step_size: float = 1.0, backend: str = "array"):
        if backend not in BACKENDS:
            raise ConfigurationError(f"backend must be one of {sorted(BACKENDS)}, got {backend!r}")
        self.params = params
        self.grid = TimeGrid(length, step_size)
        self.backend = backend
        self.state = ModelState.UNINITIALIZED
        self.last_report: Optional[InvariantReport] = None
        self._buffers: Optional[TrajectoryBuffers] = None

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(params={self.params!r}, length={self.grid.length}, "
                f"step_size={self.grid.step_size}, state={self.state.value})")

    # ------------------------------------------------------------------
    def rhs(self, y: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    @property
    def length(self) -> int:
        return self.grid.length

    @property
    def step_size(self) -> float:
        return self.grid.step_size

    @property
    def n_points(self) -> int:
        if self._buffers is None:
            return self.grid.n_points
        return len(self._buffers)

    @property
    def times(self) -> np.ndarray:
        return np.arange(self.n_points, dtype=float) * self.grid.step_size

    def initial_state(self) -> np.ndarray:
        """Index 0 state, with S = 1 - sum of the other initial fractions"""
        others = self.params.initial_fractions()
        total = sum(others.values())
        if total > 1.0:
            raise ConfigurationError(
                f"initial fractions sum to {total}; must be <= 1 to leave S >= 0"
            )
        s_init = 1.0 - total    # population fractions must sum to 1
        return np.array([s_init] + [others[name] for name in self.compartments[1:]], dtype=float)

    def initialize(self) -> "CompartmentModel":
        """Allocate zero-filled buffers and write the initial condition at index 0"""
        y0 = self.initial_state()
        self._buffers = TrajectoryBuffers(self.compartments, self.grid.n_points, self.backend)
        self._buffers.write(0, y0)
        self.state = ModelState.INITIALIZED
        self.last_report = None
        logger.debug("%s initialized with %d indices", type(self).__name__, self.grid.n_points)
        return self

    def run(
            self,
            method: str = "euler",
            observer: Optional[Observer] = None,
            trace_every: int = 1,
            rerun: Optional[str] = None,
            tol: float = 1e-9,
    ) -> InvariantReport:
        """
        Integrate over the grid with "euler" (alias "fdm") or "rk4".

        Returns an InvariantReport; if the trajectory breaks the
        closed-population contract a PopulationInvariantWarning is also
        issued. Values are never clipped.
        """
        get_stepper(method)
        if rerun is not None and rerun not in RERUN_POLICIES:
            raise ConfigurationError(f"rerun must be one of {RERUN_POLICIES} or None, got {rerun!r}")
        if self.state is ModelState.UNINITIALIZED:
            raise ModelStateError("Must call initialize() before run()")

        start = 1
        if self.state is ModelState.RUN_COMPLETE:
            if rerun == "reset":
                self.initialize()
            elif rerun == "continue":
                start = len(self._buffers)
                self._buffers.extend(self.grid.n_points - 1)
            else:
                raise ModelStateError(
                    "Model has already been run; pass rerun='reset' or rerun='continue', "
                    "or call initialize() first"
                )

        logger.info("running %s with %s from index %d to %d",
                    type(self).__name__, method, start, len(self._buffers) - 1)
        try:
            advance(self._buffers, self.rhs, self.grid.step_size, method=method,
                    start=start, observer=observer, trace_every=trace_every)
        except Exception:
            # a failed continuation keeps the previous run; anything else
            # has to be rerun from index 1
            if start > 1:
                self._buffers.truncate(start)
            else:
                self.state = ModelState.INITIALIZED
            logger.warning("%s run with %s failed; trajectory rolled back to %d indices",
                           type(self).__name__, method, start)
            raise
        self.state = ModelState.RUN_COMPLETE

        report = check_invariants(self._buffers.to_numpy(), self.compartments, tol=tol)
        if not report.ok:
            warnings.warn(f"{type(self).__name__} ({method}): {report.describe()}",
                          PopulationInvariantWarning, stacklevel=2)
        self.last_report = report
        return report

    def run_euler(self, **kwargs) -> InvariantReport:
        """First-order Euler. Rough; fine for demonstration and small rates."""
        return self.run("euler", **kwargs)

    def run_fdm(self, **kwargs) -> InvariantReport:
        """First-order finite difference, same update as run_euler()"""
        return self.run("fdm", **kwargs)

    def run_rk4(self, **kwargs) -> InvariantReport:
        """Classical 4th order Runge-Kutta, suitable for general purposes"""
        return self.run("rk4", **kwargs)

    # ------------------------------------------------------------------
    def _require_buffers(self) -> TrajectoryBuffers:
        if self._buffers is None:
            raise ModelStateError("Must call initialize() before reading trajectories")
        return self._buffers

    @property
    def buffers(self) -> TrajectoryBuffers:
        return self._require_buffers()

    def trajectory(self, name: str) -> np.ndarray:
        """Copy of one compartment's values at every index"""
        if name not in self.compartments:
            raise KeyError(f"unknown compartment {name!r}; expected one of {self.compartments}")
        return self._require_buffers()[name].to_numpy()

    def to_numpy(self) -> np.ndarray:
        return self._require_buffers().to_numpy()

    def to_frame(self) -> pd.DataFrame:
        """Tidy DataFrame: column t plus one column per compartment"""
        data = self.to_numpy()
        df = pd.DataFrame(data, columns=list(self.compartments))
        df.insert(0, "t", self.times)
        return df

    def summary(self) -> Dict[str, float]:
        """Final fractions and the peak of the tracked compartment"""
        data = self.to_numpy()
        peak_col = data[:, self.compartments.index(self.peak_compartment)]
        peak_idx = int(np.argmax(peak_col))
        out = {f"final_{name}": float(data[-1, j]) for j, name in enumerate(self.compartments)}
        out.update({
            "peak_index": peak_idx,
            "peak_time": float(self.times[peak_idx]),
            f"peak_{self.peak_compartment}": float(peak_col[peak_idx]),
            "max_sum_error": float(np.abs(data.sum(axis=1) - 1.0).max()),
        })
        return out
