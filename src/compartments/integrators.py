"""
===========================================================
integrators.py
Last Updated: 2026-10-19
===========================================================

Description:
    Fixed-step integrators for autonomous compartment systems.

    Defines:
        - euler_step(): first-order explicit (finite difference)
                        update y + h*f(y).
        - rk4_step(): classical 4th order Runge-Kutta update.
        - advance(): fill TrajectoryBuffers in place, one index
                     at a time.
        - integrate(): same loop on a fresh array, no buffers.
        - check_invariants(): bounds and closed-population check
                              on a finished trajectory.

Example Usage:
    from compartments.odes import sir_rhs
    from compartments.integrators import integrate
    traj = integrate(lambda y: sir_rhs(y, params), y0, n_points=10,
                     step_size=1.0, method="rk4")

Notes:
    - `rhs` is any callable mapping a state vector to its
      derivative vector; the steppers know nothing about the
      model behind it.
    - All RK4 stages are evaluated on the whole state vector, so
      coupled terms such as S*I always see a consistent state.
    - Nothing is clipped. Values leaving [0, 1] are reported by
      check_invariants(), never corrected.
-----------------------------------------------------------
License: MIT
===========================================================
"""

from __future__ import annotations
import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence

from .buffers import TrajectoryBuffers
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

RHS = Callable[[np.ndarray], np.ndarray]
Stepper = Callable[[RHS, np.ndarray, float], np.ndarray]
Observer = Callable[[int, Dict[str, float]], None]


def euler_step(rhs: RHS, y: np.ndarray, h: float) -> np.ndarray:
    """single first-order step"""
    return y + h * rhs(y)


def rk4_step(rhs: RHS, y: np.ndarray, h: float) -> np.ndarray:
    """single RK4 step"""
    k1 = rhs(y)
    k2 = rhs(y + 0.5 * h * k1)
    k3 = rhs(y + 0.5 * h * k2)
    k4 = rhs(y + h * k3)
    return y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


METHODS: Dict[str, Stepper] = {
    "euler": euler_step,
    "fdm": euler_step,
    "rk4": rk4_step,
}


def get_stepper(method: str) -> Stepper:
    try:
        return METHODS[method]
    except (KeyError, TypeError):
        raise ConfigurationError(
            f"method must be one of {sorted(METHODS)}, got {method!r}"
        ) from None


def advance(
        buffers: TrajectoryBuffers,
        rhs: RHS,
        step_size: float,
        method: str = "euler",
        start: int = 1,
        observer: Optional[Observer] = None,
        trace_every: int = 1,
) -> TrajectoryBuffers:
    """
    Fill buffers[start:] from buffers[start - 1] onwards.

    Index t is computed only from index t - 1, so the loop is strictly
    sequential. The last index written is len(buffers) - 1.

    Parameters:
    -----------
    buffers: TrajectoryBuffers
        storage with a valid state at index start - 1
    rhs: callable
        derivative function of the state vector
    step_size: float
        h, spacing between consecutive indices
    method: str
        "euler" / "fdm" or "rk4"
    start: int
        first index to write, >= 1
    observer: callable, optional
        called as observer(t, {name: value}) after index t is written
    trace_every: int
        call the observer on every Nth index (and always on the last one)
    """
    stepper = get_stepper(method)
    if trace_every < 1:
        raise ConfigurationError(f"trace_every must be >= 1, got {trace_every}")
    n = len(buffers)
    if not 1 <= start <= n:
        raise ConfigurationError(f"start must be in [1, {n}], got {start}")

    logger.debug("advancing %d steps with %s, h=%g", n - start, method, step_size)
    y = buffers.state(start - 1)
    for t in range(start, n):
        y = stepper(rhs, y, step_size)
        buffers.write(t, y)
        if observer is not None and (t % trace_every == 0 or t == n - 1):
            observer(t, buffers.snapshot(t))
    return buffers


def integrate(
        rhs: RHS,
        y0: Sequence[float],
        n_points: int,
        step_size: float = 1.0,
        method: str = "euler",
        observer: Optional[Observer] = None,
        trace_every: int = 1,
        names: Optional[Sequence[str]] = None,
) -> np.ndarray:
    """
    Integrate from y0 over n_points indices and return the trajectory as a
    new (n_points, len(y0)) array. Row 0 is y0.

    The observer gets the same (t, {name: value}) snapshots as in
    advance(). Without `names` the components are labelled x0, x1, ...
    """
    stepper = get_stepper(method)
    if n_points < 1:
        raise ConfigurationError(f"n_points must be positive, got {n_points}")
    if trace_every < 1:
        raise ConfigurationError(f"trace_every must be >= 1, got {trace_every}")
    y = np.asarray(y0, dtype=float)
    if names is None:
        names = tuple(f"x{j}" for j in range(y.shape[0]))
    elif len(names) != y.shape[0]:
        raise ConfigurationError(f"got {len(names)} names for a state of size {y.shape[0]}")

    out = np.zeros((n_points, y.shape[0]), dtype=float)
    out[0] = y
    for t in range(1, n_points):
        y = stepper(rhs, y, step_size)
        out[t] = y
        if observer is not None and (t % trace_every == 0 or t == n_points - 1):
            observer(t, {name: float(value) for name, value in zip(names, out[t])})
    return out


@dataclass
class InvariantReport:
    """
    Outcome of check_invariants().

    ok: bool
        every fraction in [0, 1] and every row summing to 1, within tol
    out_of_bounds: dict
        compartment name -> indices where it left [0, 1]
    max_sum_error: float
        largest |sum of fractions - 1| over all indices
    first_violation: int or None
        earliest index breaking either condition
    """
    ok: bool
    out_of_bounds: Dict[str, np.ndarray] = field(default_factory=dict)
    max_sum_error: float = 0.0
    first_violation: Optional[int] = None

    def describe(self) -> str:
        if self.ok:
            return "population invariant holds"
        parts = [f"first violation at t={self.first_violation}"]
        for name, idx in self.out_of_bounds.items():
            parts.append(f"{name} outside [0, 1] at {len(idx)} indices")
        parts.append(f"max |sum - 1| = {self.max_sum_error:.3e}")
        return "; ".join(parts)


def check_invariants(
        trajectory: np.ndarray,
        names: Sequence[str],
        tol: float = 1e-9,
) -> InvariantReport:
    """Check bounds and the closed-population sum on a (n, k) trajectory"""
    traj = np.asarray(trajectory, dtype=float)
    bad_rows = np.zeros(traj.shape[0], dtype=bool)

    out_of_bounds = {}
    for j, name in enumerate(names):
        col = traj[:, j]
        mask = ~np.isfinite(col) | (col < -tol) | (col > 1.0 + tol)
        if mask.any():
            out_of_bounds[name] = np.flatnonzero(mask)
            bad_rows |= mask

    sum_error = np.abs(traj.sum(axis=1) - 1.0)
    sum_error = np.where(np.isfinite(sum_error), sum_error, np.inf)
    bad_rows |= sum_error > tol
    max_sum_error = float(sum_error.max()) if sum_error.size else 0.0

    first = int(np.argmax(bad_rows)) if bad_rows.any() else None
    return InvariantReport(
        ok=first is None,
        out_of_bounds=out_of_bounds,
        max_sum_error=max_sum_error,
        first_violation=first,
    )
