"""
===========================================================
parameters.py
Last Updated: 2026-10-19
===========================================================

Description:
    Rate parameters and time grid for the compartment models.

    All rates are per unit time and must lie in [0, 1]. Initial
    population fractions must lie in [0, 1] and the fractions of
    the non-susceptible compartments may not exceed 1 in total;
    the susceptible fraction is whatever is left over.

API:
    - SIRParameters(incidence_rate, removal_rate, recovery_rate,
                    i_init, r_init)
    - DisModParameters(iota, rho, chi, omega, c_init)
    - TimeGrid(length, step_size=1.0)
    - default_sir_parameters(), default_dismod_parameters()
-----------------------------------------------------------
License: MIT
===========================================================
"""

from __future__ import annotations
import math
import numpy as np
from dataclasses import dataclass, asdict
from typing import Dict

from .errors import ConfigurationError


def _check_unit_interval(name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.floating, np.integer)):
        raise ConfigurationError(f"{name} must be a real number, got {value!r}")
    if not math.isfinite(value) or value < 0.0 or value > 1.0:
        raise ConfigurationError(f"{name} must be in [0, 1], got {value}")


def _check_partition(fractions: Dict[str, float]) -> None:
    total = sum(fractions.values())
    if total > 1.0:
        names = " + ".join(fractions)
        raise ConfigurationError(
            f"initial fractions {names} sum to {total}, leaving no room for S (must be <= 1)"
        )


@dataclass(frozen=True)
class SIRParameters:
    """
    Transition rates and initial fractions for the SIR model.

    Parameters:
    -----------
    incidence_rate: float
        beta, mass-action transmission S -> I
    removal_rate: float
        mu, permanent removal I -> R
    recovery_rate: float
        gamma, return to susceptibility. Acts on I, not on R:
        dS gains gamma*I and dI loses gamma*I.
    i_init: float
        initial infectious fraction
    r_init: float
        initial removed fraction
    """
    incidence_rate: float = 0.02
    removal_rate: float = 0.03
    recovery_rate: float = 0.04
    i_init: float = 0.01
    r_init: float = 0.0

    def __post_init__(self):
        for name in ("incidence_rate", "removal_rate", "recovery_rate", "i_init", "r_init"):
            _check_unit_interval(name, getattr(self, name))
        _check_partition(self.initial_fractions())

    def initial_fractions(self) -> Dict[str, float]:
        """Initial fractions of every compartment except S"""
        return {"i": float(self.i_init), "r": float(self.r_init)}

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def print_summary(self):
        """Print parameter summary"""
        print("SIR MODEL PARAMETERS:")
        print(f"Incidence rate (β): {self.incidence_rate:.4f}")
        print(f"Removal rate (μ): {self.removal_rate:.4f}")
        print(f"Recovery rate (γ): {self.recovery_rate:.4f}")
        print(f"Initial infectious: {self.i_init * 100:.2f}%")
        print(f"Initial removed: {self.r_init * 100:.2f}%")


@dataclass(frozen=True)
class DisModParameters:
    """
    Transition rates and initial fraction for the four compartment DisMod model.

    Parameters:
    -----------
    iota: float
        incidence, S -> C
    rho: float
        remission, C -> S
    chi: float
        excess mortality, C -> Rc
    omega: float
        other-cause mortality, S -> Ro and C -> Ro
    c_init: float
        initial with-condition fraction
    """
    iota: float = 0.001
    rho: float = 0.1
    chi: float = 0.001
    omega: float = 0.0001
    c_init: float = 0.01

    def __post_init__(self):
        for name in ("iota", "rho", "chi", "omega", "c_init"):
            _check_unit_interval(name, getattr(self, name))
        _check_partition(self.initial_fractions())

    def initial_fractions(self) -> Dict[str, float]:
        """Initial fractions of every compartment except S"""
        return {"c": float(self.c_init), "rc": 0.0, "ro": 0.0}

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def print_summary(self):
        """Print parameter summary"""
        print("DISMOD MODEL PARAMETERS:")
        print(f"Incidence (ι): {self.iota:.4f}")
        print(f"Remission (ρ): {self.rho:.4f}")
        print(f"Excess mortality (χ): {self.chi:.4f}")
        print(f"Other-cause mortality (ω): {self.omega:.4f}")
        print(f"Initial with-condition: {self.c_init * 100:.2f}%")


@dataclass(frozen=True)
class TimeGrid:
    """
    Discrete time grid. `length` is the horizon in time units and
    `step_size` the spacing between indices, in (0, 1].
    """
    length: int
    step_size: float = 1.0

    def __post_init__(self):
        if isinstance(self.length, bool) or not isinstance(self.length, (int, np.integer)):
            raise ConfigurationError(f"length must be an integer, got {self.length!r}")
        if self.length < 1:
            raise ConfigurationError(f"length must be positive, got {self.length}")
        if isinstance(self.step_size, bool) or not isinstance(self.step_size, (int, float, np.floating)):
            raise ConfigurationError(f"step_size must be a real number, got {self.step_size!r}")
        if not math.isfinite(self.step_size) or not 0.0 < self.step_size <= 1.0:
            raise ConfigurationError(f"step_size must be in (0, 1], got {self.step_size}")

    @property
    def n_points(self) -> int:
        """Number of indices, ceil(length / step_size)"""
        # round away representation noise such as 3 / 0.1 = 30.000000000000004
        return int(math.ceil(round(self.length / self.step_size, 9)))

    @property
    def times(self) -> np.ndarray:
        return np.arange(self.n_points, dtype=float) * self.step_size


# Named parameter sets
def default_sir_parameters() -> SIRParameters:
    """Small rates that keep a ten step Euler run inside [0, 1]"""
    return SIRParameters(
        incidence_rate=0.02,
        removal_rate=0.03,
        recovery_rate=0.04,
        i_init=0.01,
        r_init=0.0,
    )


def default_dismod_parameters() -> DisModParameters:
    """Slow-onset chronic condition with fast remission, simulated over a year"""
    return DisModParameters(
        iota=0.001,
        rho=0.1,
        chi=0.001,
        omega=0.0001,
        c_init=0.01,
    )
