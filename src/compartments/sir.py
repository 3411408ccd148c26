"""
===========================================================
sir.py
Last Updated: 2026-10-19
===========================================================

Description:
    Three compartment SIR model on population fractions.

    Transitions:
        S -> I   incidence_rate * S * I
        I -> R   removal_rate * I
        I -> S   recovery_rate * I

Example Usage:
    from compartments.sir import SIRModel
    from compartments.parameters import SIRParameters
    model = SIRModel(SIRParameters(incidence_rate=0.02), length=10)
    model.initialize()
    model.run("rk4")
    df = model.to_frame()

Notes:
    - The recovery term moves I straight back to S. Removed
      individuals never return, whatever the name suggests.
-----------------------------------------------------------
License: MIT
===========================================================
"""

from __future__ import annotations
import numpy as np

from .model import CompartmentModel
from .odes import sir_rhs
from .parameters import SIRParameters, default_sir_parameters


class SIRModel(CompartmentModel):
    compartments = ("s", "i", "r")
    peak_compartment = "i"

    def __init__(self, params: SIRParameters, length: int, step_size: float = 1.0,
                 backend: str = "array"):
        if not isinstance(params, SIRParameters):
            raise TypeError(f"SIRModel needs SIRParameters, got {type(params).__name__}")
        super().__init__(params, length, step_size, backend)

    def rhs(self, y: np.ndarray) -> np.ndarray:
        return sir_rhs(y, self.params)

    @property
    def reproduction_number(self) -> float:
        """
        Average secondary infections from one infectious individual in a
        fully susceptible population: beta / (gamma + mu)
        """
        exit_rate = self.params.recovery_rate + self.params.removal_rate
        return self.params.incidence_rate / exit_rate if exit_rate > 0 else np.inf


if __name__ == "__main__":
    from .reporting import PrintTrace

    model = SIRModel(default_sir_parameters(), length=10)
    model.params.print_summary()
    model.initialize()
    report = model.run("euler", observer=PrintTrace())
    print(report.describe())
