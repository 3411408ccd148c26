"""
===========================================================
dismod.py
Last Updated: 2026-10-19
===========================================================

Description:
    Four compartment DisMod-style model.

    Compartments:
        S  - susceptible (without the condition)
        C  - with the condition
        Rc - removed by the condition (excess mortality)
        Ro - removed by other causes

    Transitions:
        S -> C    iota
        C -> S    rho
        C -> Rc   chi
        S, C -> Ro  omega

    See https://dismod-at.readthedocs.io/latest/diff_eq.html

Example Usage:
    python -m compartments.dismod
-----------------------------------------------------------
License: MIT
===========================================================
"""

from __future__ import annotations
import numpy as np

from .model import CompartmentModel
from .odes import dismod_rhs
from .parameters import DisModParameters, default_dismod_parameters


class DisModModel(CompartmentModel):
    compartments = ("s", "c", "rc", "ro")
    peak_compartment = "c"

    def __init__(self, params: DisModParameters, length: int, step_size: float = 1.0,
                 backend: str = "array"):
        if not isinstance(params, DisModParameters):
            raise TypeError(f"DisModModel needs DisModParameters, got {type(params).__name__}")
        super().__init__(params, length, step_size, backend)

    def rhs(self, y: np.ndarray) -> np.ndarray:
        return dismod_rhs(y, self.params)

    def prevalence(self) -> np.ndarray:
        """C / (S + C) among those still alive; nan where nobody is"""
        s, c = self.trajectory("s"), self.trajectory("c")
        alive = s + c
        return np.divide(c, alive, out=np.full_like(c, np.nan), where=alive > 0)


if __name__ == "__main__":
    from .reporting import PrintTrace

    model = DisModModel(default_dismod_parameters(), length=365, backend="matrix")
    model.initialize()
    model.run_fdm(observer=PrintTrace())
