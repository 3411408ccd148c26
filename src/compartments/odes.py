"""
===========================================================
odes.py
Last Updated: 2026-10-19
===========================================================

Description:
    Right-hand sides of the SIR and DisMod equations.

    SIR (beta = incidence_rate, mu = removal_rate,
         gamma = recovery_rate):
        dS = -beta*S*I + gamma*I
        dI =  beta*S*I - (gamma + mu)*I
        dR =  mu*I

    DisMod:
        dS  = -(iota + omega)*S + rho*C
        dC  =  iota*S - (rho + chi + omega)*C
        dRc =  chi*C
        dRo =  omega*(S + C)

Notes:
    - Every function is pure: compartment values and parameters
      in, derivative(s) out.
    - The vector forms take a state vector in compartment order
      and return a new numpy array in the same order, so they
      can be handed to any stepper in integrators.py.
    - The gamma term returns I to S directly. R never feeds
      back into S, so this is not an SIRS model.
-----------------------------------------------------------
License: MIT
===========================================================
"""

from __future__ import annotations
import numpy as np

from .parameters import SIRParameters, DisModParameters


# ---------------------------- SIR ----------------------------
def sir_ds(S: float, I: float, p: SIRParameters) -> float:
    return (-p.incidence_rate * S * I) + (p.recovery_rate * I)


def sir_di(S: float, I: float, p: SIRParameters) -> float:
    return (p.incidence_rate * S * I) - ((p.recovery_rate + p.removal_rate) * I)


def sir_dr(I: float, p: SIRParameters) -> float:
    return p.removal_rate * I


def sir_rhs(y: np.ndarray, p: SIRParameters) -> np.ndarray:
    """Derivatives [dS, dI, dR] at state y = [S, I, R]"""
    S, I, R = y
    return np.array([sir_ds(S, I, p), sir_di(S, I, p), sir_dr(I, p)], dtype=float)


# --------------------------- DisMod ---------------------------
def dismod_ds(S: float, C: float, p: DisModParameters) -> float:
    return -((p.iota + p.omega) * S) + (p.rho * C)


def dismod_dc(S: float, C: float, p: DisModParameters) -> float:
    return (p.iota * S) - ((p.rho + p.chi + p.omega) * C)


def dismod_drc(C: float, p: DisModParameters) -> float:
    return p.chi * C


def dismod_dro(S: float, C: float, p: DisModParameters) -> float:
    return p.omega * (S + C)


def dismod_rhs(y: np.ndarray, p: DisModParameters) -> np.ndarray:
    """Derivatives [dS, dC, dRc, dRo] at state y = [S, C, Rc, Ro]"""
    S, C, Rc, Ro = y
    return np.array(
        [dismod_ds(S, C, p), dismod_dc(S, C, p), dismod_drc(C, p), dismod_dro(S, C, p)],
        dtype=float,
    )
