"""
===========================================================
experiments.py
Last Updated: 2026-10-19
===========================================================

Description:
    Accuracy checks and parameter sweeps for the compartment
    models: Euler vs RK4 against a tight-tolerance SciPy
    reference, grid sweeps over any rate parameters as a tidy
    DataFrame, and a heatmap helper.

Example Usage:
    from compartments.experiments import compare_methods, grid_sweep, heatmap
    errs = compare_methods(lambda: SIRModel(params, length=100, step_size=0.1))
    df = grid_sweep(SIRModel, params, length=100,
                    sweep={"incidence_rate": betas, "recovery_rate": gammas})
    heatmap(df, x="incidence_rate", y="recovery_rate", value="peak_i")

Notes:
    - The SciPy solution is only a yardstick. Models always run
      on their own fixed-step integrators.
-----------------------------------------------------------
License: MIT
===========================================================
"""

from __future__ import annotations
import itertools
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from dataclasses import replace
from matplotlib.axes import Axes
from scipy.integrate import solve_ivp
from typing import Callable, Dict, Optional, Sequence

from .model import CompartmentModel


def reference_trajectory(model: CompartmentModel, rtol: float = 1e-10, atol: float = 1e-12) -> np.ndarray:
    """Solve the model's ODEs with solve_ivp on the model's own time grid"""
    t = model.grid.times
    y0 = model.initial_state()
    if len(t) == 1:
        return y0[np.newaxis, :]
    sol = solve_ivp(lambda _t, y: model.rhs(y), (t[0], t[-1]), y0,
                    t_eval=t, rtol=rtol, atol=atol)
    if not sol.success:
        raise RuntimeError(f"Reference solver failed: {sol.message}")
    return sol.y.T  # (n_points, n_compartments)


def compare_methods(
        model_factory: Callable[[], CompartmentModel],
        methods: Sequence[str] = ("euler", "rk4"),
) -> pd.DataFrame:
    """
    Run each method on a fresh model and report the max absolute error per
    compartment against reference_trajectory(). One row per method.
    """
    records = []
    reference = None
    for method in methods:
        model = model_factory()
        model.initialize()
        report = model.run(method)
        if reference is None:
            reference = reference_trajectory(model)
        err = np.abs(model.to_numpy() - reference).max(axis=0)
        rec = {"method": method}
        rec.update({f"max_err_{name}": float(e) for name, e in zip(model.compartments, err)})
        rec["max_err"] = float(err.max())
        rec["invariant_ok"] = report.ok
        records.append(rec)
    return pd.DataFrame.from_records(records)


def grid_sweep(
        model_cls,
        params,
        length: int,
        sweep: Dict[str, Sequence[float]],
        step_size: float = 1.0,
        method: str = "euler",
) -> pd.DataFrame:
    """
    Run the model for every combination of the swept parameter values and
    return one row per combination with the model summary.
    """
    names = list(sweep)
    records = []
    for values in itertools.product(*(sweep[n] for n in names)):
        combo = {n: float(v) for n, v in zip(names, values)}
        model = model_cls(replace(params, **combo), length, step_size)
        model.initialize()
        report = model.run(method)
        rec = dict(combo)
        rec.update(model.summary())
        rec["invariant_ok"] = report.ok
        records.append(rec)
    df = pd.DataFrame.from_records(records)
    return df.sort_values(names).reset_index(drop=True)


def pivot_for_plot(df: pd.DataFrame, x: str, y: str, value: str):
    """Pivot a sweep DataFrame to X, Y, Z grids (rows: y, cols: x)"""
    table = df.pivot_table(index=y, columns=x, values=value).sort_index().sort_index(axis=1)
    X, Y = np.meshgrid(table.columns.to_numpy(), table.index.to_numpy())
    return X, Y, table.to_numpy()


def heatmap(df: pd.DataFrame, x: str, y: str, value: str,
            ax: Optional[Axes] = None, title: Optional[str] = None) -> Axes:
    """Heatmap of one summary column over two swept parameters"""
    X, Y, Z = pivot_for_plot(df, x=x, y=y, value=value)
    if ax is None:
        fig, ax = plt.subplots()
    extent = [X.min(), X.max(), Y.min(), Y.max()]
    im = ax.imshow(Z, origin="lower", aspect="auto", extent=extent)
    cbar = ax.figure.colorbar(im, ax=ax)
    cbar.set_label(value.replace("_", " ").title())
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    if title:
        ax.set_title(title)
    return ax
