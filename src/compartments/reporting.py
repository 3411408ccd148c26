"""
===========================================================
reporting.py
Last Updated: 2026-10-19
===========================================================

Description:
    Trace sinks and plotting for compartment trajectories.

    A trace sink is any callable observer(t, snapshot) where
    snapshot maps compartment name -> fraction. Pass one to
    model.run(observer=...) to watch a run; leave it out and the
    run is silent.

        PrintTrace      - one line per index on stdout
        LoggingTrace    - one record per index on a logger
        SnapshotRecorder - keeps (t, snapshot) pairs in memory

    Lines look like:  t=1: s=0.990202 i=0.009798 r=0.000300
-----------------------------------------------------------
License: MIT
===========================================================
"""

from __future__ import annotations
import logging
import matplotlib.pyplot as plt
from matplotlib.axes import Axes
from typing import Dict, List, Optional, Tuple


def format_snapshot(t: int, snapshot: Dict[str, float]) -> str:
    values = " ".join(f"{name}={value:.6f}" for name, value in snapshot.items())
    return f"t={t}: {values}"


class PrintTrace:
    def __call__(self, t: int, snapshot: Dict[str, float]) -> None:
        print(format_snapshot(t, snapshot))


class LoggingTrace:
    """Send trace lines to a logger (default: compartments.trace at INFO)"""
    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger if logger is not None else logging.getLogger("compartments.trace")
        self.level = level

    def __call__(self, t: int, snapshot: Dict[str, float]) -> None:
        if self.logger.isEnabledFor(self.level):
            self.logger.log(self.level, format_snapshot(t, snapshot))


class SnapshotRecorder:
    def __init__(self):
        self.records: List[Tuple[int, Dict[str, float]]] = []

    def __call__(self, t: int, snapshot: Dict[str, float]) -> None:
        self.records.append((t, dict(snapshot)))

    def lines(self) -> List[str]:
        return [format_snapshot(t, snap) for t, snap in self.records]


LABELS = {
    "s": "Susceptible",
    "i": "Infectious",
    "r": "Removed",
    "c": "With condition",
    "rc": "Removed by condition",
    "ro": "Removed by other causes",
}


def plot_trajectory(model, ax: Optional[Axes] = None, title: Optional[str] = None) -> Axes:
    """Plot every compartment of a model that has been initialized"""
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 4.5))
    df = model.to_frame()
    for name in model.compartments:
        ax.plot(df["t"], df[name], lw=2, label=LABELS.get(name, name))
    ax.set_xlabel("Time")
    ax.set_ylabel("Population fraction")
    ax.set_title(title if title else f"{type(model).__name__} trajectories")
    ax.legend(loc="best")
    ax.grid(alpha=0.25)
    return ax
