"""
===========================================================
errors.py
Last Updated: 2026-10-19
===========================================================

Description:
    Exception and warning types raised by the compartment models.

    - ConfigurationError: bad rates, fractions, grid or method.
    - ModelStateError: a model operation called out of order.
    - PopulationInvariantWarning: a finished run left the
      population fractions outside [0, 1] or let their sum
      drift away from 1.
-----------------------------------------------------------
License: MIT
===========================================================
"""


class ConfigurationError(ValueError):
    """Invalid model configuration (rates, initial fractions, time grid)."""


class ModelStateError(RuntimeError):
    """Operation not allowed in the model's current lifecycle state."""


class PopulationInvariantWarning(RuntimeWarning):
    """Trajectory broke the closed-population contract."""
