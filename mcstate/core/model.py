"""
Scoring interfaces for MCMC sampling.

This module provides the ScoringProtocol that posterior functions must
implement. Scores are validated automatically when used with samplers.
"""

from __future__ import annotations

from numbers import Real
from typing import Protocol, runtime_checkable

import numpy as np

from mcstate.core.state import State


@runtime_checkable
class ScoringProtocol(Protocol):
    """
    Protocol defining the required interface for scoring functions.

    A scoring function is callable on the active State and returns the log
    probability of the current point. It may use state.is_dirty(...) to skip
    parts of the computation whose inputs did not change. To keep access to
    state nodes valid across restores it should hold them through References
    (see mcstate.core.reference.Component).

    Examples:
        Function::

            def log_posterior(state: State) -> float:
                x = state.get_state_node("x").get_values()
                return -0.5 * float(np.sum(x ** 2))

        Component::

            class Normal(Component):
                def __init__(self, x: RealParameter):
                    self.x = Reference("x", x, required=True)

                def __call__(self, state: State) -> float:
                    return -0.5 * float(np.sum(self.x.resolve().get_values() ** 2))
    """

    def __call__(self, state: State) -> float:
        """
        Evaluate the log probability of the active state.

        Args:
            state: The State being sampled.

        Returns:
            Log probability, -inf for points outside the support.
        """
        ...


def validate_log_probability(value: object) -> float:
    """
    Validate a score returned by a scoring function.

    Args:
        value: Returned score.

    Returns:
        The score as a float.

    Raises:
        TypeError: If the score is not a real number.
        ValueError: If the score is NaN or +inf.
    """
    if isinstance(value, np.ndarray) and value.size == 1:
        value = value.item()
    if isinstance(value, bool) or not isinstance(value, (Real, np.floating, np.integer)):
        raise TypeError(f"Scoring function must return a real number, got {type(value).__name__}.")

    value = float(value)
    if np.isnan(value):
        raise ValueError("Scoring function returned NaN.")
    if value == np.inf:
        raise ValueError("Scoring function returned +inf.")
    return value
