"""
Class file for the operator schedule.

The schedule picks which operator to run in each iteration, proportionally to
the operator weights, and computes the Robbins-Monro step that self-tuning
operators use to adapt their scale. The step for an operator with acceptance
signal alpha = min(1, exp(log_alpha)) is

    delta = (alpha - target) / f(count)

where count is the number of proposals the operator has made since the
auto-optimize delay elapsed (plus one) and f is the identity, log(count + 1)
or sqrt(count). The shrinking step size makes the adaptation converge.
"""

import logging
from typing import Any, Dict, List, Sequence, TYPE_CHECKING

import numpy as np

from mcstate.core.errors import ConfigurationError
from mcstate.utils.logging import McstateLogger

if TYPE_CHECKING:
    from mcstate.core.operator import Operator

logger = McstateLogger.get_logger(__name__)

TRANSFORMS = ("none", "log", "sqrt")


class OperatorSchedule:
    """
    Weighted operator selection plus the adaptation step size.

    Attributes:
        operators (List[Operator]): Operators in the order they were added.
        transform (str): How the proposal count damps the step: 'none', 'log' or 'sqrt'.
        auto_optimize (bool): If False, calc_delta always returns 0.
        auto_optimize_delay (int): Number of selections before adaptation counts start.
    """

    def __init__(self, operators: Sequence["Operator"] = (), transform: str = "sqrt", auto_optimize: bool = True, auto_optimize_delay: int = 0):
        if transform not in TRANSFORMS:
            raise ConfigurationError(f"Unknown transform '{transform}', expected one of {TRANSFORMS}.")
        if auto_optimize_delay < 0:
            raise ConfigurationError("auto_optimize_delay must be >= 0.")
        self.transform = transform
        self.auto_optimize = auto_optimize
        self.auto_optimize_delay = auto_optimize_delay
        self.operators: List["Operator"] = []
        self._cumulative_weights = np.zeros(0)
        self.selection_count = 0

        for operator in operators:
            self.add_operator(operator)

    def add_operator(self, operator: "Operator") -> None:
        """Add an operator and make this schedule its source of adaptation steps."""
        self.operators.append(operator)
        operator.set_schedule(self)
        weights = np.array([op.get_weight() for op in self.operators], dtype=float)
        self._cumulative_weights = np.cumsum(weights) / weights.sum()

    def select_operator(self) -> "Operator":
        """Draw an operator with probability proportional to its weight."""
        if not self.operators:
            raise ConfigurationError("The schedule has no operators to select from.")
        self.selection_count += 1
        u = np.random.rand()
        i = int(np.searchsorted(self._cumulative_weights, u, side="right"))
        return self.operators[min(i, len(self.operators) - 1)]

    def past_optimize_delay(self) -> bool:
        """Whether accept/reject outcomes now count towards adaptation."""
        return self.selection_count >= self.auto_optimize_delay

    def calc_delta(self, operator: "Operator", log_alpha: float) -> float:
        """Robbins-Monro step for operator given the log acceptance ratio of its last proposal."""
        if not self.auto_optimize:
            return 0.0

        target = operator.get_target_acceptance_probability()
        count = operator.rejected_for_correction + operator.accepted_for_correction + 1.0
        if self.transform == "log":
            count = np.log(count + 1.0)
        elif self.transform == "sqrt":
            count = np.sqrt(count)

        delta = (np.exp(min(log_alpha, 0.0)) - target) / count
        if np.isfinite(delta):
            return float(delta)
        return 0.0

    def get_statistics(self) -> List[Dict[str, Any]]:
        """Per-operator acceptance statistics and tuning advice."""
        return [
            {
                "operator": op.get_id(),
                "tuning": op.get_coercable_parameter_value(),
                "accepted": op.accepted,
                "rejected": op.rejected,
                "acceptance_rate": op.get_acceptance_rate(),
                "suggestion": op.get_performance_suggestion(),
            }
            for op in self.operators
        ]

    def log_statistics(self, level: int = logging.INFO) -> None:
        """Write the operator statistics table to the package logger."""
        logger.log(level, "%-40s %10s %8s %8s %8s", "Operator", "Tuning", "#accept", "#reject", "Pr(acc)")
        for row in self.get_statistics():
            logger.log(
                level,
                "%-40s %10.5g %8d %8d %8.4f %s",
                row["operator"], row["tuning"], row["accepted"], row["rejected"],
                row["acceptance_rate"], row["suggestion"],
            )
