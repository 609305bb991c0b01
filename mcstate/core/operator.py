"""
Base classes for operators, the proposal mechanisms that perturb a State.

An operator changes one or more state nodes in place and returns the log
Hastings ratio of the move. The driver scores the new state and either keeps
it or calls State.restore(), reports the outcome through accept()/reject(),
and finally calls optimize(log_alpha) so that self-tuning operators can adapt
their scale.
"""

# Imports
from typing import Optional, Protocol, runtime_checkable

import numpy as np

from mcstate.core.errors import ConfigurationError
from mcstate.core.kernel import KernelDistribution
from mcstate.core.reference import Component
from mcstate.core.schedule import OperatorSchedule
from mcstate.kernels.bactrian import BactrianKernel


@runtime_checkable
class TunableProtocol(Protocol):
    """
    Protocol for operators with a single tunable scalar.

    Adaptive drivers only ever talk to this interface, so they work with any
    operator regardless of how it proposes.
    """

    def get_coercable_parameter_value(self) -> float:
        """Current value of the tunable scalar"""
        raise NotImplementedError("Implement get_coercable_parameter_value method")

    def set_coercable_parameter_value(self, value: float) -> None:
        """Overwrite the tunable scalar"""
        raise NotImplementedError("Implement set_coercable_parameter_value method")

    def optimize(self, log_alpha: float) -> None:
        """Adapt the tunable scalar after a proposal with log acceptance ratio log_alpha"""
        pass


class Operator(Component):
    """
    Base class for all operators.

    Attributes:
        id (str): Name used in statistics and log messages.
        weight (float): Relative probability of being selected by a schedule.
        accepted (int): Number of accepted proposals.
        rejected (int): Number of rejected proposals.
        accepted_for_correction (int): Accepted proposals counted for adaptation.
        rejected_for_correction (int): Rejected proposals counted for adaptation.
    """

    def __init__(self, weight: float = 1.0, id: Optional[str] = None):
        if not np.isfinite(weight) or weight <= 0:
            raise ConfigurationError(f"Operator weight must be a positive number, got {weight}.")
        self.weight = float(weight)
        self.id = id if id is not None else type(self).__name__
        self.accepted = 0
        self.rejected = 0
        self.accepted_for_correction = 0
        self.rejected_for_correction = 0
        self._schedule: Optional[OperatorSchedule] = None

    def get_id(self) -> str:
        return self.id

    def get_weight(self) -> float:
        return self.weight

    # ==================== Schedule ====================

    def set_schedule(self, schedule: OperatorSchedule) -> None:
        self._schedule = schedule

    def get_schedule(self) -> OperatorSchedule:
        if self._schedule is None:
            self._schedule = OperatorSchedule()
        return self._schedule

    # ==================== Proposal ====================

    def proposal(self) -> float:
        """
        Change the state in place and return the log Hastings ratio.

        Returns -inf for a move that must be rejected outright; the driver
        then restores the state without scoring it.
        """
        raise NotImplementedError("Subclass must implement proposal method")

    # ==================== Bookkeeping ====================

    def accept(self) -> None:
        self.accepted += 1
        if self.get_schedule().past_optimize_delay():
            self.accepted_for_correction += 1

    def reject(self) -> None:
        self.rejected += 1
        if self.get_schedule().past_optimize_delay():
            self.rejected_for_correction += 1

    def get_acceptance_rate(self) -> float:
        total = self.accepted + self.rejected
        if total == 0:
            return float("nan")
        return self.accepted / total

    # ==================== Tuning ====================

    def get_coercable_parameter_value(self) -> float:
        return float("nan")

    def set_coercable_parameter_value(self, value: float) -> None:
        pass

    def optimize(self, log_alpha: float) -> None:
        pass

    def calc_delta(self, log_alpha: float) -> float:
        """Robbins-Monro step from the schedule this operator belongs to"""
        return self.get_schedule().calc_delta(self, log_alpha)

    def get_target_acceptance_probability(self) -> float:
        return 0.234

    def get_performance_suggestion(self) -> str:
        return ""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, weight={self.weight}, accepted={self.accepted}, rejected={self.rejected})"


class KernelOperator(Operator):
    """
    Operator whose steps come from a KernelDistribution.

    Defaults to the Bactrian kernel.
    """

    def __init__(self, kernel_distribution: Optional[KernelDistribution] = None, weight: float = 1.0, id: Optional[str] = None):
        super().__init__(weight=weight, id=id)
        self.kernel_distribution = kernel_distribution if kernel_distribution is not None else BactrianKernel()

    def _suggest(self, value: float, name: str) -> str:
        """Advice for `name` when the acceptance rate is far off target, else ''."""
        total = self.accepted + self.rejected
        if total == 0:
            return ""
        prob = self.accepted / total
        ratio = prob / self.get_target_acceptance_probability()
        ratio = min(max(ratio, 0.5), 2.0)

        if prob < 0.10 or prob > 0.40:
            suggestion = np.format_float_positional(round(value * ratio, 3), trim="-")
            return f"Try setting {name} to about {suggestion}"
        return ""
