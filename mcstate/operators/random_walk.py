"""
Random walk operator with a Bactrian step distribution.

Picks one dimension of the parameter uniformly at random and moves it by a
step drawn from the kernel, scaled by the window size. The kernel is
symmetric, so the log Hastings ratio is 0 for every move that stays inside
the parameter bounds; moves that leave the bounds return -inf without
touching the parameter.
"""

from typing import Any, Mapping, Optional

import numpy as np

from mcstate.core.errors import ConfigurationError
from mcstate.core.kernel import KernelDistribution
from mcstate.core.operator import KernelOperator
from mcstate.core.parameter import IntegerParameter, Parameter
from mcstate.core.reference import Reference
from mcstate.utils.logging import McstateLogger

logger = McstateLogger.get_logger(__name__)

# camelCase option names accepted by from_config
CONFIG_OPTIONS = {
    "parameter": "parameter",
    "scaleFactor": "scale_factor",
    "windowSize": "window_size",
    "optimise": "optimise",
    "weight": "weight",
    "kernelDistribution": "kernel_distribution",
    "id": "id",
}


class BactrianRandomWalkOperator(KernelOperator):
    """
    Bactrian random walk on a single dimension of a vector parameter.

    Attributes:
        parameter (Reference): Handle to the parameter being moved.
        window_size (float): Scale of the steps; larger means bolder proposals.
        optimise (bool): Whether optimize() adapts window_size.
    """

    def __init__(
        self,
        parameter: Optional[Parameter] = None,
        window_size: Optional[float] = None,
        scale_factor: Optional[float] = None,
        optimise: bool = True,
        weight: float = 1.0,
        kernel_distribution: Optional[KernelDistribution] = None,
        id: Optional[str] = None,
    ):
        super().__init__(kernel_distribution=kernel_distribution, weight=weight, id=id)
        self.parameter = Reference("parameter", parameter, "the parameter to operate a random walk on", required=True)
        self.optimise = optimise
        self._window_size_input = window_size
        self._scale_factor_input = scale_factor
        self.window_size = 1.0
        self.initialize()

    def initialize(self) -> None:
        """
        Resolve the window size from the two mutually exclusive inputs.

        Raises:
            ConfigurationError: If both window_size and scale_factor are given,
                or if the parameter is missing or not a vector parameter.
        """
        self.validate_references()
        if not isinstance(self.parameter.resolve(), Parameter):
            raise ConfigurationError(
                f"Option 'parameter' must be a RealParameter or IntegerParameter, "
                f"got {type(self.parameter.resolve()).__name__}."
            )

        if self._scale_factor_input is not None and self._window_size_input is not None:
            raise ConfigurationError(
                "Specify at most one of window_size and scale_factor, not both; scale_factor is deprecated."
            )

        if self._scale_factor_input is not None:
            logger.warning("%s: scale_factor is deprecated, use window_size instead", self.id)
            self.window_size = float(self._scale_factor_input)
        elif self._window_size_input is not None:
            self.window_size = float(self._window_size_input)
        else:
            self.window_size = 1.0

        if not self.window_size > 0:
            raise ConfigurationError(f"window_size must be positive, got {self.window_size}.")

    @classmethod
    def from_config(cls, options: Mapping[str, Any]) -> "BactrianRandomWalkOperator":
        """
        Build the operator from named options.

        Accepts 'parameter', 'scaleFactor', 'windowSize', 'optimise', 'weight',
        'kernelDistribution' and 'id'. None values count as not given.

        Raises:
            ConfigurationError: For unknown options or invalid combinations.
        """
        unknown = sorted(set(options) - set(CONFIG_OPTIONS))
        if unknown:
            raise ConfigurationError(f"Unknown option(s) for {cls.__name__}: {', '.join(unknown)}.")
        kwargs = {CONFIG_OPTIONS[key]: value for key, value in options.items() if value is not None}
        return cls(**kwargs)

    def proposal(self) -> float:
        param = self.parameter.resolve()

        i = np.random.randint(param.get_dimension())
        value = param.get_value(i)
        new_value = value + self.kernel_distribution.get_random_delta(i, value, self.window_size)
        if isinstance(param, IntegerParameter):
            new_value = int(round(new_value))

        if not param.get_lower() <= new_value <= param.get_upper():
            return float("-inf")

        param.set_value(i, new_value)
        return 0.0

    def get_coercable_parameter_value(self) -> float:
        return self.window_size

    def set_coercable_parameter_value(self, value: float) -> None:
        self.window_size = value

    def optimize(self, log_alpha: float) -> None:
        """
        Adapt the window size in log space.

        Called after every invocation of this operator. log_alpha is the log
        posterior difference between proposed and previous state plus the log
        Hastings ratio.
        """
        if self.optimise:
            delta = self.calc_delta(log_alpha)
            delta += np.log(self.window_size)
            self.window_size = float(np.exp(delta))

    def get_target_acceptance_probability(self) -> float:
        return 0.3

    def get_performance_suggestion(self) -> str:
        return self._suggest(self.window_size, "window size")
