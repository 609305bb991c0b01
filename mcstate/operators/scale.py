"""
Scale operator with a Bactrian step distribution.

Multiplies one dimension (or all of them) of a real parameter by
s = exp(scale_factor * x), x drawn from the kernel. Scaling is not symmetric
on the original scale: the log Hastings ratio is log(s) per scaled dimension.
"""

from typing import Optional

import numpy as np

from mcstate.core.errors import ConfigurationError
from mcstate.core.kernel import KernelDistribution
from mcstate.core.operator import KernelOperator
from mcstate.core.parameter import RealParameter
from mcstate.core.reference import Reference


class BactrianScaleOperator(KernelOperator):
    """
    Multiplicative move on a positive real parameter.

    Attributes:
        parameter (Reference): Handle to the parameter being scaled.
        scale_factor (float): Scale of the log-multiplier; the tunable value.
        scale_all (bool): Scale every dimension by the same factor.
        optimise (bool): Whether optimize() adapts scale_factor.
    """

    def __init__(
        self,
        parameter: Optional[RealParameter] = None,
        scale_factor: float = 0.75,
        scale_all: bool = False,
        optimise: bool = True,
        weight: float = 1.0,
        kernel_distribution: Optional[KernelDistribution] = None,
        id: Optional[str] = None,
    ):
        super().__init__(kernel_distribution=kernel_distribution, weight=weight, id=id)
        self.parameter = Reference("parameter", parameter, "the parameter to scale", required=True)
        self.validate_references()
        if not isinstance(parameter, RealParameter):
            raise ConfigurationError(f"Option 'parameter' must be a RealParameter, got {type(parameter).__name__}.")
        if not scale_factor > 0:
            raise ConfigurationError(f"scale_factor must be positive, got {scale_factor}.")
        self.scale_factor = float(scale_factor)
        self.scale_all = scale_all
        self.optimise = optimise

    def proposal(self) -> float:
        param = self.parameter.resolve()

        if self.scale_all:
            scale = self.kernel_distribution.get_scaler(0, param.get_value(0), self.scale_factor)
            new_values = param.get_values() * scale
            if not np.all((param.get_lower() <= new_values) & (new_values <= param.get_upper())):
                return float("-inf")
            for i, v in enumerate(new_values):
                param.set_value(i, v)
            return param.get_dimension() * float(np.log(scale))

        i = np.random.randint(param.get_dimension())
        value = param.get_value(i)
        scale = self.kernel_distribution.get_scaler(i, value, self.scale_factor)
        new_value = value * scale
        if not param.get_lower() <= new_value <= param.get_upper():
            return float("-inf")

        param.set_value(i, new_value)
        return float(np.log(scale))

    def get_coercable_parameter_value(self) -> float:
        return self.scale_factor

    def set_coercable_parameter_value(self, value: float) -> None:
        self.scale_factor = value

    def optimize(self, log_alpha: float) -> None:
        if self.optimise:
            delta = self.calc_delta(log_alpha)
            self.scale_factor = float(np.exp(delta + np.log(self.scale_factor)))

    def get_target_acceptance_probability(self) -> float:
        return 0.3

    def get_performance_suggestion(self) -> str:
        return self._suggest(self.scale_factor, "scale factor")
