"""
Template class file for the kernel distributions used by operators
"""

# Imports
from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class KernelDistribution(Protocol):
    """
    Protocol for the step distributions of kernel operators.

    Implementations draw from a unit-variance law that is symmetric about 0,
    so a random walk built on them has a log Hastings ratio of 0.
    """

    def get_random_delta(self, dim: int, value: float, scale: float) -> float:
        """Draw a perturbation for dimension dim with current value, scaled by scale"""
        raise NotImplementedError("Implement get_random_delta method")

    def get_scaler(self, dim: int, value: float, scale: float) -> float:
        """Draw a multiplicative factor exp(delta) for scale operators"""
        raise NotImplementedError("Implement get_scaler method")

    def logpdf(self, x: float) -> float:
        """Log density of the unscaled kernel at x"""
        raise NotImplementedError("Implement logpdf method")


class KernelDistributionBase:
    """Shared behaviour of the concrete kernel distributions."""

    def get_random_delta(self, dim: int, value: float, scale: float) -> float:
        return self.sample() * scale

    def get_scaler(self, dim: int, value: float, scale: float) -> float:
        return float(np.exp(self.get_random_delta(dim, value, scale)))

    def sample(self) -> float:
        """Draw one standardized step"""
        raise NotImplementedError("Subclass must implement sample method")
