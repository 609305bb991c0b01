"""
Gaussian kernel for random walk proposals
"""

import numpy as np
from scipy import stats

from mcstate.core.kernel import KernelDistributionBase


class GaussianKernel(KernelDistributionBase):
    """Standard normal step, the classic random walk Metropolis kernel"""

    def sample(self) -> float:
        return float(np.random.randn())

    def logpdf(self, x: float) -> float:
        return float(stats.norm.logpdf(x))

    def __repr__(self) -> str:
        return "GaussianKernel()"
