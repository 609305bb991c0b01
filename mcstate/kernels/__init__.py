from mcstate.kernels.bactrian import BactrianKernel
from mcstate.kernels.gaussian import GaussianKernel

__all__ = [
    "BactrianKernel",
    "GaussianKernel",
]
