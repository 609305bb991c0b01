from mcstate.operators.random_walk import BactrianRandomWalkOperator
from mcstate.operators.scale import BactrianScaleOperator

__all__ = [
    "BactrianRandomWalkOperator",
    "BactrianScaleOperator",
]
