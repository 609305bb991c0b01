"""Checkpointable MCMC state and self-tuning proposal operators."""

from mcstate.core.errors import ConfigurationError, McstateError, StateError, StateNodeCopyError
from mcstate.core.operator import KernelOperator, Operator, TunableProtocol
from mcstate.core.parameter import IntegerParameter, RealParameter
from mcstate.core.reference import Component, Reference, ReferenceHolder
from mcstate.core.schedule import OperatorSchedule
from mcstate.core.state import State
from mcstate.core.statenode import StateNode
from mcstate.core.tree import Tree
from mcstate.kernels import BactrianKernel, GaussianKernel
from mcstate.operators import BactrianRandomWalkOperator, BactrianScaleOperator
from mcstate.samplers import MCMCSampler

__version__ = "0.1.0"

__all__ = [
    "BactrianKernel",
    "BactrianRandomWalkOperator",
    "BactrianScaleOperator",
    "Component",
    "ConfigurationError",
    "GaussianKernel",
    "IntegerParameter",
    "KernelOperator",
    "MCMCSampler",
    "McstateError",
    "Operator",
    "OperatorSchedule",
    "RealParameter",
    "Reference",
    "ReferenceHolder",
    "State",
    "StateError",
    "StateNode",
    "StateNodeCopyError",
    "Tree",
    "TunableProtocol",
]
