"""
Vector-valued state nodes.

RealParameter and IntegerParameter store their values in a 1-D numpy array
together with scalar lower/upper bounds. Bounds are only checked when the
parameter is built; during sampling it is up to the operators to reject
moves that leave [lower, upper].
"""

import copy
from typing import Optional, Sequence, Union

import numpy as np

from mcstate.core.statenode import StateNode

Values = Union[float, int, Sequence[float], np.ndarray]


class Parameter(StateNode):
    """
    Vector parameter with element-wise dirty tracking.

    Attributes:
        values (np.ndarray): Current values, shape (d,).
        lower (float): Lower bound shared by all dimensions.
        upper (float): Upper bound shared by all dimensions.
    """

    dtype = np.float64

    def __init__(self, id: str, values: Values, lower: Optional[float] = None, upper: Optional[float] = None, dimension: Optional[int] = None):
        super().__init__(id)

        values = np.atleast_1d(np.asarray(values, dtype=self.dtype)).copy()
        if values.ndim != 1:
            raise ValueError(f"Parameter '{id}' values must be 1-D, got shape {values.shape}.")
        if values.size == 0:
            raise ValueError(f"Parameter '{id}' needs at least one value.")
        if dimension is not None:
            # a single value is replicated over the requested dimension
            if values.size == 1 and dimension > 1:
                values = np.full(dimension, values[0], dtype=self.dtype)
            elif values.size != dimension:
                raise ValueError(f"Parameter '{id}' has {values.size} values but dimension {dimension}.")

        self.values = values
        self.lower = self._default_lower() if lower is None else self.dtype(lower)
        self.upper = self._default_upper() if upper is None else self.dtype(upper)

        if self.lower > self.upper:
            raise ValueError(f"Parameter '{id}' has lower bound {self.lower} above upper bound {self.upper}.")
        if not self.is_within_bounds():
            raise ValueError(f"Parameter '{id}' values {self.values} lie outside [{self.lower}, {self.upper}].")

        self._element_dirty = np.zeros(values.size, dtype=bool)
        self._last_dirty = -1

    @classmethod
    def _default_lower(cls):
        return -np.inf

    @classmethod
    def _default_upper(cls):
        return np.inf

    def get_dimension(self) -> int:
        return self.values.size

    def get_value(self, i: int = 0):
        return self.values[i].item()

    def get_values(self) -> np.ndarray:
        """Copy of the current values."""
        return self.values.copy()

    def set_value(self, i: int, value) -> None:
        """Set dimension i and mark it dirty. Bounds are not checked here."""
        if not 0 <= i < self.values.size:
            raise IndexError(f"Index {i} out of range for parameter '{self.id}' of dimension {self.values.size}.")
        self.values[i] = value
        self._element_dirty[i] = True
        self._last_dirty = i
        self._dirty = True

    def get_lower(self):
        return self.lower

    def get_upper(self):
        return self.upper

    def is_within_bounds(self) -> bool:
        return bool(np.all(self.values >= self.lower) and np.all(self.values <= self.upper))

    def is_dirty(self, i: Optional[int] = None) -> bool:
        """Node-level dirty flag, or the flag of dimension i when given."""
        if i is None:
            return self._dirty
        return bool(self._element_dirty[i])

    def get_last_dirty(self) -> int:
        """Index of the most recently changed dimension, -1 if none."""
        return self._last_dirty

    def set_dirty(self, is_dirty: bool) -> None:
        super().set_dirty(is_dirty)
        self._element_dirty[:] = bool(is_dirty)
        if not is_dirty:
            self._last_dirty = -1

    def _copy(self) -> "Parameter":
        # values written by set_value may lie outside the bounds, so skip __init__ validation
        node = copy.copy(self)
        node.values = self.values.copy()
        node._element_dirty = self._element_dirty.copy()
        node._last_dirty = self._last_dirty
        return node

    def __str__(self) -> str:
        return f"{self.id}[{self.get_dimension()}] ({self.lower},{self.upper}): " + " ".join(str(v) for v in self.values)


class RealParameter(Parameter):
    """Real-valued vector parameter, unbounded by default."""

    dtype = np.float64


class IntegerParameter(Parameter):
    """Integer-valued vector parameter, bounded by the int64 range by default."""

    dtype = np.int64

    @classmethod
    def _default_lower(cls):
        return np.iinfo(cls.dtype).min

    @classmethod
    def _default_upper(cls):
        return np.iinfo(cls.dtype).max
