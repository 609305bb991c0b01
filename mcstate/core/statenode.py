"""
Base class for the components that make up a sampled State.

A state node is one addressable, independently dirtyable piece of the
parameter space: a real vector, an integer vector or a tree. The State takes
deep copies of its nodes on store() and swaps the copies back in on restore(),
so every node type must be able to produce a copy that shares no mutable
substructure with the original.
"""

from abc import ABC, abstractmethod


class StateNode(ABC):
    """
    Abstract state node.

    Attributes:
        id (str): Stable identifier, unique within a State.
        index (int): Slot of this node in its owning State, -1 until assigned.
    """

    def __init__(self, id: str):
        if not isinstance(id, str) or not id:
            raise ValueError("A state node needs a non-empty string id.")
        self.id = id
        self.index = -1
        self._dirty = False

    def get_id(self) -> str:
        return self.id

    def get_index(self) -> int:
        return self.index

    def is_dirty(self) -> bool:
        """Whether this node changed since the dirty flags were last cleared."""
        return self._dirty

    def set_dirty(self, is_dirty: bool) -> None:
        self._dirty = bool(is_dirty)

    def copy(self) -> "StateNode":
        """
        Return a deep copy carrying the same values, id, slot index and dirty flag.

        The copy shares no mutable data with this node, so mutating one never
        affects the other. Exceptions raised by the subclass propagate.
        """
        node = self._copy()
        node.index = self.index
        node._dirty = self._dirty
        return node

    @abstractmethod
    def _copy(self) -> "StateNode":
        """Copy the node-specific payload."""
        raise NotImplementedError("Implement _copy method")

    @abstractmethod
    def get_dimension(self) -> int:
        raise NotImplementedError("Implement get_dimension method")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, index={self.index}, dirty={self._dirty})"
