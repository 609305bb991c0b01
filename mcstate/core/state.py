"""
Checkpointable sampling state.

This module provides the State class, which owns the state nodes of a model,
stores a deep-copy checkpoint of them once per iteration and swaps the
checkpoint back in when a proposal is rejected. Components that depend on
state nodes hold References; the State keeps a registry of those references
and rebinds them after every restore so they never see a rejected node.
"""

from typing import Iterator, List, Optional, Sequence, Set, Tuple, Union

from mcstate.core.errors import ConfigurationError, StateError, StateNodeCopyError
from mcstate.core.reference import Reference, ReferenceHolder
from mcstate.core.statenode import StateNode
from mcstate.utils.logging import McstateLogger

logger = McstateLogger.get_logger(__name__)

NodeKey = Union[int, str, Reference, StateNode]


class State:
    """
    The current point in the state space, with a single checkpoint.

    Attributes:
        state_nodes (List[StateNode]):
            Active nodes, the ones visible to the model. active[i].index == i.

        stored_state_nodes (List[Optional[StateNode]]):
            Checkpoint taken by the last store(), same length as state_nodes.
            Entries are None until the first store().

    Examples:
        >>> from mcstate.core.parameter import RealParameter
        >>> x = RealParameter("x", [0.5, 1.0], lower=0.0)
        >>> state = State([x])
        >>> state.store()
        >>> x.set_value(0, 2.0)
        >>> state.restore()
        >>> state.get_state_node("x").get_value(0)
        0.5
    """

    def __init__(self, state_nodes: Optional[Sequence[StateNode]] = None):
        self.state_nodes: List[StateNode] = []
        self.stored_state_nodes: List[Optional[StateNode]] = []
        self._references: List[Tuple[Reference, int]] = []
        self._has_checkpoint = False

        for node in state_nodes or []:
            self.add_state_node(node)
        self.initialize()

    # ==================== Setup ====================

    def add_state_node(self, node: StateNode) -> None:
        """
        Append a node. Only meant for setup: call initialize() afterwards.

        Raises:
            TypeError: If node is not a StateNode.
            ConfigurationError: If a node with the same id is already present.
        """
        if not isinstance(node, StateNode):
            raise TypeError(f"State can only hold StateNode objects, got {type(node).__name__}.")
        if self.get_state_node_index(node.id) != -1:
            raise ConfigurationError(f"Duplicate state node id '{node.id}'.")
        self.state_nodes = self.state_nodes + [node]

    def initialize(self) -> None:
        """Assign slot indices, allocate the checkpoint and clear the reference registry."""
        for i, node in enumerate(self.state_nodes):
            node.index = i
        self.stored_state_nodes = [None] * len(self.state_nodes)
        self._references = []
        self._has_checkpoint = False
        logger.debug("State initialized with %d state nodes", len(self.state_nodes))

    def connect(self, holder: ReferenceHolder) -> int:
        """
        Register every reference reachable from holder that points at one of our nodes.

        References are followed recursively through any value that is itself a
        ReferenceHolder. Each holder is visited once, so cyclic wiring is fine.
        References to nodes that are not active here are skipped with a warning.

        Returns:
            int: Number of references newly registered.
        """
        visited: Set[int] = set()
        known = {id(reference) for reference, _ in self._references}
        added = 0

        stack = [holder]
        while stack:
            current = stack.pop()
            if id(current) in visited:
                continue
            visited.add(id(current))

            for reference in current.list_references():
                value = reference.resolve()
                if value is None:
                    continue
                if isinstance(value, StateNode):
                    slot = self._slot_of(value)
                    if slot == -1:
                        logger.warning(
                            "%s: reference '%s' points at state node '%s', which is not active in this state; "
                            "it will not be rebound on restore",
                            type(current).__name__, reference.name, value.id,
                        )
                        continue
                    if id(reference) not in known:
                        self._references.append((reference, slot))
                        known.add(id(reference))
                        added += 1
                elif isinstance(value, ReferenceHolder):
                    stack.append(value)

        logger.debug("Connected %s: %d references registered", type(holder).__name__, added)
        return added

    def _slot_of(self, node: StateNode) -> int:
        for i, active in enumerate(self.state_nodes):
            if active is node:
                return i
        return -1

    def get_connected_references(self) -> List[Tuple[Reference, int]]:
        return list(self._references)

    # ==================== Checkpointing ====================

    def store(self) -> None:
        """
        Take a deep copy of every active node as the new checkpoint.

        Raises:
            StateNodeCopyError: If a node fails to copy.
        """
        if len(self.stored_state_nodes) != len(self.state_nodes):
            raise StateError("State was modified after initialize(); checkpoint length does not match.")
        for i, node in enumerate(self.state_nodes):
            self.stored_state_nodes[i] = self._copy_node(i, node)
        self._has_checkpoint = True

    def restore(self) -> None:
        """
        Make the checkpoint active and rebind every registered reference to it.

        The checkpoint objects themselves become active, so another store()
        is needed before the next restore().

        Raises:
            StateError: If there is no checkpoint to restore.
        """
        if not self._has_checkpoint:
            raise StateError("restore() called without a preceding store().")
        if len(self.stored_state_nodes) != len(self.state_nodes):
            raise StateError("State was modified after initialize(); checkpoint length does not match.")

        for i in range(len(self.state_nodes)):
            self.state_nodes[i] = self.stored_state_nodes[i]
        for reference, slot in self._references:
            reference.rebind(self.state_nodes[slot])
        self._has_checkpoint = False

    def has_checkpoint(self) -> bool:
        return self._has_checkpoint

    def copy(self) -> "State":
        """
        Return an independent State holding deep copies of the active nodes.

        The copy has no connected references and no checkpoint.

        Raises:
            StateNodeCopyError: If a node fails to copy.
        """
        return State([self._copy_node(i, node) for i, node in enumerate(self.state_nodes)])

    @staticmethod
    def _copy_node(slot: int, node: StateNode) -> StateNode:
        try:
            return node.copy()
        except Exception as exc:
            raise StateNodeCopyError(slot, getattr(node, "id", None), str(exc)) from exc

    # ==================== Lookup ====================

    def get_state_node_index(self, id: str) -> int:
        """Slot index of the node with the given id, -1 if there is none."""
        for i, node in enumerate(self.state_nodes):
            if node.id == id:
                return i
        return -1

    def _resolve_slot(self, key: NodeKey) -> int:
        if isinstance(key, Reference):
            key = key.resolve()
        if isinstance(key, StateNode):
            slot = key.index
            if not 0 <= slot < len(self.state_nodes) or self.state_nodes[slot].id != key.id:
                raise KeyError(f"State node '{key.id}' does not belong to this state.")
            return slot
        if isinstance(key, str):
            slot = self.get_state_node_index(key)
            if slot == -1:
                raise KeyError(f"No state node with id '{key}'.")
            return slot
        slot = int(key)
        # -1 is the not-found sentinel of get_state_node_index, never a valid slot
        if not 0 <= slot < len(self.state_nodes):
            raise IndexError(f"Slot {slot} out of range for a state with {len(self.state_nodes)} nodes.")
        return slot

    def get_state_node(self, key: NodeKey) -> StateNode:
        """Active node for a slot index, an id or a Reference."""
        return self.state_nodes[self._resolve_slot(key)]

    def is_dirty(self, key: NodeKey) -> bool:
        """Dirty flag of the active node for a slot index, Reference or StateNode."""
        return self.state_nodes[self._resolve_slot(key)].is_dirty()

    def set_dirty(self, is_dirty: bool) -> None:
        """Set the dirty flag of every node."""
        for node in self.state_nodes:
            node.set_dirty(is_dirty)

    def get_node_count(self) -> int:
        return len(self.state_nodes)

    def validate(self) -> None:
        """
        Check the slot invariants.

        Raises:
            StateError: If the checkpoint length or any slot index is inconsistent.
        """
        if len(self.stored_state_nodes) != len(self.state_nodes):
            raise StateError(
                f"Checkpoint holds {len(self.stored_state_nodes)} nodes, state holds {len(self.state_nodes)}."
            )
        for i, node in enumerate(self.state_nodes):
            if node.index != i:
                raise StateError(f"State node '{node.id}' in slot {i} has index {node.index}.")

    def __len__(self) -> int:
        return len(self.state_nodes)

    def __iter__(self) -> Iterator[StateNode]:
        return iter(self.state_nodes)

    def __str__(self) -> str:
        return "\n".join(str(node) for node in self.state_nodes)

    def __repr__(self) -> str:
        ids = ", ".join(node.id for node in self.state_nodes)
        return f"State(nodes=[{ids}], references={len(self._references)})"
