"""
Tests for the checkpointing State
"""

import logging

import numpy as np
import pytest

from mcstate.core.errors import ConfigurationError, StateError, StateNodeCopyError
from mcstate.core.parameter import IntegerParameter, RealParameter
from mcstate.core.reference import Component, Reference
from mcstate.core.state import State
from mcstate.core.tree import Tree


# --------------------------------------------------
# Helpers
# --------------------------------------------------
class Holder(Component):
    """Component holding references to two state nodes."""

    def __init__(self, x, k):
        self.x = Reference("x", x)
        self.k = Reference("k", k)


class Outer(Component):
    """Component that only reaches the state through another component."""

    def __init__(self, inner):
        self.inner = Reference("inner", inner)


class BrokenNode(RealParameter):
    """Node whose copy always fails."""

    def _copy(self):
        raise RuntimeError("inconsistent internal state")


# --------------------------------------------------
# Fixtures
# --------------------------------------------------
@pytest.fixture
def x():
    return RealParameter("x", [0.5, 1.0, 1.5], lower=0.0, upper=10.0)


@pytest.fixture
def k():
    return IntegerParameter("k", [3, 4], lower=0, upper=100)


@pytest.fixture
def tree():
    return Tree("tree", parents=[2, 2, -1], heights=[0.0, 0.0, 1.0], labels=["a", "b", ""])


@pytest.fixture
def state(x, k, tree):
    return State([x, k, tree])


# --------------------------------------------------
# Construction
# --------------------------------------------------
def test_initialize_assigns_slot_indices(state):
    """Nodes get slot indices in construction order."""
    assert [node.index for node in state] == [0, 1, 2]
    assert len(state.stored_state_nodes) == len(state.state_nodes) == 3
    assert all(node is None for node in state.stored_state_nodes)
    state.validate()


def test_add_state_node_then_initialize(x, k):
    """Nodes added after construction get a slot once initialize() is called."""
    state = State()
    state.add_state_node(x)
    state.add_state_node(k)
    state.initialize()
    assert state.get_node_count() == 2
    assert k.index == 1


def test_add_state_node_rejects_duplicate_id(x):
    state = State([x])
    with pytest.raises(ConfigurationError):
        state.add_state_node(RealParameter("x", 1.0))


def test_add_state_node_rejects_non_nodes():
    with pytest.raises(TypeError):
        State([np.zeros(3)])


def test_get_state_node_index(state):
    """Lookup by id returns the slot, or -1 for unknown ids."""
    assert state.get_state_node_index("k") == 1
    assert state.get_state_node_index("tree") == 2
    assert state.get_state_node_index("missing") == -1


def test_get_state_node_by_key(state, x):
    assert state.get_state_node(0) is x
    assert state.get_state_node("x") is x
    assert state.get_state_node(Reference("x", x)) is x
    with pytest.raises(KeyError):
        state.get_state_node("missing")


@pytest.mark.parametrize("slot", [-1, 3, 10])
def test_get_state_node_rejects_out_of_range_slot(state, slot):
    """-1 is the not-found sentinel, so it must not wrap around to the last node."""
    with pytest.raises(IndexError):
        state.get_state_node(slot)


def test_missing_id_index_is_not_a_slot(state):
    with pytest.raises(IndexError):
        state.get_state_node(state.get_state_node_index("missing"))
    with pytest.raises(IndexError):
        state.is_dirty(-1)


def test_foreign_node_lookup_raises(state):
    stranger = RealParameter("z", [0.0])
    with pytest.raises(KeyError):
        state.get_state_node(stranger)
    with pytest.raises(KeyError):
        state.is_dirty(stranger)
    with pytest.raises(KeyError):
        state.get_state_node(Reference("z", stranger))


def test_node_from_other_state_raises(state):
    """A node whose slot index is valid here but names a different node is rejected."""
    other = State([RealParameter("y", [1.0])])
    with pytest.raises(KeyError):
        state.is_dirty(other.get_state_node("y"))


# --------------------------------------------------
# Store / restore
# --------------------------------------------------
def test_store_takes_independent_copies(state, x):
    """Mutating an active node after store() leaves the checkpoint untouched."""
    state.store()
    x.set_value(0, 9.0)
    stored = state.stored_state_nodes[0]
    assert stored is not x
    assert stored.get_value(0) == 0.5
    assert stored.index == 0


def test_round_trip_restores_values(state, x, k, tree):
    """store(); mutate; restore() gives back the stored values."""
    before = [x.get_values(), k.get_values(), tree.heights.copy()]
    state.store()

    x.set_value(1, 7.0)
    x.set_value(2, 8.0)
    k.set_value(0, 50)
    tree.set_height(2, 3.0)

    state.restore()
    assert np.array_equal(state.get_state_node("x").get_values(), before[0])
    assert np.array_equal(state.get_state_node("k").get_values(), before[1])
    assert np.array_equal(state.get_state_node("tree").heights, before[2])
    state.validate()


def test_restore_swaps_objects(state, x):
    """restore() replaces the slot objects instead of writing into them."""
    state.store()
    x.set_value(0, 2.0)
    state.restore()
    assert state.get_state_node(0) is not x
    # the rejected object itself keeps the rejected value
    assert x.get_value(0) == 2.0


def test_restore_without_store_raises(state):
    with pytest.raises(StateError):
        state.restore()


def test_second_restore_needs_new_store(state):
    state.store()
    state.restore()
    with pytest.raises(StateError):
        state.restore()


def test_repeated_cycles(state):
    """Accepted changes become the base for the next checkpoint."""
    x_ref = Reference("x", state.get_state_node("x"))
    state.connect(Outer(Holder(x_ref.resolve(), None)))

    state.store()
    state.get_state_node("x").set_value(0, 4.0)
    # accept: nothing to do, next store supersedes the old checkpoint
    state.store()
    state.get_state_node("x").set_value(0, 6.0)
    state.restore()
    assert state.get_state_node("x").get_value(0) == 4.0


def test_store_copy_failure_names_slot_and_id(x):
    state = State([x, BrokenNode("bad", [1.0])])
    with pytest.raises(StateNodeCopyError) as excinfo:
        state.store()
    assert excinfo.value.slot == 1
    assert excinfo.value.node_id == "bad"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert "bad" in str(excinfo.value)


def test_store_and_restore_out_of_bounds_value():
    """Operators may leave a value outside the bounds; checkpointing must not choke on it."""
    p = RealParameter("p", [0.5], lower=0.0, upper=1.0)
    state = State([p])
    p.set_value(0, 2.0)

    state.store()
    state.get_state_node("p").set_value(0, 0.25)
    state.restore()
    assert state.get_state_node("p").get_value(0) == 2.0

    duplicate = state.copy()
    assert duplicate.get_state_node("p").get_value(0) == 2.0


def test_store_tree_with_broken_height_order(tree):
    state = State([tree])
    tree.set_height(0, 5.0)
    state.store()
    state.restore()
    assert state.get_state_node("tree").get_height(0) == 5.0


def test_store_after_adding_without_initialize_raises(state):
    state.add_state_node(RealParameter("late", 1.0))
    with pytest.raises(StateError):
        state.store()


# --------------------------------------------------
# References
# --------------------------------------------------
def test_connect_registers_references(state, x, k):
    holder = Holder(x, k)
    assert state.connect(holder) == 2
    assert len(state.get_connected_references()) == 2


def test_connect_is_idempotent(state, x, k):
    holder = Holder(x, k)
    state.connect(holder)
    assert state.connect(holder) == 0


def test_connect_recurses_into_components(state, x, k):
    """References reached through nested components are registered too."""
    holder = Holder(x, k)
    assert state.connect(Outer(Outer(holder))) == 2


def test_connect_handles_cycles(state, x):
    a = Outer(None)
    b = Outer(a)
    a.inner.rebind(b)
    a.x = Reference("x", x)
    assert state.connect(a) == 1


def test_connect_ignores_foreign_nodes(state):
    stranger = RealParameter("x", 1.0)
    assert state.connect(Holder(stranger, None)) == 0


def test_connect_warns_about_inactive_nodes(state, x):
    """A reference to a node that is no longer active is skipped with a warning naming it."""
    records = []

    class ListHandler(logging.Handler):
        def emit(self, record):
            records.append(record)

    handler = ListHandler(logging.DEBUG)
    state_logger = logging.getLogger("mcstate.core.state")
    state_logger.addHandler(handler)
    try:
        state.store()
        state.restore()
        # x was swapped out by restore(), so it is stale
        assert state.connect(Holder(x, None)) == 0
    finally:
        state_logger.removeHandler(handler)

    warnings = [r for r in records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "'x'" in warnings[0].getMessage()
    assert "Holder" in warnings[0].getMessage()


def test_references_follow_restore(state, x, k):
    """After restore() every reference sees the stored values, not the rejected ones."""
    holder = Holder(x, k)
    state.connect(Outer(holder))

    state.store()
    holder.x.resolve().set_value(0, 9.5)
    holder.k.resolve().set_value(1, 77)
    assert holder.x.resolve().get_value(0) == 9.5

    state.restore()
    assert holder.x.resolve() is state.get_state_node("x")
    assert holder.k.resolve() is state.get_state_node("k")
    assert holder.x.resolve().get_value(0) == 0.5
    assert holder.k.resolve().get_value(1) == 4


def test_unconnected_reference_goes_stale(state, x):
    """A reference the State does not know about still points at the rejected node."""
    loose = Reference("x", x)
    state.store()
    x.set_value(0, 3.0)
    state.restore()
    assert loose.resolve() is x
    assert loose.resolve().get_value(0) == 3.0


# --------------------------------------------------
# Dirty flags
# --------------------------------------------------
def test_is_dirty_by_slot_reference_and_node(state, x, k):
    state.set_dirty(False)
    x.set_value(0, 1.0)
    assert state.is_dirty(0)
    assert state.is_dirty(Reference("x", x))
    assert state.is_dirty(x)
    assert not state.is_dirty(1)
    assert not state.is_dirty(k)


def test_set_dirty_propagates(state):
    state.set_dirty(True)
    assert all(node.is_dirty() for node in state)
    state.set_dirty(False)
    assert not any(node.is_dirty() for node in state)


# --------------------------------------------------
# Copy
# --------------------------------------------------
def test_copy_is_independent(state, x):
    duplicate = state.copy()
    assert duplicate.get_node_count() == state.get_node_count()
    assert duplicate.get_state_node("x") is not x

    duplicate.get_state_node("x").set_value(0, 5.0)
    assert x.get_value(0) == 0.5
    assert duplicate.get_connected_references() == []
    duplicate.validate()


def test_copy_failure_raises(x):
    state = State([BrokenNode("bad", [1.0]), x])
    with pytest.raises(StateNodeCopyError) as excinfo:
        state.copy()
    assert excinfo.value.slot == 0


def test_str_lists_every_node(state):
    text = str(state)
    assert len(text.splitlines()) == 3
    assert text.splitlines()[0].startswith("x[3]")
    assert "x" in repr(state)
