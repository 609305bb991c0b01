"""
Exception hierarchy for the mcstate package.

Configuration problems are raised while objects are being built so that a
badly wired model fails before the first iteration. Invariant violations of
the checkpoint protocol are raised as StateError.
"""

from typing import Optional


class McstateError(Exception):
    """Base class for all mcstate errors."""


class ConfigurationError(McstateError, ValueError):
    """Raised when a component is constructed with invalid or conflicting options."""


class StateError(McstateError, RuntimeError):
    """Raised when the store/restore invariants of a State are violated."""


class StateNodeCopyError(StateError):
    """
    Raised when a state node cannot be copied during store() or copy().

    Attributes:
        slot (int): Slot index of the offending node in its State.
        node_id (str): Identifier of the offending node.
    """

    def __init__(self, slot: int, node_id: Optional[str], reason: str = ""):
        self.slot = slot
        self.node_id = node_id
        message = f"Failed to copy state node '{node_id}' in slot {slot}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
