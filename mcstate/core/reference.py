"""
Indirect handles to state nodes and the components that hold them.

State.restore() puts different StateNode objects into the active slots, so a
component that kept the old object would keep reading the rejected values.
Components therefore never store a node directly: they store a Reference and
call resolve() whenever they need the node. The State rebinds every Reference
it knows about after each restore.

Components declare their references through list_references(). The State
walks these declarations, recursing into referenced components, to find every
Reference that points into its nodes.
"""

from typing import Any, List, Protocol, runtime_checkable

from mcstate.core.errors import ConfigurationError


class Reference:
    """
    Named, rebindable handle to a state node or another component.

    Attributes:
        name (str): Name of the option this reference fills (e.g. 'parameter').
        description (str): Human readable description.
        required (bool): Whether validate() fails when nothing is bound.
    """

    def __init__(self, name: str, value: Any = None, description: str = "", required: bool = False):
        self.name = name
        self.description = description
        self.required = required
        self._value = value

    def resolve(self) -> Any:
        """Return the currently bound value."""
        return self._value

    def rebind(self, value: Any) -> None:
        self._value = value

    def is_bound(self) -> bool:
        return self._value is not None

    def validate(self) -> None:
        if self.required and self._value is None:
            raise ConfigurationError(f"Option '{self.name}' is required but was not given.")

    def __repr__(self) -> str:
        return f"Reference(name={self.name!r}, value={self._value!r})"


@runtime_checkable
class ReferenceHolder(Protocol):
    """Anything that can list the references it holds."""

    def list_references(self) -> List[Reference]:
        ...


class Component:
    """
    Base class for objects wired to state nodes through references.

    Every Reference stored as an instance attribute is part of the
    component's declared dependencies, in assignment order.
    """

    def list_references(self) -> List[Reference]:
        return [value for value in vars(self).values() if isinstance(value, Reference)]

    def validate_references(self) -> None:
        """Raise ConfigurationError for any required reference left unbound."""
        for reference in self.list_references():
            reference.validate()
