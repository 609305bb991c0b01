"""
Rooted tree state node.

The topology is stored as an array of parent indices (-1 for the root) and
the node ages as an array of heights. Children never sit above their parent.
"""

import copy
from typing import List, Optional, Sequence

import numpy as np

from mcstate.core.statenode import StateNode


class Tree(StateNode):
    """
    Rooted tree with node heights.

    Attributes:
        parents (np.ndarray): Parent index of every node, -1 for the root.
        heights (np.ndarray): Height of every node.
        labels (List[str]): Leaf labels, by node index; internal nodes get "".
    """

    def __init__(self, id: str, parents: Sequence[int], heights: Sequence[float], labels: Optional[Sequence[str]] = None):
        super().__init__(id)
        self.parents = np.asarray(parents, dtype=np.int64).copy()
        self.heights = np.asarray(heights, dtype=np.float64).copy()
        if self.parents.ndim != 1 or self.parents.shape != self.heights.shape:
            raise ValueError("parents and heights must be 1-D arrays of equal length.")
        if self.parents.size == 0:
            raise ValueError(f"Tree '{id}' needs at least one node.")

        n = self.parents.size
        if labels is None:
            labels = [""] * n
        if len(labels) != n:
            raise ValueError(f"Tree '{id}' has {n} nodes but {len(labels)} labels.")
        self.labels = list(labels)

        self._children = self._build_children()
        self._validate()

    def _build_children(self) -> List[List[int]]:
        n = self.parents.size
        children: List[List[int]] = [[] for _ in range(n)]
        for i, p in enumerate(self.parents):
            if p == -1:
                continue
            if not 0 <= p < n or p == i:
                raise ValueError(f"Node {i} of tree '{self.id}' has invalid parent {p}.")
            children[p].append(i)
        return children

    def _validate(self) -> None:
        roots = np.flatnonzero(self.parents == -1)
        if roots.size != 1:
            raise ValueError(f"Tree '{self.id}' must have exactly one root, found {roots.size}.")
        self._root = int(roots[0])

        # every node must be reachable from the root, otherwise there is a cycle
        seen = np.zeros(self.parents.size, dtype=bool)
        stack = [self._root]
        while stack:
            node = stack.pop()
            seen[node] = True
            stack.extend(self._children[node])
        if not seen.all():
            raise ValueError(f"Tree '{self.id}' contains a cycle.")

        for i, p in enumerate(self.parents):
            if p != -1 and self.heights[i] > self.heights[p]:
                raise ValueError(f"Node {i} of tree '{self.id}' is higher than its parent {p}.")

    def get_dimension(self) -> int:
        return self.parents.size

    def get_node_count(self) -> int:
        return self.parents.size

    def get_leaf_count(self) -> int:
        return sum(1 for c in self._children if not c)

    def get_root(self) -> int:
        return self._root

    def get_parent(self, i: int) -> int:
        return int(self.parents[i])

    def get_children(self, i: int) -> List[int]:
        return list(self._children[i])

    def is_leaf(self, i: int) -> bool:
        return not self._children[i]

    def get_height(self, i: int) -> float:
        return float(self.heights[i])

    def set_height(self, i: int, height: float) -> None:
        """Move node i to a new height and mark the tree dirty."""
        self.heights[i] = height
        self._dirty = True

    def _copy(self) -> "Tree":
        # set_height may have broken the height ordering, so skip __init__ validation
        node = copy.copy(self)
        node.parents = self.parents.copy()
        node.heights = self.heights.copy()
        node.labels = list(self.labels)
        node._children = [list(c) for c in self._children]
        return node

    def __str__(self) -> str:
        return f"{self.id}: {self.to_newick()}"

    def to_newick(self) -> str:
        """Newick string with branch lengths derived from the heights."""

        def render(i: int) -> str:
            if self.is_leaf(i):
                text = self.labels[i] or str(i)
            else:
                text = "(" + ",".join(render(c) for c in self._children[i]) + ")"
            p = self.parents[i]
            if p != -1:
                text += f":{self.heights[p] - self.heights[i]:g}"
            return text

        return render(self._root) + ";"
