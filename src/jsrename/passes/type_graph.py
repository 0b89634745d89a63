"""
Union-Find Type Graph

Structural types are equivalence classes of TypeNodes. Each class has a
representative (root) that owns the property map and the namespace flag;
non-root nodes only point towards their root.

Merging two classes merges their property maps too. Properties present on
both sides are not unified on the spot but queued, so cyclic property
graphs (`a.self = a`) never recurse; `TypeUnifier.complete()` drains the
queue to a fixed point.
"""

import logging
from typing import Dict, List

from ..shared.errors import NonStringPropertyError

logger = logging.getLogger("jsrename.passes.type_graph")


class TypeGraph:
    """Arena that allocates TypeNodes with ids that are stable for one inference run."""

    def __init__(self) -> None:
        self.nodes: List["TypeNode"] = []

    def new_node(self) -> "TypeNode":
        node = TypeNode(self, len(self.nodes) + 1)
        self.nodes.append(node)
        return node

    def __len__(self) -> int:
        return len(self.nodes)


class TypeNode:
    __slots__ = ("graph", "id", "parent", "rank", "prty", "namespace")

    def __init__(self, graph: TypeGraph, node_id: int) -> None:
        self.graph = graph
        self.id = node_id
        self.parent: "TypeNode" = self
        self.rank = 0
        self.prty: Dict[str, "TypeNode"] = {}
        self.namespace = False

    def rep(self) -> "TypeNode":
        """Representative of this node's class, compressing the path on the way."""
        root = self
        while root.parent is not root:
            root = root.parent
        node = self
        while node.parent is not root:
            node.parent, node = root, node.parent
        return root

    def get_prty(self, name: str) -> "TypeNode":
        """Type of property `name`, created on first use. Always returns a root."""
        if not isinstance(name, str):
            raise NonStringPropertyError(name)
        root = self.rep()
        t = root.prty.get(name)
        if t is None:
            t = self.graph.new_node()
            root.prty[name] = t
        return t.rep()

    def __repr__(self) -> str:
        return f"TypeNode(id={self.id}, rep={self.rep().id})"


class TypeUnifier:
    """Union by rank with a LIFO queue of deferred property unifications."""

    def __init__(self) -> None:
        self.queue: List[TypeNode] = []

    def unify(self, x: TypeNode, y: TypeNode) -> None:
        x = x.rep()
        y = y.rep()
        if x is y:
            return
        if x.rank < y.rank:
            x, y = y, x
        elif x.rank == y.rank:
            x.rank += 1
        y.parent = x
        x.namespace = x.namespace or y.namespace
        for name, t in y.prty.items():
            existing = x.prty.get(name)
            if existing is not None:
                self.unify_later(existing, t)
            else:
                x.prty[name] = t
        # y is no longer a root; its own fields must not be read again
        y.rank = 0
        y.prty = {}
        y.namespace = False

    def unify_later(self, x: TypeNode, y: TypeNode) -> None:
        if x is not y:
            self.queue.append(x)
            self.queue.append(y)

    def complete(self) -> None:
        merged = 0
        queue = self.queue
        while queue:
            x = queue.pop()
            y = queue.pop()
            self.unify(x, y)
            merged += 1
        if merged:
            logger.debug(f"completed {merged} deferred unifications")
