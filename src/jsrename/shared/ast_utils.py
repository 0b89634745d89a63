"""
AST Utilities

Generic traversal helpers shared by every pass: child enumeration, parent
pointers, position lookup and file lookup inside a ProgramCollection.
"""

from dataclasses import fields
from typing import Iterator, List, Optional

from .nodes import FUNCTION_TYPES, Node, Program


def children(node: Node) -> List[Node]:
    """
    Immediate children of `node` in field declaration order.

    List-valued fields are flattened and None entries (array holes, absent
    optional children) are skipped. Does not recurse.
    """
    result: List[Node] = []
    for f in fields(node):
        if f.name == "location":
            continue
        value = getattr(node, f.name)
        if isinstance(value, Node):
            result.append(value)
        elif isinstance(value, list):
            result.extend(item for item in value if isinstance(item, Node))
    return result


def walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal of the subtree rooted at `node`."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(children(current)))


def inject_parent_pointers(node: Node) -> None:
    for current in walk(node):
        for child in children(current):
            child.parent = current


def find_node_at(node: Node, offset: int) -> Optional[Node]:
    """
    Most deeply nested node whose range contains `offset` (inclusive on both
    ends). The first matching child in declaration order wins ties.
    """
    if node.location is None or not node.location.contains(offset):
        return None
    current = node
    while True:
        for child in children(current):
            if child.location is not None and child.location.contains(offset):
                current = child
                break
        else:
            return current


def find_ast_for_file(root: Node, file: str) -> Optional[Program]:
    """Depth-first search of a Program/ProgramCollection tree for `file`."""
    if isinstance(root, Program):
        return root if root.file == file else None
    for program in getattr(root, "programs", ()):
        found = find_ast_for_file(program, file)
        if found is not None:
            return found
    return None


def iter_programs(root: Node) -> Iterator[Program]:
    if isinstance(root, Program):
        yield root
        return
    for program in getattr(root, "programs", ()):
        yield from iter_programs(program)


def get_enclosing_function(node: Node) -> Optional[Node]:
    """Nearest function or Program strictly above `node`."""
    node = node.parent
    while node is not None and node.type not in FUNCTION_TYPES and node.type != "Program":
        node = node.parent
    return node


def get_node_file(node: Node) -> Optional[str]:
    while node is not None and not isinstance(node, Program):
        node = node.parent
    return node.file if node is not None else None
