"""
Renaming Groups

Four strategies, picked by classifying the token under the cursor:

- local variable: scope search from the declaring function or catch clause
- global variable: every file, plus properties of the global object
- label: the labelled statement's body
- property: every file, one group per type of the accessed object

Local and label renaming only need scopes. Global and property renaming
run type inference over the whole collection first.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..shared.ast_utils import children, get_enclosing_function, get_node_file
from ..shared.errors import JsRenameImplementationError
from ..shared.nodes import FUNCTION_TYPES, Identifier, Literal, Node
from ..shared.scope import declares, get_var_decl_scope
from ..shared.source_location import Range
from ..utils.config import (
    KIND_GLOBAL, KIND_LABEL, KIND_LOCAL, KIND_PROPERTY, STRING_QUOTE_DELTA,
)
from .classification import IdKind, classify_id
from .type_inference import expression_type, infer_types

logger = logging.getLogger("jsrename.passes.renaming")

SHADOWING_SCOPES = FUNCTION_TYPES + ("CatchClause",)


@dataclass
class RenameResult:
    """Ordered, disjoint rename groups computed by one strategy."""
    kind: str
    groups: List[List[Range]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.groups)


def identifier_range(node: Node) -> Range:
    """Range of an identifier token; string-literal keys exclude their quotes."""
    delta = STRING_QUOTE_DELTA if isinstance(node, Literal) else 0
    return Range.from_location(get_node_file(node) or node.location.file, node.location, delta)


def _ranges(nodes: List[Node]) -> List[Range]:
    return [identifier_range(node) for node in nodes]


def _is_global_scope(scope: Optional[Node]) -> bool:
    return scope is None or scope.type == "Program"


# =============================================================================
# LOCAL VARIABLES
# =============================================================================

def compute_local_variable_renaming(id_node: Identifier) -> RenameResult:
    """
    Occurrences of a function- or catch-scoped variable.

    The search starts at the declaring scope and stops at nested scopes that
    redeclare the name. A shadowing function declaration's own name still
    belongs to the outer scope and is collected before the cutoff. `with`
    bodies are searched like any other block.
    """
    name = id_node.name
    scope = get_var_decl_scope(id_node)
    if _is_global_scope(scope):
        raise JsRenameImplementationError(f"'{name}' is not a local variable")
    ids: List[Node] = []

    def visit(node: Node) -> None:
        if node.type == "Identifier":
            if node.name == name and classify_id(node).kind is IdKind.VARIABLE:
                ids.append(node)
        elif node.type in SHADOWING_SCOPES and declares(node, name):
            if node.type == "FunctionDeclaration" and node.id.name == name:
                ids.append(node.id)
            return
        for child in children(node):
            visit(child)

    for child in children(scope):
        # the declaring function's own name is bound outside it
        if scope.type == "FunctionDeclaration" and child is scope.id:
            continue
        visit(child)
    return RenameResult(KIND_LOCAL, [_ranges(ids)])


# =============================================================================
# GLOBAL VARIABLES
# =============================================================================

def compute_global_variable_renaming(root: Node, name: str) -> RenameResult:
    infer_types(root)
    return _global_variable_renaming(root, name)


def _global_variable_renaming(root: Node, name: str) -> RenameResult:
    """
    Unshadowed references to `name` in every file, plus property tokens
    whose base is the global object (`this.name` at top level). Both kinds
    go into a single group.
    """
    global_rep = root.global_type.rep()
    ids: List[Node] = []

    def visit(node: Node, shadowed: bool) -> None:
        if node.type in ("Identifier", "Literal"):
            clazz = classify_id(node)
            if clazz is not None and clazz.name == name:
                if clazz.kind is IdKind.VARIABLE and not shadowed:
                    ids.append(node)
                elif clazz.kind is IdKind.PROPERTY and expression_type(root, clazz.base).rep() is global_rep:
                    ids.append(node)
        elif node.type in SHADOWING_SCOPES and declares(node, name):
            if not shadowed and node.type == "FunctionDeclaration" and node.id.name == name:
                ids.append(node.id)  # bound outside the function
            shadowed = True
        for child in children(node):
            visit(child, shadowed)

    visit(root, False)
    return RenameResult(KIND_GLOBAL, [_ranges(ids)])


# =============================================================================
# LABELS
# =============================================================================

def get_label_decl(label: Identifier) -> Optional[Node]:
    """
    The LabeledStatement declaring `label`, found by walking up from it.
    None when a function or Program boundary is reached first.
    """
    name = label.name
    node = label.parent
    while node is not None:
        if node.type == "LabeledStatement" and node.label.name == name:
            return node
        if node.type in FUNCTION_TYPES or node.type == "Program":
            return None
        node = node.parent
    return None


def compute_label_renaming(label: Identifier) -> RenameResult:
    """The label declaration and every break/continue that targets it."""
    name = label.name
    decl = get_label_decl(label)
    ids: List[Node] = []

    def visit(node: Node) -> None:
        if node.type == "LabeledStatement" and node.label.name == name:
            return  # shadowed
        if node.type in FUNCTION_TYPES:
            return  # labels do not cross functions
        if node.type in ("BreakStatement", "ContinueStatement"):
            if node.label is not None and node.label.name == name:
                ids.append(node.label)
        for child in children(node):
            visit(child)

    if decl is None:
        # undeclared label: search the enclosing function
        search = get_enclosing_function(label)
        for child in children(search) if search is not None else ():
            visit(child)
    else:
        ids.append(decl.label)
        visit(decl.body)
    return RenameResult(KIND_LABEL, [_ranges(ids)])


# =============================================================================
# PROPERTIES
# =============================================================================

def compute_property_renaming(root: Node, name: str) -> RenameResult:
    infer_types(root)
    return _property_renaming(root, name)


def _property_renaming(root: Node, name: str) -> RenameResult:
    """
    Property tokens spelled `name`, grouped by the representative type of
    their base expression. Properties of the global object are left to
    global renaming. Groups come out in ascending representative id.
    """
    global_rep = root.global_type.rep()
    members: Dict[int, List[Node]] = defaultdict(list)

    def visit(node: Node) -> None:
        if node.type in ("Identifier", "Literal"):
            clazz = classify_id(node)
            if clazz is not None and clazz.kind is IdKind.PROPERTY and clazz.name == name:
                rep = expression_type(root, clazz.base).rep()
                if rep is not global_rep:
                    members[rep.id].append(node)
        for child in children(node):
            visit(child)

    visit(root)
    groups = [_ranges(members[key]) for key in sorted(members)]
    logger.debug(f"property '{name}': {sum(len(g) for g in groups)} occurrences in {len(groups)} groups")
    return RenameResult(KIND_PROPERTY, groups)


# =============================================================================
# DISPATCH
# =============================================================================

def compute_renaming(root: Node, id_node: Node) -> Optional[RenameResult]:
    """
    Rename groups for the token `id_node`, or None when it is not an
    identifier token.
    """
    clazz = classify_id(id_node)
    if clazz is None:
        return None
    if clazz.kind is IdKind.LABEL:
        return compute_label_renaming(id_node)
    if clazz.kind is IdKind.VARIABLE:
        if _is_global_scope(get_var_decl_scope(id_node)):
            return compute_global_variable_renaming(root, clazz.name)
        return compute_local_variable_renaming(id_node)

    infer_types(root)
    if expression_type(root, clazz.base).rep() is root.global_type.rep():
        return _global_variable_renaming(root, clazz.name)
    return _property_renaming(root, clazz.name)
