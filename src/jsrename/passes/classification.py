"""
Identifier Classification

Decides from its syntactic position whether an identifier token names a
variable, a property or a label. Requires parent pointers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..shared.errors import JsRenameImplementationError
from ..shared.nodes import Identifier, Literal, Node


class IdKind(Enum):
    VARIABLE = "variable"
    PROPERTY = "property"
    LABEL = "label"


@dataclass(frozen=True)
class IdClass:
    """
    Classification of one token.

    `base` is the object expression for properties (the member expression's
    object, or the object literal holding the key) and None otherwise.
    """
    kind: IdKind
    name: str
    base: Optional[Node] = None


def token_name(node: Node) -> Optional[str]:
    """Spelling of an identifier token: an Identifier's name or a string literal's value."""
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, Literal) and node.is_string:
        return node.value
    return None


def classify_id(node: Node) -> Optional[IdClass]:
    """
    Classify an Identifier or string Literal by looking at its parent.

    Returns None for any other node, and for a string literal that is not
    a property name (a plain string value is not an identifier token).
    """
    name = token_name(node)
    if name is None:
        return None
    parent = node.parent
    if parent is None:
        raise JsRenameImplementationError(f"classify_id requires parent pointers ({node.type} {name!r})")

    kind = parent.type
    if kind == "MemberExpression" and parent.property is node:
        if not parent.computed or isinstance(node, Literal):
            return IdClass(IdKind.PROPERTY, name, parent.object)
    elif kind == "Property" and parent.key is node:
        return IdClass(IdKind.PROPERTY, name, parent.parent)
    elif kind in ("BreakStatement", "ContinueStatement", "LabeledStatement") and parent.label is node:
        return IdClass(IdKind.LABEL, name)

    if isinstance(node, Identifier):
        return IdClass(IdKind.VARIABLE, name)
    return None
