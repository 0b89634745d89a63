"""
Lexical Scopes

Every Program, function and catch clause gets an `env` mapping each name
declared in it to the node that declares it. Function declarations and
`var` declarators hoist to the nearest enclosing function or Program; a
catch clause only binds its parameter.
"""

from typing import Optional

from ..utils.config import ARGUMENTS_BINDING
from .ast_utils import children
from .nodes import SCOPE_TYPES, Identifier, Node


def build_envs(root: Node) -> None:
    """Annotate every scope node below `root` with its `env`. Run once per file."""
    _visit(root, None)


def _visit(node: Node, var_scope: Optional[Node]) -> None:
    kind = node.type
    if kind == "Program":
        node.env = {}
        var_scope = node
    elif kind == "FunctionDeclaration":
        if var_scope is not None:
            var_scope.env.setdefault(node.id.name, node.id)
        _open_function_scope(node)
        var_scope = node
    elif kind == "FunctionExpression":
        _open_function_scope(node)
        if node.id is not None:
            node.env.setdefault(node.id.name, node.id)
        var_scope = node
    elif kind == "CatchClause":
        node.env = {node.param.name: node.param}
    elif kind == "VariableDeclarator":
        if var_scope is not None:
            var_scope.env.setdefault(node.id.name, node.id)
    for child in children(node):
        _visit(child, var_scope)


def _open_function_scope(fun: Node) -> None:
    fun.env = {}
    for param in fun.params:
        fun.env.setdefault(param.name, param)
    fun.env.setdefault(ARGUMENTS_BINDING, fun)


def get_var_decl_scope(node: Identifier) -> Optional[Node]:
    """
    Nearest Program, function or catch clause whose env declares the
    identifier's name, or None when nothing declares it (implicit global).
    """
    name = node.name
    scope = node.parent
    # A function declaration's name lives in the scope around it, not in its body.
    if scope is not None and scope.type == "FunctionDeclaration" and scope.id is node:
        scope = scope.parent
    while scope is not None:
        if scope.type in SCOPE_TYPES and scope.env is not None and name in scope.env:
            return scope
        scope = scope.parent
    return None


def declares(scope: Node, name: str) -> bool:
    return scope.env is not None and name in scope.env
