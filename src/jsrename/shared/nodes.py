"""
JavaScript AST Definitions

ESTree-shaped nodes for the ES5 subset the engine understands. The node set
is closed: every pass dispatches on `node.type` and treats anything else as
a structural error.

Dataclass fields are the syntactic children and attributes of a node.
Analysis state lives in plain instance attributes that are not fields, so
generic child enumeration never walks into it:

- `parent`:    enclosing node, set once by scope analysis
- `env`:       name -> declaring node, on Program, functions and catch clauses
- `type_node`: union-find element, rewritten by every inference run
- `env_type`:  name -> TypeNode, per function/catch scope during inference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional

from .source_location import SourceLocation


class Node:
    """Base class for all AST nodes"""
    type: ClassVar[str] = "Node"

    def __post_init__(self) -> None:
        self.parent: Optional[Node] = None
        self.env: Optional[Dict[str, Node]] = None
        self.type_node: Optional[Any] = None
        self.env_type: Optional[Dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Roots
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class Program(Node):
    type: ClassVar[str] = "Program"
    body: List[Node]
    file: str = ""
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class ProgramCollection(Node):
    """Tree of Programs (and nested collections) analysed together."""
    type: ClassVar[str] = "ProgramCollection"
    programs: List[Node] = field(default_factory=list)
    location: Optional[SourceLocation] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        self.global_type: Optional[Any] = None


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class EmptyStatement(Node):
    type: ClassVar[str] = "EmptyStatement"
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class BlockStatement(Node):
    type: ClassVar[str] = "BlockStatement"
    body: List[Node]
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class ExpressionStatement(Node):
    type: ClassVar[str] = "ExpressionStatement"
    expression: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class IfStatement(Node):
    type: ClassVar[str] = "IfStatement"
    test: Node
    consequent: Node
    alternate: Optional[Node] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class LabeledStatement(Node):
    type: ClassVar[str] = "LabeledStatement"
    label: Identifier
    body: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class BreakStatement(Node):
    type: ClassVar[str] = "BreakStatement"
    label: Optional[Identifier] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class ContinueStatement(Node):
    type: ClassVar[str] = "ContinueStatement"
    label: Optional[Identifier] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class WithStatement(Node):
    type: ClassVar[str] = "WithStatement"
    object: Node
    body: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class SwitchStatement(Node):
    type: ClassVar[str] = "SwitchStatement"
    discriminant: Node
    cases: List[SwitchCase]
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class SwitchCase(Node):
    """A `case test:` clause; `test` is None for `default:`."""
    type: ClassVar[str] = "SwitchCase"
    test: Optional[Node]
    consequent: List[Node]
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class ReturnStatement(Node):
    type: ClassVar[str] = "ReturnStatement"
    argument: Optional[Node] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class ThrowStatement(Node):
    type: ClassVar[str] = "ThrowStatement"
    argument: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class TryStatement(Node):
    type: ClassVar[str] = "TryStatement"
    block: BlockStatement
    handler: Optional[CatchClause] = None
    finalizer: Optional[BlockStatement] = None
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class CatchClause(Node):
    type: ClassVar[str] = "CatchClause"
    param: Identifier
    body: BlockStatement
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class WhileStatement(Node):
    type: ClassVar[str] = "WhileStatement"
    test: Node
    body: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class DoWhileStatement(Node):
    type: ClassVar[str] = "DoWhileStatement"
    body: Node
    test: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class ForStatement(Node):
    type: ClassVar[str] = "ForStatement"
    init: Optional[Node]
    test: Optional[Node]
    update: Optional[Node]
    body: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class ForInStatement(Node):
    type: ClassVar[str] = "ForInStatement"
    left: Node
    right: Node
    body: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class DebuggerStatement(Node):
    type: ClassVar[str] = "DebuggerStatement"
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class FunctionDeclaration(Node):
    type: ClassVar[str] = "FunctionDeclaration"
    id: Identifier
    params: List[Identifier]
    body: BlockStatement
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class VariableDeclaration(Node):
    type: ClassVar[str] = "VariableDeclaration"
    declarations: List[VariableDeclarator]
    kind: str = "var"
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class VariableDeclarator(Node):
    type: ClassVar[str] = "VariableDeclarator"
    id: Identifier
    init: Optional[Node] = None
    location: Optional[SourceLocation] = None


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ThisExpression(Node):
    type: ClassVar[str] = "ThisExpression"
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class ArrayExpression(Node):
    """Array literal; holes (`[1,,2]`) are None entries."""
    type: ClassVar[str] = "ArrayExpression"
    elements: List[Optional[Node]]
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class ObjectExpression(Node):
    type: ClassVar[str] = "ObjectExpression"
    properties: List[Property]
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class Property(Node):
    """Object literal entry; `kind` is "init", "get" or "set"."""
    type: ClassVar[str] = "Property"
    key: Node
    value: Node
    kind: str = "init"
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class FunctionExpression(Node):
    type: ClassVar[str] = "FunctionExpression"
    id: Optional[Identifier]
    params: List[Identifier]
    body: BlockStatement
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class SequenceExpression(Node):
    type: ClassVar[str] = "SequenceExpression"
    expressions: List[Node]
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class UnaryExpression(Node):
    type: ClassVar[str] = "UnaryExpression"
    operator: str
    argument: Node
    prefix: bool = True
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class BinaryExpression(Node):
    type: ClassVar[str] = "BinaryExpression"
    operator: str
    left: Node
    right: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class AssignmentExpression(Node):
    type: ClassVar[str] = "AssignmentExpression"
    operator: str
    left: Node
    right: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class UpdateExpression(Node):
    type: ClassVar[str] = "UpdateExpression"
    operator: str
    argument: Node
    prefix: bool
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class LogicalExpression(Node):
    type: ClassVar[str] = "LogicalExpression"
    operator: str
    left: Node
    right: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class ConditionalExpression(Node):
    type: ClassVar[str] = "ConditionalExpression"
    test: Node
    consequent: Node
    alternate: Node
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class CallExpression(Node):
    type: ClassVar[str] = "CallExpression"
    callee: Node
    arguments: List[Node]
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class NewExpression(Node):
    type: ClassVar[str] = "NewExpression"
    callee: Node
    arguments: List[Node]
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class MemberExpression(Node):
    type: ClassVar[str] = "MemberExpression"
    object: Node
    property: Node
    computed: bool = False
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class Identifier(Node):
    type: ClassVar[str] = "Identifier"
    name: str
    location: Optional[SourceLocation] = None


@dataclass(eq=False)
class Literal(Node):
    """
    Literal value. `value` holds the decoded Python value (str, float, int,
    bool or None). Regular expressions keep `value=None` and their source
    text in `regex`.
    """
    type: ClassVar[str] = "Literal"
    value: Any
    raw: str = ""
    regex: Optional[str] = None
    location: Optional[SourceLocation] = None

    @property
    def is_string(self) -> bool:
        return isinstance(self.value, str) and self.regex is None


FUNCTION_TYPES = ("FunctionDeclaration", "FunctionExpression")
SCOPE_TYPES = ("Program", "FunctionDeclaration", "FunctionExpression", "CatchClause")

NODE_CLASSES: Dict[str, type] = {
    cls.type: cls for cls in (
        Program, ProgramCollection,
        EmptyStatement, BlockStatement, ExpressionStatement, IfStatement,
        LabeledStatement, BreakStatement, ContinueStatement, WithStatement,
        SwitchStatement, SwitchCase, ReturnStatement, ThrowStatement,
        TryStatement, CatchClause, WhileStatement, DoWhileStatement,
        ForStatement, ForInStatement, DebuggerStatement,
        FunctionDeclaration, VariableDeclaration, VariableDeclarator,
        ThisExpression, ArrayExpression, ObjectExpression, Property,
        FunctionExpression, SequenceExpression, UnaryExpression,
        BinaryExpression, AssignmentExpression, UpdateExpression,
        LogicalExpression, ConditionalExpression, CallExpression,
        NewExpression, MemberExpression, Identifier, Literal,
    )
}
