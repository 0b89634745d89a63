"""
Shared components: AST nodes, source locations, scopes and errors.
"""

from .source_location import SourceLocation, Position, Range, LineIndex
from .errors import (
    Error, ErrorReporter, JsRenameError, JsSourceError, DuplicateFileError,
    JsRenameImplementationError, UnsupportedNodeError, NonStringPropertyError,
)
from .nodes import (
    Node, Program, ProgramCollection,
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
    FUNCTION_TYPES, SCOPE_TYPES, NODE_CLASSES,
)
from .ast_utils import (
    children, walk, inject_parent_pointers, find_node_at, find_ast_for_file,
    iter_programs, get_enclosing_function, get_node_file,
)
from .scope import build_envs, get_var_decl_scope, declares
from .estree import from_estree
