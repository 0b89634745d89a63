"""
JavaScript AST Transformer
Converts the Lark parse tree into ESTree-shaped nodes
"""

import logging
from typing import Any, List, Optional, Union

from lark import Transformer, v_args
from lark.lexer import Token
from typing_extensions import TypeAlias

from ...shared import (
    ArrayExpression, BinaryExpression, BlockStatement, BreakStatement, CatchClause,
    ContinueStatement, DebuggerStatement, DoWhileStatement, EmptyStatement,
    ExpressionStatement, ForInStatement, ForStatement, FunctionDeclaration,
    FunctionExpression, Identifier, IfStatement, JsRenameImplementationError,
    JsSourceError, LabeledStatement, Literal, MemberExpression, NewExpression, Node,
    ObjectExpression, Program, Property, ReturnStatement, SourceLocation,
    SwitchCase, SwitchStatement, ThisExpression, ThrowStatement, TryStatement,
    VariableDeclaration, VariableDeclarator, WhileStatement, WithStatement,
)
from .expressions import ExpressionParser
from .functions import FunctionParser
from .literals import LiteralParser

# Lark Meta, or a Token: both carry line/column/start_pos/end_pos
LarkMeta: TypeAlias = Any

logger: logging.Logger = logging.getLogger(__name__)


@v_args(inline=True, meta=True)
class JsTransformer(Transformer):
    """
    ES5 AST Transformer

    One method per grammar rule or alias. Rules without a method are a
    mismatch between grammar and transformer and fail loudly instead of
    leaking Tree objects into the AST.
    """

    def __init__(self) -> None:
        super().__init__()
        self.literal_parser: LiteralParser = LiteralParser(self._extract_location)
        self.expression_parser: ExpressionParser = ExpressionParser(self._extract_location)
        self.function_parser: FunctionParser = FunctionParser(self._extract_location)
        self.current_file: str = ""  # Must be set by parser before use

    def __default__(self, data, children, meta):
        raise JsRenameImplementationError(
            f"Missing transformer method for grammar rule '{data}'"
        )

    def _extract_location(self, meta: LarkMeta) -> SourceLocation:
        """Location from a Lark meta object or token. Lark columns are 1-based."""
        if getattr(meta, "empty", False) or getattr(meta, "line", None) is None:
            return SourceLocation(file=self.current_file, line=1, column=0)
        return SourceLocation(
            file=self.current_file,
            line=meta.line,
            column=meta.column - 1,
            start=meta.start_pos,
            end=meta.end_pos,
            end_line=meta.end_line,
            end_column=meta.end_column - 1,
        )

    def _identifier(self, token: Token) -> Identifier:
        return Identifier(name=str(token), location=self._extract_location(token))

    def _optional_identifier(self, token: Optional[Token]) -> Optional[Identifier]:
        return self._identifier(token) if token is not None else None

    # =========================================================================
    # PROGRAM STRUCTURE
    # =========================================================================

    def program(self, meta: LarkMeta, *statements: Node) -> Program:
        return Program(body=list(statements), file=self.current_file,
                       location=self._extract_location(meta))

    def block(self, meta: LarkMeta, *statements: Node) -> BlockStatement:
        return BlockStatement(body=list(statements), location=self._extract_location(meta))

    # =========================================================================
    # DECLARATIONS
    # =========================================================================

    def variable_statement(self, meta: LarkMeta, declarations: List[VariableDeclarator]) -> VariableDeclaration:
        return VariableDeclaration(declarations=declarations, location=self._extract_location(meta))

    def variable_declaration_list(self, meta: LarkMeta, *declarations: VariableDeclarator) -> List[VariableDeclarator]:
        return list(declarations)

    def variable_declaration(self, meta: LarkMeta, name: Token, init: Optional[Node] = None) -> VariableDeclarator:
        return VariableDeclarator(id=self._identifier(name), init=init, location=self._extract_location(meta))

    def function_declaration(self, meta: LarkMeta, *parts: Any) -> FunctionDeclaration:
        """Grammar: "function" IDENT "(" formal_parameters? ")" block"""
        return self.function_parser.parse_declaration(meta, parts)

    def function_expression(self, meta: LarkMeta, *parts: Any) -> FunctionExpression:
        return self.function_parser.parse_expression(meta, parts)

    def formal_parameters(self, meta: LarkMeta, *names: Token) -> List[Identifier]:
        return [self._identifier(name) for name in names]

    # =========================================================================
    # STATEMENTS
    # =========================================================================

    def empty_statement(self, meta: LarkMeta) -> EmptyStatement:
        return EmptyStatement(location=self._extract_location(meta))

    def expression_statement(self, meta: LarkMeta, expression: Node) -> ExpressionStatement:
        return ExpressionStatement(expression=expression, location=self._extract_location(meta))

    def if_statement(self, meta: LarkMeta, test: Node, consequent: Node,
                     alternate: Optional[Node] = None) -> IfStatement:
        return IfStatement(test=test, consequent=consequent, alternate=alternate,
                           location=self._extract_location(meta))

    def do_while_statement(self, meta: LarkMeta, body: Node, test: Node) -> DoWhileStatement:
        return DoWhileStatement(body=body, test=test, location=self._extract_location(meta))

    def while_statement(self, meta: LarkMeta, test: Node, body: Node) -> WhileStatement:
        return WhileStatement(test=test, body=body, location=self._extract_location(meta))

    def for_statement(self, meta: LarkMeta, init: Optional[Node], test: Optional[Node],
                      update: Optional[Node], body: Node) -> ForStatement:
        return ForStatement(init=init, test=test, update=update, body=body,
                            location=self._extract_location(meta))

    def for_init(self, meta: LarkMeta, expression: Optional[Node] = None) -> Optional[Node]:
        return expression

    def for_var_init(self, meta: LarkMeta, declarations: List[VariableDeclarator]) -> VariableDeclaration:
        return VariableDeclaration(declarations=declarations, location=self._extract_location(meta))

    def for_test(self, meta: LarkMeta, expression: Optional[Node] = None) -> Optional[Node]:
        return expression

    def for_update(self, meta: LarkMeta, expression: Optional[Node] = None) -> Optional[Node]:
        return expression

    def for_in_statement(self, meta: LarkMeta, head: Node, body: Node) -> ForInStatement:
        """
        `for (lhs in obj)` arrives as a single `in` expression. Chained `in`
        operators associate to the left, so the loop variable is the leftmost
        operand and the rest is rebuilt as the iterated object.
        """
        if not (isinstance(head, BinaryExpression) and head.operator == "in"):
            raise JsSourceError("Expected 'lhs in expression' or ';' in for statement",
                                location=head.location)
        operands: List[Node] = []
        left = head
        while isinstance(left, BinaryExpression) and left.operator == "in":
            operands.append(left.right)
            left = left.left
        if not isinstance(left, (Identifier, MemberExpression)):
            raise JsSourceError("Invalid left-hand side in for-in", location=left.location)
        right = operands.pop()
        while operands:
            nxt = operands.pop()
            right = BinaryExpression(
                operator="in", left=right, right=nxt,
                location=SourceLocation(
                    file=self.current_file, line=right.location.line, column=right.location.column,
                    start=right.location.start, end=nxt.location.end,
                    end_line=nxt.location.end_line, end_column=nxt.location.end_column,
                ),
            )
        return ForInStatement(left=left, right=right, body=body, location=self._extract_location(meta))

    def for_in_var(self, meta: LarkMeta, name: Token, right: Node, body: Node) -> ForInStatement:
        """Grammar: "for" "(" "var" IDENT "in" expression ")" statement"""
        location = self._extract_location(name)
        declarator = VariableDeclarator(id=self._identifier(name), init=None, location=location)
        left = VariableDeclaration(declarations=[declarator], location=location)
        return ForInStatement(left=left, right=right, body=body, location=self._extract_location(meta))

    def continue_statement(self, meta: LarkMeta, label: Optional[Token] = None) -> ContinueStatement:
        return ContinueStatement(label=self._optional_identifier(label), location=self._extract_location(meta))

    def break_statement(self, meta: LarkMeta, label: Optional[Token] = None) -> BreakStatement:
        return BreakStatement(label=self._optional_identifier(label), location=self._extract_location(meta))

    def return_statement(self, meta: LarkMeta, argument: Optional[Node] = None) -> ReturnStatement:
        return ReturnStatement(argument=argument, location=self._extract_location(meta))

    def with_statement(self, meta: LarkMeta, obj: Node, body: Node) -> WithStatement:
        return WithStatement(object=obj, body=body, location=self._extract_location(meta))

    def switch_statement(self, meta: LarkMeta, discriminant: Node, *cases: SwitchCase) -> SwitchStatement:
        return SwitchStatement(discriminant=discriminant, cases=list(cases),
                               location=self._extract_location(meta))

    def case_clause(self, meta: LarkMeta, test: Node, *consequent: Node) -> SwitchCase:
        return SwitchCase(test=test, consequent=list(consequent), location=self._extract_location(meta))

    def default_clause(self, meta: LarkMeta, *consequent: Node) -> SwitchCase:
        return SwitchCase(test=None, consequent=list(consequent), location=self._extract_location(meta))

    def labelled_statement(self, meta: LarkMeta, label: Token, body: Node) -> LabeledStatement:
        return LabeledStatement(label=self._identifier(label), body=body, location=self._extract_location(meta))

    def throw_statement(self, meta: LarkMeta, argument: Node) -> ThrowStatement:
        return ThrowStatement(argument=argument, location=self._extract_location(meta))

    def try_statement(self, meta: LarkMeta, block: BlockStatement,
                      *rest: Union[CatchClause, BlockStatement]) -> TryStatement:
        handler = next((r for r in rest if isinstance(r, CatchClause)), None)
        finalizer = next((r for r in rest if isinstance(r, BlockStatement)), None)
        if handler is None and finalizer is None:
            raise JsSourceError("Missing catch or finally after try", location=self._extract_location(meta))
        return TryStatement(block=block, handler=handler, finalizer=finalizer,
                            location=self._extract_location(meta))

    def catch_clause(self, meta: LarkMeta, param: Token, body: BlockStatement) -> CatchClause:
        return CatchClause(param=self._identifier(param), body=body, location=self._extract_location(meta))

    def finally_clause(self, meta: LarkMeta, block: BlockStatement) -> BlockStatement:
        return block

    def debugger_statement(self, meta: LarkMeta) -> DebuggerStatement:
        return DebuggerStatement(location=self._extract_location(meta))

    # =========================================================================
    # EXPRESSIONS
    # =========================================================================

    def sequence(self, meta: LarkMeta, *expressions: Node) -> Node:
        return self.expression_parser.parse_sequence(meta, list(expressions))

    def assign(self, meta: LarkMeta, left: Node, operator: Token, right: Node) -> Node:
        if not isinstance(left, (Identifier, MemberExpression)):
            raise JsSourceError("Invalid left-hand side in assignment", location=left.location)
        return self.expression_parser.parse_assignment(meta, left, operator, right)

    def conditional_expr(self, meta: LarkMeta, test: Node, consequent: Node, alternate: Node) -> Node:
        return self.expression_parser.parse_conditional(meta, test, consequent, alternate)

    def logical(self, meta: LarkMeta, left: Node, operator: Token, right: Node) -> Node:
        return self.expression_parser.parse_logical(meta, left, operator, right)

    def binary(self, meta: LarkMeta, left: Node, operator: Token, right: Node) -> Node:
        return self.expression_parser.parse_binary(meta, left, operator, right)

    def unary_expr(self, meta: LarkMeta, operator: Token, argument: Node) -> Node:
        return self.expression_parser.parse_unary(meta, operator, argument)

    def prefix_update(self, meta: LarkMeta, operator: Token, argument: Node) -> Node:
        return self.expression_parser.parse_update(meta, operator, argument, prefix=True)

    def postfix_update(self, meta: LarkMeta, argument: Node, operator: Token) -> Node:
        return self.expression_parser.parse_update(meta, operator, argument, prefix=False)

    def new_bare(self, meta: LarkMeta, callee: Node) -> NewExpression:
        return self.expression_parser.parse_new(meta, callee, [])

    def new_with_args(self, meta: LarkMeta, callee: Node, arguments: List[Node]) -> NewExpression:
        return self.expression_parser.parse_new(meta, callee, arguments)

    def call(self, meta: LarkMeta, callee: Node, arguments: List[Node]) -> Node:
        return self.expression_parser.parse_call(meta, callee, arguments)

    def arguments(self, meta: LarkMeta, *args: Node) -> List[Node]:
        return list(args)

    def computed_member(self, meta: LarkMeta, obj: Node, prop: Node) -> MemberExpression:
        return self.expression_parser.parse_computed_member(meta, obj, prop)

    def static_member(self, meta: LarkMeta, obj: Node, name: Token) -> MemberExpression:
        return self.expression_parser.parse_static_member(meta, obj, name)

    def this_expr(self, meta: LarkMeta) -> ThisExpression:
        return ThisExpression(location=self._extract_location(meta))

    def identifier(self, meta: LarkMeta, name: Token) -> Identifier:
        return Identifier(name=str(name), location=self._extract_location(meta))

    # =========================================================================
    # LITERALS
    # =========================================================================

    def null_lit(self, meta: LarkMeta) -> Literal:
        return Literal(value=None, raw="null", location=self._extract_location(meta))

    def true_lit(self, meta: LarkMeta) -> Literal:
        return Literal(value=True, raw="true", location=self._extract_location(meta))

    def false_lit(self, meta: LarkMeta) -> Literal:
        return Literal(value=False, raw="false", location=self._extract_location(meta))

    def number_lit(self, meta: LarkMeta, token: Token) -> Literal:
        return self.literal_parser.parse_number(token)

    def string_lit(self, meta: LarkMeta, token: Token) -> Literal:
        return self.literal_parser.parse_string(token)

    def regex_lit(self, meta: LarkMeta, token: Token) -> Literal:
        return self.literal_parser.parse_regex(token)

    def array_literal(self, meta: LarkMeta, *items: Optional[Node]) -> ArrayExpression:
        elements = list(items)
        # `[a, b,]` has two elements; `[]` parses as a single empty item
        if elements and elements[-1] is None:
            elements.pop()
        return ArrayExpression(elements=elements, location=self._extract_location(meta))

    def array_item(self, meta: LarkMeta, expression: Optional[Node] = None) -> Optional[Node]:
        return expression

    def object_literal(self, meta: LarkMeta, *properties: Property) -> ObjectExpression:
        return ObjectExpression(properties=list(properties), location=self._extract_location(meta))

    def init_property(self, meta: LarkMeta, key: Node, value: Node) -> Property:
        return Property(key=key, value=value, kind="init", location=self._extract_location(meta))

    def getter(self, meta: LarkMeta, _get: Token, key: Node, body: BlockStatement) -> Property:
        return self.function_parser.parse_accessor(meta, "get", key, None, body)

    def setter(self, meta: LarkMeta, _set: Token, key: Node, param: Token, body: BlockStatement) -> Property:
        return self.function_parser.parse_accessor(meta, "set", key, param, body)
