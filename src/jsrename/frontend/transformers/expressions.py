"""
Expression Parser - Extracted from JsTransformer
Handles operator expressions, member access and calls
"""

from typing import Any, Callable, List

from lark.lexer import Token
from typing_extensions import TypeAlias

from ...shared import (
    AssignmentExpression, BinaryExpression, CallExpression, ConditionalExpression,
    Identifier, LogicalExpression, MemberExpression, NewExpression, Node,
    SequenceExpression, SourceLocation, UnaryExpression, UpdateExpression,
)

LarkMeta: TypeAlias = Any  # Lark's internal Meta object
LocationExtractor: TypeAlias = Callable[[LarkMeta], SourceLocation]


class ExpressionParser:
    """Dedicated parser for operator and access expressions"""

    def __init__(self, location_extractor: LocationExtractor) -> None:
        self.extract_location = location_extractor

    def parse_binary(self, meta: LarkMeta, left: Node, operator: Token, right: Node) -> BinaryExpression:
        return BinaryExpression(operator=str(operator), left=left, right=right,
                                location=self.extract_location(meta))

    def parse_logical(self, meta: LarkMeta, left: Node, operator: Token, right: Node) -> LogicalExpression:
        return LogicalExpression(operator=str(operator), left=left, right=right,
                                 location=self.extract_location(meta))

    def parse_assignment(self, meta: LarkMeta, left: Node, operator: Token, right: Node) -> AssignmentExpression:
        return AssignmentExpression(operator=str(operator), left=left, right=right,
                                    location=self.extract_location(meta))

    def parse_conditional(self, meta: LarkMeta, test: Node, consequent: Node, alternate: Node) -> ConditionalExpression:
        return ConditionalExpression(test=test, consequent=consequent, alternate=alternate,
                                     location=self.extract_location(meta))

    def parse_sequence(self, meta: LarkMeta, expressions: List[Node]) -> SequenceExpression:
        return SequenceExpression(expressions=expressions, location=self.extract_location(meta))

    def parse_unary(self, meta: LarkMeta, operator: Token, argument: Node) -> UnaryExpression:
        return UnaryExpression(operator=str(operator), argument=argument, prefix=True,
                               location=self.extract_location(meta))

    def parse_update(self, meta: LarkMeta, operator: Token, argument: Node, prefix: bool) -> UpdateExpression:
        return UpdateExpression(operator=str(operator), argument=argument, prefix=prefix,
                                location=self.extract_location(meta))

    def parse_computed_member(self, meta: LarkMeta, obj: Node, prop: Node) -> MemberExpression:
        return MemberExpression(object=obj, property=prop, computed=True,
                                location=self.extract_location(meta))

    def parse_static_member(self, meta: LarkMeta, obj: Node, name: Token) -> MemberExpression:
        prop = Identifier(name=str(name), location=self.extract_location(name))
        return MemberExpression(object=obj, property=prop, computed=False,
                                location=self.extract_location(meta))

    def parse_call(self, meta: LarkMeta, callee: Node, arguments: List[Node]) -> CallExpression:
        return CallExpression(callee=callee, arguments=arguments, location=self.extract_location(meta))

    def parse_new(self, meta: LarkMeta, callee: Node, arguments: List[Node]) -> NewExpression:
        return NewExpression(callee=callee, arguments=arguments, location=self.extract_location(meta))
