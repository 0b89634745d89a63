"""
Function Parser - Extracted from JsTransformer
Handles function declarations, function expressions and accessor properties
"""

from typing import Any, Callable, List, Optional, Tuple

from lark.lexer import Token
from typing_extensions import TypeAlias

from ...shared import (
    BlockStatement, FunctionDeclaration, FunctionExpression, Identifier,
    Node, Property, SourceLocation,
)

LarkMeta: TypeAlias = Any
LocationExtractor: TypeAlias = Callable[[Any], SourceLocation]


class FunctionParser:
    """Dedicated parser for function-shaped constructs"""

    def __init__(self, location_extractor: LocationExtractor) -> None:
        self.extract_location = location_extractor

    def identifier(self, token: Token) -> Identifier:
        return Identifier(name=str(token), location=self.extract_location(token))

    def split_parts(self, parts: Tuple[Any, ...]) -> Tuple[Optional[Identifier], List[Identifier], BlockStatement]:
        """Children of a function rule are: [name token], [parameter list], body."""
        name: Optional[Identifier] = None
        params: List[Identifier] = []
        body = parts[-1]
        for part in parts[:-1]:
            if isinstance(part, Token):
                name = self.identifier(part)
            elif isinstance(part, list):
                params = part
        return name, params, body

    def parse_declaration(self, meta: LarkMeta, parts: Tuple[Any, ...]) -> FunctionDeclaration:
        name, params, body = self.split_parts(parts)
        return FunctionDeclaration(id=name, params=params, body=body, location=self.extract_location(meta))

    def parse_expression(self, meta: LarkMeta, parts: Tuple[Any, ...]) -> FunctionExpression:
        name, params, body = self.split_parts(parts)
        return FunctionExpression(id=name, params=params, body=body, location=self.extract_location(meta))

    def parse_accessor(self, meta: LarkMeta, kind: str, key: Node,
                       param: Optional[Token], body: BlockStatement) -> Property:
        """
        `get key() {...}` / `set key(v) {...}`: the value is an anonymous
        function spanning from the end of the key to the end of the body.
        """
        params = [self.identifier(param)] if param is not None else []
        key_loc, body_loc = key.location, body.location
        fun_loc = SourceLocation(
            file=body_loc.file,
            line=key_loc.end_line,
            column=key_loc.end_column,
            start=key_loc.end,
            end=body_loc.end,
            end_line=body_loc.end_line,
            end_column=body_loc.end_column,
        )
        value = FunctionExpression(id=None, params=params, body=body, location=fun_loc)
        return Property(key=key, value=value, kind=kind, location=self.extract_location(meta))
