"""
Literal Parser - Extracted from JsTransformer
Decodes number and string tokens into Python values
"""

import re
from typing import Any, Callable, Union

from lark.lexer import Token
from typing_extensions import TypeAlias

from ...shared import Literal, SourceLocation

LarkMeta: TypeAlias = Any
LocationExtractor: TypeAlias = Callable[[Any], SourceLocation]

_SIMPLE_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "b": "\b",
    "f": "\f", "v": "\v", "0": "\0",
}

_ESCAPE = re.compile(r"\\(?:x([0-9a-fA-F]{2})|u([0-9a-fA-F]{4})|(\r\n|[\s\S]))")


def _decode_escape(match: "re.Match") -> str:
    hex_code, unicode_code, char = match.groups()
    if hex_code is not None:
        return chr(int(hex_code, 16))
    if unicode_code is not None:
        return chr(int(unicode_code, 16))
    if char in ("\n", "\r", "\r\n", "\u2028", "\u2029"):
        return ""  # line continuation
    return _SIMPLE_ESCAPES.get(char, char)


class LiteralParser:
    """Dedicated parser for literal tokens"""

    def __init__(self, location_extractor: LocationExtractor) -> None:
        self.extract_location = location_extractor

    def parse_number(self, token: Token) -> Literal:
        return Literal(value=self.number_value(str(token)), raw=str(token),
                       location=self.extract_location(token))

    def parse_string(self, token: Token) -> Literal:
        return Literal(value=self.string_value(str(token)), raw=str(token),
                       location=self.extract_location(token))

    def parse_regex(self, token: Token) -> Literal:
        return Literal(value=None, raw=str(token), regex=str(token),
                       location=self.extract_location(token))

    @staticmethod
    def number_value(raw: str) -> Union[int, float]:
        if raw[:2] in ("0x", "0X"):
            return int(raw, 16)
        if re.fullmatch(r"\d+", raw):
            return int(raw)
        return float(raw)

    @staticmethod
    def string_value(raw: str) -> str:
        """Strip the quotes and decode escape sequences."""
        return _ESCAPE.sub(_decode_escape, raw[1:-1])
