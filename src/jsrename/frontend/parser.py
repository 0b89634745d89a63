"""
Parser

ES5 source text to the ESTree-shaped AST. Lark does the LALR parsing; this
module adds automatic semicolon insertion and error tolerance on top of
lark's `on_error` hook and converts lark errors into `ParseError`.
"""

import logging
from pathlib import Path
from typing import Iterator, Optional

from lark import Lark, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError
from lark.lark import PostLex
from lark.lexer import Token

from ..shared.errors import JsSourceError
from ..shared.nodes import Program
from ..shared.source_location import SourceLocation
from ..utils.config import DEFAULT_PARSER_CACHE_FILE, DEFAULT_SOURCE_FILE
from .transformers import JsTransformer

logger = logging.getLogger("jsrename.frontend.parser")

SEMICOLON = "_SEMI"
END = "$END"
RBRACE = "RBRACE"
# accepted only where a new statement may begin
STATEMENT_START = "VAR"
UPDATE = "UPDATE_OP"
UPDATE_PREFIX = "UPDATE_PREFIX"
# no line break is allowed between these keywords and what follows them
RESTRICTED_KEYWORDS = frozenset(["RETURN", "BREAK", "CONTINUE", "THROW"])


def _zero_width_semicolon(after: Token) -> Token:
    return Token(SEMICOLON, ";", after.end_pos, after.end_line, after.end_column,
                 after.end_line, after.end_column, after.end_pos)


class RestrictedProductions(PostLex):
    """
    Postlexer for the productions that forbid a line break.

    A `++` or `--` that starts a line can only be a prefix operator, so it
    is retyped as UPDATE_PREFIX and the previous statement ends before it
    (the on_error hook inserts that semicolon). A line break right after
    `return`, `break`, `continue` or `throw` always ends the statement.

    Lark restarts the postlexer when parsing resumes after an error, so the
    last token and a token held back behind an inserted semicolon are kept
    on the instance. Call `reset` before each parse.
    """

    always_accept = ()

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.last: Optional[Token] = None
        self.pending: Optional[Token] = None

    def seen(self, token: Token) -> Token:
        self.last = token
        return token

    def process(self, stream: Iterator[Token]) -> Iterator[Token]:
        if self.pending is not None:
            token, self.pending = self.pending, None
            yield self.seen(token)
        for token in stream:
            last = self.last
            if last is not None and token.line > last.end_line:
                if token.type == UPDATE:
                    token = Token.new_borrow_pos(UPDATE_PREFIX, token.value, token)
                if last.type in RESTRICTED_KEYWORDS:
                    self.pending = token
                    yield _zero_width_semicolon(last)
                    self.pending = None
            yield self.seen(token)


class ParseError(JsSourceError):
    """Syntax error that semicolon insertion and token dropping could not recover from."""

    def __init__(self, message: str, source_file: str, location: Optional[SourceLocation] = None,
                 source_code: Optional[str] = None):
        super().__init__(message, location=location, error_code="E0001", source_code=source_code)
        self.source_file = source_file


class SemicolonInsertion:
    """
    `on_error` handler for lark's LALR parser.

    A semicolon is inserted when the parser would accept one and the
    offending token is `}`, the end of input, or the first token on a new
    line, unless the semicolon would form an empty statement. The inserted
    token is zero-width, placed right after the last token the parser
    consumed. In tolerant mode any other unexpected token or character is
    skipped.
    """

    def __init__(self, source: str, tolerant: bool = True,
                 restricted: Optional[RestrictedProductions] = None) -> None:
        self.source = source
        self.tolerant = tolerant
        self.restricted = restricted
        self.inserted = 0
        self.dropped = 0

    def __call__(self, error: UnexpectedInput) -> bool:
        if isinstance(error, UnexpectedCharacters):
            if self.tolerant:
                self.dropped += 1
                logger.debug(f"skipping unexpected character at {error.line}:{error.column}")
            return self.tolerant

        if not isinstance(error, UnexpectedToken):
            return False

        token = error.token
        # tokens rejected by the contextual lexer never reach the postlexer
        if self.restricted is not None and token.type != END:
            self.restricted.seen(token)

        if self._can_insert_semicolon(error):
            self._insert_semicolon(error)
            if token.type != END:
                try:
                    error.interactive_parser.feed_token(token)
                except UnexpectedToken:
                    if not self.tolerant:
                        raise
                    self.dropped += 1
                    logger.debug(f"dropping token {token.value!r} at {token.line}:{token.column}")
            return True

        if self.tolerant and token.type != END:
            self.dropped += 1
            logger.debug(f"dropping token {token.value!r} at {token.line}:{token.column}")
            return True
        return False

    def _previous_end(self, error: UnexpectedToken) -> Optional[Token]:
        """A zero-width token positioned at the end of the last consumed value."""
        value_stack = error.interactive_parser.parser_state.value_stack
        if value_stack:
            last = value_stack[-1]
            if isinstance(last, Token):
                return _zero_width_semicolon(last)
            if isinstance(last, Tree) and not last.meta.empty:
                meta = last.meta
                return Token(SEMICOLON, ";", meta.end_pos, meta.end_line, meta.end_column,
                             meta.end_line, meta.end_column, meta.end_pos)
        return None

    def _can_insert_semicolon(self, error: UnexpectedToken) -> bool:
        expected = error.expected
        if SEMICOLON not in expected or STATEMENT_START in expected:
            return False
        token = error.token
        if token.type in (END, RBRACE):
            return True
        previous = self._previous_end(error)
        if previous is None:
            return False
        return "\n" in self.source[previous.end_pos:token.start_pos]

    def _insert_semicolon(self, error: UnexpectedToken) -> None:
        semicolon = self._previous_end(error)
        if semicolon is None:
            token = error.token
            start = token.start_pos or 0
            semicolon = Token(SEMICOLON, ";", start, token.line, token.column,
                              token.line, token.column, start)
        error.interactive_parser.feed_token(semicolon)
        self.inserted += 1


class Parser:
    """
    ES5 parser.

    Uses lark's LALR parser with the contextual lexer (needed to tell
    regular expressions from division) and lark's grammar cache.
    """

    def __init__(self, cache_file: str = DEFAULT_PARSER_CACHE_FILE, tolerant: bool = True):
        grammar_path = Path(__file__).parent / "grammar.lark"
        self.restricted = RestrictedProductions()
        self.parser = Lark.open(
            str(grammar_path),
            start="program",
            parser="lalr",
            lexer="contextual",
            cache=cache_file,
            propagate_positions=True,
            maybe_placeholders=False,
            postlex=self.restricted,
        )
        self.transformer = JsTransformer()
        self.tolerant = tolerant

    def parse(self, source: str, source_file: str = DEFAULT_SOURCE_FILE) -> Program:
        """Parse one file. The Program spans the whole source text."""
        self.transformer.current_file = source_file
        self.restricted.reset()
        asi = SemicolonInsertion(source, tolerant=self.tolerant, restricted=self.restricted)

        try:
            tree = self.parser.parse(source, on_error=asi)
        except UnexpectedInput as e:
            raise ParseError(self._describe(e), source_file, self._error_location(e, source_file),
                             source_code=source) from e

        try:
            program = self.transformer.transform(tree)
        except VisitError as e:
            raise e.orig_exc from e

        if asi.inserted or asi.dropped:
            logger.debug(f"{source_file}: inserted {asi.inserted} semicolons, dropped {asi.dropped} tokens")

        program.file = source_file
        program.location = self._full_span(source, source_file)
        return program

    @staticmethod
    def _describe(error: UnexpectedInput) -> str:
        if isinstance(error, UnexpectedToken):
            if error.token.type == END:
                return "Parse error: unexpected end of input"
            return f"Parse error: unexpected token {error.token.value!r}"
        if isinstance(error, UnexpectedCharacters):
            return f"Parse error: unexpected character {error.char!r}"
        return f"Parse error: {error}"

    @staticmethod
    def _error_location(error: UnexpectedInput, source_file: str) -> Optional[SourceLocation]:
        line = getattr(error, "line", None)
        column = getattr(error, "column", None)
        if not isinstance(line, int) or not isinstance(column, int):
            return None
        start = error.pos_in_stream or 0
        return SourceLocation(file=source_file, line=line, column=max(column - 1, 0),
                              start=start, end=start, end_line=line, end_column=max(column - 1, 0))

    @staticmethod
    def _full_span(source: str, source_file: str) -> SourceLocation:
        lines = source.split("\n")
        return SourceLocation(file=source_file, line=1, column=0, start=0, end=len(source),
                              end_line=len(lines), end_column=len(lines[-1]))
