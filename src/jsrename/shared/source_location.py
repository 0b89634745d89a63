"""
Source Location (Span) and Rename Ranges

Offsets are character offsets into the source string, lines are 1-based and
columns 0-based, matching the ESTree `range`/`loc` convention.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class SourceLocation:
    """
    Span of an AST node.

    - File, start line and column, end line and column
    - Half-open character range `[start, end)`
    - Immutable (frozen) for hashability
    """
    file: str
    line: int
    column: int
    start: int = 0
    end: int = 0
    end_line: int = 0
    end_column: int = 0

    def contains(self, offset: int) -> bool:
        """Inclusive on both ends, so a cursor just after a token still hits it."""
        return self.start <= offset <= self.end

    def __str__(self) -> str:
        """Format as file:line:column"""
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Position:
    offset: int
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Range:
    """One token occurrence that belongs to a rename group."""
    file: str
    start: Position
    end: Position

    @classmethod
    def from_location(cls, file: str, location: SourceLocation, delta: int = 0) -> "Range":
        """Build a range from a node span, narrowing both ends by `delta` characters."""
        return cls(
            file=file,
            start=Position(location.start + delta, location.line, location.column + delta),
            end=Position(location.end - delta, location.end_line, location.end_column - delta),
        )

    def text(self, source: str) -> str:
        return source[self.start.offset:self.end.offset]

    def __str__(self) -> str:
        return f"{self.file}:{self.start}-{self.end}"


class LineIndex:
    """Offset to line/column lookup for one source text; only newline characters end a line."""

    def __init__(self, source: str):
        self.line_starts: List[int] = [0] + [i + 1 for i, ch in enumerate(source) if ch == "\n"]

    def position(self, offset: int) -> Position:
        line = bisect_right(self.line_starts, offset)
        return Position(offset, line, offset - self.line_starts[line - 1])
