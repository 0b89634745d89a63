"""
Error Reporting

Diagnostics are rendered rustc-style:

    error[E0001]: unexpected token ')'
     --> app.js:3:14
      |
    3 | var x = foo(1,);
      |               ^
"""

import os
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..utils.io_utils import split_source_lines
from .source_location import SourceLocation


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set)
# ---------------------------------------------------------------------------

def use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get("JSRENAME_COLOR", "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    return sys.stderr.isatty()

BOLD   = "\033[1m"
RED    = "\033[31m"
GREEN  = "\033[32m"
BLUE   = "\033[34m"
GREY   = "\033[90m"
RESET  = "\033[0m"

def style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{RESET}" if prefix else text


# ---------------------------------------------------------------------------
# Diagnostic
# ---------------------------------------------------------------------------

@dataclass
class Error:
    message: str
    location: Optional[SourceLocation]
    code: Optional[str] = None
    help: Optional[str] = None


def format_diagnostic(
    error: Error,
    source_files: Dict[str, str],
    color: bool = False,
) -> str:
    """Render a single diagnostic with the offending line and a caret underline."""
    out: List[str] = []
    code_str = f"[{error.code}]" if error.code else ""
    out.append(
        style(f"error{code_str}", BOLD, RED, color=color)
        + style(f": {error.message}", BOLD, color=color)
    )

    loc = error.location
    if loc is None:
        out.append(style(" --> ", BOLD, BLUE, color=color) + "<unknown location>")
        return "\n".join(out)

    out.append(style(" --> ", BOLD, BLUE, color=color) + f"{loc.file}:{loc.line}:{loc.column}")
    source = source_files.get(loc.file)
    lines = split_source_lines(source) if source is not None else []
    if not 1 <= loc.line <= len(lines):
        return "\n".join(out)

    code_line = lines[loc.line - 1]
    gw = len(str(loc.line))
    gutter = style(" " * (gw + 1) + "|", BOLD, BLUE, color=color)
    if loc.end_line == loc.line and loc.end_column > loc.column:
        width = loc.end_column - loc.column
    else:
        width = 1
    out.append(gutter)
    out.append(style(f"{loc.line:>{gw}} | ", BOLD, BLUE, color=color) + code_line)
    out.append(gutter + " " + " " * loc.column + style("^" * width, BOLD, RED, color=color))
    if error.help:
        out.append(style(" " * (gw + 1) + "= ", BOLD, BLUE, color=color)
                   + style("help: ", BOLD, color=color) + error.help)
    return "\n".join(out)


class ErrorReporter:
    """Collects diagnostics across several files and prints them together."""

    def __init__(self, source_files: Optional[Dict[str, str]] = None):
        self.source_files: Dict[str, str] = source_files if source_files is not None else {}
        self.errors: List[Error] = []

    def report(self, exc: "JsRenameError") -> None:
        self.errors.append(Error(
            message=exc.message,
            location=exc.location,
            code=getattr(exc, "error_code", None),
        ))

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def format_all_errors(self, color: bool = False) -> str:
        parts = [format_diagnostic(e, self.source_files, color=color) for e in self.errors]
        count = len(self.errors)
        summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
        parts.append(style("error", BOLD, RED, color=color) + style(f": {summary}", BOLD, color=color))
        return "\n\n".join(parts)

    def print_errors(self) -> None:
        print(self.format_all_errors(color=use_color()), file=sys.stderr)


# ============================================================================
# Exception Classes
# ============================================================================

class JsRenameError(Exception):
    """Base exception for errors a caller can act on"""
    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self):
        if self.location:
            return f"{self.message}\n --> {self.location}"
        return self.message


class JsSourceError(JsRenameError):
    """Error in the JavaScript being analysed (syntax the parser cannot recover from)."""
    def __init__(self,
                 message: str,
                 location: Optional[SourceLocation] = None,
                 error_code: str = "E0001",
                 source_code: Optional[str] = None):
        super().__init__(message, location)
        self.error_code = error_code
        self.source_code = source_code

    def __str__(self):
        source_files: Dict[str, str] = {}
        if self.source_code is not None and self.location:
            source_files[self.location.file] = self.source_code
        err = Error(message=self.message, location=self.location, code=self.error_code)
        return format_diagnostic(err, source_files)


class DuplicateFileError(JsRenameError):
    """A file id was loaded into a buffer twice."""


class JsRenameImplementationError(Exception):
    """
    Structural mismatch between the engine and its input.

    Raised for AST shapes outside the supported grammar and for broken
    internal invariants. Never recovered; the request that hit it fails.
    """
    def __init__(self, message: str, error_code: str = "E9999"):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self):
        return f"[{self.error_code}] {self.message}"


class UnsupportedNodeError(JsRenameImplementationError):
    def __init__(self, node_type: str, context: str = "node"):
        super().__init__(f"{context} {node_type} not handled", error_code="E9001")
        self.node_type = node_type


class NonStringPropertyError(JsRenameImplementationError):
    def __init__(self, name: object):
        super().__init__(f"property name is not a string: {name!r}", error_code="E9002")
        self.name = name
