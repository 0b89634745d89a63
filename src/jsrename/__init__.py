"""
jsrename: identifier renaming analysis for JavaScript.

    >>> from jsrename import JavaScriptBuffer
    >>> buf = JavaScriptBuffer()
    >>> buf.add("a.js", "var obj = {foo: 1}; obj.foo = 2;")
    >>> buf.rename_property_name("foo")
"""

from .engine import JavaScriptBuffer
from .frontend import Parser, ParseError
from .shared import Range, Position, SourceLocation, JsRenameError, DuplicateFileError

__all__ = [
    'JavaScriptBuffer',
    'Parser',
    'ParseError',
    'Range',
    'Position',
    'SourceLocation',
    'JsRenameError',
    'DuplicateFileError',
]
