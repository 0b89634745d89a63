"""
Frontend: ES5 grammar, parse-tree transformer and parser.
"""

from .parser import Parser, ParseError, SemicolonInsertion

__all__ = ['Parser', 'ParseError', 'SemicolonInsertion']
