"""
JavaScript AST Transformers
===========================

Specialized helpers for different AST node families.
"""

from .base import JsTransformer
from .literals import LiteralParser
from .expressions import ExpressionParser
from .functions import FunctionParser

__all__ = [
    'JsTransformer',
    'LiteralParser',
    'ExpressionParser',
    'FunctionParser',
]
