"""
Buffer-level API: load files, classify tokens, compute rename groups.
"""

from .buffer import JavaScriptBuffer

__all__ = ['JavaScriptBuffer']
