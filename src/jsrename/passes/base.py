"""
Base Pass System

Passes annotate the AST in place. Load-time passes run once per file;
type inference is not a pass because it is re-run over the whole
collection on every request that needs it (see `infer_types`).
"""

from abc import ABC, abstractmethod
from typing import Dict

from ..shared.nodes import Node


class AnalysisContext:
    """Shared state for the files of one buffer: source text per file, for diagnostics."""

    def __init__(self, source_files: Dict[str, str] = None):
        self.source_files: Dict[str, str] = dict(source_files or {})


class BasePass(ABC):
    """Base class for load-time passes. The AST is annotated in place and returned."""

    @abstractmethod
    def run(self, root: Node, ctx: AnalysisContext) -> Node:
        raise NotImplementedError
