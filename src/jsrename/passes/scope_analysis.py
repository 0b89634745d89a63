"""
Scope Analysis Pass

Runs once per loaded file: parent pointers first, then the lexical
environments every later query relies on.
"""

import logging

from ..shared.ast_utils import inject_parent_pointers, iter_programs
from ..shared.nodes import Node
from ..shared.scope import build_envs
from .base import AnalysisContext, BasePass

logger = logging.getLogger("jsrename.passes.scope_analysis")


class ScopeAnalysisPass(BasePass):
    """Parent pointers and lexical environments for each program."""

    def run(self, root: Node, ctx: AnalysisContext) -> Node:
        for program in iter_programs(root):
            inject_parent_pointers(program)
            build_envs(program)
            logger.debug(f"{program.file}: {len(program.env)} top-level declarations")
        return root
