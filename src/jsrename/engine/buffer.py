"""
JavaScript Buffer

File-and-offset interface over the analysis: callers load sources under
opaque file ids and ask about the token at an offset. Node pointers never
cross this boundary.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from ..frontend.parser import Parser
from ..passes.base import AnalysisContext
from ..passes.classification import IdKind, classify_id
from ..passes.renaming import compute_property_renaming, compute_renaming
from ..passes.scope_analysis import ScopeAnalysisPass
from ..passes.type_inference import expression_type, infer_types
from ..shared.ast_utils import find_ast_for_file, find_node_at, iter_programs
from ..shared.errors import DuplicateFileError, UnsupportedNodeError
from ..shared.estree import from_estree
from ..shared.nodes import Node, Program, ProgramCollection
from ..shared.scope import get_var_decl_scope
from ..shared.source_location import Range
from ..utils.config import KIND_GLOBAL, KIND_LABEL, KIND_LOCAL, KIND_PROPERTY

logger = logging.getLogger("jsrename.engine.buffer")


class JavaScriptBuffer:
    """
    A set of JavaScript files analysed together.

    Lookups that find nothing (unknown file, offset outside the file or on
    whitespace, a token that is not an identifier) return None. Malformed
    ASTs raise.
    """

    def __init__(self, parser: Optional[Parser] = None):
        self._parser = parser
        self.programs = ProgramCollection(programs=[])
        self.ctx = AnalysisContext()

    @property
    def parser(self) -> Parser:
        if self._parser is None:
            self._parser = Parser()
        return self._parser

    # =========================================================================
    # LOADING
    # =========================================================================

    def add(self, file: str, source: str) -> Program:
        """Parse `source` and load it as `file`."""
        self._check_new(file)
        program = self.parser.parse(source, file)
        self.ctx.source_files[file] = source
        return self._load(file, program)

    def add_ast(self, file: str, ast: Union[Program, Dict[str, Any]], source: Optional[str] = None) -> Program:
        """
        Load a pre-parsed tree: a Program node or an ESTree dict with ranges.
        An ESTree dict without `loc` needs `source` for line and column numbers.
        """
        self._check_new(file)
        program = from_estree(ast, file, source) if isinstance(ast, dict) else ast
        if not isinstance(program, Program):
            raise UnsupportedNodeError(program.type, context="root")
        if source is not None:
            self.ctx.source_files[file] = source
        return self._load(file, program)

    def _check_new(self, file: str) -> None:
        if find_ast_for_file(self.programs, file) is not None:
            raise DuplicateFileError(f"file '{file}' is already loaded")

    def _load(self, file: str, program: Program) -> Program:
        program.file = file
        ScopeAnalysisPass().run(program, self.ctx)
        self.programs.programs.append(program)
        logger.debug(f"loaded {file}: {len(program.body)} top-level statements")
        return program

    def clear(self) -> None:
        """Remove every file."""
        self.programs.programs = []
        self.ctx = AnalysisContext()

    def files(self) -> List[str]:
        return [program.file for program in iter_programs(self.programs)]

    def source(self, file: str) -> Optional[str]:
        """Source text of a file loaded with `add`; None for unknown files and ASTs."""
        return self.ctx.source_files.get(file)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def _token_at(self, file: str, offset: int) -> Optional[Node]:
        program = find_ast_for_file(self.programs, file)
        if program is None:
            return None
        return find_node_at(program, offset)

    def classify(self, file: str, offset: int) -> Optional[str]:
        """
        "local", "global", "property" or "label" for the identifier at
        `offset`, None when there is none.

        A property of the global object (`this.x` at top level) is
        classified "global", because renaming it renames the global variable.
        """
        node = self._token_at(file, offset)
        if node is None:
            return None
        clazz = classify_id(node)
        if clazz is None:
            return None
        if clazz.kind is IdKind.LABEL:
            return KIND_LABEL
        if clazz.kind is IdKind.VARIABLE:
            scope = get_var_decl_scope(node)
            return KIND_GLOBAL if scope is None or scope.type == "Program" else KIND_LOCAL
        infer_types(self.programs)
        if expression_type(self.programs, clazz.base).rep() is self.programs.global_type.rep():
            return KIND_GLOBAL
        return KIND_PROPERTY

    def can_rename_locally(self, file: str, offset: int) -> Optional[bool]:
        """True when renaming the token at `offset` cannot affect other files."""
        kind = self.classify(file, offset)
        if kind is None:
            return None
        return kind in (KIND_LOCAL, KIND_LABEL)

    def rename_token_at(self, file: str, offset: int) -> Optional[List[List[Range]]]:
        """
        Rename groups for the identifier at `offset`. None means there is no
        identifier there; an empty list means it has no renameable occurrences.
        """
        node = self._token_at(file, offset)
        if node is None:
            return None
        result = compute_renaming(self.programs, node)
        if result is None:
            return None
        logger.debug(f"{file}@{offset}: {result.kind} rename, {len(result)} groups")
        return result.groups

    def rename_property_name(self, name: str) -> List[List[Range]]:
        """Rename groups for every `.name` and `{name: ...}` in the buffer."""
        return compute_property_renaming(self.programs, name).groups
