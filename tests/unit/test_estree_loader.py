"""
Tests for loading ESTree JSON produced by external parsers.
"""

import pytest

from jsrename.shared.errors import JsRenameError, UnsupportedNodeError
from jsrename.shared.estree import from_estree
from jsrename.shared.nodes import (
    Identifier, Literal, MemberExpression, Program, TryStatement, VariableDeclaration,
)


def _ident(name, start):
    return {"type": "Identifier", "name": name, "range": [start, start + len(name)],
            "loc": {"start": {"line": 1, "column": start}, "end": {"line": 1, "column": start + len(name)}}}


SOURCE = "var a = b.c;"
ESPRIMA_PROGRAM = {
    "type": "Program",
    "range": [0, 12],
    "loc": {"start": {"line": 1, "column": 0}, "end": {"line": 1, "column": 12}},
    "body": [{
        "type": "VariableDeclaration",
        "kind": "var",
        "range": [0, 12],
        "declarations": [{
            "type": "VariableDeclarator",
            "range": [4, 11],
            "id": _ident("a", 4),
            "init": {
                "type": "MemberExpression",
                "computed": False,
                "range": [8, 11],
                "object": _ident("b", 8),
                "property": _ident("c", 10),
            },
        }],
    }],
}


class TestEstreeLoader:
    """ESTree dicts to engine nodes"""

    def test_program_shape(self):
        program = from_estree(ESPRIMA_PROGRAM, "ext.js", SOURCE)
        assert isinstance(program, Program)
        assert program.file == "ext.js"
        decl = program.body[0]
        assert isinstance(decl, VariableDeclaration) and decl.kind == "var"
        init = decl.declarations[0].init
        assert isinstance(init, MemberExpression) and not init.computed
        assert isinstance(init.object, Identifier) and init.object.name == "b"

    def test_locations_from_range_and_loc(self):
        program = from_estree(ESPRIMA_PROGRAM, "ext.js", SOURCE)
        prop = program.body[0].declarations[0].init.property
        loc = prop.location
        assert (loc.start, loc.end) == (10, 11)
        assert (loc.line, loc.column, loc.end_line, loc.end_column) == (1, 10, 1, 11)
        assert loc.file == "ext.js"

    def test_start_end_offsets(self):
        node = from_estree({"type": "Identifier", "name": "x", "start": 3, "end": 4}, source="a;\nx")
        assert (node.location.start, node.location.end) == (3, 4)

    def test_lines_computed_from_source(self):
        source = "a;\r\n\n  long_name;"
        start = source.index("long_name")
        node = from_estree({"type": "Identifier", "name": "long_name", "range": [start, start + 9]}, source=source)
        loc = node.location
        assert (loc.line, loc.column, loc.end_line, loc.end_column) == (3, 2, 3, 11)

    def test_loc_takes_precedence_over_source(self):
        node = from_estree(_ident("b", 8), source="\n" * 20)
        assert (node.location.line, node.location.column) == (1, 8)

    def test_offsets_without_loc_or_source(self):
        with pytest.raises(JsRenameError):
            from_estree({"type": "Identifier", "name": "x", "range": [0, 1]})

    def test_missing_location(self):
        node = from_estree({"type": "ThisExpression"})
        assert node.location is None

    def test_regex_literal(self):
        node = from_estree({"type": "Literal", "value": {}, "raw": "/ab+/g",
                            "regex": {"pattern": "ab+", "flags": "g"}})
        assert isinstance(node, Literal)
        assert node.value is None and node.regex == "/ab+/g"
        assert not node.is_string

    def test_legacy_handlers_list(self):
        data = {
            "type": "TryStatement",
            "block": {"type": "BlockStatement", "body": []},
            "handlers": [{"type": "CatchClause", "param": {"type": "Identifier", "name": "e"},
                          "body": {"type": "BlockStatement", "body": []}}],
            "finalizer": None,
        }
        node = from_estree(data)
        assert isinstance(node, TryStatement)
        assert node.handler is not None and node.handler.param.name == "e"

    def test_null_argument_lists(self):
        node = from_estree({"type": "NewExpression", "callee": {"type": "Identifier", "name": "C"},
                            "arguments": None})
        assert node.arguments == []

    @pytest.mark.parametrize("node_type", ["ArrowFunctionExpression", "ClassDeclaration", None])
    def test_unknown_node_types(self, node_type):
        with pytest.raises(UnsupportedNodeError):
            from_estree({"type": node_type})
