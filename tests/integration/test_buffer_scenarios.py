#!/usr/bin/env python3
"""
End-to-end tests through the buffer API: load files, point at an offset,
get rename groups back.
"""

import pytest

from jsrename.engine.buffer import JavaScriptBuffer
from jsrename.frontend.parser import ParseError, Parser
from jsrename.shared.ast_utils import find_ast_for_file, walk
from jsrename.shared.errors import DuplicateFileError, JsRenameError, UnsupportedNodeError
from tests.test_utils import group_texts, offset_of, range_offsets


def sources_of(buffer):
    return {file: buffer.source(file) for file in buffer.files()}


class TestRenameScenarios:
    """Typical editor requests"""

    def test_local_variable_shadowing_a_global(self, buffer):
        source = "function f(){ var x = 1; return x; } var x = 2;"
        buffer.add("main.js", source)
        offset = offset_of(source, "x")
        groups = buffer.rename_token_at("main.js", offset)
        assert len(groups) == 1
        assert [rng.start.offset for rng in groups[0]] == [offset_of(source, "x"), offset_of(source, "x", 1)]
        assert buffer.classify("main.js", offset) == "local"
        assert buffer.can_rename_locally("main.js", offset) is True

    def test_global_variable_across_files(self, buffer):
        buffer.add("a.js", "var foo = 1;")
        buffer.add("b.js", "foo = foo + 1;")
        groups = buffer.rename_token_at("b.js", 0)
        assert len(groups) == 1
        assert sorted(rng.file for rng in groups[0]) == ["a.js", "b.js", "b.js"]
        assert group_texts(groups, sources_of(buffer)) == [["foo", "foo", "foo"]]
        assert buffer.classify("a.js", offset_of("var foo = 1;", "foo")) == "global"
        assert buffer.can_rename_locally("b.js", 0) is False

    def test_label(self, buffer):
        source = "a: while (true) { break a; }"
        buffer.add("l.js", source)
        groups = buffer.rename_token_at("l.js", offset_of(source, "a;"))
        assert [len(g) for g in groups] == [2]
        assert buffer.classify("l.js", 0) == "label"
        assert buffer.can_rename_locally("l.js", 0) is True

    def test_property_through_constructor(self, buffer):
        source = "function C() { this.x = 1; } var c = new C(); c.x;"
        buffer.add("p.js", source)
        offset = offset_of(source, "x;")
        assert buffer.classify("p.js", offset) == "property"
        groups = buffer.rename_token_at("p.js", offset)
        assert len(groups) == 1
        assert [rng.start.offset for rng in groups[0]] == [offset_of(source, "x ="), offset]
        assert buffer.rename_property_name("x") == groups

    def test_lookup_misses(self, buffer):
        source = "var a  =  b; x = 42 + 'str';"
        buffer.add("m.js", source)
        whitespace = offset_of(source, "  =") + 1
        assert buffer.rename_token_at("m.js", whitespace) is None
        assert buffer.classify("m.js", whitespace) is None
        assert buffer.can_rename_locally("m.js", whitespace) is None
        assert buffer.rename_token_at("m.js", offset_of(source, "42") + 1) is None
        assert buffer.rename_token_at("m.js", offset_of(source, "str")) is None
        assert buffer.rename_token_at("m.js", len(source) + 5) is None
        assert buffer.rename_token_at("other.js", 0) is None
        assert buffer.classify("other.js", 0) is None

    def test_cursor_just_after_a_token(self, buffer):
        source = "var alpha = 1; alpha;"
        buffer.add("c.js", source)
        end = offset_of(source, "alpha") + len("alpha")
        groups = buffer.rename_token_at("c.js", end)
        assert group_texts(groups, sources_of(buffer)) == [["alpha", "alpha"]]

    def test_global_object_property_classifies_as_global(self, buffer):
        source = "var v = 1; this.v = 2;"
        buffer.add("g.js", source)
        offset = offset_of(source, "v = 2")
        assert buffer.classify("g.js", offset) == "global"
        groups = buffer.rename_token_at("g.js", offset)
        assert [len(g) for g in groups] == [2]

    def test_prefix_update_on_the_next_line(self, buffer):
        source = "var a = 1, c = 2; a = c\n++c;"
        buffer.add("u.js", source)
        groups = buffer.rename_token_at("u.js", offset_of(source, "c"))
        assert [rng.start.offset for g in groups for rng in g] == [
            offset_of(source, "c"), offset_of(source, "c", 1), offset_of(source, "c", 2)]

    def test_string_key(self, buffer):
        source = "var o = {'name': 1}; o.name;"
        buffer.add("s.js", source)
        groups = buffer.rename_token_at("s.js", offset_of(source, "name"))
        assert group_texts(groups, sources_of(buffer)) == [["name", "name"]]


class TestRenameInvariants:
    """Properties that must hold for any input"""

    SOURCE = (
        "function Point(x, y) { this.x = x; this.y = y; }\n"
        "Point.prototype.norm = function () { return this.x * this.x + this.y * this.y; };\n"
        "var p = new Point(1, 2), q = {x: 0, y: 0};\n"
        "function shift(pt) { pt.x = pt.x + 1; return pt; }\n"
        "outer: for (var i in q) { if (!i) continue outer; }\n"
        "try { p.norm(); } catch (e) { log(e); }\n"
    )

    def _identifier_offsets(self, buffer):
        program = find_ast_for_file(buffer.programs, "inv.js")
        return [node.location.start for node in walk(program) if node.type == "Identifier"]

    def test_classify_agrees_with_rename(self, buffer):
        buffer.add("inv.js", self.SOURCE)
        for offset in self._identifier_offsets(buffer):
            kind = buffer.classify("inv.js", offset)
            groups = buffer.rename_token_at("inv.js", offset)
            assert kind is not None and groups is not None, f"Identifier at {offset} not recognised"
            if kind in ("local", "label"):
                assert all(rng.file == "inv.js" for g in groups for rng in g)

    def test_token_is_in_its_own_groups(self, buffer):
        buffer.add("inv.js", self.SOURCE)
        for offset in self._identifier_offsets(buffer):
            groups = buffer.rename_token_at("inv.js", offset)
            starts = [rng.start.offset for g in groups for rng in g]
            assert offset in starts, f"Token at {offset} missing from its own rename groups"

    def test_groups_are_disjoint(self, buffer):
        buffer.add("inv.js", self.SOURCE)
        for name in ("x", "y", "norm", "prototype"):
            groups = buffer.rename_property_name(name)
            offsets = [o for g in groups for o in range_offsets(g)]
            assert len(offsets) == len(set(offsets)), f"Overlapping groups for {name!r}"

    def test_property_groups_cover_every_occurrence(self, buffer):
        buffer.add("inv.js", self.SOURCE)
        groups = buffer.rename_property_name("y")
        texts = [t for g in group_texts(groups, sources_of(buffer)) for t in g]
        # this.y once in Point and twice in norm, plus the `y:` key
        assert texts == ["y"] * 4

    def test_ranges_round_trip_to_source(self, buffer):
        buffer.add("inv.js", self.SOURCE)
        for offset in self._identifier_offsets(buffer):
            for group in buffer.rename_token_at("inv.js", offset):
                for rng in group:
                    text = rng.text(self.SOURCE)
                    assert text.isidentifier(), f"Range {rng} does not cover a name: {text!r}"
                    line = self.SOURCE.split("\n")[rng.start.line - 1]
                    assert line[rng.start.column:rng.end.column] == text

    def test_repeated_requests_are_stable(self, buffer):
        buffer.add("inv.js", self.SOURCE)
        first = buffer.rename_property_name("x")
        buffer.rename_property_name("norm")
        assert buffer.rename_property_name("x") == first

    def test_unrelated_file_does_not_change_groups(self, buffer):
        buffer.add("inv.js", self.SOURCE)
        offset = offset_of(self.SOURCE, "shift")
        before = buffer.rename_token_at("inv.js", offset)
        buffer.add("other.js", "var unrelated = {x: 1}; unrelated.x = 2;")
        assert buffer.rename_token_at("inv.js", offset) == before

    def test_new_file_extends_global_groups(self, buffer):
        buffer.add("a.js", "var shared;")
        assert [len(g) for g in buffer.rename_token_at("a.js", 4)] == [1]
        buffer.add("b.js", "shared = 1;")
        assert [len(g) for g in buffer.rename_token_at("a.js", 4)] == [2]


class TestBufferManagement:
    """Loading and unloading files"""

    def test_files_and_sources(self, buffer):
        buffer.add("one.js", "var a;")
        buffer.add("two.js", "var b;")
        assert buffer.files() == ["one.js", "two.js"]
        assert buffer.source("two.js") == "var b;"
        assert buffer.source("three.js") is None

    def test_duplicate_file(self, buffer):
        buffer.add("dup.js", "var a;")
        with pytest.raises(DuplicateFileError):
            buffer.add("dup.js", "var b;")
        with pytest.raises(DuplicateFileError):
            buffer.add_ast("dup.js", {"type": "Program", "body": []})
        assert buffer.source("dup.js") == "var a;"

    def test_clear(self, buffer):
        buffer.add("a.js", "var a;")
        buffer.clear()
        assert buffer.files() == []
        assert buffer.source("a.js") is None
        buffer.add("a.js", "var a;")
        assert buffer.files() == ["a.js"]

    def test_add_pre_parsed_program(self, buffer, session_parser):
        source = "var k = {}; k.m = 1;"
        buffer.add_ast("pre.js", session_parser.parse(source, "pre.js"))
        assert buffer.source("pre.js") is None
        groups = buffer.rename_property_name("m")
        assert [rng.file for g in groups for rng in g] == ["pre.js"]

    def test_add_estree_dict(self, buffer):
        ast = {
            "type": "Program", "range": [0, 6],
            "body": [{
                "type": "ExpressionStatement", "range": [0, 6],
                "expression": {
                    "type": "AssignmentExpression", "operator": "=", "range": [0, 5],
                    "left": {"type": "Identifier", "name": "z", "range": [0, 1]},
                    "right": {"type": "Identifier", "name": "z", "range": [4, 5]},
                },
            }],
        }
        buffer.add_ast("tree.js", ast, source="z = z;")
        groups = buffer.rename_token_at("tree.js", 4)
        assert [str(rng) for g in groups for rng in g] == ["tree.js:1:0-1:1", "tree.js:1:4-1:5"]
        assert buffer.classify("tree.js", 0) == "global"
        assert buffer.source("tree.js") == "z = z;"

    def test_estree_dict_without_loc_needs_source(self, buffer):
        ast = {"type": "Program", "range": [0, 2], "body": [{
            "type": "ExpressionStatement", "range": [0, 2],
            "expression": {"type": "Identifier", "name": "z", "range": [0, 1]},
        }]}
        with pytest.raises(JsRenameError):
            buffer.add_ast("bare.js", ast)
        assert buffer.files() == []

    def test_add_ast_rejects_non_programs(self, buffer):
        with pytest.raises(UnsupportedNodeError):
            buffer.add_ast("x.js", {"type": "Identifier", "name": "x"})

    def test_parse_errors_leave_the_buffer_unchanged(self):
        strict = JavaScriptBuffer(parser=Parser(tolerant=False))
        with pytest.raises(ParseError):
            strict.add("bad.js", "var = ;")
        assert strict.files() == []
        assert strict.source("bad.js") is None

    def test_default_parser_is_created_lazily(self):
        buffer = JavaScriptBuffer()
        assert buffer._parser is None
        buffer.add("lazy.js", "var a;")
        assert isinstance(buffer.parser, Parser)
