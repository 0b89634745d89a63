"""
Tests for the four renaming strategies and the dispatcher that picks one.
"""

import pytest

from jsrename.passes.renaming import (
    compute_global_variable_renaming, compute_label_renaming,
    compute_local_variable_renaming, compute_property_renaming,
    compute_renaming, get_label_decl, identifier_range,
)
from jsrename.shared.errors import JsRenameImplementationError
from jsrename.utils.config import KIND_GLOBAL, KIND_LABEL, KIND_LOCAL, KIND_PROPERTY
from tests.test_utils import (
    find_identifier, find_identifiers, find_nodes, group_texts, offset_of,
    parse_collection, parse_program, range_offsets,
)


def single_group(result):
    assert len(result) == 1, f"Expected a single group, got {len(result.groups)}"
    return result.groups[0]


class TestLocalVariables:
    """Scope search from the declaring function or catch clause"""

    def test_inner_variable_excludes_outer(self):
        source = "function f(){ var x = 1; return x; } var x = 2;"
        program = parse_program(source)
        result = compute_local_variable_renaming(find_identifier(program, "x"))
        assert result.kind == KIND_LOCAL
        group = single_group(result)
        assert [rng.start.offset for rng in group] == [offset_of(source, "x"), offset_of(source, "x", 1)]
        assert offset_of(source, "x", 2) not in [rng.start.offset for rng in group]

    def test_nested_redeclaration_is_cut_off(self):
        source = ("function f(a) { a; function g(a) { return a; }"
                  " var h = function () { return a; }; }")
        program = parse_program(source)
        group = single_group(compute_local_variable_renaming(find_identifier(program, "a")))
        assert len(group) == 3, "param, direct use and the closure use; g's own a is excluded"
        g_param = find_identifier(program, "a", 2)
        assert g_param.location.start not in [rng.start.offset for rng in group]

    def test_shadowing_function_name_belongs_outside(self):
        source = "function outer() { var n = 1; function n() { var n; } return n; }"
        program = parse_program(source)
        group = single_group(compute_local_variable_renaming(find_identifier(program, "n")))
        offsets = [rng.start.offset for rng in group]
        assert offsets == [offset_of(source, "n ="), offset_of(source, "n()"), offset_of(source, "n; }", 1)], \
            f"Unexpected occurrences: {offsets}"

    def test_function_name_not_captured_by_its_parameter(self):
        source = "function f(f) { return f; }"
        program = parse_program(source)
        param = find_identifier(program, "f", 1)
        group = single_group(compute_local_variable_renaming(param))
        assert [rng.start.offset for rng in group] == [offset_of(source, "f)"), offset_of(source, "f;")]

    def test_with_body_is_searched(self):
        program = parse_program("function f(o) { var v; with (o) { v = 1; } }")
        group = single_group(compute_local_variable_renaming(find_identifier(program, "v")))
        assert len(group) == 2

    def test_catch_parameter(self):
        source = "try {} catch (err) { log(err); } err;"
        program = parse_program(source)
        group = single_group(compute_local_variable_renaming(find_identifier(program, "err")))
        assert len(group) == 2, "The use after the catch clause is a different (global) variable"

    def test_properties_with_the_same_name_are_skipped(self):
        program = parse_program("function f(p) { return p.p + ({p: p}).p; }")
        group = single_group(compute_local_variable_renaming(find_identifier(program, "p")))
        assert len(group) == 3

    def test_global_variables_are_rejected(self):
        program = parse_program("var top = 1;")
        with pytest.raises(JsRenameImplementationError):
            compute_local_variable_renaming(find_identifier(program, "top"))


class TestGlobalVariables:
    """Whole-collection search plus properties of the global object"""

    def test_across_files(self):
        sources = {"a.js": "var foo = 1;", "b.js": "foo = foo + 1;"}
        root = parse_collection(sources)
        result = compute_global_variable_renaming(root, "foo")
        assert result.kind == KIND_GLOBAL
        group = single_group(result)
        assert sorted(rng.file for rng in group) == ["a.js", "b.js", "b.js"]
        assert group_texts(result.groups, sources) == [["foo", "foo", "foo"]]

    def test_shadowed_uses_are_excluded(self):
        source = "var g; function f(g) { g; } g;"
        program = parse_program(source)
        group = single_group(compute_global_variable_renaming(program, "g"))
        assert [rng.start.offset for rng in group] == [offset_of(source, "g;"), offset_of(source, "g;", 2)]

    def test_global_object_properties(self):
        source = "var v = 1; this.v = 2; this['v'] = 3; function F() { this.v = 4; }"
        program = parse_program(source)
        result = compute_global_variable_renaming(program, "v")
        group = single_group(result)
        assert group_texts(result.groups, {"test.js": source}) == [["v", "v", "v"]]
        assert offset_of(source, "v = 4") not in [rng.start.offset for rng in group], \
            "this inside an uncalled constructor is not the global object"

    def test_shadowing_function_declaration_name(self):
        source = "function g() {} function h() { function g() { var g; } }"
        program = parse_program(source)
        group = single_group(compute_global_variable_renaming(program, "g"))
        assert [rng.start.offset for rng in group] == [offset_of(source, "g")]


class TestLabels:
    """Labels and the jumps that target them"""

    def test_break_and_declaration(self):
        source = "a: while (true) { break a; }"
        program = parse_program(source)
        result = compute_label_renaming(find_identifier(program, "a"))
        assert result.kind == KIND_LABEL
        assert len(single_group(result)) == 2

    def test_from_a_jump(self):
        program = parse_program("a: while (true) { continue a; }")
        jump_label = find_identifier(program, "a", 1)
        assert get_label_decl(jump_label) is find_nodes(program, "LabeledStatement")[0]
        assert len(single_group(compute_label_renaming(jump_label))) == 2

    def test_inner_label_shadows(self):
        source = "a: { a: { break a; } break a; }"
        program = parse_program(source)
        group = single_group(compute_label_renaming(find_identifier(program, "a")))
        assert [rng.start.offset for rng in group] == [0, offset_of(source, "a;", 1)]

    def test_labels_do_not_cross_functions(self):
        source = "a: for (;;) { (function () { a: while (1) { break a; } })(); break a; }"
        program = parse_program(source)
        group = single_group(compute_label_renaming(find_identifier(program, "a")))
        assert [rng.start.offset for rng in group] == [0, offset_of(source, "a;", 1)]

    def test_function_boundary_stops_declaration_lookup(self):
        program = parse_program("a: for (;;) { (function () { break a; })(); }")
        inner_jump = find_identifier(program, "a", 1)
        assert get_label_decl(inner_jump) is None

    def test_undeclared_label(self):
        source = "function f() { break missing; continue missing; }"
        program = parse_program(source)
        group = single_group(compute_label_renaming(find_identifier(program, "missing")))
        assert len(group) == 2, "Without a declaration the enclosing function is searched"


class TestProperties:
    """Property renaming grouped by the type of the accessed object"""

    def test_constructor_instances_share_a_group(self):
        source = "function C() { this.x = 1; } var c = new C(); c.x;"
        program = parse_program(source)
        result = compute_property_renaming(program, "x")
        assert result.kind == KIND_PROPERTY
        group = single_group(result)
        assert [rng.start.offset for rng in group] == [offset_of(source, "x ="), offset_of(source, "x;")]

    def test_unrelated_objects_get_separate_groups(self):
        source = "var a = {}, b = {}; a.p = 1; b.p = 2; a.p;"
        program = parse_program(source)
        result = compute_property_renaming(program, "p")
        assert sorted(len(group) for group in result.groups) == [1, 2]
        starts = [range_offsets(group) for group in result.groups]
        assert len({start for group in starts for start in group}) == 3, "Groups must be disjoint"

    def test_object_literal_and_access_unify(self):
        source = "var o = {k: 1, 'q': 2}; o.k; o['q'];"
        program = parse_program(source)
        k_groups = compute_property_renaming(program, "k").groups
        q_groups = compute_property_renaming(program, "q").groups
        assert group_texts(k_groups, {"test.js": source}) == [["k", "k"]]
        assert group_texts(q_groups, {"test.js": source}) == [["q", "q"]], \
            "String keys are renamed without their quotes"

    def test_global_object_properties_are_excluded(self):
        source = "this.x = 1; var o = {}; o.x = 2;"
        program = parse_program(source)
        group = single_group(compute_property_renaming(program, "x"))
        assert [rng.start.offset for rng in group] == [offset_of(source, "x = 2")]

    def test_groups_are_ordered_by_type(self):
        source = "var a = {}, b = {}; b.p = 1; a.p = 2;"
        program = parse_program(source)
        first = compute_property_renaming(program, "p").groups
        second = compute_property_renaming(program, "p").groups
        assert first == second, "Repeated requests must give the same group order"

    def test_unknown_name(self):
        program = parse_program("var o = {a: 1};")
        assert compute_property_renaming(program, "zzz").groups == []


class TestDispatch:
    """compute_renaming picks the strategy from the classification"""

    SOURCE = (
        "var g = {};\n"
        "function f(loc) { lbl: for (;;) { break lbl; } return loc.field; }\n"
        "this.g2 = 1;\n"
    )

    @pytest.mark.parametrize("name,kind", [
        ("g", KIND_GLOBAL),
        ("loc", KIND_LOCAL),
        ("lbl", KIND_LABEL),
        ("field", KIND_PROPERTY),
        ("g2", KIND_GLOBAL),
    ])
    def test_strategy(self, name, kind):
        program = parse_program(self.SOURCE)
        result = compute_renaming(program, find_identifier(program, name))
        assert result is not None and result.kind == kind, f"{name}: expected {kind}, got {result}"

    def test_non_identifier_tokens(self):
        program = parse_program("x = 1 + 'str';")
        for literal in find_nodes(program, "Literal"):
            assert compute_renaming(program, literal) is None

    def test_identifier_range_of_string_key(self):
        source = "o = {'key': 1};"
        program = parse_program(source)
        literal = find_nodes(program, "Literal")[0]
        rng = identifier_range(literal)
        assert rng.text(source) == "key"
        assert (rng.start.column, rng.end.column) == (offset_of(source, "key"), offset_of(source, "key") + 3)

    def test_identifier_range_has_file(self):
        program = parse_program("abc;", "dir/f.js")
        rng = identifier_range(find_identifiers(program, "abc")[0])
        assert rng.file == "dir/f.js"
        assert str(rng) == "dir/f.js:1:0-1:3"
