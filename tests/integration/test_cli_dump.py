"""
Tests for the `jsrename` command line: rename groups printed for a file
offset or a property name.
"""

import pytest

from jsrename.__main__ import main


@pytest.fixture
def write_js(tmp_path):
    def _write(name, source):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path
    return _write


class TestCliDump:
    """Exit codes and output format"""

    def test_rename_at_offset(self, write_js, capsys):
        source = "function f(){ var x = 1; return x; } var x = 2;"
        path = write_js("main.js", source)
        code = main([str(path), "--at", f"{path}:{source.index('x')}"])
        assert code == 0
        lines = capsys.readouterr().out.strip().split("\n")
        assert len(lines) == 2, f"Expected one line per occurrence: {lines}"
        assert all(line.startswith(f"{path}:1:") and line.endswith("  x") for line in lines)

    def test_property_groups_are_separated(self, write_js, capsys):
        a = write_js("a.js", "var a = {}; a.p = 1;")
        b = write_js("b.js", "var b = {}; b.p = 2; b.p;")
        code = main([str(a), str(b), "--property", "p"])
        assert code == 0
        out = capsys.readouterr().out
        blocks = out.strip().split("\n" + "-" * 16 + "\n")
        assert sorted(len(block.split("\n")) for block in blocks) == [1, 2]

    def test_global_across_files(self, write_js, capsys):
        a = write_js("a.js", "var shared = 1;")
        b = write_js("b.js", "shared++;")
        assert main([str(a), str(b), "--at", f"{b}:0"]) == 0
        out = capsys.readouterr().out
        assert str(a) in out and str(b) in out
        assert "-" * 16 not in out, "A global variable renames as a single group"

    def test_no_identifier(self, write_js, capsys):
        path = write_js("ws.js", "var a  =  1;")
        assert main([str(path), "--at", f"{path}:6"]) == 1
        assert "no identifier" in capsys.readouterr().err

    def test_unknown_property_prints_nothing(self, write_js, capsys):
        path = write_js("e.js", "var a = 1;")
        assert main([str(path), "--property", "nothing"]) == 0
        assert capsys.readouterr().out == ""


class TestCliErrors:
    """Bad arguments and bad input"""

    def test_missing_file(self, tmp_path, capsys):
        missing = tmp_path / "missing.js"
        assert main([str(missing), "--property", "p"]) == 1
        assert "file not found" in capsys.readouterr().err

    def test_malformed_position(self, write_js, capsys):
        path = write_js("a.js", "var a;")
        assert main([str(path), "--at", "nowhere"]) == 1
        assert "expected FILE:OFFSET" in capsys.readouterr().err

    def test_position_in_unloaded_file(self, write_js, tmp_path, capsys):
        path = write_js("a.js", "var a;")
        assert main([str(path), "--at", f"{tmp_path / 'other.js'}:0"]) == 1
        assert "not among the loaded files" in capsys.readouterr().err

    def test_parse_error_is_reported(self, write_js, capsys, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        path = write_js("broken.js", "function f() {\n  var x = 1;\n")
        assert main([str(path), "--property", "x"]) == 1
        err = capsys.readouterr().err
        assert "error[E0001]" in err
        assert f"{path}:" in err
        assert "aborting due to 1 previous error" in err

    def test_query_is_required(self, write_js):
        path = write_js("a.js", "var a;")
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 2
