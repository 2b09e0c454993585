"""Tests for the Go import parser.

Tests:
  - Single and grouped import declarations, named/dot/blank imports
  - Positions: 1-based line/column, alias position for named imports
  - Comments, raw strings, explicit semicolons, BOM
  - Declarations after the imports: brackets, literals, late imports
  - Syntax errors → GoSyntaxError with position
"""

from __future__ import annotations

import textwrap

import pytest

from modguard.scanner.goparse import GoSyntaxError, parse_imports


def _parse(src: str, filename: str = "main.go"):
    return parse_imports(filename, textwrap.dedent(src).encode("utf-8"))


def _paths(src: str) -> list[str]:
    return [ref.package_path for ref in _parse(src)]


# ─── Import extraction ────────────────────────────────────────────────────────


class TestImportExtraction:
    def test_no_imports(self):
        assert _parse("package main\n\nfunc main() {}\n") == []

    def test_package_clause_only(self):
        assert _parse("package main") == []

    def test_single_import(self):
        refs = _parse('package main\n\nimport "fmt"\n')
        assert len(refs) == 1
        ref = refs[0]
        assert ref.package_path == "fmt"
        assert ref.source_file == "main.go"
        assert (ref.line, ref.column) == (3, 8)

    def test_grouped_imports_in_declaration_order(self):
        src = """\
        package main

        import (
            "fmt"
            "github.com/evil/pkg/sub"
            "os"
        )
        """
        assert _paths(src) == ["fmt", "github.com/evil/pkg/sub", "os"]

    def test_multiple_declarations(self):
        src = 'package main\nimport "a.io/a"\nimport ("b.io/b"; "c.io/c")\nimport "d.io/d"\n'
        assert _paths(src) == ["a.io/a", "b.io/b", "c.io/c", "d.io/d"]

    def test_named_dot_and_blank_imports(self):
        src = """\
        package main

        import (
            foo "a.io/foo"
            . "b.io/dot"
            _ "c.io/blank"
        )
        """
        assert _paths(src) == ["a.io/foo", "b.io/dot", "c.io/blank"]

    def test_named_import_positioned_at_alias(self):
        src = 'package main\n\nimport (\n\tfoo "a.io/foo"\n)\n'
        ref = _parse(src)[0]
        assert (ref.line, ref.column) == (4, 2)

    def test_raw_string_path(self):
        assert _paths("package main\nimport `a.io/raw`\n") == ["a.io/raw"]

    def test_comments_between_imports(self):
        src = """\
        // Package main does things.
        package main // trailing

        /* block
           comment */
        import (
            // the first
            "a.io/a" // why
            /* inline */ "b.io/b"
        )
        """
        assert _paths(src) == ["a.io/a", "b.io/b"]

    def test_declarations_after_imports(self):
        src = """\
        package main

        import "a.io/a"

        type T struct {
            Name string `json:"name"`
        }

        var (
            r = '\\''
            s = "}{"
        )

        func (t *T) Do(xs ...int) map[string][]int {
            m := map[string][]int{}
            for _, x := range xs {
                m[t.Name] = append(m[t.Name], x&^1)
            }
            return m
        }
        """
        assert _paths(src) == ["a.io/a"]

    def test_bom_skipped(self):
        data = "\ufeffpackage main\nimport \"a.io/a\"\n".encode("utf-8")
        assert [r.package_path for r in parse_imports("bom.go", data)] == ["a.io/a"]

    def test_crlf_line_endings(self):
        data = b'package main\r\nimport (\r\n\t"a.io/a"\r\n)\r\n'
        refs = parse_imports("crlf.go", data)
        assert [(r.package_path, r.line) for r in refs] == [("a.io/a", 3)]

    def test_column_counts_bytes(self):
        src = 'package main\nimport (\n/* é */ "a.io/a"\n)\n'
        ref = _parse(src)[0]
        # "/* é */ " is 9 bytes in UTF-8
        assert ref.column == 10

    def test_no_trailing_newline(self):
        assert _paths('package main\nimport "a.io/a"') == ["a.io/a"]


# ─── Syntax errors ────────────────────────────────────────────────────────────


class TestSyntaxErrors:
    def test_empty_file(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse("")
        assert str(exc_info.value) == "main.go:1:1: expected 'package', found 'EOF'"

    def test_missing_package_clause(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse('import "fmt"\n')
        assert "expected 'package', found 'import'" in str(exc_info.value)

    def test_blank_package_name(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse("package _\n")
        assert "invalid package name _" in str(exc_info.value)

    def test_missing_package_name(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse("package\n")
        assert "expected 'IDENT'" in str(exc_info.value)

    def test_unterminated_group(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse('package main\nimport (\n"a.io/a"\n')
        assert "expected ')', found 'EOF'" in str(exc_info.value)

    def test_unterminated_string(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse('package main\nimport "a.io/a\n')
        err = exc_info.value
        assert (err.line, err.column) == (2, 8)
        assert "string literal not terminated" in str(err)

    def test_unterminated_comment(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse("package main\n/* never closed\n")
        assert "comment not terminated" in str(exc_info.value)

    def test_missing_import_path(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse("package main\nimport fmt\n")
        assert "missing import path" in str(exc_info.value)

    def test_empty_import_path(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse('package main\nimport ""\n')
        assert 'invalid import path: ""' in str(exc_info.value)

    def test_import_path_with_space(self):
        with pytest.raises(GoSyntaxError):
            _parse('package main\nimport "a.io/a b"\n')

    def test_two_paths_on_one_spec(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse('package main\nimport "a.io/a" "b.io/b"\n')
        assert "expected ';'" in str(exc_info.value)

    def test_mismatched_bracket_after_imports(self):
        src = 'package main\nimport "fmt"\nfunc main( {\n\tfmt.Println("x"\n}'
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse(src)
        err = exc_info.value
        assert (err.line, err.column) == (5, 1)
        assert "expected ')', found '}'" in str(err)

    def test_unclosed_body_at_eof(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse('package main\nimport "github.com/evil/pkg"\nfunc main() { x := 1')
        assert "expected '}', found 'EOF'" in str(exc_info.value)

    def test_statement_outside_declaration(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse('package main\nimport "a.io/a"\nx := 1\n')
        err = exc_info.value
        assert (err.line, err.column) == (3, 1)
        assert "expected declaration, found x" in str(err)

    def test_import_after_declaration(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse('package main\nimport "a.io/a"\nvar x = 1\nimport "b.io/b"\n')
        assert "imports must appear before other declarations" in str(exc_info.value)

    def test_unterminated_string_in_body(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse('package main\nfunc main() {\n\tprintln("oops)\n}\n')
        assert "string literal not terminated" in str(exc_info.value)

    def test_illegal_character(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            _parse("package main\nfunc main() { @ }\n")
        assert "illegal character U+0040 '@'" in str(exc_info.value)

    def test_invalid_utf8(self):
        with pytest.raises(GoSyntaxError) as exc_info:
            parse_imports("bad.go", b"package main\nimport \"\xff\"\n")
        err = exc_info.value
        assert (err.line, err.column) == (2, 9)
        assert "invalid UTF-8" in str(err)
