"""Go import declaration parser.

Provides ``parse_imports()``: reads the package clause and the import
declarations of a Go source file and returns one ImportReference per import
spec. The rest of the file is lexed to EOF and checked structurally: every
top-level declaration starts with const/func/type/var, brackets balance,
and literals and comments are terminated. Statement-level grammar inside
declarations is not checked.

Grammar handled:
  SourceFile = "package" PackageName ";" { ImportDecl ";" } { TopLevelDecl ";" }
  ImportDecl = "import" ( ImportSpec | "(" { ImportSpec ";" } ")" )
  ImportSpec = [ "." | PackageName ] ImportPath

Semicolons are inserted automatically at line ends (and at EOF) after an
identifier, a literal, ``)`` or one of break/continue/fallthrough/return,
as the Go lexer does. Line comments count as line ends; block comments
spanning lines do too.

Positions are 1-based; columns count bytes, matching Go tooling output.

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in this file.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Iterator, Optional

import re2  # google-re2, NOT stdlib re

from modguard.models.lint import ImportReference

# ─── Token patterns ───────────────────────────────────────────────────────────

_IDENT_RE = re2.compile(r"[\p{L}_][\p{L}\p{Nd}_]*")
_STRING_RE = re2.compile(r'"(?:[^"\\\n]|\\.)*"')
_RUNE_RE = re2.compile(r"'(?:[^'\\\n]|\\.)+'")
_NUMBER_RE = re2.compile(r"[0-9][0-9A-Za-z_.]*")

_KEYWORDS = frozenset({
    "break", "case", "chan", "const", "continue", "default", "defer", "else",
    "fallthrough", "for", "func", "go", "goto", "if", "import", "interface",
    "map", "package", "range", "return", "select", "struct", "switch", "type",
    "var",
})

# Keywords after which a newline terminates the statement.
_SEMI_KEYWORDS = frozenset({"break", "continue", "fallthrough", "return"})

# Keywords that may start a top-level declaration after the imports.
_DECL_KEYWORDS = frozenset({"const", "func", "type", "var"})

# Operator and delimiter characters; anything else outside a literal is illegal.
_OPERATOR_CHARS = frozenset("+-*/%&|^<>=!~:,[]{}")

_CLOSING = {"(": ")", "[": "]", "{": "}"}

# Characters Go rejects in import paths (besides non-graphic and spaces).
_ILLEGAL_IMPORT_CHARS = frozenset('!"#$%&\'()*,:;<=>?[\\]^`{|}\ufffd')

_BOM = "\ufeff"

# Token kinds
IDENT = "IDENT"
KEYWORD = "KEYWORD"
STRING = "STRING"
PUNCT = "PUNCT"
SEMI = "SEMI"
OTHER = "OTHER"
EOF = "EOF"


# ─── Errors ───────────────────────────────────────────────────────────────────


class GoSyntaxError(Exception):
    """A Go source file's header is not valid Go.

    Rendered as ``<file>:<line>:<column>: <msg>`` like the Go toolchain.
    """

    def __init__(self, filename: str, line: int, column: int, msg: str) -> None:
        self.filename = filename
        self.line = line
        self.column = column
        self.msg = msg
        super().__init__(f"{filename}:{line}:{column}: {msg}")


# ─── Lexer ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class _Token:
    kind: str
    value: str
    offset: int


class _Lexer:
    """Lazy Go tokenizer covering what a file header can contain."""

    def __init__(self, filename: str, text: str) -> None:
        self.filename = filename
        self.text = text
        self._line_starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self._line_starts.append(i + 1)

    def position(self, offset: int) -> tuple[int, int]:
        """Return (line, byte column) for a character offset."""
        index = bisect.bisect_right(self._line_starts, offset) - 1
        start = self._line_starts[index]
        column = len(self.text[start:offset].encode("utf-8")) + 1
        return index + 1, column

    def error(self, offset: int, msg: str) -> GoSyntaxError:
        line, column = self.position(offset)
        return GoSyntaxError(self.filename, line, column, msg)

    def tokens(self) -> Iterator[_Token]:
        text = self.text
        n = len(text)
        pos = 1 if text.startswith(_BOM) else 0
        insert_semi = False

        while pos < n:
            ch = text[pos]

            if ch == "\n":
                if insert_semi:
                    yield _Token(SEMI, "\n", pos)
                    insert_semi = False
                pos += 1
                continue

            if ch in " \t\r":
                pos += 1
                continue

            if text.startswith("//", pos):
                end = text.find("\n", pos)
                pos = n if end < 0 else end
                continue

            if text.startswith("/*", pos):
                end = text.find("*/", pos + 2)
                if end < 0:
                    raise self.error(pos, "comment not terminated")
                if insert_semi and "\n" in text[pos:end]:
                    yield _Token(SEMI, "\n", pos)
                    insert_semi = False
                pos = end + 2
                continue

            if ch == '"':
                m = _STRING_RE.match(text, pos)
                if m is None:
                    raise self.error(pos, "string literal not terminated")
                yield _Token(STRING, m.group(0), pos)
                insert_semi = True
                pos = m.end()
                continue

            if ch == "`":
                end = text.find("`", pos + 1)
                if end < 0:
                    raise self.error(pos, "raw string literal not terminated")
                yield _Token(STRING, text[pos:end + 1], pos)
                insert_semi = True
                pos = end + 1
                continue

            if ch == "'":
                m = _RUNE_RE.match(text, pos)
                if m is None:
                    if text.startswith("''", pos):
                        raise self.error(pos, "empty rune literal or unescaped ' in rune literal")
                    raise self.error(pos, "rune literal not terminated")
                yield _Token(OTHER, m.group(0), pos)
                insert_semi = True
                pos = m.end()
                continue

            m = _IDENT_RE.match(text, pos)
            if m is not None:
                word = m.group(0)
                if word in _KEYWORDS:
                    yield _Token(KEYWORD, word, pos)
                    insert_semi = word in _SEMI_KEYWORDS
                else:
                    yield _Token(IDENT, word, pos)
                    insert_semi = True
                pos = m.end()
                continue

            m = _NUMBER_RE.match(text, pos)
            if m is not None:
                yield _Token(OTHER, m.group(0), pos)
                insert_semi = True
                pos = m.end()
                continue

            if ch == ";":
                yield _Token(SEMI, ";", pos)
                insert_semi = False
            elif ch in "().":
                yield _Token(PUNCT, ch, pos)
                insert_semi = ch == ")"
            elif ch in _OPERATOR_CHARS:
                yield _Token(OTHER, ch, pos)
                insert_semi = ch in "]}"
            else:
                raise self.error(pos, f"illegal character U+{ord(ch):04X} '{ch}'")
            pos += 1

        if insert_semi:
            yield _Token(SEMI, "\n", n)
        while True:
            yield _Token(EOF, "", n)


# ─── Parser ───────────────────────────────────────────────────────────────────


class _ImportParser:
    def __init__(self, filename: str, text: str) -> None:
        self.filename = filename
        self.lexer = _Lexer(filename, text)
        self._stream = self.lexer.tokens()
        self.tok = next(self._stream)

    def advance(self) -> None:
        self.tok = next(self._stream)

    def _describe(self, tok: _Token) -> str:
        if tok.kind == EOF:
            return "'EOF'"
        if tok.kind == SEMI and tok.value == "\n":
            return "newline"
        if tok.kind == OTHER and tok.value in _OPERATOR_CHARS:
            return f"'{tok.value}'"
        if tok.kind in (IDENT, STRING, OTHER):
            return tok.value
        return f"'{tok.value}'"

    def error_expected(self, what: str) -> GoSyntaxError:
        return self.lexer.error(
            self.tok.offset, f"expected {what}, found {self._describe(self.tok)}"
        )

    def is_punct(self, value: str) -> bool:
        return self.tok.kind == PUNCT and self.tok.value == value

    def expect_semi(self) -> None:
        if self.is_punct(")"):
            return
        if self.tok.kind != SEMI:
            raise self.error_expected("';'")
        self.advance()

    def parse(self) -> list[ImportReference]:
        # ── Package clause ────────────────────────────────────────────────
        if not (self.tok.kind == KEYWORD and self.tok.value == "package"):
            raise self.error_expected("'package'")
        self.advance()
        if self.tok.kind != IDENT:
            raise self.error_expected("'IDENT'")
        if self.tok.value == "_":
            raise self.lexer.error(self.tok.offset, "invalid package name _")
        self.advance()
        if self.tok.kind != EOF:
            self.expect_semi()

        # ── Import declarations ───────────────────────────────────────────
        imports: list[ImportReference] = []
        while self.tok.kind == KEYWORD and self.tok.value == "import":
            self.advance()
            if self.is_punct("("):
                self.advance()
                while not self.is_punct(")") and self.tok.kind != EOF:
                    imports.append(self.parse_spec())
                    self.expect_semi()
                if not self.is_punct(")"):
                    raise self.error_expected("')'")
                self.advance()
            else:
                imports.append(self.parse_spec())
            if self.tok.kind != EOF:
                self.expect_semi()

        self.check_declarations()
        return imports

    def check_declarations(self) -> None:
        """Lex the remaining top-level declarations up to EOF.

        Raises GoSyntaxError on a declaration that does not start with a
        declaration keyword, a late import, or unbalanced brackets.
        """
        pending: list[str] = []
        at_start = True

        while self.tok.kind != EOF:
            tok = self.tok
            if not pending:
                if at_start:
                    if tok.kind == KEYWORD and tok.value == "import":
                        raise self.lexer.error(
                            tok.offset, "imports must appear before other declarations"
                        )
                    if not (tok.kind == KEYWORD and tok.value in _DECL_KEYWORDS):
                        raise self.error_expected("declaration")
                    at_start = False
                elif tok.kind == SEMI:
                    at_start = True

            if tok.kind in (PUNCT, OTHER) and tok.value in _CLOSING:
                pending.append(_CLOSING[tok.value])
            elif tok.kind in (PUNCT, OTHER) and tok.value in ")]}":
                if not pending:
                    raise self.error_expected("';'")
                if pending[-1] != tok.value:
                    raise self.error_expected(f"'{pending[-1]}'")
                pending.pop()
            self.advance()

        if pending:
            raise self.error_expected(f"'{pending[-1]}'")

    def parse_spec(self) -> ImportReference:
        start: Optional[int] = None
        if self.is_punct(".") or self.tok.kind == IDENT:
            start = self.tok.offset
            self.advance()

        if self.tok.kind != STRING:
            raise self.lexer.error(self.tok.offset, "missing import path")

        literal = self.tok.value
        path = literal[1:-1]
        if not _is_valid_import(path):
            raise self.lexer.error(self.tok.offset, f"invalid import path: {literal}")

        line, column = self.lexer.position(self.tok.offset if start is None else start)
        self.advance()
        return ImportReference(
            package_path=path,
            source_file=self.filename,
            line=line,
            column=column,
        )


def _is_valid_import(path: str) -> bool:
    if not path:
        return False
    for ch in path:
        if ch in _ILLEGAL_IMPORT_CHARS or ch.isspace() or not ch.isprintable():
            return False
    return True


# ─── Public entry point ───────────────────────────────────────────────────────


def parse_imports(filename: str, data: bytes) -> list[ImportReference]:
    """Extract the import specs of a Go source file, in declaration order.

    Args:
        filename: Path reported in each ImportReference and in errors.
        data:     Raw file contents.

    Returns:
        One ImportReference per import spec.

    Raises:
        GoSyntaxError: Missing/invalid package clause, malformed import
                       declarations, unterminated literals or comments, or
                       invalid UTF-8.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        head = data[:exc.start]
        line = head.count(b"\n") + 1
        column = exc.start - (head.rfind(b"\n") + 1) + 1
        raise GoSyntaxError(filename, line, column, "invalid UTF-8 encoding") from exc

    return _ImportParser(filename, text).parse()
