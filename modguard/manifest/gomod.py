"""go.mod requirement reader for modguard.

Reads the project's go.mod and returns its ``require`` entries as
Dependency objects. Only requirements matter to the linter: every other
directive (module, go, toolchain, replace, exclude, retract, ...) is
validated as a known directive and otherwise ignored.

Supported syntax:
  require example.com/a v1.2.3
  require example.com/b v0.1.0 // indirect
  require (
      example.com/c v1.0.0
      "example.com/d" v1.0.0 // indirect; pulled in by c
  )

A requirement is indirect when its trailing comment is exactly ``indirect``
or starts with ``indirect;``.

ERROR POLICY:
  - Unreadable or unparseable go.mod is FATAL to the run — ManifestError.
  - The blocked module set cannot be computed without it, so there is no
    partial result.
"""

from __future__ import annotations

import json
from typing import Optional

import re2  # google-re2, NOT stdlib re

from modguard.constants import GO_MOD_FILE
from modguard.models.lint import Dependency
from modguard.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Grammar constants ────────────────────────────────────────────────────────

_KNOWN_DIRECTIVES = frozenset({
    "module",
    "go",
    "toolchain",
    "godebug",
    "require",
    "exclude",
    "replace",
    "retract",
    "tool",
    "ignore",
})

# Unquoted token: slash-separated run that stops before "//" (comment start).
_IDENT_RE = re2.compile(r'[^\s()"`/]+(?:/[^\s()"`/]+)*')

# Interpreted string with Go/JSON-style escapes.
_QUOTED_RE = re2.compile(r'"(?:[^"\\]|\\.)*"')


# ─── Errors ───────────────────────────────────────────────────────────────────


class ManifestError(Exception):
    """go.mod could not be read or parsed. Fatal to the whole run."""


class GoModSyntaxError(ManifestError):
    """go.mod contents are not valid. Message is ``<file>:<line>: <msg>``."""

    def __init__(self, filename: str, line: int, msg: str) -> None:
        self.filename = filename
        self.line = line
        self.msg = msg
        super().__init__(f"{filename}:{line}: {msg}")


# ─── Lexing ───────────────────────────────────────────────────────────────────


def _split_line(
    text: str, lineno: int, filename: str
) -> tuple[list[str], Optional[str]]:
    """Split one go.mod line into tokens and its trailing ``//`` comment."""
    tokens: list[str] = []
    comment: Optional[str] = None
    i = 0
    n = len(text)

    while i < n:
        c = text[i]
        if c.isspace():
            i += 1
            continue
        if text.startswith("//", i):
            comment = text[i + 2:]
            break
        if c in "()":
            tokens.append(c)
            i += 1
            continue
        if c == '"':
            m = _QUOTED_RE.match(text, i)
            if m is None:
                raise GoModSyntaxError(filename, lineno, "unterminated quoted string")
            tokens.append(m.group(0))
            i = m.end()
            continue
        if c == "`":
            close = text.find("`", i + 1)
            if close < 0:
                raise GoModSyntaxError(filename, lineno, "unterminated raw string")
            tokens.append(text[i:close + 1])
            i = close + 1
            continue
        m = _IDENT_RE.match(text, i)
        if m is None:
            # Lone "/" that does not start a comment
            tokens.append(c)
            i += 1
            continue
        tokens.append(m.group(0))
        i = m.end()

    return tokens, comment


def _unquote(token: str, lineno: int, filename: str) -> str:
    if token.startswith("`"):
        return token[1:-1]
    if token.startswith('"'):
        try:
            return json.loads(token)
        except ValueError:
            raise GoModSyntaxError(filename, lineno, f"invalid quoted string: {token}")
    return token


def _is_indirect(comment: Optional[str]) -> bool:
    if comment is None:
        return False
    text = comment.strip()
    return text == "indirect" or text.startswith("indirect;")


# ─── Parsing ──────────────────────────────────────────────────────────────────


def _parse_require(
    args: list[str],
    comment: Optional[str],
    lineno: int,
    filename: str,
) -> Dependency:
    if len(args) != 2 or "(" in args or ")" in args:
        raise GoModSyntaxError(filename, lineno, "usage: require module/path v1.2.3")
    path = _unquote(args[0], lineno, filename)
    _unquote(args[1], lineno, filename)
    if not path:
        raise GoModSyntaxError(filename, lineno, "empty module path")
    return Dependency(module_path=path, is_direct=not _is_indirect(comment))


def parse_gomod(data: str, filename: str = GO_MOD_FILE) -> list[Dependency]:
    """Parse go.mod text into its requirements, in declaration order.

    Args:
        data:     go.mod contents.
        filename: Name used in error messages.

    Returns:
        One Dependency per require entry (duplicates kept).

    Raises:
        GoModSyntaxError: On unknown directives, malformed require entries,
                          unterminated strings or blocks.
    """
    dependencies: list[Dependency] = []
    block: Optional[str] = None
    block_line = 0

    for lineno, raw_line in enumerate(data.split("\n"), start=1):
        tokens, comment = _split_line(raw_line, lineno, filename)
        if not tokens:
            continue

        # ── Inside a "verb (" ... ")" block ───────────────────────────────
        if block is not None:
            if tokens[0] == ")":
                if len(tokens) > 1:
                    raise GoModSyntaxError(filename, lineno, "unexpected token after ')'")
                block = None
                continue
            if block == "require":
                dependencies.append(_parse_require(tokens, comment, lineno, filename))
            continue

        verb = tokens[0]
        if verb in ("(", ")"):
            raise GoModSyntaxError(filename, lineno, f"unexpected '{verb}'")
        if verb not in _KNOWN_DIRECTIVES:
            raise GoModSyntaxError(filename, lineno, f"unknown directive: {verb}")

        rest = tokens[1:]
        if rest == ["(", ")"]:
            continue
        if rest == ["("]:
            block = verb
            block_line = lineno
            continue

        if verb == "require":
            dependencies.append(_parse_require(rest, comment, lineno, filename))

    if block is not None:
        raise GoModSyntaxError(filename, block_line, f"unterminated {block} block")

    return dependencies


def read_manifest(path: str = GO_MOD_FILE) -> list[Dependency]:
    """Read and parse go.mod.

    Raises:
        ManifestError: "unable to read go.mod file: ..." when the file cannot
                       be read, "unable to parse go.mod file: ..." when it is
                       not valid.
    """
    try:
        with open(path, "rb") as fh:
            raw = fh.read()
    except OSError as exc:
        msg = f"unable to read go.mod file: {exc}"
        logger.error(msg, path=path)
        raise ManifestError(msg) from exc

    try:
        dependencies = parse_gomod(raw.decode("utf-8"), filename=path)
    except UnicodeDecodeError as exc:
        msg = f"unable to parse go.mod file: {path}: invalid UTF-8 ({exc.reason})"
        logger.error(msg, path=path)
        raise ManifestError(msg) from exc
    except GoModSyntaxError as exc:
        msg = f"unable to parse go.mod file: {exc}"
        logger.error(msg, path=path)
        raise ManifestError(msg) from exc

    logger.debug(
        "go.mod loaded",
        path=path,
        requirements=len(dependencies),
        direct=sum(1 for d in dependencies if d.is_direct),
    )
    return dependencies
