"""Lint data model: manifest dependencies, import references and diagnostics.

All scan output flows through Diagnostic. ScanResult is the append-only
accumulator a single scan owns; it is never shared between scans.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

# ─── Type Aliases ─────────────────────────────────────────────────────────────

# Ordered module paths of every direct dependency not covered by the allow
# configuration. Duplicates are kept; callers only test membership.
BlockedModuleSet = tuple[str, ...]


# ─── Manifest ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Dependency:
    """One requirement declared in go.mod.

    Only direct requirements (is_direct=True) take part in blocking decisions.
    Requirements marked ``// indirect`` are never blocked individually.
    """

    module_path: str
    is_direct: bool = True


# ─── Source ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ImportReference:
    """One import spec found in a Go source file.

    line and column are 1-based and point at the import spec: the alias when
    the import is named (``foo "x/y"``), the path literal otherwise.
    """

    package_path: str
    source_file: str
    line: int
    column: int


# ─── Output ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Diagnostic:
    """A single lint finding.

    Produced for a blocked import (positioned at the import spec), or for a
    file that could not be read or parsed (line and column are 0).
    """

    file: str
    line: int
    column: int
    message: str

    def __str__(self) -> str:
        return f"{self.file}:{self.line}: {self.message}"

    def to_dict(self) -> dict:
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "message": self.message,
        }


@dataclass
class ScanResult:
    """Ordered, append-only list of diagnostics for one scan run.

    Ordering follows the order files were submitted and, within a file, the
    order imports were declared. Nothing is ever removed or reordered.
    """

    _diagnostics: list[Diagnostic] = field(default_factory=list)

    def add(self, diagnostic: Diagnostic) -> None:
        self._diagnostics.append(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        self._diagnostics.extend(diagnostics)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        """Snapshot of the diagnostics collected so far."""
        return tuple(self._diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(tuple(self._diagnostics))

    def __len__(self) -> int:
        return len(self._diagnostics)
