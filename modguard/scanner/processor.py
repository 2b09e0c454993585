"""Import scanner — lints Go files against the blocked module set.

Provides:
  - ``scan()``: the scan pipeline (read → parse → match) for a batch of files.
  - ``build_blocked_message()``: diagnostic text for a blocked import.
  - ``Processor``: caches the blocked module set for its lifetime.
  - ``new_processor()``: reads go.mod and builds a Processor.

SCAN INVARIANTS:
  - Empty blocked set → empty ScanResult; no file is read or parsed.
  - A file that cannot be read yields exactly ONE diagnostic (line 0); its
    parse is not attempted.
  - A file that cannot be parsed yields exactly ONE diagnostic (line 0).
  - Per-file failures never abort the batch. Single attempt, no retry.
  - Output order = file submission order, then import declaration order,
    also when files are processed on a worker pool.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

from modguard.allowlist.policy import compute_blocked_modules, is_blocked_package
from modguard.allowlist.replacements import ReplacementTable
from modguard.config import Config
from modguard.constants import (
    BLOCKED_REASON,
    GO_MOD_FILE,
    PARSE_FAILURE_REASON,
    READ_FAILURE_REASON,
)
from modguard.manifest.gomod import read_manifest
from modguard.models.lint import (
    BlockedModuleSet,
    Dependency,
    Diagnostic,
    ImportReference,
    ScanResult,
)
from modguard.scanner.goparse import GoSyntaxError, parse_imports
from modguard.utils.logger import PerformanceLogger, get_logger

logger = get_logger(__name__)

ReadFn = Callable[[str], bytes]
ParseFn = Callable[[str, bytes], Sequence[ImportReference]]


def read_file(filename: str) -> bytes:
    """Default read operation: raw bytes from disk."""
    return Path(filename).read_bytes()


# ─── Diagnostics ──────────────────────────────────────────────────────────────


def build_blocked_message(package_path: str, replacements: ReplacementTable) -> str:
    """Return the diagnostic text for a blocked import.

    The base sentence is followed, after a single space, by the suggestion of
    the first replacement rule matching the package (if any).
    """
    message = BLOCKED_REASON.format(package=package_path)
    replacement = replacements.get(package_path)
    if replacement is not None:
        message += f" {replacement.suggestion()}"
    return message


def _scan_file(
    filename: str,
    blocked: BlockedModuleSet,
    replacements: ReplacementTable,
    read: ReadFn,
    parse: ParseFn,
) -> list[Diagnostic]:
    """Lint one file. Never raises for read or syntax failures."""
    try:
        data = read(filename)
    except OSError as exc:
        logger.debug("File read failed", file=filename, error=str(exc))
        return [
            Diagnostic(
                file=filename,
                line=0,
                column=0,
                message=READ_FAILURE_REASON.format(error=exc),
            )
        ]

    try:
        imports = parse(filename, data)
    except GoSyntaxError as exc:
        logger.debug("File parse failed", file=filename, error=str(exc))
        return [
            Diagnostic(
                file=filename,
                line=0,
                column=0,
                message=PARSE_FAILURE_REASON.format(error=exc),
            )
        ]

    diagnostics: list[Diagnostic] = []
    for ref in imports:
        if not is_blocked_package(ref.package_path, blocked):
            continue
        diagnostics.append(
            Diagnostic(
                file=ref.source_file,
                line=ref.line,
                column=ref.column,
                message=build_blocked_message(ref.package_path, replacements),
            )
        )
    return diagnostics


# ─── Scan pipeline ────────────────────────────────────────────────────────────


def scan(
    files: Iterable[str],
    blocked: BlockedModuleSet,
    replacements: ReplacementTable,
    *,
    read: ReadFn = read_file,
    parse: ParseFn = parse_imports,
    workers: int = 1,
) -> ScanResult:
    """Lint a batch of Go files for imports of blocked modules.

    Args:
        files:        File paths, in submission order.
        blocked:      Blocked module set from compute_blocked_modules().
        replacements: Replacement suggestions (first matching rule wins).
        read:         Read operation (path → bytes); OSError = read failure.
        parse:        Parse operation (path, bytes → ImportReferences);
                      GoSyntaxError = parse failure.
        workers:      Files processed concurrently when > 1. Per-file
                      diagnostic lists are concatenated in submission order.

    Returns:
        A new ScanResult owned by the caller.
    """
    result = ScanResult()

    # Fast path: fully-allowed dependency set, nothing can be blocked
    if not blocked:
        return result

    filenames = list(files)

    if workers > 1 and len(filenames) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map() yields in submission order regardless of completion order
            for diagnostics in pool.map(
                lambda name: _scan_file(name, blocked, replacements, read, parse),
                filenames,
            ):
                result.extend(diagnostics)
    else:
        for filename in filenames:
            result.extend(_scan_file(filename, blocked, replacements, read, parse))

    return result


# ─── Processor ────────────────────────────────────────────────────────────────


class Processor:
    """Lints Go files against a config and a project's go.mod requirements.

    The blocked module set is computed once at construction and reused by
    every process_files() call. Each call returns an independent result.

    Usage:
        processor = new_processor(load_config())
        for diagnostic in processor.process_files(["main.go"]):
            print(diagnostic)
    """

    def __init__(self, config: Config, dependencies: Iterable[Dependency]) -> None:
        self.config = config

        logger.info("Allowed modules", modules=list(config.allow.modules))
        logger.info("Allowed module domains", domains=list(config.allow.domains))

        self.blocked_modules: BlockedModuleSet = compute_blocked_modules(
            dependencies, config.allow
        )

    def process_files(
        self,
        filenames: Iterable[str],
        *,
        workers: int = 1,
        read: ReadFn = read_file,
        parse: ParseFn = parse_imports,
    ) -> ScanResult:
        """Lint the given files (full paths) and return their diagnostics."""
        logger.info(
            "go.mod blocked modules",
            count=len(self.blocked_modules),
            modules=list(self.blocked_modules),
        )

        with PerformanceLogger("Import scan", logger):
            return scan(
                filenames,
                self.blocked_modules,
                self.config.replacements,
                read=read,
                parse=parse,
                workers=workers,
            )


def new_processor(config: Config, manifest_path: Optional[str] = None) -> Processor:
    """Read go.mod and build a Processor.

    Args:
        config:        Loaded configuration.
        manifest_path: go.mod location; defaults to config.gomod_path
                       (./go.mod unless overridden).

    Raises:
        ManifestError: go.mod cannot be read or parsed. Fatal — no
                       diagnostics can be produced without it.
    """
    path = manifest_path or config.gomod_path or GO_MOD_FILE
    dependencies = read_manifest(path)
    return Processor(config, dependencies)
