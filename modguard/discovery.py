"""Go source file discovery.

Turns command-line arguments into the ordered list of files to lint:
  - no arguments      → "./..."
  - "dir/..."         → every .go file under dir, recursively
  - "dir"             → the .go files directly in dir
  - anything else     → kept verbatim (a missing file is reported by the
                        scanner as a read failure, not dropped here)

Recursive walks skip vendor/, testdata/ and directories whose name starts
with "." or "_", like the go tool. *_test.go files are skipped unless
include_tests is set.
"""

from __future__ import annotations

import os
from typing import Iterator, Sequence

from modguard.constants import GO_SOURCE_SUFFIX, GO_TEST_SUFFIX

_RECURSIVE_SUFFIX = "..."
_SKIPPED_DIRS = frozenset({"vendor", "testdata"})


def _is_go_file(name: str, include_tests: bool) -> bool:
    if not name.endswith(GO_SOURCE_SUFFIX):
        return False
    return include_tests or not name.endswith(GO_TEST_SUFFIX)


def _skip_dir(name: str) -> bool:
    return name in _SKIPPED_DIRS or name.startswith((".", "_"))


def _walk(root: str, include_tests: bool) -> Iterator[str]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not _skip_dir(d))
        for name in sorted(filenames):
            if _is_go_file(name, include_tests):
                yield os.path.normpath(os.path.join(dirpath, name))


def _list_dir(directory: str, include_tests: bool) -> Iterator[str]:
    for name in sorted(os.listdir(directory)):
        path = os.path.join(directory, name)
        if os.path.isfile(path) and _is_go_file(name, include_tests):
            yield os.path.normpath(path)


def expand_files(args: Sequence[str], include_tests: bool = False) -> list[str]:
    """Expand file/directory/pattern arguments into Go file paths.

    Returns paths de-duplicated, keeping the first occurrence.
    """
    patterns = list(args) or ["./" + _RECURSIVE_SUFFIX]

    seen: set[str] = set()
    files: list[str] = []

    for arg in patterns:
        if arg == _RECURSIVE_SUFFIX or arg.endswith("/" + _RECURSIVE_SUFFIX):
            root = os.path.normpath(arg[: -len(_RECURSIVE_SUFFIX)] or ".")
            expanded: Iterator[str] = _walk(root, include_tests)
        elif os.path.isdir(arg):
            expanded = _list_dir(arg, include_tests)
        else:
            expanded = iter([arg])

        for path in expanded:
            if path not in seen:
                seen.add(path)
                files.append(path)

    return files
