"""modguard command-line entry point.

Usage:
    modguard                      # lint ./... against ./go.mod and .modguard.yaml
    modguard -f ci.yaml cmd/...   # explicit config, only files under cmd/
    python -m modguard.cli -v     # with INFO logs on stderr

Diagnostics are printed to stdout as ``<file>:<line>: <reason>`` (or as a
JSON array with --format json). Logs go to stderr.

Exit codes:
    0 — no diagnostics
    1 — config or go.mod could not be loaded (nothing was linted)
    2 — at least one diagnostic
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Optional, Sequence

from modguard import __version__
from modguard.config import load_config
from modguard.constants import EXIT_CONFIG_ERROR, EXIT_OK, EXIT_VIOLATIONS
from modguard.discovery import expand_files
from modguard.manifest.gomod import ManifestError
from modguard.scanner.processor import new_processor
from modguard.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modguard",
        description=f"modguard v{__version__} — allow-list linter for Go module imports",
    )
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="Go files, directories or dir/... patterns (default: ./...)",
    )
    parser.add_argument(
        "-f",
        "--config",
        metavar="CONFIG",
        help="Config file (default: .modguard.yaml, then ~/.modguard.yaml)",
    )
    parser.add_argument(
        "-m",
        "--gomod",
        metavar="GOMOD",
        help="go.mod file (default: ./go.mod)",
    )
    parser.add_argument(
        "-t",
        "--tests",
        action="store_true",
        help="Also lint *_test.go files",
    )
    parser.add_argument(
        "-w",
        "--workers",
        type=int,
        default=1,
        help="Files read and parsed concurrently (default: 1)",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Diagnostic output format (default: text)",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log INFO messages to stderr",
    )
    verbosity.add_argument(
        "--debug",
        action="store_true",
        help="Log DEBUG messages to stderr",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON lines",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the linter. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    if args.debug:
        level = "DEBUG"
    elif args.verbose:
        level = "INFO"
    else:
        level = "WARNING"
    configure_logging(log_level=level, json_output=args.log_json)

    try:
        config = load_config(args.config)
    except SystemExit as exc:
        return int(exc.code) if isinstance(exc.code, int) else EXIT_CONFIG_ERROR

    try:
        processor = new_processor(config, manifest_path=args.gomod)
    except ManifestError as exc:
        print(f"CONFIG ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    filenames = expand_files(args.files, include_tests=args.tests)
    logger.info("Files to lint", count=len(filenames))

    result = processor.process_files(filenames, workers=max(1, args.workers))

    if args.format == "json":
        print(json.dumps([d.to_dict() for d in result], indent=2))
    else:
        for diagnostic in result:
            print(diagnostic)

    return EXIT_VIOLATIONS if len(result) else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
