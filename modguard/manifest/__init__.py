"""modguard manifest — go.mod requirement reader.

Public API:
    read_manifest — read go.mod from disk (ManifestError on failure)
    parse_gomod   — parse go.mod text into Dependency objects
    ManifestError — fatal manifest read/parse failure
"""
from modguard.manifest.gomod import (
    GoModSyntaxError,
    ManifestError,
    parse_gomod,
    read_manifest,
)

__all__ = ["GoModSyntaxError", "ManifestError", "parse_gomod", "read_manifest"]
