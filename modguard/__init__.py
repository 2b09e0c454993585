"""modguard — allow-list policy linter for Go module imports.

Packages:
    modguard.allowlist — blocked module computation and replacement rules
    modguard.manifest  — go.mod requirement reader
    modguard.scanner   — Go import parser and the import scanner
"""

__version__ = "1.0.0"
