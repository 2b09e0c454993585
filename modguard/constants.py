"""Shared constants for modguard.

File names, message templates and exit codes used across modules are defined
here. No literal messages in other modules — import from here.
"""

# ─── Well-known file names ───────────────────────────────────────────────────

# Dependency manifest, resolved relative to the invocation directory.
GO_MOD_FILE: str = "go.mod"

# Default config file name (searched in the working directory, then $HOME).
CONFIG_FILE_NAME: str = ".modguard.yaml"

# Go source suffixes. Test files are only linted on request (--tests).
GO_SOURCE_SUFFIX: str = ".go"
GO_TEST_SUFFIX: str = "_test.go"

# ─── Diagnostic message templates ────────────────────────────────────────────

# Base message for an import whose package path is prefixed by a blocked module.
BLOCKED_REASON: str = (
    'import of package "{package}" is blocked because the module is not in '
    "the allowed modules list."
)

# Appended (after a single space) when a replacement rule matches the package.
REPLACEMENT_SUGGESTION: str = "`{replacement}` should be used instead. reason: {reason}"

# Per-file failures: reported at line 0, never fatal to the batch.
READ_FAILURE_REASON: str = "unable to read file, file cannot be linted ({error})"
PARSE_FAILURE_REASON: str = "invalid syntax, file cannot be linted ({error})"

# ─── Process exit codes ──────────────────────────────────────────────────────

EXIT_OK: int = 0
EXIT_CONFIG_ERROR: int = 1
EXIT_VIOLATIONS: int = 2
